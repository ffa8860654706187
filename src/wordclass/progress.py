"""
Progress tracking for the exchange optimizer.

Records one EpochStats per epoch and logs it in a fixed format so runs can
be compared line by line.
"""

from dataclasses import dataclass, asdict
from typing import Callable, List, Optional


@dataclass
class EpochStats:
	"""Statistics for a single epoch."""
	epoch: int
	objective: float
	swaps: int
	seconds: float

	def to_dict(self) -> dict:
		return asdict(self)


class EpochTracker:
	"""
	Tracks per-epoch objective and swap counts.

	Usage:
		tracker = EpochTracker(logger=my_logger, total_epochs=100)
		for epoch in range(1, 101):
			...
			tracker.tick(epoch, objective, swaps, seconds)
		tracker.log_summary()

	The tracker logs lines like:
		3/100: -1523.402451, 17 swaps, 0.12 seconds
	"""

	def __init__(
		self,
		logger: Optional[Callable[[str], None]] = None,
		total_epochs: Optional[int] = None,
	):
		"""
		Args:
			logger: Callable that logs messages (e.g., Logger instance, print)
			total_epochs: Epoch budget, shown after the epoch index
		"""
		self._log = logger or print
		self._total = total_epochs
		self._history: List[EpochStats] = []
		self._converged = False

	def tick(
		self,
		epoch: int,
		objective: float,
		swaps: int,
		seconds: float,
	) -> EpochStats:
		"""Record one finished epoch."""
		stats = EpochStats(epoch=epoch, objective=objective, swaps=swaps, seconds=seconds)
		self._history.append(stats)
		self._log_tick(stats)
		return stats

	def _log_tick(self, stats: EpochStats) -> None:
		epoch_str = f"{stats.epoch}/{self._total}" if self._total is not None else f"{stats.epoch}"
		self._log(
			f"{epoch_str}: {stats.objective:f}, "
			f"{stats.swaps} swaps, {stats.seconds:.2f} seconds"
		)

	def mark_converged(self) -> None:
		self._converged = True

	@property
	def converged(self) -> bool:
		return self._converged

	@property
	def history(self) -> List[EpochStats]:
		return self._history.copy()

	@property
	def epochs_run(self) -> int:
		return len(self._history)

	def summary(self) -> dict:
		if not self._history:
			return {"epochs": 0, "converged": self._converged}

		first = self._history[0]
		last = self._history[-1]
		return {
			"epochs": len(self._history),
			"initial_objective": first.objective,
			"final_objective": last.objective,
			"total_swaps": sum(s.swaps for s in self._history),
			"total_seconds": sum(s.seconds for s in self._history),
			"converged": self._converged,
		}

	def log_summary(self) -> None:
		s = self.summary()
		if s["epochs"] == 0:
			self._log("No epochs completed")
			return

		self._log("Summary:")
		self._log(f"  Epochs: {s['epochs']}")
		self._log(f"  Initial objective: {s['initial_objective']:f}")
		self._log(f"  Final objective: {s['final_objective']:f}")
		self._log(f"  Total swaps: {s['total_swaps']}")
		self._log(f"  Converged: {s['converged']}")
