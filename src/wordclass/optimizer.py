"""
Exchange algorithm for class-based bigram clustering.

Each epoch visits every word in ascending id order and moves it to the
cluster that maximizes the global objective (see wordclass.objective),
holding all other assignments fixed:

	1. gather the word's bigram mass per neighbor cluster (pred / succ)
	2. remove the word from its cluster
	3. score every candidate cluster k by the exact change in J from
	   inserting the word into k
	4. pick the best candidate (lowest index on ties)
	5. insert the word there

Step 3 only reads shared state and writes one score per candidate, so the
candidates can be split across a thread pool. numpy releases the GIL inside
the array kernels, which is where the scoring time goes. Steps 1, 2, 4 and 5
mutate the aggregates and always run on the calling thread, one word at a
time.

The run stops after an epoch without swaps (a fixed point) or when the epoch
budget is exhausted. For a fixed seed and corpus the result does not depend
on the number of workers.
"""

import logging
import time
from concurrent.futures import Executor, ThreadPoolExecutor
from contextlib import nullcontext
from dataclasses import dataclass, field
from typing import Callable, List, Optional

import numpy as np

from wordclass.entropy import EntropyTable
from wordclass.errors import ConfigError
from wordclass.objective import ObjectiveReporter
from wordclass.progress import EpochStats
from wordclass.state import ClusterState
from wordclass.statistics import CorpusStatistics

log = logging.getLogger(__name__)

MAX_EPOCHS_MESSAGE = "Maximal number of epochs reached"
FIXED_POINT_MESSAGE = "No more swap can be applied"


@dataclass
class ExchangeResult:
	"""Outcome of an optimize() call."""
	cluster_of: np.ndarray
	epochs_run: int
	converged: bool
	objective: Optional[float]
	history: List[EpochStats] = field(default_factory=list)

	@property
	def total_swaps(self) -> int:
		return sum(s.swaps for s in self.history)

	def to_dict(self) -> dict:
		"""JSON-safe summary (without the assignment itself)."""
		return {
			"epochs_run": self.epochs_run,
			"converged": self.converged,
			"objective": self.objective,
			"total_swaps": self.total_swaps,
			"history": [s.to_dict() for s in self.history],
		}


class ExchangeOptimizer:
	"""
	Greedy word-by-word cluster reassignment.

	Owns the ClusterState for the duration of the run; the CorpusStatistics
	and EntropyTable are shared read-only.

	Usage:
		stats = CorpusStatistics.from_tokens(tokens, num_words)
		state = ClusterState.initialize(stats, num_clusters=128, seed=42)
		optimizer = ExchangeOptimizer(stats, state, num_epochs=100, workers=4)
		result = optimizer.optimize()
	"""

	def __init__(
		self,
		stats: CorpusStatistics,
		state: ClusterState,
		entropy: Optional[EntropyTable] = None,
		num_epochs: int = 100,
		workers: int = 1,
		logger: Optional[Callable[[str], None]] = None,
	):
		"""
		Args:
			stats: Corpus statistics (read-only)
			state: Initial cluster state, mutated in place
			entropy: Shared n·ln(n) table (default: a fresh EntropyTable)
			num_epochs: Maximum number of epochs
			workers: Threads used to score candidate clusters (1 = inline)
			logger: Callable receiving progress lines (default: print)
		"""
		if num_epochs < 0:
			raise ConfigError(f"num_epochs must be >= 0, got {num_epochs}")
		if workers < 1:
			raise ConfigError(f"workers must be >= 1, got {workers}")
		if state.num_words != stats.num_words:
			raise ConfigError(
				f"state covers {state.num_words} words, statistics cover {stats.num_words}"
			)

		self.stats = stats
		self.state = state
		self.entropy = entropy or EntropyTable()
		self.num_epochs = num_epochs
		self.workers = workers
		self._log = logger or print
		self.reporter = ObjectiveReporter(
			stats, self.entropy, logger=self._log, total_epochs=num_epochs,
		)

		num_clusters = state.num_clusters
		self._scores = np.empty(num_clusters, dtype=np.float64)
		# Disjoint candidate ranges, one per worker
		n_chunks = min(workers, num_clusters)
		bounds = np.linspace(0, num_clusters, n_chunks + 1).astype(int)
		self._chunks = [(int(lo), int(hi)) for lo, hi in zip(bounds[:-1], bounds[1:])]

	# -------------------------------------------------------------------------
	# Scoring
	# -------------------------------------------------------------------------

	def _score_range(
		self,
		lo: int,
		hi: int,
		pred: np.ndarray,
		succ: np.ndarray,
		count: int,
		loops: int,
		out: np.ndarray,
	) -> None:
		"""
		Write the objective change of inserting the removed word into each
		cluster k in [lo, hi) to out[lo:hi].
		"""
		H = self.entropy.eval_array
		binary = self.state.binary_count
		unary = self.state.unary_count
		candidates = np.arange(lo, hi)
		rows = np.arange(hi - lo)

		# into[i, c] = binary[c, k], out_of[i, c] = binary[k, c] for k = lo + i
		into = np.ascontiguousarray(binary[:, lo:hi].T)
		out_of = binary[lo:hi, :]
		gain = H(into + pred) - H(into) + H(out_of + succ) - H(out_of)
		# The diagonal is scored separately below
		gain[rows, candidates] = 0.0
		score = gain.sum(axis=1)

		u = unary[lo:hi]
		score -= 2 * H(u + count)
		score += 2 * H(u)

		diagonal = binary[candidates, candidates]
		score += H(diagonal + succ[lo:hi] + pred[lo:hi] + loops)
		score -= H(diagonal)

		out[lo:hi] = score

	def score_candidates(
		self,
		word: int,
		pred: np.ndarray,
		succ: np.ndarray,
		executor: Optional[Executor] = None,
	) -> np.ndarray:
		"""
		Score every cluster for a word that has already been removed.

		Returns:
			[num_clusters] objective change per candidate cluster
		"""
		count = int(self.stats.word_count[word])
		loops = int(self.stats.self_successor_count[word])
		scores = self._scores

		if executor is None or len(self._chunks) == 1:
			self._score_range(0, self.state.num_clusters, pred, succ, count, loops, scores)
		else:
			futures = [
				executor.submit(self._score_range, lo, hi, pred, succ, count, loops, scores)
				for lo, hi in self._chunks
			]
			# Join before anyone reads the scores
			for future in futures:
				future.result()
		return scores

	# -------------------------------------------------------------------------
	# Reassignment
	# -------------------------------------------------------------------------

	def reassign(self, word: int, executor: Optional[Executor] = None) -> bool:
		"""
		Move `word` to its best cluster.

		Returns:
			True if the word changed cluster
		"""
		pred, succ = self.state.neighbor_profile(self.stats, word)
		old = self.state.remove(self.stats, word, pred, succ)
		scores = self.score_candidates(word, pred, succ, executor)
		# np.argmax returns the first maximum, i.e. the lowest cluster id
		assigned = int(np.argmax(scores))
		self.state.insert(self.stats, word, assigned, pred, succ)
		return assigned != old

	def run_epoch(self, executor: Optional[Executor] = None) -> int:
		"""Reconsider every word once, in ascending id order. Returns the swap count."""
		swaps = 0
		for word in range(self.stats.num_words):
			if self.reassign(word, executor):
				swaps += 1
		return swaps

	def _executor(self):
		if len(self._chunks) > 1:
			return ThreadPoolExecutor(max_workers=len(self._chunks))
		return nullcontext(None)

	def optimize(self) -> ExchangeResult:
		"""
		Run epochs until a fixed point or the epoch budget is exhausted.

		Returns:
			ExchangeResult with the final assignment and per-epoch history
		"""
		tracker = self.reporter.tracker
		log.debug(
			"optimizing %d words into %d clusters (%d epochs, %d workers)",
			self.stats.num_words, self.state.num_clusters, self.num_epochs, len(self._chunks),
		)

		with self._executor() as executor:
			epoch = 0
			while True:
				epoch += 1
				if epoch > self.num_epochs:
					self._log(MAX_EPOCHS_MESSAGE)
					break

				start = time.perf_counter()
				swaps = self.run_epoch(executor)
				self.reporter.report(epoch, self.state, swaps, time.perf_counter() - start)

				if swaps == 0:
					tracker.mark_converged()
					self._log(FIXED_POINT_MESSAGE)
					break

		history = tracker.history
		return ExchangeResult(
			cluster_of=self.state.cluster_of.copy(),
			epochs_run=tracker.epochs_run,
			converged=tracker.converged,
			objective=history[-1].objective if history else None,
			history=history,
		)
