"""
Global clustering objective.

	J = sum_w H(word_count[w]) - 2 * sum_c H(unary_count[c])
	    + sum_{c1,c2} H(binary_count[c1, c2])

with H(n) = n·ln(n), summed over strictly positive counts. Up to terms that do
not depend on the assignment, J is the class-bigram log-likelihood of the
corpus, so the exchange algorithm maximizes it. Each single-word move is
chosen to never decrease J, hence per-epoch values are non-decreasing.
"""

from typing import Callable, Optional

import numpy as np

from wordclass.entropy import EntropyTable
from wordclass.progress import EpochStats, EpochTracker
from wordclass.state import ClusterState
from wordclass.statistics import CorpusStatistics


def _positive_entropy(entropy: EntropyTable, counts: np.ndarray) -> float:
	positive = counts[counts > 0]
	return float(entropy.eval_array(positive).sum())


class ObjectiveReporter:
	"""
	Computes J for a ClusterState and reports it once per epoch.

	The word term depends on the corpus only and is computed once.
	"""

	def __init__(
		self,
		stats: CorpusStatistics,
		entropy: EntropyTable,
		logger: Optional[Callable[[str], None]] = None,
		total_epochs: Optional[int] = None,
	):
		self._entropy = entropy
		self._word_term = _positive_entropy(entropy, stats.word_count)
		self.tracker = EpochTracker(logger=logger, total_epochs=total_epochs)

	def objective(self, state: ClusterState) -> float:
		"""Current value of J."""
		return (
			self._word_term
			- 2 * _positive_entropy(self._entropy, state.unary_count)
			+ _positive_entropy(self._entropy, state.binary_count)
		)

	def report(self, epoch: int, state: ClusterState, swaps: int, seconds: float) -> EpochStats:
		"""Compute J for the finished epoch and log the progress line."""
		return self.tracker.tick(epoch, self.objective(state), swaps, seconds)
