"""
Cluster assignment plus the aggregate counts derived from it.

	cluster_of[w]        current cluster of word w
	unary_count[c]       sum of word_count[w] over the words of c
	binary_count[c1, c2] sum of bigram counts (w1, w2) with w1 in c1, w2 in c2

The counts are maintained incrementally: removing a word from its cluster and
inserting it into another touches one row and one column of binary_count plus
a single unary entry. Before and after every remove/insert pair the totals are
conserved (sum(unary_count) == sum(word_count) and sum(binary_count) == number
of bigrams).
"""

import logging
from typing import Optional

import numpy as np

from wordclass.errors import ConfigError, VocabularyError
from wordclass.statistics import CorpusStatistics

log = logging.getLogger(__name__)

DEFAULT_SEED = 42


class ClusterState:
	"""
	Mutable word -> cluster assignment with its unary / binary aggregates.

	Usage:
		state = ClusterState.initialize(stats, num_clusters=128, seed=42)
		pred, succ = state.neighbor_profile(stats, word)
		old = state.remove(stats, word, pred, succ)
		state.insert(stats, word, new_cluster, pred, succ)
	"""

	def __init__(
		self,
		cluster_of: np.ndarray,
		unary_count: np.ndarray,
		binary_count: np.ndarray,
	):
		self.cluster_of = cluster_of
		self.unary_count = unary_count
		self.binary_count = binary_count

	@property
	def num_clusters(self) -> int:
		return int(self.unary_count.size)

	@property
	def num_words(self) -> int:
		return int(self.cluster_of.size)

	# -------------------------------------------------------------------------
	# Construction
	# -------------------------------------------------------------------------

	@classmethod
	def initialize(
		cls,
		stats: CorpusStatistics,
		num_clusters: int,
		seed: int = DEFAULT_SEED,
	) -> 'ClusterState':
		"""
		Assign every word to a uniformly random cluster and aggregate counts.

		Args:
			stats: Corpus statistics
			num_clusters: Number of clusters
			seed: Seed of the numpy Generator drawing the assignment

		Returns:
			Fully aggregated ClusterState
		"""
		if num_clusters <= 0:
			raise ConfigError(f"num_clusters must be positive, got {num_clusters}")
		rng = np.random.default_rng(seed)
		cluster_of = rng.integers(0, num_clusters, size=stats.num_words, dtype=np.int64)
		return cls.from_assignment(stats, cluster_of, num_clusters)

	@classmethod
	def from_assignment(
		cls,
		stats: CorpusStatistics,
		cluster_of,
		num_clusters: int,
	) -> 'ClusterState':
		"""
		Build the aggregates for an explicit assignment.

		Raises:
			VocabularyError: If the assignment has the wrong length or holds a
				cluster id outside [0, num_clusters)
		"""
		if num_clusters <= 0:
			raise ConfigError(f"num_clusters must be positive, got {num_clusters}")
		cluster_of = np.array(cluster_of, dtype=np.int64).reshape(-1)
		if cluster_of.size != stats.num_words:
			raise VocabularyError(
				f"assignment covers {cluster_of.size} words, expected {stats.num_words}"
			)
		invalid = (cluster_of < 0) | (cluster_of >= num_clusters)
		if invalid.any():
			word = int(np.flatnonzero(invalid)[0])
			raise VocabularyError(
				f"cluster {int(cluster_of[word])} of word {word} is outside [0, {num_clusters})",
				value=int(cluster_of[word]),
				position=word,
			)

		unary_count = np.zeros(num_clusters, dtype=np.int64)
		np.add.at(unary_count, cluster_of, stats.word_count)

		binary_count = np.zeros((num_clusters, num_clusters), dtype=np.int64)
		np.add.at(
			binary_count,
			(cluster_of[stats.bigram_sources], cluster_of[stats.succ_targets]),
			stats.succ_counts,
		)

		log.debug("aggregated %d words into %d clusters", stats.num_words, num_clusters)
		return cls(cluster_of, unary_count, binary_count)

	def copy(self) -> 'ClusterState':
		return ClusterState(
			self.cluster_of.copy(),
			self.unary_count.copy(),
			self.binary_count.copy(),
		)

	# -------------------------------------------------------------------------
	# Incremental maintenance
	# -------------------------------------------------------------------------

	def neighbor_profile(
		self,
		stats: CorpusStatistics,
		word: int,
	) -> tuple[np.ndarray, np.ndarray]:
		"""
		Bigram mass between `word` and each cluster.

		Returns:
			pred: [num_clusters] pred[c] = sum of successors(p)[word] over
				predecessors p of word currently in cluster c
			succ: [num_clusters] succ[c] = sum of successors(word)[w2] over
				w2 currently in cluster c
		"""
		num_clusters = self.num_clusters
		sources, pred_counts = stats.predecessor_row(word)
		targets, succ_counts = stats.successor_row(word)
		pred = np.zeros(num_clusters, dtype=np.int64)
		succ = np.zeros(num_clusters, dtype=np.int64)
		np.add.at(pred, self.cluster_of[sources], pred_counts)
		np.add.at(succ, self.cluster_of[targets], succ_counts)
		return pred, succ

	def remove(
		self,
		stats: CorpusStatistics,
		word: int,
		pred: np.ndarray,
		succ: np.ndarray,
	) -> int:
		"""
		Take `word` out of its cluster.

		`pred` and `succ` must come from neighbor_profile() for this word and
		the current assignment. On return their entries for the old cluster no
		longer include the word's self-loops, which is the form both the
		candidate scoring and insert() expect.

		Returns:
			The cluster the word was removed from
		"""
		old = int(self.cluster_of[word])
		loops = int(stats.self_successor_count[word])

		self.binary_count[:, old] -= pred
		self.binary_count[old, :] -= succ
		# The two lines above took pred[old] + succ[old] off the diagonal,
		# which counts the word's self-loops twice
		self.binary_count[old, old] += loops
		self.unary_count[old] -= stats.word_count[word]

		pred[old] -= loops
		succ[old] -= loops
		return old

	def insert(
		self,
		stats: CorpusStatistics,
		word: int,
		cluster: int,
		pred: np.ndarray,
		succ: np.ndarray,
	) -> None:
		"""Put a removed `word` into `cluster` (inverse of remove())."""
		self.binary_count[:, cluster] += pred
		self.binary_count[cluster, :] += succ
		self.binary_count[cluster, cluster] += stats.self_successor_count[word]
		self.unary_count[cluster] += stats.word_count[word]
		self.cluster_of[word] = cluster

	# -------------------------------------------------------------------------
	# Inspection
	# -------------------------------------------------------------------------

	def cluster_sizes(self) -> np.ndarray:
		"""Number of words per cluster."""
		return np.bincount(self.cluster_of, minlength=self.num_clusters)

	def verify(self, stats: Optional[CorpusStatistics] = None) -> None:
		"""
		Check range and conservation invariants.

		With `stats`, the aggregates are also recomputed from scratch and
		compared entry by entry.

		Raises:
			RuntimeError: If any invariant is violated
		"""
		if self.cluster_of.size and (
			self.cluster_of.min() < 0 or self.cluster_of.max() >= self.num_clusters
		):
			raise RuntimeError("cluster assignment out of range")
		if (self.unary_count < 0).any() or (self.binary_count < 0).any():
			raise RuntimeError("negative aggregate count")
		if stats is None:
			return

		if int(self.unary_count.sum()) != int(stats.word_count.sum()):
			raise RuntimeError(
				f"unary total {int(self.unary_count.sum())} != "
				f"word total {int(stats.word_count.sum())}"
			)
		if int(self.binary_count.sum()) != stats.num_bigrams:
			raise RuntimeError(
				f"binary total {int(self.binary_count.sum())} != "
				f"bigram total {stats.num_bigrams}"
			)
		fresh = ClusterState.from_assignment(stats, self.cluster_of, self.num_clusters)
		if not np.array_equal(fresh.unary_count, self.unary_count):
			raise RuntimeError("unary counts drifted from the assignment")
		if not np.array_equal(fresh.binary_count, self.binary_count):
			raise RuntimeError("binary counts drifted from the assignment")

	def __repr__(self) -> str:
		return f"ClusterState(num_words={self.num_words}, num_clusters={self.num_clusters})"
