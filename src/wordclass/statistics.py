"""
Corpus statistics for class-based bigram clustering.

Everything the exchange algorithm needs from the corpus is collected in one
forward pass over the token stream:

	word_count[w]            occurrences of w (the final token included)
	self_successor_count[w]  how often w is immediately followed by itself
	successors(w)            {next_word: count} for every bigram (w, next_word)
	predecessors(w)          {prev_word} for every bigram (prev_word, w)

The adjacency is stored as compact index-addressed rows rather than one dict
per word. Successor row of w lives at

	succ_targets[succ_offsets[w]:succ_offsets[w + 1]]
	succ_counts [succ_offsets[w]:succ_offsets[w + 1]]

and the predecessor rows mirror it (pred_sources / pred_counts), where
pred_counts holds successors(p)[w] for each predecessor p of w. Both are
sorted by neighbor id.
"""

import logging

import numpy as np

from wordclass.errors import CorpusError, VocabularyError

log = logging.getLogger(__name__)


def _offsets(keys: np.ndarray, num_words: int) -> np.ndarray:
	"""Row offsets for entries sorted by `keys`."""
	offsets = np.zeros(num_words + 1, dtype=np.int64)
	np.cumsum(np.bincount(keys, minlength=num_words), out=offsets[1:])
	return offsets


class CorpusStatistics:
	"""
	Read-only unigram and bigram statistics of a token stream.

	Build with `CorpusStatistics.from_tokens(tokens, num_words)`.
	"""

	def __init__(
		self,
		num_words: int,
		num_tokens: int,
		word_count: np.ndarray,
		self_successor_count: np.ndarray,
		bigram_sources: np.ndarray,
		bigram_targets: np.ndarray,
		bigram_counts: np.ndarray,
	):
		"""
		Args:
			num_words: Vocabulary size
			num_tokens: Length of the token stream
			word_count: [num_words] occurrence counts
			self_successor_count: [num_words] self-loop counts
			bigram_sources, bigram_targets, bigram_counts: distinct bigrams
				sorted by (source, target), with their counts
		"""
		self.num_words = num_words
		self.num_tokens = num_tokens
		self.word_count = word_count
		self.self_successor_count = self_successor_count

		# Successor rows: bigrams are already sorted by (source, target)
		self.bigram_sources = bigram_sources
		self.succ_targets = bigram_targets
		self.succ_counts = bigram_counts
		self.succ_offsets = _offsets(bigram_sources, num_words)

		# Predecessor rows: same bigrams re-sorted by (target, source)
		order = np.lexsort((bigram_sources, bigram_targets))
		self.pred_sources = bigram_sources[order]
		self.pred_counts = bigram_counts[order]
		self.pred_offsets = _offsets(bigram_targets[order], num_words)

		for array in (
			self.word_count, self.self_successor_count, self.bigram_sources,
			self.succ_targets, self.succ_counts, self.succ_offsets,
			self.pred_sources, self.pred_counts, self.pred_offsets,
		):
			array.setflags(write=False)

	@classmethod
	def from_tokens(cls, tokens, num_words: int) -> 'CorpusStatistics':
		"""
		Collect statistics from a token stream.

		Args:
			tokens: Sequence (or array) of word ids, length >= 1
			num_words: Vocabulary size; every id must lie in [0, num_words)

		Raises:
			CorpusError: If the stream is empty
			VocabularyError: On the first out-of-range word id
		"""
		if num_words <= 0:
			raise VocabularyError(f"num_words must be positive, got {num_words}")

		tokens = np.asarray(tokens)
		if tokens.ndim != 1:
			tokens = tokens.reshape(-1)
		if tokens.size == 0:
			raise CorpusError("token stream is empty")
		if not np.issubdtype(tokens.dtype, np.integer):
			raise VocabularyError(f"word ids must be integers, got dtype {tokens.dtype}")
		tokens = tokens.astype(np.int64, copy=False)

		invalid = (tokens < 0) | (tokens >= num_words)
		if invalid.any():
			position = int(np.flatnonzero(invalid)[0])
			value = int(tokens[position])
			raise VocabularyError(
				f"word id {value} at position {position} is outside [0, {num_words})",
				value=value,
				position=position,
			)

		# Every token counts once, including the last one which starts no bigram
		word_count = np.bincount(tokens, minlength=num_words).astype(np.int64)

		first, second = tokens[:-1], tokens[1:]
		self_successor_count = np.bincount(
			first[first == second], minlength=num_words
		).astype(np.int64)

		# Distinct bigrams, encoded as first * num_words + second so that
		# np.unique sorts them by (first, second)
		codes, counts = np.unique(first * num_words + second, return_counts=True)
		bigram_sources = codes // num_words
		bigram_targets = codes % num_words

		log.debug(
			"collected %d tokens, %d distinct bigrams over %d words",
			tokens.size, codes.size, num_words,
		)

		return cls(
			num_words=num_words,
			num_tokens=int(tokens.size),
			word_count=word_count,
			self_successor_count=self_successor_count,
			bigram_sources=bigram_sources.astype(np.int64),
			bigram_targets=bigram_targets.astype(np.int64),
			bigram_counts=counts.astype(np.int64),
		)

	# -------------------------------------------------------------------------
	# Derived totals
	# -------------------------------------------------------------------------

	@property
	def num_bigrams(self) -> int:
		"""Number of adjacent pairs in the stream (num_tokens - 1)."""
		return self.num_tokens - 1

	@property
	def num_distinct_bigrams(self) -> int:
		return int(self.succ_targets.size)

	@property
	def observed_vocabulary(self) -> int:
		"""Number of word ids that actually occur in the stream."""
		return int(np.count_nonzero(self.word_count))

	# -------------------------------------------------------------------------
	# Adjacency
	# -------------------------------------------------------------------------

	def successor_row(self, word: int) -> tuple[np.ndarray, np.ndarray]:
		"""(following words, counts) for `word`, sorted by following word."""
		lo, hi = self.succ_offsets[word], self.succ_offsets[word + 1]
		return self.succ_targets[lo:hi], self.succ_counts[lo:hi]

	def predecessor_row(self, word: int) -> tuple[np.ndarray, np.ndarray]:
		"""(preceding words p, successors(p)[word]) for `word`, sorted by p."""
		lo, hi = self.pred_offsets[word], self.pred_offsets[word + 1]
		return self.pred_sources[lo:hi], self.pred_counts[lo:hi]

	def successors(self, word: int) -> dict[int, int]:
		"""Mapping following word -> bigram count."""
		targets, counts = self.successor_row(word)
		return {int(t): int(c) for t, c in zip(targets, counts)}

	def predecessors(self, word: int) -> set[int]:
		"""Words observed immediately before `word`."""
		sources, _ = self.predecessor_row(word)
		return {int(p) for p in sources}

	def summary(self) -> dict:
		"""Corpus-level counts for reporting."""
		return {
			"num_words": self.num_words,
			"tokens": self.num_tokens,
			"bigrams": self.num_bigrams,
			"distinct_bigrams": self.num_distinct_bigrams,
			"observed_vocabulary": self.observed_vocabulary,
			"self_loops": int(self.self_successor_count.sum()),
		}

	def __repr__(self) -> str:
		return (
			f"CorpusStatistics(num_words={self.num_words}, tokens={self.num_tokens}, "
			f"distinct_bigrams={self.num_distinct_bigrams})"
		)
