"""
Cached evaluation of n·ln(n).

Every score in the exchange algorithm is a sum of n·ln(n) terms over
integer counts. Small counts dominate real corpora, so the first
`cache_size` values are precomputed once; larger counts fall back to
direct evaluation. Both paths use float64 and produce the same value.
"""

import numpy as np

DEFAULT_CACHE_SIZE = 10000


class EntropyTable:
	"""
	Partially precomputed x·ln(x) for non-negative integers.

	Usage:
		entropy = EntropyTable()
		entropy(3)                        # 3 * ln(3)
		entropy(np.array([0, 1, 20000]))  # element-wise, same semantics

	The table is immutable after construction and safe to share between
	threads.
	"""

	def __init__(self, cache_size: int = DEFAULT_CACHE_SIZE):
		if cache_size < 1:
			raise ValueError(f"cache_size must be >= 1, got {cache_size}")
		self._size = cache_size
		n = np.arange(cache_size, dtype=np.float64)
		cache = np.zeros(cache_size, dtype=np.float64)
		cache[1:] = n[1:] * np.log(n[1:])
		cache.setflags(write=False)
		self._cache = cache

	@property
	def cache_size(self) -> int:
		return self._size

	@staticmethod
	def direct(n):
		"""Uncached n·ln(n), 0 for n == 0. Accepts scalars or arrays."""
		if np.isscalar(n):
			return float(n * np.log(n)) if n > 0 else 0.0
		values = np.asarray(n, dtype=np.float64)
		out = np.zeros_like(values)
		positive = values > 0
		out[positive] = values[positive] * np.log(values[positive])
		return out

	def eval(self, n: int) -> float:
		"""n·ln(n) for a single non-negative integer."""
		if n < 0:
			raise ValueError(f"entropy is undefined for negative counts, got {n}")
		if n < self._size:
			return float(self._cache[n])
		return float(n * np.log(n))

	def eval_array(self, counts: np.ndarray) -> np.ndarray:
		"""Element-wise n·ln(n) over an integer array of non-negative counts."""
		counts = np.asarray(counts)
		if counts.size == 0:
			return np.zeros(counts.shape, dtype=np.float64)
		if (counts < 0).any():
			raise ValueError(f"entropy is undefined for negative counts, got {int(counts.min())}")
		cached = counts < self._size
		if cached.all():
			return self._cache[counts]
		out = np.empty(counts.shape, dtype=np.float64)
		out[cached] = self._cache[counts[cached]]
		large = counts[~cached].astype(np.float64)
		out[~cached] = large * np.log(large)
		return out

	def __call__(self, n):
		if isinstance(n, np.ndarray):
			return self.eval_array(n)
		return self.eval(int(n))

	def __len__(self) -> int:
		return self._size

	def __repr__(self) -> str:
		return f"EntropyTable(cache_size={self._size})"
