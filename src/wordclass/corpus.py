"""
Binary corpus and assignment files.

Both formats are headerless runs of little-endian signed 32-bit integers:

	corpus      word ids in stream order; consecutive ids form the bigrams
	assignment  one cluster id per word, in increasing word id order
"""

import logging
from pathlib import Path
from typing import Optional

import numpy as np

from wordclass.errors import CorpusReadError, VocabularyError

log = logging.getLogger(__name__)

INT32 = np.dtype('<i4')


def _read_int32(path: str | Path, what: str) -> np.ndarray:
	path = Path(path)
	try:
		size = path.stat().st_size
		if size % INT32.itemsize:
			raise CorpusReadError(
				f"{what} file {path} has {size} bytes, not a multiple of {INT32.itemsize}"
			)
		values = np.fromfile(path, dtype=INT32)
	except CorpusReadError:
		raise
	except OSError as e:
		raise CorpusReadError(f"cannot read {what} file {path}: {e}") from e
	log.debug("read %d values from %s", values.size, path)
	return values


def _write_int32(path: str | Path, values) -> None:
	path = Path(path)
	values = np.asarray(values)
	if values.size and (values.min() < np.iinfo(INT32).min or values.max() > np.iinfo(INT32).max):
		raise VocabularyError(f"values do not fit in 32 bits for {path}")
	path.parent.mkdir(parents=True, exist_ok=True)
	values.astype(INT32).tofile(path)


def read_tokens(path: str | Path) -> np.ndarray:
	"""
	Read a corpus file.

	Raises:
		CorpusReadError: If the file is missing, unreadable, truncated
			mid-integer, or empty
	"""
	tokens = _read_int32(path, "corpus")
	if tokens.size == 0:
		raise CorpusReadError(f"corpus file {path} is empty")
	return tokens


def write_tokens(path: str | Path, tokens) -> None:
	"""Write a token stream in corpus format."""
	_write_int32(path, tokens)


def write_assignment(path: str | Path, cluster_of) -> None:
	"""Write one cluster id per word, in word id order."""
	_write_int32(path, cluster_of)


def read_assignment(path: str | Path, num_words: Optional[int] = None) -> np.ndarray:
	"""
	Read an assignment file.

	Args:
		path: File written by write_assignment()
		num_words: Expected vocabulary size, checked when given
	"""
	cluster_of = _read_int32(path, "assignment")
	if num_words is not None and cluster_of.size != num_words:
		raise VocabularyError(
			f"assignment file {path} covers {cluster_of.size} words, expected {num_words}"
		)
	return cluster_of
