"""
Exception hierarchy for word class induction.

Every fatal condition raised by the library derives from WordClassError,
so callers (the CLI in particular) can catch a single type. Each concrete
class also derives from the builtin it refines, so generic handlers for
ValueError / OSError keep working.
"""


class WordClassError(Exception):
	"""Base class for all wordclass errors."""


class ConfigError(WordClassError, ValueError):
	"""Invalid run parameters (empty vocabulary, no clusters, ...)."""


class CorpusReadError(WordClassError, OSError):
	"""The token stream could not be opened, read or decoded."""


class CorpusError(WordClassError, ValueError):
	"""The token stream is structurally unusable (e.g. empty)."""


class VocabularyError(WordClassError, ValueError):
	"""A word or cluster identifier lies outside its declared range."""

	def __init__(self, message: str, value: int | None = None, position: int | None = None):
		super().__init__(message)
		self.value = value
		self.position = position
