"""
Run configuration for word class induction.
"""

from dataclasses import dataclass, asdict, fields
from pathlib import Path
from typing import Any, Optional

from wordclass.entropy import DEFAULT_CACHE_SIZE
from wordclass.errors import ConfigError
from wordclass.state import DEFAULT_SEED


@dataclass
class ClusteringConfig:
	"""
	Parameters of one clustering run.

	Attributes:
		input_path: Corpus file (int32 word ids)
		output_path: Assignment file to write (int32 cluster ids)
		num_words: Vocabulary size; word ids must lie in [0, num_words)
		num_clusters: Number of word classes
		num_epochs: Maximum number of epochs
		seed: Seed for the initial random assignment
		workers: Threads scoring candidate clusters
		cache_size: Number of precomputed n·ln(n) values
		history_path: Optional JSON file receiving per-epoch statistics
	"""
	input_path: Path = Path("input.bin")
	output_path: Path = Path("output.bin")
	num_words: int = 0
	num_clusters: int = 128
	num_epochs: int = 100
	seed: int = DEFAULT_SEED
	workers: int = 1
	cache_size: int = DEFAULT_CACHE_SIZE
	history_path: Optional[Path] = None

	def __post_init__(self):
		self.input_path = Path(self.input_path)
		self.output_path = Path(self.output_path)
		if self.history_path is not None:
			self.history_path = Path(self.history_path)

	def validate(self) -> 'ClusteringConfig':
		"""
		Reject degenerate runs.

		Raises:
			ConfigError: On the first invalid parameter
		"""
		if self.num_words <= 0:
			raise ConfigError(
				f"num_words must be positive (got {self.num_words}); "
				"the vocabulary size is never inferred from the corpus"
			)
		if self.num_clusters <= 0:
			raise ConfigError(f"num_clusters must be positive, got {self.num_clusters}")
		if self.num_epochs < 0:
			raise ConfigError(f"num_epochs must be >= 0, got {self.num_epochs}")
		if self.workers < 1:
			raise ConfigError(f"workers must be >= 1, got {self.workers}")
		if self.cache_size < 1:
			raise ConfigError(f"cache_size must be >= 1, got {self.cache_size}")
		return self

	def to_dict(self) -> dict[str, Any]:
		"""Convert to dictionary for JSON serialization."""
		result = asdict(self)
		for key in ("input_path", "output_path", "history_path"):
			if result[key] is not None:
				result[key] = str(result[key])
		return result

	@classmethod
	def from_dict(cls, data: dict[str, Any]) -> 'ClusteringConfig':
		"""Create from dictionary, ignoring unknown keys."""
		known = {f.name for f in fields(cls)}
		return cls(**{k: v for k, v in data.items() if k in known})
