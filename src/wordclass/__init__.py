"""wordclass - class-based bigram word clustering (exchange algorithm)."""

from wordclass.config import ClusteringConfig
from wordclass.entropy import EntropyTable
from wordclass.errors import (
	WordClassError,
	ConfigError,
	CorpusError,
	CorpusReadError,
	VocabularyError,
)
from wordclass.logger import Logger
from wordclass.objective import ObjectiveReporter
from wordclass.optimizer import ExchangeOptimizer, ExchangeResult
from wordclass.pipeline import run_clustering
from wordclass.progress import EpochStats, EpochTracker
from wordclass.state import ClusterState
from wordclass.statistics import CorpusStatistics

__all__ = [
	'ClusteringConfig',
	'EntropyTable',
	'WordClassError', 'ConfigError', 'CorpusError', 'CorpusReadError', 'VocabularyError',
	'Logger',
	'ObjectiveReporter',
	'ExchangeOptimizer', 'ExchangeResult',
	'run_clustering',
	'EpochStats', 'EpochTracker',
	'ClusterState',
	'CorpusStatistics',
]
