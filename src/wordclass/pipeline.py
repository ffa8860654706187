"""
End-to-end clustering run: corpus file in, assignment file out.
"""

import json
import logging
from typing import Callable, Optional

from wordclass.config import ClusteringConfig
from wordclass.corpus import read_tokens, write_assignment
from wordclass.entropy import EntropyTable
from wordclass.optimizer import ExchangeOptimizer, ExchangeResult
from wordclass.state import ClusterState
from wordclass.statistics import CorpusStatistics

log = logging.getLogger(__name__)


def run_clustering(
	config: ClusteringConfig,
	logger: Optional[Callable[[str], None]] = None,
) -> ExchangeResult:
	"""
	Read the corpus, induce word classes, and write the assignment.

	All validation (config, file, word ids) happens before the first epoch;
	any failure aborts the run without writing an output file.

	Args:
		config: Run parameters
		logger: Callable receiving progress lines (default: print)

	Returns:
		ExchangeResult of the optimizer
	"""
	_log = logger or print
	config.validate()

	tokens = read_tokens(config.input_path)
	stats = CorpusStatistics.from_tokens(tokens, config.num_words)
	log.info("corpus %s: %s", config.input_path, stats.summary())

	state = ClusterState.initialize(stats, config.num_clusters, seed=config.seed)
	optimizer = ExchangeOptimizer(
		stats,
		state,
		entropy=EntropyTable(config.cache_size),
		num_epochs=config.num_epochs,
		workers=config.workers,
		logger=_log,
	)
	result = optimizer.optimize()
	tracker = optimizer.reporter.tracker
	tracker.log_summary()

	write_assignment(config.output_path, result.cluster_of)
	log.info("wrote %d cluster ids to %s", result.cluster_of.size, config.output_path)

	if config.history_path is not None:
		config.history_path.parent.mkdir(parents=True, exist_ok=True)
		payload = {
			"config": config.to_dict(),
			"corpus": stats.summary(),
			"summary": tracker.summary(),
			**result.to_dict(),
		}
		with open(config.history_path, "w") as f:
			json.dump(payload, f, indent=2)

	return result
