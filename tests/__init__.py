"""
wordclass Test Suite

Run everything with pytest, or a single module as a script:
	python tests/test_entropy.py       # n·ln(n) table, cached and direct paths
	python tests/test_statistics.py    # unigram / bigram statistics
	python tests/test_state.py         # aggregates, remove / insert updates
	python tests/test_optimizer.py     # exchange algorithm, objective, determinism
	python tests/test_progress.py      # epoch lines, summaries, console / file logging
	python tests/test_pipeline.py      # corpus files, config, run_clustering, CLI
"""
