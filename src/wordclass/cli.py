#!/usr/bin/env python3
"""
Word class induction CLI (wordclass)

Usage:
    wordclass run -i corpus.bin -o classes.bin -w VOCAB [-c 128] [-e 100] [--seed 42] [--workers N]
    wordclass stats -i corpus.bin -w VOCAB
    wordclass show classes.bin [--top 20]
"""

from pathlib import Path
from typing import Optional

import numpy as np
import typer
from rich import print as rprint
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from wordclass.config import ClusteringConfig
from wordclass.corpus import read_assignment, read_tokens
from wordclass.entropy import DEFAULT_CACHE_SIZE
from wordclass.errors import WordClassError
from wordclass.logger import Logger
from wordclass.optimizer import FIXED_POINT_MESSAGE, MAX_EPOCHS_MESSAGE
from wordclass.pipeline import run_clustering
from wordclass.state import DEFAULT_SEED
from wordclass.statistics import CorpusStatistics

app = typer.Typer(
	name="wordclass",
	help="Induce word classes from a bigram stream with the exchange algorithm",
	no_args_is_help=True,
)

console = Console()


def fail(error: Exception) -> None:
	"""Print a fatal error and exit with status 1."""
	rprint(f"[red]Error: {escape(str(error))}[/red]")
	raise typer.Exit(code=1)


@app.command("run")
def run(
	input_path: Path = typer.Option(Path("input.bin"), "--input", "-i", help="Corpus file (int32 word ids)"),
	output_path: Path = typer.Option(Path("output.bin"), "--output", "-o", help="Assignment file to write"),
	num_words: int = typer.Option(0, "--words", "-w", help="Vocabulary size (required)"),
	num_clusters: int = typer.Option(128, "--clusters", "-c", help="Number of classes"),
	num_epochs: int = typer.Option(100, "--epochs", "-e", help="Maximum number of epochs"),
	seed: int = typer.Option(DEFAULT_SEED, "--seed", help="Seed of the initial assignment"),
	workers: int = typer.Option(1, "--workers", "-j", help="Threads scoring candidate clusters"),
	cache_size: int = typer.Option(DEFAULT_CACHE_SIZE, "--cache-size", help="Precomputed n·ln(n) values"),
	history_path: Optional[Path] = typer.Option(None, "--history", help="Write per-epoch stats as JSON"),
	log_dir: Optional[Path] = typer.Option(None, "--log-dir", help="Also log to <dir>/YYYY/MM/DD/"),
	quiet: bool = typer.Option(False, "--quiet", "-q", help="Only print the terminal message"),
):
	"""Cluster the vocabulary and write one class id per word."""
	config = ClusteringConfig(
		input_path=input_path,
		output_path=output_path,
		num_words=num_words,
		num_clusters=num_clusters,
		num_epochs=num_epochs,
		seed=seed,
		workers=workers,
		cache_size=cache_size,
		history_path=history_path,
	)
	logger = Logger(
		"clustering",
		log_dir=str(log_dir) if log_dir is not None else None,
		console=not quiet,
	)
	logger.header(f"Clustering {input_path} into {num_clusters} classes")
	try:
		result = run_clustering(config, logger=logger)
	except WordClassError as e:
		logger.log(f"Aborted: {e}", file_only=True)
		fail(e)
	finally:
		logger.close()

	if quiet:
		rprint(FIXED_POINT_MESSAGE if result.converged else MAX_EPOCHS_MESSAGE)


@app.command("stats")
def stats(
	input_path: Path = typer.Option(Path("input.bin"), "--input", "-i", help="Corpus file (int32 word ids)"),
	num_words: int = typer.Option(0, "--words", "-w", help="Vocabulary size (required)"),
):
	"""Show unigram and bigram totals of a corpus."""
	try:
		config = ClusteringConfig(input_path=input_path, num_words=num_words).validate()
		corpus = CorpusStatistics.from_tokens(read_tokens(config.input_path), config.num_words)
	except WordClassError as e:
		fail(e)

	table = Table(title=str(input_path))
	table.add_column("Statistic", style="cyan")
	table.add_column("Value", justify="right")
	for key, value in corpus.summary().items():
		table.add_row(key.replace("_", " "), f"{value:,}")
	console.print(table)


@app.command("show")
def show(
	assignment_path: Path = typer.Argument(..., help="Assignment file written by 'run'"),
	top: int = typer.Option(20, "--top", "-n", help="Number of largest classes to list"),
):
	"""Show class sizes of an assignment file."""
	try:
		cluster_of = read_assignment(assignment_path)
	except WordClassError as e:
		fail(e)

	if cluster_of.size == 0:
		rprint("[dim]Empty assignment.[/dim]")
		return
	if cluster_of.min() < 0:
		fail(WordClassError(f"negative class id in {assignment_path}"))

	classes, sizes = np.unique(cluster_of, return_counts=True)
	order = np.argsort(-sizes, kind="stable")

	table = Table(title=f"{assignment_path} ({cluster_of.size:,} words, {classes.size} classes used)")
	table.add_column("Class", style="cyan", justify="right")
	table.add_column("Words", justify="right")
	table.add_column("Sample", style="dim")
	for i in order[:top]:
		members = np.flatnonzero(cluster_of == classes[i])[:8]
		table.add_row(str(classes[i]), str(sizes[i]), " ".join(str(w) for w in members))
	console.print(table)


if __name__ == "__main__":
	app()
