#!/usr/bin/env python3
"""
End-to-end tests: corpus files, configuration, run_clustering and the CLI.

Run with:
    python tests/test_pipeline.py
"""

import json
import sys
import tempfile
from pathlib import Path

import numpy as np
import pytest
from typer.testing import CliRunner

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from wordclass.cli import app
from wordclass.config import ClusteringConfig
from wordclass.corpus import read_assignment, read_tokens, write_assignment, write_tokens
from wordclass.errors import ConfigError, CorpusReadError, VocabularyError
from wordclass.optimizer import FIXED_POINT_MESSAGE, MAX_EPOCHS_MESSAGE
from wordclass.pipeline import run_clustering

runner = CliRunner()


def sample_tokens(num_words: int = 20, length: int = 2000, seed: int = 0) -> np.ndarray:
    rng = np.random.default_rng(seed)
    tokens = np.empty(length, dtype=np.int64)
    tokens[0] = 0
    for i in range(1, length):
        # Even words tend to be followed by odd ones and vice versa
        parity = 1 - tokens[i - 1] % 2 if rng.random() < 0.9 else rng.integers(2)
        tokens[i] = 2 * rng.integers(num_words // 2) + parity
    return tokens


# =============================================================================
# Corpus files
# =============================================================================

def test_token_file_layout():
    """Corpus files are headerless little-endian int32."""
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "corpus.bin"
        write_tokens(path, [1, 2, 300])
        assert path.read_bytes() == (
            b"\x01\x00\x00\x00" b"\x02\x00\x00\x00" b"\x2c\x01\x00\x00"
        )
        assert read_tokens(path).tolist() == [1, 2, 300]


def test_assignment_file():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "out" / "classes.bin"
        write_assignment(path, np.array([3, 0, 1]))
        assert path.stat().st_size == 12
        assert read_assignment(path, num_words=3).tolist() == [3, 0, 1]
        with pytest.raises(VocabularyError):
            read_assignment(path, num_words=4)


def test_unreadable_corpus():
    with tempfile.TemporaryDirectory() as tmpdir:
        tmpdir = Path(tmpdir)
        with pytest.raises(CorpusReadError):
            read_tokens(tmpdir / "missing.bin")

        empty = tmpdir / "empty.bin"
        empty.write_bytes(b"")
        with pytest.raises(CorpusReadError):
            read_tokens(empty)

        truncated = tmpdir / "truncated.bin"
        truncated.write_bytes(b"\x01\x00\x00\x00\x02")
        with pytest.raises(CorpusReadError):
            read_tokens(truncated)


# =============================================================================
# Configuration
# =============================================================================

def test_config_validation():
    with pytest.raises(ConfigError):
        ClusteringConfig(num_words=0).validate()
    with pytest.raises(ConfigError):
        ClusteringConfig(num_words=10, num_clusters=0).validate()
    with pytest.raises(ConfigError):
        ClusteringConfig(num_words=10, num_epochs=-1).validate()
    with pytest.raises(ConfigError):
        ClusteringConfig(num_words=10, workers=0).validate()
    assert ClusteringConfig(num_words=10).validate().num_clusters == 128


def test_config_round_trip():
    config = ClusteringConfig(input_path="a.bin", num_words=7, seed=3, history_path="h.json")
    data = config.to_dict()
    assert data["input_path"] == "a.bin"
    assert data["history_path"] == "h.json"
    json.dumps(data)

    restored = ClusteringConfig.from_dict({**data, "unknown": 1})
    assert restored == config
    assert isinstance(restored.input_path, Path)


# =============================================================================
# run_clustering
# =============================================================================

def test_run_writes_assignment():
    with tempfile.TemporaryDirectory() as tmpdir:
        tmpdir = Path(tmpdir)
        write_tokens(tmpdir / "input.bin", sample_tokens())
        config = ClusteringConfig(
            input_path=tmpdir / "input.bin",
            output_path=tmpdir / "output.bin",
            num_words=20,
            num_clusters=4,
            num_epochs=20,
            history_path=tmpdir / "history.json",
        )
        lines = []
        result = run_clustering(config, logger=lines.append)

        assignment = read_assignment(config.output_path, num_words=20)
        assert np.array_equal(assignment, result.cluster_of)
        assert assignment.min() >= 0 and assignment.max() < 4
        # One line per epoch, the terminal message, then the summary block
        assert lines[result.epochs_run] in (FIXED_POINT_MESSAGE, MAX_EPOCHS_MESSAGE)
        assert lines[result.epochs_run + 1] == "Summary:"
        assert lines[-1] == f"  Converged: {result.converged}"
        assert len(lines) == result.epochs_run + 7

        history = json.loads(config.history_path.read_text())
        assert history["epochs_run"] == result.epochs_run
        assert history["corpus"]["tokens"] == 2000
        assert len(history["history"]) == result.epochs_run
        assert history["summary"]["epochs"] == result.epochs_run
        assert history["summary"]["total_swaps"] == result.total_swaps
        assert history["summary"]["converged"] == result.converged


def test_runs_are_byte_identical():
    """Same input, seed and parameters give the same output file."""
    with tempfile.TemporaryDirectory() as tmpdir:
        tmpdir = Path(tmpdir)
        write_tokens(tmpdir / "input.bin", sample_tokens(seed=5))
        outputs = []
        for name, workers in [("a.bin", 1), ("b.bin", 1), ("c.bin", 2)]:
            config = ClusteringConfig(
                input_path=tmpdir / "input.bin",
                output_path=tmpdir / name,
                num_words=20,
                num_clusters=5,
                workers=workers,
            )
            run_clustering(config, logger=lambda _: None)
            outputs.append((tmpdir / name).read_bytes())
        assert outputs[0] == outputs[1] == outputs[2]


def test_fatal_errors_write_nothing():
    with tempfile.TemporaryDirectory() as tmpdir:
        tmpdir = Path(tmpdir)
        output = tmpdir / "output.bin"

        with pytest.raises(CorpusReadError):
            run_clustering(ClusteringConfig(tmpdir / "missing.bin", output, num_words=5))

        write_tokens(tmpdir / "input.bin", [0, 1, 9])
        with pytest.raises(VocabularyError):
            run_clustering(ClusteringConfig(tmpdir / "input.bin", output, num_words=5))

        with pytest.raises(ConfigError):
            run_clustering(ClusteringConfig(tmpdir / "input.bin", output, num_words=0))

        assert not output.exists()


# =============================================================================
# CLI
# =============================================================================

def test_cli_run():
    with tempfile.TemporaryDirectory() as tmpdir:
        tmpdir = Path(tmpdir)
        write_tokens(tmpdir / "input.bin", sample_tokens())
        output = tmpdir / "output.bin"
        result = runner.invoke(app, [
            "run",
            "-i", str(tmpdir / "input.bin"),
            "-o", str(output),
            "-w", "20",
            "-c", "3",
            "-e", "10",
            "--log-dir", str(tmpdir / "logs"),
        ])
        assert result.exit_code == 0, result.output
        assert "swaps" in result.output
        assert read_assignment(output, num_words=20).max() < 3
        assert list((tmpdir / "logs").rglob("clustering_*.log"))


def test_cli_quiet_keeps_terminal_message():
    """--quiet drops the per-epoch lines but still reports how the run ended."""
    with tempfile.TemporaryDirectory() as tmpdir:
        tmpdir = Path(tmpdir)
        write_tokens(tmpdir / "input.bin", sample_tokens())
        result = runner.invoke(app, [
            "run",
            "-i", str(tmpdir / "input.bin"),
            "-o", str(tmpdir / "output.bin"),
            "-w", "20",
            "-c", "3",
            "-e", "1",
            "--quiet",
        ])
        assert result.exit_code == 0, result.output
        assert "swaps" not in result.output
        assert "Summary" not in result.output
        assert (FIXED_POINT_MESSAGE in result.output) or (MAX_EPOCHS_MESSAGE in result.output)
        assert (tmpdir / "output.bin").stat().st_size == 20 * 4


def test_cli_history():
    with tempfile.TemporaryDirectory() as tmpdir:
        tmpdir = Path(tmpdir)
        write_tokens(tmpdir / "input.bin", sample_tokens())
        history_path = tmpdir / "runs" / "history.json"
        result = runner.invoke(app, [
            "run",
            "-i", str(tmpdir / "input.bin"),
            "-o", str(tmpdir / "output.bin"),
            "-w", "20",
            "-c", "4",
            "-e", "5",
            "--seed", "7",
            "--history", str(history_path),
        ])
        assert result.exit_code == 0, result.output
        assert "Summary:" in result.output

        history = json.loads(history_path.read_text())
        assert history["config"]["seed"] == 7
        assert history["config"]["num_clusters"] == 4
        assert 1 <= history["summary"]["epochs"] <= 5
        assert history["summary"]["epochs"] == len(history["history"])
        assert history["history"][0]["epoch"] == 1


def test_cli_rejects_empty_vocabulary():
    with tempfile.TemporaryDirectory() as tmpdir:
        tmpdir = Path(tmpdir)
        write_tokens(tmpdir / "input.bin", [0, 1, 0])
        result = runner.invoke(app, [
            "run",
            "-i", str(tmpdir / "input.bin"),
            "-o", str(tmpdir / "o.bin"),
            "--log-dir", str(tmpdir / "logs"),
        ])
        assert result.exit_code == 1
        assert "num_words" in result.output
        assert not (tmpdir / "o.bin").exists()

        # Reported once on the console, the log file keeps its own copy
        assert result.output.count("Error:") == 1
        assert "Aborted" not in result.output
        (log_file,) = (tmpdir / "logs").rglob("clustering_*.log")
        assert "Aborted: num_words" in log_file.read_text()


def test_cli_show_large_class_ids():
    """Class ids are listed as found, without allocating one slot per possible id."""
    with tempfile.TemporaryDirectory() as tmpdir:
        tmpdir = Path(tmpdir)
        write_assignment(tmpdir / "classes.bin", [2147483647, 0, 2147483647])
        result = runner.invoke(app, ["show", str(tmpdir / "classes.bin")])
        assert result.exit_code == 0, result.output
        assert "2147483647" in result.output

        write_assignment(tmpdir / "negative.bin", [0, -3])
        result = runner.invoke(app, ["show", str(tmpdir / "negative.bin")])
        assert result.exit_code == 1


def test_cli_stats_and_show():
    with tempfile.TemporaryDirectory() as tmpdir:
        tmpdir = Path(tmpdir)
        write_tokens(tmpdir / "input.bin", [0, 1, 0, 1, 0, 1])
        result = runner.invoke(app, ["stats", "-i", str(tmpdir / "input.bin"), "-w", "2"])
        assert result.exit_code == 0, result.output
        assert "bigrams" in result.output

        write_assignment(tmpdir / "classes.bin", [1, 1, 0])
        result = runner.invoke(app, ["show", str(tmpdir / "classes.bin")])
        assert result.exit_code == 0, result.output
        assert "Words" in result.output

        result = runner.invoke(app, ["show", str(tmpdir / "nothing.bin")])
        assert result.exit_code == 1


def run_all_tests():
    """Run all pipeline tests."""
    tests = [
        test_token_file_layout,
        test_assignment_file,
        test_unreadable_corpus,
        test_config_validation,
        test_config_round_trip,
        test_run_writes_assignment,
        test_runs_are_byte_identical,
        test_fatal_errors_write_nothing,
        test_cli_run,
        test_cli_quiet_keeps_terminal_message,
        test_cli_history,
        test_cli_rejects_empty_vocabulary,
        test_cli_show_large_class_ids,
        test_cli_stats_and_show,
    ]

    failed = 0
    for test in tests:
        try:
            test()
            print(f"  [PASS] {test.__name__}")
        except Exception as e:
            print(f"  [FAIL] {test.__name__}: {e}")
            failed += 1

    print(f"\n  Results: {len(tests) - failed} passed, {failed} failed")
    return failed == 0


if __name__ == "__main__":
    sys.exit(0 if run_all_tests() else 1)
