"""End-to-end tests: generate -> build graph -> search, and the CLI.

Run with: pytest test/test_pipeline.py -v
"""

import logging
from pathlib import Path

import pytest

from layersearch.cli import build_parser, config_from_args, main, parse_target
from layersearch.config import GoalMode, SearchConfig, Stage
from layersearch.pipeline import run_pipeline
from layersearch.report import load_report
from layersearch.search import SearchOutcome


@pytest.fixture
def restore_root_logger():
    """Remove handlers added by the CLI after each test."""
    before = list(logging.root.handlers)
    level = logging.root.level
    yield
    for handler in logging.root.handlers[:]:
        if handler not in before:
            logging.root.removeHandler(handler)
            handler.close()
    logging.root.setLevel(level)


class TestRunPipeline:
    """Tests for run_pipeline()."""

    def test_four_states(self, small_config: SearchConfig) -> None:
        """N=4, zero target: layers, edges and a one-step chain."""
        result = run_pipeline(small_config)
        assert len(result.collection) > 0
        assert result.collection.edge_count() > 0
        assert result.search.outcome is SearchOutcome.FOUND
        assert result.search.depth == 1
        assert set(result.timings) == {"generate", "graph", "search"}

    def test_skip_search(self, small_config: SearchConfig) -> None:
        """Skipping the search is reported as not attempted."""
        result = run_pipeline(small_config, search=False)
        assert result.search.outcome is SearchOutcome.NOT_ATTEMPTED
        assert "search" not in result.timings

    def test_initial_banner(self, capsys: pytest.CaptureFixture[str]) -> None:
        """The INITIAL stage prints the target before generation."""
        config = SearchConfig(states=3, progress=frozenset({Stage.INITIAL}))
        run_pipeline(config, search=False)
        assert "Search started for [0, 0, 0]" in capsys.readouterr().out


class TestCli:
    """Tests for the command line interface."""

    def test_parse_target(self) -> None:
        """Targets are presets or comma-separated integers."""
        assert parse_target("zeros", 3) == (0, 0, 0)
        assert parse_target("1,0,2", 3) == (1, 0, 2)
        with pytest.raises(ValueError):
            parse_target("one,two", 3)

    def test_config_from_args(self) -> None:
        """Arguments map onto SearchConfig fields."""
        args = build_parser().parse_args(
            ["--states", "4", "--target", "identity", "--goal", "distinct", "--families", "a", "--quiet"]
        )
        config = config_from_args(args)
        assert config.target == (0, 1, 2, 3)
        assert config.goal is GoalMode.DISTINCT
        assert config.families == ("a",)
        assert config.progress == frozenset()

    def test_main_writes_report(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str], restore_root_logger: None
    ) -> None:
        """A full CLI run prints the summary and writes the report."""
        report = tmp_path / "report.json"
        log_file = tmp_path / "run.log"
        code = main(["--states", "4", "--quiet", "--report", str(report), "--log-file", str(log_file)])
        assert code == 0
        out = capsys.readouterr().out
        assert "layers" in out and "found" in out
        assert load_report(report)["search"]["outcome"] == "found"
        assert "Generated" in log_file.read_text()

    def test_invalid_target_exits(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Bad configuration is a usage error."""
        with pytest.raises(SystemExit) as exc_info:
            main(["--states", "4", "--target", "0,1,9,0", "--quiet"])
        assert exc_info.value.code == 2
        assert "target values" in capsys.readouterr().err
