"""Unit tests for layersearch.utils.logging module.

Tests MultilineFormatter formatting and setup_logging configuration.

Run with: pytest test/test_logging.py -v
"""

import logging
from pathlib import Path

from layersearch.config import SearchConfig
from layersearch.layers import LayerCollection
from layersearch.search import ChainSearch
from layersearch.utils.logging import MultilineFormatter, setup_logging


def _record(msg: str, level: int = logging.INFO, name: str = "test.logger") -> logging.LogRecord:
    """Build a bare log record."""
    return logging.LogRecord(name=name, level=level, pathname="", lineno=0, msg=msg, args=(), exc_info=None)


class TestMultilineFormatter:
    """Tests for MultilineFormatter."""

    def test_single_line_with_metadata(self) -> None:
        """Single-line message includes right-padded text and metadata suffix."""
        result = MultilineFormatter(msg_width=40, show_metadata=True).format(_record("hello world"))
        assert result.startswith("hello world")
        assert "INFO" in result
        assert "test.logger" in result

    def test_single_line_without_metadata(self) -> None:
        """Without metadata the message is returned unchanged."""
        result = MultilineFormatter(msg_width=40, show_metadata=False).format(_record("hello world"))
        assert result == "hello world"

    def test_padding(self) -> None:
        """The first line is padded to msg_width before metadata."""
        result = MultilineFormatter(msg_width=50, show_metadata=True).format(_record("short", logging.DEBUG))
        assert result.index("20") >= 50

    def test_multiline(self) -> None:
        """Metadata goes on the headline; step lines are indented beneath it."""
        formatter = MultilineFormatter(msg_width=40, show_metadata=True)
        lines = formatter.format(_record("chain\nA; -> [0, 0, 1]\nB; -> [0, 0, 0]", logging.WARNING)).split("\n")
        assert len(lines) == 3
        assert "WARNING" in lines[0]
        assert lines[1:] == ["    A; -> [0, 0, 1]", "    B; -> [0, 0, 0]"]

    def test_multiline_without_metadata(self) -> None:
        """Step lines are indented even when metadata is off."""
        formatter = MultilineFormatter(msg_width=40, show_metadata=False)
        assert formatter.format(_record("chain\nA; -> [0]")) == "chain\n    A; -> [0]"

    def test_found_chain_renders_as_block(self, toy_collection: LayerCollection, caplog) -> None:
        """A successful search logs its chain as one record with a line per step."""
        with caplog.at_level(logging.INFO, logger="layersearch.search"):
            ChainSearch(toy_collection, SearchConfig(states=4, max_depth=4)).run()
        (record,) = [r for r in caplog.records if r.getMessage().startswith("Found chain")]
        lines = MultilineFormatter(msg_width=40, show_metadata=True).format(record).split("\n")
        assert lines[0].startswith("Found chain of 3 layers after")
        assert "INFO" in lines[0]
        assert lines[1:] == [
            "    A; -> [1, 1, 0, 0]",
            "    B; -> [1, 1, 0, 0]",
            "    C; -> [0, 0, 0, 0]",
        ]


class TestSetupLogging:
    """Tests for setup_logging()."""

    def test_file_handler(self, tmp_path: Path) -> None:
        """A log file gets a FileHandler with the multiline formatter."""
        handler = setup_logging(str(tmp_path / "run.log"), logging.INFO, msg_width=60, show_metadata=True)
        try:
            assert isinstance(handler, logging.FileHandler)
            assert handler in logging.root.handlers
            assert isinstance(handler.formatter, MultilineFormatter)
            assert handler.formatter.msg_width == 60
            assert logging.root.level == logging.INFO
        finally:
            logging.root.removeHandler(handler)
            handler.close()

    def test_stream_handler_without_file(self) -> None:
        """No log file means logging to stderr."""
        handler = setup_logging(None, logging.WARNING, msg_width=40, show_metadata=False)
        try:
            assert type(handler) is logging.StreamHandler
        finally:
            logging.root.removeHandler(handler)

    def test_writes_to_log_file(self, tmp_path: Path) -> None:
        """Messages from package loggers reach the file."""
        log_file = tmp_path / "run.log"
        handler = setup_logging(str(log_file), logging.INFO, msg_width=40, show_metadata=False)
        try:
            logging.getLogger("layersearch.test").info("generated %d layers", 12)
            handler.flush()
        finally:
            logging.root.removeHandler(handler)
            handler.close()
        assert "generated 12 layers" in log_file.read_text()
