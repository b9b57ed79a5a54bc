"""Logging utilities for layer search.

Provides a formatter for chain reports and a logging configuration helper.
"""

import logging
import sys

__all__ = ["setup_logging", "MultilineFormatter"]

_CONTINUATION_INDENT = "    "


class MultilineFormatter(logging.Formatter):
    """Formatter that keeps metadata on a record's headline only.

    A found chain is logged as one record: a headline followed by one
    ``notation -> state`` line per step.  The headline is padded to
    ``msg_width`` and gets the metadata suffix; step lines are indented
    beneath it so the chain reads as a block.

    Attributes:
        msg_width: Width the headline is padded to before the metadata.
        show_metadata: Whether to append timestamp/level/name metadata.
    """

    def __init__(self, msg_width: int, show_metadata: bool) -> None:
        """Initialize the formatter.

        Args:
            msg_width: Width the headline is padded to.
            show_metadata: Whether to append timestamp/level/name metadata.
        """
        super().__init__(datefmt="%Y-%m-%d %H:%M:%S")
        self.msg_width = msg_width
        self.show_metadata = show_metadata

    def format(self, record: logging.LogRecord) -> str:
        """Render the headline with metadata and indent any step lines."""
        headline, *steps = record.getMessage().split("\n")
        if self.show_metadata:
            headline = f"{headline:<{self.msg_width}}{self.formatTime(record)} - {record.levelname} - {record.name}"
        return "\n".join([headline] + [_CONTINUATION_INDENT + step for step in steps])


def setup_logging(log_file: str | None, level: int, msg_width: int, show_metadata: bool) -> logging.Handler:
    """Attach a chain-aware handler to the root logger.

    Args:
        log_file: Path of the log file, or ``None`` to log to stderr.
        level: Logging level.
        msg_width: Width for headline alignment.
        show_metadata: Whether to append timestamp/level/name metadata to headlines.

    Returns:
        The installed handler.
    """
    if log_file is None:
        handler: logging.Handler = logging.StreamHandler(sys.stderr)
    else:
        handler = logging.FileHandler(log_file, mode="w")
    handler.setFormatter(MultilineFormatter(msg_width=msg_width, show_metadata=show_metadata))
    logging.root.addHandler(handler)
    logging.root.setLevel(level)
    return handler
