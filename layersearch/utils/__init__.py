"""Utility modules for layer search."""

from layersearch.utils.logging import MultilineFormatter, setup_logging

__all__ = ["setup_logging", "MultilineFormatter"]
