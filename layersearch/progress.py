"""Progress reporting for the long-running stages.

The core only emits two events: ``advance(count)`` after a unit of work and
``finish(label, count)`` once per stage.  How they are rendered is up to the
reporter; ``TqdmProgress`` draws a tqdm bar and ``NullProgress`` drops them.
"""

import logging
from typing import Protocol

from tqdm import tqdm

from layersearch.config import SearchConfig, Stage

logger = logging.getLogger(__name__)


class ProgressReporter(Protocol):
    """Observer for stage progress."""

    def advance(self, count: int) -> None:
        """Record ``count`` more units of completed work."""

    def finish(self, label: str, count: int) -> None:
        """Report the final count of a stage under ``label``."""


class NullProgress:
    """Reporter that ignores every event."""

    def advance(self, count: int) -> None:
        """Ignore progress."""

    def finish(self, label: str, count: int) -> None:
        """Ignore the summary."""


class TqdmProgress:
    """Render stage progress with a tqdm bar.

    Attributes:
        total: Estimated units of work for the stage.
        bar: Underlying tqdm instance.
    """

    def __init__(self, total: int, desc: str, unit: str) -> None:
        """Open a progress bar.

        Args:
            total: Estimated units of work for the stage.
            desc: Bar description.
            unit: Name of one unit of work.
        """
        self.total = total
        self.bar = tqdm(total=total, desc=desc, unit=unit, leave=True)

    def advance(self, count: int) -> None:
        """Advance the bar by ``count`` units."""
        self.bar.update(count)

    def finish(self, label: str, count: int) -> None:
        """Close the bar and print the stage summary below it."""
        self.bar.close()
        tqdm.write(f"{label} ({count}) - {self.bar.n}/{self.total} in {self.bar.format_dict['elapsed']:.4f}s")


def make_progress(config: SearchConfig, stage: Stage, total: int, desc: str, unit: str) -> ProgressReporter:
    """Pick a reporter for ``stage`` based on ``config.progress``.

    Args:
        config: Run configuration.
        stage: Stage that will report.
        total: Estimated units of work.
        desc: Bar description.
        unit: Name of one unit of work.

    Returns:
        A ``TqdmProgress`` when the stage is enabled, otherwise ``NullProgress``.
    """
    if config.reports(stage):
        logger.debug("Progress enabled for %s (%d %s)", stage.value, total, unit)
        return TqdmProgress(total=total, desc=desc, unit=unit)
    return NullProgress()
