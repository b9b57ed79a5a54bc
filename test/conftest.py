"""Shared test utilities and fixtures for pytest."""

from collections.abc import Sequence

import pytest

from layersearch.config import SearchConfig
from layersearch.layers import Layer, LayerCollection
from layersearch.state import as_state


class RecordingProgress:
    """Progress reporter that records every event.

    Attributes:
        advanced: Total units passed to ``advance``.
        calls: Number of ``advance`` calls.
        finished: ``(label, count)`` pairs passed to ``finish``.
    """

    def __init__(self) -> None:
        """Initialize with no recorded events."""
        self.advanced = 0
        self.calls = 0
        self.finished: list[tuple[str, int]] = []

    def advance(self, count: int) -> None:
        """Record ``count`` completed units."""
        self.advanced += count
        self.calls += 1

    def finish(self, label: str, count: int) -> None:
        """Record the stage summary."""
        self.finished.append((label, count))


def make_layer(values: Sequence[int], notation: str = "", children: Sequence[int] = ()) -> Layer:
    """Build a layer from a literal output table.

    Args:
        values: Output table entries.
        notation: Diagnostic label.
        children: Child indices.

    Returns:
        A layer over ``len(values)`` states.
    """
    layer = Layer(output=as_state(values, len(values)), notation=notation)
    layer.children.extend(children)
    return layer


def make_toy_collection() -> LayerCollection:
    """Three layers over N=4 wired A -> B -> C.

    From the identity, A then B then C reaches ``[0, 0, 0, 0]``; no shorter
    chain along the edges does.
    """
    a = make_layer([1, 1, 0, 0], "A;", children=[1])
    b = make_layer([0, 1, 2, 2], "B;", children=[2])
    c = make_layer([0, 0, 1, 1], "C;")
    return LayerCollection(4, [a, b, c])


@pytest.fixture
def small_config() -> SearchConfig:
    """N=4 run with the all-zero target."""
    return SearchConfig(states=4, max_depth=4)


@pytest.fixture
def tiny_config() -> SearchConfig:
    """N=2 run with the all-zero target."""
    return SearchConfig(states=2, max_depth=3)


@pytest.fixture
def toy_collection() -> LayerCollection:
    """Hand-built A -> B -> C collection."""
    return make_toy_collection()


@pytest.fixture
def recorder() -> RecordingProgress:
    """Fresh recording progress reporter."""
    return RecordingProgress()
