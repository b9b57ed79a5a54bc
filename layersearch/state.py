"""State vector primitives.

A state vector is a read-only ``uint8`` numpy array of length N holding
values in ``[0, N)``.  Entry ``i`` is the value produced for input ``i``.
"""

from collections.abc import Iterable

import numpy as np

State = np.ndarray

STATE_DTYPE = np.uint8


def _freeze(values: np.ndarray) -> State:
    """Mark an array read-only and return it."""
    values.flags.writeable = False
    return values


def comparator(back: int, side: int, subtract: bool) -> int:
    """Simulate a redstone comparator.

    Args:
        back: Signal on the back input.
        side: Signal on the side input.
        subtract: Whether the comparator is in subtract mode.

    Returns:
        0 when ``side > back``, ``back - side`` in subtract mode, else ``back``.
    """
    if side > back:
        return 0
    if subtract:
        return back - side
    return back


def identity(n: int) -> State:
    """Return the ascending state ``[0, 1, ..., n-1]``."""
    return _freeze(np.arange(n, dtype=STATE_DTYPE))


def as_state(values: Iterable[int], n: int) -> State:
    """Validate ``values`` and return them as a read-only state vector.

    Args:
        values: Integers in ``[0, n)``.
        n: State-space size.

    Returns:
        A frozen ``uint8`` state vector.

    Raises:
        ValueError: If the length is not ``n`` or a value is out of range.
    """
    items = [int(v) for v in values]
    if len(items) != n:
        raise ValueError(f"State must have {n} entries, got {len(items)}")
    bad = [v for v in items if not 0 <= v < n]
    if bad:
        raise ValueError(f"State values must be in [0, {n}), got {bad}")
    return _freeze(np.array(items, dtype=STATE_DTYPE))


def apply(table: State, inputs: State) -> State:
    """Route every entry of ``inputs`` through the output table ``table``.

    ``output[i] = table[inputs[i]]``.  Every input must index into ``table``.

    Args:
        table: Output table of the layer being applied.
        inputs: Current state vector.

    Returns:
        The composed state vector.
    """
    return _freeze(table[inputs])


def distinct_count(state: State) -> int:
    """Number of unique values in ``state``."""
    return int(np.count_nonzero(np.bincount(state)))


def state_key(state: State) -> bytes:
    """Hashable key for sets and dict lookups."""
    return state.tobytes()
