"""Bounded LRU cache of search nodes proven not to reach the goal."""

from collections import OrderedDict
from typing import NamedTuple

from layersearch.state import State, state_key


class CacheKey(NamedTuple):
    """Identity of a search node.

    The remaining depth and the last applied layer are part of the key: a
    state that cannot reach the goal in two more steps may still reach it in
    three, and the moves available next depend on the last layer's children.
    """

    state: bytes
    last: int
    remaining: int


class InfeasibleCache:
    """Least-recently-used set of infeasible search nodes.

    Attributes:
        capacity: Maximum number of entries kept.
        hits: Lookups that found an entry.
        misses: Lookups that did not.
        evictions: Entries dropped to respect ``capacity``.
    """

    def __init__(self, capacity: int) -> None:
        """Initialize an empty cache holding at most ``capacity`` entries."""
        if capacity < 1:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self.capacity = capacity
        self._entries: OrderedDict[CacheKey, bool] = OrderedDict()
        self.hits = 0
        self.misses = 0
        self.evictions = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: CacheKey) -> bool:
        return key in self._entries

    @staticmethod
    def key(state: State, last: int, remaining: int) -> CacheKey:
        """Build the cache key of a search node."""
        return CacheKey(state_key(state), last, remaining)

    def is_infeasible(self, key: CacheKey) -> bool:
        """Look up ``key``, refreshing its recency on a hit."""
        if key not in self._entries:
            self.misses += 1
            return False
        self._entries.move_to_end(key)
        self.hits += 1
        return True

    def mark_infeasible(self, key: CacheKey) -> None:
        """Record ``key`` as infeasible, evicting the oldest entry when full."""
        if key in self._entries:
            self._entries.move_to_end(key)
            return
        self._entries[key] = True
        if len(self._entries) > self.capacity:
            self._entries.popitem(last=False)
            self.evictions += 1

    def clear(self) -> None:
        """Drop every entry and reset statistics."""
        self._entries.clear()
        self.hits = 0
        self.misses = 0
        self.evictions = 0
