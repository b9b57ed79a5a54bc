"""Run configuration for layer search.

A single immutable ``SearchConfig`` is built once per run and passed to every
stage.  It replaces compile-time constants so that the state-space size,
target vector and limits can vary per run (small N in tests, N=16 in
production).
"""

from dataclasses import dataclass, field
from enum import Enum

MAX_STATES = 256
DEFAULT_STATES = 16
DEFAULT_MAX_DEPTH = 8
DEFAULT_CACHE_CAPACITY = 10_000
FAMILIES = ("a", "b")


class GoalMode(Enum):
    """What the search accepts as a finished chain.

    Attributes:
        EXACT: Final state must equal the target vector element-wise.
        DISTINCT: Final state must have as many distinct values as the target has groups.
    """

    EXACT = "exact"
    DISTINCT = "distinct"


class Stage(Enum):
    """Pipeline stages that may emit progress output."""

    INITIAL = "initial"
    LAYER_GEN = "layer_gen"
    LAYER_POP = "layer_pop"
    SEARCH = "search"


ALL_STAGES = frozenset(Stage)


def _twos_complement(n: int) -> tuple[int, ...]:
    """Return ``(-i) mod n`` for every input ``i``."""
    return tuple((n - i) % n for i in range(n))


_PI_DIGITS = (3, 1, 4, 1, 5, 9, 2, 6, 5, 3, 5, 8, 9, 7, 9, 3)

TARGET_PRESETS = {
    "zeros": lambda n: (0,) * n,
    "identity": lambda n: tuple(range(n)),
    "twos_comp": _twos_complement,
    "pi": lambda n: tuple(_PI_DIGITS[i % len(_PI_DIGITS)] % n for i in range(n)),
}


def target_groups(target: tuple[int, ...]) -> int:
    """Count the non-empty groups when inputs are partitioned by target value.

    Args:
        target: Target state vector.

    Returns:
        Number of distinct values in ``target``.
    """
    return len(set(target))


@dataclass(frozen=True)
class SearchConfig:
    """Immutable parameters for one generation, graph and search run.

    Attributes:
        states: Size N of the state space; values live in ``[0, N)``.
        target: Target state vector of length N.
        max_depth: Largest chain length tried by iterative deepening.
        cache_capacity: Entry limit of the infeasible-state LRU cache.
        goal: Acceptance rule for a finished chain.
        time_limit: Optional wall-clock budget for the search, in seconds.
        node_limit: Optional budget of expanded search nodes.
        families: Generator families to enumerate (``"a"``, ``"b"``).
        progress: Stages that report progress through tqdm.
    """

    states: int = DEFAULT_STATES
    target: tuple[int, ...] | None = None
    max_depth: int = DEFAULT_MAX_DEPTH
    cache_capacity: int = DEFAULT_CACHE_CAPACITY
    goal: GoalMode = GoalMode.EXACT
    time_limit: float | None = None
    node_limit: int | None = None
    families: tuple[str, ...] = FAMILIES
    progress: frozenset[Stage] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        """Validate fields and fill the default all-zero target."""
        if not 0 < self.states <= MAX_STATES:
            raise ValueError(f"states must be in [1, {MAX_STATES}], got {self.states}")
        if self.target is None:
            object.__setattr__(self, "target", (0,) * self.states)
        target = tuple(int(v) for v in self.target)
        object.__setattr__(self, "target", target)
        if len(target) != self.states:
            raise ValueError(f"target must have {self.states} entries, got {len(target)}")
        bad = [v for v in target if not 0 <= v < self.states]
        if bad:
            raise ValueError(f"target values must be in [0, {self.states}), got {bad}")
        if self.max_depth < 1:
            raise ValueError(f"max_depth must be positive, got {self.max_depth}")
        if self.cache_capacity < 1:
            raise ValueError(f"cache_capacity must be positive, got {self.cache_capacity}")
        if self.time_limit is not None and self.time_limit <= 0:
            raise ValueError(f"time_limit must be positive, got {self.time_limit}")
        if self.node_limit is not None and self.node_limit < 1:
            raise ValueError(f"node_limit must be positive, got {self.node_limit}")
        unknown = [f for f in self.families if f not in FAMILIES]
        if unknown or not self.families:
            raise ValueError(f"families must be a non-empty subset of {FAMILIES}, got {self.families}")
        object.__setattr__(self, "goal", GoalMode(self.goal))
        object.__setattr__(self, "progress", frozenset(Stage(s) for s in self.progress))

    @property
    def required_distinct(self) -> int:
        """Minimum number of distinct output values a useful layer must keep."""
        return target_groups(self.target)

    @classmethod
    def from_preset(cls, name: str, states: int = DEFAULT_STATES, **kwargs) -> "SearchConfig":
        """Build a config whose target is one of ``TARGET_PRESETS``.

        Args:
            name: Preset name.
            states: State-space size.
            **kwargs: Remaining ``SearchConfig`` fields.

        Returns:
            A validated config.
        """
        if name not in TARGET_PRESETS:
            raise ValueError(f"Unknown target preset '{name}', choose from {sorted(TARGET_PRESETS)}")
        return cls(states=states, target=TARGET_PRESETS[name](states), **kwargs)

    def reports(self, stage: Stage) -> bool:
        """Whether ``stage`` should render progress."""
        return stage in self.progress
