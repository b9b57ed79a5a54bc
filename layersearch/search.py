"""Iterative-deepening search for a chain of layers reaching the target.

The search starts from the identity state.  Any layer may be applied first;
every later layer must be a child of the one before it.  For depth
1, 2, ... ``max_depth`` a depth-first pass with an explicit work stack looks
for a chain whose final state satisfies the goal.  Because every shorter
depth has been exhausted first, the first chain found is a shortest one.

Subtrees that were fully explored without success are remembered in an
``InfeasibleCache`` keyed by ``(state, last layer, remaining depth)``; the
cache survives across deepening iterations since the graph never changes.
"""

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import numpy as np

from layersearch.cache import InfeasibleCache
from layersearch.config import GoalMode, SearchConfig, Stage
from layersearch.layers import Layer, LayerCollection
from layersearch.progress import make_progress
from layersearch.state import State, apply, as_state, distinct_count, identity

logger = logging.getLogger(__name__)

_ROOT = -1
_LIMIT_CHECK_INTERVAL = 1024


class SearchOutcome(Enum):
    """How a search ended.

    Attributes:
        FOUND: A chain satisfying the goal was found.
        EXHAUSTED: No chain exists up to ``max_depth``.
        CUT_SHORT: A time or node limit stopped the search early.
        NOT_ATTEMPTED: The search stage was skipped.
    """

    FOUND = "found"
    EXHAUSTED = "exhausted"
    CUT_SHORT = "cut_short"
    NOT_ATTEMPTED = "not_attempted"


@dataclass
class SearchResult:
    """Outcome of a chain search.

    Attributes:
        outcome: How the search ended.
        indices: Layer indices of the chain, in application order.
        layers: The chain's layers, in application order.
        states: State after each applied layer.
        depths_searched: Deepening iterations that ran to completion.
        nodes_expanded: Layer applications performed.
    """

    outcome: SearchOutcome
    indices: list[int] = field(default_factory=list)
    layers: list[Layer] = field(default_factory=list)
    states: list[State] = field(default_factory=list)
    depths_searched: int = 0
    nodes_expanded: int = 0

    @property
    def found(self) -> bool:
        """Whether a chain was found."""
        return self.outcome is SearchOutcome.FOUND

    @property
    def depth(self) -> int:
        """Length of the found chain (0 when none)."""
        return len(self.indices)

    @property
    def notation(self) -> str:
        """Concatenated notation of the chain."""
        return "".join(layer.notation for layer in self.layers)

    def format_chain(self) -> str:
        """One ``notation -> state`` line per applied layer."""
        return "\n".join(f"{layer.notation} -> {state.tolist()}" for layer, state in zip(self.layers, self.states))

    @classmethod
    def not_attempted(cls) -> "SearchResult":
        """Placeholder for a pipeline run that skipped the search."""
        return cls(outcome=SearchOutcome.NOT_ATTEMPTED)

    def to_dict(self) -> dict[str, Any]:
        """Serializable view of the result."""
        return {
            "outcome": self.outcome.value,
            "indices": list(self.indices),
            "notation": self.notation,
            "states": [state.tolist() for state in self.states],
            "depths_searched": self.depths_searched,
            "nodes_expanded": self.nodes_expanded,
        }


class _LimitReached(Exception):
    """Raised inside a pass when a time or node budget runs out."""


@dataclass
class _Frame:
    """One entry of the explicit DFS stack.

    Attributes:
        state: State reached at this node.
        last: Index of the layer that produced ``state`` (``-1`` at the root).
        remaining: Layers that may still be applied below this node.
        moves: Candidate layer indices to try from here.
        cursor: Position of the next move to try.
    """

    state: State
    last: int
    remaining: int
    moves: list[int] | range
    cursor: int = 0


class ChainSearch:
    """Memoized iterative-deepening search over a populated collection.

    Attributes:
        collection: Layers with populated children; read only.
        config: Run configuration.
        cache: Infeasible-node cache shared by all deepening iterations.
        nodes_expanded: Layer applications performed so far.
    """

    def __init__(self, collection: LayerCollection, config: SearchConfig) -> None:
        """Initialize the search.

        Args:
            collection: Layers with populated children.
            config: Run configuration; must share the collection's state count.

        Raises:
            ValueError: If the state counts differ.
        """
        if collection.states != config.states:
            raise ValueError(f"Collection has {collection.states} states, config has {config.states}")
        self.collection = collection
        self.config = config
        self.cache = InfeasibleCache(config.cache_capacity)
        self.nodes_expanded = 0
        self._target = as_state(config.target, config.states)
        self._target_groups = config.required_distinct
        self._deadline: float | None = None

    def is_goal(self, state: State) -> bool:
        """Whether ``state`` satisfies the configured goal."""
        if self.config.goal is GoalMode.EXACT:
            return bool(np.array_equal(state, self._target))
        return distinct_count(state) == self._target_groups

    def _check_limits(self) -> None:
        """Raise ``_LimitReached`` once a budget is spent."""
        limit = self.config.node_limit
        if limit is not None and self.nodes_expanded >= limit:
            raise _LimitReached(f"node limit {limit} reached")
        if self._deadline is not None and self.nodes_expanded % _LIMIT_CHECK_INTERVAL == 0:
            if time.monotonic() >= self._deadline:
                raise _LimitReached(f"time limit {self.config.time_limit}s reached")

    def _expand(self, frame: _Frame, index: int) -> State:
        """Apply layer ``index`` below ``frame``, counting the expansion."""
        self._check_limits()
        self.nodes_expanded += 1
        return apply(self.collection[index].output, frame.state)

    def search_depth(self, depth: int) -> list[int] | None:
        """Run one depth-limited pass.

        Args:
            depth: Maximum number of layers in the chain.

        Returns:
            Layer indices of the first chain found, or ``None``.
        """
        start = identity(self.config.states)
        stack = [_Frame(state=start, last=_ROOT, remaining=depth, moves=range(len(self.collection)))]
        path: list[int] = []
        while stack:
            frame = stack[-1]
            if frame.cursor == len(frame.moves):
                stack.pop()
                if frame.last != _ROOT:
                    self.cache.mark_infeasible(self.cache.key(frame.state, frame.last, frame.remaining))
                    path.pop()
                continue
            index = frame.moves[frame.cursor]
            frame.cursor += 1
            state = self._expand(frame, index)
            if self.is_goal(state):
                return path + [index]
            remaining = frame.remaining - 1
            children = self.collection[index].children
            if remaining == 0 or not children:
                continue
            if self.cache.is_infeasible(self.cache.key(state, index, remaining)):
                continue
            path.append(index)
            stack.append(_Frame(state=state, last=index, remaining=remaining, moves=children))
        return None

    def _build_result(self, outcome: SearchOutcome, indices: list[int], depths_searched: int) -> SearchResult:
        """Assemble a ``SearchResult`` with the chain's intermediate states."""
        layers = [self.collection[i] for i in indices]
        states: list[State] = []
        state = identity(self.config.states)
        for layer in layers:
            state = apply(layer.output, state)
            states.append(state)
        return SearchResult(
            outcome=outcome,
            indices=list(indices),
            layers=layers,
            states=states,
            depths_searched=depths_searched,
            nodes_expanded=self.nodes_expanded,
        )

    def run(self) -> SearchResult:
        """Deepen from depth 1 to ``max_depth`` until a chain is found.

        The node counter and deadline restart on every call; the infeasible
        cache is kept, since the collection and goal cannot change.

        Returns:
            ``FOUND`` with the shortest chain, ``EXHAUSTED`` when no chain
            exists up to ``max_depth``, or ``CUT_SHORT`` when a limit stopped
            the search.
        """
        config = self.config
        self.nodes_expanded = 0
        self._deadline = None
        if self.is_goal(identity(config.states)):
            logger.info("Identity already satisfies the goal")
            return self._build_result(SearchOutcome.FOUND, [], 0)

        if config.time_limit is not None:
            self._deadline = time.monotonic() + config.time_limit
        progress = make_progress(config, Stage.SEARCH, config.max_depth, "Deepening", "depths")
        completed = 0
        try:
            for depth in range(1, config.max_depth + 1):
                chain = self.search_depth(depth)
                completed = depth
                progress.advance(1)
                logger.debug(
                    "Depth %d done: %d nodes expanded, %d cached, %d cache hits",
                    depth,
                    self.nodes_expanded,
                    len(self.cache),
                    self.cache.hits,
                )
                if chain is not None:
                    progress.finish("Chain Found", len(chain))
                    result = self._build_result(SearchOutcome.FOUND, chain, completed)
                    logger.info(
                        "Found chain of %d layers after %d nodes:\n%s",
                        len(chain),
                        self.nodes_expanded,
                        result.format_chain(),
                    )
                    return result
        except _LimitReached as exc:
            progress.finish("Search Cut Short", completed)
            logger.warning("Search stopped at depth %d: %s", completed + 1, exc)
            return self._build_result(SearchOutcome.CUT_SHORT, [], completed)
        progress.finish("Search Exhausted", completed)
        logger.info("No chain up to depth %d (%d nodes expanded)", config.max_depth, self.nodes_expanded)
        return self._build_result(SearchOutcome.EXHAUSTED, [], completed)


def find_chain(collection: LayerCollection, config: SearchConfig) -> SearchResult:
    """Search ``collection`` for the shortest chain satisfying ``config``'s goal."""
    return ChainSearch(collection, config).run()
