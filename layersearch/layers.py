"""Layer generation and deduplication.

A layer is a single-step comparator circuit described by its output table
over the N input signals.  Candidates come from two parameter families:

Family A ("single-mode pair"):
    ``out[i] = max(comparator(i, side, side_mode), comparator(back, i, back_mode))``
Family B ("dual-compare"):
    ``out[i] = max(comparator(compare, i, False), comparator(subtract, i, True))``

Every candidate is filtered against the seen-outputs ledger so that the
resulting ``LayerCollection`` holds each output table at most once and never
the identity.
"""

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from itertools import product
from typing import Any

from layersearch.config import SearchConfig, Stage
from layersearch.progress import ProgressReporter, make_progress
from layersearch.state import State, as_state, comparator, distinct_count, identity, state_key

logger = logging.getLogger(__name__)

_MODES = (False, True)


@dataclass(eq=False)
class Layer:
    """A single layer circuit.

    Attributes:
        output: Output table; ``output[i]`` is produced for input ``i``.
        notation: Asterisk notation of the circuit (diagnostic only).
        distinct: Number of unique values in ``output``, cached at construction.
        children: Indices of layers that usefully follow this one.
    """

    output: State
    notation: str
    distinct: int = field(init=False)
    children: list[int] = field(default_factory=list)

    def __post_init__(self) -> None:
        """Cache the distinct count of the output table."""
        self.distinct = distinct_count(self.output)

    @property
    def valid_parent(self) -> bool:
        """Whether any child composes usefully with this layer."""
        return bool(self.children)

    def to_dict(self) -> dict[str, Any]:
        """Serializable view of the layer."""
        return {
            "output": self.output.tolist(),
            "distinct": self.distinct,
            "notation": self.notation,
            "children": list(self.children),
        }


def _star(mode: bool) -> str:
    """Asterisk prefix marking subtract mode."""
    return "*" if mode else ""


def family_a(n: int, side: int, side_mode: bool, back: int, back_mode: bool) -> Layer:
    """Build a single-mode pair layer.

    Args:
        n: State-space size.
        side: Constant signal fed to the side of the first comparator.
        side_mode: Subtract mode of the first comparator.
        back: Constant signal fed to the back of the second comparator.
        back_mode: Subtract mode of the second comparator.

    Returns:
        The constructed layer.
    """
    values = [max(comparator(i, side, side_mode), comparator(back, i, back_mode)) for i in range(n)]
    return Layer(output=as_state(values, n), notation=f"{_star(side_mode)}{side},{_star(back_mode)}{back};")


def family_b(n: int, compare: int, subtract: int) -> Layer:
    """Build a dual-compare layer.

    Both comparators take the input on their side; one compares against
    ``compare``, the other subtracts from ``subtract``.

    Args:
        n: State-space size.
        compare: Back signal of the comparing comparator.
        subtract: Back signal of the subtracting comparator.

    Returns:
        The constructed layer.
    """
    values = [max(comparator(compare, i, False), comparator(subtract, i, True)) for i in range(n)]
    return Layer(output=as_state(values, n), notation=f"[{compare},*{subtract}];")


def iter_candidates(config: SearchConfig) -> Iterator[Layer]:
    """Yield candidate layers, Family A fully before Family B.

    Args:
        config: Run configuration.

    Yields:
        Candidate layers in deterministic enumeration order.
    """
    n = config.states
    if "a" in config.families:
        for side_mode, back_mode, side, back in product(_MODES, _MODES, range(n), range(n)):
            yield family_a(n, side, side_mode, back, back_mode)
    if "b" in config.families:
        for compare, subtract in product(range(n), range(n)):
            yield family_b(n, compare, subtract)


def candidate_count(config: SearchConfig) -> int:
    """Number of candidates ``iter_candidates`` will yield."""
    per_family = {"a": 4 * config.states**2, "b": config.states**2}
    return sum(per_family[f] for f in config.families)


class SeenOutputs:
    """Ledger of every output vector produced so far.

    Always seeded with the identity so that it can never be accepted.
    """

    def __init__(self, n: int) -> None:
        """Create a ledger holding only the identity of size ``n``."""
        self._keys: set[bytes] = {state_key(identity(n))}

    @classmethod
    def seeded(cls, n: int, outputs: Iterable[State]) -> "SeenOutputs":
        """Create a ledger pre-seeded with the identity and ``outputs``."""
        ledger = cls(n)
        for output in outputs:
            ledger.add(output)
        return ledger

    def __contains__(self, state: State) -> bool:
        return state_key(state) in self._keys

    def __len__(self) -> int:
        return len(self._keys)

    def add(self, state: State) -> None:
        """Register ``state`` as seen."""
        self._keys.add(state_key(state))


def accept(candidate: Layer, seen: SeenOutputs, required: int) -> bool:
    """Decide whether a candidate joins the collection.

    Duplicates (including the identity) are rejected first, then layers with
    fewer than ``required`` distinct outputs.  Accepted outputs are registered
    in ``seen``.

    Args:
        candidate: Layer under test.
        seen: Seen-outputs ledger, updated on acceptance.
        required: Minimum distinct count.

    Returns:
        True if the candidate was accepted.
    """
    if candidate.output in seen:
        return False
    if candidate.distinct < required:
        return False
    seen.add(candidate.output)
    return True


class LayerCollection:
    """Ordered arena of surviving layers; an index is a layer's identity.

    Attributes:
        states: State-space size N.
        layers: The layers, in acceptance order.
    """

    def __init__(self, states: int, layers: Iterable[Layer] = ()) -> None:
        """Initialize the collection.

        Args:
            states: State-space size N.
            layers: Initial layers, in index order.
        """
        self.states = states
        self.layers: list[Layer] = list(layers)

    def __len__(self) -> int:
        return len(self.layers)

    def __getitem__(self, index: int) -> Layer:
        return self.layers[index]

    def __iter__(self) -> Iterator[Layer]:
        return iter(self.layers)

    def append(self, layer: Layer) -> int:
        """Append ``layer`` and return its index."""
        self.layers.append(layer)
        return len(self.layers) - 1

    def outputs(self) -> list[State]:
        """Output tables of every layer, by index."""
        return [layer.output for layer in self.layers]

    def edges(self) -> list[tuple[int, int]]:
        """All ``(parent, child)`` composability edges, grouped by parent."""
        return [(p, c) for p, layer in enumerate(self.layers) for c in layer.children]

    def edge_count(self) -> int:
        """Total number of composability edges."""
        return sum(len(layer.children) for layer in self.layers)

    def to_dict(self) -> list[dict[str, Any]]:
        """Serializable view of every layer."""
        return [layer.to_dict() for layer in self.layers]


def generate_all(config: SearchConfig, progress: ProgressReporter | None = None) -> LayerCollection:
    """Enumerate, deduplicate and filter every candidate layer.

    Args:
        config: Run configuration.
        progress: Reporter for the generation stage; chosen from
            ``config.progress`` when omitted.

    Returns:
        Collection of accepted layers in enumeration order.
    """
    total = candidate_count(config)
    if progress is None:
        progress = make_progress(config, Stage.LAYER_GEN, total, "Generating layers", "layers")
    seen = SeenOutputs(config.states)
    collection = LayerCollection(config.states)
    required = config.required_distinct
    for candidate in iter_candidates(config):
        progress.advance(1)
        if accept(candidate, seen, required):
            collection.append(candidate)
    progress.finish("All Layers Generated", len(collection))
    logger.info("Generated %d layers from %d candidates (required distinct %d)", len(collection), total, required)
    return collection
