"""Composability graph construction.

For every ordered pair ``(parent, child)`` of layers, including self pairs,
the child is recorded in ``parent.children`` when routing the parent's
output through the child yields an output that

1. has never been seen (identity, any layer output, any earlier composition), and
2. keeps at least ``required_distinct`` distinct values.

The exact distinct count is skipped whenever a cheap worst-case bound
already proves condition 2.  The bound is a true lower bound on the composed
distinct count, so skipping never changes a decision.
"""

import logging
from collections.abc import Iterable

import networkx as nx
import numpy as np

from layersearch.config import SearchConfig, Stage
from layersearch.layers import LayerCollection, SeenOutputs
from layersearch.progress import ProgressReporter, make_progress
from layersearch.state import State, apply, distinct_count

logger = logging.getLogger(__name__)


def worst_case_distinct(child_distinct: int, parent_distinct: int, states: int) -> int:
    """Lower bound on the distinct count of ``child`` applied after ``parent``.

    The parent collapses ``states - parent_distinct`` inputs, so the child sees
    at least ``parent_distinct`` of its inputs and loses at most that many
    distinct outputs (plus one of slack).

    Args:
        child_distinct: Distinct count of the child's output table.
        parent_distinct: Distinct count of the parent's output table.
        states: State-space size N.

    Returns:
        Guaranteed minimum distinct count of the composition.
    """
    return child_distinct - min(child_distinct, states - parent_distinct + 1)


def is_useful(composed: State, worst: int, required: int) -> bool:
    """Apply the distinctness rule with the bound short-circuit.

    Rejects iff ``worst < required`` and the exact count is below ``required``.
    """
    return worst >= required or distinct_count(composed) >= required


def _judge(composed: State, worst: int, required: int, seen: SeenOutputs) -> bool:
    """Accept a composition and register it, or reject it untouched."""
    if composed in seen:
        return False
    if not is_useful(composed, worst, required):
        return False
    seen.add(composed)
    return True


def build_edges(
    collection: LayerCollection,
    config: SearchConfig,
    progress: ProgressReporter | None = None,
    order: Iterable[tuple[int, int]] | None = None,
) -> int:
    """Populate ``children`` of every layer in ``collection``.

    Decisions are made against a snapshot of every layer's output and
    distinct count taken before the pass.  The ledger is re-seeded with the
    identity and every layer output.

    Args:
        collection: Layers to connect; mutated in place.
        config: Run configuration.
        progress: Reporter for this stage; chosen from ``config.progress`` when omitted.
        order: Optional explicit ``(parent, child)`` evaluation order.  Defaults
            to row-major over all pairs.

    Returns:
        Number of edges added.
    """
    size = len(collection)
    states = config.states
    required = config.required_distinct
    if progress is None:
        progress = make_progress(config, Stage.LAYER_POP, size * size, "Populating children", "pairs")

    outputs = collection.outputs()
    distincts = [layer.distinct for layer in collection]
    tables = np.stack(outputs) if outputs else np.empty((0, states), dtype=np.uint8)
    seen = SeenOutputs.seeded(states, outputs)
    added = 0

    if order is None:
        for parent_index in range(size):
            parent_distinct = distincts[parent_index]
            composed_row = tables[:, outputs[parent_index]]
            for child_index in range(size):
                worst = worst_case_distinct(distincts[child_index], parent_distinct, states)
                if _judge(composed_row[child_index], worst, required, seen):
                    collection[parent_index].children.append(child_index)
                    added += 1
            progress.advance(size)
    else:
        for parent_index, child_index in order:
            composed = apply(outputs[child_index], outputs[parent_index])
            worst = worst_case_distinct(distincts[child_index], distincts[parent_index], states)
            if _judge(composed, worst, required, seen):
                collection[parent_index].children.append(child_index)
                added += 1
            progress.advance(1)

    progress.finish("All Pairs Generated", added)
    parents = sum(1 for layer in collection if layer.valid_parent)
    logger.info("Built %d edges over %d layers (%d valid parents)", added, size, parents)
    return added


def to_networkx(collection: LayerCollection) -> nx.DiGraph:
    """Export the composability graph as a networkx digraph.

    Nodes are layer indices carrying ``notation`` and ``distinct`` attributes.

    Args:
        collection: Collection with populated children.

    Returns:
        Directed graph with one edge per parent-child relation.
    """
    graph = nx.DiGraph()
    for index, layer in enumerate(collection):
        graph.add_node(index, notation=layer.notation, distinct=layer.distinct)
    graph.add_edges_from(collection.edges())
    return graph
