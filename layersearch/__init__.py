"""Layer search - comparator layer enumeration and chain search.

Pipeline: config -> layer generation -> composability graph -> chain search

Modules:
    config: Immutable run configuration and target presets
    state: State vector primitives (comparator, apply, distinct count)
    layers: Layer families, deduplication ledger and collection
    graph: Composability graph construction and networkx export
    cache: LRU cache of infeasible search nodes
    search: Memoized iterative-deepening chain search
    progress: tqdm-backed progress reporters
    report: JSON report of a run
    pipeline: End-to-end driver
"""

from layersearch.config import GoalMode, SearchConfig, Stage
from layersearch.graph import build_edges, to_networkx
from layersearch.layers import Layer, LayerCollection, SeenOutputs, accept, generate_all
from layersearch.pipeline import PipelineResult, run_pipeline
from layersearch.search import ChainSearch, SearchOutcome, SearchResult, find_chain

__version__ = "0.1.0"

__all__ = [
    "GoalMode",
    "SearchConfig",
    "Stage",
    "Layer",
    "LayerCollection",
    "SeenOutputs",
    "accept",
    "generate_all",
    "build_edges",
    "to_networkx",
    "ChainSearch",
    "SearchOutcome",
    "SearchResult",
    "find_chain",
    "PipelineResult",
    "run_pipeline",
]
