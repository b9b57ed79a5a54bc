"""End-to-end driver: generate layers, build the graph, search for a chain."""

import logging
import time
from dataclasses import dataclass, field

from tqdm import tqdm

from layersearch.config import SearchConfig, Stage
from layersearch.graph import build_edges
from layersearch.layers import LayerCollection, generate_all
from layersearch.search import SearchResult, find_chain

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    """Artifacts of one run.

    Attributes:
        config: Configuration the run used.
        collection: Layers with populated children.
        search: Search result (``NOT_ATTEMPTED`` when skipped).
        timings: Wall-clock seconds per stage.
    """

    config: SearchConfig
    collection: LayerCollection
    search: SearchResult
    timings: dict[str, float] = field(default_factory=dict)


def run_pipeline(config: SearchConfig, search: bool = True) -> PipelineResult:
    """Run every stage in order.

    Args:
        config: Run configuration.
        search: Whether to run the chain search after building the graph.

    Returns:
        The collection and search result of the run.
    """
    if config.reports(Stage.INITIAL):
        tqdm.write(f"Search started for {list(config.target)}")
    logger.info("Run started: states=%d target=%s goal=%s", config.states, list(config.target), config.goal.value)
    timings: dict[str, float] = {}

    start = time.perf_counter()
    collection = generate_all(config)
    timings["generate"] = time.perf_counter() - start

    start = time.perf_counter()
    build_edges(collection, config)
    timings["graph"] = time.perf_counter() - start

    result = SearchResult.not_attempted()
    if search:
        start = time.perf_counter()
        result = find_chain(collection, config)
        timings["search"] = time.perf_counter() - start
    else:
        logger.info("Search skipped")

    return PipelineResult(config=config, collection=collection, search=result, timings=timings)
