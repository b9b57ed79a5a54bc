"""JSON report of a layer-search run.

The report holds the configuration, every layer with its children and the
search section.  It is written atomically so a reader never sees a partial
file.
"""

import json
from pathlib import Path
from typing import Any

from layersearch.config import SearchConfig
from layersearch.layers import LayerCollection
from layersearch.search import SearchResult


def config_to_dict(config: SearchConfig) -> dict[str, Any]:
    """Serializable view of a run configuration."""
    return {
        "states": config.states,
        "target": list(config.target),
        "required_distinct": config.required_distinct,
        "goal": config.goal.value,
        "max_depth": config.max_depth,
        "cache_capacity": config.cache_capacity,
        "time_limit": config.time_limit,
        "node_limit": config.node_limit,
        "families": list(config.families),
    }


def build_report(config: SearchConfig, collection: LayerCollection, result: SearchResult) -> dict[str, Any]:
    """Assemble the report dictionary.

    Args:
        config: Run configuration.
        collection: Layers with populated children.
        result: Search result, ``SearchResult.not_attempted()`` when skipped.

    Returns:
        JSON-serializable report.
    """
    return {
        "config": config_to_dict(config),
        "graph": {
            "layers": len(collection),
            "edges": collection.edge_count(),
            "valid_parents": sum(1 for layer in collection if layer.valid_parent),
        },
        "layers": collection.to_dict(),
        "search": result.to_dict(),
    }


def write_report(path: Path, config: SearchConfig, collection: LayerCollection, result: SearchResult) -> None:
    """Atomically write the JSON report to ``path``.

    Args:
        path: Destination file.
        config: Run configuration.
        collection: Layers with populated children.
        result: Search result.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    data = build_report(config, collection, result)
    tmp_path = path.with_suffix(".tmp")
    tmp_path.write_text(json.dumps(data, indent=2) + "\n")
    tmp_path.rename(path)


def load_report(path: Path) -> dict[str, Any]:
    """Read a report written by ``write_report``."""
    return json.loads(path.read_text())
