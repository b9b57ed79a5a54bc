"""Command line entry point: ``python -m layersearch``."""

import argparse
import logging
from pathlib import Path

from tabulate import tabulate

from layersearch.config import (
    ALL_STAGES,
    DEFAULT_CACHE_CAPACITY,
    DEFAULT_MAX_DEPTH,
    DEFAULT_STATES,
    FAMILIES,
    TARGET_PRESETS,
    GoalMode,
    SearchConfig,
)
from layersearch.pipeline import PipelineResult, run_pipeline
from layersearch.report import write_report
from layersearch.utils import setup_logging


def parse_target(text: str, states: int) -> tuple[int, ...]:
    """Resolve ``--target`` to a vector.

    Args:
        text: A preset name or comma-separated integers.
        states: State-space size.

    Returns:
        The target vector (validated later by ``SearchConfig``).
    """
    if text in TARGET_PRESETS:
        return TARGET_PRESETS[text](states)
    try:
        return tuple(int(part) for part in text.split(","))
    except ValueError as exc:
        raise ValueError(f"target must be a preset {sorted(TARGET_PRESETS)} or comma-separated integers") from exc


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="layersearch", description="Enumerate comparator layers and search for a chain reaching a target"
    )
    parser.add_argument("--states", type=int, default=DEFAULT_STATES, help="State-space size N")
    parser.add_argument(
        "--target", type=str, default="zeros", help=f"Preset {sorted(TARGET_PRESETS)} or comma-separated values"
    )
    parser.add_argument("--goal", choices=[g.value for g in GoalMode], default=GoalMode.EXACT.value)
    parser.add_argument("--max-depth", type=int, default=DEFAULT_MAX_DEPTH)
    parser.add_argument("--cache-capacity", type=int, default=DEFAULT_CACHE_CAPACITY)
    parser.add_argument("--time-limit", type=float, default=None, help="Search budget in seconds")
    parser.add_argument("--node-limit", type=int, default=None, help="Search budget in expanded nodes")
    parser.add_argument("--families", type=str, default=",".join(FAMILIES), help="Generator families, e.g. a,b")
    parser.add_argument("--no-search", action="store_true", help="Stop after building the graph")
    parser.add_argument("--report", type=Path, default=None, help="Write a JSON report to this path")
    parser.add_argument("--log-file", type=str, default=None, help="Log to this file instead of stderr")
    parser.add_argument("--log-level", type=str, default="INFO")
    parser.add_argument("--quiet", action="store_true", help="Disable progress bars")
    return parser


def config_from_args(args: argparse.Namespace) -> SearchConfig:
    """Build a validated ``SearchConfig`` from parsed arguments."""
    return SearchConfig(
        states=args.states,
        target=parse_target(args.target, args.states),
        max_depth=args.max_depth,
        cache_capacity=args.cache_capacity,
        goal=GoalMode(args.goal),
        time_limit=args.time_limit,
        node_limit=args.node_limit,
        families=tuple(f.strip() for f in args.families.split(",") if f.strip()),
        progress=frozenset() if args.quiet else ALL_STAGES,
    )


def print_summary(result: PipelineResult) -> None:
    """Print a tabulate summary of the run."""
    collection = result.collection
    search = result.search
    rows = [
        ["layers", len(collection), f"{result.timings.get('generate', 0.0):.4f}"],
        ["edges", collection.edge_count(), f"{result.timings.get('graph', 0.0):.4f}"],
        ["search", search.outcome.value, f"{result.timings.get('search', 0.0):.4f}"],
    ]
    print(tabulate(rows, headers=["stage", "result", "seconds"], tablefmt="simple"))
    if search.found:
        chain_rows = [
            [step + 1, index, layer.notation, state.tolist()]
            for step, (index, layer, state) in enumerate(zip(search.indices, search.layers, search.states))
        ]
        print(tabulate(chain_rows, headers=["step", "layer", "notation", "state"], tablefmt="simple"))


def main(argv: list[str] | None = None) -> int:
    """Run the command line interface.

    Args:
        argv: Arguments to parse; ``sys.argv`` when omitted.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        config = config_from_args(args)
    except ValueError as exc:
        parser.error(str(exc))
    level = logging.getLevelName(args.log_level.upper())
    if not isinstance(level, int):
        parser.error(f"unknown log level {args.log_level}")
    setup_logging(args.log_file, level, msg_width=80, show_metadata=args.log_file is not None)

    result = run_pipeline(config, search=not args.no_search)
    if args.report is not None:
        write_report(args.report, config, result.collection, result.search)
    print_summary(result)
    return 0
