"""Command line entry point for conceptgraph.

Usage:
    python -m conceptgraph layout graph.yaml --layout circular
    python -m conceptgraph path graph.yaml algebra calculus
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from tqdm import tqdm

from conceptgraph.config import GraphSettings, LayoutKind, load_settings
from conceptgraph.exceptions import ConfigurationError, UnknownNodeError, ValidationError
from conceptgraph.graph_model import GraphModel
from conceptgraph.layout import compute_layout
from conceptgraph.pathfinding import PathFinder
from conceptgraph.selection import SelectionIndex
from conceptgraph.snapshot import load_snapshot

logger = logging.getLogger(__name__)


def configure_logging(verbose: bool = False) -> None:
    """Log to stderr and to logs/conceptgraph.log; stdout carries the YAML output."""
    log_dir = Path("logs")
    log_dir.mkdir(exist_ok=True)

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(sys.stderr),
            logging.FileHandler(log_dir / "conceptgraph.log", encoding="utf-8"),
        ],
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="conceptgraph",
        description="Lay out and query knowledge graph snapshots",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    layout = subparsers.add_parser("layout", help="compute node positions")
    layout.add_argument("snapshot", type=Path)
    layout.add_argument("--config", type=Path, help="YAML settings file")
    layout.add_argument("--layout", choices=[kind.value for kind in LayoutKind])
    layout.add_argument("--iterations", type=int)
    layout.add_argument("--seed", type=int, default=0)
    layout.add_argument("--progress", action="store_true", help="show a progress bar")

    path = subparsers.add_parser("path", help="find a learning path")
    path.add_argument("snapshot", type=Path)
    path.add_argument("start")
    path.add_argument("end")

    select = subparsers.add_parser("select", help="highlight a node and its neighbours")
    select.add_argument("snapshot", type=Path)
    select.add_argument("node")

    search = subparsers.add_parser("search", help="find nodes by label")
    search.add_argument("snapshot", type=Path)
    search.add_argument("query")

    stats = subparsers.add_parser("stats", help="summarize a snapshot")
    stats.add_argument("snapshot", type=Path)

    return parser


def run_layout(graph: GraphModel, args: argparse.Namespace) -> Dict[str, Any]:
    settings = load_settings(args.config) if args.config else GraphSettings()
    overrides: Dict[str, Any] = {}
    if args.layout:
        overrides["layout"] = args.layout
    if args.iterations is not None:
        overrides["iterations"] = args.iterations
    if overrides:
        merged = settings.to_dict()
        merged.update(overrides)
        settings = GraphSettings.from_dict(merged)

    show_progress = args.progress and settings.layout is LayoutKind.FORCE
    with tqdm(total=settings.iterations, desc="Force layout", disable=not show_progress, file=sys.stderr) as bar:
        positions = compute_layout(
            graph,
            settings,
            seed=args.seed,
            progress_callback=lambda done, total: bar.update(1),
        )

    return {
        "layout": settings.layout.value,
        "seed": args.seed,
        "positions": {node_id: {"x": p.x, "y": p.y} for node_id, p in positions.items()},
    }


def run_command(args: argparse.Namespace) -> Dict[str, Any]:
    graph = load_snapshot(args.snapshot)

    if args.command == "layout":
        return run_layout(graph, args)
    if args.command == "path":
        path = PathFinder(graph).find(args.start, args.end)
        return {"start": args.start, "end": args.end, "found": path is not None, "path": path}
    if args.command == "select":
        selection = SelectionIndex(graph).select(args.node)
        return {
            "node": args.node,
            "nodes": sorted(selection.nodes),
            "edges": [[edge.source, edge.target] for edge in selection.edges],
        }
    if args.command == "search":
        return {"query": args.query, "matches": sorted(SelectionIndex(graph).search(args.query))}

    stats = graph.statistics()
    return {
        "nodes": stats.node_count,
        "edges": stats.edge_count,
        "average_mastery": stats.average_mastery,
        "total_learning_time": stats.total_learning_time,
    }


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the command line tool."""
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    try:
        result = run_command(args)
    except (FileNotFoundError, ValidationError, ConfigurationError) as e:
        logger.error(f"{args.command} failed: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except UnknownNodeError as e:
        logger.error(f"Unknown node: {e}")
        print(f"Error: unknown node {e}", file=sys.stderr)
        return 1

    yaml.safe_dump(result, sys.stdout, sort_keys=False)
    return 0


if __name__ == "__main__":
    sys.exit(main())
