"""Command line interface for nametree."""

from __future__ import annotations

import argparse
import json
import os
import sys
from typing import Optional, Sequence, Tuple

from .api import Metadata, generate_tree, load_source
from .errors import MissingDataSourceError
from .export import export_tree
from .layout import DEFAULT_HORIZONTAL_GAP, DEFAULT_VERTICAL_SPACING, LayoutConfig, Orientation
from .sheets import read_csv_file
from .utils import console, logger, set_log_level


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="nametree", description="Family trees from name-structured text")
    sub = parser.add_subparsers(dest="command", required=True)

    build = sub.add_parser("build", help="Resolve input lines and lay out the family forest")
    build.add_argument("input", nargs="?", help="Input text file, '-' for stdin")
    build.add_argument("--sheet", help="Google Sheets URL to import instead of a text file")
    build.add_argument("--csv", help="Local CSV file with a 'Full Names' column")
    build.add_argument("--out", required=True, help="Output directory")
    build.add_argument(
        "--vertical-spacing",
        type=float,
        default=float(os.getenv("NAMETREE_VERTICAL_SPACING", DEFAULT_VERTICAL_SPACING)),
        help="Pixels between generations",
    )
    build.add_argument(
        "--horizontal-gap",
        type=float,
        default=float(os.getenv("NAMETREE_HORIZONTAL_GAP", DEFAULT_HORIZONTAL_GAP)),
        help="Pixels between sibling subtrees",
    )
    build.add_argument(
        "--orientation",
        default=Orientation.UP_TO_DOWN.value,
        choices=[member.value for member in Orientation],
        help="Direction the generations flow in",
    )
    build.add_argument(
        "--log-level",
        default=os.getenv("NAMETREE_LOG_LEVEL", "INFO"),
        help="Python logging level (DEBUG, INFO, WARNING, ERROR)",
    )
    build.add_argument("--report-path", help="Optional JSON file for the run summary and skipped lines")

    validate = sub.add_parser("validate", help="Validate an exported layout")
    validate.add_argument("path", help="Output directory to validate")

    return parser


def _read_input(args: argparse.Namespace) -> Tuple[str, Optional[Metadata]]:
    if args.sheet:
        return load_source(args.sheet)
    if args.csv:
        sheet = read_csv_file(args.csv)
        return sheet.text, sheet.metadata()
    if not args.input:
        raise SystemExit("Provide an input file, --sheet, or --csv")
    if args.input == "-":
        return sys.stdin.read(), None
    with open(args.input, "r", encoding="utf-8") as fh:
        return fh.read(), None


def run_build(args: argparse.Namespace) -> None:
    set_log_level(args.log_level)
    config = LayoutConfig(
        vertical_spacing=args.vertical_spacing,
        horizontal_gap=args.horizontal_gap,
        orientation=Orientation.parse(args.orientation),
    )
    try:
        text, metadata = _read_input(args)
    except MissingDataSourceError as exc:
        raise SystemExit(str(exc)) from exc
    result = generate_tree(text, config, metadata)

    skipped = result.skipped_summary()
    if skipped:
        console.log(f"[yellow]Skipped {len(skipped)} malformed line(s)[/yellow]")
        for message in skipped:
            console.log(f"[yellow]{message}[/yellow]")
    unplaced = result.unplaced
    if result.layout_error is not None:
        console.log(f"[red]{result.layout_error}[/red]")
        console.log(f"[red]Left {len(unplaced)} node(s) out of the layout[/red]")
    paths = export_tree(result, args.out)
    summary = {
        "people": len(result.people),
        "unions": len(result.resolution.union_keys),
        "nodes": len(result.forest.nodes),
        "edges": len(result.forest.edges),
        "skipped": skipped,
        "unplaced": unplaced,
        "orientation": config.orientation.value,
    }
    logger.info("Generated %d people into %d layout nodes", summary["people"], summary["nodes"])
    console.log(paths)
    if args.report_path:
        with open(args.report_path, "w", encoding="utf-8") as fh:
            json.dump(summary, fh, indent=2)
        console.log(f"Run summary saved to {args.report_path}")


def run_validate(path: str) -> None:
    nodes_path = os.path.join(path, "nodes.json")
    edges_path = os.path.join(path, "edges.json")
    if not os.path.exists(nodes_path) or not os.path.exists(edges_path):
        raise SystemExit("Missing nodes.json or edges.json")
    with open(nodes_path, "r", encoding="utf-8") as fh:
        nodes = json.load(fh)
    with open(edges_path, "r", encoding="utf-8") as fh:
        edges = json.load(fh)
    node_ids = {node["id"] for node in nodes}
    missing = [edge for edge in edges if edge["source"] not in node_ids or edge["target"] not in node_ids]
    unplaced = [
        node["id"]
        for node in nodes
        if not isinstance(node.get("x"), (int, float)) or not isinstance(node.get("y"), (int, float))
    ]
    console.log(f"Nodes: {len(nodes)} Edges: {len(edges)}")
    if missing:
        raise SystemExit(f"Edges reference missing nodes: {missing[:3]}")
    if unplaced:
        raise SystemExit(f"Nodes without coordinates: {unplaced[:3]}")
    console.log("Validation OK")


def main(argv: Sequence[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command == "build":
        run_build(args)
    elif args.command == "validate":
        run_validate(args.path)
    else:  # pragma: no cover - defensive
        parser.print_help()


if __name__ == "__main__":  # pragma: no cover
    main()
