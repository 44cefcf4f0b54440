#!/usr/bin/env python3
"""Auto layout CLI - lay out, analyze, or validate a graph JSON file.

The input file (or stdin with "-") holds:
    {"nodes": [...], "connections": [...], "options": {...}}
"edges" is accepted in place of "connections".
"""

import argparse
import json
import logging
import sys

from .analysis import analyze_graph, select_algorithm
from .graph import LayoutGraph
from .layout import compute_layout, resolve_options
from .models import Connection, LayoutOptionsError, Node
from .validation import validate_graph, validation_summary


def _json_out(data, code=0, indent=None):
    print(json.dumps(data, indent=indent))
    sys.exit(code)


def _error(message):
    _json_out({"status": "error", "error": message}, code=1)


def _load_graph(path):
    """Read nodes, connections, and options from a JSON file or stdin."""
    try:
        if path == "-":
            data = json.load(sys.stdin)
        else:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
    except FileNotFoundError:
        _error(f"File not found: {path}")
    except json.JSONDecodeError as e:
        _error(f"Invalid JSON in {path}: {e}")

    if not isinstance(data, dict):
        _error("Expected a JSON object with 'nodes' and 'connections'")

    connections = data.get("connections", data.get("edges", []))
    return data.get("nodes", []), connections, data.get("options", {})


def _parse_models(nodes, connections):
    try:
        return (
            [Node.model_validate(n) for n in nodes],
            [Connection.model_validate(c) for c in connections],
        )
    except ValueError as e:
        _error(f"Invalid graph: {e}")


# ── Commands ─────────────────────────────────────────────────────────────────

def cmd_layout(args):
    nodes, connections, options = _load_graph(args.file)
    options = dict(options)

    if args.algorithm:
        options["algorithm"] = args.algorithm
    if args.direction:
        if "hierarchical" in options:
            options["layered"] = {**options.pop("hierarchical"), **options.get("layered", {})}
        for key in ("layered", "tree"):
            options[key] = {**options.get(key, {}), "direction": args.direction}
    if args.iterations is not None or args.seed is not None:
        force = dict(options.get("force", {}))
        if args.iterations is not None:
            force["iterations"] = args.iterations
        if args.seed is not None:
            force["seed"] = args.seed
        options["force"] = force

    try:
        result = compute_layout(nodes, connections, options)
    except LayoutOptionsError as e:
        _error(str(e))

    output = result.to_json_dict()
    if args.apply:
        node_models, _ = _parse_models(nodes, [])
        output["nodes"] = [n.model_dump(mode="json") for n in result.apply_to(node_models)]
    _json_out({"status": "ok", **output}, indent=args.indent)


def cmd_analyze(args):
    nodes, connections, options = _load_graph(args.file)
    node_models, connection_models = _parse_models(nodes, connections)
    try:
        opts = resolve_options(options)
        graph = LayoutGraph.build(node_models, connection_models, opts.node_sizes)
    except LayoutOptionsError as e:
        _error(str(e))

    characteristics = analyze_graph(graph)
    _json_out({
        "status": "ok",
        "characteristics": characteristics.to_dict(),
        "recommended_algorithm": select_algorithm(characteristics).value,
    }, indent=args.indent)


def cmd_validate(args):
    nodes, connections, options = _load_graph(args.file)
    node_models, connection_models = _parse_models(nodes, connections)
    try:
        opts = resolve_options(options)
    except LayoutOptionsError as e:
        _error(str(e))

    issues = validate_graph(node_models, connection_models, opts.node_sizes)
    summary = validation_summary(issues)
    _json_out({
        "status": "ok",
        "issues": [i.to_dict() for i in issues],
        "summary": summary,
    }, code=0 if summary["valid"] else 1, indent=args.indent)


def build_parser():
    parser = argparse.ArgumentParser(prog="autolayout", description="Automatic graph layout")
    parser.add_argument("--indent", type=int, default=None, help="Pretty-print JSON output")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug output to stderr")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("layout", help="Compute node positions")
    p.add_argument("file", help="Graph JSON file, or - for stdin")
    p.add_argument("--algorithm", choices=["auto", "force", "layered", "tree", "grid"])
    p.add_argument("--direction", choices=["TB", "BT", "LR", "RL"])
    p.add_argument("--iterations", type=int, help="Force-directed iteration budget")
    p.add_argument("--seed", type=int, help="Seed for force-directed overlap jitter")
    p.add_argument("--apply", action="store_true", help="Include the moved nodes in the output")
    p.set_defaults(func=cmd_layout)

    p = sub.add_parser("analyze", help="Report graph characteristics")
    p.add_argument("file", help="Graph JSON file, or - for stdin")
    p.set_defaults(func=cmd_analyze)

    p = sub.add_parser("validate", help="Report structural issues")
    p.add_argument("file", help="Graph JSON file, or - for stdin")
    p.set_defaults(func=cmd_validate)

    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        stream=sys.stderr,
        format="%(levelname)s %(name)s: %(message)s",
    )
    args.func(args)


if __name__ == "__main__":
    main()
