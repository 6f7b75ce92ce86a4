#!/usr/bin/env python3
"""Diagram tool CLI - batch edits on diagram files, one JSON object per run."""

import argparse
import json
import sys

from pydantic import ValidationError

from diagram_core.errors import DiagramError

from . import config, operations


def _json_out(data, code=0):
    print(json.dumps(data))
    sys.exit(code)


def _error(message):
    _json_out({"status": "error", "error": message}, code=1)


def _parse_list_arg(value, name):
    """Parse a JSON list argument, failing the command if it isn't one."""
    try:
        parsed = json.loads(value)
    except (json.JSONDecodeError, TypeError):
        _error(f"{name} must be a JSON list")
    if not isinstance(parsed, list) or not parsed:
        _error(f"{name} must be a non-empty JSON list")
    return parsed


def _parse_object_arg(value, name):
    if value is None:
        return None
    try:
        parsed = json.loads(value)
    except (json.JSONDecodeError, TypeError):
        parsed = None
    if not isinstance(parsed, dict):
        _error(f"{name} must be a JSON object")
    return parsed


def _run(operation, *args, **kwargs):
    try:
        _json_out(operation(*args, **kwargs))
    except ValidationError as e:
        _error(f"Invalid input: {e}")
    except DiagramError as e:
        _error(str(e))


# ── Diagram files ────────────────────────────────────────────────────────────

def cmd_new(args):
    _run(operations.create_diagram, args.file_path)


def cmd_inspect(args):
    _run(operations.inspect_diagram, args.file_path, top_n=args.top_n)


# ── Batch edits ──────────────────────────────────────────────────────────────

def cmd_add_nodes(args):
    nodes = _parse_list_arg(args.nodes, "--nodes")
    layout = _parse_object_arg(args.layout, "--layout")
    _run(operations.add_nodes, args.file_path, nodes, layout=layout)


def cmd_edit_nodes(args):
    _run(operations.edit_nodes, args.file_path, _parse_list_arg(args.nodes, "--nodes"))


def cmd_link_nodes(args):
    _run(operations.link_nodes, args.file_path, _parse_list_arg(args.edges, "--edges"))


def cmd_remove_nodes(args):
    _run(operations.remove_nodes, args.file_path, _parse_list_arg(args.ids, "--ids"))


# ── Service ──────────────────────────────────────────────────────────────────

def cmd_serve(args):
    from .main import run

    run(host=args.host, port=args.port)


def build_parser():
    parser = argparse.ArgumentParser(prog="diagram-tool", description="Diagram tool CLI")
    parser.add_argument("--log-level", default=None, help="Overrides DIAGRAM_TOOL_LOG_LEVEL")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("new", help="Create an empty diagram file")
    p.add_argument("file_path")

    p = sub.add_parser("add-nodes", help="Add nodes from a JSON list")
    p.add_argument("file_path")
    p.add_argument("--nodes", required=True)
    p.add_argument("--layout", default=None, help='e.g. {"algorithm": "hierarchical"}')

    p = sub.add_parser("edit-nodes", help="Update nodes or edges from a JSON list")
    p.add_argument("file_path")
    p.add_argument("--nodes", required=True)

    p = sub.add_parser("link-nodes", help="Create or update edges from a JSON list")
    p.add_argument("file_path")
    p.add_argument("--edges", required=True)

    p = sub.add_parser("remove-nodes", help="Remove nodes or edges by id")
    p.add_argument("file_path")
    p.add_argument("--ids", required=True)

    p = sub.add_parser("inspect", help="Show contents, summary and issues")
    p.add_argument("file_path")
    p.add_argument("--top-n", type=int, default=5)

    p = sub.add_parser("serve", help="Run the HTTP backend")
    p.add_argument("--host", default=None)
    p.add_argument("--port", type=int, default=None)

    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    config.configure_logging(args.log_level)

    cmd_map = {
        "new": cmd_new,
        "add-nodes": cmd_add_nodes,
        "edit-nodes": cmd_edit_nodes,
        "link-nodes": cmd_link_nodes,
        "remove-nodes": cmd_remove_nodes,
        "inspect": cmd_inspect,
        "serve": cmd_serve,
    }
    cmd_map[args.command](args)


if __name__ == "__main__":
    main()
