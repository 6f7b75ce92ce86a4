#!/usr/bin/env python3
"""
Diagram Tool MCP Server

Provides MCP tools for AI agents to build and edit diagram files.
Every tool forwards to the diagram tool backend over HTTP, so the backend
must be running (`diagram-tool serve`).
"""

import json
import logging
import os
from typing import Any, Optional

import httpx
from mcp.server.fastmcp import FastMCP

# Backend API URL
API_BASE = os.environ.get("DIAGRAM_TOOL_API_BASE", "http://127.0.0.1:8765/api")

logger = logging.getLogger(__name__)

# Create MCP server
mcp = FastMCP("diagram-tool")


class BackendError(Exception):
    """The backend rejected a request or could not be reached."""


# --- HTTP Client Helper ---

def api_request(method: str, endpoint: str, **kwargs) -> dict:
    """Make a request to the diagram tool backend."""
    url = f"{API_BASE}{endpoint}"
    try:
        with httpx.Client(timeout=30.0) as client:
            if method == "GET":
                response = client.get(url, params=kwargs.get("params"))
            elif method == "POST":
                response = client.post(url, json=kwargs.get("json"))
            elif method == "PATCH":
                response = client.patch(url, json=kwargs.get("json"))
            else:
                raise ValueError(f"Unknown method: {method}")
    except httpx.TransportError as e:
        raise BackendError(f"Connection failed: {e}. Is the diagram tool backend running?") from e

    if response.status_code >= 400:
        try:
            error = response.json().get("detail", "Unknown error")
        except ValueError:
            error = response.text
        logger.info("%s %s failed (%d): %s", method, endpoint, response.status_code, error)
        raise BackendError(f"API error: {error}")

    return response.json()


# ============================================================================
# FILE TOOLS
# ============================================================================

@mcp.tool()
def new_diagram(file_path: str) -> str:
    """
    Create an empty diagram file, replacing any existing content.

    Args:
        file_path: Path of the .svg diagram file

    Returns the written file path.
    """
    result = api_request("POST", "/diagram/new", json={"file_path": file_path})
    return json.dumps(result, indent=2)


@mcp.tool()
def get_diagram_info(file_path: str) -> str:
    """
    Describe a diagram file.

    Args:
        file_path: Path of the .svg diagram file

    Returns every node and edge with its style, a structural summary
    (counts by kind, connected components, most connected nodes) and any
    validation issues. Use this before editing an existing diagram.
    """
    result = api_request("GET", "/diagram", params={"file_path": file_path})
    return json.dumps(result, indent=2)


# ============================================================================
# NODE TOOLS
# ============================================================================

@mcp.tool()
def add_nodes(
    file_path: str,
    nodes: list[dict[str, Any]],
    layout: Optional[dict[str, Any]] = None
) -> str:
    """
    Add one or more nodes to a diagram.

    Args:
        file_path: Path of the .svg diagram file (created if missing)
        nodes: Nodes to add. Each has:
            - id: Unique node id (required)
            - title: Label text
            - kind: Rectangle, RoundedRectangle, Ellipse, Circle, Square,
              Step, Cylinder, Cloud, Actor or Text (default Rectangle)
            - x, y: Position (default 10, 10)
            - width, height: Size (default from kind)
            - parent: Id of a container node ("root" for top level)
            - corner_radius: RoundedRectangle corner radius
            - fillColor, strokeColor, fontColor, strokeWidth, fontSize,
              fontStyle (1 bold, 2 italic, 4 underline), fontFamily, opacity
        layout: Optional layout to run once after adding, e.g.
            {"algorithm": "hierarchical", "options": {"direction": "left-right"}}.
            Algorithms: hierarchical, circle, organic, compact-tree,
            radial-tree, partition, stack

    If any node is invalid, nothing is added.
    """
    payload = {"file_path": file_path, "nodes": nodes}
    if layout:
        payload["layout"] = layout
    result = api_request("POST", "/nodes", json=payload)
    return json.dumps(result, indent=2)


@mcp.tool()
def edit_nodes(file_path: str, nodes: list[dict[str, Any]]) -> str:
    """
    Update existing nodes or edges. Only the fields given change.

    Args:
        file_path: Path of the .svg diagram file
        nodes: Updates. Each has an id plus any of title, kind, x, y,
            width, height, corner_radius and the style keys accepted by
            add_nodes. Changing kind resets the node's style to that kind.
            Edge ids (like "a-2-b") accept title and style keys only.
    """
    result = api_request("PATCH", "/nodes", json={"file_path": file_path, "nodes": nodes})
    return json.dumps(result, indent=2)


@mcp.tool()
def remove_nodes(file_path: str, ids: list[str]) -> str:
    """
    Remove nodes or edges by id.

    Args:
        file_path: Path of the .svg diagram file
        ids: Node or edge ids. Removing a node also removes its child
            nodes and every edge attached to them.

    Returns the removed ids and the ids that were not found.
    """
    result = api_request("POST", "/nodes/remove", json={"file_path": file_path, "ids": ids})
    return json.dumps(result, indent=2)


# ============================================================================
# EDGE TOOLS
# ============================================================================

@mcp.tool()
def link_nodes(file_path: str, edges: list[dict[str, Any]]) -> str:
    """
    Connect nodes, or update the existing edge between two nodes.

    Args:
        file_path: Path of the .svg diagram file
        edges: Links. Each has:
            - source, target: Node ids (required; "from"/"to" also accepted)
            - title: Edge label
            - dashed, reverse, undirected: Flags
            - edgeStyle: straight, orthogonal, elbow, entity-relation or segment
            - waypoints: [{"x": ..., "y": ...}] routing points
            - strokeColor, strokeWidth, fontColor, fontSize, ...

    A pair of nodes has at most one edge: linking B to A after A to B
    updates the first edge. Returns the edge ids.
    """
    result = api_request("POST", "/edges", json={"file_path": file_path, "edges": edges})
    return json.dumps(result, indent=2)


# ============================================================================
# MAIN
# ============================================================================

if __name__ == "__main__":
    mcp.run()
