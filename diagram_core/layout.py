"""
Layout algorithms for diagram nodes.

Provides the layout strategies a batch of additions can finish with:
- hierarchical: Layered layout following edge directions (top-down or left-right)
- circle: Nodes evenly spaced around a circle
- organic: Force-directed layout using spring physics
- compact-tree: Tidy tree, children packed next to each other
- radial-tree: Tree levels on concentric rings
- partition: Nodes resized to equal cells side by side
- stack: Nodes placed one after another in a row

All layout functions modify nodes in-place and return the modified list.
`run_layout` validates the request and dispatches to exactly one of them.
"""

import logging
import math
from collections import defaultdict
from enum import Enum
from typing import Any, Callable, Mapping, Optional, TYPE_CHECKING

from .errors import LayoutError

if TYPE_CHECKING:
    from .models import Node, Edge


logger = logging.getLogger(__name__)

# Default layout parameters
DEFAULT_SPACING_X = 60
DEFAULT_SPACING_Y = 80
DEFAULT_START_X = 100
DEFAULT_START_Y = 100


class LayoutAlgorithm(str, Enum):
    """Layout algorithms that can be requested."""
    HIERARCHICAL = "hierarchical"
    CIRCLE = "circle"
    ORGANIC = "organic"
    COMPACT_TREE = "compact-tree"
    RADIAL_TREE = "radial-tree"
    PARTITION = "partition"
    STACK = "stack"


class LayoutDirection(str, Enum):
    """Directions accepted by the hierarchical layout."""
    TOP_DOWN = "top-down"
    LEFT_RIGHT = "left-right"


def _center_at(node: "Node", cx: float, cy: float):
    node.x = cx - node.width / 2
    node.y = cy - node.height / 2


def _spanning_forest(
    nodes: list["Node"],
    edges: list["Edge"],
) -> tuple[dict[str, list[str]], list[str]]:
    """
    Build a spanning forest following edge directions.

    Roots are nodes without incoming edges; nodes only reachable through a
    cycle become extra roots. Each node appears exactly once.
    """
    successors: dict[str, list[str]] = {n.id: [] for n in nodes}
    has_parent: set[str] = set()

    for edge in edges:
        if edge.source in successors and edge.target in successors and edge.source != edge.target:
            successors[edge.source].append(edge.target)
            has_parent.add(edge.target)

    children: dict[str, list[str]] = {n.id: [] for n in nodes}
    visited: set[str] = set()
    roots: list[str] = []

    candidates = [n.id for n in nodes if n.id not in has_parent] + [n.id for n in nodes]
    for root in candidates:
        if root in visited:
            continue
        roots.append(root)
        visited.add(root)
        queue = [root]
        while queue:
            current = queue.pop(0)
            for child in successors[current]:
                if child not in visited:
                    visited.add(child)
                    children[current].append(child)
                    queue.append(child)

    return children, roots


def hierarchical_layout(
    nodes: list["Node"],
    edges: list["Edge"],
    direction: LayoutDirection = LayoutDirection.TOP_DOWN,
    spacing_x: float = DEFAULT_SPACING_X,
    spacing_y: float = DEFAULT_SPACING_Y,
    start_x: float = DEFAULT_START_X,
    start_y: float = DEFAULT_START_Y,
) -> list["Node"]:
    """
    Arrange nodes in layers based on edge directions.

    Nodes with no incoming edges form the first layer, their children the
    next one, and so on. Layers run downwards for top-down and rightwards
    for left-right.
    """
    if not nodes:
        return nodes

    children, roots = _spanning_forest(nodes, edges)

    # BFS to assign levels
    levels: dict[str, int] = {}
    queue = [(r, 0) for r in roots]
    while queue:
        node_id, level = queue.pop(0)
        if node_id in levels:
            continue
        levels[node_id] = level
        for child in children[node_id]:
            queue.append((child, level + 1))

    vertical = direction == LayoutDirection.TOP_DOWN

    # Thickness of each layer along the flow axis
    layer_size: dict[int, float] = defaultdict(float)
    for node in nodes:
        size = node.height if vertical else node.width
        layer_size[levels[node.id]] = max(layer_size[levels[node.id]], size)

    layer_offset: dict[int, float] = {}
    offset = start_y if vertical else start_x
    for level in sorted(layer_size):
        layer_offset[level] = offset
        offset += layer_size[level] + (spacing_y if vertical else spacing_x)

    # Position along each layer
    cursor: dict[int, float] = defaultdict(lambda: start_x if vertical else start_y)
    for node in nodes:
        level = levels[node.id]
        if vertical:
            node.x = cursor[level]
            node.y = layer_offset[level]
            cursor[level] += node.width + spacing_x
        else:
            node.x = layer_offset[level]
            node.y = cursor[level]
            cursor[level] += node.height + spacing_y

    return nodes


def circle_layout(
    nodes: list["Node"],
    spacing: float = DEFAULT_SPACING_X,
    start_x: float = DEFAULT_START_X,
    start_y: float = DEFAULT_START_Y,
) -> list["Node"]:
    """Place nodes evenly around a circle large enough to keep them apart."""
    if not nodes:
        return nodes

    largest = max(max(n.width, n.height) for n in nodes)
    radius = max(largest, len(nodes) * (largest + spacing) / (2 * math.pi))
    center_x = start_x + radius + largest / 2
    center_y = start_y + radius + largest / 2

    for i, node in enumerate(nodes):
        angle = 2 * math.pi * i / len(nodes)
        _center_at(node, center_x + radius * math.cos(angle), center_y + radius * math.sin(angle))

    return nodes


def organic_layout(
    nodes: list["Node"],
    edges: list["Edge"],
    iterations: int = 100,
    center_x: float = 400,
    center_y: float = 400,
    repulsion: float = 5000,
    attraction: float = 0.01,
    damping: float = 0.1,
    min_distance: float = 50
) -> list["Node"]:
    """
    Arrange nodes using a force-directed layout algorithm.

    Simulates physical forces:
    - All nodes repel each other (like charged particles)
    - Connected nodes attract each other (like springs)

    Starts from a circle around (center_x, center_y), sized to the nodes,
    so the result is deterministic. `iterations`, `centerX` and `centerY`
    can be passed as layout options.
    """
    if len(nodes) < 2:
        return nodes

    node_map = {n.id: n for n in nodes}

    largest = max(max(n.width, n.height) for n in nodes)
    radius = max(min_distance * 2, len(nodes) * largest / (2 * math.pi))
    for i, node in enumerate(nodes):
        angle = 2 * math.pi * i / len(nodes)
        _center_at(node, center_x + radius * math.cos(angle), center_y + radius * math.sin(angle))

    for _ in range(iterations):
        forces: dict[str, tuple[float, float]] = {n.id: (0.0, 0.0) for n in nodes}

        # Repulsion between all node pairs
        for i, n1 in enumerate(nodes):
            for j in range(i + 1, len(nodes)):
                n2 = nodes[j]
                dx = n1.x - n2.x
                dy = n1.y - n2.y
                dist = max(min_distance, math.sqrt(dx * dx + dy * dy))

                force = repulsion / (dist * dist)
                fx = force * dx / dist
                fy = force * dy / dist

                f1x, f1y = forces[n1.id]
                f2x, f2y = forces[n2.id]
                forces[n1.id] = (f1x + fx, f1y + fy)
                forces[n2.id] = (f2x - fx, f2y - fy)

        # Attraction along edges
        for edge in edges:
            source = node_map.get(edge.source)
            target = node_map.get(edge.target)
            if not source or not target or source is target:
                continue

            dx = target.x - source.x
            dy = target.y - source.y
            dist = max(min_distance, math.sqrt(dx * dx + dy * dy))

            force = dist * attraction
            fx = force * dx / dist
            fy = force * dy / dist

            f1x, f1y = forces[source.id]
            f2x, f2y = forces[target.id]
            forces[source.id] = (f1x + fx, f1y + fy)
            forces[target.id] = (f2x - fx, f2y - fy)

        for node in nodes:
            fx, fy = forces[node.id]
            node.x = max(min_distance, node.x + fx * damping)
            node.y = max(min_distance, node.y + fy * damping)

    return nodes


def compact_tree_layout(
    nodes: list["Node"],
    edges: list["Edge"],
    level_gap: float = DEFAULT_SPACING_X,
    node_gap: float = DEFAULT_SPACING_X / 3,
    start_x: float = DEFAULT_START_X,
    start_y: float = DEFAULT_START_Y,
) -> list["Node"]:
    """
    Arrange nodes as a tidy tree growing left to right.

    Each subtree gets exactly the vertical band its children need, and a
    parent is centered on the band of its children.
    """
    if not nodes:
        return nodes

    node_map = {n.id: n for n in nodes}
    children, roots = _spanning_forest(nodes, edges)

    def place(node_id: str, x: float, top: float) -> float:
        node = node_map[node_id]
        child_x = x + node.width + level_gap
        cursor = top
        for child in children[node_id]:
            cursor += place(child, child_x, cursor) + node_gap
        band = cursor - top - node_gap if children[node_id] else 0
        span = max(node.height, band)
        node.x = x
        node.y = top + (span - node.height) / 2
        return span

    top = start_y
    for root in roots:
        top += place(root, start_x, top) + node_gap

    return nodes


def radial_tree_layout(
    nodes: list["Node"],
    edges: list["Edge"],
    ring_gap: float = DEFAULT_SPACING_Y * 2,
    center_x: float = 400,
    center_y: float = 400,
) -> list["Node"]:
    """
    Arrange tree levels on concentric rings around the root.

    Each subtree owns an angular sector proportional to its number of
    leaves. Several roots share the first ring around an empty center.
    """
    if not nodes:
        return nodes

    node_map = {n.id: n for n in nodes}
    children, roots = _spanning_forest(nodes, edges)

    leaf_counts: dict[str, int] = {}

    def count_leaves(node_id: str) -> int:
        count = sum(count_leaves(child) for child in children[node_id]) or 1
        leaf_counts[node_id] = count
        return count

    for root in roots:
        count_leaves(root)

    def place(ids: list[str], depth: int, start: float, end: float):
        total = sum(leaf_counts[i] for i in ids)
        if total == 0:
            return
        angle = start
        for node_id in ids:
            share = (end - start) * leaf_counts[node_id] / total
            middle = angle + share / 2
            _center_at(
                node_map[node_id],
                center_x + depth * ring_gap * math.cos(middle),
                center_y + depth * ring_gap * math.sin(middle),
            )
            place(children[node_id], depth + 1, angle, angle + share)
            angle += share

    if len(roots) == 1:
        _center_at(node_map[roots[0]], center_x, center_y)
        place(children[roots[0]], 1, 0, 2 * math.pi)
    else:
        place(roots, 1, 0, 2 * math.pi)

    return nodes


def partition_layout(
    nodes: list["Node"],
    spacing: float = 0,
    start_x: float = DEFAULT_START_X,
    start_y: float = DEFAULT_START_Y,
) -> list["Node"]:
    """Resize nodes to equal cells and place them side by side."""
    if not nodes:
        return nodes

    cell_width = max(n.width for n in nodes)
    cell_height = max(n.height for n in nodes)

    for i, node in enumerate(nodes):
        node.x = start_x + i * (cell_width + spacing)
        node.y = start_y
        node.width = cell_width
        node.height = cell_height

    return nodes


def stack_layout(
    nodes: list["Node"],
    spacing: float = 0,
    start_x: float = DEFAULT_START_X,
    start_y: float = DEFAULT_START_Y,
) -> list["Node"]:
    """Place nodes one after another in a row, keeping their sizes."""
    current_x = start_x
    for node in nodes:
        node.x = current_x
        node.y = start_y
        current_x += node.width + spacing
    return nodes


# --- Dispatch ---

_LayoutFn = Callable[[list["Node"], list["Edge"], dict[str, Any]], list["Node"]]

_LAYOUTS: dict[LayoutAlgorithm, _LayoutFn] = {
    LayoutAlgorithm.HIERARCHICAL: lambda nodes, edges, opts: hierarchical_layout(
        nodes, edges, direction=opts.get("direction") or LayoutDirection.TOP_DOWN
    ),
    LayoutAlgorithm.CIRCLE: lambda nodes, edges, opts: circle_layout(nodes),
    LayoutAlgorithm.ORGANIC: lambda nodes, edges, opts: organic_layout(
        nodes, edges,
        iterations=opts.get("iterations", 100),
        center_x=opts.get("centerX", 400),
        center_y=opts.get("centerY", 400),
    ),
    LayoutAlgorithm.COMPACT_TREE: lambda nodes, edges, opts: compact_tree_layout(nodes, edges),
    LayoutAlgorithm.RADIAL_TREE: lambda nodes, edges, opts: radial_tree_layout(nodes, edges),
    LayoutAlgorithm.PARTITION: lambda nodes, edges, opts: partition_layout(nodes),
    LayoutAlgorithm.STACK: lambda nodes, edges, opts: stack_layout(nodes),
}


def validate_layout(
    algorithm: LayoutAlgorithm | str,
    options: Optional[Mapping[str, Any]] = None,
) -> tuple[LayoutAlgorithm, dict[str, Any]]:
    """
    Check an algorithm/options pair and return them normalized.

    Raises:
        LayoutError: unknown algorithm, a bad direction for hierarchical,
            or bad organic iterations/centre values.
            Options other algorithms don't understand are ignored.
    """
    try:
        chosen = LayoutAlgorithm(algorithm)
    except ValueError:
        supported = ", ".join(a.value for a in LayoutAlgorithm)
        raise LayoutError(f"Unsupported layout algorithm: {algorithm}. Supported: {supported}") from None

    options = dict(options or {})
    if chosen is LayoutAlgorithm.HIERARCHICAL and options.get("direction") is not None:
        try:
            options["direction"] = LayoutDirection(options["direction"])
        except ValueError:
            allowed = ", ".join(d.value for d in LayoutDirection)
            raise LayoutError(
                f"Invalid hierarchical direction: {options['direction']}. Allowed: {allowed}"
            ) from None

    if chosen is LayoutAlgorithm.ORGANIC:
        iterations = options.get("iterations", 100)
        if isinstance(iterations, bool) or not isinstance(iterations, int) or iterations < 0:
            raise LayoutError(f"Invalid organic iterations: {iterations}. Expected a non-negative integer")
        for key in ("centerX", "centerY"):
            value = options.get(key, 0)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise LayoutError(f"Invalid organic {key}: {value}. Expected a number")

    return chosen, options


def run_layout(
    algorithm: LayoutAlgorithm | str,
    nodes: list["Node"],
    edges: list["Edge"],
    options: Optional[Mapping[str, Any]] = None,
) -> LayoutAlgorithm:
    """Validate and execute one layout pass over the given nodes."""
    chosen, options = validate_layout(algorithm, options)
    logger.debug("Running %s layout over %d nodes", chosen.value, len(nodes))
    _LAYOUTS[chosen](nodes, edges, options)
    return chosen
