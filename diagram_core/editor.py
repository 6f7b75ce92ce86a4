"""
Diagram Editor - The mutation engine behind every batch operation.

This module implements:
- O(1) node/edge lookups via index dictionaries
- add / edit / link / remove on a single in-memory Diagram
- One optional layout pass over the top-level nodes
- Conversion to/from mxGraphModel XML

An editor is built for one batch: load, mutate, serialize, discard.
Nothing is kept between batches.
"""

import logging
from typing import Any, Iterable, Mapping, Optional, Union

from . import codec
from .edges import compute_edge_style, find_existing_edge, new_edge_id
from .errors import DuplicateNodeError, NodeNotFoundError
from .kinds import NodeKind, adjust_style_by_kind, get_template, resolve_kind
from .layout import LayoutAlgorithm, run_layout
from .models import Diagram, Edge, Node, Waypoint
from .style import StyleOverrides, merge_style, parse_style, stringify_style


logger = logging.getLogger(__name__)

ROOT_PARENT = "root"

Overrides = Union[StyleOverrides, Mapping[str, Any], None]


class DiagramEditor:
    """
    Applies mutations to one diagram while keeping lookup indexes in sync.

    Edges are addressed by their derived ids (see edges.py); nodes by the
    ids callers assign. Removing a node also removes its child nodes and
    every edge touching any removed node.
    """

    def __init__(self, diagram: Optional[Diagram] = None):
        self._diagram = diagram if diagram is not None else Diagram()

        # O(1) lookup indexes
        self._node_index: dict[str, Node] = {}          # node_id -> Node
        self._edge_index: dict[str, Edge] = {}          # edge_id -> Edge
        self._edges_by_node: dict[str, set[str]] = {}   # node_id -> set of edge_ids
        self._children: dict[str, list[str]] = {}       # node_id -> child node_ids

        self._rebuild_indexes()

    # --- Index Management ---

    def _rebuild_indexes(self):
        """Rebuild all indexes from the current diagram state."""
        self._node_index.clear()
        self._edge_index.clear()
        self._edges_by_node.clear()
        self._children.clear()

        for node in self._diagram.nodes:
            self._index_node(node)
        for edge in self._diagram.edges:
            self._index_edge(edge)

    def _index_node(self, node: Node):
        """Add a node to the indexes."""
        self._node_index[node.id] = node
        if node.parent is not None:
            self._children.setdefault(node.parent, []).append(node.id)

    def _unindex_node(self, node: Node):
        """Remove a node from the indexes."""
        self._node_index.pop(node.id, None)
        self._children.pop(node.id, None)
        self._edges_by_node.pop(node.id, None)
        if node.parent is not None and node.parent in self._children:
            siblings = self._children[node.parent]
            if node.id in siblings:
                siblings.remove(node.id)

    def _index_edge(self, edge: Edge):
        """Add an edge to the indexes."""
        self._edge_index[edge.id] = edge
        self._edges_by_node.setdefault(edge.source, set()).add(edge.id)
        self._edges_by_node.setdefault(edge.target, set()).add(edge.id)

    def _unindex_edge(self, edge: Edge):
        """Remove an edge from the indexes."""
        self._edge_index.pop(edge.id, None)
        if edge.source in self._edges_by_node:
            self._edges_by_node[edge.source].discard(edge.id)
        if edge.target in self._edges_by_node:
            self._edges_by_node[edge.target].discard(edge.id)

    # --- Properties / Lookups ---

    @property
    def diagram(self) -> Diagram:
        """Get the diagram being edited."""
        return self._diagram

    def get_node(self, node_id: str) -> Optional[Node]:
        """Get a node by ID (O(1) lookup)."""
        return self._node_index.get(node_id)

    def get_edge(self, edge_id: str) -> Optional[Edge]:
        """Get an edge by ID (O(1) lookup)."""
        return self._edge_index.get(edge_id)

    def get_edges_for_node(self, node_id: str) -> list[Edge]:
        """Get all edges connected to a node."""
        return [self._edge_index[eid] for eid in self._edges_by_node.get(node_id, ())
                if eid in self._edge_index]

    def _resolve_parent(self, parent: Optional[str]) -> Optional[str]:
        if parent is None or parent == ROOT_PARENT:
            return None
        if parent not in self._node_index:
            raise NodeNotFoundError(parent, role="Parent node")
        return parent

    # --- Node Operations ---

    def add_node(
        self,
        node_id: str,
        title: str = "",
        kind: str | NodeKind = NodeKind.RECTANGLE,
        x: float = 10,
        y: float = 10,
        parent: Optional[str] = None,
        width: Optional[float] = None,
        height: Optional[float] = None,
        corner_radius: Optional[int] = None,
        overrides: Overrides = None,
    ) -> str:
        """
        Add a node and return its id.

        The style starts from the kind's template, then gets the corner
        radius (RoundedRectangle only), then the caller's overrides.
        Width and height default to the kind's size.

        Raises:
            UnknownKindError: kind is not in the catalog
            DuplicateNodeError: id already used by a node or edge, or reserved
            NodeNotFoundError: parent does not exist
        """
        if node_id in self._node_index or node_id in self._edge_index or node_id in codec.RESERVED_IDS:
            raise DuplicateNodeError(node_id)

        resolved = resolve_kind(kind)
        template = get_template(resolved)
        parent_id = self._resolve_parent(parent)

        style = adjust_style_by_kind(template.style, resolved, corner_radius)
        style = merge_style(style, overrides)

        node = Node(
            id=node_id,
            label=title,
            kind=resolved.value,
            x=float(x),
            y=float(y),
            width=template.width if width is None else width,
            height=template.height if height is None else height,
            parent=parent_id,
            style=parse_style(style),
            corner_radius=corner_radius if resolved is NodeKind.ROUNDED_RECTANGLE else None,
        )
        self._diagram.nodes.append(node)
        self._index_node(node)
        logger.debug("Added %s node %s", node.kind, node.id)
        return node.id

    def edit_node(
        self,
        cell_id: str,
        title: Optional[str] = None,
        kind: Optional[str | NodeKind] = None,
        x: Optional[float] = None,
        y: Optional[float] = None,
        width: Optional[float] = None,
        height: Optional[float] = None,
        corner_radius: Optional[int] = None,
        overrides: Overrides = None,
    ) -> Union[Node, Edge]:
        """
        Update an existing node or edge; omitted fields stay unchanged.

        A new kind resets the style to that kind's template before the
        radius and overrides are applied. Geometry, kind and radius only
        apply to nodes.

        Raises:
            NodeNotFoundError: no node or edge with this id
            UnknownKindError: kind is not in the catalog
        """
        edge = self._edge_index.get(cell_id)
        if edge is not None:
            if title is not None:
                edge.label = title
            edge.style = parse_style(merge_style(edge.style_string, overrides))
            logger.debug("Edited edge %s", edge.id)
            return edge

        node = self._node_index.get(cell_id)
        if node is None:
            raise NodeNotFoundError(cell_id)

        if title is not None:
            node.label = title

        style = node.style_string
        if kind is not None:
            resolved = resolve_kind(kind)
            node.kind = resolved.value
            style = get_template(resolved).style
            node.corner_radius = None

        if corner_radius is not None and node.kind == NodeKind.ROUNDED_RECTANGLE.value:
            style = adjust_style_by_kind(style, node.kind, corner_radius)
            node.corner_radius = corner_radius

        node.style = parse_style(merge_style(style, overrides))

        # Geometry fields merge individually
        node.x = node.x if x is None else x
        node.y = node.y if y is None else y
        node.width = node.width if width is None else width
        node.height = node.height if height is None else height

        logger.debug("Edited node %s", node.id)
        return node

    # --- Edge Operations ---

    def link_nodes(
        self,
        source: str,
        target: str,
        title: Optional[str] = None,
        style: Optional[Mapping[str, Any]] = None,
        undirected: bool = False,
        waypoints: Optional[Iterable[Waypoint | Mapping[str, float]]] = None,
        edge_style: Optional[str] = None,
    ) -> str:
        """
        Connect two nodes, or update the edge that already connects them.

        Looks for an existing edge under the direct, reverse and canonical
        ids (in that order). A found edge keeps its id; its label changes
        only if a title is given and its style is recomputed. Otherwise a
        new edge is created under the canonical id (undirected) or the
        direct id. Non-empty waypoints replace the edge's routing points.

        Raises:
            NodeNotFoundError: source or target does not exist
            InvalidEdgeStyleError: unknown routing style name
            DuplicateNodeError: the new edge id is already a node id
        """
        for endpoint, role in ((source, "Source node"), (target, "Target node")):
            if endpoint not in self._node_index:
                raise NodeNotFoundError(endpoint, role=role)

        effective = compute_edge_style(style, undirected=undirected, edge_style=edge_style)
        effective = parse_style(stringify_style(effective))

        edge = find_existing_edge(self._edge_index.get, source, target)
        if edge is not None:
            if title is not None:
                edge.label = title
            edge.style = effective
            edge.directed = not undirected
            logger.debug("Updated edge %s", edge.id)
        else:
            new_id = new_edge_id(source, target, undirected)
            if new_id in self._node_index:
                raise DuplicateNodeError(new_id)
            edge = Edge(
                id=new_id,
                source=source,
                target=target,
                label=title or None,
                style=effective,
                directed=not undirected,
            )
            self._diagram.edges.append(edge)
            self._index_edge(edge)
            logger.debug("Created edge %s", edge.id)

        if waypoints:
            edge.waypoints = [
                wp if isinstance(wp, Waypoint) else Waypoint(**wp) for wp in waypoints
            ]

        return edge.id

    # --- Removal ---

    def _collect_subtree(self, node_id: str) -> list[str]:
        """The node and all its descendants, parents first."""
        collected = [node_id]
        for child in list(self._children.get(node_id, ())):
            collected.extend(self._collect_subtree(child))
        return collected

    def remove_nodes(self, ids: Iterable[str]) -> list[str]:
        """
        Remove nodes and/or edges by id and return the ids actually removed.

        Removing a node cascades to its descendants and to every edge
        touching any of them. Unknown ids are skipped.
        """
        removed: list[str] = []

        for cell_id in ids:
            if cell_id in self._edge_index:
                self._remove_edge(self._edge_index[cell_id])
                removed.append(cell_id)
                continue

            if cell_id not in self._node_index:
                logger.debug("Skipping unknown id %s", cell_id)
                continue

            for node_id in self._collect_subtree(cell_id):
                for edge in self.get_edges_for_node(node_id):
                    self._remove_edge(edge)
                    removed.append(edge.id)
                node = self._node_index[node_id]
                self._diagram.nodes = [n for n in self._diagram.nodes if n.id != node_id]
                self._unindex_node(node)
                removed.append(node_id)

        logger.debug("Removed %d cells", len(removed))
        return removed

    def _remove_edge(self, edge: Edge):
        self._diagram.edges = [e for e in self._diagram.edges if e.id != edge.id]
        self._unindex_edge(edge)

    # --- Layout ---

    def apply_layout(
        self,
        algorithm: LayoutAlgorithm | str,
        options: Optional[Mapping[str, Any]] = None,
    ) -> LayoutAlgorithm:
        """
        Run one layout pass over the top-level nodes and the edges between them.

        Raises:
            LayoutError: unknown algorithm or invalid direction
        """
        nodes = [n for n in self._diagram.nodes if n.parent is None]
        top_level = {n.id for n in nodes}
        edges = [e for e in self._diagram.edges if e.source in top_level and e.target in top_level]
        return run_layout(algorithm, nodes, edges, options)

    # --- Serialization ---

    def to_xml(self) -> str:
        return codec.to_xml(self._diagram)

    @classmethod
    def from_xml(cls, xml: str, name: str = "Page-1") -> "DiagramEditor":
        return cls(codec.from_xml(xml, name=name))

    def to_json_dict(self) -> dict:
        return self._diagram.to_json_dict()
