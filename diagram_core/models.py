"""
Core data models for diagrams.

These models define the in-memory schema the mutation engine works on:
- Nodes with a caller-assigned id, label, kind, geometry and style
- Edges connecting nodes (using source/target naming convention)
- Request specs used by the batch operations (add/edit/link/layout)

Field Naming Convention:
- Edges use `source` and `target`
- Edge specs also accept `from`/`to` on input and convert them
- Style keys use the draw.io spelling (fillColor, ...) inside `style`
"""

from typing import Any, Optional

from pydantic import BaseModel, Field, model_validator

from .kinds import NodeKind
from .style import StyleOverrides, stringify_style


class Waypoint(BaseModel):
    """An intermediate routing point of an edge."""
    x: float
    y: float


class Node(BaseModel):
    """A node in the diagram."""
    id: str
    label: str = ""
    kind: str = NodeKind.RECTANGLE.value
    x: float = 10
    y: float = 10
    width: float = 120
    height: float = 60
    parent: Optional[str] = None  # None = top level
    style: dict[str, str] = Field(default_factory=dict)
    corner_radius: Optional[int] = None  # RoundedRectangle only

    @property
    def style_string(self) -> str:
        return stringify_style(self.style)

    def center(self) -> tuple[float, float]:
        """Get the center point of the node."""
        return (self.x + self.width / 2, self.y + self.height / 2)

    def bounds(self) -> tuple[float, float, float, float]:
        """Get the bounding box (x, y, right, bottom)."""
        return (self.x, self.y, self.x + self.width, self.y + self.height)


class Edge(BaseModel):
    """An edge connecting two nodes."""
    id: str
    source: str  # Source node ID
    target: str  # Target node ID
    label: Optional[str] = None
    style: dict[str, str] = Field(default_factory=dict)
    directed: bool = True
    waypoints: list[Waypoint] = Field(default_factory=list)

    @property
    def style_string(self) -> str:
        return stringify_style(self.style)

    def to_json_dict(self) -> dict:
        """Convert to JSON-serializable dict."""
        result = {
            "id": self.id,
            "source": self.source,
            "target": self.target,
            "label": self.label,
            "style": self.style_string,
            "directed": self.directed,
        }
        # Only include waypoints if there are any
        if self.waypoints:
            result["waypoints"] = [wp.model_dump() for wp in self.waypoints]
        return result


class Diagram(BaseModel):
    """
    The complete diagram structure.
    Owns every node and edge; one instance per loaded document.
    """
    name: str = "Page-1"
    nodes: list[Node] = Field(default_factory=list)
    edges: list[Edge] = Field(default_factory=list)

    def to_json_dict(self) -> dict:
        """Convert to JSON-serializable dict with style strings."""
        return {
            "name": self.name,
            "nodes": [
                {**n.model_dump(exclude={"style"}), "style": n.style_string}
                for n in self.nodes
            ],
            "edges": [e.to_json_dict() for e in self.edges],
        }

    def get_node(self, node_id: str) -> Optional[Node]:
        """Get a node by ID (O(n) - use DiagramEditor for indexed access)."""
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def get_edge(self, edge_id: str) -> Optional[Edge]:
        """Get an edge by ID (O(n) - use DiagramEditor for indexed access)."""
        for edge in self.edges:
            if edge.id == edge_id:
                return edge
        return None


# --- Batch Request Models ---

class NodeSpec(StyleOverrides):
    """A node to add."""
    id: str
    title: str = ""
    kind: str = NodeKind.RECTANGLE.value
    x: float = 10
    y: float = 10
    width: Optional[float] = None   # defaults from kind
    height: Optional[float] = None  # defaults from kind
    parent: Optional[str] = None    # "root" or None for top level
    corner_radius: Optional[int] = Field(default=None, ge=1)


class NodeEdit(StyleOverrides):
    """A partial update for a node or edge (only provided fields change)."""
    id: str
    title: Optional[str] = None
    kind: Optional[str] = None
    x: Optional[float] = None
    y: Optional[float] = None
    width: Optional[float] = None
    height: Optional[float] = None
    corner_radius: Optional[int] = Field(default=None, ge=1)


class EdgeSpec(StyleOverrides):
    """
    A link to create or update.

    Uses `source` and `target` as canonical field names.
    Accepts `from`/`to` on input.
    """
    source: str
    target: str
    title: Optional[str] = None
    dashed: bool = False
    reverse: bool = False
    undirected: bool = False
    waypoints: list[Waypoint] = Field(default_factory=list)
    edge_style: Optional[str] = Field(default=None, alias="edgeStyle")  # an EdgeRouting value

    @model_validator(mode='before')
    @classmethod
    def convert_legacy_fields(cls, data: Any) -> Any:
        """Convert 'from'/'to' fields to 'source'/'target'."""
        if isinstance(data, dict):
            data = dict(data)
            if 'from' in data and 'source' not in data:
                data['source'] = data.pop('from')
            if 'to' in data and 'target' not in data:
                data['target'] = data.pop('to')
        return data

    def style_keys(self) -> dict[str, Any]:
        """Caller-requested style keys, layered over the edge's base style."""
        style: dict[str, Any] = {}
        if self.dashed:
            style["dashed"] = "1"
        if self.reverse:
            style["reverse"] = "1"
        style.update(self.to_style())
        return style


class LayoutSpec(BaseModel):
    """An optional layout pass to run after a batch of adds."""
    algorithm: str
    options: dict[str, Any] = Field(default_factory=dict)
