"""
Diagram analysis - Structural summary reported by the inspect operation.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import Diagram


@dataclass
class ConnectedComponent:
    """A connected component in the diagram graph."""
    node_ids: list[str] = field(default_factory=list)

    @property
    def size(self) -> int:
        return len(self.node_ids)


@dataclass
class NodeConnectionInfo:
    """Connection information for a single node."""
    node_id: str
    label: str
    incoming: int = 0   # Edges pointing to this node
    outgoing: int = 0   # Edges pointing from this node

    @property
    def total(self) -> int:
        return self.incoming + self.outgoing


@dataclass
class DiagramSummary:
    """Summary of a diagram's structure."""
    name: str
    total_nodes: int
    total_edges: int
    nodes_by_kind: dict[str, int]
    undirected_edges: int
    connected_components: int
    most_connected_nodes: list[NodeConnectionInfo]
    orphan_count: int

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "name": self.name,
            "total_nodes": self.total_nodes,
            "total_edges": self.total_edges,
            "nodes_by_kind": self.nodes_by_kind,
            "undirected_edges": self.undirected_edges,
            "connected_components": self.connected_components,
            "most_connected_nodes": [
                {
                    "id": n.node_id,
                    "label": n.label,
                    "connections": n.total,
                    "incoming": n.incoming,
                    "outgoing": n.outgoing
                }
                for n in self.most_connected_nodes
            ],
            "orphan_count": self.orphan_count
        }


def find_connected_components(diagram: "Diagram") -> list[ConnectedComponent]:
    """
    Find all connected components in the diagram using BFS.

    Edges are treated as undirected.
    """
    node_ids = [n.id for n in diagram.nodes]
    adjacency: dict[str, set[str]] = {nid: set() for nid in node_ids}

    for edge in diagram.edges:
        if edge.source in adjacency and edge.target in adjacency:
            adjacency[edge.source].add(edge.target)
            adjacency[edge.target].add(edge.source)

    visited: set[str] = set()
    components: list[ConnectedComponent] = []

    for start_node in node_ids:
        if start_node in visited:
            continue

        component_nodes: list[str] = []
        queue = [start_node]
        while queue:
            current = queue.pop(0)
            if current in visited:
                continue
            visited.add(current)
            component_nodes.append(current)
            queue.extend(n for n in adjacency[current] if n not in visited)

        components.append(ConnectedComponent(node_ids=component_nodes))

    return components


def calculate_node_connections(diagram: "Diagram") -> dict[str, NodeConnectionInfo]:
    """Calculate incoming/outgoing edge counts for all nodes."""
    connections: dict[str, NodeConnectionInfo] = {
        node.id: NodeConnectionInfo(node_id=node.id, label=node.label)
        for node in diagram.nodes
    }

    for edge in diagram.edges:
        if edge.source in connections:
            connections[edge.source].outgoing += 1
        if edge.target in connections:
            connections[edge.target].incoming += 1

    return connections


def summarize_diagram(diagram: "Diagram", top_n: int = 5) -> DiagramSummary:
    """
    Generate a summary of a diagram.

    Args:
        diagram: The diagram to summarize
        top_n: Number of top connected nodes to include
    """
    kind_counts: dict[str, int] = defaultdict(int)
    for node in diagram.nodes:
        kind_counts[node.kind] += 1

    connections = calculate_node_connections(diagram)
    sorted_by_connections = sorted(connections.values(), key=lambda x: x.total, reverse=True)
    most_connected = [n for n in sorted_by_connections[:top_n] if n.total > 0]

    return DiagramSummary(
        name=diagram.name,
        total_nodes=len(diagram.nodes),
        total_edges=len(diagram.edges),
        nodes_by_kind=dict(kind_counts),
        undirected_edges=sum(1 for e in diagram.edges if not e.directed),
        connected_components=len(find_connected_components(diagram)),
        most_connected_nodes=most_connected,
        orphan_count=sum(1 for n in connections.values() if n.total == 0)
    )
