"""
Diagram Core - Mutation engine for node-and-edge diagrams.

This package holds everything the operations need to edit a diagram:
the style codec, the node kind catalog, edge identity resolution, the
layout runner, the model and its XML codec. It does no I/O; persistence
and transports live in diagram_backend.
"""

from .models import (
    # Core models
    Node,
    Edge,
    Waypoint,
    Diagram,
    # Request models
    NodeSpec,
    NodeEdit,
    EdgeSpec,
    LayoutSpec,
)
from .errors import (
    DiagramError,
    NodeNotFoundError,
    DuplicateNodeError,
    UnknownKindError,
    LayoutError,
    InvalidEdgeStyleError,
    InvalidPathError,
)
from .style import StyleOverrides, parse_style, stringify_style, merge_style
from .kinds import NodeKind, normalize_kind, supported_kinds
from .edges import EdgeRouting, canonical_edge_id
from .layout import LayoutAlgorithm, LayoutDirection, validate_layout
from .editor import DiagramEditor
from .validation import validate_diagram, validation_summary, ValidationIssue, IssueSeverity
from .analysis import summarize_diagram, find_connected_components

__all__ = [
    # Models
    "Node",
    "Edge",
    "Waypoint",
    "Diagram",
    # Request models
    "NodeSpec",
    "NodeEdit",
    "EdgeSpec",
    "LayoutSpec",
    # Errors
    "DiagramError",
    "NodeNotFoundError",
    "DuplicateNodeError",
    "UnknownKindError",
    "LayoutError",
    "InvalidEdgeStyleError",
    "InvalidPathError",
    # Style / kinds / edges / layout
    "StyleOverrides",
    "parse_style",
    "stringify_style",
    "merge_style",
    "NodeKind",
    "normalize_kind",
    "supported_kinds",
    "EdgeRouting",
    "canonical_edge_id",
    "LayoutAlgorithm",
    "LayoutDirection",
    "validate_layout",
    # Editor
    "DiagramEditor",
    # Validation / analysis
    "validate_diagram",
    "validation_summary",
    "ValidationIssue",
    "IssueSeverity",
    "summarize_diagram",
    "find_connected_components",
]
