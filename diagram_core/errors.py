"""
Diagram errors - Failures raised by the mutation engine.

All errors derive from ValueError so callers that only care about
"bad input" can catch a single type. Transports map them to responses:
- NodeNotFoundError: reference errors (edit/link on a missing id)
- everything else: validation errors (unknown kind, bad layout, ...)
"""


class DiagramError(ValueError):
    """Base class for all diagram mutation failures."""


class NodeNotFoundError(DiagramError):
    """An operation referenced a node or edge id that does not exist."""

    def __init__(self, cell_id: str, role: str = "Node"):
        self.cell_id = cell_id
        super().__init__(f"{role} not found: {cell_id}")


class DuplicateNodeError(DiagramError):
    """A node id is already in use (or reserved)."""

    def __init__(self, node_id: str):
        self.node_id = node_id
        super().__init__(f"Node id already in use: {node_id}")


class UnknownKindError(DiagramError):
    """The requested node kind is not in the catalog."""

    def __init__(self, kind: str, supported: list[str]):
        self.kind = kind
        super().__init__(f"Unknown node kind: {kind}. Supported: {', '.join(supported)}")


class LayoutError(DiagramError):
    """Unknown layout algorithm or invalid option combination."""


class InvalidEdgeStyleError(DiagramError):
    """Unknown named edge routing style."""


class InvalidPathError(DiagramError):
    """The diagram file path cannot be used as a target."""
