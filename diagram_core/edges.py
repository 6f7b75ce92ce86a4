"""
Edge identity - Stable ids for links between two nodes.

An edge between `a` and `b` is named after its endpoints:
- direct:    "a-2-b"
- reverse:   "b-2-a"
- canonical: "min-2-max" (ids sorted), used for undirected edges

Linking a pair again (in either order) finds the existing edge through
these candidates and updates it in place, so a pair never gets a second
edge and an edge id never changes once created.
"""

from enum import Enum
from typing import Any, Callable, Mapping, Optional, TYPE_CHECKING

from .errors import InvalidEdgeStyleError

if TYPE_CHECKING:
    from .models import Edge


EDGE_ID_SEPARATOR = "-2-"


class EdgeRouting(str, Enum):
    """Named routing styles for edges."""
    STRAIGHT = "straight"
    ORTHOGONAL = "orthogonal"
    ELBOW = "elbow"
    ENTITY_RELATION = "entity-relation"
    SEGMENT = "segment"


# Routing name -> draw.io edgeStyle token ("none" disables routing)
EDGE_STYLES: dict[EdgeRouting, str] = {
    EdgeRouting.STRAIGHT: "none",
    EdgeRouting.ORTHOGONAL: "orthogonalEdgeStyle",
    EdgeRouting.ELBOW: "elbowEdgeStyle",
    EdgeRouting.ENTITY_RELATION: "entityRelationEdgeStyle",
    EdgeRouting.SEGMENT: "segmentEdgeStyle",
}


def edge_id(source: str, target: str) -> str:
    return f"{source}{EDGE_ID_SEPARATOR}{target}"


def canonical_edge_id(source: str, target: str) -> str:
    low, high = sorted((source, target))
    return edge_id(low, high)


def edge_id_candidates(source: str, target: str) -> tuple[str, str, str]:
    """Ids to look for, in order: direct, reverse, canonical."""
    return edge_id(source, target), edge_id(target, source), canonical_edge_id(source, target)


def new_edge_id(source: str, target: str, undirected: bool = False) -> str:
    return canonical_edge_id(source, target) if undirected else edge_id(source, target)


def find_existing_edge(
    lookup: Callable[[str], Optional["Edge"]],
    source: str,
    target: str,
) -> Optional["Edge"]:
    """Return the first edge found among the candidate ids, whichever one matched."""
    for candidate in edge_id_candidates(source, target):
        edge = lookup(candidate)
        if edge is not None:
            return edge
    return None


def resolve_routing(edge_style: EdgeRouting | str) -> EdgeRouting:
    try:
        return EdgeRouting(edge_style)
    except ValueError:
        supported = ", ".join(r.value for r in EdgeRouting)
        raise InvalidEdgeStyleError(
            f"Unknown edge style: {edge_style}. Supported: {supported}"
        ) from None


def compute_edge_style(
    style: Optional[Mapping[str, Any]] = None,
    undirected: bool = False,
    edge_style: EdgeRouting | str | None = None,
) -> dict[str, Any]:
    """
    Build the full style mapping for an edge.

    Starts from a straight, orthogonal base, swaps in the requested routing,
    then layers the caller's keys on top. Undirected edges lose `reverse`
    and get no arrowheads; `dashed` is kept either way.
    """
    base: dict[str, Any] = {"edgeStyle": "none", "noEdgeStyle": "1", "orthogonal": "1", "html": "1"}

    if edge_style is not None:
        token = EDGE_STYLES[resolve_routing(edge_style)]
        base["edgeStyle"] = token
        if token == "none":
            base["noEdgeStyle"] = "1"
        else:
            del base["noEdgeStyle"]

    effective = {**base, **(style or {})}
    if undirected:
        effective.pop("reverse", None)
        effective["startArrow"] = "none"
        effective["endArrow"] = "none"
    return effective
