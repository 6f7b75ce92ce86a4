"""
Node kind catalog - Shapes a node can take, with their default style and size.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from .errors import UnknownKindError
from .style import STYLE_OVERRIDE_KEYS, parse_style, stringify_style


DEFAULT_CORNER_RADIUS = 12
PROP_ARC_SIZE = "arcSize"
PROP_ABSOLUTE_ARC_SIZE = "absoluteArcSize"

# Legacy spellings accepted on input
_KIND_ALIASES = {"Elipse": "Ellipse"}


class NodeKind(str, Enum):
    """Visual shapes for nodes."""
    RECTANGLE = "Rectangle"
    ELLIPSE = "Ellipse"
    CYLINDER = "Cylinder"
    CLOUD = "Cloud"
    SQUARE = "Square"
    CIRCLE = "Circle"
    STEP = "Step"
    ACTOR = "Actor"
    TEXT = "Text"
    ROUNDED_RECTANGLE = "RoundedRectangle"


@dataclass(frozen=True)
class KindTemplate:
    """Default style and size for a kind."""
    style: str
    width: float
    height: float


KINDS: dict[NodeKind, KindTemplate] = {
    NodeKind.RECTANGLE: KindTemplate("rounded=1;whiteSpace=wrap;html=1;", 120, 60),
    NodeKind.ELLIPSE: KindTemplate("ellipse;whiteSpace=wrap;html=1;", 120, 80),
    NodeKind.CYLINDER: KindTemplate(
        "shape=cylinder3;whiteSpace=wrap;html=1;boundedLbl=1;backgroundOutline=1;size=15;", 60, 80
    ),
    NodeKind.CLOUD: KindTemplate("ellipse;shape=cloud;whiteSpace=wrap;html=1;", 120, 80),
    NodeKind.SQUARE: KindTemplate("whiteSpace=wrap;html=1;aspect=fixed;rounded=1;", 80, 80),
    NodeKind.CIRCLE: KindTemplate("ellipse;whiteSpace=wrap;html=1;aspect=fixed;", 80, 80),
    NodeKind.STEP: KindTemplate(
        "shape=step;perimeter=stepPerimeter;whiteSpace=wrap;html=1;fixedSize=1;", 120, 80
    ),
    NodeKind.ACTOR: KindTemplate(
        "shape=umlActor;verticalLabelPosition=bottom;verticalAlign=top;html=1;outlineConnect=0;", 30, 60
    ),
    NodeKind.TEXT: KindTemplate(
        "text;html=1;strokeColor=none;fillColor=none;align=center;verticalAlign=middle;"
        "whiteSpace=wrap;rounded=0;",
        60, 30,
    ),
    NodeKind.ROUNDED_RECTANGLE: KindTemplate(
        f"whiteSpace=wrap;html=1;rounded=1;absoluteArcSize=1;arcSize={DEFAULT_CORNER_RADIUS * 2};", 120, 60
    ),
}


def supported_kinds() -> list[str]:
    return [kind.value for kind in NodeKind]


def normalize_kind(kind: str) -> str:
    """Correct legacy spellings ("Elipse" -> "Ellipse")."""
    return _KIND_ALIASES.get(kind, kind)


def resolve_kind(kind: str | NodeKind) -> NodeKind:
    """Normalize and look up a kind, raising UnknownKindError if it isn't in the catalog."""
    if isinstance(kind, NodeKind):
        return kind
    try:
        return NodeKind(normalize_kind(kind))
    except ValueError:
        raise UnknownKindError(kind, supported_kinds()) from None


def get_template(kind: str | NodeKind) -> KindTemplate:
    return KINDS[resolve_kind(kind)]


def _arc_size(corner_radius: Any) -> int:
    try:
        radius = int(corner_radius)
    except (TypeError, ValueError):
        radius = 0
    if radius < 1:
        radius = DEFAULT_CORNER_RADIUS
    return radius * 2


def adjust_style_by_kind(style: str, kind: str | NodeKind, corner_radius: Optional[Any]) -> str:
    """
    Apply kind-specific style adjustments.

    Only RoundedRectangle is affected: the corner radius is doubled into
    `arcSize` and `absoluteArcSize=1` makes it an absolute pixel value.
    Without a radius the style is left as is (the template already carries
    the default). Capping the radius to the node size is up to the renderer.
    """
    if resolve_kind(kind) is not NodeKind.ROUNDED_RECTANGLE or corner_radius is None:
        return style

    style_map = parse_style(style)
    style_map[PROP_ABSOLUTE_ARC_SIZE] = "1"
    style_map[PROP_ARC_SIZE] = str(_arc_size(corner_radius))
    return stringify_style(style_map)


def corner_radius_from_style(style: dict[str, str]) -> Optional[int]:
    """Recover the corner radius from an absolute arcSize, if there is one."""
    if style.get(PROP_ABSOLUTE_ARC_SIZE) != "1":
        return None
    try:
        return int(float(style[PROP_ARC_SIZE])) // 2
    except (KeyError, ValueError):
        return None


_IGNORED_FOR_MATCH = set(STYLE_OVERRIDE_KEYS) | {PROP_ARC_SIZE}


def infer_kind(style: str | dict[str, str]) -> NodeKind:
    """
    Guess the kind of a decoded node from its style.

    The serialized model does not record kinds, so pick the catalog entry
    whose template is contained in the style, preferring the most specific
    one. Override keys and arcSize are ignored since callers change them.
    Falls back to Rectangle.
    """
    style_items = {
        (k, v) for k, v in parse_style(style).items() if k not in _IGNORED_FOR_MATCH
    }

    best, best_size = NodeKind.RECTANGLE, -1
    for kind, template in KINDS.items():
        template_items = {
            (k, v) for k, v in parse_style(template.style).items() if k not in _IGNORED_FOR_MATCH
        }
        if template_items <= style_items and len(template_items) > best_size:
            best, best_size = kind, len(template_items)
    return best
