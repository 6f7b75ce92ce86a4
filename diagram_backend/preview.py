"""
SVG preview - A static picture of a diagram, saved alongside its model.

The preview is only for people looking at the file. The model itself
travels in the root element's `content` attribute and is the only thing
read back on load.
"""

import xml.etree.ElementTree as ET
from typing import Optional

from diagram_core.kinds import NodeKind
from diagram_core.models import Diagram, Edge, Node

SVG_NS = "http://www.w3.org/2000/svg"
PADDING = 20
DEFAULT_FONT_SIZE = 12
XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>\n'

_ELLIPTIC_KINDS = {NodeKind.ELLIPSE.value, NodeKind.CIRCLE.value, NodeKind.CLOUD.value}


def _fmt(value: float) -> str:
    value = round(value, 2)
    return str(int(value)) if float(value).is_integer() else str(value)


def _color(value: Optional[str], default: str) -> str:
    return value if value else default


def _number(value: Optional[str], default: float) -> float:
    try:
        return float(value) if value else default
    except ValueError:
        return default


def _absolute_positions(diagram: Diagram) -> dict[str, tuple[float, float]]:
    """Child geometry is relative to the parent; resolve it to canvas coordinates."""
    nodes = {n.id: n for n in diagram.nodes}
    positions: dict[str, tuple[float, float]] = {}

    def resolve(node: Node, depth: int = 0) -> tuple[float, float]:
        if node.id in positions:
            return positions[node.id]
        x, y = node.x, node.y
        parent = nodes.get(node.parent) if node.parent else None
        if parent is not None and depth < len(nodes):
            px, py = resolve(parent, depth + 1)
            x, y = x + px, y + py
        positions[node.id] = (x, y)
        return x, y

    for node in diagram.nodes:
        resolve(node)
    return positions


def _add_label(parent: ET.Element, text: str, x: float, y: float, style: dict[str, str]):
    lines = text.split("\n")
    font_size = _number(style.get("fontSize"), DEFAULT_FONT_SIZE)
    attrs = {
        "x": _fmt(x),
        "y": _fmt(y - (len(lines) - 1) * font_size / 2),
        "text-anchor": "middle",
        "dominant-baseline": "middle",
        "font-family": style.get("fontFamily") or "Helvetica",
        "font-size": _fmt(font_size),
        "fill": _color(style.get("fontColor"), "#000000"),
    }
    font_style = int(_number(style.get("fontStyle"), 0))
    if font_style & 1:
        attrs["font-weight"] = "bold"
    if font_style & 2:
        attrs["font-style"] = "italic"
    if font_style & 4:
        attrs["text-decoration"] = "underline"

    text_elem = ET.SubElement(parent, "text", attrs)
    for i, line in enumerate(lines):
        tspan = ET.SubElement(text_elem, "tspan", {"x": _fmt(x), "dy": "0" if i == 0 else _fmt(font_size)})
        tspan.text = line


def _draw_node(group: ET.Element, node: Node, x: float, y: float):
    style = node.style
    attrs = {
        "fill": _color(style.get("fillColor"), "#ffffff"),
        "stroke": _color(style.get("strokeColor"), "#000000"),
        "stroke-width": style.get("strokeWidth") or "1",
    }
    if style.get("opacity"):
        attrs["opacity"] = _fmt(_number(style["opacity"], 100) / 100)

    if node.kind in _ELLIPTIC_KINDS:
        ET.SubElement(group, "ellipse", {
            "cx": _fmt(x + node.width / 2),
            "cy": _fmt(y + node.height / 2),
            "rx": _fmt(node.width / 2),
            "ry": _fmt(node.height / 2),
            **attrs,
        })
    elif node.kind != NodeKind.TEXT.value:
        rect = {"x": _fmt(x), "y": _fmt(y), "width": _fmt(node.width), "height": _fmt(node.height)}
        if style.get("rounded") == "1":
            # absoluteArcSize carries a diameter; the radius is capped at half the shorter side
            if style.get("absoluteArcSize") == "1":
                radius = _number(style.get("arcSize"), 0) / 2
            else:
                radius = min(node.width, node.height) * 0.15
            rect["rx"] = _fmt(min(radius, min(node.width, node.height) / 2))
        ET.SubElement(group, "rect", {**rect, **attrs})

    if node.label:
        _add_label(group, node.label, x + node.width / 2, y + node.height / 2, style)


def _draw_edge(group: ET.Element, edge: Edge, centers: dict[str, tuple[float, float]]):
    if edge.source not in centers or edge.target not in centers:
        return

    points = [centers[edge.source], *((wp.x, wp.y) for wp in edge.waypoints), centers[edge.target]]
    attrs = {
        "points": " ".join(f"{_fmt(px)},{_fmt(py)}" for px, py in points),
        "fill": "none",
        "stroke": _color(edge.style.get("strokeColor"), "#000000"),
        "stroke-width": edge.style.get("strokeWidth") or "1",
    }
    if edge.style.get("dashed") == "1":
        attrs["stroke-dasharray"] = "3 3"
    if edge.directed:
        marker = "marker-start" if edge.style.get("reverse") == "1" else "marker-end"
        attrs[marker] = "url(#arrow)"
    ET.SubElement(group, "polyline", attrs)

    if edge.label:
        middle = points[len(points) // 2 - 1], points[len(points) // 2]
        mx = (middle[0][0] + middle[1][0]) / 2
        my = (middle[0][1] + middle[1][1]) / 2
        _add_label(group, edge.label, mx, my, edge.style)


def render_preview(diagram: Diagram, content: str) -> str:
    """
    Render the diagram as an SVG document carrying `content` as model metadata.

    Output is deterministic for a given diagram and content.
    """
    positions = _absolute_positions(diagram)
    centers = {
        n.id: (positions[n.id][0] + n.width / 2, positions[n.id][1] + n.height / 2)
        for n in diagram.nodes
    }

    xs: list[float] = []
    ys: list[float] = []
    for node in diagram.nodes:
        x, y = positions[node.id]
        xs += [x, x + node.width]
        ys += [y, y + node.height]
    for edge in diagram.edges:
        xs += [wp.x for wp in edge.waypoints]
        ys += [wp.y for wp in edge.waypoints]

    min_x, min_y = (min(xs), min(ys)) if xs else (0, 0)
    width = (max(xs) - min_x if xs else 0) + PADDING * 2
    height = (max(ys) - min_y if ys else 0) + PADDING * 2

    svg = ET.Element("svg", {
        "xmlns": SVG_NS,
        "version": "1.1",
        "width": f"{_fmt(width)}px",
        "height": f"{_fmt(height)}px",
        "viewBox": f"0 0 {_fmt(width)} {_fmt(height)}",
        "content": content,
    })
    defs = ET.SubElement(svg, "defs")
    marker = ET.SubElement(defs, "marker", {
        "id": "arrow", "markerWidth": "10", "markerHeight": "7",
        "refX": "9", "refY": "3.5", "orient": "auto-start-reverse",
    })
    ET.SubElement(marker, "polygon", {"points": "0 0, 10 3.5, 0 7", "fill": "#000000"})

    group = ET.SubElement(svg, "g", {
        "transform": f"translate({_fmt(PADDING - min_x)},{_fmt(PADDING - min_y)})"
    })
    for node in diagram.nodes:
        _draw_node(group, node, *positions[node.id])
    for edge in diagram.edges:
        _draw_edge(group, edge, centers)

    ET.indent(svg)
    return XML_DECLARATION + ET.tostring(svg, encoding="unicode")
