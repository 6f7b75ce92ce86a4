"""
mxGraphModel codec - Encode/decode a Diagram as draw.io model XML.

Layout of the XML:

    <mxGraphModel>
      <root>
        <mxCell id="0"/>
        <mxCell id="1" parent="0"/>                       <- default parent (our "root")
        <mxCell id="svc" value="..." style="..." vertex="1" parent="1">
          <mxGeometry x="100" y="150" width="120" height="60" as="geometry"/>
        </mxCell>
        <mxCell id="svc-2-db" value="..." style="..." edge="1" parent="1" source="svc" target="db">
          <mxGeometry relative="1" as="geometry">
            <Array as="points"><mxPoint x="10" y="20"/></Array>
          </mxGeometry>
        </mxCell>
      </root>
    </mxGraphModel>

Kinds are not stored in the XML; they are inferred from the style on decode.
"""

import xml.etree.ElementTree as ET
from typing import Optional

from .kinds import NodeKind, corner_radius_from_style, infer_kind
from .models import Diagram, Edge, Node, Waypoint
from .style import parse_style, stringify_style


ROOT_CELL_ID = "0"
DEFAULT_PARENT_ID = "1"
RESERVED_IDS = frozenset({ROOT_CELL_ID, DEFAULT_PARENT_ID})


def _num(value: float) -> str:
    """Format a coordinate without a trailing .0"""
    return str(int(value)) if float(value).is_integer() else str(value)


def encode_model(diagram: Diagram) -> ET.Element:
    """Build the <mxGraphModel> element for a diagram."""
    model = ET.Element("mxGraphModel")
    root_elem = ET.SubElement(model, "root")

    ET.SubElement(root_elem, "mxCell", {"id": ROOT_CELL_ID})
    ET.SubElement(root_elem, "mxCell", {"id": DEFAULT_PARENT_ID, "parent": ROOT_CELL_ID})

    for node in diagram.nodes:
        cell = ET.SubElement(root_elem, "mxCell", {
            "id": node.id,
            "value": node.label,
            "style": stringify_style(node.style),
            "vertex": "1",
            "parent": node.parent or DEFAULT_PARENT_ID,
        })
        ET.SubElement(cell, "mxGeometry", {
            "x": _num(node.x),
            "y": _num(node.y),
            "width": _num(node.width),
            "height": _num(node.height),
            "as": "geometry",
        })

    for edge in diagram.edges:
        cell = ET.SubElement(root_elem, "mxCell", {
            "id": edge.id,
            "value": edge.label or "",
            "style": stringify_style(edge.style),
            "edge": "1",
            "parent": DEFAULT_PARENT_ID,
            "source": edge.source,
            "target": edge.target,
        })
        geometry = ET.SubElement(cell, "mxGeometry", {"relative": "1", "as": "geometry"})
        if edge.waypoints:
            points = ET.SubElement(geometry, "Array", {"as": "points"})
            for wp in edge.waypoints:
                ET.SubElement(points, "mxPoint", {"x": _num(wp.x), "y": _num(wp.y)})

    return model


def _float(value: Optional[str], default: float = 0) -> float:
    try:
        return float(value) if value is not None else default
    except ValueError:
        return default


def _is_directed(style: dict[str, str]) -> bool:
    return not (style.get("startArrow") == "none" and style.get("endArrow") == "none")


def _repair_parents(nodes: list[Node]):
    """Move nodes whose parent is missing, or part of a parent cycle, to the top level."""
    by_id = {n.id: n for n in nodes}
    for node in nodes:
        if node.parent is not None and node.parent not in by_id:
            node.parent = None

    for node in nodes:
        seen = {node.id}
        current = node
        while current.parent is not None:
            if current.parent in seen:
                current.parent = None
                break
            seen.add(current.parent)
            current = by_id[current.parent]


def decode_model(model: ET.Element, name: str = "Page-1") -> Diagram:
    """
    Rebuild a Diagram from an <mxGraphModel> element.

    Vertices are read before edges so edges always find their endpoints;
    edges whose endpoints are missing are dropped. Dangling or cyclic
    parent references are cut so every parent chain ends at the top level.
    """
    cells = [c for c in model.iter("mxCell") if c.get("id") not in RESERVED_IDS]
    nodes: list[Node] = []
    node_ids: set[str] = set()

    for cell in cells:
        if cell.get("vertex") != "1":
            continue
        style = parse_style(cell.get("style", ""))
        kind = infer_kind(style)
        geometry = cell.find("mxGeometry")
        geo = geometry.attrib if geometry is not None else {}
        parent = cell.get("parent")

        nodes.append(Node(
            id=cell.get("id"),
            label=cell.get("value", ""),
            kind=kind.value,
            x=_float(geo.get("x")),
            y=_float(geo.get("y")),
            width=_float(geo.get("width")),
            height=_float(geo.get("height")),
            parent=None if parent in RESERVED_IDS or parent is None else parent,
            style=style,
            corner_radius=(
                corner_radius_from_style(style) if kind is NodeKind.ROUNDED_RECTANGLE else None
            ),
        ))
        node_ids.add(cell.get("id"))

    _repair_parents(nodes)

    edges: list[Edge] = []
    for cell in cells:
        if cell.get("edge") != "1":
            continue
        source, target = cell.get("source"), cell.get("target")
        if source not in node_ids or target not in node_ids:
            continue

        style = parse_style(cell.get("style", ""))
        waypoints = [
            Waypoint(x=_float(p.get("x")), y=_float(p.get("y")))
            for p in cell.iterfind("mxGeometry/Array/mxPoint")
        ]
        edges.append(Edge(
            id=cell.get("id"),
            source=source,
            target=target,
            label=cell.get("value") or None,
            style=style,
            directed=_is_directed(style),
            waypoints=waypoints,
        ))

    return Diagram(name=name, nodes=nodes, edges=edges)


def to_xml(diagram: Diagram) -> str:
    """Serialize a diagram to indented mxGraphModel XML."""
    model = encode_model(diagram)
    ET.indent(model)
    return ET.tostring(model, encoding="unicode")


def from_xml(xml: str, name: str = "Page-1") -> Diagram:
    """Parse mxGraphModel XML (raises xml.etree.ElementTree.ParseError on bad input)."""
    root = ET.fromstring(xml)
    model = root if root.tag == "mxGraphModel" else root.find(".//mxGraphModel")
    if model is None:
        return Diagram(name=name)
    return decode_model(model, name=name)
