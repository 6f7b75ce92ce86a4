"""Tests for the mxGraphModel codec."""

import xml.etree.ElementTree as ET

from diagram_core.codec import decode_model, encode_model, from_xml, to_xml
from diagram_core.editor import DiagramEditor


def build_editor():
    editor = DiagramEditor()
    editor.add_node("group", title="Group", width=400, height=300)
    editor.add_node("svc", title="Service", parent="group", x=20, y=30)
    editor.add_node("box", kind="RoundedRectangle", corner_radius=6)
    editor.link_nodes("svc", "box", title="calls", waypoints=[{"x": 10.5, "y": 20}])
    editor.link_nodes("group", "box", undirected=True)
    return editor


class TestEncodeModel:
    """Test XML produced for a diagram."""

    def test_reserved_cells_first(self):
        model = encode_model(build_editor().diagram)
        cells = model.findall("root/mxCell")

        assert cells[0].attrib == {"id": "0"}
        assert cells[1].attrib == {"id": "1", "parent": "0"}

    def test_vertex_cell(self):
        model = encode_model(build_editor().diagram)
        cell = model.find("root/mxCell[@id='svc']")

        assert cell.get("vertex") == "1"
        assert cell.get("parent") == "group"
        assert cell.get("value") == "Service"
        geometry = cell.find("mxGeometry")
        assert (geometry.get("x"), geometry.get("y"), geometry.get("width")) == ("20", "30", "120")

    def test_top_level_parent_is_default_layer(self):
        model = encode_model(build_editor().diagram)
        assert model.find("root/mxCell[@id='group']").get("parent") == "1"

    def test_edge_cell(self):
        model = encode_model(build_editor().diagram)
        cell = model.find("root/mxCell[@id='svc-2-box']")

        assert cell.get("edge") == "1"
        assert (cell.get("source"), cell.get("target")) == ("svc", "box")
        points = cell.findall("mxGeometry/Array/mxPoint")
        assert [(p.get("x"), p.get("y")) for p in points] == [("10.5", "20")]


class TestDecodeModel:
    """Test reading XML back."""

    def test_round_trip(self):
        editor = build_editor()
        restored = from_xml(to_xml(editor.diagram))
        assert restored.to_json_dict() == editor.to_json_dict()

    def test_kinds_and_radius_recovered(self):
        restored = from_xml(to_xml(build_editor().diagram))
        box = restored.get_node("box")

        assert box.kind == "RoundedRectangle"
        assert box.corner_radius == 6

    def test_undirected_recovered(self):
        restored = from_xml(to_xml(build_editor().diagram))
        assert restored.get_edge("box-2-group").directed is False
        assert restored.get_edge("svc-2-box").directed is True

    def test_dangling_edges_dropped(self):
        xml = """
        <mxGraphModel><root>
          <mxCell id="0"/><mxCell id="1" parent="0"/>
          <mxCell id="a" value="A" style="rounded=1;whiteSpace=wrap;html=1;" vertex="1" parent="1">
            <mxGeometry x="1" y="2" width="3" height="4" as="geometry"/>
          </mxCell>
          <mxCell id="a-2-b" edge="1" parent="1" source="a" target="b"/>
        </root></mxGraphModel>
        """
        diagram = from_xml(xml)
        assert [n.id for n in diagram.nodes] == ["a"]
        assert diagram.edges == []

    def test_missing_parent_moved_to_top_level(self):
        xml = """
        <mxGraphModel><root>
          <mxCell id="0"/><mxCell id="1" parent="0"/>
          <mxCell id="a" vertex="1" parent="gone"><mxGeometry as="geometry"/></mxCell>
        </root></mxGraphModel>
        """
        diagram = from_xml(xml)
        assert diagram.get_node("a").parent is None

    def test_parent_cycle_broken(self):
        """Nodes that are each other's parent end up with a top-level ancestor."""
        xml = """
        <mxGraphModel><root>
          <mxCell id="0"/><mxCell id="1" parent="0"/>
          <mxCell id="a" vertex="1" parent="b"><mxGeometry as="geometry"/></mxCell>
          <mxCell id="b" vertex="1" parent="a"><mxGeometry as="geometry"/></mxCell>
          <mxCell id="c" vertex="1" parent="c"><mxGeometry as="geometry"/></mxCell>
        </root></mxGraphModel>
        """
        diagram = from_xml(xml)
        by_id = {n.id: n for n in diagram.nodes}

        assert by_id["c"].parent is None
        assert {by_id["a"].parent, by_id["b"].parent} == {None, "b"}

        editor = DiagramEditor(diagram)
        assert set(editor.remove_nodes(["b"])) == {"a", "b"}
        assert [n.id for n in editor.diagram.nodes] == ["c"]

    def test_edges_before_vertices(self):
        """Edge cells may precede their endpoints in the file."""
        xml = """
        <mxGraphModel><root>
          <mxCell id="0"/><mxCell id="1" parent="0"/>
          <mxCell id="a-2-b" value="x" edge="1" parent="1" source="a" target="b"/>
          <mxCell id="a" vertex="1" parent="1"><mxGeometry as="geometry"/></mxCell>
          <mxCell id="b" vertex="1" parent="1"><mxGeometry as="geometry"/></mxCell>
        </root></mxGraphModel>
        """
        diagram = from_xml(xml)
        assert [e.id for e in diagram.edges] == ["a-2-b"]
        assert diagram.edges[0].label == "x"

    def test_nested_model(self):
        """A model wrapped in mxfile/diagram is found."""
        model = encode_model(build_editor().diagram)
        wrapper = ET.Element("mxfile")
        ET.SubElement(wrapper, "diagram").append(model)
        diagram = from_xml(ET.tostring(wrapper, encoding="unicode"))
        assert len(diagram.nodes) == 3

    def test_no_model(self):
        assert from_xml("<mxfile/>").nodes == []

    def test_decode_model_element(self):
        diagram = decode_model(encode_model(build_editor().diagram), name="Other")
        assert diagram.name == "Other"
