"""Tests for validation and analysis of loaded diagrams."""

from diagram_core.analysis import find_connected_components, summarize_diagram
from diagram_core.editor import DiagramEditor
from diagram_core.models import Diagram, Edge, Node
from diagram_core.validation import IssueSeverity, validate_diagram, validation_summary


def severities(issues):
    return [i.severity for i in issues]


class TestValidateDiagram:
    """Test structural checks."""

    def test_empty_diagram(self):
        issues = validate_diagram(Diagram())
        assert severities(issues) == [IssueSeverity.INFO]
        assert issues[0].message == "Diagram has no nodes"

    def test_clean_diagram(self):
        editor = DiagramEditor()
        editor.add_node("a")
        editor.add_node("b")
        editor.link_nodes("a", "b")
        assert validate_diagram(editor.diagram) == []

    def test_dangling_references(self):
        diagram = Diagram(
            nodes=[Node(id="a"), Node(id="c", parent="ghost")],
            edges=[Edge(id="a-2-b", source="a", target="b")],
        )
        errors = [i for i in validate_diagram(diagram) if i.severity == IssueSeverity.ERROR]

        assert {i.message for i in errors} == {
            "Edge references non-existent target node: b",
            "Node references non-existent parent: ghost",
        }
        assert validation_summary(validate_diagram(diagram))["valid"] is False

    def test_duplicate_pair(self):
        diagram = Diagram(
            nodes=[Node(id="a"), Node(id="b")],
            edges=[
                Edge(id="a-2-b", source="a", target="b"),
                Edge(id="b-2-a", source="b", target="a"),
            ],
        )
        warnings = [i for i in validate_diagram(diagram) if i.severity == IssueSeverity.WARNING]
        assert [w.edge_id for w in warnings] == ["b-2-a"]

    def test_orphans_exclude_containers_and_children(self):
        editor = DiagramEditor()
        for node_id in ("a", "b", "lonely", "group"):
            editor.add_node(node_id)
        editor.add_node("child", parent="group")
        editor.link_nodes("a", "b")

        issues = validate_diagram(editor.diagram)

        assert [i.to_dict() for i in issues] == [
            {"type": "info", "message": "Orphan nodes (no connections): lonely"}
        ]

    def test_self_loop(self):
        diagram = Diagram(nodes=[Node(id="a")], edges=[Edge(id="a-2-a", source="a", target="a")])
        issue = validate_diagram(diagram)[0]
        assert issue.severity == IssueSeverity.INFO
        assert issue.to_dict()["edge_id"] == "a-2-a"


class TestSummarizeDiagram:
    """Test the structural summary."""

    def test_counts(self):
        editor = DiagramEditor()
        editor.add_node("svc")
        editor.add_node("db", kind="Cylinder")
        editor.add_node("cache", kind="Cylinder")
        editor.add_node("lonely", kind="Text")
        editor.link_nodes("svc", "db")
        editor.link_nodes("svc", "cache", undirected=True)

        summary = summarize_diagram(editor.diagram).to_dict()

        assert summary["total_nodes"] == 4
        assert summary["total_edges"] == 2
        assert summary["nodes_by_kind"] == {"Rectangle": 1, "Cylinder": 2, "Text": 1}
        assert summary["undirected_edges"] == 1
        assert summary["connected_components"] == 2
        assert summary["orphan_count"] == 1
        assert summary["most_connected_nodes"][0]["id"] == "svc"
        assert summary["most_connected_nodes"][0]["connections"] == 2

    def test_components(self):
        diagram = Diagram(
            nodes=[Node(id=i) for i in "abcd"],
            edges=[Edge(id="a-2-b", source="a", target="b"), Edge(id="d-2-c", source="d", target="c")],
        )
        components = sorted(sorted(c.node_ids) for c in find_connected_components(diagram))
        assert components == [["a", "b"], ["c", "d"]]
