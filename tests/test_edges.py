"""Tests for edge ids and edge styles."""

import pytest

from diagram_core.edges import (
    EdgeRouting,
    canonical_edge_id,
    compute_edge_style,
    edge_id_candidates,
    find_existing_edge,
    new_edge_id,
)
from diagram_core.errors import InvalidEdgeStyleError
from diagram_core.models import Edge


class TestEdgeIds:
    """Test derived edge identifiers."""

    def test_direct_and_canonical(self):
        assert new_edge_id("svc", "db") == "svc-2-db"
        assert new_edge_id("svc", "db", undirected=True) == "db-2-svc"
        assert canonical_edge_id("b", "a") == canonical_edge_id("a", "b") == "a-2-b"

    def test_candidate_order(self):
        """Direct first, then reverse, then canonical."""
        assert edge_id_candidates("z", "a") == ("z-2-a", "a-2-z", "a-2-z")

    def test_find_existing_prefers_direct(self):
        edges = {
            "a-2-b": Edge(id="a-2-b", source="a", target="b"),
            "b-2-a": Edge(id="b-2-a", source="b", target="a"),
        }
        assert find_existing_edge(edges.get, "b", "a").id == "b-2-a"
        assert find_existing_edge(edges.get, "a", "c") is None


class TestEdgeStyle:
    """Test effective edge style computation."""

    def test_base_style(self):
        assert compute_edge_style() == {
            "edgeStyle": "none",
            "noEdgeStyle": "1",
            "orthogonal": "1",
            "html": "1",
        }

    def test_named_routing_drops_no_edge_style(self):
        style = compute_edge_style(edge_style=EdgeRouting.ORTHOGONAL)
        assert style["edgeStyle"] == "orthogonalEdgeStyle"
        assert "noEdgeStyle" not in style

    def test_straight_routing(self):
        style = compute_edge_style(edge_style="straight")
        assert style["edgeStyle"] == "none"
        assert style["noEdgeStyle"] == "1"

    def test_unknown_routing(self):
        with pytest.raises(InvalidEdgeStyleError, match="zigzag"):
            compute_edge_style(edge_style="zigzag")

    def test_undirected_removes_arrows_and_reverse(self):
        """Undirected edges lose reverse but keep dashed."""
        style = compute_edge_style({"dashed": "1", "reverse": "1"}, undirected=True)
        assert style["startArrow"] == "none"
        assert style["endArrow"] == "none"
        assert style["dashed"] == "1"
        assert "reverse" not in style

    def test_caller_keys_layered_on_top(self):
        style = compute_edge_style({"strokeColor": "#f00", "html": "0"})
        assert style["strokeColor"] == "#f00"
        assert style["html"] == "0"
