"""Tests for the style codec and typed overrides."""

import pytest
from pydantic import ValidationError

from diagram_core.style import StyleOverrides, merge_style, parse_style, stringify_style


class TestParseStyle:
    """Test style string parsing."""

    def test_key_values_and_flags(self):
        """Bare keys parse to empty values."""
        assert parse_style("ellipse;whiteSpace=wrap;html=1;") == {
            "ellipse": "",
            "whiteSpace": "wrap",
            "html": "1",
        }

    def test_empty_segments_ignored(self):
        assert parse_style(";;rounded=1;;") == {"rounded": "1"}

    def test_none_and_empty(self):
        assert parse_style(None) == {}
        assert parse_style("") == {}

    def test_value_may_contain_equals(self):
        """Only the first '=' separates key and value."""
        assert parse_style("label=a=b;") == {"label": "a=b"}

    def test_mapping_is_copied(self):
        """Parsing a mapping returns a new dict the caller may mutate."""
        original = {"rounded": "1"}
        parsed = parse_style(original)
        parsed["rounded"] = "0"
        assert original == {"rounded": "1"}


class TestStringifyStyle:
    """Test style serialization."""

    def test_preserves_order(self):
        assert stringify_style({"b": "2", "a": "1"}) == "b=2;a=1;"

    def test_flags_and_none(self):
        """Empty values become bare flags; None values are dropped."""
        assert stringify_style({"ellipse": "", "fillColor": None, "html": "1"}) == "ellipse;html=1;"

    def test_round_trip(self):
        style = {"shape": "cylinder3", "boundedLbl": "1", "text": "", "size": "15"}
        assert parse_style(stringify_style(style)) == style


class TestMergeStyle:
    """Test applying overrides to a style."""

    def test_overwrites_only_given_keys(self):
        merged = merge_style("rounded=1;fillColor=#fff;html=1;", {"fillColor": "#f00"})
        assert merged == "rounded=1;fillColor=#f00;html=1;"

    def test_new_keys_appended(self):
        assert merge_style("html=1;", {"fontSize": 14.0}) == "html=1;fontSize=14;"

    def test_no_overrides_returns_style_unchanged(self):
        assert merge_style("rounded=1;html=1;", None) == "rounded=1;html=1;"
        assert merge_style("rounded=1;html=1;", {"fillColor": None}) == "rounded=1;html=1;"

    def test_typed_overrides(self):
        overrides = StyleOverrides(fill_color="#dae8fc", font_style=1)
        merged = parse_style(merge_style("html=1;", overrides))
        assert merged == {"html": "1", "fillColor": "#dae8fc", "fontStyle": "1"}


class TestStyleOverrides:
    """Test the typed override record."""

    def test_accepts_style_spelling(self):
        overrides = StyleOverrides.model_validate({"fillColor": "#000", "strokeWidth": 2})
        assert overrides.fill_color == "#000"
        assert overrides.to_style() == {"fillColor": "#000", "strokeWidth": 2.0}

    def test_to_style_skips_unset(self):
        assert StyleOverrides().to_style() == {}

    def test_opacity_range(self):
        with pytest.raises(ValidationError):
            StyleOverrides(opacity=150)

    def test_negative_font_style_rejected(self):
        with pytest.raises(ValidationError):
            StyleOverrides(font_style=-1)
