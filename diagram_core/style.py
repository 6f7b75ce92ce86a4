"""
Style codec - Convert between style strings and style mappings.

Styles are stored the way draw.io stores them: a semicolon-delimited
list of `key=value` pairs, where a key without a value is a bare flag:

    "ellipse;whiteSpace=wrap;html=1;"  <->  {"ellipse": "", "whiteSpace": "wrap", "html": "1"}

Only a fixed subset of keys (see StyleOverrides) is typed and validated;
every other key passes through untouched.
"""

from typing import Any, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


StyleInput = Union[str, Mapping[str, Any], None]

# Keys that callers may override on nodes and edges, in style-string spelling
STYLE_OVERRIDE_KEYS = (
    "fillColor",
    "strokeColor",
    "fontColor",
    "strokeWidth",
    "fontSize",
    "fontStyle",
    "fontFamily",
    "opacity",
)


class StyleOverrides(BaseModel):
    """
    Typed subset of style keys a caller may set on a node or edge.

    Fields use snake_case; the style-string spelling (fillColor, ...) is
    accepted as an alias on input and used when dumping with by_alias.
    """
    model_config = ConfigDict(populate_by_name=True)

    fill_color: Optional[str] = Field(default=None, alias="fillColor")
    stroke_color: Optional[str] = Field(default=None, alias="strokeColor")
    font_color: Optional[str] = Field(default=None, alias="fontColor")
    stroke_width: Optional[float] = Field(default=None, alias="strokeWidth", ge=0)
    font_size: Optional[float] = Field(default=None, alias="fontSize", ge=0)
    font_style: Optional[int] = Field(default=None, alias="fontStyle", ge=0)  # 1=bold, 2=italic, 4=underline
    font_family: Optional[str] = Field(default=None, alias="fontFamily")
    opacity: Optional[float] = Field(default=None, alias="opacity", ge=0, le=100)

    def to_style(self) -> dict[str, Any]:
        """Only the override keys that were set, in style-string spelling."""
        result = {}
        for name, field in StyleOverrides.model_fields.items():
            value = getattr(self, name)
            if value is not None:
                result[field.alias] = value
        return result


def _format_value(value: Any) -> str:
    # 12.0 -> "12" so numeric overrides read like hand-written styles
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def parse_style(style: StyleInput) -> dict[str, Any]:
    """
    Parse a style string (or copy a mapping) into a fresh dict.

    "rounded=1;ellipse;" -> {"rounded": "1", "ellipse": ""}
    """
    if style is None:
        return {}
    if not isinstance(style, str):
        return dict(style)

    result: dict[str, Any] = {}
    for segment in style.split(";"):
        if not segment:
            continue
        key, _, value = segment.partition("=")
        result[key] = value
    return result


def stringify_style(style: Mapping[str, Any]) -> str:
    """
    Serialize a style mapping back into a style string.

    None values are dropped, falsy values become bare flags.
    """
    parts = []
    for key, value in style.items():
        if value is None:
            continue
        parts.append(f"{key}={_format_value(value)};" if value else f"{key};")
    return "".join(parts)


def merge_style(style: StyleInput, overrides: Union[StyleOverrides, Mapping[str, Any], None]) -> str:
    """
    Overwrite the keys present in `overrides` and return the new style string.

    Keys absent from (or None in) the overrides are left untouched.
    """
    if isinstance(overrides, StyleOverrides):
        overrides = overrides.to_style()
    defined = {k: v for k, v in (overrides or {}).items() if v is not None}

    if not defined:
        return style if isinstance(style, str) else stringify_style(parse_style(style))

    merged = parse_style(style)
    for key, value in defined.items():
        merged[key] = _format_value(value)
    return stringify_style(merged)

