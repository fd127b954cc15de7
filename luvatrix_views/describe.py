from __future__ import annotations

from dataclasses import MISSING, fields
from enum import Enum

from PIL import Image

from luvatrix_markup.properties import property_table
from luvatrix_markup.values import Color, Font

from .view import View


def describe_view(view: View) -> str:
    """Render a built view tree as indented text, one view per line.

    Only markup properties that differ from their defaults are listed, so the
    output is stable across runs.
    """

    lines: list[str] = []
    _describe(view, 0, lines)
    return "\n".join(lines)


def _describe(view: View, depth: int, lines: list[str]) -> None:
    parts = [type(view).__name__]
    defaults = _defaults(view)
    for spec in property_table(type(view)).values():
        if not spec.settable:
            continue
        value = getattr(view, spec.attribute, None)
        if spec.attribute in defaults and defaults[spec.attribute] == value:
            continue
        parts.append(f"{spec.name}={_format(value)}")
    lines.append("  " * depth + " ".join(parts))
    for child in view.markup_children():
        _describe(child, depth + 1, lines)


def _defaults(view: View) -> dict[str, object]:
    out: dict[str, object] = {}
    for f in fields(view):
        if f.default is not MISSING:
            out[f.name] = f.default
        elif f.default_factory is not MISSING:
            out[f.name] = f.default_factory()
    return out


def _format(value: object) -> str:
    if isinstance(value, Color):
        return value.to_hex()
    if isinstance(value, Font):
        descriptor = value.descriptor
        style = "" if descriptor.weight == 400 and descriptor.slant == "regular" else f"/{descriptor.weight}{descriptor.slant[0]}"
        return f"{descriptor.family}{style}@{value.size:g}"
    if isinstance(value, Image.Image):
        return f"<image {value.width}x{value.height}>"
    if isinstance(value, Enum):
        return value.name.lower()
    if isinstance(value, str):
        return repr(value)
    return str(value)
