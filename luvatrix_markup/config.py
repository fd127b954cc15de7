from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
import re
import tomllib
from types import MappingProxyType
from typing import Any, Mapping

_HEX_COLOR = re.compile(r"^#[0-9a-fA-F]{6}([0-9a-fA-F]{2})?$")
_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_.-]*$")

DEFAULT_INERT_INSTRUCTIONS = frozenset({"xml-stylesheet", "comment"})


@dataclass(frozen=True)
class MarkupConfig:
    """Builder settings, usually read from a `markup.toml` next to the documents."""

    outlet_attribute: str = "id"
    bind_prefix: str = "bind."
    inert_instructions: frozenset[str] = DEFAULT_INERT_INSTRUCTIONS
    namespaces: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    colors: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    constants: Mapping[str, float] = field(default_factory=lambda: MappingProxyType({}))
    resource_root: Path | None = None
    strings_file: str = "strings.json"

    def __post_init__(self) -> None:
        if not _NAME.match(self.outlet_attribute):
            raise ValueError("`outlet_attribute` must be a valid attribute name")
        if not self.bind_prefix.strip() or self.bind_prefix == self.outlet_attribute:
            raise ValueError("`bind_prefix` must be non-empty and differ from `outlet_attribute`")
        if not self.strings_file.strip():
            raise ValueError("`strings_file` must be non-empty")
        object.__setattr__(self, "inert_instructions", frozenset(self.inert_instructions))
        object.__setattr__(self, "namespaces", MappingProxyType(dict(self.namespaces)))
        object.__setattr__(self, "colors", MappingProxyType(validate_color_table(self.colors)))
        object.__setattr__(self, "constants", MappingProxyType(_validate_constants(self.constants)))


def validate_color_table(colors: Mapping[str, Any] | None) -> dict[str, str]:
    """Check a named color table.

    Values are hex colors (`#RRGGBB` or `#AARRGGBB`) or the name of another
    entry in the same table.
    """

    table = dict(colors or {})
    for key, value in table.items():
        if not isinstance(key, str) or not _NAME.match(key):
            raise ValueError(f"Color name `{key}` must be an identifier")
        if not isinstance(value, str):
            raise ValueError(f"Color `{key}` must be a string")
        if not _HEX_COLOR.match(value) and value not in table:
            raise ValueError(f"Color `{key}` must be a hex color (#RRGGBB or #AARRGGBB) or another color name")
    return table


def _validate_constants(constants: Mapping[str, Any] | None) -> dict[str, float]:
    out: dict[str, float] = {}
    for key, value in dict(constants or {}).items():
        if not isinstance(key, str) or not key.isidentifier():
            raise ValueError(f"Constant name `{key}` must be an identifier")
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"Constant `{key}` must be numeric")
        out[key] = value
    return out


def load_markup_config(path: Path) -> MarkupConfig:
    path = Path(path)
    with path.open("rb") as f:
        data = tomllib.load(f)
    raw = data.get("markup", {})
    if not isinstance(raw, dict):
        raise ValueError(f"{path}: [markup] must be a table")
    kwargs: dict[str, Any] = {}
    for key in ("outlet_attribute", "bind_prefix", "strings_file"):
        if key in raw:
            kwargs[key] = _require_str(raw[key], key)
    if "inert_instructions" in raw:
        inert = raw["inert_instructions"]
        if not isinstance(inert, list) or not all(isinstance(item, str) for item in inert):
            raise ValueError("`inert_instructions` must be a list of strings")
        kwargs["inert_instructions"] = frozenset(inert)
    for key in ("namespaces", "colors", "constants"):
        if key in raw:
            if not isinstance(raw[key], dict):
                raise ValueError(f"[markup.{key}] must be a table")
            kwargs[key] = raw[key]
    for prefix, module_name in kwargs.get("namespaces", {}).items():
        _require_str(module_name, f"namespaces.{prefix}")
    if "resource_root" in raw:
        kwargs["resource_root"] = (path.parent / _require_str(raw["resource_root"], "resource_root")).resolve()
    return MarkupConfig(**kwargs)


def _require_str(value: Any, name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"`{name}` must be a non-empty string")
    return value
