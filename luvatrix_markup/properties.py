from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from functools import lru_cache
import re
from types import MappingProxyType
from typing import Mapping

from .errors import DecodeError, MarkupError, UnknownPropertyError
from .values import ValueDecoder, ValueKind

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def snake_case(name: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", name).lower()


@dataclass(frozen=True)
class PropertySpec:
    """Declares one markup-settable attribute of a component type.

    `name` is the markup (camelCase) name; `attribute` is the Python attribute it
    writes, derived from `name` when omitted.
    """

    name: str
    kind: ValueKind
    attribute: str = ""
    enum_type: type[IntEnum] | None = None
    settable: bool = True

    def __post_init__(self) -> None:
        if not self.name.strip() or "." in self.name:
            raise ValueError(f"invalid property name: {self.name!r}")
        if not self.attribute:
            object.__setattr__(self, "attribute", snake_case(self.name))
        if self.kind == "enum" and self.enum_type is None:
            raise ValueError(f"enum property `{self.name}` requires enum_type")
        if self.kind == "object" and self.settable:
            object.__setattr__(self, "settable", False)


def prop(name: str, kind: ValueKind, **kwargs: object) -> PropertySpec:
    return PropertySpec(name, kind, **kwargs)  # type: ignore[arg-type]


@lru_cache(maxsize=None)
def property_table(cls: type) -> Mapping[str, PropertySpec]:
    """Merged `MARKUP_PROPERTIES` of `cls` and its bases; subclasses win."""

    table: dict[str, PropertySpec] = {}
    for klass in reversed(cls.__mro__):
        for spec in klass.__dict__.get("MARKUP_PROPERTIES", ()):
            table[spec.name] = spec
    return MappingProxyType(table)


def resolve_attribute_name(target: object, name: str) -> str:
    spec = property_table(type(target)).get(name)
    return spec.attribute if spec is not None else name


def apply_property(target: object, name: str, raw: str, decoder: ValueDecoder) -> None:
    """Decode `raw` according to the declared kind of `name` and assign it.

    Dotted names walk `object`-kind properties; intermediates are never created.
    """

    head, _, rest = name.partition(".")
    spec = property_table(type(target)).get(head)
    if spec is None:
        raise UnknownPropertyError(f"{type(target).__name__} has no markup property `{head}`")
    if rest:
        if spec.kind != "object":
            raise UnknownPropertyError(f"`{head}` of {type(target).__name__} has no nested properties")
        inner = getattr(target, spec.attribute, None)
        if inner is None:
            raise UnknownPropertyError(f"`{head}` of {type(target).__name__} is not set")
        apply_property(inner, rest, raw, decoder)
        return
    if not spec.settable:
        raise UnknownPropertyError(f"`{head}` of {type(target).__name__} is not settable")
    setattr(target, spec.attribute, _typed_value(spec, raw, decoder))


def _typed_value(spec: PropertySpec, raw: str, decoder: ValueDecoder) -> object:
    if spec.kind == "image":
        if decoder.resources is None:
            raise DecodeError(f"no image loader available for `{spec.name}`")
        return decoder.resources.load_image(raw.strip())
    try:
        return decoder.decode(raw, spec.kind, enum_type=spec.enum_type)
    except DecodeError as exc:
        raise DecodeError(f"`{spec.name}`: {exc.reason}") from exc
    except MarkupError:
        raise
    except ValueError as exc:
        raise DecodeError(f"`{spec.name}`: {exc}") from exc
