from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from functools import lru_cache
import re
from types import MappingProxyType
from typing import Literal, Mapping

from PIL import ImageColor

from .errors import DecodeError
from .resources import ResourceLoader


ValueKind = Literal[
    "bool",
    "int",
    "float",
    "string",
    "color",
    "font",
    "font_descriptor",
    "enum",
    "image",
    "object",
]
FontSlant = Literal["regular", "italic"]

DEFAULT_FONT_FAMILY = "System"
DEFAULT_FONT_SIZE = 14.0
LOCALIZED_MARKER = "@"

_HEX_COLOR = re.compile(r"^#([0-9a-fA-F]{6}|[0-9a-fA-F]{8})$")
_NAMED_COLOR = re.compile(r"^[A-Za-z][A-Za-z0-9]*$")
_NUMBER = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")
_INTEGER = re.compile(r"^[+-]?\d+$")
_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")

# Style suffixes accepted in `Family-Style` font names, mapped to (weight, slant).
FONT_STYLES: Mapping[str, tuple[int, FontSlant]] = MappingProxyType(
    {
        "regular": (400, "regular"),
        "light": (300, "regular"),
        "medium": (500, "regular"),
        "semibold": (600, "regular"),
        "bold": (700, "regular"),
        "italic": (400, "italic"),
        "bolditalic": (700, "italic"),
    }
)

# Text-style constants usable in place of a `Family-Style,Size` font value.
TEXT_STYLE_FONTS: Mapping[str, tuple[int, float]] = MappingProxyType(
    {
        "system": (400, DEFAULT_FONT_SIZE),
        "systembold": (700, DEFAULT_FONT_SIZE),
        "body": (400, 17.0),
        "headline": (600, 17.0),
        "subheadline": (400, 15.0),
        "footnote": (400, 13.0),
        "caption": (400, 12.0),
        "title": (400, 28.0),
    }
)

LAYOUT_PRIORITIES: Mapping[str, float] = MappingProxyType(
    {
        "required": 1000.0,
        "defaultHigh": 750.0,
        "defaultLow": 250.0,
        "fittingSizeLevel": 50.0,
    }
)


@dataclass(frozen=True)
class Color:
    red: int
    green: int
    blue: int
    alpha: int = 255

    def __post_init__(self) -> None:
        for channel in (self.red, self.green, self.blue, self.alpha):
            if channel < 0 or channel > 255:
                raise ValueError("color channels must be in [0, 255]")

    def to_rgba(self) -> tuple[int, int, int, int]:
        return (self.red, self.green, self.blue, self.alpha)

    def to_hex(self) -> str:
        if self.alpha == 255:
            return f"#{self.red:02X}{self.green:02X}{self.blue:02X}"
        return f"#{self.alpha:02X}{self.red:02X}{self.green:02X}{self.blue:02X}"


CLEAR = Color(0, 0, 0, 0)


@dataclass(frozen=True)
class FontDescriptor:
    family: str = DEFAULT_FONT_FAMILY
    weight: int = 400
    slant: FontSlant = "regular"

    def __post_init__(self) -> None:
        if not self.family.strip():
            raise ValueError("FontDescriptor requires a non-empty `family`")
        if self.weight < 1 or self.weight > 1000:
            raise ValueError("FontDescriptor `weight` must be in [1, 1000]")


@dataclass(frozen=True)
class Font:
    descriptor: FontDescriptor = FontDescriptor()
    size: float = DEFAULT_FONT_SIZE

    def __post_init__(self) -> None:
        if self.size <= 0:
            raise ValueError("Font `size` must be > 0")

    @property
    def family(self) -> str:
        return self.descriptor.family


class ValueDecoder:
    """Turns attribute strings into typed values.

    The decoder holds only read-only lookup tables, so the same input always
    decodes to the same value.
    """

    def __init__(
        self,
        *,
        colors: Mapping[str, str] | None = None,
        constants: Mapping[str, float] | None = None,
        resources: ResourceLoader | None = None,
    ) -> None:
        self._colors = MappingProxyType(dict(colors or {}))
        merged = dict(LAYOUT_PRIORITIES)
        merged.update(constants or {})
        self._constants = MappingProxyType(merged)
        self.resources = resources

    def decode(self, raw: str, kind: ValueKind, *, enum_type: type[IntEnum] | None = None) -> object:
        if kind == "string":
            return self.decode_string(raw)
        if kind == "bool":
            return parse_bool(raw)
        if kind == "int":
            return self.decode_int(raw)
        if kind == "float":
            return self.decode_float(raw)
        if kind == "color":
            return self.decode_color(raw)
        if kind == "font":
            return parse_font(raw.strip())
        if kind == "font_descriptor":
            return parse_font_descriptor(raw.strip())
        if kind == "enum":
            if enum_type is None:
                raise DecodeError("enum value requires an enumeration type")
            return parse_enum(raw, enum_type)
        raise DecodeError(f"kind `{kind}` is not decoded from a literal")

    def decode_string(self, raw: str) -> str:
        if raw.startswith(LOCALIZED_MARKER * 2):
            return raw[1:]
        if raw.startswith(LOCALIZED_MARKER) and len(raw) > 1:
            if self.resources is None:
                raise DecodeError(f"no string table available for localized value `{raw}`")
            return self.resources.lookup_localized_string(raw[1:])
        return raw

    def decode_int(self, raw: str) -> int:
        token = raw.strip()
        if _INTEGER.match(token):
            return int(token)
        constant = self._constants.get(token)
        if constant is not None and float(constant).is_integer():
            return int(constant)
        raise DecodeError(f"`{raw}` is not an integer")

    def decode_float(self, raw: str) -> float:
        token = raw.strip()
        if _NUMBER.match(token):
            return float(token)
        constant = self._constants.get(token)
        if constant is not None:
            return float(constant)
        raise DecodeError(f"`{raw}` is not a number")

    def decode_color(self, raw: str) -> Color:
        token = raw.strip()
        seen: list[str] = []
        while token in self._colors:
            if token in seen:
                raise DecodeError(f"color alias cycle: {' -> '.join(seen + [token])}")
            seen.append(token)
            token = self._colors[token].strip()
        return parse_color(token)


def parse_bool(raw: str) -> bool:
    token = raw.strip().lower()
    if token == "true":
        return True
    if token == "false":
        return False
    raise DecodeError(f"`{raw}` is not a boolean (expected true/false)")


@lru_cache(maxsize=512)
def parse_color(raw: str) -> Color:
    """Parse `#RRGGBB`, `#AARRGGBB` or a named color constant."""

    if _HEX_COLOR.match(raw):
        digits = raw[1:]
        if len(digits) == 8:
            alpha, rgb = int(digits[:2], 16), digits[2:]
        else:
            alpha, rgb = 255, digits
        return Color(int(rgb[0:2], 16), int(rgb[2:4], 16), int(rgb[4:6], 16), alpha)
    lowered = raw.lower()
    if lowered in ("clear", "transparent"):
        return CLEAR
    if _NAMED_COLOR.match(raw):
        try:
            channels = ImageColor.getrgb(lowered)
        except ValueError:
            pass
        else:
            if len(channels) == 4:
                return Color(channels[0], channels[1], channels[2], channels[3])
            return Color(channels[0], channels[1], channels[2])
    raise DecodeError(f"`{raw}` is not a color (expected #RRGGBB, #AARRGGBB or a color name)")


@lru_cache(maxsize=256)
def parse_font(raw: str) -> Font:
    """Parse `Family-Style,Size`, `Family,Size`, a text style name or a bare size."""

    if _NUMBER.match(raw):
        return Font(FontDescriptor(), _font_size(raw))
    text_style = TEXT_STYLE_FONTS.get(raw.lower())
    if text_style is not None:
        weight, size = text_style
        return Font(FontDescriptor(weight=weight), size)
    name, sep, size = raw.rpartition(",")
    if not sep or not name.strip():
        raise DecodeError(f"`{raw}` is not a font (expected Family-Style,Size)")
    return Font(parse_font_descriptor(name.strip()), _font_size(size.strip()))


@lru_cache(maxsize=256)
def parse_font_descriptor(raw: str) -> FontDescriptor:
    if not raw:
        raise DecodeError("font family must be non-empty")
    family, sep, style = raw.rpartition("-")
    if sep and family and style.lower() in FONT_STYLES:
        weight, slant = FONT_STYLES[style.lower()]
        return FontDescriptor(family=family, weight=weight, slant=slant)
    return FontDescriptor(family=raw)


def parse_enum(raw: str, enum_type: type[IntEnum]) -> IntEnum:
    token = raw.strip()
    if _INTEGER.match(token):
        try:
            return enum_type(int(token))
        except ValueError as exc:
            raise DecodeError(f"{token} is not a valid {enum_type.__name__}") from exc
    wanted = _CAMEL_BOUNDARY.sub("_", token).upper()
    for member in enum_type:
        if member.name == wanted or member.name.lower() == token.lower():
            return member
    choices = ", ".join(member.name.lower() for member in enum_type)
    raise DecodeError(f"`{raw}` is not a {enum_type.__name__} (expected one of: {choices})")


def _font_size(raw: str) -> float:
    if not _NUMBER.match(raw):
        raise DecodeError(f"`{raw}` is not a font size")
    size = float(raw)
    if size <= 0:
        raise DecodeError("font size must be > 0")
    return size
