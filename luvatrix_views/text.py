from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import ClassVar

from luvatrix_markup.properties import PropertySpec, prop
from luvatrix_markup.registry import Capabilities
from luvatrix_markup.values import Color, Font

from .view import View


class TextAlignment(IntEnum):
    LEFT = 0
    CENTER = 1
    RIGHT = 2
    JUSTIFIED = 3
    NATURAL = 4


@dataclass(eq=False)
class Label(View):
    """Single- or multi-line text.

    Text can come from the `text` attribute or from the element's own content:
    `<Label font="headline">Hello</Label>`.
    """

    MARKUP_PROPERTIES: ClassVar[tuple[PropertySpec, ...]] = (
        prop("text", "string"),
        prop("font", "font"),
        prop("textColor", "color"),
        prop("textAlignment", "enum", enum_type=TextAlignment),
        prop("numberOfLines", "int"),
    )
    MARKUP_CAPABILITIES: ClassVar[Capabilities] = Capabilities(supports_instruction=True, accepts_text=True)

    text: str = ""
    font: Font = field(default_factory=Font)
    text_color: Color | None = None
    text_alignment: TextAlignment = TextAlignment.NATURAL
    number_of_lines: int = 1

    def process_markup_text(self, text: str) -> None:
        self.text = text
