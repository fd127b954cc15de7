from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import ClassVar, Literal, Mapping

from PIL import Image

from luvatrix_markup.errors import DecodeError, UnknownElementError
from luvatrix_markup.properties import PropertySpec, prop
from luvatrix_markup.registry import Capabilities
from luvatrix_markup.values import Color, Font

from .view import View


ButtonStyle = Literal["system", "custom"]
ControlState = Literal["normal", "highlighted", "disabled", "selected"]


class ContentAlignment(IntEnum):
    CENTER = 0
    LEFT = 1
    RIGHT = 2
    FILL = 3
    LEADING = 4
    TRAILING = 5


@dataclass(eq=False)
class Control(View):
    MARKUP_PROPERTIES: ClassVar[tuple[PropertySpec, ...]] = (
        prop("enabled", "bool"),
        prop("selected", "bool"),
        prop("highlighted", "bool"),
        prop("contentHorizontalAlignment", "enum", enum_type=ContentAlignment),
    )
    MARKUP_CAPABILITIES: ClassVar[Capabilities] = Capabilities(supports_instruction=True)

    enabled: bool = True
    selected: bool = False
    highlighted: bool = False
    content_horizontal_alignment: ContentAlignment = ContentAlignment.CENTER

    @property
    def state(self) -> ControlState:
        if not self.enabled:
            return "disabled"
        if self.highlighted:
            return "highlighted"
        if self.selected:
            return "selected"
        return "normal"


@dataclass(eq=False)
class Button(Control):
    """Push button; the element name picks the style (`Button` or `CustomButton`)."""

    MARKUP_PROPERTIES: ClassVar[tuple[PropertySpec, ...]] = (
        prop("normalTitle", "string"),
        prop("highlightedTitle", "string"),
        prop("disabledTitle", "string"),
        prop("selectedTitle", "string"),
        prop("normalTitleColor", "color"),
        prop("highlightedTitleColor", "color"),
        prop("disabledTitleColor", "color"),
        prop("selectedTitleColor", "color"),
        prop("normalImage", "image"),
        prop("highlightedImage", "image"),
        prop("disabledImage", "image"),
        prop("selectedImage", "image"),
        prop("titleFont", "font"),
    )

    style: ButtonStyle = "system"
    normal_title: str | None = None
    highlighted_title: str | None = None
    disabled_title: str | None = None
    selected_title: str | None = None
    normal_title_color: Color | None = None
    highlighted_title_color: Color | None = None
    disabled_title_color: Color | None = None
    selected_title_color: Color | None = None
    normal_image: Image.Image | None = field(default=None, repr=False)
    highlighted_image: Image.Image | None = field(default=None, repr=False)
    disabled_image: Image.Image | None = field(default=None, repr=False)
    selected_image: Image.Image | None = field(default=None, repr=False)
    title_font: Font = field(default_factory=Font)

    @classmethod
    def create_for_markup(cls, style: str | None) -> "Button":
        if style not in (None, "system", "custom"):
            raise ValueError(f"unknown button style: {style}")
        return cls(style="custom" if style == "custom" else "system")

    def title_for_state(self, state: ControlState | None = None) -> str | None:
        state = state or self.state
        title = getattr(self, f"{state}_title")
        return title if title is not None else self.normal_title

    def title_color_for_state(self, state: ControlState | None = None) -> Color | None:
        state = state or self.state
        color = getattr(self, f"{state}_title_color")
        return color if color is not None else self.normal_title_color


@dataclass(frozen=True)
class Segment:
    title: str | None
    value: str | None = None
    image_name: str | None = None


@dataclass(eq=False)
class SegmentedControl(Control):
    """Segments are declared as `<segment title="…" value="…"/>` child elements."""

    MARKUP_PROPERTIES: ClassVar[tuple[PropertySpec, ...]] = (
        prop("selectedSegmentIndex", "int"),
    )
    MARKUP_CAPABILITIES: ClassVar[Capabilities] = Capabilities(
        supports_instruction=True,
        supports_raw_element=True,
    )

    segments: list[Segment] = field(default_factory=list)
    selected_segment_index: int = -1

    def process_markup_element(self, name: str, attributes: Mapping[str, str]) -> None:
        if name != "segment":
            raise UnknownElementError(f"SegmentedControl does not accept `<{name}>`")
        if "title" not in attributes and "image" not in attributes:
            raise DecodeError("`<segment>` requires a `title` or an `image`")
        self.segments.append(
            Segment(
                title=attributes.get("title"),
                value=attributes.get("value"),
                image_name=attributes.get("image"),
            )
        )

    def value_for_segment(self, index: int) -> str | None:
        return self.segments[index].value

    def segment_with_value(self, value: str) -> int | None:
        for index, segment in enumerate(self.segments):
            if segment.value == value:
                return index
        return None

    @property
    def selected_value(self) -> str | None:
        if 0 <= self.selected_segment_index < len(self.segments):
            return self.segments[self.selected_segment_index].value
        return None


@dataclass(frozen=True)
class PickerRow:
    title: str
    value: str | None = None


@dataclass
class PickerComponent:
    name: str | None = None
    rows: list[PickerRow] = field(default_factory=list)


@dataclass(eq=False)
class PickerView(View):
    """Static picker content.

    `<component name="sizes"/>` starts a component; the `<row title="…" value="…"/>`
    elements that follow belong to it. Rows before any component go into an
    unnamed first component.
    """

    MARKUP_CAPABILITIES: ClassVar[Capabilities] = Capabilities(
        supports_instruction=True,
        supports_raw_element=True,
    )

    components: list[PickerComponent] = field(default_factory=list)
    selected_rows: dict[int, int] = field(default_factory=dict)

    def process_markup_element(self, name: str, attributes: Mapping[str, str]) -> None:
        if name == "component":
            self.components.append(PickerComponent(name=attributes.get("name")))
        elif name == "row":
            title = attributes.get("title")
            if title is None:
                raise DecodeError("`<row>` requires a `title`")
            if not self.components:
                self.components.append(PickerComponent())
            self.components[-1].rows.append(PickerRow(title=title, value=attributes.get("value")))
        else:
            raise UnknownElementError(f"PickerView does not accept `<{name}>`")

    def number_of_components(self) -> int:
        return len(self.components)

    def number_of_rows(self, component: int) -> int:
        return len(self.components[component].rows)

    def name_for_component(self, component: int) -> str | None:
        return self.components[component].name

    def component_with_name(self, name: str) -> int | None:
        for index, component in enumerate(self.components):
            if component.name == name:
                return index
        return None

    def row_for_value(self, value: str | None, component: int) -> int | None:
        for index, row in enumerate(self.components[component].rows):
            if row.value == value:
                return index
        return None

    def select_value(self, value: str | None, component: int) -> bool:
        row = self.row_for_value(value, component)
        if row is None:
            return False
        self.selected_rows[component] = row
        return True

    def value_for_component(self, component: int) -> str | None:
        row = self.selected_rows.get(component)
        if row is None:
            return None
        return self.components[component].rows[row].value
