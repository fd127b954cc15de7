from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import ClassVar, Literal

from luvatrix_markup.errors import TooManyChildrenError
from luvatrix_markup.properties import PropertySpec, prop
from luvatrix_markup.registry import AppendPolicy, Capabilities

from .view import View


Axis = Literal["horizontal", "vertical"]


class BoxAlignment(IntEnum):
    TOP = 0
    BOTTOM = 1
    LEFT = 2
    RIGHT = 3
    LEADING = 4
    TRAILING = 5
    CENTER = 6
    BASELINE = 7
    FILL = 8


@dataclass(eq=False)
class LayoutView(View):
    """Base for views that arrange their children; arrangement itself is left to the renderer."""

    MARKUP_PROPERTIES: ClassVar[tuple[PropertySpec, ...]] = (
        prop("layoutMarginsRelativeArrangement", "bool"),
        prop("topSpacing", "float"),
        prop("bottomSpacing", "float"),
        prop("leadingSpacing", "float"),
        prop("trailingSpacing", "float"),
    )

    layout_margins_relative_arrangement: bool = True
    top_spacing: float = 0.0
    bottom_spacing: float = 0.0
    leading_spacing: float = 0.0
    trailing_spacing: float = 0.0


@dataclass(eq=False)
class BoxView(LayoutView):
    """Arranges children in a line; `Row` builds a horizontal box, `Column` a vertical one."""

    MARKUP_PROPERTIES: ClassVar[tuple[PropertySpec, ...]] = (
        prop("alignment", "enum", enum_type=BoxAlignment),
        prop("spacing", "float"),
    )

    axis: Axis = "vertical"
    alignment: BoxAlignment = BoxAlignment.FILL
    spacing: float = 8.0
    arranged_subviews: list[View] = field(default_factory=list, repr=False)

    @classmethod
    def create_for_markup(cls, style: str | None) -> "BoxView":
        if style not in (None, "horizontal", "vertical"):
            raise ValueError(f"unknown box axis: {style}")
        return cls(axis="horizontal" if style == "horizontal" else "vertical")

    def append_markup_element_view(self, view: View) -> None:
        self.arranged_subviews.append(view)
        self.subviews.append(view)

    def markup_children(self) -> list[View]:
        return list(self.arranged_subviews)


@dataclass(eq=False)
class Spacer(View):
    """Flexible empty space inside a box view."""

    MARKUP_CAPABILITIES: ClassVar[Capabilities] = Capabilities(supports_instruction=True)

    weight: float | None = 1.0


@dataclass(eq=False)
class ScrollView(View):
    """Scrolls exactly one content view."""

    MARKUP_PROPERTIES: ClassVar[tuple[PropertySpec, ...]] = (
        prop("fitToWidth", "bool"),
        prop("fitToHeight", "bool"),
        prop("pagingEnabled", "bool"),
        prop("bounces", "bool"),
    )
    MARKUP_CAPABILITIES: ClassVar[Capabilities] = Capabilities(
        supports_instruction=True,
        append_policy=AppendPolicy.SINGLE,
    )

    fit_to_width: bool = False
    fit_to_height: bool = False
    paging_enabled: bool = False
    bounces: bool = True
    content_view: View | None = field(default=None, repr=False)

    def append_markup_element_view(self, view: View) -> None:
        if self.content_view is not None:
            raise TooManyChildrenError("ScrollView already has a content view")
        self.content_view = view
        self.subviews.append(view)

    def markup_children(self) -> list[View]:
        return [self.content_view] if self.content_view is not None else []
