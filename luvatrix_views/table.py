from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, Literal, Mapping

from luvatrix_markup.errors import TooManyChildrenError, UnknownElementError
from luvatrix_markup.properties import PropertySpec, prop
from luvatrix_markup.registry import AppendPolicy, Capabilities
from luvatrix_markup.values import Color

from .view import View


CellStyle = Literal["default", "subtitle", "value1", "value2"]
_PendingSlot = Literal["header", "footer"]


@dataclass(eq=False)
class TableViewCell(View):
    MARKUP_PROPERTIES: ClassVar[tuple[PropertySpec, ...]] = (
        prop("text", "string"),
        prop("detailText", "string"),
        prop("value", "string"),
        prop("checked", "bool"),
        prop("textColor", "color"),
    )
    MARKUP_CAPABILITIES: ClassVar[Capabilities] = Capabilities(
        supports_instruction=True,
        accepts_text=True,
        append_policy=AppendPolicy.SINGLE,
    )

    style: CellStyle = "default"
    text: str = ""
    detail_text: str | None = None
    value: str | None = None
    checked: bool = False
    text_color: Color | None = None
    content_view: View | None = field(default=None, repr=False)

    @classmethod
    def create_for_markup(cls, style: str | None) -> "TableViewCell":
        if style not in (None, "default", "subtitle", "value1", "value2"):
            raise ValueError(f"unknown cell style: {style}")
        return cls(style=style or "default")

    def process_markup_text(self, text: str) -> None:
        self.text = text

    def append_markup_element_view(self, view: View) -> None:
        if self.content_view is not None:
            raise TooManyChildrenError("TableViewCell already has a content view")
        self.content_view = view
        self.subviews.append(view)

    def markup_children(self) -> list[View]:
        return [self.content_view] if self.content_view is not None else []


@dataclass(eq=False)
class TableSection:
    name: str | None = None
    title: str | None = None
    header: View | None = None
    footer: View | None = None
    rows: list[View] = field(default_factory=list)


@dataclass(eq=False)
class TableView(View):
    """Table with statically declared content.

    - `<section name="…" title="…"/>` starts a new section
    - `<sectionHeader/>` / `<sectionFooter/>` make the next child view the
      current section's header / footer
    - every other child view becomes a row of the current section
    """

    MARKUP_PROPERTIES: ClassVar[tuple[PropertySpec, ...]] = (
        prop("rowHeight", "float"),
        prop("separatorColor", "color"),
        prop("allowsMultipleSelection", "bool"),
    )
    MARKUP_CAPABILITIES: ClassVar[Capabilities] = Capabilities(
        supports_instruction=True,
        supports_raw_element=True,
        append_policy=AppendPolicy.MULTI,
    )

    row_height: float = 44.0
    separator_color: Color | None = None
    allows_multiple_selection: bool = False
    sections: list[TableSection] = field(default_factory=lambda: [TableSection()])
    _pending_slot: _PendingSlot | None = field(default=None, init=False, repr=False)

    def process_markup_element(self, name: str, attributes: Mapping[str, str]) -> None:
        if name == "section":
            current = self.sections[-1]
            if current.rows or current.header or current.footer or current.name or current.title:
                current = TableSection()
                self.sections.append(current)
            current.name = attributes.get("name")
            current.title = attributes.get("title")
            self._pending_slot = None
        elif name == "sectionHeader":
            self._pending_slot = "header"
        elif name == "sectionFooter":
            self._pending_slot = "footer"
        else:
            raise UnknownElementError(f"TableView does not accept `<{name}>`")

    def append_markup_element_view(self, view: View) -> None:
        section = self.sections[-1]
        if self._pending_slot == "header":
            section.header = view
        elif self._pending_slot == "footer":
            section.footer = view
        else:
            section.rows.append(view)
        self._pending_slot = None
        self.subviews.append(view)

    def number_of_sections(self) -> int:
        return len(self.sections)

    def number_of_rows(self, section: int) -> int:
        return len(self.sections[section].rows)

    def cell(self, section: int, row: int) -> View:
        return self.sections[section].rows[row]

    def name_for_section(self, section: int) -> str | None:
        return self.sections[section].name

    def section_with_name(self, name: str) -> int | None:
        for index, section in enumerate(self.sections):
            if section.name == name:
                return index
        return None

    def value_for_section(self, section: int) -> str | None:
        values = self.values_for_section(section)
        return values[0] if values else None

    def values_for_section(self, section: int) -> list[str | None]:
        return [
            row.value
            for row in self.sections[section].rows
            if isinstance(row, TableViewCell) and row.checked
        ]

    def markup_children(self) -> list[View]:
        children: list[View] = []
        for section in self.sections:
            if section.header is not None:
                children.append(section.header)
            children.extend(section.rows)
            if section.footer is not None:
                children.append(section.footer)
        return children
