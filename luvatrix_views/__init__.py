"""Built-in view types for Luvatrix markup."""

from luvatrix_markup.registry import ComponentRegistry

from .controls import (
    Button,
    ContentAlignment,
    Control,
    PickerComponent,
    PickerRow,
    PickerView,
    Segment,
    SegmentedControl,
)
from .describe import describe_view
from .image_view import ContentMode, ImageView
from .layout import BoxAlignment, BoxView, LayoutView, ScrollView, Spacer
from .table import TableSection, TableView, TableViewCell
from .text import Label, TextAlignment
from .view import Layer, View


def register_builtin_views(registry: ComponentRegistry) -> None:
    registry.register("View", View)
    registry.register("Label", Label)
    registry.register("Button", Button, style="system")
    registry.register("CustomButton", Button, style="custom")
    registry.register("ImageView", ImageView)
    registry.register("Row", BoxView, style="horizontal")
    registry.register("Column", BoxView, style="vertical")
    registry.register("Spacer", Spacer)
    registry.register("ScrollView", ScrollView)
    registry.register("SegmentedControl", SegmentedControl)
    registry.register("PickerView", PickerView)
    registry.register("TableView", TableView)
    registry.register("TableViewCell", TableViewCell, style="default")
    registry.register("SubtitleTableViewCell", TableViewCell, style="subtitle")
    registry.register("Value1TableViewCell", TableViewCell, style="value1")


__all__ = [
    "BoxAlignment",
    "BoxView",
    "Button",
    "ContentAlignment",
    "ContentMode",
    "Control",
    "ImageView",
    "Label",
    "Layer",
    "LayoutView",
    "PickerComponent",
    "PickerRow",
    "PickerView",
    "ScrollView",
    "Segment",
    "SegmentedControl",
    "Spacer",
    "TableSection",
    "TableView",
    "TableViewCell",
    "TextAlignment",
    "View",
    "describe_view",
    "register_builtin_views",
]
