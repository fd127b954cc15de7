from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from luvatrix_markup.properties import PropertySpec, prop
from luvatrix_views import Label


@dataclass(eq=False)
class Badge(Label):
    """Small count indicator; registered lazily as `demo:Badge`."""

    MARKUP_PROPERTIES: ClassVar[tuple[PropertySpec, ...]] = (
        prop("count", "int"),
    )

    count: int = 0

    @property
    def display_text(self) -> str:
        return str(self.count) if self.count > 0 else ""
