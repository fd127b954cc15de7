from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import ClassVar

from PIL import Image

from luvatrix_markup.properties import PropertySpec, prop
from luvatrix_markup.registry import Capabilities

from .view import View


class ContentMode(IntEnum):
    SCALE_TO_FILL = 0
    SCALE_ASPECT_FIT = 1
    SCALE_ASPECT_FILL = 2
    CENTER = 4


@dataclass(eq=False)
class ImageView(View):
    MARKUP_PROPERTIES: ClassVar[tuple[PropertySpec, ...]] = (
        prop("image", "image"),
        prop("contentMode", "enum", enum_type=ContentMode),
    )
    MARKUP_CAPABILITIES: ClassVar[Capabilities] = Capabilities(supports_instruction=True)

    image: Image.Image | None = field(default=None, repr=False)
    content_mode: ContentMode = ContentMode.SCALE_TO_FILL

    @property
    def image_size(self) -> tuple[int, int]:
        if self.image is None:
            return (0, 0)
        return self.image.size
