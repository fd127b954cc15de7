from __future__ import annotations

from dataclasses import dataclass, field
import logging
import platform
from typing import ClassVar

from luvatrix_markup.errors import UnsupportedInstructionError
from luvatrix_markup.properties import PropertySpec, prop
from luvatrix_markup.registry import AppendPolicy, Capabilities
from luvatrix_markup.values import Color

LOGGER = logging.getLogger(__name__)

PLATFORM_ALIASES = {"macos": "darwin", "osx": "darwin", "win": "windows"}


def current_platform() -> str:
    return platform.system().lower()


@dataclass(eq=False)
class Layer:
    """Drawing attributes reached from markup through `layer.<name>` paths."""

    MARKUP_PROPERTIES: ClassVar[tuple[PropertySpec, ...]] = (
        prop("cornerRadius", "float"),
        prop("borderWidth", "float"),
        prop("borderColor", "color"),
        prop("shadowOpacity", "float"),
        prop("masksToBounds", "bool"),
    )

    corner_radius: float = 0.0
    border_width: float = 0.0
    border_color: Color | None = None
    shadow_opacity: float = 0.0
    masks_to_bounds: bool = False


@dataclass(eq=False)
class View:
    """Shared markup surface of every built-in view.

    Plain views append children to `subviews`. The `platform` instruction hides
    the view unless the current platform is listed, e.g. `<?platform macos linux?>`.
    """

    MARKUP_PROPERTIES: ClassVar[tuple[PropertySpec, ...]] = (
        prop("backgroundColor", "color"),
        prop("tintColor", "color"),
        prop("layer", "object"),
        prop("alpha", "float"),
        prop("hidden", "bool"),
        prop("tag", "int"),
        prop("weight", "float"),
        prop("layoutMarginTop", "float"),
        prop("layoutMarginLeft", "float"),
        prop("layoutMarginBottom", "float"),
        prop("layoutMarginRight", "float"),
        prop("horizontalContentCompressionResistancePriority", "float"),
        prop("horizontalContentHuggingPriority", "float"),
        prop("verticalContentCompressionResistancePriority", "float"),
        prop("verticalContentHuggingPriority", "float"),
    )
    MARKUP_CAPABILITIES: ClassVar[Capabilities] = Capabilities(
        supports_instruction=True,
        append_policy=AppendPolicy.MULTI,
    )

    background_color: Color | None = None
    tint_color: Color | None = None
    layer: Layer = field(default_factory=Layer, repr=False)
    alpha: float = 1.0
    hidden: bool = False
    tag: int = 0
    weight: float | None = None
    layout_margin_top: float = 0.0
    layout_margin_left: float = 0.0
    layout_margin_bottom: float = 0.0
    layout_margin_right: float = 0.0
    horizontal_content_compression_resistance_priority: float = 750.0
    horizontal_content_hugging_priority: float = 250.0
    vertical_content_compression_resistance_priority: float = 750.0
    vertical_content_hugging_priority: float = 250.0
    platforms: tuple[str, ...] = ()
    subviews: list["View"] = field(default_factory=list, repr=False)

    @classmethod
    def create_for_markup(cls, style: str | None) -> "View":
        _ = style
        return cls()

    def process_markup_instruction(self, target: str, data: str) -> None:
        if target != "platform":
            raise UnsupportedInstructionError(f"{type(self).__name__} does not accept instruction <?{target}?>")
        names = tuple(PLATFORM_ALIASES.get(name, name) for name in data.lower().split())
        if not names:
            raise UnsupportedInstructionError("<?platform?> requires at least one platform name")
        self.platforms = names
        if current_platform() not in names:
            LOGGER.debug("hiding %s: platform %s not in %s", type(self).__name__, current_platform(), names)
            self.hidden = True

    def append_markup_element_view(self, view: "View") -> None:
        self.subviews.append(view)

    def markup_children(self) -> list["View"]:
        return list(self.subviews)
