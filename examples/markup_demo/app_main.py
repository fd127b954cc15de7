from __future__ import annotations

from dataclasses import dataclass
import logging
from pathlib import Path

from luvatrix_markup import BindingRegistry, MarkupConfig, ViewBuilder, load_markup_config
from luvatrix_views import BoxView, Button, Label, SegmentedControl, TableView, describe_view


APP_DIR = Path(__file__).resolve().parent
CONFIG_PATH = APP_DIR / "markup.toml"

LOGGER = logging.getLogger(__name__)


@dataclass(eq=False)
class ProfileController:
    """Owner of the profile screen; outlets and bound values land here."""

    table_view: TableView | None = None
    size_control: SegmentedControl | None = None
    status_label: Label | None = None
    save_button: Button | None = None
    user_name: str = "Ada"
    status: str = "Ready"

    def selected_size(self) -> str | None:
        if self.size_control is None:
            return None
        return self.size_control.selected_value


def load_config() -> MarkupConfig:
    return load_markup_config(CONFIG_PATH)


def load_main_view(owner: ProfileController, *, bindings: BindingRegistry | None = None) -> BoxView:
    builder = ViewBuilder(config=load_config(), bindings=bindings)
    view = builder.view_with_name("MainView", owner)
    if not isinstance(view, BoxView):
        raise TypeError(f"MainView must build a box view, got {type(view).__name__}")
    builder.bindings.push_owner_to_view(owner)
    return view


def main() -> int:
    logging.basicConfig(level=logging.INFO)
    owner = ProfileController()
    view = load_main_view(owner)
    print(describe_view(view))
    LOGGER.info("selected size: %s", owner.selected_size())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
