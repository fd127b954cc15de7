from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import importlib
import inspect
import logging
import threading
from typing import Mapping

from .errors import UnknownElementError

LOGGER = logging.getLogger(__name__)


class AppendPolicy(Enum):
    NONE = "none"
    SINGLE = "single"
    MULTI = "multi"


@dataclass(frozen=True)
class Capabilities:
    supports_instruction: bool = False
    supports_raw_element: bool = False
    accepts_text: bool = False
    append_policy: AppendPolicy = AppendPolicy.NONE


NO_CAPABILITIES = Capabilities()

# capability flag -> hook method the component class must define
_CAPABILITY_HOOKS = (
    ("supports_instruction", "process_markup_instruction"),
    ("supports_raw_element", "process_markup_element"),
    ("accepts_text", "process_markup_text"),
)
APPEND_HOOK = "append_markup_element_view"


def capabilities_of(view_class: type) -> Capabilities:
    caps = getattr(view_class, "MARKUP_CAPABILITIES", NO_CAPABILITIES)
    if not isinstance(caps, Capabilities):
        raise TypeError(f"{view_class.__name__}.MARKUP_CAPABILITIES must be a Capabilities instance")
    for flag, hook in _CAPABILITY_HOOKS:
        if getattr(caps, flag) and not callable(getattr(view_class, hook, None)):
            raise TypeError(f"{view_class.__name__} declares {flag} but does not define {hook}()")
    if caps.append_policy is not AppendPolicy.NONE and not callable(getattr(view_class, APPEND_HOOK, None)):
        raise TypeError(f"{view_class.__name__} accepts child views but does not define {APPEND_HOOK}()")
    return caps


@dataclass(frozen=True)
class ComponentType:
    """Instantiable component descriptor.

    `style` is fixed by the element name the type was registered under, so one
    class can back several element names (e.g. `Row` and `Column`).
    """

    name: str
    view_class: type
    style: str | None
    capabilities: Capabilities

    def instantiate(self) -> object:
        factory = getattr(self.view_class, "create_for_markup", None)
        if factory is not None:
            return factory(self.style)
        return self.view_class()


class ComponentRegistry:
    """Element name to component type table.

    A registry created with a `parent` is an overlay: its own types and
    namespace prefixes shadow the parent's, and lookups it cannot answer fall
    through. Builders use overlays so their configured namespaces stay local.
    """

    def __init__(self, parent: ComponentRegistry | None = None) -> None:
        self.parent = parent
        self._lock = threading.RLock()
        self._types: dict[str, ComponentType] = {}
        self._namespaces: dict[str, str] = {}
        self._loaded_namespaces: set[str] = set()

    def register(self, name: str, view_class: type, *, style: str | None = None) -> ComponentType:
        if not name or name != name.strip():
            raise ValueError(f"invalid component name: {name!r}")
        if style is not None and not callable(getattr(view_class, "create_for_markup", None)):
            raise TypeError(f"{view_class.__name__} must define create_for_markup() to be registered with a style")
        component = ComponentType(
            name=name,
            view_class=view_class,
            style=style,
            capabilities=capabilities_of(view_class),
        )
        with self._lock:
            existing = self._types.get(name)
            if existing is not None and existing != component:
                raise ValueError(f"component `{name}` is already registered to {existing.view_class.__name__}")
            self._types[name] = component
        return component

    def register_namespace(self, prefix: str, module_name: str) -> None:
        if not prefix or ":" in prefix:
            raise ValueError(f"invalid namespace prefix: {prefix!r}")
        with self._lock:
            current = self._namespaces.get(prefix)
            if current is not None and current != module_name:
                raise ValueError(f"namespace `{prefix}` is already mapped to `{current}`")
            self._namespaces[prefix] = module_name

    def namespaces(self) -> Mapping[str, str]:
        merged = dict(self.parent.namespaces()) if self.parent is not None else {}
        with self._lock:
            merged.update(self._namespaces)
        return merged

    def peek(self, name: str) -> ComponentType | None:
        """Look up `name` among types registered so far, without importing anything."""

        component = self._types.get(name)
        if component is None and self.parent is not None and not self._owns_prefix(name):
            return self.parent.peek(name)
        return component

    def resolve(self, name: str) -> ComponentType | None:
        component = self.peek(name)
        if component is not None or ":" not in name:
            return component
        if self._owns_prefix(name):
            self._load_namespace(name.split(":", 1)[0])
            return self._types.get(name)
        if self.parent is not None:
            return self.parent.resolve(name)
        return None

    def names(self) -> list[str]:
        names = set(self.parent.names()) if self.parent is not None else set()
        with self._lock:
            names.update(self._types)
        return sorted(names)

    def _owns_prefix(self, name: str) -> bool:
        prefix, sep, _ = name.partition(":")
        return bool(sep) and prefix in self._namespaces

    def _load_namespace(self, prefix: str) -> None:
        with self._lock:
            if prefix in self._loaded_namespaces:
                return
            module_name = self._namespaces.get(prefix)
            if module_name is None:
                return
            LOGGER.debug("importing markup namespace %s from %s", prefix, module_name)
            try:
                module = importlib.import_module(module_name)
            except ImportError as exc:
                raise UnknownElementError(
                    f"cannot import namespace `{prefix}` module `{module_name}`: {exc}"
                ) from exc
            hook = getattr(module, "register_markup_components", None)
            if callable(hook):
                hook(self, prefix)
            else:
                for attr_name, value in vars(module).items():
                    if attr_name.startswith("_") or not inspect.isclass(value):
                        continue
                    if value.__module__ != module.__name__ or "MARKUP_PROPERTIES" not in value.__dict__:
                        continue
                    self.register(f"{prefix}:{attr_name}", value)
            self._loaded_namespaces.add(prefix)


_DEFAULT_REGISTRY: ComponentRegistry | None = None
_DEFAULT_LOCK = threading.Lock()


def default_registry() -> ComponentRegistry:
    """Process-wide registry holding the built-in view types."""

    global _DEFAULT_REGISTRY
    with _DEFAULT_LOCK:
        if _DEFAULT_REGISTRY is None:
            from luvatrix_views import register_builtin_views

            registry = ComponentRegistry()
            register_builtin_views(registry)
            _DEFAULT_REGISTRY = registry
        return _DEFAULT_REGISTRY
