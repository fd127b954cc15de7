from __future__ import annotations

from dataclasses import dataclass, field
import logging
import threading
import weakref

from .errors import BindingPathError
from .properties import resolve_attribute_name

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class Binding:
    """Links `owner_path` on an owner to `view_path` on a view; holds neither strongly."""

    owner_ref: weakref.ReferenceType = field(repr=False)
    owner_path: str
    view_ref: weakref.ReferenceType = field(repr=False)
    view_path: str

    @property
    def owner(self) -> object | None:
        return self.owner_ref()

    @property
    def view(self) -> object | None:
        return self.view_ref()


@dataclass
class _OwnerBindings:
    owner_ref: weakref.ReferenceType
    bindings: list[Binding] = field(default_factory=list)
    finalizer: weakref.finalize | None = None


def split_path(path: str) -> tuple[str, ...]:
    segments = tuple(path.split("."))
    if not path or not all(segment.isidentifier() for segment in segments):
        raise BindingPathError(f"invalid property path: {path!r}")
    return segments


def read_path(target: object, path: str) -> object:
    current = target
    for segment in split_path(path):
        attribute = resolve_attribute_name(current, segment)
        if not hasattr(current, attribute):
            raise BindingPathError(f"{type(current).__name__} has no property `{segment}` (path `{path}`)")
        current = getattr(current, attribute)
    return current


def write_path(target: object, path: str, value: object) -> None:
    *parents, last = split_path(path)
    current = target
    for segment in parents:
        current = getattr(current, resolve_attribute_name(current, segment))
    setattr(current, resolve_attribute_name(current, last), value)


def check_path(target: object, path: str) -> None:
    read_path(target, path)


class BindingRegistry:
    """Owner-keyed two-way bindings, driven by the host.

    The registry does not observe anything: the host calls `push_owner_to_view`,
    `pull_view_to_owner` or `view_changed` when values change, and
    `release_all` when the owner is torn down.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._owners: dict[int, _OwnerBindings] = {}

    def register(self, owner: object, owner_path: str, view: object, view_path: str) -> Binding:
        check_path(owner, owner_path)
        check_path(view, view_path)
        try:
            owner_ref = weakref.ref(owner)
            view_ref = weakref.ref(view)
        except TypeError as exc:
            raise BindingPathError(f"cannot bind {type(owner).__name__} to {type(view).__name__}: {exc}") from exc
        binding = Binding(owner_ref=owner_ref, owner_path=owner_path, view_ref=view_ref, view_path=view_path)
        key = id(owner)
        with self._lock:
            entry = self._owners.get(key)
            if entry is None or entry.owner_ref() is not owner:
                entry = _OwnerBindings(owner_ref=owner_ref)
                entry.finalizer = weakref.finalize(owner, self._forget, key, owner_ref)
                self._owners[key] = entry
            entry.bindings.append(binding)
        LOGGER.debug(
            "bound %s.%s <-> %s.%s",
            type(owner).__name__,
            owner_path,
            type(view).__name__,
            view_path,
        )
        return binding

    def bindings_for(self, owner: object) -> list[Binding]:
        with self._lock:
            entry = self._entry(owner)
            return list(entry.bindings) if entry is not None else []

    def count(self, owner: object) -> int:
        return len(self.bindings_for(owner))

    def push_owner_to_view(self, owner: object) -> int:
        pushed = 0
        for binding in self._live_bindings(owner):
            view = binding.view
            if view is None:
                continue
            write_path(view, binding.view_path, read_path(owner, binding.owner_path))
            pushed += 1
        return pushed

    def pull_view_to_owner(self, owner: object) -> int:
        pulled = 0
        for binding in self._live_bindings(owner):
            view = binding.view
            if view is None:
                continue
            write_path(owner, binding.owner_path, read_path(view, binding.view_path))
            pulled += 1
        return pulled

    def view_changed(self, view: object, view_path: str | None = None) -> int:
        """Propagate a platform-signalled change of `view` to every bound owner."""

        with self._lock:
            matches = [
                binding
                for entry in self._owners.values()
                for binding in entry.bindings
                if binding.view is view and (view_path is None or binding.view_path == view_path)
            ]
        pulled = 0
        for binding in matches:
            owner = binding.owner
            if owner is None:
                continue
            write_path(owner, binding.owner_path, read_path(view, binding.view_path))
            pulled += 1
        return pulled

    def release_all(self, owner: object) -> int:
        with self._lock:
            entry = self._entry(owner)
            if entry is None:
                return 0
            del self._owners[id(owner)]
        if entry.finalizer is not None:
            entry.finalizer.detach()
        LOGGER.debug("released %d binding(s) for %s", len(entry.bindings), type(owner).__name__)
        return len(entry.bindings)

    def _entry(self, owner: object) -> _OwnerBindings | None:
        entry = self._owners.get(id(owner))
        if entry is None or entry.owner_ref() is not owner:
            return None
        return entry

    def _live_bindings(self, owner: object) -> list[Binding]:
        with self._lock:
            entry = self._entry(owner)
            if entry is None:
                return []
            live = [binding for binding in entry.bindings if binding.view is not None]
            if len(live) != len(entry.bindings):
                LOGGER.debug("pruned %d binding(s) to released views", len(entry.bindings) - len(live))
                entry.bindings[:] = live
            return list(live)

    def _forget(self, key: int, owner_ref: weakref.ReferenceType) -> None:
        with self._lock:
            entry = self._owners.get(key)
            if entry is not None and entry.owner_ref is owner_ref:
                del self._owners[key]


_DEFAULT_BINDINGS = BindingRegistry()


def default_binding_registry() -> BindingRegistry:
    return _DEFAULT_BINDINGS
