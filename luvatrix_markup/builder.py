from __future__ import annotations

import logging
import weakref

from .bindings import BindingRegistry, check_path, default_binding_registry
from .config import MarkupConfig
from .document import Document, Element, ProcessingInstruction, parse_document
from .errors import (
    BindingPathError,
    IncludeCycleError,
    MarkupError,
    ParseSyntaxError,
    RootTypeMismatchError,
    TooManyChildrenError,
    UnexpectedTextError,
    UnknownElementError,
    UnknownOutletError,
    UnsupportedInstructionError,
)
from .properties import apply_property
from .registry import AppendPolicy, Capabilities, ComponentRegistry, capabilities_of, default_registry
from .resources import DirectoryResourceLoader, MappingResourceLoader, ResourceLoader
from .values import ValueDecoder

LOGGER = logging.getLogger(__name__)

INCLUDE_INSTRUCTION = "include"
ROOT_ELEMENT = "root"


class ViewBuilder:
    """Builds a live view tree from a markup document.

    One depth-first pass per document: for each element the type is resolved and
    instantiated, leading instructions are delivered, attributes are applied
    (outlet and bind attributes last), text and children are processed, and only
    then is the finished view handed to its parent.
    """

    def __init__(
        self,
        registry: ComponentRegistry | None = None,
        *,
        resources: ResourceLoader | None = None,
        config: MarkupConfig | None = None,
        bindings: BindingRegistry | None = None,
    ) -> None:
        self.config = config if config is not None else MarkupConfig()
        base = registry if registry is not None else default_registry()
        if self.config.namespaces:
            # configured prefixes live in a builder-local overlay
            base = ComponentRegistry(parent=base)
            for prefix, module_name in self.config.namespaces.items():
                base.register_namespace(prefix, module_name)
        self.registry = base
        if resources is None:
            if self.config.resource_root is not None:
                resources = DirectoryResourceLoader(self.config.resource_root, strings_file=self.config.strings_file)
            else:
                resources = MappingResourceLoader()
        self.resources = resources
        self.bindings = bindings if bindings is not None else default_binding_registry()
        self.decoder = ValueDecoder(
            colors=self.config.colors,
            constants=self.config.constants,
            resources=self.resources,
        )

    def build(
        self,
        source: Document | str | bytes,
        owner: object | None = None,
        root: object | None = None,
    ) -> object:
        document = source if isinstance(source, Document) else parse_document(source)
        session = _BuildSession(self, owner)
        view = session.build_root(document.root, root)
        session.commit()
        LOGGER.debug("built %s from %s", type(view).__name__, document.name)
        return view

    def view_with_name(self, name: str, owner: object | None = None, root: object | None = None) -> object:
        document = self.resources.include_document(name)
        session = _BuildSession(self, owner, include_stack=[name])
        view = session.build_root(document.root, root)
        session.commit()
        LOGGER.debug("built %s from named document %s", type(view).__name__, name)
        return view


def build(
    source: Document | str | bytes,
    owner: object | None = None,
    root: object | None = None,
    *,
    builder: ViewBuilder | None = None,
) -> object:
    return (builder or ViewBuilder()).build(source, owner, root)


class _BuildSession:
    """State of one build call.

    Outlets and bindings are only collected here and are applied by `commit()`
    after the whole tree was built, so a failed build leaves the owner alone.
    """

    def __init__(self, builder: ViewBuilder, owner: object | None, include_stack: list[str] | None = None) -> None:
        self.builder = builder
        self.config = builder.config
        self.registry = builder.registry
        self.owner = owner
        self.include_stack = list(include_stack or [])
        self.outlets: list[tuple[str, object]] = []
        self.bindings: list[tuple[str, object, str]] = []
        self._appended: dict[int, int] = {}

    def build_root(self, element: Element, root: object | None) -> object:
        path = element.name
        try:
            instance, caps = self._resolve_root(element, root)
            for instruction in element.instructions:
                if instruction.target == INCLUDE_INSTRUCTION:
                    raise UnsupportedInstructionError("`include` cannot precede the root element")
        except MarkupError as exc:
            raise exc.with_path(path)
        self._process(element, instance, caps, path, element.instructions)
        return instance

    def commit(self) -> None:
        for name, view in self.outlets:
            setattr(self.owner, name, view)
        for owner_path, view, view_path in self.bindings:
            self.builder.bindings.register(self.owner, owner_path, view, view_path)

    def _resolve_root(self, element: Element, root: object | None) -> tuple[object, Capabilities]:
        if element.name == ROOT_ELEMENT:
            if root is None:
                raise RootTypeMismatchError("`root` element requires a root instance")
            return root, capabilities_of(type(root))
        component = self.registry.resolve(element.name)
        if component is None:
            raise UnknownElementError(f"unknown element `{element.name}`")
        if root is None:
            return component.instantiate(), component.capabilities
        if not isinstance(root, component.view_class):
            raise RootTypeMismatchError(
                f"root instance is {type(root).__name__}, document declares {component.view_class.__name__}"
            )
        return root, component.capabilities

    def _process(
        self,
        element: Element,
        instance: object,
        caps: Capabilities,
        path: str,
        instructions: tuple[ProcessingInstruction, ...] | list[ProcessingInstruction],
    ) -> None:
        try:
            for instruction in instructions:
                self._deliver_instruction(instance, caps, instruction)
            self._apply_attributes(element, instance)
            text = element.text.strip()
            if text:
                if not caps.accepts_text:
                    raise UnexpectedTextError(f"`{element.name}` does not accept text content")
                instance.process_markup_text(text)  # type: ignore[attr-defined]
        except MarkupError as exc:
            raise exc.with_path(path)

        for index, child in enumerate(element.children):
            child_path = f"{path}/{child.name}[{index}]"
            leading: list[ProcessingInstruction] = []
            for instruction in child.instructions:
                if instruction.target == INCLUDE_INSTRUCTION:
                    self._include(instruction.data, instance, caps, child_path)
                else:
                    leading.append(instruction)
            self._process_child(child, instance, caps, child_path, leading)

        for instruction in element.trailing_instructions:
            if instruction.target == INCLUDE_INSTRUCTION:
                self._include(instruction.data, instance, caps, path)
                continue
            try:
                self._deliver_instruction(instance, caps, instruction)
            except MarkupError as exc:
                raise exc.with_path(path)

    def _process_child(
        self,
        child: Element,
        parent: object,
        parent_caps: Capabilities,
        path: str,
        leading: list[ProcessingInstruction],
    ) -> None:
        raw_candidate = parent_caps.supports_raw_element and child.prefix is None
        try:
            if raw_candidate:
                component = self.registry.peek(child.name)
            else:
                component = self.registry.resolve(child.name)
            if component is None:
                if not parent_caps.supports_raw_element:
                    raise UnknownElementError(f"unknown element `{child.name}`")
                for instruction in leading:
                    self._deliver_instruction(parent, parent_caps, instruction)
                self._deliver_raw_element(parent, child)
                return
            self._check_append(parent, parent_caps)
            instance = component.instantiate()
        except MarkupError as exc:
            raise exc.with_path(path)
        self._process(child, instance, component.capabilities, path, leading)
        try:
            self._append(parent, parent_caps, instance)
        except MarkupError as exc:
            raise exc.with_path(path)

    def _deliver_instruction(self, instance: object, caps: Capabilities, instruction: ProcessingInstruction) -> None:
        if caps.supports_instruction:
            try:
                instance.process_markup_instruction(instruction.target, instruction.data)  # type: ignore[attr-defined]
            except UnsupportedInstructionError:
                if instruction.target not in self.config.inert_instructions:
                    raise
                LOGGER.debug("ignoring inert instruction <?%s?> on %s", instruction.target, type(instance).__name__)
        elif instruction.target in self.config.inert_instructions:
            LOGGER.debug("ignoring inert instruction <?%s?> on %s", instruction.target, type(instance).__name__)
        else:
            raise UnsupportedInstructionError(
                f"{type(instance).__name__} does not accept instruction <?{instruction.target}?>"
            )

    def _deliver_raw_element(self, parent: object, child: Element) -> None:
        if child.children:
            raise ParseSyntaxError(f"`{child.name}` may not contain nested elements")
        if child.text.strip():
            raise UnexpectedTextError(f"`{child.name}` may not contain text content")
        if child.trailing_instructions:
            raise ParseSyntaxError(f"`{child.name}` may not contain processing instructions")
        parent.process_markup_element(child.name, dict(child.attributes))  # type: ignore[attr-defined]

    def _apply_attributes(self, element: Element, instance: object) -> None:
        outlet: str | None = None
        binds: list[tuple[str, str]] = []
        prefix = self.config.bind_prefix
        for name, value in element.attributes.items():
            if name == self.config.outlet_attribute:
                outlet = value.strip()
            elif name.startswith(prefix):
                binds.append((name[len(prefix):], value.strip()))
            else:
                apply_property(instance, name, value, self.builder.decoder)
        if outlet:
            self._add_outlet(outlet, instance)
        for view_path, owner_path in binds:
            self._add_binding(owner_path, instance, view_path)

    def _add_outlet(self, name: str, instance: object) -> None:
        if self.owner is None:
            LOGGER.debug("no owner; ignoring outlet `%s`", name)
            return
        if not name.isidentifier() or not _has_field(self.owner, name):
            raise UnknownOutletError(f"{type(self.owner).__name__} has no outlet field `{name}`")
        self.outlets.append((name, instance))

    def _add_binding(self, owner_path: str, view: object, view_path: str) -> None:
        if self.owner is None:
            raise BindingPathError(f"cannot bind `{view_path}` without an owner")
        check_path(self.owner, owner_path)
        check_path(view, view_path)
        for target in (self.owner, view):
            try:
                weakref.ref(target)
            except TypeError as exc:
                raise BindingPathError(
                    f"cannot bind `{view_path}`: {type(target).__name__} is not weakly referenceable"
                ) from exc
        self.bindings.append((owner_path, view, view_path))

    def _check_append(self, parent: object, caps: Capabilities) -> None:
        if caps.append_policy is AppendPolicy.NONE:
            raise UnknownElementError(f"{type(parent).__name__} does not accept child elements")
        if caps.append_policy is AppendPolicy.SINGLE and self._appended.get(id(parent), 0) >= 1:
            raise TooManyChildrenError(f"{type(parent).__name__} accepts a single child view")

    def _append(self, parent: object, caps: Capabilities, view: object) -> None:
        self._check_append(parent, caps)
        parent.append_markup_element_view(view)  # type: ignore[attr-defined]
        self._appended[id(parent)] = self._appended.get(id(parent), 0) + 1

    def _include(self, name: str, parent: object, caps: Capabilities, path: str) -> None:
        name = name.strip()
        try:
            if not name:
                raise ParseSyntaxError("`include` requires a document name")
            if name in self.include_stack:
                raise IncludeCycleError(f"recursive include: {' -> '.join(self.include_stack + [name])}")
            self._check_append(parent, caps)
            document = self.builder.resources.include_document(name)
        except MarkupError as exc:
            raise exc.with_path(path)
        LOGGER.debug("including %s into %s", name, type(parent).__name__)
        self.include_stack.append(name)
        try:
            view = self.build_root(document.root, None)
        finally:
            self.include_stack.pop()
        try:
            self._append(parent, caps, view)
        except MarkupError as exc:
            raise exc.with_path(path)


def _has_field(owner: object, name: str) -> bool:
    if hasattr(owner, name):
        return True
    return any(name in klass.__dict__.get("__annotations__", {}) for klass in type(owner).__mro__)
