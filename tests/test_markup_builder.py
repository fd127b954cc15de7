from __future__ import annotations

from dataclasses import dataclass, field
import sys
import types
from typing import ClassVar
import unittest

from luvatrix_markup import build
from luvatrix_markup.bindings import BindingRegistry
from luvatrix_markup.builder import ViewBuilder
from luvatrix_markup.config import MarkupConfig
from luvatrix_markup.errors import (
    BindingPathError,
    DecodeError,
    IncludeCycleError,
    ParseSyntaxError,
    ResourceNotFoundError,
    RootTypeMismatchError,
    TooManyChildrenError,
    UnexpectedTextError,
    UnknownElementError,
    UnknownOutletError,
    UnknownPropertyError,
    UnsupportedInstructionError,
)
from luvatrix_markup.properties import PropertySpec, prop
from luvatrix_markup.registry import AppendPolicy, Capabilities, ComponentRegistry
from luvatrix_markup.resources import MappingResourceLoader
from luvatrix_markup.values import Color


@dataclass(eq=False)
class Leaf:
    MARKUP_PROPERTIES: ClassVar[tuple[PropertySpec, ...]] = (
        prop("title", "string"),
        prop("label", "string"),
        prop("size", "float"),
        prop("tint", "color"),
    )
    MARKUP_CAPABILITIES: ClassVar[Capabilities] = Capabilities(supports_instruction=True, accepts_text=True)

    title: str = ""
    label: str = ""
    size: float = 0.0
    tint: Color | None = None
    instructions: list[tuple[str, str]] = field(default_factory=list)

    def process_markup_instruction(self, target: str, data: str) -> None:
        if target != "mark":
            raise UnsupportedInstructionError(f"Leaf does not accept <?{target}?>")
        self.instructions.append((target, data))

    def process_markup_text(self, text: str) -> None:
        self.title = text


@dataclass(eq=False)
class Container:
    MARKUP_PROPERTIES: ClassVar[tuple[PropertySpec, ...]] = (
        prop("spacing", "float"),
    )
    MARKUP_CAPABILITIES: ClassVar[Capabilities] = Capabilities(
        supports_instruction=True,
        supports_raw_element=True,
        append_policy=AppendPolicy.MULTI,
    )

    spacing: float = 0.0
    children: list[object] = field(default_factory=list)
    raw: list[tuple[str, dict[str, str]]] = field(default_factory=list)
    instructions: list[tuple[str, str]] = field(default_factory=list)
    events: list[tuple[object, ...]] = field(default_factory=list)

    def process_markup_instruction(self, target: str, data: str) -> None:
        self.instructions.append((target, data))
        self.events.append(("instruction", target))

    def process_markup_element(self, name: str, attributes: dict[str, str]) -> None:
        self.raw.append((name, dict(attributes)))
        self.events.append(("raw", name))

    def append_markup_element_view(self, view: object) -> None:
        self.children.append(view)
        self.events.append(("append", type(view).__name__, self.spacing, getattr(view, "title", None)))


@dataclass(eq=False)
class Slot:
    MARKUP_CAPABILITIES: ClassVar[Capabilities] = Capabilities(append_policy=AppendPolicy.SINGLE)

    content: object | None = None

    def append_markup_element_view(self, view: object) -> None:
        self.content = view


@dataclass(eq=False)
class Owner:
    first: Leaf | None = None
    panel: Container | None = None
    name: str = "Ada"


class SlottedOwner:
    __slots__ = ("first", "name")

    def __init__(self) -> None:
        self.first: Leaf | None = None
        self.name = "Ada"


class SpyRegistry(ComponentRegistry):
    def __init__(self) -> None:
        super().__init__()
        self.resolved: list[str] = []

    def resolve(self, name: str):  # type: ignore[override]
        self.resolved.append(name)
        return super().resolve(name)


def make_registry(registry: ComponentRegistry | None = None) -> ComponentRegistry:
    registry = registry if registry is not None else ComponentRegistry()
    registry.register("Container", Container)
    registry.register("Leaf", Leaf)
    registry.register("Slot", Slot)
    return registry


class ViewBuilderTests(unittest.TestCase):
    def setUp(self) -> None:
        self.bindings = BindingRegistry()
        self.resources = MappingResourceLoader(
            strings={"greeting": "Hello"},
            documents={
                "Part": '<Leaf title="included"/>',
                "Panel": '<Container><Leaf title="p1"/><Leaf id="first" title="p2"/></Container>',
                "Loop": '<Container><?include Back?><Leaf/></Container>',
                "Back": '<Container><?include Loop?><Leaf/></Container>',
                "Self": '<Container><Leaf/><?include Self?></Container>',
                "Leading": '<?include Part?><Container/>',
            },
        )
        self.builder = self.make_builder()

    def make_builder(self, registry: ComponentRegistry | None = None, config: MarkupConfig | None = None) -> ViewBuilder:
        return ViewBuilder(
            make_registry(registry),
            resources=self.resources,
            config=config,
            bindings=self.bindings,
        )

    def test_builds_tree_in_document_order(self) -> None:
        view = self.builder.build(
            """
            <Container spacing="4">
                <Leaf title="a"/>
                <Leaf>b</Leaf>
                <Container><Leaf title="c"/></Container>
            </Container>
            """
        )
        self.assertIsInstance(view, Container)
        self.assertEqual(view.spacing, 4.0)
        self.assertEqual([type(child).__name__ for child in view.children], ["Leaf", "Leaf", "Container"])
        self.assertEqual([view.children[0].title, view.children[1].title], ["a", "b"])
        self.assertEqual(view.children[2].children[0].title, "c")

    def test_container_with_two_leaves(self) -> None:
        view = self.builder.build(
            '<Container><Leaf label="Hello" size="12"/><Leaf label="World" size="14"/></Container>'
        )
        self.assertIsInstance(view, Container)
        self.assertEqual(
            [(type(child), child.label, child.size) for child in view.children],
            [(Leaf, "Hello", 12.0), (Leaf, "World", 14.0)],
        )

    def test_attributes_apply_before_children_and_children_finish_before_append(self) -> None:
        view = self.builder.build('<Container spacing="2"><Leaf title="a"/><Leaf>b</Leaf></Container>')
        self.assertEqual(
            view.events,
            [("append", "Leaf", 2.0, "a"), ("append", "Leaf", 2.0, "b")],
        )

    def test_localized_attribute_values(self) -> None:
        view = self.builder.build('<Leaf title="@greeting"/>')
        self.assertEqual(view.title, "Hello")

    def test_config_colors_and_constants(self) -> None:
        builder = self.make_builder(config=MarkupConfig(colors={"accent": "#112233"}, constants={"gap": 6}))
        view = builder.build('<Leaf tint="accent" size="gap"/>')
        self.assertEqual(view.tint, Color(0x11, 0x22, 0x33))
        self.assertEqual(view.size, 6.0)

    def test_module_level_build(self) -> None:
        view = build('<Leaf title="x"/>', builder=self.builder)
        self.assertEqual(view.title, "x")

    def test_instructions_reach_the_following_element(self) -> None:
        view = self.builder.build("<Container><?mark one?><Leaf/><?tail x?></Container>")
        self.assertEqual(view.children[0].instructions, [("mark", "one")])
        self.assertEqual(view.instructions, [("tail", "x")])
        self.assertEqual(view.events[-1], ("instruction", "tail"))

    def test_unsupported_instruction_fails_with_path(self) -> None:
        with self.assertRaises(UnsupportedInstructionError) as ctx:
            self.builder.build("<Container><Leaf/><?other?><Leaf/></Container>")
        self.assertEqual(ctx.exception.element_path, "Container/Leaf[1]")

    def test_instruction_on_type_without_instruction_support(self) -> None:
        with self.assertRaises(UnsupportedInstructionError):
            self.builder.build("<Container><?mark?><Slot/></Container>")

    def test_inert_instructions_are_ignored(self) -> None:
        view = self.builder.build("<Container><?comment note?><Leaf/><?comment?><Slot/></Container>")
        self.assertEqual(view.children[0].instructions, [])
        self.assertEqual(len(view.children), 2)

    def test_configured_inert_instruction(self) -> None:
        builder = self.make_builder(config=MarkupConfig(inert_instructions=frozenset({"designer"})))
        view = builder.build("<Container><?designer?><Leaf/></Container>")
        self.assertEqual(len(view.children), 1)
        with self.assertRaises(UnsupportedInstructionError):
            builder.build("<Container><?comment?><Leaf/></Container>")

    def test_raw_elements_are_delegated_without_type_resolution(self) -> None:
        registry = SpyRegistry()
        builder = self.make_builder(registry=registry)
        view = builder.build('<Container><?mark r?><item a="1"/><Leaf/><item/></Container>')
        self.assertEqual(view.raw, [("item", {"a": "1"}), ("item", {})])
        self.assertEqual(view.instructions, [("mark", "r")])
        self.assertEqual(
            [event[:2] for event in view.events],
            [("instruction", "mark"), ("raw", "item"), ("append", "Leaf"), ("raw", "item")],
        )
        self.assertEqual(registry.resolved, ["Container"])

    def test_raw_element_may_not_nest(self) -> None:
        with self.assertRaises(ParseSyntaxError):
            self.builder.build("<Container><item><Leaf/></item></Container>")
        with self.assertRaises(UnexpectedTextError):
            self.builder.build("<Container><item>text</item></Container>")

    def test_raw_element_may_not_hold_instructions(self) -> None:
        with self.assertRaises(ParseSyntaxError) as ctx:
            self.builder.build("<Container><item><?bogus data?></item></Container>")
        self.assertEqual(ctx.exception.element_path, "Container/item[0]")
        with self.assertRaises(ParseSyntaxError):
            self.builder.build("<Container><item><?include Part?></item></Container>")

    def test_unknown_element(self) -> None:
        with self.assertRaises(UnknownElementError) as ctx:
            self.builder.build("<Slot><Gadget/></Slot>")
        self.assertEqual(str(ctx.exception), "Slot/Gadget[0]: unknown element `Gadget`")
        with self.assertRaises(UnknownElementError):
            self.builder.build("<Gadget/>")

    def test_unknown_property_reports_element_path(self) -> None:
        with self.assertRaises(UnknownPropertyError) as ctx:
            self.builder.build('<Container><Container><Leaf bogus="1"/></Container></Container>')
        self.assertEqual(ctx.exception.element_path, "Container/Container[0]/Leaf[0]")
        self.assertIn("bogus", str(ctx.exception))

    def test_decode_error_names_property(self) -> None:
        with self.assertRaisesRegex(DecodeError, r"Container/Leaf\[0\]: `size`: `big` is not a number"):
            self.builder.build('<Container><Leaf size="big"/></Container>')

    def test_single_slot_accepts_one_child(self) -> None:
        view = self.builder.build("<Slot><Leaf/></Slot>")
        self.assertIsInstance(view.content, Leaf)
        with self.assertRaises(TooManyChildrenError) as ctx:
            self.builder.build("<Slot><Leaf/><Leaf/></Slot>")
        self.assertEqual(ctx.exception.element_path, "Slot/Leaf[1]")

    def test_leaf_rejects_children(self) -> None:
        with self.assertRaises(UnknownElementError) as ctx:
            self.builder.build("<Leaf><Leaf/></Leaf>")
        self.assertEqual(str(ctx.exception), "Leaf/Leaf[0]: Leaf does not accept child elements")
        with self.assertRaises(UnknownElementError):
            self.builder.build("<Leaf><?include Part?></Leaf>")

    def test_text_requires_text_capability(self) -> None:
        with self.assertRaises(UnexpectedTextError):
            self.builder.build("<Container>stray</Container>")
        view = self.builder.build("<Container>\n   <Leaf/>\n</Container>")
        self.assertEqual(len(view.children), 1)

    def test_outlets_are_assigned_on_owner(self) -> None:
        owner = Owner()
        view = self.builder.build('<Container id="panel"><Leaf id="first"/></Container>', owner)
        self.assertIs(owner.panel, view)
        self.assertIs(owner.first, view.children[0])

    def test_outlet_without_owner_is_ignored(self) -> None:
        view = self.builder.build('<Container><Leaf id="first"/></Container>')
        self.assertEqual(len(view.children), 1)

    def test_unknown_outlet(self) -> None:
        with self.assertRaisesRegex(UnknownOutletError, "no outlet field `second`"):
            self.builder.build('<Container><Leaf id="second"/></Container>', Owner())

    def test_failed_build_leaves_owner_untouched(self) -> None:
        owner = Owner()
        with self.assertRaises(UnknownPropertyError):
            self.builder.build(
                '<Container id="panel"><Leaf id="first" bind.title="name"/><Leaf bogus="1"/></Container>',
                owner,
            )
        self.assertIsNone(owner.first)
        self.assertIsNone(owner.panel)
        self.assertEqual(self.bindings.count(owner), 0)

    def test_unbindable_owner_fails_before_outlets_are_set(self) -> None:
        owner = SlottedOwner()
        with self.assertRaises(BindingPathError) as ctx:
            self.builder.build('<Container><Leaf id="first" bind.title="name"/></Container>', owner)
        self.assertEqual(ctx.exception.element_path, "Container/Leaf[0]")
        self.assertIn("not weakly referenceable", str(ctx.exception))
        self.assertIsNone(owner.first)

    def test_bindings_are_registered_for_owner(self) -> None:
        owner = Owner()
        view = self.builder.build('<Container><Leaf bind.title="name"/></Container>', owner)
        leaf = view.children[0]
        self.assertEqual(self.bindings.count(owner), 1)
        self.assertEqual(self.bindings.push_owner_to_view(owner), 1)
        self.assertEqual(leaf.title, "Ada")
        leaf.title = "Grace"
        self.assertEqual(self.bindings.view_changed(leaf, "title"), 1)
        self.assertEqual(owner.name, "Grace")
        self.assertEqual(self.bindings.release_all(owner), 1)
        self.assertEqual(self.bindings.count(owner), 0)

    def test_binding_paths_are_checked(self) -> None:
        with self.assertRaises(BindingPathError):
            self.builder.build('<Leaf bind.title="missing"/>', Owner())
        with self.assertRaises(BindingPathError):
            self.builder.build('<Leaf bind.subtitle="name"/>', Owner())
        with self.assertRaisesRegex(BindingPathError, "without an owner"):
            self.builder.build('<Leaf bind.title="name"/>')

    def test_custom_outlet_attribute_and_bind_prefix(self) -> None:
        builder = self.make_builder(config=MarkupConfig(outlet_attribute="outlet", bind_prefix="link."))
        owner = Owner()
        view = builder.build('<Leaf outlet="first" link.title="name"/>', owner)
        self.assertIs(owner.first, view)
        self.assertEqual(self.bindings.count(owner), 1)
        self.bindings.release_all(owner)

    def test_root_instance_is_used_when_types_match(self) -> None:
        root = Container()
        view = self.builder.build('<Container spacing="2"><Leaf/></Container>', root=root)
        self.assertIs(view, root)
        self.assertEqual(root.spacing, 2.0)
        self.assertEqual(len(root.children), 1)

    def test_root_type_mismatch(self) -> None:
        with self.assertRaises(RootTypeMismatchError):
            self.builder.build("<Container/>", root=Leaf())

    def test_root_element_builds_into_supplied_instance(self) -> None:
        root = Container()
        view = self.builder.build('<root spacing="3"><Leaf/></root>', root=root)
        self.assertIs(view, root)
        self.assertEqual(root.spacing, 3.0)
        with self.assertRaisesRegex(RootTypeMismatchError, "requires a root instance"):
            self.builder.build("<root/>")

    def test_include_appends_before_following_sibling(self) -> None:
        view = self.builder.build('<Container><?include Part?><Leaf title="after"/></Container>')
        self.assertEqual([child.title for child in view.children], ["included", "after"])

    def test_trailing_include_appends_last(self) -> None:
        view = self.builder.build('<Container><Leaf title="before"/><?include Part?></Container>')
        self.assertEqual([child.title for child in view.children], ["before", "included"])

    def test_included_outlets_reach_owner(self) -> None:
        owner = Owner()
        view = self.builder.build("<Container><?include Panel?></Container>", owner)
        self.assertIs(owner.first, view.children[0].children[1])

    def test_view_with_name(self) -> None:
        owner = Owner()
        view = self.builder.view_with_name("Panel", owner)
        self.assertEqual([child.title for child in view.children], ["p1", "p2"])
        self.assertIs(owner.first, view.children[1])

    def test_include_cycle(self) -> None:
        with self.assertRaisesRegex(IncludeCycleError, "Loop -> Back -> Loop"):
            self.builder.view_with_name("Loop")
        with self.assertRaises(IncludeCycleError):
            self.builder.view_with_name("Self")

    def test_include_errors(self) -> None:
        with self.assertRaises(ResourceNotFoundError):
            self.builder.build("<Container><?include Missing?><Leaf/></Container>")
        with self.assertRaises(ParseSyntaxError):
            self.builder.build("<Container><?include?><Leaf/></Container>")
        with self.assertRaises(UnsupportedInstructionError):
            self.builder.view_with_name("Leading")
        with self.assertRaises(TooManyChildrenError):
            self.builder.build("<Slot><Leaf/><?include Part?></Slot>")


class NamespacedComponentTests(unittest.TestCase):
    def test_prefixed_element_is_resolved_through_namespace(self) -> None:
        registry = make_registry()
        builder = ViewBuilder(
            registry,
            resources=MappingResourceLoader(),
            config=MarkupConfig(namespaces={"demo": "examples.markup_demo.widgets"}),
            bindings=BindingRegistry(),
        )
        view = builder.build('<Container xmlns:demo="demo"><demo:Badge count="2"/></Container>')
        badge = view.children[0]
        self.assertEqual(type(badge).__name__, "Badge")
        self.assertEqual(badge.count, 2)
        self.assertEqual(badge.display_text, "2")
        self.assertEqual(builder.registry.namespaces(), {"demo": "examples.markup_demo.widgets"})
        self.assertEqual(registry.namespaces(), {})
        self.assertIsNone(registry.peek("demo:Badge"))

    def test_namespaces_are_local_to_each_builder(self) -> None:
        module = types.ModuleType("markup_alt_widgets")
        module.Badge = type("Badge", (Leaf,), {"MARKUP_PROPERTIES": (), "__module__": module.__name__})  # type: ignore[attr-defined]
        sys.modules[module.__name__] = module
        self.addCleanup(sys.modules.pop, module.__name__, None)

        registry = make_registry()
        first = ViewBuilder(
            registry,
            resources=MappingResourceLoader(),
            config=MarkupConfig(namespaces={"demo": "examples.markup_demo.widgets"}),
            bindings=BindingRegistry(),
        )
        second = ViewBuilder(
            registry,
            resources=MappingResourceLoader(),
            config=MarkupConfig(namespaces={"demo": module.__name__}),
            bindings=BindingRegistry(),
        )
        source = '<Container xmlns:demo="demo"><demo:Badge/></Container>'
        self.assertEqual(type(first.build(source).children[0]).__module__, "examples.markup_demo.widgets")
        self.assertIs(type(second.build(source).children[0]), module.Badge)  # type: ignore[attr-defined]

    def test_unimportable_namespace_is_a_markup_error(self) -> None:
        builder = ViewBuilder(
            make_registry(),
            resources=MappingResourceLoader(),
            config=MarkupConfig(namespaces={"ext": "no_such_markup_pkg.views"}),
            bindings=BindingRegistry(),
        )
        with self.assertRaises(UnknownElementError) as ctx:
            builder.build('<Container xmlns:ext="urn:ext"><ext:Thing/></Container>')
        self.assertEqual(ctx.exception.element_path, "Container/ext:Thing[0]")
        self.assertIn("no_such_markup_pkg.views", ctx.exception.reason)
        self.assertIsInstance(ctx.exception.__cause__, ImportError)


if __name__ == "__main__":
    unittest.main()
