from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Iterator, Mapping
import xml.etree.ElementTree as ET

from .errors import ParseSyntaxError


@dataclass(frozen=True)
class ProcessingInstruction:
    target: str
    data: str = ""


@dataclass(frozen=True)
class Element:
    """One parsed markup element.

    `instructions` are the processing instructions that immediately precede the
    element among its siblings. `trailing_instructions` are the ones that follow
    the element's last child element.
    """

    name: str
    attributes: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    children: tuple["Element", ...] = ()
    instructions: tuple[ProcessingInstruction, ...] = ()
    trailing_instructions: tuple[ProcessingInstruction, ...] = ()
    text: str = ""

    @property
    def prefix(self) -> str | None:
        if ":" not in self.name:
            return None
        return self.name.split(":", 1)[0]

    @property
    def local_name(self) -> str:
        return self.name.rsplit(":", 1)[-1]

    def iter(self) -> Iterator["Element"]:
        yield self
        for child in self.children:
            yield from child.iter()


@dataclass(frozen=True)
class Document:
    root: Element
    name: str = "<string>"


@dataclass
class _Frame:
    name: str
    attributes: Mapping[str, str]
    instructions: tuple[ProcessingInstruction, ...]
    children: list[Element] = field(default_factory=list)
    pending: list[ProcessingInstruction] = field(default_factory=list)


def parse_document(source: str | bytes, *, name: str = "<string>") -> Document:
    """Parse markup text into an immutable `Document` in one streaming pass."""

    parser = ET.XMLPullParser(events=("start", "end", "pi", "start-ns"))
    prefixes: dict[str, str] = {}
    stack: list[_Frame] = []
    leading: list[ProcessingInstruction] = []
    root: Element | None = None
    try:
        parser.feed(source)
        parser.close()
        for event, payload in parser.read_events():
            if event == "start-ns":
                prefix, uri = payload
                prefixes[uri] = prefix
            elif event == "pi":
                instruction = _instruction_from(payload)
                if root is not None:
                    continue
                if stack:
                    stack[-1].pending.append(instruction)
                else:
                    leading.append(instruction)
            elif event == "start":
                if stack:
                    instructions = tuple(stack[-1].pending)
                    stack[-1].pending.clear()
                else:
                    instructions = tuple(leading)
                    leading.clear()
                stack.append(
                    _Frame(
                        name=_qualified_name(payload.tag, prefixes),
                        attributes=MappingProxyType(
                            {_qualified_name(key, prefixes): value for key, value in payload.attrib.items()}
                        ),
                        instructions=instructions,
                    )
                )
            elif event == "end":
                frame = stack.pop()
                element = Element(
                    name=frame.name,
                    attributes=frame.attributes,
                    children=tuple(frame.children),
                    instructions=frame.instructions,
                    trailing_instructions=tuple(frame.pending),
                    text=_collect_text(payload),
                )
                if stack:
                    stack[-1].children.append(element)
                else:
                    root = element
    except ET.ParseError as exc:
        line, column = getattr(exc, "position", (0, 0))
        raise ParseSyntaxError(f"{name}:{line}:{column}: {exc}") from exc
    if root is None:
        raise ParseSyntaxError(f"{name}: document has no root element")
    return Document(root=root, name=name)


def load_document(path: Path) -> Document:
    return parse_document(Path(path).read_bytes(), name=str(path))


def _instruction_from(node: ET.Element) -> ProcessingInstruction:
    raw = (node.text or "").strip()
    target, _, data = raw.partition(" ")
    return ProcessingInstruction(target=target, data=data.strip())


def _qualified_name(tag: str, prefixes: Mapping[str, str]) -> str:
    if not tag.startswith("{"):
        return tag
    uri, local = tag[1:].split("}", 1)
    prefix = prefixes.get(uri)
    if not prefix:
        return local
    return f"{prefix}:{local}"


def _collect_text(node: ET.Element) -> str:
    parts = [node.text or ""]
    parts.extend(child.tail or "" for child in node)
    return "".join(parts)
