from __future__ import annotations

from pathlib import Path
import json
import logging
from typing import Mapping, Protocol

from PIL import Image, UnidentifiedImageError

from .document import Document, parse_document
from .errors import ResourceNotFoundError

LOGGER = logging.getLogger(__name__)


class ResourceLoader(Protocol):
    """Synchronous access to images, localized strings and reusable documents."""

    def load_image(self, name: str) -> Image.Image:
        ...

    def lookup_localized_string(self, key: str) -> str:
        ...

    def include_document(self, name: str) -> Document:
        ...


class MappingResourceLoader:
    """In-memory resources; documents may be given as parsed `Document`s or markup text."""

    def __init__(
        self,
        *,
        images: Mapping[str, Image.Image] | None = None,
        strings: Mapping[str, str] | None = None,
        documents: Mapping[str, Document | str] | None = None,
    ) -> None:
        self._images = dict(images or {})
        self._strings = dict(strings or {})
        self._documents = dict(documents or {})

    def load_image(self, name: str) -> Image.Image:
        try:
            return self._images[name]
        except KeyError:
            raise ResourceNotFoundError(f"image not found: {name}") from None

    def lookup_localized_string(self, key: str) -> str:
        try:
            return self._strings[key]
        except KeyError:
            raise ResourceNotFoundError(f"localized string not found: {key}") from None

    def include_document(self, name: str) -> Document:
        try:
            document = self._documents[name]
        except KeyError:
            raise ResourceNotFoundError(f"document not found: {name}") from None
        if isinstance(document, str):
            document = parse_document(document, name=name)
            self._documents[name] = document
        return document


class DirectoryResourceLoader:
    """Resources laid out under one directory.

    - images: `<name>`, `<name>.png`, `images/<name>` or `images/<name>.png`
    - strings: a flat JSON object in `strings_file`
    - documents: `<name>.xml`
    """

    def __init__(self, root: Path, *, strings_file: str = "strings.json") -> None:
        self.root = Path(root)
        self.strings_file = strings_file
        self._strings: dict[str, str] | None = None
        self._documents: dict[str, Document] = {}

    def load_image(self, name: str) -> Image.Image:
        for candidate in (name, f"{name}.png", f"images/{name}", f"images/{name}.png"):
            path = self.root / candidate
            if not path.is_file():
                continue
            try:
                with Image.open(path) as image:
                    image.load()
                    return image.copy()
            except UnidentifiedImageError as exc:
                raise ResourceNotFoundError(f"image is not readable: {path}") from exc
        raise ResourceNotFoundError(f"image not found: {name} (searched under {self.root})")

    def lookup_localized_string(self, key: str) -> str:
        strings = self._load_strings()
        try:
            return strings[key]
        except KeyError:
            raise ResourceNotFoundError(f"localized string not found: {key}") from None

    def include_document(self, name: str) -> Document:
        cached = self._documents.get(name)
        if cached is not None:
            return cached
        path = self.root / f"{name}.xml"
        if not path.is_file():
            raise ResourceNotFoundError(f"document not found: {path}")
        LOGGER.debug("loading markup document %s", path)
        document = parse_document(path.read_bytes(), name=str(path))
        self._documents[name] = document
        return document

    def _load_strings(self) -> dict[str, str]:
        if self._strings is not None:
            return self._strings
        path = self.root / self.strings_file
        if not path.is_file():
            self._strings = {}
            return self._strings
        data = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(data, dict) or not all(isinstance(v, str) for v in data.values()):
            raise ValueError(f"{path} must contain a JSON object of strings")
        self._strings = {str(key): value for key, value in data.items()}
        return self._strings
