"""Document types that are shown through a web view: HTML, images and plain text."""

from __future__ import annotations

import mimetypes
from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, TypeVar

__all__ = [
    "FileIndexType",
    "FileIndex",
    "WebRender",
    "DocumentError",
    "Document",
    "HtmlDocument",
    "ImageDocument",
    "TextDocument",
    "register_file_type",
    "find_file_types",
    "type_engine_description",
]

_TEXT_MIME = "text/plain"


class FileIndexType(Enum):
    """Kind of an entry in a document's table of contents."""

    FILE = "file"
    PAGE = "page"


@dataclass
class FileIndex:
    """One node of a document's table of contents."""

    title: str = ""
    page: int = 0
    path: str = ""
    type: FileIndexType = FileIndexType.PAGE
    anchor: str = ""
    children: list[FileIndex] = field(default_factory=list)


@dataclass(frozen=True)
class WebRender:
    """What a web view must load to show one page of a document."""

    url: str
    zoom: float
    text_encoding: str | None = None


class DocumentError(Exception):
    """Raised when a document cannot be read or rendered."""


_D = TypeVar("_D", bound="type[Document]")

_registry: dict[str, list[tuple[str, type["Document"]]]] = defaultdict(list)


def register_file_type(engine: str, extensions) -> Callable[[_D], _D]:
    """Class decorator registering a document type for the given extensions."""

    def decorator(cls: _D) -> _D:
        for ext in extensions:
            _registry[ext.lower()].append((engine, cls))
        return cls

    return decorator


def find_file_types(path) -> list[type["Document"]]:
    """Document classes able to open *path*, in registration order."""
    ext = Path(path).suffix.lower()
    return [cls for _, cls in _registry.get(ext, [])]


def type_engine_description() -> str:
    """Describe which engine handles which file extensions."""
    engines: dict[str, list[str]] = {}
    for ext, entries in _registry.items():
        for engine, _ in entries:
            exts = engines.setdefault(engine, [])
            if ext not in exts:
                exts.append(ext)
    lines = ["Supported file types:"]
    lines.extend(
        f"\t{engine}: {' '.join(exts)}" for engine, exts in engines.items()
    )
    return "\n".join(lines)


class Document:
    """Base of all document types; pages are numbered from zero."""

    def __init__(self) -> None:
        self.filename: str = ""
        self.pages: list[str] = []
        self.src_pages: dict[str, int] = {}
        self.src_mime_types: dict[str, str] = {}
        self.index = FileIndex(type=FileIndexType.FILE)

    def _check_page(self, pn: int) -> None:
        if not 0 <= pn < self.sum():
            raise DocumentError(f"page {pn} is out of range")

    def load(self, filename) -> None:
        """Remember the file this document is read from."""
        self.filename = str(filename)

    def sum(self) -> int:
        """Number of pages."""
        return max(1, len(self.pages))

    def page_is_only_image(self, pn: int) -> bool:
        """Whether a page holds nothing but an image, judged by its mime type."""
        self._check_page(pn)
        if pn >= len(self.pages):
            return False
        return self.path_mime_type(self.pages[pn]).startswith("image/")

    def path_mime_type(self, path: str) -> str:
        if path in self.src_mime_types:
            return self.src_mime_types[path]
        guessed, _ = mimetypes.guess_type(path)
        return guessed or "text/html"

    def path_content(self, path: str) -> bytes | None:
        """Bytes of an internal resource, or None if the document has none."""
        return None

    def page_text(self, pn: int, rect=None) -> str | None:
        """Text of a page, or None if the document has no text layer."""
        self._check_page(pn)
        if pn >= len(self.pages):
            return None
        content = self.path_content(self.pages[pn])
        if content is None:
            return None
        return content.decode("utf-8", errors="replace")

    def page_search(self, pn: int, word: str) -> list | None:
        """Matches of *word* on a page, or None if nothing is found."""
        return None

    def render_to_web_view(self, pn: int, zoom: float, rotation: int) -> WebRender:
        raise DocumentError(f"{type(self).__name__} cannot be shown in a web view")


@register_file_type("Web", [".htm", ".html"])
class HtmlDocument(Document):
    """An HTML file, loaded straight from disk."""

    def __init__(self) -> None:
        super().__init__()
        self.url = ""

    def load(self, filename) -> None:
        super().load(filename)
        self.url = Path(filename).absolute().as_uri()

    def render_to_web_view(self, pn: int, zoom: float, rotation: int) -> WebRender:
        return WebRender(url=self.url, zoom=zoom)


@register_file_type("Web", [".png", ".jpg", ".jpeg", ".gif", ".bmp"])
class ImageDocument(HtmlDocument):
    """A single image file."""

    def page_is_only_image(self, pn: int) -> bool:
        """Every page of an image file is an image."""
        self._check_page(pn)
        return True


@register_file_type("Web", [".txt", ".text"])
class TextDocument(HtmlDocument):
    """A plain UTF-8 text file."""

    def load(self, filename) -> None:
        super().load(filename)
        self.src_mime_types[self.url] = _TEXT_MIME

    def page_text(self, pn: int, rect=None) -> str:
        try:
            data = Path(self.filename).read_bytes()
        except OSError as exc:
            raise DocumentError(f"cannot read {self.filename}: {exc}") from exc
        return data.decode("utf-8", errors="replace")

    def render_to_web_view(self, pn: int, zoom: float, rotation: int) -> WebRender:
        return WebRender(url=self.url, zoom=zoom, text_encoding="UTF-8")

    def path_mime_type(self, path: str) -> str:
        """Every resource of a text document is served as plain text."""
        return self.src_mime_types.get(path, _TEXT_MIME)