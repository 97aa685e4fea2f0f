"""FictionBook 2 books: one XML file holding the text, the cover and the images."""

from __future__ import annotations

import base64
import binascii
import io
import xml.etree.ElementTree as ET
from pathlib import Path

from apvlv.document import (
    Document,
    DocumentError,
    FileIndex,
    FileIndexType,
    WebRender,
    register_file_type,
)

__all__ = ["Fb2Document"]

URL_PREFIX = "apvlv:///"
XHTML_MIME = "application/xhtml+xml"
COVER_TITLE = "__cover__"
TITLE_TITLE = "TITLE"
STYLESHEET_PATH = "stylesheet.css"

STYLESHEET_CONTENT = (
    ".block_c {\n"
    "  display: block;\n"
    "  font-size: 2.5em;\n"
    "  font-weight: normal;\n"
    "  line-height: 33.6pt;\n"
    "  text-align: center;\n"
    "  text-indent: 0;\n"
    "  margin: 17pt 0;\n"
    "  padding: 0;\n"
    "}\n"
    ".block_ {\n"
    "  display: block;\n"
    "  font-size: 1.5em;\n"
    "  font-weight: normal;\n"
    "  line-height: 33.6pt;\n"
    "  text-align: justify;\n"
    "  text-indent: 0;\n"
    "  margin: 17pt 0;\n"
    "  padding: 0;\n"
    "}\n"
    ".block_1 {\n"
    "  display: block;\n"
    "  line-height: 1.2;\n"
    "  text-align: justify;\n"
    "  margin: 0 0 7pt;\n"
    "  padding: 0;\n"
    "}\n"
)

_HTML_HEAD = (
    "<?xml version='1.0' encoding='UTF-8'?>\n"
    '<html xmlns="http://www.w3.org/1999/xhtml" lang="en" xml:lang="en">\n'
    "  <head>\n"
    "    <title></title>\n"
    '    <link rel="stylesheet" type="text/css" href="stylesheet.css"/>\n'
    '    <meta http-equiv="Content-Type" content="text/html; charset=utf-8"/>\n'
    "  </head>\n"
    "  <body>\n"
)
_HTML_TAIL = "    %s\n  </body>\n</html>\n"

TITLE_TEMPLATE = (
    _HTML_HEAD + "  <br />\n  <br />\n  <br />\n  <br />\n" + _HTML_TAIL
)
SECTION_TEMPLATE = _HTML_HEAD + _HTML_TAIL


def _local(tag) -> str:
    if not isinstance(tag, str):
        return ""
    return tag.rsplit("}", 1)[-1]


def _attr(element: ET.Element, name: str) -> str:
    value = element.get(name)
    if value is not None:
        return value
    for key, val in element.attrib.items():
        if _local(key) == name:
            return val
    return ""


def _child(element: ET.Element | None, name: str) -> ET.Element | None:
    if element is None:
        return None
    return next((c for c in element if _local(c.tag) == name), None)


def _path(root: ET.Element, names: list[str]) -> ET.Element | None:
    """Follow *names* from the root element; the first name is the root's own."""
    if _local(root.tag) != names[0]:
        return None
    node: ET.Element | None = root
    for name in names[1:]:
        node = _child(node, name)
    return node


def _text(element: ET.Element) -> str:
    return "".join(element.itertext()).strip()


def _build(template: str, content: str) -> str:
    return template.replace("%s", content, 1)


class _Events:
    """Start and end events of a parsed document, with the end of each element."""

    def __init__(self, content: bytes) -> None:
        try:
            self.items = list(
                ET.iterparse(io.BytesIO(content), events=("start", "end"))
            )
        except ET.ParseError as exc:
            raise DocumentError(f"malformed FictionBook data: {exc}") from exc
        self.start_of: dict[int, int] = {}
        self.end_of: dict[int, int] = {}
        for pos, (kind, elem) in enumerate(self.items):
            (self.start_of if kind == "start" else self.end_of)[id(elem)] = pos

    @property
    def root(self) -> ET.Element:
        return self.items[0][1]

    def is_end(self, pos: int, name: str) -> bool:
        kind, elem = self.items[pos]
        return kind == "end" and _local(elem.tag) == name


@register_file_type("Web", [".fb2"])
class Fb2Document(Document):
    """A FictionBook 2 book; every title block and section becomes a page."""

    def __init__(self) -> None:
        super().__init__()
        self.title_sections: dict[str, tuple[str, bytes]] = {}
        self.cover_href = ""

    def load(self, filename) -> None:
        """Read and parse the book stored in *filename*."""
        try:
            content = Path(filename).read_bytes()
        except OSError as exc:
            raise DocumentError(f"cannot read {filename}: {exc}") from exc
        super().load(filename)
        self.parse(content)

    def parse(self, content) -> None:
        """Build the pages and the table of contents from FictionBook XML."""
        if isinstance(content, str):
            content = content.encode("utf-8")
        events = _Events(content)
        self.pages = []
        self.src_pages = {}
        self.src_mime_types = {}
        self.title_sections = {}
        self._parse_description(events.root)
        self._parse_binary(events.root)
        self._parse_body(events)
        self._generate_index()

    def sum(self) -> int:
        return len(self.pages)

    def render_to_web_view(self, pn: int, zoom: float, rotation: int) -> WebRender:
        return WebRender(url=f"{URL_PREFIX}{pn}", zoom=zoom)

    def path_content(self, path: str) -> bytes:
        if path == STYLESHEET_PATH:
            return STYLESHEET_CONTENT.encode("utf-8")
        return self.title_sections.get(path, ("", b""))[1]

    # internals

    def _parse_description(self, root: ET.Element) -> None:
        image = _path(
            root, ["FictionBook", "description", "title-info", "coverpage", "image"]
        )
        self.cover_href = _attr(image, "href") if image is not None else ""

    def _parse_binary(self, root: ET.Element) -> None:
        binary = _path(root, ["FictionBook", "binary"])
        if binary is None:
            return
        binary_id = _attr(binary, "id")
        if self.cover_href and binary_id != self.cover_href[1:]:
            return
        mime = _attr(binary, "content-type")
        try:
            data = base64.b64decode("".join(binary.itertext()))
        except (binascii.Error, ValueError):
            data = b""
        self._append_section(COVER_TITLE, data, mime)

    def _parse_body(self, events: _Events) -> None:
        body = _path(events.root, ["FictionBook", "body"])
        if body is None:
            return
        items = events.items
        pos = events.start_of[id(body)]
        while pos < len(items) and not events.is_end(pos, "body"):
            kind, elem = items[pos]
            name = _local(elem.tag)
            if kind == "start" and name == "title":
                pos = self._read_title(events, pos)
            elif kind == "start" and name == "section":
                pos = self._read_section(events, pos)
            pos += 1

    def _read_title(self, events: _Events, pos: int) -> int:
        parts: list[str] = []
        items = events.items
        while pos < len(items) and not events.is_end(pos, "title"):
            kind, elem = items[pos]
            if kind == "start":
                name = _local(elem.tag)
                if name == "empty-line":
                    parts.append("<br />")
                elif name == "p":
                    parts.append(
                        f'<h1 class="block_c"><span>{_text(elem)}</span></h1><br />'
                    )
                    pos = events.end_of[id(elem)]
            pos += 1
        html = _build(TITLE_TEMPLATE, "".join(parts))
        self._append_section(TITLE_TITLE, html.encode("utf-8"), XHTML_MIME)
        return pos

    def _read_section(self, events: _Events, pos: int) -> int:
        parts: list[str] = []
        title = ""
        items = events.items
        while pos < len(items) and not events.is_end(pos, "section"):
            kind, elem = items[pos]
            if kind == "start":
                name = _local(elem.tag)
                if name == "title":
                    title = _text(elem)
                    parts.append(
                        f'<h1 class="block_"><span>{title}</span></h1><br />'
                    )
                    pos = events.end_of[id(elem)]
                elif name == "p":
                    parts.append(f'<p class="block_1"><span>{_text(elem)}</span></p>')
                    pos = events.end_of[id(elem)]
            pos += 1
        html = _build(SECTION_TEMPLATE, "".join(parts))
        self._append_section(title, html.encode("utf-8"), XHTML_MIME)
        return pos

    def _append_section(self, title: str, section: bytes, mime: str) -> None:
        uri = str(len(self.pages))
        self.src_pages[uri] = len(self.pages)
        self.pages.append(uri)
        self.title_sections.setdefault(uri, (title, section))
        self.src_mime_types.setdefault(uri, mime)

    def _generate_index(self) -> None:
        self.index = FileIndex(
            title="", page=0, path=self.filename, type=FileIndexType.FILE
        )
        for ind, uri in enumerate(self.pages):
            if uri == COVER_TITLE:
                continue
            title = self.title_sections[uri][0]
            self.index.children.append(
                FileIndex(title=title, page=ind, path=str(ind), type=FileIndexType.PAGE)
            )