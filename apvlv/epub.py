"""EPUB books: a zip archive of XHTML pages described by an OPF package file."""

from __future__ import annotations

import posixpath
import zipfile
import xml.etree.ElementTree as ET
from collections.abc import Iterator

from apvlv.document import (
    Document,
    DocumentError,
    FileIndex,
    FileIndexType,
    WebRender,
    register_file_type,
)

__all__ = ["EpubDocument"]

CONTAINER_PATH = "META-INF/container.xml"
COVER_TITLE = "__cover__"
URL_PREFIX = "apvlv:///"


def _local(tag) -> str:
    """Tag or attribute name without its namespace."""
    if not isinstance(tag, str):
        return ""
    return tag.rsplit("}", 1)[-1]


def _attr(element: ET.Element, name: str) -> str:
    """Value of attribute *name*, namespaced or not; empty when absent."""
    value = element.get(name)
    if value is not None:
        return value
    for key, val in element.attrib.items():
        if _local(key) == name:
            return val
    return ""


def _children(element: ET.Element, name: str) -> Iterator[ET.Element]:
    return (child for child in element if _local(child.tag) == name)


def _child(element: ET.Element, name: str) -> ET.Element | None:
    return next(_children(element, name), None)


def _parse(data: bytes) -> ET.Element | None:
    try:
        return ET.fromstring(data)
    except ET.ParseError:
        return None


def _element_text(element: ET.Element) -> str:
    """Text of *element* itself, skipping the content of child elements."""
    parts = [element.text or ""]
    parts.extend(child.tail or "" for child in element)
    return "".join(parts)


def _prefix_dir(owner: str, href: str) -> str:
    """Resolve *href* against the directory of the archive member *owner*."""
    if "/" in owner:
        return posixpath.dirname(owner) + "/" + href
    return href


@register_file_type("Web", [".epub"])
class EpubDocument(Document):
    """An EPUB book whose spine entries are the pages."""

    def __init__(self) -> None:
        super().__init__()
        self._zip: zipfile.ZipFile | None = None
        self.id_srcs: dict[str, str] = {}

    def __enter__(self) -> "EpubDocument":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def load(self, filename) -> None:
        """Open the archive and read its package, spine and table of contents."""
        self.close()
        super().load(filename)
        self.pages = []
        self.src_pages = {}
        self.src_mime_types = {}
        self.id_srcs = {}
        self.index = FileIndex(type=FileIndexType.FILE)
        try:
            self._zip = zipfile.ZipFile(filename)
        except (OSError, zipfile.BadZipFile) as exc:
            raise DocumentError(f"cannot open {filename}: {exc}") from exc
        try:
            self._read_book()
        except BaseException:
            self.close()
            raise

    def close(self) -> None:
        """Close the underlying archive."""
        if self._zip is not None:
            self._zip.close()
            self._zip = None

    def sum(self) -> int:
        return len(self.pages)

    def render_to_web_view(self, pn: int, zoom: float, rotation: int) -> WebRender:
        return WebRender(url=URL_PREFIX + self._page_path(pn), zoom=zoom)

    def page_search(self, pn: int, word: str) -> list[str] | None:
        """One entry per occurrence of *word* in the page's markup, or None."""
        content = self._zip_contents(self._page_path(pn))
        if content is None:
            raise DocumentError(f"page {pn} is missing from {self.filename}")
        html = content.decode("utf-8", errors="replace")
        matches = []
        pos = html.find(word)
        while pos != -1:
            matches.append(word)
            pos = html.find(word, pos + 1)
        return matches or None

    def path_content(self, path: str) -> bytes | None:
        return self._zip_contents(path)

    # internals

    def _page_path(self, pn: int) -> str:
        if not 0 <= pn < len(self.pages):
            raise DocumentError(f"page {pn} out of range")
        return self.pages[pn]

    def _zip_contents(self, name: str) -> bytes | None:
        if self._zip is None:
            return None
        try:
            return self._zip.read(name)
        except KeyError:
            return None

    def _read_book(self) -> None:
        container = self._zip_contents(CONTAINER_PATH)
        if container is None:
            raise DocumentError(f"{self.filename} has no {CONTAINER_PATH}")
        content_file = self._container_content_file(container)
        if not content_file:
            raise DocumentError(f"{self.filename} names no package file")
        self._content_get_media(content_file)
        self._ncx_set_index(self.id_srcs.get("ncx", ""))

    @staticmethod
    def _container_content_file(container: bytes) -> str:
        root = _parse(container)
        if root is None or _local(root.tag) != "container":
            return ""
        rootfiles = _child(root, "rootfiles")
        if rootfiles is None:
            return ""
        rootfile = _child(rootfiles, "rootfile")
        if rootfile is None:
            return ""
        return _attr(rootfile, "full-path")

    def _content_get_media(self, content_file: str) -> None:
        content = self._zip_contents(content_file)
        if content is None:
            raise DocumentError(f"package file {content_file} is missing")
        root = _parse(content)
        if root is None or _local(root.tag) != "package":
            raise DocumentError(f"package file {content_file} is not valid")

        cover_id = "cover"
        metadata = _child(root, "metadata")
        if metadata is not None:
            for meta in metadata.iter():
                if _local(meta.tag) == "meta" and _attr(meta, "name") == "cover":
                    cover_id = _attr(meta, "content")

        manifest = _child(root, "manifest")
        items = list(_children(manifest, "item")) if manifest is not None else []
        if not items:
            raise DocumentError(f"package file {content_file} has no manifest")
        for item in items:
            href = _attr(item, "href")
            if not href:
                continue
            href = _prefix_dir(content_file, href)
            item_id = _attr(item, "id")
            key = "cover" if item_id == cover_id else item_id
            self.id_srcs[key] = href
            self.src_mime_types[href] = _attr(item, "media-type")

        spine = _child(root, "spine")
        itemrefs = list(_children(spine, "itemref")) if spine is not None else []
        if not itemrefs:
            raise DocumentError(f"package file {content_file} has no spine")
        for itemref in itemrefs:
            href = self.id_srcs.get(_attr(itemref, "idref"), "")
            self.pages.append(href)
            self.src_pages[href] = len(self.pages) - 1

    def _ncx_set_index(self, ncx_file: str) -> bool:
        toc = self._zip_contents(ncx_file) if ncx_file else None
        if toc is None:
            return False
        root = _parse(toc)
        if root is None or _local(root.tag) != "ncx":
            return False
        nav_map = _child(root, "navMap")
        if nav_map is None:
            return False
        self.index = FileIndex(
            title=COVER_TITLE, page=0, path=self.filename, type=FileIndexType.FILE
        )
        self._ncx_node_set_index(nav_map, ncx_file, self.index)
        return True

    def _ncx_node_set_index(
        self, node: ET.Element, ncx_file: str, index: FileIndex
    ) -> None:
        for child in node:
            name = _local(child.tag)
            if name == "navLabel":
                text = next(
                    (el for el in child.iter() if _local(el.tag) == "text"), None
                )
                if text is not None:
                    index.title = _element_text(text)
            elif name == "content":
                src = _attr(child, "src")
                if not src:
                    continue
                src = _prefix_dir(ncx_file, src)
                index.path = src
                href = src
                if "#" in src:
                    pos = src.find("#")
                    index.anchor = src[pos:]
                    href = src[:pos]
                if href in self.pages:
                    index.page = self.pages.index(href)
            elif name == "navPoint":
                child_index = FileIndex()
                self._ncx_node_set_index(child, ncx_file, child_index)
                index.children.append(child_index)