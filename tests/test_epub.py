import zipfile

import pytest

from apvlv.document import DocumentError, FileIndexType, find_file_types
from apvlv.epub import EpubDocument

CONTAINER = """<?xml version="1.0"?>
<container version="1.0" xmlns="urn:oasis:names:tc:opendocument:xmlns:container">
  <rootfiles>
    <rootfile full-path="OEBPS/content.opf" media-type="application/oebps-package+xml"/>
  </rootfiles>
</container>
"""

OPF = """<?xml version="1.0"?>
<package xmlns="http://www.idpf.org/2007/opf" version="2.0">
  <metadata xmlns:dc="http://purl.org/dc/elements/1.1/">
    <dc:title>Book</dc:title>
    <meta name="cover" content="cover-image"/>
  </metadata>
  <manifest>
    <item id="ncx" href="toc.ncx" media-type="application/x-dtbncx+xml"/>
    <item id="cover-image" href="images/cover.png" media-type="image/png"/>
    <item id="c1" href="chap1.xhtml" media-type="application/xhtml+xml"/>
    <item id="c2" href="chap2.xhtml" media-type="application/xhtml+xml"/>
  </manifest>
  <spine toc="ncx">
    <itemref idref="c1"/>
    <itemref idref="c2"/>
  </spine>
</package>
"""

NCX = """<?xml version="1.0"?>
<ncx xmlns="http://www.daisy.org/z3986/2005/ncx/" version="2005-1">
  <navMap>
    <navPoint id="p1">
      <navLabel><text>Chapter One</text></navLabel>
      <content src="chap1.xhtml"/>
    </navPoint>
    <navPoint id="p2">
      <navLabel><text>Chapter Two</text></navLabel>
      <content src="chap2.xhtml#sec"/>
      <navPoint id="p3">
        <navLabel><text>Inner</text></navLabel>
        <content src="chap2.xhtml#inner"/>
      </navPoint>
    </navPoint>
  </navMap>
</ncx>
"""

CHAP1 = b"<html><body><p>apple and apple pie</p></body></html>"
CHAP2 = b"<html><body><p id='sec'>banana</p></body></html>"


def _write_epub(path, files):
    with zipfile.ZipFile(path, "w") as zf:
        for name, data in files.items():
            zf.writestr(name, data)
    return path


@pytest.fixture
def book(tmp_path):
    path = _write_epub(
        tmp_path / "book.epub",
        {
            "META-INF/container.xml": CONTAINER,
            "OEBPS/content.opf": OPF,
            "OEBPS/toc.ncx": NCX,
            "OEBPS/chap1.xhtml": CHAP1,
            "OEBPS/chap2.xhtml": CHAP2,
            "OEBPS/images/cover.png": b"\x89PNG",
        },
    )
    doc = EpubDocument()
    doc.load(path)
    yield doc
    doc.close()


def test_registered_for_epub_extension():
    assert EpubDocument in find_file_types("some/book.EPUB")


def test_pages_follow_spine(book):
    assert book.sum() == 2
    assert book.pages == ["OEBPS/chap1.xhtml", "OEBPS/chap2.xhtml"]
    assert book.src_pages == {"OEBPS/chap1.xhtml": 0, "OEBPS/chap2.xhtml": 1}


def test_manifest_mime_types_and_cover(book):
    assert book.path_mime_type("OEBPS/chap1.xhtml") == "application/xhtml+xml"
    assert book.id_srcs["cover"] == "OEBPS/images/cover.png"
    assert book.src_mime_types["OEBPS/images/cover.png"] == "image/png"
    assert "cover-image" not in book.id_srcs


def test_table_of_contents(book):
    index = book.index
    assert index.title == "__cover__"
    assert index.type is FileIndexType.FILE
    assert index.path == book.filename
    assert [c.title for c in index.children] == ["Chapter One", "Chapter Two"]
    first, second = index.children
    assert first.page == 0
    assert first.path == "OEBPS/chap1.xhtml"
    assert first.anchor == ""
    assert second.page == 1
    assert second.anchor == "#sec"
    assert second.path == "OEBPS/chap2.xhtml#sec"
    assert [c.title for c in second.children] == ["Inner"]
    assert second.children[0].anchor == "#inner"


def test_path_content(book):
    assert book.path_content("OEBPS/chap2.xhtml") == CHAP2
    assert book.path_content("OEBPS/missing.xhtml") is None


def test_render_to_web_view(book):
    render = book.render_to_web_view(1, 1.5, 0)
    assert render.url == "apvlv:///OEBPS/chap2.xhtml"
    assert render.zoom == 1.5


def test_render_out_of_range(book):
    with pytest.raises(DocumentError):
        book.render_to_web_view(5, 1.0, 0)


def test_page_search_counts_occurrences(book):
    assert book.page_search(0, "apple") == ["apple", "apple"]
    assert book.page_search(1, "banana") == ["banana"]
    assert book.page_search(1, "apple") is None


def test_context_manager_closes(tmp_path, book):
    path = book.filename
    with EpubDocument() as doc:
        doc.load(path)
        assert doc.path_content("OEBPS/chap1.xhtml") == CHAP1
    assert doc.path_content("OEBPS/chap1.xhtml") is None


def test_missing_ncx_keeps_book_usable(tmp_path):
    path = _write_epub(
        tmp_path / "nonc.epub",
        {
            "META-INF/container.xml": CONTAINER,
            "OEBPS/content.opf": OPF,
            "OEBPS/chap1.xhtml": CHAP1,
            "OEBPS/chap2.xhtml": CHAP2,
        },
    )
    with EpubDocument() as doc:
        doc.load(path)
        assert doc.sum() == 2
        assert doc.index.children == []


def test_missing_container_raises(tmp_path):
    path = _write_epub(tmp_path / "bad.epub", {"OEBPS/content.opf": OPF})
    with pytest.raises(DocumentError):
        EpubDocument().load(path)


def test_container_without_rootfile_raises(tmp_path):
    container = (
        '<container xmlns="urn:oasis:names:tc:opendocument:xmlns:container">'
        "<rootfiles/></container>"
    )
    path = _write_epub(
        tmp_path / "bad.epub", {"META-INF/container.xml": container}
    )
    with pytest.raises(DocumentError):
        EpubDocument().load(path)


def test_missing_package_file_raises(tmp_path):
    path = _write_epub(
        tmp_path / "bad.epub", {"META-INF/container.xml": CONTAINER}
    )
    with pytest.raises(DocumentError):
        EpubDocument().load(path)


def test_not_a_zip_raises(tmp_path):
    path = tmp_path / "plain.epub"
    path.write_bytes(b"not a zip archive")
    with pytest.raises(DocumentError):
        EpubDocument().load(path)


def test_package_at_archive_root_keeps_hrefs(tmp_path):
    container = CONTAINER.replace("OEBPS/content.opf", "content.opf")
    path = _write_epub(
        tmp_path / "flat.epub",
        {
            "META-INF/container.xml": container,
            "content.opf": OPF,
            "toc.ncx": NCX,
            "chap1.xhtml": CHAP1,
            "chap2.xhtml": CHAP2,
        },
    )
    with EpubDocument() as doc:
        doc.load(path)
        assert doc.pages == ["chap1.xhtml", "chap2.xhtml"]
        assert doc.index.children[1].page == 1
        assert doc.path_content(doc.pages[0]) == CHAP1