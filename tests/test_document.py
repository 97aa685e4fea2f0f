import pytest

from apvlv.document import (
    Document,
    DocumentError,
    HtmlDocument,
    ImageDocument,
    TextDocument,
    find_file_types,
    register_file_type,
    type_engine_description,
)


def test_html_load_builds_file_url(tmp_path):
    page = tmp_path / "page.html"
    page.write_text("<html></html>")
    doc = HtmlDocument()
    doc.load(page)
    assert doc.url == page.absolute().as_uri()
    assert doc.url.startswith("file://")


def test_html_render_uses_url_and_zoom(tmp_path):
    page = tmp_path / "page.htm"
    page.write_text("<p>hi</p>")
    doc = HtmlDocument()
    doc.load(page)
    render = doc.render_to_web_view(0, 1.5, 0)
    assert render.url == doc.url
    assert render.zoom == 1.5
    assert render.text_encoding is None


def test_image_is_only_image_html_is_not(tmp_path):
    assert ImageDocument().page_is_only_image(0) is True
    assert HtmlDocument().page_is_only_image(0) is False


def test_text_page_text_reads_file(tmp_path):
    text = tmp_path / "notes.txt"
    text.write_text("first line\nsecond line\n", encoding="utf-8")
    doc = TextDocument()
    doc.load(text)
    assert doc.page_text(0, None) == "first line\nsecond line\n"


def test_text_page_text_missing_file_raises(tmp_path):
    doc = TextDocument()
    doc.load(tmp_path / "missing.txt")
    with pytest.raises(DocumentError):
        doc.page_text(0, None)


def test_text_render_sets_utf8_encoding(tmp_path):
    text = tmp_path / "a.text"
    text.write_text("x")
    doc = TextDocument()
    doc.load(text)
    render = doc.render_to_web_view(0, 2.0, 0)
    assert render.text_encoding == "UTF-8"
    assert render.url == text.absolute().as_uri()


def test_text_mime_type():
    assert TextDocument().path_mime_type("anything.html") == "text/plain"


def test_base_mime_type_prefers_known_sources():
    doc = Document()
    doc.src_mime_types["chapter"] = "application/xhtml+xml"
    assert doc.path_mime_type("chapter") == "application/xhtml+xml"
    assert doc.path_mime_type("style.css") == "text/css"


def test_base_document_defaults():
    doc = Document()
    assert doc.sum() == 1
    assert doc.page_text(0, None) is None
    assert doc.page_search(0, "x") is None
    assert doc.path_content("x") is None


def test_base_document_cannot_render():
    with pytest.raises(DocumentError):
        Document().render_to_web_view(0, 1.0, 0)


@pytest.mark.parametrize(
    "name, cls",
    [
        ("a.html", HtmlDocument),
        ("a.HTM", HtmlDocument),
        ("b.png", ImageDocument),
        ("b.jpeg", ImageDocument),
        ("c.txt", TextDocument),
        ("c.text", TextDocument),
    ],
)
def test_find_file_types(name, cls):
    assert cls in find_file_types(name)


def test_find_file_types_unknown():
    assert find_file_types("archive.unknownext") == []


def test_register_file_type_custom():
    @register_file_type("Custom", [".zzq"])
    class ZzqDocument(Document):
        pass

    assert find_file_types("x.zzq") == [ZzqDocument]
    assert "Custom" in type_engine_description()


def test_type_engine_description_lists_web():
    description = type_engine_description()
    assert "Web" in description
    assert ".html" in description
    assert ".txt" in description