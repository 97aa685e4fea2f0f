# apvlv

The document and window core of a Vim-like document viewer. It reads HTML,
plain text, image, EPUB and FictionBook (FB2) files into a common page
model, and keeps a tree of split windows that can be moved through with
Vim-style keys.

## Installation

```
pip install .
```

For the test suite:

```
pip install ".[test]"
pytest
```

## Documents

All readers share the `Document` interface from `apvlv.document`. Pages
are numbered from zero.

- `load(filename)` opens the file. The EPUB and FB2 readers raise
  `DocumentError` when the file cannot be read or parsed; the HTML, image
  and text readers only remember the path and build a `file://` URL.
- `sum()` gives the number of pages.
- `path_content(path)` returns the bytes of a page or a resource inside
  the document, such as an EPUB chapter or the FB2 stylesheet, or `None`
  where the document has no such resource.
- `path_mime_type(path)` gives the media type of such a resource.
- `page_text(pn, rect)` gives the text of a page; `TextDocument` returns
  the whole file.
- `page_search(pn, word)` searches a page; `EpubDocument` returns one
  entry per occurrence of the word in the page's markup, or `None`.
- `page_is_only_image(pn)` tells whether a page is nothing but an image.
- `render_to_web_view(pn, zoom, rotation)` returns a `WebRender` holding
  the URL a web view should load, the zoom, and for text files the
  encoding (`UTF-8`). Internal pages use URLs of the form
  `apvlv:///<path>`, whose bytes come from `path_content`.

The readers are:

| Class            | Module           | Extensions                                 |
|------------------|------------------|--------------------------------------------|
| `HtmlDocument`   | `apvlv.document` | `.htm`, `.html`                            |
| `ImageDocument`  | `apvlv.document` | `.png`, `.jpg`, `.jpeg`, `.gif`, `.bmp`    |
| `TextDocument`   | `apvlv.document` | `.txt`, `.text`                            |
| `EpubDocument`   | `apvlv.epub`     | `.epub`                                    |
| `Fb2Document`    | `apvlv.fb2`      | `.fb2`                                     |

Readers register their extensions with the `register_file_type(engine,
extensions)` class decorator. `find_file_types(path)` gives the reader
classes for a path in registration order, and `type_engine_description()`
lists each engine with the extensions it handles. A reader is registered
when its module is imported.

```python
from apvlv.epub import EpubDocument

with EpubDocument() as book:
    book.load("novel.epub")
    print(book.sum(), "pages")
    for chapter in book.index.children:
        print(chapter.page, chapter.title, chapter.anchor)
    render = book.render_to_web_view(0, 1.0, 0)
    print(render.url)
```

`EpubDocument` keeps the archive open until `close()` is called or the
`with` block ends. An FB2 book can also be parsed straight from memory
with `Fb2Document.parse(content)`, which takes bytes or a string; every
title block and section becomes a page of generated XHTML, and an
embedded cover image becomes a page of its own.

A loaded document has an `index` of `FileIndex` entries (`title`, `page`,
`path`, `type`, `anchor` and `children`) that gives its table of
contents. EPUB books take it from their NCX file.

## Windows

`apvlv.window.Window` is a node in a tree of split windows. A leaf
(`WindowType.FRAME`) holds a frame: any object with an `in_use` flag, a
`clone()` method and a `toggled_control_directory(forward)` method, as
described by the `Frame` protocol.

- `birth(window_type, frame)` splits a leaf into two, side by side
  (`WindowType.SP`) or one above the other (`WindowType.VSP`), and
  returns the two new leaves. Without a frame it clones the current one;
  `SplitError` is raised if that gives nothing.
- `perish()` closes a leaf and gives its place to its sibling; closing
  the only window raises `SplitError`.
- `set_frame`, `steal_frame` and `get_frame` manage the frame of a leaf;
  `first_window`, `second_window`, `parent_window`, `root_window`,
  `first_frame_window` and `is_root` walk the tree;
  `find_window_by_frame(frame)` finds the leaf that shows a frame.
- `process(times, key)` takes Vim-style window keys: `ctrl_value("w")`
  for the next window, `i`/`k`/`j`/`l` for up, down, left and right, and
  `-`/`+` to shrink or grow the current window by 20 units per step. It
  returns the window it made active, if any. `get_neighbor`, `get_next`,
  `smaller`, `bigger` and `set_as_root_active` do the same things
  directly; the root window's `active` member holds the active leaf, and
  a split's `sizes` member holds the sizes of its two panes.

## What this package does not do

It draws nothing and has no command to start: there is no viewer window,
web view or key handling loop, only the models behind them. It has no
readers for PDF, DjVu or office documents, and it keeps no configuration,
session or notes.