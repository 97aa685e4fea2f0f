"""Document readers (HTML, text, image, EPUB, FB2) and a split-window tree for a Vim-like viewer."""

__version__ = "0.7.0"
__all__ = ["document", "window", "epub", "fb2"]