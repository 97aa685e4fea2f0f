[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "apvlv"
version = "0.7.0"
description = "Document model and split-window core for a Vim-like viewer of HTML, text, image, EPUB and FB2 documents"
requires-python = ">=3.10"
dependencies = []
keywords = ["viewer", "epub", "fb2", "html", "vim", "document", "windows"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Graphics :: Viewers",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["apvlv"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py310"
