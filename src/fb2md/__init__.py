#  Copyright (c) 2025 Tom Villani, Ph.D.
"""fb2md - convert FictionBook 2 ebooks to Markdown.

The output keeps the semantic structure of the book (section headings,
poetry, citations, tables, footnotes and images) in plain Markdown suited to
automated text processing.

Examples
--------
    >>> from fb2md import to_markdown
    >>> markdown = to_markdown("book.fb2")  # doctest: +SKIP

    >>> from fb2md import Fb2MarkdownOptions, convert_file
    >>> options = Fb2MarkdownOptions(extract_images=True)
    >>> result = convert_file("book.fb2", "book.md", options)  # doctest: +SKIP

"""

__version__ = "0.1.0"

from fb2md.converter import ConversionResult, Fb2Converter, convert_file, to_markdown  # noqa: E402
from fb2md.exceptions import (  # noqa: E402
    AssetDirectoryError,
    Fb2MdError,
    FileError,
    FormatError,
    OutputWriteError,
    ParsingError,
    UnsupportedEncodingError,
    ValidationError,
)
from fb2md.options import Fb2MarkdownOptions  # noqa: E402

__all__ = [
    "__version__",
    "AssetDirectoryError",
    "ConversionResult",
    "Fb2Converter",
    "Fb2MarkdownOptions",
    "Fb2MdError",
    "FileError",
    "FormatError",
    "OutputWriteError",
    "ParsingError",
    "UnsupportedEncodingError",
    "ValidationError",
    "convert_file",
    "to_markdown",
]
