#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Constants and default values for fb2md.

This module centralizes the FictionBook tag vocabulary, Markdown limits and
default configuration values used across the converter.
"""

from __future__ import annotations

# =============================================================================
# FictionBook vocabulary
# =============================================================================

FB2_ROOT_TAG = "FictionBook"

# Body ``name`` values marking note containers rather than primary content
DEFAULT_NOTES_BODY_NAMES: tuple[str, ...] = ("notes", "footnotes", "comments")

# Link ``type`` value marking a footnote reference
NOTE_LINK_TYPE = "note"

# =============================================================================
# Markdown output
# =============================================================================

MAX_HEADING_LEVEL = 6
BODY_TITLE_LEVEL = 2
MARKDOWN_HARD_BREAK = "  \n"
EM_DASH = "—"
FOOTNOTE_APPENDIX_SEPARATOR = "\n---\n\n"
DESCRIPTION_SEPARATOR = "---\n\n"
DEFAULT_LINK_LABEL = "Link"

# =============================================================================
# Embedded binary assets
# =============================================================================

DEFAULT_ASSET_CONTENT_TYPE = "image/jpeg"
DEFAULT_ASSET_BASENAME = "image"
DEFAULT_ASSET_EXTENSION = ".jpg"
IMAGES_DIR_SUFFIX = "_images"

# =============================================================================
# Character encodings
# =============================================================================

# Declared XML encoding name -> Python codec
SUPPORTED_SOURCE_ENCODINGS: dict[str, str] = {
    "windows-1251": "cp1251",
    "win-1251": "cp1251",
    "cp1251": "cp1251",
    "koi8-r": "koi8_r",
    "koi8r": "koi8_r",
    "koi8-u": "koi8_u",
    "koi8u": "koi8_u",
    "iso-8859-1": "latin_1",
    "latin1": "latin_1",
}
UTF8_ENCODING_NAMES = frozenset({"utf-8", "utf8"})

# =============================================================================
# File extensions and detection
# =============================================================================

FB2_EXTENSION = ".fb2"
ZIP_EXTENSION = ".zip"
EPUB_EXTENSION = ".epub"
ZIP_MAGIC = b"PK\x03\x04"

# =============================================================================
# CLI
# =============================================================================

ENV_VAR_PREFIX = "FB2MD_"
EXIT_SUCCESS = 0
EXIT_USAGE_ERROR = 1
EXIT_CONVERSION_ERROR = 2
EXIT_FILE_ERROR = 3
