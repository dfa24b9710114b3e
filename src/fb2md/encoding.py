#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/fb2md/encoding.py
"""Character encoding normalization for FB2 input.

FictionBook files produced by older tools are frequently stored in a
Cyrillic single-byte encoding named in the XML declaration. Before the XML
parser sees the document, the bytes are re-expressed as UTF-8 and the
declaration is rewritten to say so, so the parser never tries to decode a
second time.
"""

from __future__ import annotations

import logging
import re

from fb2md.constants import SUPPORTED_SOURCE_ENCODINGS, UTF8_ENCODING_NAMES
from fb2md.exceptions import UnsupportedEncodingError

logger = logging.getLogger(__name__)

_XML_ENCODING_PATTERN = re.compile(rb"""<\?xml[^?]*encoding=["']([^"']+)["']""", re.IGNORECASE)
_XML_ENCODING_TEXT_PATTERN = re.compile(r"""(<\?xml[^?]*encoding=["'])([^"']+)(["'])""", re.IGNORECASE)


def detect_declared_encoding(data: bytes) -> str | None:
    """Return the lower-cased encoding named in the XML declaration.

    Parameters
    ----------
    data : bytes
        Raw document bytes

    Returns
    -------
    str | None
        Declared encoding name, or None when the document has no
        declaration or the declaration names no encoding.

    Examples
    --------
    >>> detect_declared_encoding(b'<?xml version="1.0" encoding="Windows-1251"?><a/>')
    'windows-1251'
    >>> detect_declared_encoding(b"<a/>") is None
    True

    """
    match = _XML_ENCODING_PATTERN.search(data)
    if match is None:
        return None
    return match.group(1).decode("ascii", errors="replace").strip().lower()


def normalize_encoding(data: bytes) -> bytes:
    """Convert FB2 bytes to UTF-8 based on the declared XML encoding.

    Parameters
    ----------
    data : bytes
        Raw document bytes

    Returns
    -------
    bytes
        UTF-8 encoded document. Documents without a declaration, or already
        declared as UTF-8, are returned unchanged.

    Raises
    ------
    UnsupportedEncodingError
        If the declaration names an encoding outside the supported set.

    """
    declared = detect_declared_encoding(data)
    if declared is None or declared in UTF8_ENCODING_NAMES:
        return data

    codec = SUPPORTED_SOURCE_ENCODINGS.get(declared)
    if codec is None:
        raise UnsupportedEncodingError(declared)

    logger.debug("Transcoding FB2 document from %s to utf-8", declared)
    text = data.decode(codec, errors="replace")
    text = _XML_ENCODING_TEXT_PATTERN.sub(r"\g<1>utf-8\g<3>", text, count=1)
    return text.encode("utf-8")


__all__ = ["detect_declared_encoding", "normalize_encoding"]
