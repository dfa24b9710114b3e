#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/fb2md/xml_utils.py
"""Namespace-agnostic access to a parsed FictionBook tree.

FB2 documents put their elements in the FictionBook namespace and their
links in the XLink namespace under arbitrary prefixes (``l:href``,
``xlink:href``). Everything here matches tags and attributes by local name so
the rest of the converter never deals with Clark notation.
"""

from __future__ import annotations

import logging
import re
from typing import Iterator, Optional

import defusedxml.ElementTree as ET
from defusedxml import DefusedXmlException

from fb2md.constants import FB2_ROOT_TAG
from fb2md.exceptions import ParsingError

logger = logging.getLogger(__name__)

_WHITESPACE_PATTERN = re.compile(r"\s+")


def parse_fb2_root(xml_bytes: bytes) -> ET.Element:
    """Parse UTF-8 FB2 bytes and return the ``FictionBook`` root element.

    Raises
    ------
    ParsingError
        If the XML is malformed, declares entities or external references
        rejected by defusedxml, or the root element is not ``FictionBook``.

    """
    try:
        root = ET.fromstring(xml_bytes)
    except ET.ParseError as exc:
        raise ParsingError(
            f"Failed to parse FB2 file: {exc}",
            parsing_stage="xml_parsing",
            original_error=exc,
        ) from exc
    except DefusedXmlException as exc:
        raise ParsingError(
            f"Rejected unsafe FB2 markup: {exc!r}",
            parsing_stage="xml_parsing",
            original_error=exc,
        ) from exc
    if local_name(root.tag) != FB2_ROOT_TAG:
        raise ParsingError(
            f"Invalid FB2 file: {FB2_ROOT_TAG} element not found (root is {local_name(root.tag)!r})",
            parsing_stage="root_validation",
        )
    return root


def local_name(tag: str) -> str:
    """Strip the ``{namespace}`` part of a tag or attribute name."""
    if "}" in tag:
        return tag.split("}", 1)[1]
    return tag


def find_child(element: ET.Element, name: str) -> Optional[ET.Element]:
    """Return the first direct child with the given local name."""
    for child in element:
        if local_name(child.tag) == name:
            return child
    return None


def iter_children(element: ET.Element, name: str) -> Iterator[ET.Element]:
    """Yield direct children with the given local name, in document order."""
    for child in element:
        if local_name(child.tag) == name:
            yield child


def get_attr(element: ET.Element, name: str, default: str = "") -> str:
    """Look up an attribute by local name, ignoring its namespace prefix."""
    value = element.attrib.get(name)
    if value is not None:
        return value
    for key, value in element.attrib.items():
        if local_name(key) == name:
            return value
    return default


def get_href(element: ET.Element) -> str:
    """Return the link target of an ``<a>`` or ``<image>`` element."""
    return get_attr(element, "href")


def extract_text(element: ET.Element) -> str:
    """Flatten a subtree to plain text.

    The element's own text is followed, for each child, by the child's
    flattened text and then its tail. Surrounding whitespace is stripped at
    every level, so markup-only indentation between block children does not
    leak into the result.

    Examples
    --------
    >>> extract_text(ET.fromstring("<p>Hello <emphasis>big</emphasis> world</p>"))
    'Hello big world'

    """
    parts: list[str] = []
    if element.text:
        parts.append(element.text)
    for child in element:
        parts.append(extract_text(child))
        if child.tail:
            parts.append(child.tail)
    return "".join(parts).strip()


def normalize_whitespace(text: str) -> str:
    """Collapse whitespace runs to single spaces and strip the ends."""
    return _WHITESPACE_PATTERN.sub(" ", text or "").strip()


def extract_line(element: ET.Element) -> str:
    """Flatten a subtree to a single line of text (titles, metadata)."""
    return normalize_whitespace(extract_text(element))


__all__ = [
    "parse_fb2_root",
    "local_name",
    "find_child",
    "iter_children",
    "get_attr",
    "get_href",
    "extract_text",
    "extract_line",
    "normalize_whitespace",
]
