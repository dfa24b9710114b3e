"""Test utilities for the fb2md test suite.

This module provides helpers for building FB2 documents and element
fragments inline, so tests can state their input next to the expected
Markdown.
"""

from __future__ import annotations

import base64
import io

import defusedxml.ElementTree as ET

FB2_NAMESPACES = 'xmlns="http://www.gribuser.ru/xml/fictionbook/2.0" xmlns:l="http://www.w3.org/1999/xlink"'

# Base64 encoded 1x1 pixel PNG for testing
MINIMAL_PNG_B64 = "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAQAAAC1HAwCAAAAC0lEQVR42mP8/w8AAn8B9FpQHLwAAAAASUVORK5CYII="
MINIMAL_PNG_BYTES = base64.b64decode(MINIMAL_PNG_B64)


def build_fb2(
    body: str = "",
    notes: str = "",
    binaries: str = "",
    description: str = "",
    encoding: str = "utf-8",
) -> str:
    """Assemble a complete FB2 document from its parts.

    ``notes`` is the inner XML of a ``<body name="notes">``; it is omitted
    when empty.
    """
    notes_body = f'<body name="notes">{notes}</body>' if notes else ""
    return (
        f'<?xml version="1.0" encoding="{encoding}"?>\n'
        f"<FictionBook {FB2_NAMESPACES}>"
        f"{description}<body>{body}</body>{notes_body}{binaries}"
        "</FictionBook>"
    )


def parse_root(document: str) -> ET.Element:
    """Parse a UTF-8 FB2 document string into its root element."""
    return ET.fromstring(document.encode("utf-8"))


def element(fragment: str) -> ET.Element:
    """Parse an XML fragment (no namespace needed) into an element."""
    return ET.fromstring(fragment)


def render_block_to_string(renderer, fragment: str, depth: int = 0) -> str:
    """Render one block fragment with ``renderer`` and return the Markdown."""
    sink = io.StringIO()
    renderer.render_block(element(fragment), sink, depth)
    return sink.getvalue()


def binary(binary_id: str, payload: str = MINIMAL_PNG_B64, content_type: str = "image/png") -> str:
    """Return a ``<binary>`` element string."""
    return f'<binary id="{binary_id}" content-type="{content_type}">{payload}</binary>'
