#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/fb2md/footnotes.py
"""Footnote collection and first-reference ordering for FB2 notes bodies.

FB2 keeps footnote text in separate ``<body name="notes">`` containers and
cites it from the main text with ``<a type="note" l:href="#n1">``. Resolution
runs in two passes: the notes bodies are scanned up front into a
:class:`FootnoteTable`, then the renderer records each cited identifier the
first time it is seen. The appendix follows citation order and drops notes
that were never cited.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, Iterator

import defusedxml.ElementTree as ET

from fb2md.constants import DEFAULT_NOTES_BODY_NAMES, FOOTNOTE_APPENDIX_SEPARATOR
from fb2md.xml_utils import extract_text, get_attr, iter_children, local_name

logger = logging.getLogger(__name__)


def footnote_marker(note_id: str) -> str:
    """Return the Markdown footnote marker for ``note_id``."""
    return f"[^{note_id}]"


@dataclass
class FootnoteTable:
    """Resolved note bodies plus the order in which the text cites them.

    Every identifier in ``order`` has an entry in ``notes``; only
    :meth:`reference` appends to ``order`` and it refuses unknown ids.
    """

    notes: dict[str, str] = field(default_factory=dict)
    order: list[str] = field(default_factory=list)
    _seen: set[str] = field(default_factory=set, init=False, repr=False)

    def __contains__(self, note_id: object) -> bool:
        return note_id in self.notes

    def __len__(self) -> int:
        return len(self.notes)

    def reference(self, note_id: str) -> str:
        """Record a citation of ``note_id`` and return its marker.

        Raises
        ------
        KeyError
            If ``note_id`` was not collected from a notes body.

        """
        if note_id not in self.notes:
            raise KeyError(note_id)
        if note_id not in self._seen:
            self._seen.add(note_id)
            self.order.append(note_id)
        return footnote_marker(note_id)

    def iter_appendix(self) -> Iterator[tuple[str, str]]:
        """Yield ``(note_id, text)`` for every cited note in citation order."""
        for note_id in self.order:
            yield note_id, self.notes[note_id]

    def render_appendix(self) -> str:
        """Render the footnote definitions block, or ``""`` if nothing was cited."""
        if not self.order:
            return ""
        dropped = len(self.notes) - len(self.order)
        if dropped:
            logger.debug("Dropping %d uncited footnote(s) from the appendix", dropped)
        parts = [FOOTNOTE_APPENDIX_SEPARATOR]
        for note_id, text in self.iter_appendix():
            parts.append(f"{footnote_marker(note_id)}: {text}\n\n")
        return "".join(parts)


def is_notes_body(body: ET.Element, notes_body_names: Iterable[str] = DEFAULT_NOTES_BODY_NAMES) -> bool:
    """Return True when a ``<body>`` holds footnote definitions."""
    return get_attr(body, "name").lower() in set(notes_body_names)


def collect_footnotes(container: ET.Element, render_paragraph: Callable[[ET.Element], str]) -> dict[str, str]:
    """Collect note texts from a notes body.

    Sections without an ``id`` are grouping containers and are descended
    into. Sections with an ``id`` are notes: their titles (usually just the
    note number) are skipped, paragraphs are rendered with
    ``render_paragraph`` and any other child contributes its plain text.
    A ``<section>`` inside a note is not a note itself; only its own child
    sections are scanned. Notes that yield no text are left out.

    Parameters
    ----------
    container : Element
        A notes ``<body>`` or a grouping ``<section>`` inside one
    render_paragraph : callable
        Renders a ``<p>`` element to inline Markdown

    Returns
    -------
    dict[str, str]
        Mapping of note identifier to note text

    """
    notes: dict[str, str] = {}
    _collect_sections(container, render_paragraph, notes)
    logger.debug("Collected %d footnote(s)", len(notes))
    return notes


def _collect_sections(
    container: ET.Element,
    render_paragraph: Callable[[ET.Element], str],
    notes: dict[str, str],
) -> None:
    for section in iter_children(container, "section"):
        _collect_section(section, render_paragraph, notes)


def _collect_section(
    section: ET.Element,
    render_paragraph: Callable[[ET.Element], str],
    notes: dict[str, str],
) -> None:
    note_id = get_attr(section, "id")
    if not note_id:
        _collect_sections(section, render_paragraph, notes)
        return

    parts: list[str] = []
    for child in section:
        tag = local_name(child.tag)
        if tag == "title":
            continue
        if tag == "section":
            # Only the sections inside a nested section are candidates
            _collect_sections(child, render_paragraph, notes)
            continue
        text = render_paragraph(child).strip() if tag == "p" else extract_text(child)
        if text:
            parts.append(text)
    if parts:
        notes[note_id] = " ".join(parts)


__all__ = ["FootnoteTable", "collect_footnotes", "footnote_marker", "is_notes_body"]
