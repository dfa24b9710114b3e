#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/fb2md/renderer.py
"""Markdown rendering of a parsed FictionBook tree.

This module provides the Fb2MarkdownRenderer class, which walks the FB2
element tree directly and writes Markdown into a text sink. Block-level
tags (sections, paragraphs, poems, citations, epigraphs, tables, images)
and inline tags (emphasis, links, code spans, ...) are dispatched through
handler tables; unknown tags fall back to generic block or inline handling
so the text they wrap is never dropped.

Two pieces of state are not stored on the renderer:

- The output sink is passed into every call. :meth:`capture_inline` renders
  into a private buffer by passing a fresh ``StringIO`` down, so captures
  nest (a link label inside a table cell) without any save/restore.
- The section depth is passed as an argument. A section renders its
  children at ``depth + 1``, so depth can never leak between siblings.

The footnote table and the asset filename table are built before rendering
and only consulted here; the renderer appends to the footnote citation order
and nothing else.
"""

from __future__ import annotations

import io
import logging
from typing import IO, Callable, Optional

import defusedxml.ElementTree as ET

from fb2md.assets import asset_reference_path, sanitize_asset_filename
from fb2md.constants import (
    BODY_TITLE_LEVEL,
    DEFAULT_LINK_LABEL,
    DESCRIPTION_SEPARATOR,
    EM_DASH,
    MARKDOWN_HARD_BREAK,
    NOTE_LINK_TYPE,
)
from fb2md.footnotes import FootnoteTable, is_notes_body
from fb2md.options import Fb2MarkdownOptions
from fb2md.xml_utils import (
    extract_line,
    extract_text,
    find_child,
    get_attr,
    get_href,
    iter_children,
    local_name,
)

logger = logging.getLogger(__name__)

BlockHandler = Callable[["ET.Element", IO[str], int], None]
InlineHandler = Callable[["ET.Element", IO[str]], None]

_TABLE_CELL_TAGS = ("th", "td")


class Fb2MarkdownRenderer:
    """Render FB2 elements to Markdown.

    Parameters
    ----------
    options : Fb2MarkdownOptions or None, default = None
        Conversion options
    footnotes : FootnoteTable or None, default = None
        Notes collected from the notes bodies. References to ids outside the
        table render as ordinary links.
    asset_filenames : dict[str, str] or None, default = None
        Pre-assigned output filenames keyed by binary id

    Examples
    --------
        >>> import io
        >>> import defusedxml.ElementTree as ET
        >>> renderer = Fb2MarkdownRenderer()
        >>> sink = io.StringIO()
        >>> renderer.render_block(ET.fromstring("<p>Hello <emphasis>world</emphasis>!</p>"), sink)
        >>> sink.getvalue()
        'Hello *world*!\\n\\n'

    """

    def __init__(
        self,
        options: Fb2MarkdownOptions | None = None,
        footnotes: FootnoteTable | None = None,
        asset_filenames: dict[str, str] | None = None,
    ):
        """Initialize the renderer and its tag dispatch tables."""
        self.options = options or Fb2MarkdownOptions()
        self.footnotes = footnotes if footnotes is not None else FootnoteTable()
        self.asset_filenames = dict(asset_filenames or {})

        # Block tags understood everywhere block content is allowed
        self._block_handlers: dict[str, BlockHandler] = {
            "section": self._render_section,
            "p": self._render_paragraph,
            "subtitle": self._render_subtitle,
            "empty-line": self._render_empty_line,
            "epigraph": self._render_epigraph,
            "image": self._render_block_image,
            "poem": self._render_poem,
            "cite": self._render_cite,
            "table": self._render_table,
        }
        # Bodies and sections additionally turn titles into headings
        self._container_handlers: dict[str, BlockHandler] = {
            **self._block_handlers,
            "title": self._render_title,
        }
        self._inline_handlers: dict[str, InlineHandler] = {
            "emphasis": self._inline_wrapper("*"),
            "strong": self._inline_wrapper("**"),
            "strikethrough": self._inline_wrapper("~~"),
            "code": self._inline_wrapper("`"),
            "sub": self.render_inline,
            "sup": self.render_inline,
            "subscript": self.render_inline,
            "superscript": self.render_inline,
            "style": self.render_inline,
            "a": self._render_link,
            "image": self._render_inline_image,
            "empty-line": self._render_inline_break,
        }

    # ------------------------------------------------------------------
    # Document level
    # ------------------------------------------------------------------
    def render_to_string(self, root: ET.Element) -> str:
        """Render a whole ``FictionBook`` tree and return the Markdown."""
        sink = io.StringIO()
        self.render_document(root, sink)
        return sink.getvalue()

    def render_document(self, root: ET.Element, sink: IO[str]) -> None:
        """Render description, main bodies and the footnote appendix."""
        if self.options.include_description:
            description = find_child(root, "description")
            if description is not None:
                self.render_description(description, sink)

        for body in iter_children(root, "body"):
            if is_notes_body(body, self.options.notes_body_names):
                continue
            self.render_body(body, sink)

        sink.write(self.footnotes.render_appendix())

    def render_description(self, description: ET.Element, sink: IO[str]) -> None:
        """Render ``<description>/<title-info>`` as a Markdown preamble."""
        title_info = find_child(description, "title-info")
        if title_info is None:
            return

        book_title = find_child(title_info, "book-title")
        if book_title is not None:
            title_text = extract_line(book_title)
            if title_text:
                sink.write(f"# {title_text}\n\n")

        authors = [self._author_name(author) for author in iter_children(title_info, "author")]
        authors = [name for name in authors if name]
        if authors:
            sink.write(f"**Authors:** {', '.join(authors)}\n\n")

        genres = [extract_line(genre) for genre in iter_children(title_info, "genre")]
        genres = [genre for genre in genres if genre]
        if genres:
            sink.write(f"**Genres:** {', '.join(genres)}\n\n")

        for sequence in iter_children(title_info, "sequence"):
            name = get_attr(sequence, "name")
            if not name:
                continue
            number = get_attr(sequence, "number")
            sink.write(f"**Series:** {name}, #{number}\n\n" if number else f"**Series:** {name}\n\n")

        annotation = find_child(title_info, "annotation")
        if annotation is not None:
            sink.write("## Annotation\n\n")
            self.render_block_content(annotation, sink)
            sink.write("\n")

        date = find_child(title_info, "date")
        if date is not None:
            date_text = extract_line(date)
            if date_text:
                sink.write(f"**Date:** {date_text}\n\n")

        sink.write(DESCRIPTION_SEPARATOR)

    def _author_name(self, author: ET.Element) -> str:
        parts = [
            extract_line(part)
            for name in ("first-name", "middle-name", "last-name")
            if (part := find_child(author, name)) is not None
        ]
        parts = [part for part in parts if part]
        if not parts:
            nickname = find_child(author, "nickname")
            if nickname is not None:
                return extract_line(nickname)
        return " ".join(parts)

    def render_body(self, body: ET.Element, sink: IO[str]) -> None:
        """Render a main ``<body>`` at section depth 0."""
        for child in body:
            self._dispatch_container_child(child, sink, 0)

    # ------------------------------------------------------------------
    # Block dispatch
    # ------------------------------------------------------------------
    def render_block(self, element: ET.Element, sink: IO[str], depth: int = 0) -> None:
        """Render a single block element as it would appear inside a section."""
        self._dispatch_container_child(element, sink, depth)

    def render_block_content(self, element: ET.Element, sink: IO[str], depth: int = 0) -> None:
        """Render the children of a generic container as block content.

        Children that are not block tags are written as inline content.
        """
        for child in element:
            handler = self._block_handlers.get(local_name(child.tag))
            if handler is None:
                self.render_inline(child, sink)
            else:
                handler(child, sink, depth)

    def _dispatch_container_child(self, child: ET.Element, sink: IO[str], depth: int) -> None:
        handler = self._container_handlers.get(local_name(child.tag), self.render_block_content)
        handler(child, sink, depth)

    def heading_level(self, depth: int) -> int:
        """Return the Markdown heading level for a title at section ``depth``.

        Body titles (depth 0) and top-level section titles (depth 1) are both
        level 2; the level is capped at ``options.max_heading_level``.
        """
        return min(max(depth, BODY_TITLE_LEVEL - 1) + 1, self.options.max_heading_level)

    def _render_title(self, title: ET.Element, sink: IO[str], depth: int) -> None:
        text = extract_line(title)
        if not text:
            return
        if depth == 0:
            sink.write("\n")
        sink.write(f"{'#' * self.heading_level(depth)} {text}\n\n")

    def _render_section(self, section: ET.Element, sink: IO[str], depth: int) -> None:
        inner = depth + 1

        title = find_child(section, "title")
        if title is not None:
            self._render_title(title, sink, inner)

        for epigraph in iter_children(section, "epigraph"):
            self._render_epigraph(epigraph, sink, inner)

        annotation = find_child(section, "annotation")
        if annotation is not None:
            self.render_block_content(annotation, sink, inner)

        for child in section:
            if local_name(child.tag) in {"title", "epigraph", "annotation"}:
                continue
            self._dispatch_container_child(child, sink, inner)

    def _render_paragraph(self, paragraph: ET.Element, sink: IO[str], depth: int = 0) -> None:
        self.render_inline(paragraph, sink)
        sink.write("\n\n")

    def _render_subtitle(self, subtitle: ET.Element, sink: IO[str], depth: int = 0) -> None:
        sink.write("**")
        self.render_inline(subtitle, sink)
        sink.write("**\n\n")

    def _render_empty_line(self, element: ET.Element, sink: IO[str], depth: int = 0) -> None:
        sink.write("\n")

    # ------------------------------------------------------------------
    # Poetry
    # ------------------------------------------------------------------
    def _render_poem(self, poem: ET.Element, sink: IO[str], depth: int = 0) -> None:
        title = find_child(poem, "title")
        if title is not None:
            title_text = extract_line(title)
            if title_text:
                sink.write(f"**{title_text}**\n\n")

        for epigraph in iter_children(poem, "epigraph"):
            self._render_epigraph(epigraph, sink, depth)

        for child in poem:
            tag = local_name(child.tag)
            if tag == "stanza":
                self._render_stanza(child, sink)
                sink.write("\n")
            elif tag == "subtitle":
                self._render_subtitle(child, sink)

        for author in iter_children(poem, "text-author"):
            sink.write(f"*{EM_DASH} ")
            self.render_inline(author, sink)
            sink.write("*\n\n")

        date = find_child(poem, "date")
        if date is not None:
            date_text = extract_line(date)
            if date_text:
                sink.write(f"*{date_text}*\n\n")

    def _render_stanza(self, stanza: ET.Element, sink: IO[str]) -> None:
        title = find_child(stanza, "title")
        if title is not None:
            title_text = extract_line(title)
            if title_text:
                sink.write(f"**{title_text}**\n")

        subtitle = find_child(stanza, "subtitle")
        if subtitle is not None:
            sink.write("**")
            self.render_inline(subtitle, sink)
            sink.write("**\n")

        verses = list(iter_children(stanza, "v"))
        for index, verse in enumerate(verses):
            self.render_inline(verse, sink)
            sink.write(MARKDOWN_HARD_BREAK if index < len(verses) - 1 else "\n")

    # ------------------------------------------------------------------
    # Quotations
    # ------------------------------------------------------------------
    def _render_epigraph(self, epigraph: ET.Element, sink: IO[str], depth: int = 0) -> None:
        for child in epigraph:
            tag = local_name(child.tag)
            if tag == "p":
                self._write_quoted_line(child, sink)
            elif tag == "poem":
                self._render_quoted_poem(child, sink)
            elif tag == "cite":
                for part in child:
                    part_tag = local_name(part.tag)
                    if part_tag == "p":
                        self._write_quoted_line(part, sink)
                    elif part_tag == "text-author":
                        self._write_quoted_author(part, sink)
                    elif part_tag == "empty-line":
                        sink.write(">\n")
            elif tag == "text-author":
                self._write_quoted_author(child, sink)
            elif tag == "empty-line":
                sink.write(">\n")
        sink.write("\n")

    def _render_cite(self, cite: ET.Element, sink: IO[str], depth: int = 0) -> None:
        for child in cite:
            tag = local_name(child.tag)
            if tag == "p":
                self._write_quoted_line(child, sink)
                sink.write(">\n")
            elif tag == "poem":
                self._render_quoted_poem(child, sink)
            elif tag == "subtitle":
                sink.write("> **")
                self.render_inline(child, sink)
                sink.write("**\n>\n")
            elif tag == "empty-line":
                sink.write(">\n")
            elif tag == "table":
                self._render_table(child, sink)
            elif tag == "text-author":
                self._write_quoted_author(child, sink)
        sink.write("\n")

    def _render_quoted_poem(self, poem: ET.Element, sink: IO[str]) -> None:
        title = find_child(poem, "title")
        if title is not None:
            title_text = extract_line(title)
            if title_text:
                sink.write(f"> **{title_text}**\n>\n")

        for child in poem:
            tag = local_name(child.tag)
            if tag == "stanza":
                for verse in iter_children(child, "v"):
                    self._write_quoted_line(verse, sink)
                sink.write(">\n")
            elif tag == "subtitle":
                sink.write("> **")
                self.render_inline(child, sink)
                sink.write("**\n")

        for author in iter_children(poem, "text-author"):
            sink.write(f"> *{EM_DASH} ")
            self.render_inline(author, sink)
            sink.write("*\n")

    def _write_quoted_line(self, element: ET.Element, sink: IO[str]) -> None:
        sink.write("> ")
        self.render_inline(element, sink)
        sink.write("\n")

    def _write_quoted_author(self, author: ET.Element, sink: IO[str]) -> None:
        sink.write(f">\n> {EM_DASH} ")
        self.render_inline(author, sink)
        sink.write("\n")

    # ------------------------------------------------------------------
    # Tables
    # ------------------------------------------------------------------
    def render_table(self, table: ET.Element, sink: IO[str]) -> None:
        """Render ``<table>`` as a pipe table.

        The column count comes from the first row. A first row with ``<th>``
        cells becomes the header; otherwise an empty header row is
        synthesized and every row is rendered as data. Rows are not padded
        or truncated to the column count.
        """
        rows = list(iter_children(table, "tr"))
        if not rows:
            return

        first_row = rows[0]
        header_cells = list(iter_children(first_row, "th"))
        cells = header_cells or list(iter_children(first_row, "td")) or list(first_row)
        column_count = len(cells)
        if column_count == 0:
            return

        separator = "|" + " --- |" * column_count + "\n"
        if header_cells:
            self._render_table_row(first_row, sink)
            sink.write(separator)
            data_rows = rows[1:]
        else:
            sink.write("|" + "  |" * column_count + "\n")
            sink.write(separator)
            data_rows = rows

        for row in data_rows:
            self._render_table_row(row, sink)
        sink.write("\n")

    def _render_table(self, table: ET.Element, sink: IO[str], depth: int = 0) -> None:
        self.render_table(table, sink)

    def _render_table_row(self, row: ET.Element, sink: IO[str]) -> None:
        sink.write("| ")
        for cell in row:
            if local_name(cell.tag) in _TABLE_CELL_TAGS:
                sink.write(self.capture_inline(cell))
                sink.write(" | ")
        sink.write("\n")

    # ------------------------------------------------------------------
    # Images
    # ------------------------------------------------------------------
    def image_reference(self, image: ET.Element) -> str:
        """Return the Markdown image reference for an ``<image>`` element.

        Internal references (``#id``) point at the pre-assigned asset file
        when extraction is enabled and render as a placeholder otherwise.
        External references are used verbatim.
        """
        href = get_href(image)
        if not href.startswith("#"):
            return f"![Image]({href})"

        image_id = href[1:]
        if not self.options.extract_images:
            return f"![Image: {image_id}]"

        filename = self.asset_filenames.get(image_id)
        if not filename:
            logger.debug("Image reference to unknown binary: %s", image_id)
            filename = sanitize_asset_filename(image_id) or image_id
        return f"![{image_id}]({asset_reference_path(filename, self.options.images_dir)})"

    def _render_block_image(self, image: ET.Element, sink: IO[str], depth: int = 0) -> None:
        sink.write(self.image_reference(image))
        sink.write("\n\n")

    def _render_inline_image(self, image: ET.Element, sink: IO[str]) -> None:
        sink.write(self.image_reference(image))

    # ------------------------------------------------------------------
    # Inline content
    # ------------------------------------------------------------------
    def render_inline(self, element: ET.Element, sink: IO[str]) -> None:
        """Write an element's text and inline children as Markdown.

        Each child is dispatched on its tag and followed by its tail text.
        Unknown tags render their content without markup.
        """
        if element.text:
            sink.write(element.text)
        for child in element:
            handler = self._inline_handlers.get(local_name(child.tag), self.render_inline)
            handler(child, sink)
            if child.tail:
                sink.write(child.tail)

    def capture_inline(self, element: ET.Element) -> str:
        """Render an element's inline Markdown into a string.

        The element is rendered into a private buffer, leaving every other
        sink untouched.
        """
        buffer = io.StringIO()
        self.render_inline(element, buffer)
        return buffer.getvalue()

    def _inline_wrapper(self, marker: str) -> InlineHandler:
        def render(element: ET.Element, sink: IO[str]) -> None:
            sink.write(marker)
            self.render_inline(element, sink)
            sink.write(marker)

        return render

    def _render_inline_break(self, element: ET.Element, sink: IO[str]) -> None:
        sink.write("\n")

    def _render_link(self, link: ET.Element, sink: IO[str]) -> None:
        href = get_href(link)
        note_id = self._note_target(link, href)
        if note_id is not None:
            sink.write(self.footnotes.reference(note_id))
            return

        label = extract_text(link) or DEFAULT_LINK_LABEL
        sink.write(f"[{label}]({href})")

    def _note_target(self, link: ET.Element, href: str) -> Optional[str]:
        if get_attr(link, "type") != NOTE_LINK_TYPE:
            return None
        note_id = href[1:] if href.startswith("#") else href
        if note_id in self.footnotes:
            return note_id
        logger.debug("Note reference to unknown footnote %r rendered as a link", note_id)
        return None


__all__ = ["Fb2MarkdownRenderer"]
