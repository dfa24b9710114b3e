#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# tests/unit/test_renderer_blocks.py
"""Unit tests for block-level rendering.

Tests cover:
- Paragraphs, subtitles and blank-line markers
- Section headings and the heading level ceiling
- Epigraphs, citations and poems (plain and quoted)
- Generic fallback for unknown block tags

"""

import io

import pytest
from utils import element, render_block_to_string

from fb2md.options import Fb2MarkdownOptions
from fb2md.renderer import Fb2MarkdownRenderer


@pytest.fixture
def renderer() -> Fb2MarkdownRenderer:
    return Fb2MarkdownRenderer()


def _heading_levels(markdown: str) -> list[int]:
    levels = []
    for line in markdown.splitlines():
        if line.startswith("#"):
            levels.append(len(line) - len(line.lstrip("#")))
    return levels


@pytest.mark.unit
class TestParagraphs:
    """Tests for paragraph-like blocks."""

    def test_paragraph_with_emphasis(self, renderer):
        result = render_block_to_string(renderer, "<p>Hello <emphasis>world</emphasis>!</p>")
        assert result == "Hello *world*!\n\n"

    def test_subtitle_is_bold(self, renderer):
        result = render_block_to_string(renderer, "<subtitle>Part <emphasis>two</emphasis></subtitle>")
        assert result == "**Part *two***\n\n"

    def test_empty_line_is_newline(self, renderer):
        assert render_block_to_string(renderer, "<empty-line/>") == "\n"

    def test_unknown_block_tag_renders_children_as_blocks(self, renderer):
        result = render_block_to_string(renderer, "<section><foo><p>kept</p></foo></section>")
        assert result == "kept\n\n"


@pytest.mark.unit
class TestSections:
    """Tests for section headings and nesting depth."""

    def test_body_title_is_level_two_with_leading_blank_line(self, renderer):
        sink = io.StringIO()
        renderer.render_body(element("<body><title><p>The Book</p></title><p>Text</p></body>"), sink)
        assert sink.getvalue() == "\n## The Book\n\nText\n\n"

    def test_multi_paragraph_title_is_one_line(self, renderer):
        result = render_block_to_string(renderer, "<section><title><p>Chapter 1</p>\n  <p>The Start</p></title></section>")
        assert result == "## Chapter 1 The Start\n\n"

    def test_heading_levels_clamp_at_six(self, renderer):
        nested = "".join(f"<section><title><p>Level {i}</p></title>" for i in range(8)) + "</section>" * 8
        sink = io.StringIO()
        renderer.render_body(element(f"<body>{nested}</body>"), sink)
        assert _heading_levels(sink.getvalue()) == [2, 3, 4, 5, 6, 6, 6, 6]

    def test_depth_does_not_leak_between_siblings(self, renderer):
        body = (
            "<body>"
            "<section><title><p>A</p></title><section><title><p>A.1</p></title></section></section>"
            "<section><title><p>B</p></title><section><title><p>B.1</p></title></section></section>"
            "</body>"
        )
        sink = io.StringIO()
        renderer.render_body(element(body), sink)
        assert _heading_levels(sink.getvalue()) == [2, 3, 2, 3]

    def test_custom_heading_ceiling(self):
        renderer = Fb2MarkdownRenderer(Fb2MarkdownOptions(max_heading_level=3))
        nested = "".join(f"<section><title><p>L{i}</p></title>" for i in range(4)) + "</section>" * 4
        sink = io.StringIO()
        renderer.render_body(element(f"<body>{nested}</body>"), sink)
        assert _heading_levels(sink.getvalue()) == [2, 3, 3, 3]

    def test_epigraph_and_annotation_precede_content(self, renderer):
        section = (
            "<section><title><p>T</p></title><p>Body</p>"
            "<epigraph><p>Motto</p></epigraph>"
            "<annotation><p>Summary</p></annotation></section>"
        )
        assert render_block_to_string(renderer, section) == "## T\n\n> Motto\n\nSummary\n\nBody\n\n"

    def test_section_without_title(self, renderer):
        assert render_block_to_string(renderer, "<section><p>Only text</p></section>") == "Only text\n\n"


@pytest.mark.unit
class TestQuotations:
    """Tests for epigraphs and citations."""

    def test_epigraph_with_author(self, renderer):
        result = render_block_to_string(renderer, "<epigraph><p>To be.</p><text-author>Hamlet</text-author></epigraph>")
        assert result == "> To be.\n>\n> — Hamlet\n\n"

    def test_epigraph_empty_line_is_bare_marker(self, renderer):
        result = render_block_to_string(renderer, "<epigraph><p>a</p><empty-line/><p>b</p></epigraph>")
        assert result == "> a\n>\n> b\n\n"

    def test_epigraph_with_nested_cite(self, renderer):
        result = render_block_to_string(
            renderer, "<epigraph><cite><p>Inner</p><text-author>X</text-author></cite></epigraph>"
        )
        assert result == "> Inner\n>\n> — X\n\n"

    def test_epigraph_with_poem_is_continuous_quote(self, renderer):
        result = render_block_to_string(
            renderer,
            "<epigraph><poem><title><p>Song</p></title><stanza><v>one</v><v>two</v></stanza>"
            "<text-author>Bard</text-author></poem></epigraph>",
        )
        assert result == "> **Song**\n>\n> one\n> two\n>\n> *— Bard*\n\n"

    def test_cite_paragraphs_and_author(self, renderer):
        result = render_block_to_string(renderer, "<cite><p>Quote</p><text-author>Someone</text-author></cite>")
        assert result == "> Quote\n>\n>\n> — Someone\n\n"

    def test_cite_subtitle_and_empty_line(self, renderer):
        result = render_block_to_string(renderer, "<cite><subtitle>Head</subtitle><empty-line/></cite>")
        assert result == "> **Head**\n>\n>\n\n"

    def test_cite_with_table_renders_plain_table(self, renderer):
        result = render_block_to_string(renderer, "<cite><table><tr><th>A</th></tr></table></cite>")
        assert result == "| A | \n| --- |\n\n\n"


@pytest.mark.unit
class TestPoems:
    """Tests for poem rendering."""

    def test_poem_with_title_author_and_date(self, renderer):
        poem = (
            "<poem><title><p>Ode</p></title>"
            "<stanza><v>first line</v><v>second line</v></stanza>"
            "<text-author>Poet</text-author><date>1820</date></poem>"
        )
        assert render_block_to_string(renderer, poem) == (
            "**Ode**\n\nfirst line  \nsecond line\n\n*— Poet*\n\n*1820*\n\n"
        )

    def test_each_stanza_is_separated(self, renderer):
        poem = "<poem><stanza><v>a</v></stanza><stanza><v>b</v><v>c</v></stanza></poem>"
        assert render_block_to_string(renderer, poem) == "a\n\nb  \nc\n\n"

    def test_stanza_title_and_subtitle(self, renderer):
        poem = "<poem><stanza><title><p>I</p></title><subtitle>sub</subtitle><v>x</v></stanza></poem>"
        assert render_block_to_string(renderer, poem) == "**I**\n**sub**\nx\n\n"

    def test_poem_epigraph(self, renderer):
        poem = "<poem><epigraph><p>motto</p></epigraph><stanza><v>x</v></stanza></poem>"
        assert render_block_to_string(renderer, poem) == "> motto\n\nx\n\n"

    def test_verse_keeps_inline_markup(self, renderer):
        poem = "<poem><stanza><v>the <emphasis>sea</emphasis></v></stanza></poem>"
        assert render_block_to_string(renderer, poem) == "the *sea*\n\n"
