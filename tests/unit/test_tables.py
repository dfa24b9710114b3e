#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# tests/unit/test_tables.py
"""Unit tests for pipe table rendering."""

import io

import pytest
from utils import FB2_NAMESPACES, element

from fb2md.footnotes import FootnoteTable
from fb2md.renderer import Fb2MarkdownRenderer


def _render(fragment: str, renderer: Fb2MarkdownRenderer | None = None) -> str:
    renderer = renderer or Fb2MarkdownRenderer()
    sink = io.StringIO()
    renderer.render_table(element(fragment), sink)
    return sink.getvalue()


@pytest.mark.unit
class TestTables:
    """Tests for Fb2MarkdownRenderer.render_table."""

    def test_header_row(self):
        table = "<table><tr><th>Name</th><th>Value</th></tr><tr><td>a</td><td>1</td></tr></table>"
        assert _render(table) == "| Name | Value | \n| --- | --- |\n| a | 1 | \n\n"

    def test_missing_header_is_synthesized(self):
        table = "<table><tr><td>1</td><td>2</td></tr><tr><td>3</td><td>4</td></tr></table>"
        assert _render(table) == "|  |  |\n| --- | --- |\n| 1 | 2 | \n| 3 | 4 | \n\n"

    def test_empty_table_renders_nothing(self):
        assert _render("<table></table>") == ""

    def test_row_without_cells_renders_nothing(self):
        assert _render("<table><tr></tr></table>") == ""

    def test_uneven_rows_are_not_padded(self):
        table = "<table><tr><th>A</th><th>B</th></tr><tr><td>1</td></tr><tr><td>1</td><td>2</td><td>3</td></tr></table>"
        assert _render(table) == "| A | B | \n| --- | --- |\n| 1 | \n| 1 | 2 | 3 | \n\n"

    def test_cells_keep_inline_markup(self):
        table = "<table><tr><td><strong>bold</strong> and <code>c</code></td></tr></table>"
        assert _render(table) == "|  |\n| --- |\n| **bold** and `c` | \n\n"

    def test_mixed_header_and_data_cells(self):
        table = "<table><tr><th>Key</th><td>extra</td></tr></table>"
        assert _render(table) == "| Key | extra | \n| --- |\n\n"

    def test_footnote_in_cell_is_recorded(self):
        footnotes = FootnoteTable(notes={"n1": "Note."})
        renderer = Fb2MarkdownRenderer(footnotes=footnotes)
        table = f'<table {FB2_NAMESPACES}><tr><td>x<a l:href="#n1" type="note">1</a></td></tr></table>'
        assert _render(table, renderer) == "|  |\n| --- |\n| x[^n1] | \n\n"
        assert footnotes.order == ["n1"]

    def test_link_in_cell_does_not_leak_into_document(self):
        renderer = Fb2MarkdownRenderer()
        sink = io.StringIO()
        sink.write("start\n\n")
        renderer.render_table(
            element(f'<table {FB2_NAMESPACES}><tr><td><a l:href="https://x.y/">x</a></td></tr></table>'), sink
        )
        assert sink.getvalue() == "start\n\n|  |\n| --- |\n| [x](https://x.y/) | \n\n"
