"""
Tests for the Markdown renderer.

Covers tables, lists, mapping bullets, title and table of contents,
and writing to a file.
"""

import pytest

from calico.backends import save_markdown_file, serialize_markdown
from calico.errors import CircularReferenceError
from calico.model import MarkdownOptions


class TestTables:
    """Sequences of mappings render as tables."""

    def test_simple_table(self):
        """Header, separator and one row."""
        result = serialize_markdown([{"name": "John", "age": 30}])
        assert result == "| name | age |\n| --- | --- |\n| John | 30 |"

    def test_header_union_and_missing_cells(self):
        """Missing and null cells are empty."""
        result = serialize_markdown([{"a": 1}, {"b": None}])
        assert result.split("\n") == [
            "| a | b |",
            "| --- | --- |",
            "| 1 |  |",
            "|  |  |",
        ]

    def test_cells_escaped(self):
        """Pipes and line breaks cannot break the table layout."""
        result = serialize_markdown([{"v": "a|b\nc"}])
        assert result.split("\n")[2] == "| a\\|b<br>c |"

    def test_nested_cell_as_json(self):
        """Nested values are compact JSON in a cell."""
        result = serialize_markdown([{"tags": ["x", "y"], "ok": True}])
        assert result.split("\n")[2] == '| ["x","y"] | true |'


class TestLists:
    """Other values render as bullets or plain text."""

    def test_primitive_list(self):
        """Primitives become bullets."""
        assert serialize_markdown(["a", 1, None, False]) == "- a\n- 1\n- \n- false"

    def test_multiline_items_stay_on_one_bullet(self):
        """Line breaks inside an item become <br> so the list is not split."""
        assert serialize_markdown(["a\nb", "c\r\nd", "e"]) == "- a<br>b\n- c<br>d\n- e"

    def test_mixed_list_is_not_a_table(self):
        """A list with any non-mapping is a bullet list."""
        assert serialize_markdown([{"a": 1}, 2]) == '- {"a":1}\n- 2'

    def test_empty_list(self):
        """An empty list renders nothing."""
        assert serialize_markdown([]) == ""

    def test_mapping(self):
        """Mapping values are written as compact JSON."""
        result = serialize_markdown({"name": "John", "tags": ["x"], "n": None})
        assert result == '- **name**: "John"\n- **tags**: ["x"]\n- **n**: null'

    def test_primitive(self):
        """A lone primitive is its text."""
        assert serialize_markdown("hello") == "hello"
        assert serialize_markdown(3.5) == "3.5"


class TestOptions:
    """Title and table of contents."""

    def test_title(self):
        """The title is followed by a blank line."""
        result = serialize_markdown({"name": "John"}, MarkdownOptions(title="My Data"))
        assert result == '# My Data\n\n- **name**: "John"'

    def test_table_of_contents(self):
        """TOC entries link to lower-cased keys."""
        opts = MarkdownOptions(include_table_of_contents=True)
        result = serialize_markdown({"Section1": 1, "Section2": 2}, opts)
        assert result.split("\n") == [
            "## Table of Contents",
            "- [Section1](#section1)",
            "- [Section2](#section2)",
            "",
            "- **Section1**: 1",
            "- **Section2**: 2",
        ]

    def test_toc_ignored_for_sequences(self):
        """Only mappings get a TOC."""
        opts = MarkdownOptions(title="T", include_table_of_contents=True)
        result = serialize_markdown(["a"], opts)
        assert "Table of Contents" not in result
        assert result == "# T\n\n- a"

    def test_circular_reference(self):
        """Cycles are rejected before rendering."""
        data = [{}]
        data[0]["loop"] = data
        with pytest.raises(CircularReferenceError):
            serialize_markdown(data)


class TestSaveFile:
    """Test save_markdown_file()."""

    def test_writes_utf8(self, tmp_path):
        """The file holds the same text as serialize_markdown()."""
        out = tmp_path / "report.md"
        save_markdown_file([{"name": "García"}], str(out), MarkdownOptions(title="Users"))
        assert out.read_text(encoding="utf-8") == (
            "# Users\n\n| name |\n| --- |\n| García |"
        )
