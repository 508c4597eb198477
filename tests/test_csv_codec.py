"""
Tests for the CSV codec.

Covers:
    - Header union over sparse records
    - Quoting (quote-all and conditional)
    - Mixed-row rejection and the empty-input case
    - The parser state machine: quotes, embedded delimiters/newlines, CRLF
    - Ragged rows (lenient default, strict option)
"""

import pytest

from calico.csv_codec import deserialize_csv, serialize_csv
from calico.errors import (
    CircularReferenceError,
    InvalidArgumentError,
    ParseError,
    TypeMismatchError,
)
from calico.model import CSVOptions

PLAIN = CSVOptions(quote_all_strings=False)


class TestSerializeCSV:
    """Test serialize_csv()."""

    def test_records_quote_all_by_default(self):
        """Header and values are all quoted by default."""
        result = serialize_csv([{"name": "John", "age": 30}])
        assert result == '"name","age"\n"John","30"'

    def test_multiple_records(self):
        """One line per record after the header."""
        data = [{"name": "John", "age": 30}, {"name": "Jane", "age": 28}]
        result = serialize_csv(data)
        assert result.split("\n") == ['"name","age"', '"John","30"', '"Jane","28"']

    def test_header_union_first_seen_order(self):
        """Sparse records share a header built from every key."""
        result = serialize_csv([{"a": 1}, {"b": 2}], PLAIN)
        assert result == "a,b\n1,\n,2"

    def test_header_union_keeps_first_seen_order_not_sorted(self):
        """Keys appear in the order they were first seen."""
        result = serialize_csv([{"z": 1, "a": 2}, {"m": 3, "z": 4}], PLAIN)
        assert result.split("\n")[0] == "z,a,m"

    def test_absent_and_null_render_empty(self):
        """None and missing keys are empty fields, never 'null'."""
        result = serialize_csv([{"a": None, "b": 1}, {"b": 2}])
        assert result == '"a","b"\n,"1"\n,"2"'
        assert "null" not in result

    def test_empty_list_is_empty_string(self):
        """No rows means no output at all, not even a header."""
        assert serialize_csv([]) == ""
        assert serialize_csv([], CSVOptions(include_headers=True)) == ""

    def test_without_headers(self):
        """include_headers=False drops the header line."""
        result = serialize_csv([{"a": 1, "b": 2}], CSVOptions(include_headers=False, quote_all_strings=False))
        assert result == "1,2"

    def test_custom_delimiter(self):
        """The delimiter separates header and value fields."""
        result = serialize_csv([{"name": "John", "age": 30}], CSVOptions(delimiter=";"))
        assert result == '"name";"age"\n"John";"30"'

    def test_conditional_quoting(self):
        """Without quote-all only fields that need it are quoted."""
        data = [
            {"v": "plain"},
            {"v": "John, Doe"},
            {"v": 'say "hi"'},
            {"v": "line1\nline2"},
        ]
        lines = serialize_csv(data, PLAIN)
        assert lines == 'v\nplain\n"John, Doe"\n"say ""hi"""\n"line1\nline2"'

    def test_delimiter_triggers_quoting(self):
        """A field containing the custom delimiter is quoted."""
        result = serialize_csv([{"v": "a;b"}], CSVOptions(delimiter=";", quote_all_strings=False))
        assert result == 'v\n"a;b"'

    def test_booleans_and_floats(self):
        """Booleans render lower-case, floats via repr."""
        result = serialize_csv([{"ok": True, "ratio": 0.5}], PLAIN)
        assert result == "ok,ratio\ntrue,0.5"

    def test_nested_values_render_as_json(self):
        """Nested containers become compact JSON inside one quoted field."""
        result = serialize_csv([{"tags": ["x", "y"]}], PLAIN)
        assert result == 'tags\n"[""x"",""y""]"'

    def test_primitive_rows(self):
        """A list of primitives is one field per line, an empty one written as ""."""
        result = serialize_csv(["a", None, 3, True], PLAIN)
        assert result == 'a\n""\n3\ntrue'

    def test_sequence_rows(self):
        """A list of lists writes one line per inner list."""
        result = serialize_csv([["a", "b"], ["1", "2"]], PLAIN)
        assert result == "a,b\n1,2"

    def test_mixed_rows_rejected(self):
        """Records mixed with primitives fail, naming the offending row."""
        with pytest.raises(TypeMismatchError, match="row 1"):
            serialize_csv([{"a": 1}, 2])

    def test_mixed_primitive_then_record_rejected(self):
        """Mixing is rejected whichever kind comes first."""
        with pytest.raises(TypeMismatchError, match="mixed"):
            serialize_csv([1, 2, {"a": 3}])

    def test_non_sequence_rejected(self):
        """A mapping is not a list of rows."""
        with pytest.raises(TypeMismatchError, match="requires a sequence"):
            serialize_csv({"a": 1})

    def test_bad_delimiter(self):
        """Delimiters must be a single non-quote character."""
        with pytest.raises(InvalidArgumentError):
            serialize_csv([{"a": 1}], CSVOptions(delimiter="::"))
        with pytest.raises(InvalidArgumentError):
            serialize_csv([{"a": 1}], CSVOptions(delimiter='"'))

    def test_circular_row(self):
        """A row containing itself is rejected with its path."""
        row = {"a": 1}
        row["self"] = row
        with pytest.raises(CircularReferenceError) as exc:
            serialize_csv([row])
        assert exc.value.path == "root[0].self"


class TestDeserializeCSV:
    """Test deserialize_csv()."""

    def test_records(self):
        """First row names the fields of every following row."""
        result = deserialize_csv("name,age\nJohn,30\nJane,28")
        assert result == [{"name": "John", "age": "30"}, {"name": "Jane", "age": "28"}]

    def test_values_are_strings(self):
        """No type inference is performed."""
        result = deserialize_csv("n,b,z\n1,true,")
        assert result == [{"n": "1", "b": "true", "z": ""}]

    def test_custom_delimiter(self):
        """Fields are split on the configured delimiter."""
        result = deserialize_csv("name;age\nJohn;30", CSVOptions(delimiter=";"))
        assert result == [{"name": "John", "age": "30"}]

    def test_quoted_delimiter(self):
        """Delimiters inside quotes are content."""
        result = deserialize_csv('name\n"John, Doe"')
        assert result[0]["name"] == "John, Doe"

    def test_embedded_newline(self):
        """Newlines inside quotes do not end the row."""
        result = deserialize_csv('name,bio\n"Doe","line1\nline2"\nRoe,x')
        assert result == [
            {"name": "Doe", "bio": "line1\nline2"},
            {"name": "Roe", "bio": "x"},
        ]

    def test_doubled_quotes(self):
        """A doubled quote inside quotes is a literal quote."""
        result = deserialize_csv('q\n"say ""hi"""')
        assert result == [{"q": 'say "hi"'}]

    def test_crlf_line_endings(self):
        """CRLF ends rows just like LF; a trailing newline adds no row."""
        result = deserialize_csv("a,b\r\n1,2\r\n")
        assert result == [{"a": "1", "b": "2"}]

    def test_blank_input(self):
        """Empty or whitespace-only input yields no rows."""
        assert deserialize_csv("") == []
        assert deserialize_csv("  \n \t ") == []

    def test_header_only(self):
        """A header without data rows yields no rows."""
        assert deserialize_csv("a,b,c") == []

    def test_without_headers(self):
        """include_headers=False returns raw string lists."""
        result = deserialize_csv("a,b\n1,2", CSVOptions(include_headers=False))
        assert result == [["a", "b"], ["1", "2"]]

    def test_trailing_empty_quoted_field_kept(self):
        """A last record holding only "" is still a record."""
        result = deserialize_csv('x\n""', CSVOptions(include_headers=False))
        assert result == [["x"], [""]]

    def test_trailing_delimiter(self):
        """A line ending in the delimiter has an empty last field."""
        assert deserialize_csv("a,b\n1,") == [{"a": "1", "b": ""}]

    def test_short_row_padded(self):
        """Missing trailing fields default to empty strings."""
        result = deserialize_csv("a,b,c\n1")
        assert result == [{"a": "1", "b": "", "c": ""}]

    def test_long_row_warns(self):
        """Surplus fields are dropped with a warning naming the line."""
        with pytest.warns(UserWarning, match="line 2"):
            result = deserialize_csv("a\n1,2")
        assert result == [{"a": "1"}]

    def test_strict_rejects_ragged_rows(self):
        """strict=True turns a field-count mismatch into a ParseError."""
        with pytest.raises(ParseError, match="mismatched columns") as exc:
            deserialize_csv("a,b\n1,2\n3", CSVOptions(strict=True))
        assert exc.value.line == 3

    def test_strict_line_counts_embedded_newlines(self):
        """Line numbers account for newlines inside quoted fields."""
        text = 'a,b\n"x\ny",1\n2'
        with pytest.raises(ParseError) as exc:
            deserialize_csv(text, CSVOptions(strict=True))
        assert exc.value.line == 4

    def test_unterminated_quote_lenient(self):
        """By default an unterminated quote runs to the end of input."""
        assert deserialize_csv('a\n"open') == [{"a": "open"}]

    def test_unterminated_quote_strict(self):
        """strict=True reports the line where the quote was opened."""
        with pytest.raises(ParseError, match="Unterminated") as exc:
            deserialize_csv('a\n"open\nmore', CSVOptions(strict=True))
        assert exc.value.line == 2

    def test_non_string_input(self):
        """Only text can be parsed."""
        with pytest.raises(TypeMismatchError, match="must be str"):
            deserialize_csv(123)


class TestCSVRoundTrip:
    """serialize -> deserialize keeps flat records (as strings)."""

    @pytest.mark.parametrize("quote_all", [True, False])
    def test_round_trip(self, quote_all):
        """Special characters survive in both quoting modes."""
        rows = [
            {"name": "Doe, John", "quote": 'He said "no"', "bio": "a\nb", "n": 1},
            {"name": "Roe", "quote": "", "bio": "plain", "n": 2.5},
        ]
        opts = CSVOptions(quote_all_strings=quote_all)
        back = deserialize_csv(serialize_csv(rows, opts), opts)
        assert back == [
            {"name": "Doe, John", "quote": 'He said "no"', "bio": "a\nb", "n": "1"},
            {"name": "Roe", "quote": "", "bio": "plain", "n": "2.5"},
        ]

    def test_single_column_trailing_empty_value(self):
        """A last record with only an empty value is not mistaken for a trailing newline."""
        rows = [{"a": "x"}, {"a": ""}]
        text = serialize_csv(rows, PLAIN)
        assert text == 'a\nx\n""'
        assert deserialize_csv(text, PLAIN) == rows

    def test_single_column_empty_values_keep_positions(self):
        """Empty and missing single-column values all come back as ""."""
        rows = [{"a": ""}, {"a": None}, {"a": "y"}, {}]
        back = deserialize_csv(serialize_csv(rows, PLAIN), PLAIN)
        assert back == [{"a": ""}, {"a": ""}, {"a": "y"}, {"a": ""}]

    def test_round_trip_without_headers(self):
        """Sequence rows survive a header-less round trip."""
        rows = [["a", "b,c"], ["1", '"q"']]
        opts = CSVOptions(include_headers=False)
        assert deserialize_csv(serialize_csv(rows, opts), opts) == rows
