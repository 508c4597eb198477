"""
CSV codec for calico.

Writes a sequence of rows as CSV text and reads CSV text back into rows.

Row shapes accepted by the writer:
    - mappings   -> header row (union of keys) + one line per mapping
    - primitives -> one field per line, no header
    - sequences  -> one line per sequence, no header

Parsing Notes:
    - Hand-written character state machine (Unquoted / InQuotes)
    - Quoted fields may contain the delimiter, quotes ("") and line breaks
    - Every parsed value is a string; type coercion is the caller's job
    - Ragged rows are padded with "" (surplus fields dropped with a warning)
      unless CSVOptions.strict is set
"""

import logging
import warnings
from typing import Any, Dict, List, Optional, Sequence, Tuple

from calico.errors import InvalidArgumentError, ParseError, TypeMismatchError
from calico.guard import detect_circular_reference
from calico.model import CSVOptions, ValueKind, cell_text, kind_of

logger = logging.getLogger(__name__)

_ROW_SHAPES = {
    ValueKind.MAPPING: "mapping",
    ValueKind.SEQUENCE: "sequence",
}


def _check_delimiter(delimiter: str) -> None:
    if not isinstance(delimiter, str) or len(delimiter) != 1:
        raise InvalidArgumentError(f"CSV delimiter must be a single character, got {delimiter!r}")
    if delimiter in ('"', "\n", "\r"):
        raise InvalidArgumentError(f"CSV delimiter cannot be {delimiter!r}")


def _row_shape(row: Any) -> str:
    return _ROW_SHAPES.get(kind_of(row), "primitive")


def _escape_field(value: Any, delimiter: str, quote_all: bool) -> str:
    """Render one field, quoting it when needed."""
    if value is None:
        return ""
    text = cell_text(value)
    if (
        quote_all
        or delimiter in text
        or '"' in text
        or "\n" in text
        or "\r" in text
    ):
        return '"' + text.replace('"', '""') + '"'
    return text


def _header_union(rows: Sequence[Dict[str, Any]]) -> List[str]:
    """All keys across rows, in first-seen order."""
    seen: Dict[str, None] = {}
    for row in rows:
        for key in row:
            seen.setdefault(key, None)
    return list(seen)


def serialize_csv(rows: Sequence[Any], options: Optional[CSVOptions] = None) -> str:
    """
    Serialize rows to CSV text.

    Args:
        rows: Sequence of uniformly shaped rows
        options: CSVOptions (defaults: headers, ",", quote all)

    Returns:
        CSV text, lines joined by "\\n", no trailing newline

    Raises:
        TypeMismatchError: If rows is not a sequence or row shapes are mixed
        InvalidArgumentError: If the delimiter is unusable
        CircularReferenceError: If a row contains itself
    """
    opts = options or CSVOptions()
    if kind_of(rows) != ValueKind.SEQUENCE:
        raise TypeMismatchError(
            f"CSV export requires a sequence of rows, received {type(rows).__name__}"
        )
    _check_delimiter(opts.delimiter)

    if len(rows) == 0:
        return ""

    shape = _row_shape(rows[0])
    for index, row in enumerate(rows):
        if _row_shape(row) != shape:
            raise TypeMismatchError(
                f"CSV data must be uniformly {shape} rows, row {index} is {_row_shape(row)} (mixed types)"
            )

    detect_circular_reference(rows)

    delimiter = opts.delimiter

    def join(values: Sequence[Any]) -> str:
        fields = [_escape_field(v, delimiter, opts.quote_all_strings) for v in values]
        # a lone empty field would be an empty line, which the reader skips at end of input
        if len(fields) == 1 and not fields[0]:
            return '""'
        return delimiter.join(fields)

    if shape == "primitive":
        lines = [join([item]) for item in rows]
    elif shape == "sequence":
        lines = [join(row) for row in rows]
    else:
        headers = _header_union(rows)
        lines = []
        if opts.include_headers:
            lines.append(join([str(h) for h in headers]))
        for row in rows:
            lines.append(join([row.get(h) for h in headers]))

    logger.debug("Serialized %d %s rows to CSV", len(rows), shape)
    return "\n".join(lines)


def _split_records(text: str, delimiter: str, strict: bool) -> List[Tuple[int, List[str]]]:
    """
    Split CSV text into records of raw string fields.

    Returns:
        List of (1-based starting line, fields) tuples
    """
    records: List[Tuple[int, List[str]]] = []
    row: List[str] = []
    buf: List[str] = []
    in_quotes = False
    quoted = False
    line = 1
    row_line = 1
    quote_line = 1

    i = 0
    n = len(text)
    while i < n:
        ch = text[i]
        if in_quotes:
            if ch == '"':
                if i + 1 < n and text[i + 1] == '"':
                    buf.append('"')
                    i += 1
                else:
                    in_quotes = False
            else:
                if ch == "\n":
                    line += 1
                buf.append(ch)
        elif ch == '"':
            in_quotes = True
            quoted = True
            quote_line = line
        elif ch == delimiter:
            row.append("".join(buf))
            buf = []
            quoted = False
        elif ch == "\n" or ch == "\r":
            row.append("".join(buf))
            records.append((row_line, row))
            row = []
            buf = []
            quoted = False
            if ch == "\r" and i + 1 < n and text[i + 1] == "\n":
                i += 1
            line += 1
            row_line = line
        else:
            buf.append(ch)
        i += 1

    if in_quotes and strict:
        raise ParseError(f"Unterminated quoted field starting at line {quote_line}", line=quote_line)

    if buf or row or quoted:
        row.append("".join(buf))
        records.append((row_line, row))
    return records


def deserialize_csv(text: str, options: Optional[CSVOptions] = None) -> List[Any]:
    """
    Parse CSV text.

    Args:
        text: CSV content
        options: CSVOptions; include_headers=False returns lists of strings

    Returns:
        List of dicts keyed by the header row, or list of string lists

    Raises:
        TypeMismatchError: If text is not a str
        ParseError: In strict mode, on ragged rows or unterminated quotes
    """
    opts = options or CSVOptions()
    if not isinstance(text, str):
        raise TypeMismatchError(f"CSV input must be str, received {type(text).__name__}")
    _check_delimiter(opts.delimiter)

    if not text.strip():
        return []

    records = _split_records(text, opts.delimiter, opts.strict)
    if not records:
        return []

    if not opts.include_headers:
        return [fields for _, fields in records]

    headers = records[0][1]
    expected = len(headers)
    result: List[Dict[str, str]] = []
    for line, fields in records[1:]:
        actual = len(fields)
        if actual != expected:
            if opts.strict:
                raise ParseError(
                    f"CSV line {line} has mismatched columns. Expected {expected}, got {actual}",
                    line=line,
                )
            if actual > expected:
                warnings.warn(
                    f"CSV line {line} has {actual} fields but the header has {expected}; "
                    f"extra fields dropped",
                    UserWarning,
                    stacklevel=2,
                )
            else:
                logger.debug("CSV line %d padded from %d to %d fields", line, actual, expected)
        record: Dict[str, str] = {}
        for index, header in enumerate(headers):
            record[header] = fields[index] if index < actual else ""
        result.append(record)

    logger.debug("Parsed %d CSV records with %d columns", len(result), expected)
    return result


__all__ = [
    "serialize_csv",
    "deserialize_csv",
]
