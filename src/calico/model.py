"""
Core Value Model

Defines the in-memory representation shared by every calico codec.

A Value is one of:
    - Null      (None)
    - Bool      (bool)
    - Number    (int, float -- never bool)
    - String    (str)
    - Sequence  (list, tuple)
    - Mapping   (dict with string keys, insertion ordered)

Values are plain Python objects. They are borrowed from the caller for
serialization and built fresh by the parsers; nothing here keeps state
between calls.

ARCHITECTURAL RULE:
    Codecs never branch on isinstance() themselves.
    They call kind_of() and dispatch on ValueKind, so a new kind
    cannot be silently mishandled by one codec only.
"""

import json
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from calico.errors import InvalidArgumentError, TypeMismatchError


class ValueKind(Enum):
    """Tag of the Value variant."""
    NULL = "null"
    BOOL = "bool"
    NUMBER = "number"
    STRING = "string"
    SEQUENCE = "sequence"
    MAPPING = "mapping"


PRIMITIVE_KINDS = frozenset(
    {ValueKind.NULL, ValueKind.BOOL, ValueKind.NUMBER, ValueKind.STRING}
)
CONTAINER_KINDS = frozenset({ValueKind.SEQUENCE, ValueKind.MAPPING})


def kind_of(value: Any) -> ValueKind:
    """
    Classify a Python object as a Value kind.

    Args:
        value: Any object from a caller-owned tree

    Returns:
        The matching ValueKind

    Raises:
        TypeMismatchError: If the object is not representable as a Value
    """
    if value is None:
        return ValueKind.NULL
    # bool is a subclass of int, test it first
    if isinstance(value, bool):
        return ValueKind.BOOL
    if isinstance(value, (int, float)):
        return ValueKind.NUMBER
    if isinstance(value, str):
        return ValueKind.STRING
    if isinstance(value, (list, tuple)):
        return ValueKind.SEQUENCE
    if isinstance(value, dict):
        return ValueKind.MAPPING
    raise TypeMismatchError(f"Unsupported value type: {type(value).__name__}")


def container_kind(value: Any) -> Optional[ValueKind]:
    """SEQUENCE or MAPPING for containers, None for anything else (never raises)."""
    if isinstance(value, (list, tuple)):
        return ValueKind.SEQUENCE
    if isinstance(value, dict):
        return ValueKind.MAPPING
    return None


def is_container(value: Any) -> bool:
    return container_kind(value) is not None


def scalar_text(value: Any) -> str:
    """Plain text of a primitive, as written into CSV and Markdown cells."""
    kind = kind_of(value)
    if kind == ValueKind.NULL:
        return ""
    if kind == ValueKind.BOOL:
        return "true" if value else "false"
    if kind == ValueKind.NUMBER:
        return repr(value) if isinstance(value, float) else str(value)
    if kind == ValueKind.STRING:
        return value
    raise TypeMismatchError(f"Expected a primitive value, got {kind.value}")


def cell_text(value: Any) -> str:
    """Text of any value inside a single cell; containers become compact JSON."""
    if is_container(value):
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False)
    return scalar_text(value)


class ExportFormat(Enum):
    """Textual formats calico can write."""
    JSON = "json"
    CSV = "csv"
    YAML = "yaml"
    MARKDOWN = "md"

    @classmethod
    def from_name(cls, name: str) -> "ExportFormat":
        """
        Resolve a format name or file extension.

        Accepts the enum values plus the usual aliases
        ("yml", "markdown"), case-insensitively.
        """
        key = name.lower().lstrip(".")
        aliases = {"yml": "yaml", "markdown": "md"}
        key = aliases.get(key, key)
        for fmt in cls:
            if fmt.value == key:
                return fmt
        raise InvalidArgumentError(f"Unsupported format: {name}")


# Formats that have a parser. Markdown is write-only.
IMPORT_FORMATS = (ExportFormat.JSON, ExportFormat.CSV, ExportFormat.YAML)


@dataclass
class CSVOptions:
    """
    Options for the CSV codec.

    Properties:
        include_headers:
            Write a header row / treat the first row as header names
        delimiter:
            Single field separator character
        quote_all_strings:
            Quote every non-empty field. When False, only fields containing
            the delimiter, a quote or a line break are quoted.
        strict:
            Reject ragged rows and unterminated quotes when parsing
            instead of padding / accepting them
    """

    include_headers: bool = True
    delimiter: str = ","
    quote_all_strings: bool = True
    strict: bool = False


@dataclass
class MarkdownOptions:
    """
    Options for the Markdown renderer.

    Properties:
        title: Optional leading "# title" heading
        include_table_of_contents: Emit a TOC of top-level keys (mapping input only)
    """

    title: Optional[str] = None
    include_table_of_contents: bool = False


@dataclass
class ExportResult:
    """Text produced by DataExporter.export() plus bookkeeping."""

    data: str
    format: ExportFormat
    size: int = 0
    timestamp: datetime = field(default_factory=datetime.now)

    def __post_init__(self):
        if not self.size:
            self.size = len(self.data.encode("utf-8"))


__all__ = [
    "ValueKind",
    "PRIMITIVE_KINDS",
    "CONTAINER_KINDS",
    "kind_of",
    "container_kind",
    "is_container",
    "scalar_text",
    "cell_text",
    "ExportFormat",
    "IMPORT_FORMATS",
    "CSVOptions",
    "MarkdownOptions",
    "ExportResult",
]
