"""
YAML codec for calico (block style only).

Supported subset:
    - mappings       key: value / key: + indented block
    - sequences      - item / - key: value (inline-compacted mapping) / - + block
    - scalars        null, true/false, numbers, plain and double-quoted strings
    - empty containers as [] and {}
    - blank lines and full-line # comments

Not supported: anchors, tags, flow collections, multi-document streams,
block scalars (| and >), single-quoted strings.

The writer quotes every string that the reader would otherwise coerce or
split, so serialize -> deserialize is lossless for finite values.
"""

import logging
import math
import re
from typing import Any, Dict, List, Optional, Tuple

from calico.errors import InvalidArgumentError, ParseError, TypeMismatchError
from calico.guard import detect_circular_reference
from calico.model import ValueKind, kind_of

logger = logging.getLogger(__name__)

_SPECIAL_CHARS = frozenset(':#[]{},"\'\n\t\r\\')
# Plain words a YAML reader may turn into booleans/null; always quoted on output.
_RESERVED_WORDS = frozenset({"true", "false", "null", "~", "yes", "no", "on", "off"})
_INDICATORS = frozenset("!&*|>%@`?-")
_NON_FINITE = {".inf": math.inf, "+.inf": math.inf, "-.inf": -math.inf, ".nan": math.nan}

_INT_RE = re.compile(r"[-+]?\d+")
_NUMBER_RE = re.compile(r"[-+]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][-+]?\d+)?")

_ESCAPES = {'"': '"', "\\": "\\", "n": "\n", "r": "\r", "t": "\t"}
_ESCAPE_OUT = {"\\": "\\\\", '"': '\\"', "\n": "\\n", "\r": "\\r", "\t": "\\t"}


# =========================================================================
# SERIALIZER
# =========================================================================


def _looks_like_number(text: str) -> bool:
    return _NUMBER_RE.fullmatch(text) is not None or text.lower() in _NON_FINITE


def _needs_quotes(text: str) -> bool:
    return (
        text == ""
        or text != text.strip()
        or text[0] in _INDICATORS
        or any(ch in _SPECIAL_CHARS for ch in text)
        or text.lower() in _RESERVED_WORDS
        or _looks_like_number(text)
    )


def _quote(text: str) -> str:
    return '"' + "".join(_ESCAPE_OUT.get(ch, ch) for ch in text) + '"'


def _format_string(text: str) -> str:
    return _quote(text) if _needs_quotes(text) else text


def _format_key(key: Any) -> str:
    text = str(key)
    return _quote(text) if _needs_quotes(text) else text


def _format_number(value: Any) -> str:
    if isinstance(value, float):
        if math.isnan(value):
            return ".nan"
        if math.isinf(value):
            return ".inf" if value > 0 else "-.inf"
        return repr(value)
    return str(value)


def _inline(value: Any) -> str:
    """Text of a value that fits on one line (primitive or empty container)."""
    kind = kind_of(value)
    if kind == ValueKind.NULL:
        return "null"
    if kind == ValueKind.BOOL:
        return "true" if value else "false"
    if kind == ValueKind.NUMBER:
        return _format_number(value)
    if kind == ValueKind.STRING:
        return _format_string(value)
    if kind == ValueKind.SEQUENCE:
        return "[]"
    return "{}"


def _is_block(value: Any) -> bool:
    """True for non-empty containers, which need their own lines."""
    return kind_of(value) in (ValueKind.SEQUENCE, ValueKind.MAPPING) and len(value) > 0


def _block_lines(value: Any, width: int, level: int) -> List[str]:
    """Lines of a non-empty container whose entries sit at `level`."""
    pad = " " * (width * level)
    lines: List[str] = []

    if kind_of(value) == ValueKind.MAPPING:
        for key, child in value.items():
            key_text = _format_key(key)
            if _is_block(child):
                lines.append(f"{pad}{key_text}:")
                lines.extend(_block_lines(child, width, level + 1))
            else:
                lines.append(f"{pad}{key_text}: {_inline(child)}")
        return lines

    for item in value:
        if not _is_block(item):
            lines.append(f"{pad}- {_inline(item)}")
        elif kind_of(item) == ValueKind.MAPPING:
            # inline-compacted mapping: first entry shares the dash line
            item_lines = _block_lines(item, width, level + 1)
            lines.append(f"{pad}- {item_lines[0].lstrip(' ')}")
            lines.extend(item_lines[1:])
        else:
            lines.append(f"{pad}-")
            lines.extend(_block_lines(item, width, level + 1))
    return lines


def serialize_yaml(value: Any, indent: int = 2) -> str:
    """
    Serialize a value to block-style YAML.

    Args:
        value: Value tree to write
        indent: Spaces per nesting level (positive int)

    Returns:
        YAML text without trailing newline

    Raises:
        InvalidArgumentError: If indent is not a positive integer
        CircularReferenceError: If the value contains itself
        TypeMismatchError: If the tree holds a non-Value object
    """
    if isinstance(indent, bool) or not isinstance(indent, int) or indent <= 0:
        raise InvalidArgumentError(f"YAML indentation must be positive integer, got {indent!r}")
    detect_circular_reference(value)

    if _is_block(value):
        return "\n".join(_block_lines(value, indent, 0))
    return _inline(value)


# =========================================================================
# PARSER
# =========================================================================


def _unescape(text: str) -> str:
    out: List[str] = []
    i = 0
    while i < len(text):
        ch = text[i]
        if ch == "\\" and i + 1 < len(text):
            nxt = text[i + 1]
            out.append(_ESCAPES.get(nxt, "\\" + nxt))
            i += 2
        else:
            out.append(ch)
            i += 1
    return "".join(out)


def _closing_quote(text: str) -> int:
    """Index of the quote closing the string opened at text[0], or -1."""
    i = 1
    while i < len(text):
        if text[i] == "\\":
            i += 2
            continue
        if text[i] == '"':
            return i
        i += 1
    return -1


def _split_entry(content: str) -> Optional[Tuple[str, str]]:
    """
    Split "key: value" on the key colon.

    Returns:
        (key, value text) or None when the content is not a mapping entry
    """
    if content.startswith('"'):
        end = _closing_quote(content)
        if end < 0:
            return None
        rest = content[end + 1:].lstrip()
        if not rest.startswith(":"):
            return None
        return _unescape(content[1:end]), rest[1:].strip()

    idx = content.find(":")
    if idx < 0:
        return None
    return content[:idx].strip(), content[idx + 1:].strip()


def _is_item(content: str) -> bool:
    return content == "-" or content.startswith("- ")


def coerce_scalar(token: str) -> Any:
    """
    Convert a bare scalar token to a Python value.

    Examples:
        "true" -> True, "null" -> None, "30" -> 30, "1.5" -> 1.5,
        '"30"' -> "30", "[]" -> [], "John" -> "John"
    """
    if token == "true":
        return True
    if token == "false":
        return False
    if token == "null":
        return None
    if token == "[]":
        return []
    if token == "{}":
        return {}
    if token in _NON_FINITE:
        return _NON_FINITE[token]
    if _INT_RE.fullmatch(token):
        return int(token)
    if _NUMBER_RE.fullmatch(token):
        return float(token)
    if len(token) >= 2 and token.startswith('"') and token.endswith('"'):
        return _unescape(token[1:-1])
    return token


class _YAMLParser:
    """
    Recursive-descent parser over physical lines.

    One instance parses one document. `pos` is the shared line cursor;
    every parse_* method consumes the lines of the block it returns.
    """

    def __init__(self, text: str):
        self.lines = [line.rstrip("\r") for line in text.split("\n")]
        self.pos = 0

    # ---------------------------------------------------------------
    # cursor helpers
    # ---------------------------------------------------------------

    def _peek_indent(self) -> Optional[int]:
        """Skip blank/comment lines; indent of the current line or None at end."""
        while self.pos < len(self.lines):
            line = self.lines[self.pos]
            stripped = line.strip()
            if stripped and not stripped.startswith("#"):
                return len(line) - len(line.lstrip())
            self.pos += 1
        return None

    def _content(self) -> str:
        return self.lines[self.pos].strip()

    def _error(self, message: str) -> ParseError:
        line = self.pos + 1
        return ParseError(f"Invalid YAML at line {line}: {message}", line=line)

    # ---------------------------------------------------------------
    # grammar
    # ---------------------------------------------------------------

    def parse_document(self) -> Any:
        if self._peek_indent() is None:
            return {}
        value = self.parse_block(0)
        if self._peek_indent() is not None:
            raise self._error("unexpected indentation")
        return {} if value is None else value

    def parse_block(self, min_indent: int) -> Any:
        """Parse the block starting at the cursor if indented at least min_indent."""
        indent = self._peek_indent()
        if indent is None or indent < min_indent:
            return None
        content = self._content()
        if content in ("[]", "{}"):
            self.pos += 1
            return coerce_scalar(content)
        if _is_item(content):
            return self._parse_sequence(indent)
        return self._parse_mapping({}, indent)

    def _parse_sequence(self, indent: int) -> List[Any]:
        items: List[Any] = []
        while True:
            line_indent = self._peek_indent()
            if line_indent is None or line_indent < indent:
                break
            if line_indent > indent:
                raise self._error("unexpected indentation")
            content = self._content()
            if not _is_item(content):
                if _split_entry(content) is not None:
                    raise self._error("expected array item, found mapping entry")
                raise self._error("unexpected token")
            items.append(self._parse_item(indent, content))
        return items

    def _parse_item(self, indent: int, content: str) -> Any:
        rest = content[1:].strip()
        self.pos += 1
        if not rest:
            return self.parse_block(indent + 1)

        entry = _split_entry(rest)
        if entry is None:
            return coerce_scalar(rest)

        # inline-compacted mapping: "- key: value" + sibling keys below
        mapping: Dict[str, Any] = {}
        key, value_text = entry
        self._assign(mapping, key, value_text, indent + 1)
        sibling_indent = self._peek_indent()
        if sibling_indent is not None and sibling_indent > indent and not _is_item(self._content()):
            self._parse_mapping(mapping, sibling_indent)
        return mapping

    def _parse_mapping(self, mapping: Dict[str, Any], indent: int) -> Dict[str, Any]:
        while True:
            line_indent = self._peek_indent()
            if line_indent is None or line_indent < indent:
                break
            if line_indent > indent:
                raise self._error("unexpected indentation")
            content = self._content()
            if _is_item(content):
                raise self._error("expected mapping entry, found array item")
            entry = _split_entry(content)
            if entry is None:
                raise self._error("unexpected token")
            self.pos += 1
            key, value_text = entry
            self._assign(mapping, key, value_text, line_indent + 1)
        return mapping

    def _assign(self, mapping: Dict[str, Any], key: str, value_text: str, nested_min: int) -> None:
        if value_text:
            mapping[key] = coerce_scalar(value_text)
        else:
            mapping[key] = self.parse_block(nested_min)


def deserialize_yaml(text: str) -> Any:
    """
    Parse block-style YAML text.

    Args:
        text: YAML content

    Returns:
        Parsed value; empty or comment-only input yields {}

    Raises:
        TypeMismatchError: If text is not a str
        ParseError: With the 1-based line of the offending input
    """
    if not isinstance(text, str):
        raise TypeMismatchError(f"YAML input must be str, received {type(text).__name__}")
    if not text.strip():
        return {}

    parser = _YAMLParser(text)
    value = parser.parse_document()
    logger.debug("Parsed YAML document of %d lines", len(parser.lines))
    return value


__all__ = [
    "serialize_yaml",
    "deserialize_yaml",
    "coerce_scalar",
]
