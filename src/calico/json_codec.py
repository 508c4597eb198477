"""
JSON codec: thin wrapper over the standard json module.

Adds the circular-reference guard on the way out and maps json errors
onto calico error types on the way in.
"""

import json
from typing import Any

from calico.errors import ParseError, SerializationError, TypeMismatchError
from calico.guard import detect_circular_reference


def _reject_constant(name: str) -> Any:
    raise ParseError(f"Invalid JSON: non-finite number literal {name!r} is not allowed")


def serialize_json(value: Any, pretty: bool = True) -> str:
    """
    Serialize a value to JSON.

    Args:
        value: Value tree
        pretty: Indent with 2 spaces; compact separators otherwise

    Raises:
        CircularReferenceError: If the value contains itself
        SerializationError: If the value holds NaN/Infinity or unsupported objects
    """
    detect_circular_reference(value)
    try:
        if pretty:
            return json.dumps(value, indent=2, ensure_ascii=False, allow_nan=False)
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False, allow_nan=False)
    except (TypeError, ValueError) as e:
        raise SerializationError(f"Input data for JSON must be serializable: {e}") from e


def deserialize_json(text: str) -> Any:
    """
    Parse JSON text.

    Raises:
        TypeMismatchError: If text is not a str
        ParseError: With line and column of the first syntax error
    """
    if not isinstance(text, str):
        raise TypeMismatchError(f"JSON input must be str, received {type(text).__name__}")
    try:
        return json.loads(text, parse_constant=_reject_constant)
    except json.JSONDecodeError as e:
        raise ParseError(
            f"Invalid JSON at line {e.lineno}, column {e.colno}: {e.msg}",
            line=e.lineno,
            column=e.colno,
        ) from e


__all__ = ["serialize_json", "deserialize_json"]
