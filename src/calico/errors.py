"""
Error types raised by calico codecs.

Every failure is raised synchronously at the point of detection.
There is no partial-result mode: a failure aborts the whole conversion.

Each class also derives from the closest builtin so callers that only
know about TypeError/ValueError keep working.
"""

from typing import Any, Optional


class CalicoError(Exception):
    """Base class for all calico errors."""
    pass


class CircularReferenceError(CalicoError, ValueError):
    """Raised when a value contains itself (directly or transitively)."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(
            f"Circular reference detected at path '{path}' - object references itself"
        )


class TypeMismatchError(CalicoError, TypeError):
    """Raised when a value has the wrong shape for the requested format."""
    pass


class InvalidArgumentError(CalicoError, ValueError):
    """Raised for invalid options (indent width, delimiter, ...)."""
    pass


class ParseError(CalicoError, ValueError):
    """
    Raised when CSV, YAML or JSON text cannot be parsed.

    Attributes:
        line: 1-based line number, when the format is line oriented
        column: 1-based column, when known
    """

    def __init__(self, message: str, line: Optional[int] = None, column: Optional[int] = None):
        self.line = line
        self.column = column
        super().__init__(message)


class SerializationError(CalicoError):
    """Raised when a value cannot be represented in the target format."""
    pass


class ValidationError(CalicoError):
    """Raised by ValidatingExporter on the first schema violation."""

    def __init__(self, path: str, message: str, value: Any = None):
        self.path = path
        self.reason = message
        self.value = value
        super().__init__(f"Field '{path}' is invalid: {message}")


class WorkerError(CalicoError):
    """Raised when an export dispatched to a worker process fails."""
    pass


__all__ = [
    "CalicoError",
    "CircularReferenceError",
    "TypeMismatchError",
    "InvalidArgumentError",
    "ParseError",
    "SerializationError",
    "ValidationError",
    "WorkerError",
]
