"""
Schema validation for calico values.

A small JSON-Schema-style validator: a recursive walk that collects
every violation with its path ("root.users[2].email"). ValidatingExporter
composes it in front of every serialize call and fails fast on the
first violation.

Supported keywords:
    type       string | number | integer | boolean | array | object | null
    required   list of keys that must be present (objects)
    properties per-key sub-schemas (objects)
    items      sub-schema for every element (arrays)
    minimum / maximum        (numbers)
    minLength / maxLength    (strings)
    pattern                  (strings, re.search)
    format     "email"       (strings)
    enum       list of allowed values
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from calico.errors import ValidationError
from calico.exporter import DataExporter
from calico.model import CSVOptions, MarkdownOptions, ValueKind, kind_of

Schema = Dict[str, Any]

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def _kind_or_none(value: Any) -> Optional[ValueKind]:
    try:
        return kind_of(value)
    except TypeError:
        return None


def _is_number(value: Any) -> bool:
    return _kind_or_none(value) == ValueKind.NUMBER


_TYPE_CHECKS: Dict[str, Callable[[Any], bool]] = {
    "string": lambda v: _kind_or_none(v) == ValueKind.STRING,
    "number": _is_number,
    # ints beyond float range cannot go through float()
    "integer": lambda v: _is_number(v) and (isinstance(v, int) or v.is_integer()),
    "boolean": lambda v: _kind_or_none(v) == ValueKind.BOOL,
    "array": lambda v: _kind_or_none(v) == ValueKind.SEQUENCE,
    "object": lambda v: _kind_or_none(v) == ValueKind.MAPPING,
    "null": lambda v: v is None,
}


def _type_name(value: Any) -> str:
    kind = _kind_or_none(value)
    if kind is None:
        return type(value).__name__
    return {
        ValueKind.SEQUENCE: "array",
        ValueKind.MAPPING: "object",
        ValueKind.BOOL: "boolean",
    }.get(kind, kind.value)


@dataclass
class ValidationIssue:
    """One schema violation."""
    path: str
    message: str
    value: Any = None


@dataclass
class ValidationResult:
    """Outcome of validate(): valid is True when errors is empty."""
    valid: bool = True
    errors: List[ValidationIssue] = field(default_factory=list)

    def add(self, path: str, message: str, value: Any = None) -> None:
        self.errors.append(ValidationIssue(path=path, message=message, value=value))
        self.valid = False


def _validate_node(value: Any, schema: Schema, path: str, result: ValidationResult) -> None:
    if not schema:
        return

    expected = schema.get("type")
    if expected is not None:
        check = _TYPE_CHECKS.get(expected)
        if check is None:
            raise ValueError(f"Unknown schema type: {expected}")
        if not check(value):
            result.add(path, f"Expected {expected}, got {_type_name(value)}", value)

    if "enum" in schema and value not in schema["enum"]:
        result.add(path, f"Value must be one of {schema['enum']}", value)

    kind = _kind_or_none(value)

    if kind == ValueKind.MAPPING:
        for key in schema.get("required", []):
            if key not in value:
                result.add(f"{path}.{key}", "Field is required")
        for key, sub_schema in schema.get("properties", {}).items():
            if key in value:
                _validate_node(value[key], sub_schema, f"{path}.{key}", result)

    elif kind == ValueKind.SEQUENCE and "items" in schema:
        for index, item in enumerate(value):
            _validate_node(item, schema["items"], f"{path}[{index}]", result)

    elif kind == ValueKind.NUMBER:
        if "minimum" in schema and value < schema["minimum"]:
            result.add(path, f"Value must be >= {schema['minimum']}", value)
        if "maximum" in schema and value > schema["maximum"]:
            result.add(path, f"Value must be <= {schema['maximum']}", value)

    elif kind == ValueKind.STRING:
        if "minLength" in schema and len(value) < schema["minLength"]:
            result.add(path, f"String length must be >= {schema['minLength']}", value)
        if "maxLength" in schema and len(value) > schema["maxLength"]:
            result.add(path, f"String length must be <= {schema['maxLength']}", value)
        if "pattern" in schema and not re.search(schema["pattern"], value):
            result.add(path, f"String does not match pattern {schema['pattern']}", value)
        if schema.get("format") == "email" and not _EMAIL_RE.match(value):
            result.add(path, "Invalid email format", value)


def validate(value: Any, schema: Schema) -> ValidationResult:
    """
    Validate a value against a schema.

    Args:
        value: Value tree
        schema: Schema dict (see module docstring for keywords)

    Returns:
        ValidationResult holding every violation, in walk order
    """
    result = ValidationResult()
    _validate_node(value, schema, "root", result)
    return result


class ValidatingExporter(DataExporter):
    """
    DataExporter that validates before every serialize call.

    With throw_on_validation_error=False invalid data is serialized anyway;
    callers can still inspect validate_data().
    """

    def __init__(self, schema: Optional[Schema] = None, throw_on_validation_error: bool = True):
        self.schema = schema
        self.throw_on_validation_error = throw_on_validation_error

    def set_schema(self, schema: Optional[Schema]) -> None:
        self.schema = schema

    def validate_data(self, data: Any) -> ValidationResult:
        if not self.schema:
            return ValidationResult()
        return validate(data, self.schema)

    def _validate_or_raise(self, data: Any) -> None:
        if not self.schema:
            return
        result = self.validate_data(data)
        if not result.valid and self.throw_on_validation_error:
            first = result.errors[0]
            raise ValidationError(first.path, first.message, first.value)

    def to_json(self, data: Any, pretty: bool = True) -> str:
        self._validate_or_raise(data)
        return super().to_json(data, pretty)

    def to_csv(self, data: Any, options: Optional[CSVOptions] = None) -> str:
        self._validate_or_raise(data)
        return super().to_csv(data, options)

    def to_yaml(self, data: Any, indent: int = 2) -> str:
        self._validate_or_raise(data)
        return super().to_yaml(data, indent)

    def to_markdown(self, data: Any, options: Optional[MarkdownOptions] = None) -> str:
        self._validate_or_raise(data)
        return super().to_markdown(data, options)


__all__ = [
    "Schema",
    "ValidationIssue",
    "ValidationResult",
    "validate",
    "ValidatingExporter",
]
