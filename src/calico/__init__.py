"""
calico - convert structured data between JSON, CSV, YAML and Markdown.

Values are plain Python objects (None, bool, int/float, str, list, dict).
Every codec is a pure function over its input and options:

    serialize_json / deserialize_json
    serialize_csv  / deserialize_csv
    serialize_yaml / deserialize_yaml
    serialize_markdown            (write-only)

YAML and CSV are parsed by hand-written codecs; no YAML or CSV library
is involved at runtime. DataExporter bundles the functions,
ValidatingExporter adds a schema check before every serialize call and
AsyncDataExporter moves large exports to a worker process.
"""

from calico.async_exporter import AsyncDataExporter
from calico.backends.markdown_generator import serialize_markdown
from calico.csv_codec import deserialize_csv, serialize_csv
from calico.errors import (
    CalicoError,
    CircularReferenceError,
    InvalidArgumentError,
    ParseError,
    SerializationError,
    TypeMismatchError,
    ValidationError,
    WorkerError,
)
from calico.exporter import DataExporter
from calico.guard import detect_circular_reference
from calico.json_codec import deserialize_json, serialize_json
from calico.model import CSVOptions, ExportFormat, ExportResult, MarkdownOptions
from calico.validation import ValidatingExporter, ValidationResult, validate
from calico.yaml_codec import deserialize_yaml, serialize_yaml

__version__ = "0.1.0"

__all__ = [
    "serialize_json",
    "deserialize_json",
    "serialize_csv",
    "deserialize_csv",
    "serialize_yaml",
    "deserialize_yaml",
    "serialize_markdown",
    "detect_circular_reference",
    "DataExporter",
    "ValidatingExporter",
    "AsyncDataExporter",
    "validate",
    "ValidationResult",
    "CSVOptions",
    "MarkdownOptions",
    "ExportFormat",
    "ExportResult",
    "CalicoError",
    "CircularReferenceError",
    "TypeMismatchError",
    "InvalidArgumentError",
    "ParseError",
    "SerializationError",
    "ValidationError",
    "WorkerError",
]
