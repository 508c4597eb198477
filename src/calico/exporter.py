"""
DataExporter: one object exposing every calico codec.

The facade holds no state; each method forwards to the module-level
codec function. Subclasses (ValidatingExporter) hook in before the
serialize calls.
"""

from typing import Any, List, Optional, Union

from calico.backends.markdown_generator import serialize_markdown
from calico.csv_codec import deserialize_csv, serialize_csv
from calico.errors import InvalidArgumentError
from calico.json_codec import deserialize_json, serialize_json
from calico.model import CSVOptions, ExportFormat, ExportResult, MarkdownOptions
from calico.yaml_codec import deserialize_yaml, serialize_yaml

FormatLike = Union[ExportFormat, str]


def _resolve_format(fmt: FormatLike) -> ExportFormat:
    return fmt if isinstance(fmt, ExportFormat) else ExportFormat.from_name(fmt)


class DataExporter:
    """Convert values to and from JSON, CSV, YAML and Markdown."""

    def to_json(self, data: Any, pretty: bool = True) -> str:
        return serialize_json(data, pretty)

    def to_csv(self, data: Any, options: Optional[CSVOptions] = None) -> str:
        return serialize_csv(data, options)

    def to_yaml(self, data: Any, indent: int = 2) -> str:
        return serialize_yaml(data, indent)

    def to_markdown(self, data: Any, options: Optional[MarkdownOptions] = None) -> str:
        return serialize_markdown(data, options)

    def from_json(self, text: str) -> Any:
        return deserialize_json(text)

    def from_csv(self, text: str, options: Optional[CSVOptions] = None) -> List[Any]:
        return deserialize_csv(text, options)

    def from_yaml(self, text: str) -> Any:
        return deserialize_yaml(text)

    def export(self, data: Any, fmt: FormatLike, **opts: Any) -> ExportResult:
        """
        Serialize to the named format.

        Args:
            data: Value to serialize
            fmt: ExportFormat or name ("json", "csv", "yaml"/"yml", "md"/"markdown")
            **opts: pretty (json), indent (yaml), options (csv/md)

        Returns:
            ExportResult with the text and its size in bytes
        """
        target = _resolve_format(fmt)
        if target == ExportFormat.JSON:
            text = self.to_json(data, opts.get("pretty", True))
        elif target == ExportFormat.CSV:
            text = self.to_csv(data, opts.get("options"))
        elif target == ExportFormat.YAML:
            text = self.to_yaml(data, opts.get("indent", 2))
        else:
            text = self.to_markdown(data, opts.get("options"))
        return ExportResult(data=text, format=target)

    def parse(self, text: str, fmt: FormatLike, **opts: Any) -> Any:
        """Deserialize text in the named format. Markdown has no parser."""
        source = _resolve_format(fmt)
        if source == ExportFormat.JSON:
            return self.from_json(text)
        if source == ExportFormat.CSV:
            return self.from_csv(text, opts.get("options"))
        if source == ExportFormat.YAML:
            return self.from_yaml(text)
        raise InvalidArgumentError(f"Cannot parse format: {source.value}")


__all__ = ["DataExporter"]
