"""
Markdown renderer for calico values (write-only).

Output shapes:
    - sequence of mappings -> GitHub-flavored table (header = key union)
    - other sequences      -> bulleted list
    - mapping              -> "- **key**: <JSON>" list
    - primitive            -> its text

An optional "# title" heading and a table of contents of the top-level
keys (mapping input only) can be prepended.
"""

from typing import Any, Dict, List, Optional

from calico.guard import detect_circular_reference
from calico.json_codec import serialize_json
from calico.model import MarkdownOptions, ValueKind, cell_text, kind_of


def _one_line(text: str) -> str:
    return text.replace("\r\n", "<br>").replace("\n", "<br>").replace("\r", "<br>")


def _escape_cell(text: str) -> str:
    """Keep a cell on one table row."""
    return _one_line(text.replace("|", "\\|"))


def _anchor(key: str) -> str:
    return key.lower()


def _table(rows: List[Dict[str, Any]]) -> List[str]:
    headers: Dict[str, None] = {}
    for row in rows:
        for key in row:
            headers.setdefault(key, None)
    columns = list(headers)

    lines = [
        "| " + " | ".join(_escape_cell(str(h)) for h in columns) + " |",
        "| " + " | ".join("---" for _ in columns) + " |",
    ]
    for row in rows:
        cells = [_escape_cell(cell_text(row.get(h))) for h in columns]
        lines.append("| " + " | ".join(cells) + " |")
    return lines


def serialize_markdown(value: Any, options: Optional[MarkdownOptions] = None) -> str:
    """
    Render a value as Markdown.

    Args:
        value: Value tree
        options: MarkdownOptions (title, table of contents)

    Returns:
        Markdown text

    Raises:
        CircularReferenceError: If the value contains itself
    """
    opts = options or MarkdownOptions()
    detect_circular_reference(value)
    kind = kind_of(value)

    parts: List[str] = []

    if opts.title:
        parts.append(f"# {opts.title}\n")

    if opts.include_table_of_contents and kind == ValueKind.MAPPING:
        parts.append("## Table of Contents")
        for key in value:
            parts.append(f"- [{key}](#{_anchor(str(key))})")
        parts.append("")

    if kind == ValueKind.SEQUENCE:
        if value and all(kind_of(item) == ValueKind.MAPPING for item in value):
            parts.extend(_table(value))
        else:
            for item in value:
                parts.append(f"- {_one_line(cell_text(item))}")
    elif kind == ValueKind.MAPPING:
        for key, child in value.items():
            parts.append(f"- **{key}**: {serialize_json(child, pretty=False)}")
    else:
        parts.append(cell_text(value))

    return "\n".join(parts)


def save_markdown_file(value: Any, filename: str, options: Optional[MarkdownOptions] = None) -> None:
    """
    Render Markdown and save to file.

    Args:
        value: Value to render
        filename: Output file path (.md extension recommended)
        options: MarkdownOptions
    """
    text = serialize_markdown(value, options)
    with open(filename, "w", encoding="utf-8") as f:
        f.write(text)


__all__ = ["serialize_markdown", "save_markdown_file"]
