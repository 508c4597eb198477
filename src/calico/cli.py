#!/usr/bin/env python3
"""
calico CLI - convert a data file between JSON, CSV, YAML and Markdown.

Usage:
    calico data.json -o data.yaml            Format inferred from extensions
    calico -i data.csv -f md --title Users   Explicit output format, to stdout
    calico data.yml -o out.csv --delimiter ";"

Input format is detected from the input extension (.json, .csv,
.yaml/.yml); unknown extensions are tried as JSON. Output format comes
from -f, else the output extension, else JSON.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, List, Optional

from calico.errors import CalicoError, InvalidArgumentError, ParseError
from calico.exporter import DataExporter
from calico.model import IMPORT_FORMATS, CSVOptions, ExportFormat, MarkdownOptions

logger = logging.getLogger("calico")

LOG_FORMAT = "[%(levelname)s] %(message)s"


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="calico",
        description="Convert data between JSON, CSV, YAML and Markdown",
    )
    p.add_argument("input_path", nargs="?", help="Input file")
    p.add_argument("-i", "--input", help="Input file (alternative to the positional argument)")
    p.add_argument("-o", "--output", help="Output file (default: stdout)")
    p.add_argument("-f", "--format", help="Output format: json, csv, yaml/yml, md/markdown")
    p.add_argument("--input-format", help="Force the input format: json, csv, yaml")
    p.add_argument("-p", "--pretty", action=argparse.BooleanOptionalAction, default=True,
                   help="Pretty-print JSON output (default: on)")
    p.add_argument("--indent", type=int, default=2, help="YAML indentation width")
    p.add_argument("--delimiter", default=",", help="CSV delimiter (input and output)")
    p.add_argument("--no-headers", action="store_true", help="CSV without a header row")
    p.add_argument("--no-quote", action="store_true",
                   help="Only quote CSV fields that need it")
    p.add_argument("--strict", action="store_true", help="Reject ragged CSV rows")
    p.add_argument("--title", help="Markdown title")
    p.add_argument("--toc", action="store_true", help="Markdown table of contents")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return p


def detect_input_format(path: Path) -> Optional[ExportFormat]:
    """Format named by the file extension, or None when unknown."""
    try:
        fmt = ExportFormat.from_name(path.suffix)
    except InvalidArgumentError:
        return None
    return fmt if fmt in IMPORT_FORMATS else None


def _csv_options(args: argparse.Namespace) -> CSVOptions:
    return CSVOptions(
        include_headers=not args.no_headers,
        delimiter=args.delimiter,
        quote_all_strings=not args.no_quote,
        strict=args.strict,
    )


def load_input(exporter: DataExporter, path: Path, args: argparse.Namespace) -> Any:
    content = path.read_text(encoding="utf-8")
    if args.input_format:
        fmt = ExportFormat.from_name(args.input_format)
    else:
        fmt = detect_input_format(path)

    if fmt is None:
        logger.debug("Unknown extension %r, trying JSON", path.suffix)
        try:
            return exporter.from_json(content)
        except ParseError as e:
            raise InvalidArgumentError(
                "Could not auto-detect input format. "
                "Please ensure input is valid JSON, CSV, or YAML."
            ) from e

    logger.debug("Reading %s as %s", path, fmt.value)
    return exporter.parse(content, fmt, options=_csv_options(args))


def resolve_output_format(args: argparse.Namespace) -> ExportFormat:
    if args.format:
        return ExportFormat.from_name(args.format)
    if args.output and Path(args.output).suffix:
        return ExportFormat.from_name(Path(args.output).suffix)
    return ExportFormat.JSON


def convert(args: argparse.Namespace) -> str:
    exporter = DataExporter()
    data = load_input(exporter, Path(args.input or args.input_path), args)
    target = resolve_output_format(args)

    if target == ExportFormat.CSV:
        opts = {"options": _csv_options(args)}
    elif target == ExportFormat.MARKDOWN:
        opts = {"options": MarkdownOptions(title=args.title, include_table_of_contents=args.toc)}
    else:
        opts = {"pretty": args.pretty, "indent": args.indent}

    result = exporter.export(data, target, **opts)
    logger.debug("Produced %d bytes of %s", result.size, target.value)
    return result.data


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not (args.input or args.input_path):
        parser.error("an input file is required (positional or -i/--input)")

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format=LOG_FORMAT,
        stream=sys.stderr,
    )

    try:
        output = convert(args)
        if args.output:
            Path(args.output).write_text(output, encoding="utf-8")
            logger.info("Successfully exported to %s", args.output)
        else:
            print(output)
    except (CalicoError, OSError) as e:
        logger.error("Error: %s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
