"""jinxml CLI Entry Point

Convert JSON records to XML with a YAML template.

Usage:
    jinxml template.yml data.json                  # one object -> one document
    jinxml template.yml people.json --open '<People>' --close '</People>'
    jinxml template.yml records.jsonl --lines      # JSON lines, streamed
    cat data.json | jinxml template.yml            # read stdin
    jinxml template.yml data.json -f 2 -o out.xml  # indented, to a file
"""

from __future__ import annotations

import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Iterable, List, Optional, TextIO, Union

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler

from jinxml._version import __version__
from jinxml.converter import Converter
from jinxml.exceptions import JinxmlError

log = logging.getLogger(__name__)

console = Console(stderr=True)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the jinxml CLI.

    Log levels:
    - Normal: Only warnings/errors shown
    - Verbose (-v): INFO level
    - Debug (JINXML_DEBUG=1): DEBUG level - template loading, streaming
    """
    if os.environ.get("JINXML_DEBUG"):
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    handler = RichHandler(
        console=console,
        show_time=verbose,
        show_path=bool(os.environ.get("JINXML_DEBUG")),
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))

    jinxml_logger = logging.getLogger("jinxml")
    jinxml_logger.setLevel(level)
    jinxml_logger.handlers = [handler]
    jinxml_logger.propagate = False


def parse_format_spacing(value: Optional[str]) -> Optional[Union[int, str]]:
    """Digits mean an indent width; anything else is a literal indent string.

    Backslash escapes are honoured, so `--format '\\t'` indents with tabs.
    """
    if value is None:
        return None
    if value.isdigit():
        return int(value)
    return value.encode("utf-8").decode("unicode_escape")


def read_records(text: str, lines: bool) -> Union[Any, List[Any]]:
    """Decode input as a JSON document, or as JSON lines when `lines` is set."""
    if lines:
        return [json.loads(line) for line in text.splitlines() if line.strip()]
    return json.loads(text)


def write_stream(
    converter: Converter,
    records: Iterable[Any],
    out: TextIO,
    document_open: Optional[str],
    document_close: Optional[str],
) -> int:
    """Stream records through the converter into `out`; returns the record count."""
    stream = converter.stream(document_open, document_close)
    separator = "\n" if converter.renderer.pretty else ""
    first = True
    for chunk in stream.transform([records]):
        if not first:
            out.write(separator)
        out.write(chunk)
        first = False
    out.write("\n")
    return stream.records


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"jinxml {__version__}")
        raise typer.Exit()


typer_app = typer.Typer()


@typer_app.command()
def cli(
    template: Path = typer.Argument(..., help="Path to the YAML template."),
    input_path: Optional[Path] = typer.Argument(
        None, help="JSON input file. Reads stdin when omitted."
    ),
    output: Optional[Path] = typer.Option(
        None, "-o", "--output", help="Write XML to file instead of stdout."
    ),
    format_spacing: Optional[str] = typer.Option(
        None,
        "-f",
        "--format",
        help="Indent output: a width (2) or an indent string ('\\t').",
    ),
    document_open: Optional[str] = typer.Option(
        None, "--open", help="Fragment written before streamed records."
    ),
    document_close: Optional[str] = typer.Option(
        None, "--close", help="Fragment written after streamed records."
    ),
    lines: bool = typer.Option(
        False, "--lines", help="Treat input as JSON lines, one record per line."
    ),
    keep_undefined: bool = typer.Option(
        False,
        "--keep-undefined",
        help="Emit empty elements for undefined values instead of omitting them.",
    ),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Verbose logging."),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """Convert JSON records to XML using a YAML template.

    A JSON object becomes one XML document. A JSON array (or JSON lines with
    --lines) is streamed record by record between --open and --close.
    """
    setup_logging(verbose)

    try:
        converter = Converter(
            template_path=template,
            format_spacing=parse_format_spacing(format_spacing),
            suppress_undefined=not keep_undefined,
        )

        if input_path is not None:
            text = input_path.read_text(encoding="utf-8")
        else:
            text = sys.stdin.read()
        data = read_records(text, lines)

        out: TextIO = (
            open(output, "w", encoding="utf-8") if output is not None else sys.stdout
        )
        try:
            if isinstance(data, list):
                count = write_stream(
                    converter, data, out, document_open, document_close
                )
                log.info("Converted %d records", count)
            else:
                out.write(converter.convert(data))
                out.write("\n")
                log.info("Converted 1 record")
        finally:
            if output is not None:
                out.close()

        if output is not None:
            log.info("Wrote XML to %s", output)

    except (JinxmlError, ValidationError, json.JSONDecodeError, OSError) as exc:
        typer.secho(f"Error: {exc}", err=True, fg=typer.colors.RED)
        raise typer.Exit(code=1)


def app(argv: Optional[List[str]] = None) -> None:
    """Entry point for the CLI.

    When called as a module or installed entrypoint this function launches the Typer app.
    """
    typer_app(args=argv)


if __name__ == "__main__":
    app()
