"""Command-line interface for exploring Avro container files."""

import sys
from typing import List, Optional

import orjson
import typer
from loguru import logger
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.syntax import Syntax

from avro_explorer import __version__
from avro_explorer.config import ExplorerSettings, QueryOptions, SearchMode, load_settings
from avro_explorer.container import open_container
from avro_explorer.errors import AvroExplorerError, PatternError
from avro_explorer.pipeline import explore
from avro_explorer.shared.discovery import expand_paths
from avro_explorer.shared.logging_utils import setup_logging

app = typer.Typer(no_args_is_help=True, help="A CLI for exploring Apache Avro files")
console = Console()
err_console = Console(stderr=True, soft_wrap=True)

EXIT_FAILED = 1
EXIT_USAGE = 2


def _setup(verbose: int) -> ExplorerSettings:
    settings = load_settings()
    level = {0: settings.log_level, 1: "INFO"}.get(verbose, "DEBUG")
    setup_logging(level=level, log_file=settings.log_file)
    return settings


def _files(paths: List[str]):
    files = expand_paths(paths)
    if not files:
        err_console.print(f"[red]No files found matching: {escape(' '.join(paths))}[/red]")
        raise typer.Exit(EXIT_USAGE)
    logger.debug(f"Expanded {paths} to {len(files)} file(s)")
    return files


@app.command()
def get(
    paths: List[str] = typer.Argument(..., help="Avro files or glob patterns to read"),
    fields: List[str] = typer.Option(
        [],
        "--fields",
        "-f",
        help="Fields to show, repeatable or comma-separated (default: all fields of the first record)",
    ),
    search: Optional[str] = typer.Option(
        None,
        "--search",
        "-s",
        help="Pattern to search for; only rows with a matching field are shown",
    ),
    take: Optional[int] = typer.Option(
        None, "--take", "-t", min=0, help="Maximum number of rows to show"
    ),
    output_format: Optional[str] = typer.Option(
        None,
        "--format",
        "-p",
        help="Output format: omit for a table, or csv, json, json-pretty",
    ),
    ignore_case: bool = typer.Option(
        False, "--ignore-case", "-i", help="Case-insensitive search"
    ),
    literal: bool = typer.Option(
        False, "--literal", help="Treat the search pattern as plain text, not a regex"
    ),
    verbose: int = typer.Option(0, "--verbose", "-v", count=True, help="More logging (-vv for debug)"),
):
    """Get fields from one or more Avro files."""
    settings = _setup(verbose)
    files = _files(paths)

    try:
        options = QueryOptions(
            fields=fields,
            search=search,
            take=take,
            format=output_format if output_format is not None else settings.default_format,
            search_mode=SearchMode.LITERAL if literal else settings.search_mode,
            ignore_case=ignore_case or settings.ignore_case,
        )
    except ValidationError as e:
        for error in e.errors():
            err_console.print(f"[red]❌ {escape(error['msg'])}[/red]")
        raise typer.Exit(EXIT_USAGE)

    try:
        summary = explore(files, options, sys.stdout, settings)
    except PatternError as e:
        err_console.print(f"[red]❌ {escape(str(e))}[/red]")
        raise typer.Exit(EXIT_USAGE)

    if summary.missing_columns:
        err_console.print(
            f"[yellow]Fields not found in any record: {escape(', '.join(summary.missing_columns))}[/yellow]"
        )
    if summary.failures:
        for failure in summary.failures:
            err_console.print(f"[red]❌ {escape(failure.source)}: {escape(str(failure))}[/red]")
        raise typer.Exit(EXIT_FAILED)


@app.command()
def schema(
    path: str = typer.Argument(..., help="Avro file to inspect"),
    verbose: int = typer.Option(0, "--verbose", "-v", count=True),
):
    """Print the writer schema embedded in an Avro file."""
    _setup(verbose)
    try:
        with open_container(path) as reader:
            text = orjson.dumps(reader.schema_json, option=orjson.OPT_INDENT_2).decode("utf-8")
    except (AvroExplorerError, OSError) as e:
        err_console.print(f"[red]❌ {escape(str(e))}[/red]")
        raise typer.Exit(EXIT_FAILED)

    if console.is_terminal:
        console.print(Syntax(text, "json", theme="monokai", word_wrap=True))
    else:
        sys.stdout.write(text + "\n")


@app.command()
def count(
    paths: List[str] = typer.Argument(..., help="Avro files or glob patterns"),
    per_file: bool = typer.Option(False, "--per-file", help="Also print a count per file"),
    verbose: int = typer.Option(0, "--verbose", "-v", count=True),
):
    """Count records using block headers only."""
    _setup(verbose)
    files = _files(paths)

    total = 0
    failed = False
    for path in files:
        try:
            with open_container(path) as reader:
                n = reader.count()
        except (AvroExplorerError, OSError) as e:
            logger.error(f"Failed counting {path}: {e}")
            err_console.print(f"[red]❌ {escape(str(path))}: {escape(str(e))}[/red]")
            failed = True
            continue
        total += n
        if per_file:
            sys.stdout.write(f"{path}\t{n}\n")
    sys.stdout.write(f"{total}\n")
    if failed:
        raise typer.Exit(EXIT_FAILED)


def _version_callback(value: bool):
    if value:
        typer.echo(f"avro-explorer {__version__}")
        raise typer.Exit()


@app.callback()
def callback(
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show the version and exit"
    ),
):
    """
    avro-explorer: inspect, search and convert Apache Avro container files.

    Output goes to stdout; logs and errors go to stderr.
    """


if __name__ == "__main__":
    app()
