"""Command line interface for jaesve."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape

from jaesve.config import Column, decode_escapes, load_config, parse_fields
from jaesve.convert.driver import Converter, ConvertStats
from jaesve.errors import ConfigError, JaesveError, format_error_chain
from jaesve.utils.files import STDIO, open_output


console = Console(stderr=True, soft_wrap=True)
app = typer.Typer(help="jaesve - convert JSON into a CSV-like list of JSON pointers", add_completion=False)


def _log_level(verbose: int) -> int:
    if verbose >= 2:
        return logging.DEBUG
    if verbose == 1:
        return logging.INFO
    return logging.WARNING


def _setup_logging(verbose: int) -> None:
    logging.basicConfig(level=_log_level(verbose), format="[%(levelname)s] %(message)s")


def _unescaped(value: Optional[str]) -> Optional[str]:
    return None if value is None else decode_escapes(value)


def _print_summary(stats: ConvertStats) -> None:
    console.print(
        f"Documents: {stats.documents}, records: {stats.records}, "
        f"filtered: {stats.filtered}, skipped: {stats.skipped}, failed: {stats.failed}"
    )


@app.command()
def convert(
    inputs: Optional[List[str]] = typer.Argument(
        None, help="Input file paths, '-' reads stdin. Defaults to stdin."
    ),
    output: str = typer.Option(STDIO, "--output", "-o", help="Output file path, '-' writes stdout"),
    separator: Optional[str] = typer.Option(None, "--separator", "-s", help="Field separator, e.g. ', ' or '\\t'"),
    left_delimiter: Optional[str] = typer.Option(None, "--left-delimiter", "-l", help="Opening guard for each field"),
    right_delimiter: Optional[str] = typer.Option(None, "--right-delimiter", "-r", help="Closing guard for each field"),
    end_of_record: Optional[str] = typer.Option(None, "--end-of-record", "-e", help="Record terminator"),
    begin_of_record: Optional[str] = typer.Option(None, "--begin-of-record", "-b", help="Record prefix"),
    hide_type: Optional[bool] = typer.Option(
        None, "--hide-type/--show-type", "-t", help="Do not print the JSON type column"
    ),
    print_header: Optional[bool] = typer.Option(None, "--print-header/--no-header", "-p", help="Print a header row"),
    multi_documents: Optional[int] = typer.Option(
        None,
        "--multi-documents",
        "-m",
        help="Treat each line as a document and number them starting at the given value",
    ),
    carry_ident: Optional[bool] = typer.Option(
        None, "--carry-ident/--reset-ident", help="Keep numbering documents across inputs"
    ),
    base_path: Optional[str] = typer.Option(None, "--base-path", help="Pointer prefix for every record"),
    regex: Optional[str] = typer.Option(None, "--regex", "-x", help="Only print records matching this pattern"),
    column: Optional[str] = typer.Option(
        None, "--column", "-c", help="Column the regex applies to: pointer, type, value or separator"
    ),
    fields: Optional[str] = typer.Option(
        None, "--format", "-f", help="Dot separated field order, e.g. ident.type.pointer.value"
    ),
    config_files: Optional[List[Path]] = typer.Option(
        None, "--config", help="Extra TOML config file(s); earlier files win"
    ),
    no_system_config: bool = typer.Option(False, "--no-system-config", help="Ignore /etc/jaesve.toml"),
    verbose: int = typer.Option(0, "--verbose", "-v", count=True, help="Verbose logging, repeat for more"),
) -> None:
    """Flatten JSON input into one delimited line per JSON pointer."""
    _setup_logging(verbose)

    try:
        config = load_config(config_files or [], include_system=not no_system_config)
        config = config.with_overrides(
            separator=_unescaped(separator),
            left_delimiter=_unescaped(left_delimiter),
            right_delimiter=_unescaped(right_delimiter),
            end_record=_unescaped(end_of_record),
            begin_record=_unescaped(begin_of_record),
            hide_type=hide_type,
            header=print_header,
            fields=parse_fields(fields) if fields is not None else None,
            regex_pattern=regex,
            regex_column=Column.parse(column) if column is not None else None,
            multi_document=multi_documents,
            carry_ident=carry_ident,
            base_path=base_path,
            verbose=verbose or None,
        )
        # Validates and compiles the filter before any input is opened
        converter = Converter(config)
    except ConfigError as exc:
        raise typer.BadParameter(format_error_chain(exc)) from exc

    if config.verbose > verbose:
        logging.getLogger().setLevel(_log_level(config.verbose))

    try:
        with open_output(output, config.output_buffer_size) as sink:
            stats = converter.convert_sources(inputs or [STDIO], sink)
    except (OSError, JaesveError) as exc:
        console.print(f"[red]Error:[/red] {escape(format_error_chain(exc))}")
        raise typer.Exit(code=1) from exc

    for source, reason in stats.failures:
        console.print(f"[red]Error:[/red] {escape(source)}: {escape(reason)}")
    if config.verbose >= 1:
        _print_summary(stats)
    if not stats.ok:
        raise typer.Exit(code=1)


def run() -> None:
    app()


if __name__ == "__main__":
    run()
