"""Utility helpers for opening input and output streams."""

from __future__ import annotations

import sys
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, Iterator, TextIO

import typer

STDIO = "-"


def describe_source(name: str) -> str:
    """Human readable label for an input name, where '-' is stdin."""
    if name == STDIO:
        return "Stdin"
    return f"File: {Path(name).name}"


@contextmanager
def open_input(name: str, buffer_size: int = 8192) -> Iterator[BinaryIO]:
    """Open an input file for binary reading, or stdin for '-'."""
    if name == STDIO:
        yield typer.get_binary_stream("stdin")
        return
    with open(name, "rb", buffering=buffer_size) as handle:
        yield handle


@contextmanager
def open_output(name: str, buffer_size: int = 8192) -> Iterator[TextIO]:
    """Open the output sink, or stdout for '-'. Flushed on exit."""
    if name == STDIO:
        try:
            yield sys.stdout
        finally:
            sys.stdout.flush()
        return
    with open(name, "w", encoding="utf-8", newline="", buffering=buffer_size) as handle:
        yield handle
