"""Quote-aware byte scanning.

The scanner tracks whether the bytes it has passed through sit inside a
JSON string, so callers can split a raw stream on a boundary byte without
cutting a quoted token in half.
"""

from __future__ import annotations

from enum import Enum
from typing import BinaryIO, Iterable, Iterator

DEFAULT_INPUT_BUFFER = 8192

QUOTE = ord('"')
BACKSLASH = ord("\\")


class ScanState(Enum):
    IN_QUOTES = "in"
    OUT_QUOTES = "out"


def iter_stream_bytes(stream: BinaryIO, buffer_size: int = DEFAULT_INPUT_BUFFER) -> Iterator[int]:
    """Yield the bytes of a binary stream one at a time, reading in chunks."""
    for chunk in iter(lambda: stream.read(buffer_size), b""):
        yield from chunk


class QuoteScanner:
    """Pass-through byte iterator that records quote state.

    ``offsets`` holds the number of bytes seen since the scanner last
    entered quotes and since it last left them. A quote preceded by an
    unescaped backslash does not toggle the state; a backslash that is
    itself escaped does not suppress the next quote.
    """

    def __init__(self, source: Iterable[int]) -> None:
        self._source = iter(source)
        self._state = ScanState.OUT_QUOTES
        self._escaped = False
        self._in_offset = 0
        self._out_offset = 0

    def __iter__(self) -> "QuoteScanner":
        return self

    def __next__(self) -> int:
        try:
            byte = next(self._source)
        except OSError:
            self._increment()
            self._escaped = False
            raise

        if byte == QUOTE:
            if not self._escaped:
                self._toggle()
            self._escaped = False
        else:
            self._increment()
            self._escaped = byte == BACKSLASH and not self._escaped
        return byte

    @property
    def state(self) -> ScanState:
        return self._state

    @property
    def outside_quotes(self) -> bool:
        return self._state is ScanState.OUT_QUOTES

    @property
    def offsets(self) -> tuple[int, int]:
        """(bytes since entering quotes, bytes since leaving quotes)."""
        return self._in_offset, self._out_offset

    def _toggle(self) -> None:
        if self._state is ScanState.IN_QUOTES:
            self._out_offset = 0
            self._state = ScanState.OUT_QUOTES
        else:
            self._in_offset = 0
            self._state = ScanState.IN_QUOTES

    def _increment(self) -> None:
        if self._state is ScanState.IN_QUOTES:
            self._in_offset += 1
        else:
            self._out_offset += 1
