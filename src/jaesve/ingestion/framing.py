"""Splitting raw input into JSON documents and decoding them."""

from __future__ import annotations

import json
import logging
from typing import Any, BinaryIO, Iterator

from jaesve.errors import DocumentParseError
from jaesve.ingestion.scanner import DEFAULT_INPUT_BUFFER, QuoteScanner, iter_stream_bytes

LOGGER = logging.getLogger(__name__)


def split_documents(
    stream: BinaryIO, *, eol: bytes = b"\n", buffer_size: int = DEFAULT_INPUT_BUFFER
) -> Iterator[bytes]:
    """Yield one raw document per EOL byte found outside quotes.

    A trailing document without a final EOL is yielded as well.
    """
    if len(eol) != 1:
        raise ValueError(f"EOL must be a single byte, got {eol!r}")
    eol_byte = eol[0]

    scanner = QuoteScanner(iter_stream_bytes(stream, buffer_size))
    buffer = bytearray()
    count = 0
    for byte in scanner:
        if byte == eol_byte and scanner.outside_quotes:
            count += 1
            yield bytes(buffer)
            buffer.clear()
            continue
        buffer.append(byte)

    if buffer:
        count += 1
        yield bytes(buffer)
    if not scanner.outside_quotes:
        LOGGER.debug("Input ended inside a quoted string after %d documents", count)


def read_whole(stream: BinaryIO, buffer_size: int = DEFAULT_INPUT_BUFFER) -> bytes:
    """Read everything left in a stream."""
    return b"".join(iter(lambda: stream.read(buffer_size), b""))


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Invalid JSON constant {name!r}")


def parse_document(raw: bytes | str, source: str = "<unknown>") -> Any:
    """Decode one JSON document, preserving object key order."""
    try:
        return json.loads(raw, parse_constant=_reject_constant)
    except (ValueError, RecursionError) as exc:
        # JSONDecodeError and UnicodeDecodeError derive from ValueError.
        # Deeply nested input exhausts the decoder stack.
        raise DocumentParseError(f"Failed to parse JSON from {source}", source) from exc
