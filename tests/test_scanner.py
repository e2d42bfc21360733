"""Tests for the quote-aware byte scanner."""

from __future__ import annotations

import io

import pytest

from jaesve.ingestion.scanner import QuoteScanner, ScanState, iter_stream_bytes


def _states(data: bytes) -> list[bool]:
    """Return outside_quotes after each byte of data."""
    scanner = QuoteScanner(data)
    result = []
    for _ in scanner:
        result.append(scanner.outside_quotes)
    return result


class TestIterStreamBytes:
    """Test iter_stream_bytes function."""

    def test_yields_every_byte(self) -> None:
        stream = io.BytesIO(b"abcdef")
        assert bytes(iter_stream_bytes(stream, buffer_size=4)) == b"abcdef"

    def test_empty_stream(self) -> None:
        assert list(iter_stream_bytes(io.BytesIO(b""))) == []


class TestQuoteScanner:
    """Test QuoteScanner state tracking."""

    def test_passes_bytes_through(self) -> None:
        data = b'{"a": "b"}'
        assert bytes(QuoteScanner(data)) == data

    def test_initial_state(self) -> None:
        scanner = QuoteScanner(b"")
        assert scanner.outside_quotes
        assert scanner.state is ScanState.OUT_QUOTES
        assert scanner.offsets == (0, 0)

    def test_toggles_on_quotes(self) -> None:
        assert _states(b'a"b"c') == [True, False, False, True, True]

    def test_escaped_quote_does_not_toggle(self) -> None:
        """The document "a\\"b" stays inside quotes until the last quote."""
        data = b'"a\\"b"'
        states = _states(data)
        # bytes: " a \ " b "
        assert states == [False, False, False, False, False, True]

    def test_escaped_backslash_does_not_suppress_quote(self) -> None:
        """In "a\\\\" the quote closes the string."""
        data = b'"a\\\\"x'
        states = _states(data)
        # bytes: " a \ \ " x
        assert states == [False, False, False, False, True, True]

    def test_offsets_count_each_side(self) -> None:
        scanner = QuoteScanner(b'ab"cde"f')
        list(scanner)
        # "cde" counted inside, then "f" after leaving
        assert scanner.offsets == (3, 1)

    def test_offsets_reset_on_entering(self) -> None:
        scanner = QuoteScanner(b'"ab"x"c')
        list(scanner)
        assert scanner.state is ScanState.IN_QUOTES
        assert scanner.offsets == (1, 1)

    def test_quote_bytes_are_not_counted(self) -> None:
        scanner = QuoteScanner(b'""')
        list(scanner)
        assert scanner.offsets == (0, 0)

    def test_source_error_passes_through(self) -> None:
        """A read error is raised unchanged and still advances the counter."""

        def source():
            yield ord("a")
            raise OSError("disk on fire")

        scanner = QuoteScanner(source())
        assert next(scanner) == ord("a")
        with pytest.raises(OSError, match="disk on fire"):
            next(scanner)
        assert scanner.offsets == (0, 2)

    def test_error_clears_escape(self) -> None:
        """A backslash before a failed read does not escape the next quote."""
        class Flaky:
            def __init__(self) -> None:
                self.steps = [ord("\\"), OSError("transient"), ord('"')]

            def __iter__(self):
                return self

            def __next__(self):
                if not self.steps:
                    raise StopIteration
                step = self.steps.pop(0)
                if isinstance(step, Exception):
                    raise step
                return step

        scanner = QuoteScanner(Flaky())
        next(scanner)
        with pytest.raises(OSError):
            next(scanner)
        assert next(scanner) == ord('"')
        assert not scanner.outside_quotes
