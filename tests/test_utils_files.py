"""Tests for file utility functions."""

from __future__ import annotations

import io
import sys
from pathlib import Path
from unittest.mock import patch

import pytest

from jaesve.utils.files import STDIO, describe_source, open_input, open_output


class TestDescribeSource:
    """Test describe_source function."""

    def test_stdin(self) -> None:
        assert describe_source(STDIO) == "Stdin"

    def test_file_name_only(self) -> None:
        assert describe_source("/some/dir/data.json") == "File: data.json"


class TestOpenInput:
    """Test open_input context manager."""

    def test_reads_file_as_bytes(self, tmp_path: Path) -> None:
        path = tmp_path / "doc.json"
        path.write_bytes(b'{"a": 1}')

        with open_input(str(path)) as stream:
            assert stream.read() == b'{"a": 1}'

    def test_closes_file(self, tmp_path: Path) -> None:
        path = tmp_path / "doc.json"
        path.write_bytes(b"[]")

        with open_input(str(path)) as stream:
            pass

        assert stream.closed

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            with open_input(str(tmp_path / "missing.json")):
                pass

    def test_stdin(self) -> None:
        fake = io.BytesIO(b"[1]")
        with patch("jaesve.utils.files.typer.get_binary_stream", return_value=fake) as mock_stream:
            with open_input(STDIO) as stream:
                assert stream.read() == b"[1]"
        mock_stream.assert_called_once_with("stdin")


class TestOpenOutput:
    """Test open_output context manager."""

    def test_writes_file(self, tmp_path: Path) -> None:
        path = tmp_path / "out.txt"

        with open_output(str(path)) as sink:
            sink.write("a\r\nb\n")

        assert path.read_bytes() == b"a\r\nb\n"

    def test_stdout(self) -> None:
        fake = io.StringIO()
        with patch.object(sys, "stdout", fake):
            with open_output(STDIO) as sink:
                sink.write("line\n")
        assert fake.getvalue() == "line\n"
