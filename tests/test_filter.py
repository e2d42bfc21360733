"""Tests for RegexFilter."""

from __future__ import annotations

import pytest

from jaesve.config import Column, FormatOptions
from jaesve.errors import ConfigError
from jaesve.flatten.pointer import flatten_value
from jaesve.output.filter import RegexFilter
from jaesve.output.formatter import RecordFormatter, ResolvedRecord

RESOLVED = ResolvedRecord(ident="1", type="Number", pointer="/a/b", value="42", separator=", ")


class TestRegexFilter:
    """Test RegexFilter column selection and matching."""

    @pytest.mark.parametrize(
        ("column", "pattern"),
        [
            (Column.POINTER, r"^/a/"),
            (Column.TYPE, r"^Num"),
            (Column.VALUE, r"^\d+$"),
            (Column.SEPARATOR, r"^, $"),
        ],
    )
    def test_matches_selected_column(self, column: Column, pattern: str) -> None:
        assert RegexFilter(pattern, column).matches(RESOLVED)

    def test_no_match(self) -> None:
        assert not RegexFilter("^x", Column.POINTER).matches(RESOLVED)

    def test_search_not_anchored(self) -> None:
        assert RegexFilter("a/b", Column.POINTER).matches(RESOLVED)

    def test_type_column_with_hidden_type(self) -> None:
        with pytest.raises(ConfigError):
            RegexFilter("Number", Column.TYPE, hide_type=True)

    def test_invalid_pattern(self) -> None:
        with pytest.raises(ConfigError) as excinfo:
            RegexFilter("(unclosed", Column.VALUE)
        assert excinfo.value.__cause__ is not None

    def test_numeric_filter_drops_other_leaves(self) -> None:
        """Only numeric values survive a digits-only value filter."""
        document = {"n": 1, "s": "text", "b": True, "z": None, "list": [2, "3x", 4.5], "o": {"k": 7}}
        formatter = RecordFormatter(FormatOptions())
        numeric = RegexFilter(r"^-?\d+(\.\d+)?$", Column.VALUE)

        kept = [r for r in flatten_value(document) if numeric.matches(formatter.resolve(r))]

        assert [r.pointer for r in kept] == ["/n", "/list/0", "/list/2", "/o/k"]
        assert all(r.value is not None for r in kept)


class TestFromOptions:
    """Test RegexFilter.from_options."""

    def test_no_pattern(self) -> None:
        assert RegexFilter.from_options(FormatOptions(regex_column=Column.POINTER)) is None

    def test_defaults_to_value_column(self) -> None:
        regex_filter = RegexFilter.from_options(FormatOptions(regex_pattern="x"))
        assert regex_filter is not None
        assert regex_filter.column is Column.VALUE

    def test_explicit_column(self) -> None:
        options = FormatOptions(regex_pattern="x", regex_column=Column.SEPARATOR)
        regex_filter = RegexFilter.from_options(options)
        assert regex_filter is not None
        assert regex_filter.column is Column.SEPARATOR

    def test_hidden_type_rejected(self) -> None:
        options = FormatOptions(regex_pattern="x", regex_column=Column.TYPE, hide_type=True)
        with pytest.raises(ConfigError):
            RegexFilter.from_options(options)
