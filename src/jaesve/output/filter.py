"""Regex based record filtering."""

from __future__ import annotations

import logging

import regex

from jaesve.config import Column, FormatOptions
from jaesve.errors import ConfigError
from jaesve.output.formatter import ResolvedRecord

LOGGER = logging.getLogger(__name__)


class RegexFilter:
    """Keeps records whose selected column matches a pattern."""

    def __init__(self, pattern: str, column: Column, *, hide_type: bool = False) -> None:
        if column is Column.TYPE and hide_type:
            raise ConfigError("Cannot filter on the type column while type output is hidden")
        try:
            self.pattern = regex.compile(pattern)
        except regex.error as exc:
            raise ConfigError(f"Invalid regex {pattern!r}") from exc
        self.column = column

    @classmethod
    def from_options(cls, options: FormatOptions) -> "RegexFilter | None":
        """Build a filter when a pattern is configured; the column defaults to value."""
        if options.regex_pattern is None:
            return None
        column = options.regex_column or Column.VALUE
        LOGGER.debug("Filtering %s column on %r", column.value, options.regex_pattern)
        return cls(options.regex_pattern, column, hide_type=options.hide_type)

    def select(self, resolved: ResolvedRecord) -> str:
        if self.column is Column.POINTER:
            return resolved.pointer
        if self.column is Column.TYPE:
            return resolved.type
        if self.column is Column.SEPARATOR:
            return resolved.separator
        return resolved.value

    def matches(self, resolved: ResolvedRecord) -> bool:
        return self.pattern.search(self.select(resolved)) is not None
