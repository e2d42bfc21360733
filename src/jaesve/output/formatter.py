"""Rendering records into delimited text lines."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from jaesve.config import Field, FormatOptions
from jaesve.models import NO_VALUE, Record


@dataclass(slots=True, frozen=True)
class ResolvedRecord:
    """Textual field values of a record, before guards are applied."""

    ident: str
    type: str
    pointer: str
    value: str
    separator: str

    def get(self, field: Field) -> str:
        if field is Field.IDENT:
            return self.ident
        if field is Field.TYPE:
            return self.type
        if field is Field.POINTER:
            return self.pointer
        return self.value


class RecordFormatter:
    """Turns records into output lines under a fixed set of options.

    ``show_ident`` controls the identifier column, which is only present
    when several documents share one output.
    """

    def __init__(self, options: FormatOptions, *, show_ident: bool = False) -> None:
        self.options = options
        self.show_ident = show_ident
        self.fields = tuple(f for f in options.fields if self._visible(f))

    def _visible(self, field: Field) -> bool:
        if field is Field.IDENT:
            return self.show_ident
        if field is Field.TYPE:
            return not self.options.hide_type
        return True

    def resolve(self, record: Record) -> ResolvedRecord:
        return ResolvedRecord(
            ident=str(record.identifier),
            type=str(record.type),
            pointer=record.pointer,
            value=NO_VALUE if record.value is None else record.value,
            separator=self.options.separator,
        )

    def render(self, resolved: ResolvedRecord) -> str:
        """Assemble a complete line, including the record delimiters."""
        return self._line(resolved.get(f) for f in self.fields)

    def format(self, record: Record) -> str:
        return self.render(self.resolve(record))

    def header(self) -> str:
        return self._line(f.value.upper() for f in self.fields)

    def _line(self, parts: Iterable[str]) -> str:
        opts = self.options
        guarded = (f"{opts.left_delimiter}{part}{opts.right_delimiter}" for part in parts)
        return f"{opts.begin_record}{opts.separator.join(guarded)}{opts.end_record}"


def format_record(record: Record, options: FormatOptions, show_ident: bool = False) -> str:
    """Render a single record without building a reusable formatter."""
    return RecordFormatter(options, show_ident=show_ident).format(record)
