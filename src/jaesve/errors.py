"""Exception types raised by jaesve."""

from __future__ import annotations


class JaesveError(Exception):
    """Base class for all jaesve errors."""


class ConfigError(JaesveError):
    """Invalid configuration, detected before any input is read."""


class SourceError(JaesveError):
    """A single input source could not be processed."""

    def __init__(self, message: str, source: str = "<unknown>") -> None:
        super().__init__(message)
        self.source = source


class DocumentParseError(SourceError):
    """A document was not valid JSON."""


class OutputError(JaesveError):
    """Writing to the output sink failed."""


def _cause_of(exc: BaseException) -> BaseException | None:
    if exc.__cause__ is not None:
        return exc.__cause__
    if exc.__suppress_context__:
        return None
    return exc.__context__


def format_error_chain(exc: BaseException) -> str:
    """Render an exception followed by each of its causes, innermost last."""
    parts = [str(exc) or type(exc).__name__]
    seen = {id(exc)}
    cause = _cause_of(exc)
    while cause is not None and id(cause) not in seen:
        seen.add(id(cause))
        parts.append(str(cause) or type(cause).__name__)
        cause = _cause_of(cause)
    return ": ".join(parts)
