"""Document conversion pipeline."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import BinaryIO, Iterator, Sequence, TextIO

from jaesve.config import AppConfig
from jaesve.errors import DocumentParseError, OutputError, SourceError, format_error_chain
from jaesve.flatten.pointer import flatten
from jaesve.ingestion.framing import parse_document, read_whole, split_documents
from jaesve.models import Document
from jaesve.output.filter import RegexFilter
from jaesve.output.formatter import RecordFormatter
from jaesve.utils.files import describe_source, open_input

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class ConvertStats:
    documents: int = 0
    records: int = 0
    filtered: int = 0
    skipped: int = 0
    failed: int = 0
    processed_sources: list[str] = field(default_factory=list)
    failures: list[tuple[str, str]] = field(default_factory=list)

    def increment(self, status: str, source: str, reason: str | None = None) -> None:
        if status == "failed":
            self.failed += 1
            self.failures.append((source, reason or "unknown error"))
        self.processed_sources.append(source)

    @property
    def ok(self) -> bool:
        return self.failed == 0


class Converter:
    """Flattens documents from input sources and writes them to one sink.

    The converter owns the document identifier counter. In line mode the
    counter starts at the configured offset and restarts for each source
    unless ``carry_ident`` is set.
    """

    def __init__(self, config: AppConfig, sink: TextIO | None = None) -> None:
        config.validate()
        self.config = config
        self.sink = sink
        self.formatter = RecordFormatter(config.format, show_ident=self.multi_document)
        self.regex_filter = RegexFilter.from_options(config.format)
        self.stats = ConvertStats()
        self._next_ident = self._first_ident
        self._header_written = False

    @property
    def multi_document(self) -> bool:
        return self.config.multi_document is not None

    @property
    def _first_ident(self) -> int:
        if self.config.multi_document is None:
            return 1
        return self.config.multi_document

    def _take_ident(self) -> int:
        ident = self._next_ident
        self._next_ident += 1
        return ident

    def _write(self, line: str) -> None:
        if self.sink is None:
            raise OutputError("No output sink configured")
        try:
            self.sink.write(line)
        except (OSError, ValueError) as exc:
            # ValueError covers encoding failures and closed sinks
            raise OutputError("Failed to write output") from exc

    def write_header(self) -> None:
        if self.config.format.header and not self._header_written:
            self._write(self.formatter.header())
            self._header_written = True

    def documents(self, stream: BinaryIO, source: str) -> Iterator[Document]:
        """Yield the parsed documents of one source."""
        base_path = self.config.base_path
        if not self.multi_document:
            try:
                raw = read_whole(stream, self.config.input_buffer_size)
            except OSError as exc:
                raise SourceError(f"Failed to read {source}", source) from exc
            yield Document(self._take_ident(), parse_document(raw, source), base_path)
            return

        frames = split_documents(
            stream, eol=self.config.eol_bytes, buffer_size=self.config.input_buffer_size
        )
        while True:
            try:
                raw = next(frames)
            except StopIteration:
                return
            except OSError as exc:
                raise SourceError(f"Failed to read {source}", source) from exc

            ident = self._take_ident()
            if not raw.strip():
                LOGGER.debug("Skipping blank document %d of %s", ident, source)
                continue
            try:
                value = parse_document(raw, source)
            except DocumentParseError as exc:
                LOGGER.warning("Skipping document %d of %s: %s", ident, source, format_error_chain(exc))
                self.stats.skipped += 1
                continue
            yield Document(ident, value, base_path)

    def emit(self, document: Document) -> int:
        """Write every record of a document that passes the filter."""
        written = 0
        for record in flatten(document):
            resolved = self.formatter.resolve(record)
            if self.regex_filter is not None and not self.regex_filter.matches(resolved):
                self.stats.filtered += 1
                continue
            # A line is built in full before it is written
            self._write(self.formatter.render(resolved))
            written += 1
        self.stats.records += written
        return written

    def convert_stream(self, stream: BinaryIO, source: str) -> None:
        if not self.config.carry_ident:
            self._next_ident = self._first_ident
        for document in self.documents(stream, source):
            self.stats.documents += 1
            count = self.emit(document)
            LOGGER.debug("Document %d of %s produced %d records", document.identifier, source, count)

    def convert_source(self, name: str) -> None:
        """Convert a single named input, where '-' is stdin."""
        label = describe_source(name)
        try:
            with open_input(name, self.config.input_buffer_size) as stream:
                self.convert_stream(stream, label)
        except OSError as exc:
            raise SourceError(f"{name} could not be opened", label) from exc

    def convert_sources(self, names: Sequence[str], sink: TextIO | None = None) -> ConvertStats:
        """Process sources in order; a failed source does not stop the run."""
        if sink is not None:
            self.sink = sink
        self.write_header()
        for name in names:
            try:
                self.convert_source(name)
            except (SourceError, OutputError) as exc:
                reason = format_error_chain(exc)
                LOGGER.error("Failed to process %s: %s", name, reason)
                self.stats.increment("failed", name, reason)
                continue
            LOGGER.info("Finished %s", describe_source(name))
            self.stats.increment("ok", name)
        return self.stats
