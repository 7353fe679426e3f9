"""Streaming adapter - converts a sequence of records inside a document envelope.

Usage:
    # push style; fragments are returned, and sent to `output` as they are emitted
    with converter.stream("<People>", "</People>", output=out) as s:
        s.write(record)
        s.write([record, record])  # a batch

    # per-fragment callback
    stream = converter.stream("<People>", "</People>", output=chunks.append)

    # pull style
    for chunk in converter.stream(document_open="<People>").transform(records):
        ...
"""

from __future__ import annotations

import logging
from typing import (
    TYPE_CHECKING,
    Any,
    Callable,
    Iterable,
    Iterator,
    List,
    Optional,
    Sequence,
    TextIO,
    Union,
)

from jinxml.exceptions import StreamClosedError

if TYPE_CHECKING:
    from jinxml.converter import Converter

log = logging.getLogger(__name__)

Fragments = Union[str, Sequence[str], None]
Output = Union[TextIO, Callable[[str], Any], None]


def _as_fragments(value: Fragments) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    return list(value)


class XmlStream:
    """Incremental transform: records in, XML fragments out.

    The opening envelope precedes the first record's XML and the closing
    envelope follows the last. Records are converted one at a time and
    emitted immediately, in input order. A conversion error fails the
    stream; fragments already emitted are not taken back.
    """

    def __init__(
        self,
        converter: "Converter",
        document_open: Fragments = None,
        document_close: Fragments = None,
        output: Output = None,
    ):
        """Initialize the stream.

        Args:
            converter: Converts each record.
            document_open: Fragment(s) emitted before the first record.
            document_close: Fragment(s) emitted after the last record.
            output: A text file object, or a callable taking one fragment.
                Every fragment is sent there the moment it is emitted.
        """
        self.converter = converter
        self.document_open = _as_fragments(document_open)
        self.document_close = _as_fragments(document_close)
        self.output = output
        self._sink: Optional[Callable[[str], Any]] = (
            output if output is None or callable(output) else output.write
        )
        self.records = 0
        self._started = False
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def write(self, unit: Any) -> List[str]:
        """Convert one unit (a record, or a list/tuple of records).

        If a record in the unit fails, the error propagates and nothing is
        returned. The fragments emitted before the failure, including the
        opening envelope, have already been sent to `output`; pass an
        `output` (or use `transform()`) when a failed unit must not lose them.

        Returns:
            The fragments emitted for this unit, the opening envelope first
            when this is the first unit.

        Raises:
            StreamClosedError: If the stream has ended or failed.
        """
        return list(self._iter_unit(unit))

    def end(self) -> List[str]:
        """Emit the closing envelope and end the stream.

        Raises:
            StreamClosedError: If the stream has already ended or failed.
        """
        return list(self._iter_end())

    def transform(self, units: Iterable[Any]) -> Iterator[str]:
        """Pull-style transform over an iterable of units."""
        for unit in units:
            yield from self._iter_unit(unit)
        yield from self._iter_end()

    def _iter_unit(self, unit: Any) -> Iterator[str]:
        if self._closed:
            raise StreamClosedError()

        if not self._started:
            self._started = True
            log.debug("Opening document envelope")
            yield from self._emit(self.document_open)

        batch = unit if isinstance(unit, (list, tuple)) else [unit]
        for record in batch:
            try:
                xml = self.converter.convert(record)
            except Exception:
                self._closed = True
                log.debug("Stream failed after %d records", self.records)
                raise
            self.records += 1
            yield from self._emit([xml])

    def _iter_end(self) -> Iterator[str]:
        if self._closed:
            raise StreamClosedError()

        if not self._started:
            # nothing was written: still emit a complete envelope
            self._started = True
            yield from self._emit(self.document_open)

        self._closed = True
        log.debug("Closing document envelope after %d records", self.records)
        yield from self._emit(self.document_close)

    def _emit(self, chunks: List[str]) -> Iterator[str]:
        for chunk in chunks:
            if self._sink is not None:
                self._sink(chunk)
            yield chunk

    def __enter__(self) -> "XmlStream":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None and not self._closed:
            self.end()
        else:
            # leave the document truncated rather than closing a broken envelope
            self._closed = True
