"""Formatting layer: turns registry callbacks into lines on stdout."""

from __future__ import annotations

import logging
import sys
import threading
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Protocol, TextIO

from taskscope._config import LayerConfig
from taskscope._errors import MissingSpanRecordError
from taskscope._fields import RecordedFields
from taskscope._format import EventRecord, SpanRecord, format_scope

if TYPE_CHECKING:
    from taskscope._types import Attributes, Event, Metadata

logger = logging.getLogger("taskscope.layer")


class Context(Protocol):
    """Read access to the registry a layer is attached to."""

    def metadata(self, span_id: int) -> Metadata: ...

    def span_scope(self, span_id: int) -> list[int]: ...

    def event_scope(self, event: Event) -> list[int]: ...


class SpanRecordStore:
    """Span id to :class:`SpanRecord` mapping owned by one layer.

    Each id is inserted once under the lock; afterwards the record is only
    read, so lookups take no lock.
    """

    def __init__(self) -> None:
        self._records: dict[int, SpanRecord] = {}
        self._lock = threading.Lock()

    def insert(self, record: SpanRecord) -> bool:
        """Store ``record`` unless its id already has one. Returns True if stored."""
        with self._lock:
            if record.span_id in self._records:
                return False
            self._records[record.span_id] = record
            return True

    def get(self, span_id: int) -> SpanRecord:
        try:
            return self._records[span_id]
        except KeyError:
            raise MissingSpanRecordError(span_id) from None

    def remove(self, span_id: int) -> None:
        with self._lock:
            self._records.pop(span_id, None)

    def __contains__(self, span_id: object) -> bool:
        return span_id in self._records

    def __len__(self) -> int:
        return len(self._records)


class LineWriter:
    """Writes complete lines to a stream, one writer at a time.

    Without an explicit stream, ``sys.stdout`` is looked up on every write.
    """

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream
        self._lock = threading.Lock()

    @property
    def stream(self) -> TextIO:
        return self._stream if self._stream is not None else sys.stdout

    def write_line(self, line: str) -> None:
        stream = self.stream
        with self._lock:
            stream.write(f"{line}\n")
            stream.flush()


def _now() -> datetime:
    return datetime.now(timezone.utc)


class Layer:
    """Writes every span lifecycle step and event as one colorized line.

    Usage::

        registry = Registry(Layer())
        span_id = registry.new_span(Metadata("my.span", "app", is_span=True))

    Nothing is filtered: every span and event is written.
    """

    def __init__(
        self,
        config: LayerConfig | None = None,
        *,
        stream: TextIO | None = None,
    ) -> None:
        self.config = config if config is not None else LayerConfig()
        self._records = SpanRecordStore()
        self._writer = LineWriter(stream)

    @property
    def records(self) -> SpanRecordStore:
        return self._records

    def interested(self, metadata: Metadata) -> bool:
        return True

    def enabled(self, metadata: Metadata) -> bool:
        return True

    def on_new_span(self, attrs: Attributes, span_id: int, ctx: Context) -> None:
        now = _now()
        if span_id in self._records:
            logger.debug("Ignoring repeated creation of span %d", span_id)
            return

        fields = RecordedFields.for_span()
        fields.record_all(attrs.fields)
        record = SpanRecord.create(
            span_id, attrs.metadata, fields, ansi=self.config.ansi
        )
        if not self._records.insert(record):
            logger.debug("Span %d was created concurrently, keeping first", span_id)
            return

        self._span_event(now, span_id, ctx, "new")

    def on_enter(self, span_id: int, ctx: Context) -> None:
        self._span_event(_now(), span_id, ctx, "enter")

    def on_exit(self, span_id: int, ctx: Context) -> None:
        self._span_event(_now(), span_id, ctx, "exit")

    def on_close(self, span_id: int, ctx: Context) -> None:
        self._span_event(_now(), span_id, ctx, "close")
        self._records.remove(span_id)

    def on_event(self, event: Event, ctx: Context) -> None:
        now = _now()
        fields = RecordedFields.for_event()
        fields.record_all(event.fields)
        scope = self._formatted_scope(ctx.event_scope(event))
        fmt_event = EventRecord.for_event(
            now, event.metadata, scope, fields, ansi=self.config.ansi
        )
        self._writer.write_line(fmt_event.formatted())

    def _span_event(
        self, now: datetime, span_id: int, ctx: Context, message: str
    ) -> None:
        span = self._records.get(span_id)
        scope = self._formatted_scope(ctx.span_scope(span_id))
        fmt_event = EventRecord.for_span(
            now, span, ctx.metadata(span_id), scope, message, ansi=self.config.ansi
        )
        self._writer.write_line(fmt_event.formatted())

    def _formatted_scope(self, scope: list[int]) -> str:
        return format_scope(self._records.get(span_id) for span_id in scope)


def layer() -> Layer:
    """Create a formatting :class:`Layer` with the default configuration."""
    return Layer()
