"""Span and event formatting: one colorized line per event or lifecycle step."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timezone

from rich.style import Style

from taskscope._color import WHITE, paint
from taskscope._fields import RecordedFields
from taskscope._kinds import (
    EventKind,
    SpanKind,
    SpanLifecycle,
    classify_event,
    classify_span,
)
from taskscope._types import Level, Metadata

_TIMESTAMP_DIM = Style(dim=True)
_TIMESTAMP_BOLD = Style(color=WHITE, bold=True, dim=True)


@dataclass(frozen=True)
class SpanRecord:
    """A span's classification and its rendering, computed once at creation.

    The rendering is never refreshed: fields recorded on the span after it
    was created do not show up in scope prefixes.
    """

    span_id: int
    kind: SpanKind
    name: str
    fields: RecordedFields
    formatted: str

    @classmethod
    def create(
        cls,
        span_id: int,
        metadata: Metadata,
        fields: RecordedFields,
        *,
        ansi: bool = True,
    ) -> SpanRecord:
        kind = classify_span(metadata.name, metadata.target)
        colors = kind.colors
        base = Style(color=colors.base)
        bold_id = Style(color=colors.bold, bold=True)

        # The id is nested inside the base-colored text.
        formatted = (
            paint(f"{metadata.name}[", base, ansi=ansi)
            + paint(str(span_id), bold_id, ansi=ansi)
            + paint(f"]{{{fields.formatted_updated()}}}", base, ansi=ansi)
        )
        return cls(
            span_id=span_id,
            kind=kind,
            name=metadata.name,
            fields=fields,
            formatted=formatted,
        )

    def rendering(self) -> str:
        return self.formatted


def format_scope(records: Iterable[SpanRecord]) -> str:
    """Concatenate root-to-leaf span renderings, each followed by a space."""
    return "".join(f"{record.rendering()} " for record in records)


def format_timestamp(timestamp: datetime, *, ansi: bool = True) -> str:
    """Render ``timestamp`` as ``YYYY-MM-DDTHH:MM:SS.ffffffZ`` in UTC."""
    ts = timestamp.astimezone(timezone.utc)
    return (
        paint(ts.strftime("%Y-%m-%d"), _TIMESTAMP_BOLD, ansi=ansi)
        + paint("T", _TIMESTAMP_DIM, ansi=ansi)
        + paint(ts.strftime("%H:%M:%S"), _TIMESTAMP_BOLD, ansi=ansi)
        + paint(ts.strftime(".%fZ"), _TIMESTAMP_DIM, ansi=ansi)
    )


def format_level(level: Level, *, ansi: bool = True) -> str:
    return paint(level.token, Style(color=level.color), ansi=ansi)


@dataclass
class EventRecord:
    """An event or span lifecycle notification, formatted and then dropped."""

    timestamp: datetime
    kind: EventKind | SpanLifecycle
    metadata: Metadata
    scope: str
    fields: RecordedFields
    ansi: bool = True

    @classmethod
    def for_event(
        cls,
        timestamp: datetime,
        metadata: Metadata,
        scope: str,
        fields: RecordedFields,
        *,
        ansi: bool = True,
    ) -> EventRecord:
        return cls(
            timestamp=timestamp,
            kind=classify_event(metadata.target),
            metadata=metadata,
            scope=scope,
            fields=fields,
            ansi=ansi,
        )

    @classmethod
    def for_span(
        cls,
        timestamp: datetime,
        span: SpanRecord,
        metadata: Metadata,
        scope: str,
        message: str,
        *,
        ansi: bool = True,
    ) -> EventRecord:
        """Synthesize a ``new``/``enter``/``exit``/``close`` notification."""
        return cls(
            timestamp=timestamp,
            kind=SpanLifecycle(span.kind),
            metadata=metadata,
            scope=scope,
            fields=RecordedFields.with_message(message),
            ansi=ansi,
        )

    @property
    def is_lifecycle(self) -> bool:
        return isinstance(self.kind, SpanLifecycle)

    def formatted(self) -> str:
        colors = self.kind.colors
        timestamp = format_timestamp(self.timestamp, ansi=self.ansi)
        level = format_level(self.metadata.level, ansi=self.ansi)
        body = self.fields.formatted_updated()

        if self.is_lifecycle:
            message = paint(
                body,
                Style(color=colors.bold, bold=True, underline=True),
                ansi=self.ansi,
            )
            return f"{timestamp} {level} {self.scope}{message}"

        target = paint(
            self.metadata.target, Style(color=colors.bold, bold=True), ansi=self.ansi
        )
        fields = paint(body, Style(color=colors.base), ansi=self.ansi)
        return f"{timestamp} {level} {self.scope}{target}: {fields}"
