"""taskscope: colorized, single-line console output for spans and events."""

from __future__ import annotations

import sys
from typing import Any

from taskscope._config import LayerConfig
from taskscope._errors import InvariantViolation, MissingSpanRecordError, SpanNotFoundError
from taskscope._instrument import instrument
from taskscope._kinds import EventKind, SpanKind, classify_event, classify_span
from taskscope._layer import Layer, layer
from taskscope._registry import CURRENT, Parent, Registry
from taskscope._sdk import _get_sdk, init, shutdown
from taskscope._span import Span
from taskscope._types import Attributes, Event, Level, Metadata

__version__ = "0.1.0"

__all__ = [
    "CURRENT",
    "Attributes",
    "Event",
    "EventKind",
    "InvariantViolation",
    "Layer",
    "LayerConfig",
    "Level",
    "Metadata",
    "MissingSpanRecordError",
    "Registry",
    "Span",
    "SpanKind",
    "SpanNotFoundError",
    "__version__",
    "classify_event",
    "classify_span",
    "debug",
    "error",
    "event",
    "info",
    "init",
    "instrument",
    "layer",
    "shutdown",
    "span",
    "trace",
    "warn",
]


def _caller_target(stacklevel: int) -> str:
    """Module name of the frame ``stacklevel`` calls above the caller."""
    frame = sys._getframe(stacklevel + 1)
    return str(frame.f_globals.get("__name__", "__main__"))


def span(
    name: str,
    *,
    target: str | None = None,
    level: Level = Level.INFO,
    parent: Parent = CURRENT,
    **fields: Any,
) -> Span:
    """Create a span. Its ``new`` line is written immediately.

    Usage::

        with taskscope.span("load", path="data.csv"):
            taskscope.info("reading")

    ``target`` defaults to the calling module's name.
    """
    sdk = _get_sdk()
    return sdk.create_span(
        name,
        target=target or _caller_target(1),
        level=level,
        parent=parent,
        fields=fields.items(),
    )


def event(
    level: Level,
    message: str | None = None,
    *,
    target: str | None = None,
    parent: Parent = CURRENT,
    stacklevel: int = 1,
    **fields: Any,
) -> None:
    """Write one event line.

    Usage::

        taskscope.event(Level.INFO, "my message", field="value")

    Fields are written in keyword order, followed by the message.
    """
    pairs: list[tuple[str, Any]] = list(fields.items())
    if message is not None:
        pairs.append(("message", message))
    _get_sdk().emit_event(
        level,
        target=target or _caller_target(stacklevel),
        parent=parent,
        fields=pairs,
    )


def trace(message: str | None = None, **fields: Any) -> None:
    event(Level.TRACE, message, stacklevel=2, **fields)


def debug(message: str | None = None, **fields: Any) -> None:
    event(Level.DEBUG, message, stacklevel=2, **fields)


def info(message: str | None = None, **fields: Any) -> None:
    event(Level.INFO, message, stacklevel=2, **fields)


def warn(message: str | None = None, **fields: Any) -> None:
    event(Level.WARN, message, stacklevel=2, **fields)


def error(message: str | None = None, **fields: Any) -> None:
    event(Level.ERROR, message, stacklevel=2, **fields)
