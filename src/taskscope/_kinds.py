"""Kind classification for spans and events, and the static color tables."""

from __future__ import annotations

import enum
from dataclasses import dataclass

from taskscope._color import (
    BLUE,
    BLUE_BOLD,
    GREEN,
    GREEN_BOLD,
    ORANGE,
    ORANGE_BOLD,
    PINK,
    PINK_BOLD,
    PURPLE,
    PURPLE_BOLD,
    RED,
    RED_BOLD,
    TURQUOISE,
    TURQUOISE_BOLD,
    WHITE,
    YELLOW,
    YELLOW_BOLD,
    ColorPair,
)

TASK_TARGET = "tokio::task"
WAKER_TARGETS = frozenset({"runtime::waker", "tokio::task::waker"})
POLL_OP_TARGET = "runtime::resource::poll_op"
RESOURCE_STATE_UPDATE_TARGET = "runtime::resource::state_update"
ASYNC_OP_STATE_UPDATE_TARGET = "runtime::resource::async_op::state_update"


class SpanKind(enum.Enum):
    """Classification of a span, fixed at creation."""

    UNKNOWN = "unknown"
    SPAWN = "spawn"
    RESOURCE = "resource"
    ASYNC_OP = "async_op"
    ASYNC_OP_POLL = "async_op_poll"

    @property
    def colors(self) -> ColorPair:
        return _SPAN_COLORS[self]


class EventKind(enum.Enum):
    """Classification of an event, computed from its target."""

    UNKNOWN = "unknown"
    WAKER = "waker"
    POLL_OP = "poll_op"
    RESOURCE_STATE_UPDATE = "resource_state_update"
    ASYNC_OP_UPDATE = "async_op_update"

    @property
    def colors(self) -> ColorPair:
        return _EVENT_COLORS[self]


@dataclass(frozen=True)
class SpanLifecycle:
    """Kind of a new/enter/exit/close line: the notified span's own kind."""

    span_kind: SpanKind

    @property
    def colors(self) -> ColorPair:
        return self.span_kind.colors


_UNKNOWN_COLORS = ColorPair(WHITE, WHITE)

_SPAN_COLORS: dict[SpanKind, ColorPair] = {
    SpanKind.UNKNOWN: _UNKNOWN_COLORS,
    SpanKind.SPAWN: ColorPair(GREEN, GREEN_BOLD),
    SpanKind.RESOURCE: ColorPair(RED, RED_BOLD),
    SpanKind.ASYNC_OP: ColorPair(BLUE, BLUE_BOLD),
    SpanKind.ASYNC_OP_POLL: ColorPair(YELLOW, YELLOW_BOLD),
}

_EVENT_COLORS: dict[EventKind, ColorPair] = {
    EventKind.UNKNOWN: _UNKNOWN_COLORS,
    EventKind.WAKER: ColorPair(PURPLE, PURPLE_BOLD),
    EventKind.POLL_OP: ColorPair(ORANGE, ORANGE_BOLD),
    EventKind.RESOURCE_STATE_UPDATE: ColorPair(PINK, PINK_BOLD),
    EventKind.ASYNC_OP_UPDATE: ColorPair(TURQUOISE, TURQUOISE_BOLD),
}

_SPAN_NAMES: dict[str, SpanKind] = {
    "runtime.spawn": SpanKind.SPAWN,
    "runtime.resource": SpanKind.RESOURCE,
    "runtime.resource.async_op": SpanKind.ASYNC_OP,
    "runtime.resource.async_op.poll": SpanKind.ASYNC_OP_POLL,
}

_EVENT_TARGETS: dict[str, EventKind] = {
    **{target: EventKind.WAKER for target in WAKER_TARGETS},
    POLL_OP_TARGET: EventKind.POLL_OP,
    RESOURCE_STATE_UPDATE_TARGET: EventKind.RESOURCE_STATE_UPDATE,
    ASYNC_OP_STATE_UPDATE_TARGET: EventKind.ASYNC_OP_UPDATE,
}


def classify_span(name: str, target: str) -> SpanKind:
    """Map a span's name and target to its kind. Exact matches only."""
    if name == "task" and target == TASK_TARGET:
        return SpanKind.SPAWN
    return _SPAN_NAMES.get(name, SpanKind.UNKNOWN)


def classify_event(target: str) -> EventKind:
    """Map an event's target to its kind. Exact matches only."""
    return _EVENT_TARGETS.get(target, EventKind.UNKNOWN)
