"""In-process span registry: allocates ids, tracks parents, dispatches to layers."""

from __future__ import annotations

import enum
import itertools
import logging
import threading
from collections.abc import Iterable
from contextvars import Token
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol

from taskscope._context import get_current_span, reset_current_span, set_current_span
from taskscope._errors import SpanNotFoundError
from taskscope._types import Attributes, Event, Metadata

if TYPE_CHECKING:
    from taskscope._layer import Context

logger = logging.getLogger("taskscope.registry")

# Shared by all registries so a stale contextual id never names another span.
_span_ids = itertools.count(1)


class _Current(enum.Enum):
    CURRENT = "current"


CURRENT = _Current.CURRENT
"""Parent marker: use the span entered in the current context."""

Parent = int | None | _Current


class SpanLayer(Protocol):
    """Callbacks a registry invokes on each attached layer."""

    def interested(self, metadata: Metadata) -> bool: ...

    def enabled(self, metadata: Metadata) -> bool: ...

    def on_new_span(self, attrs: Attributes, span_id: int, ctx: Context) -> None: ...

    def on_enter(self, span_id: int, ctx: Context) -> None: ...

    def on_exit(self, span_id: int, ctx: Context) -> None: ...

    def on_close(self, span_id: int, ctx: Context) -> None: ...

    def on_event(self, event: Event, ctx: Context) -> None: ...


@dataclass
class _SpanState:
    metadata: Metadata
    parent: int | None
    refs: int = 1


class Registry:
    """Keeps every open span and forwards lifecycle callbacks to layers.

    A span stays open while its handle or any of its children is open, so a
    child's scope always resolves back to the root.
    """

    def __init__(self, *layers: SpanLayer) -> None:
        self._layers: list[SpanLayer] = list(layers)
        self._spans: dict[int, _SpanState] = {}
        self._lock = threading.Lock()

    def add_layer(self, layer: SpanLayer) -> None:
        self._layers.append(layer)

    @property
    def layers(self) -> list[SpanLayer]:
        return list(self._layers)

    def close(self) -> None:
        """Detach every layer. Handles still pointing here write nothing more."""
        with self._lock:
            self._layers = []
        logger.debug("Registry closed with %d open spans", len(self._spans))

    # -- Lifecycle ---------------------------------------------------------

    def new_span(
        self,
        metadata: Metadata,
        fields: Iterable[tuple[str, Any]] = (),
        *,
        parent: Parent = CURRENT,
    ) -> int:
        """Register a span and notify layers. Returns the new span id."""
        parent_id = self._resolve_parent(parent)
        span_id = next(_span_ids)
        with self._lock:
            if parent_id is not None:
                self._state(parent_id).refs += 1
            self._spans[span_id] = _SpanState(metadata=metadata, parent=parent_id)

        attrs = Attributes(metadata=metadata, fields=tuple(fields), parent=parent_id)
        for layer in self._layers:
            layer.on_new_span(attrs, span_id, self)
        return span_id

    def enter(self, span_id: int) -> Token[int | None]:
        """Make ``span_id`` the current span and notify layers."""
        self._state(span_id)
        token = set_current_span(span_id)
        for layer in self._layers:
            layer.on_enter(span_id, self)
        return token

    def exit(self, span_id: int, token: Token[int | None] | None = None) -> None:
        """Notify layers and restore the span that was current before entering."""
        self._state(span_id)
        for layer in self._layers:
            layer.on_exit(span_id, self)
        if token is not None:
            reset_current_span(token)

    def try_close(self, span_id: int) -> bool:
        """Release one reference to ``span_id``; close it once none are left."""
        with self._lock:
            state = self._state(span_id)
            state.refs -= 1
            if state.refs > 0:
                logger.debug("Span %d still has %d open references", span_id, state.refs)
                return False

        try:
            for layer in self._layers:
                layer.on_close(span_id, self)
        finally:
            with self._lock:
                del self._spans[span_id]
            if state.parent is not None:
                self.try_close(state.parent)
        return True

    def event(
        self,
        metadata: Metadata,
        fields: Iterable[tuple[str, Any]] = (),
        *,
        parent: Parent = CURRENT,
    ) -> None:
        event = Event(
            metadata=metadata,
            fields=tuple(fields),
            parent=self._resolve_parent(parent),
        )
        for layer in self._layers:
            if layer.interested(metadata) and layer.enabled(metadata):
                layer.on_event(event, self)

    # -- Context -----------------------------------------------------------

    def metadata(self, span_id: int) -> Metadata:
        return self._state(span_id).metadata

    def span_scope(self, span_id: int) -> list[int]:
        """Ids from the root down to and including ``span_id``."""
        scope: list[int] = []
        current: int | None = span_id
        with self._lock:
            while current is not None:
                scope.append(current)
                current = self._state(current).parent
        scope.reverse()
        return scope

    def event_scope(self, event: Event) -> list[int]:
        if event.parent is None:
            return []
        return self.span_scope(event.parent)

    def current_span(self) -> int | None:
        """The entered span of the current context, if this registry owns it."""
        span_id = get_current_span()
        if span_id is None or span_id not in self._spans:
            return None
        return span_id

    def __contains__(self, span_id: object) -> bool:
        return span_id in self._spans

    def __len__(self) -> int:
        return len(self._spans)

    def _resolve_parent(self, parent: Parent) -> int | None:
        if parent is CURRENT:
            return self.current_span()
        if parent is not None:
            self._state(parent)
        return parent

    def _state(self, span_id: int) -> _SpanState:
        try:
            return self._spans[span_id]
        except KeyError:
            raise SpanNotFoundError(span_id) from None
