"""Context propagation of the currently entered span."""

from __future__ import annotations

from contextvars import ContextVar, Token

_current_span: ContextVar[int | None] = ContextVar("_current_span", default=None)


def get_current_span() -> int | None:
    """Return the id of the entered span in the current context, or None."""
    return _current_span.get()


def set_current_span(span_id: int | None) -> Token[int | None]:
    """Set the entered span and return a token for later restoration."""
    return _current_span.set(span_id)


def reset_current_span(token: Token[int | None]) -> None:
    _current_span.reset(token)
