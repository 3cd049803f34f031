"""Span handle: the user-facing side of a registered span."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from contextvars import ContextVar, Token
from types import TracebackType
from typing import TYPE_CHECKING, Any

from taskscope._registry import CURRENT, Parent
from taskscope._types import Metadata

if TYPE_CHECKING:
    from taskscope._registry import Registry

# Tokens from Span.enter(), innermost last. Each context keeps its own stack.
_entered: ContextVar[tuple[tuple[int, Token[int | None]], ...]] = ContextVar(
    "_entered", default=()
)


class Span:
    """Handle to one span in a registry.

    Creating the handle registers the span, which writes its ``new`` line.
    Used as a context manager the span is entered, exited and closed::

        with Span(Metadata("load", "app", is_span=True), registry=reg):
            ...

    A handle without a registry does nothing.
    """

    def __init__(
        self,
        metadata: Metadata,
        fields: Iterable[tuple[str, Any]] = (),
        *,
        registry: Registry | None,
        parent: Parent = CURRENT,
    ) -> None:
        self.metadata = metadata
        self._registry = registry
        self._closed = False

        self.id: int | None = None
        if registry is not None:
            self.id = registry.new_span(metadata, fields, parent=parent)

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def registry(self) -> Registry | None:
        return self._registry

    @property
    def is_closed(self) -> bool:
        return self._closed

    def enter(self) -> None:
        """Make this span current until the matching :meth:`exit`.

        Enter and exit pair up per context, so one span can be entered from
        several tasks or threads at once.
        """
        if self._registry is None or self.id is None:
            return
        token = self._registry.enter(self.id)
        _entered.set((*_entered.get(), (self.id, token)))

    def exit(self) -> None:
        if self._registry is None or self.id is None:
            return
        stack = _entered.get()
        token: Token[int | None] | None = None
        for i in range(len(stack) - 1, -1, -1):
            if stack[i][0] == self.id:
                token = stack[i][1]
                _entered.set(stack[:i] + stack[i + 1 :])
                break
        self._registry.exit(self.id, token)

    def close(self) -> None:
        """Release the handle. Safe to call more than once."""
        if self._registry is None or self.id is None or self._closed:
            return
        self._closed = True
        self._registry.try_close(self.id)

    @contextmanager
    def entered(self) -> Iterator[Span]:
        """Enter the span for the duration of a ``with`` block, without closing it."""
        if self._registry is None or self.id is None:
            yield self
            return
        token = self._registry.enter(self.id)
        try:
            yield self
        finally:
            self._registry.exit(self.id, token)

    def __enter__(self) -> Span:
        self.enter()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.exit()
        self.close()

    def __repr__(self) -> str:
        return f"Span(name={self.name!r}, id={self.id!r})"
