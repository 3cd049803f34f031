"""@instrument decorator for wrapping functions and coroutines in spans."""

from __future__ import annotations

import functools
import inspect
import types
from collections.abc import Callable, Coroutine, Generator
from typing import Any, TypeVar, overload

from taskscope._span import Span
from taskscope._types import Level

F = TypeVar("F", bound=Callable[..., Any])
T = TypeVar("T")


@types.coroutine
def polled(coro: Coroutine[Any, Any, T], span: Span) -> Generator[Any, Any, T]:
    """Drive ``coro``, entering ``span`` around every step it takes.

    Each step is one poll of the coroutine, so the span shows an
    ``enter``/``exit`` pair per resumption rather than one for its whole life.
    """
    send: Any = None
    error: BaseException | None = None
    while True:
        span.enter()
        try:
            if error is not None:
                yielded = coro.throw(error)
            else:
                yielded = coro.send(send)
        except StopIteration as stop:
            return stop.value  # type: ignore[no-any-return]
        finally:
            span.exit()

        try:
            send = yield yielded
            error = None
        except BaseException as exc:  # noqa: BLE001
            send, error = None, exc


@overload
def instrument(func: F) -> F: ...


@overload
def instrument(
    *,
    name: str | None = None,
    target: str | None = None,
    level: Level = Level.INFO,
) -> Callable[[F], F]: ...


def instrument(
    func: F | None = None,
    *,
    name: str | None = None,
    target: str | None = None,
    level: Level = Level.INFO,
) -> F | Callable[[F], F]:
    """Decorator that runs each call of a function inside a new span.

    Can be used with or without arguments::

        @instrument
        def handle_request(): ...

        @instrument(name="fetch", level=Level.DEBUG)
        async def fetch(url): ...

    ``async def`` functions are entered and exited on every resumption.
    """

    def decorator(fn: F) -> F:
        span_name = name or fn.__qualname__
        span_target = target or fn.__module__

        def start_span() -> Span:
            from taskscope._sdk import _get_sdk

            return _get_sdk().create_span(span_name, target=span_target, level=level)

        if inspect.iscoroutinefunction(fn):

            @functools.wraps(fn)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                span = start_span()
                try:
                    return await polled(fn(*args, **kwargs), span)
                finally:
                    span.close()

            return async_wrapper  # type: ignore[return-value]

        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            with start_span():
                return fn(*args, **kwargs)

        return wrapper  # type: ignore[return-value]

    if func is not None:
        return decorator(func)
    return decorator
