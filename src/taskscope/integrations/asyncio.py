"""asyncio instrumentation: task spawn and resource spans for taskscope.

Usage::

    import taskscope
    from taskscope.integrations.asyncio import Barrier, spawn

    taskscope.init()

    async def main():
        barrier = Barrier(2)
        task = spawn(worker(barrier))
        await barrier.wait()
        await task

Spawned tasks get a ``runtime.spawn`` span entered around every step of the
task, and :class:`Barrier` reports itself as a ``runtime.resource`` with
``runtime.resource.async_op`` spans for each ``wait()``.
"""

from __future__ import annotations

import asyncio
import sys
from collections.abc import Coroutine
from typing import Any, TypeVar

from taskscope._instrument import polled
from taskscope._kinds import (
    ASYNC_OP_STATE_UPDATE_TARGET,
    RESOURCE_STATE_UPDATE_TARGET,
)
from taskscope._sdk import _get_sdk
from taskscope._span import Span
from taskscope._types import Level

T = TypeVar("T")

TASK_SPAN_TARGET = "asyncio::task"
BARRIER_TARGET = "asyncio::barrier"


def _location(depth: int) -> list[tuple[str, Any]]:
    frame = sys._getframe(depth + 1)
    return [("loc.file", frame.f_code.co_filename), ("loc.line", frame.f_lineno)]


def spawn(coro: Coroutine[Any, Any, T], *, name: str | None = None) -> asyncio.Task[T]:
    """Schedule ``coro`` as a task wrapped in a ``runtime.spawn`` span.

    Must be called from a running event loop. The span is closed when the
    task finishes, whatever the outcome.
    """
    task_name = name or getattr(coro, "__qualname__", type(coro).__name__)
    span = _get_sdk().create_span(
        "runtime.spawn",
        target=TASK_SPAN_TARGET,
        level=Level.TRACE,
        fields=[("kind", "task"), ("task.name", task_name), *_location(1)],
    )

    async def run() -> T:
        try:
            return await polled(coro, span)
        finally:
            span.close()

    return asyncio.get_running_loop().create_task(run(), name=name)


class Barrier:
    """An :class:`asyncio.Barrier` that reports its state through taskscope.

    The resource span belongs to whichever registry is active: a barrier
    built before :func:`taskscope.init` registers itself on first use after
    it, and one that outlives a re-``init`` moves to the new registry.
    """

    def __init__(self, parties: int) -> None:
        self._barrier = asyncio.Barrier(parties)
        self._location = _location(1)
        self._span: Span | None = None
        self._closed = False
        self._resource()

    @property
    def parties(self) -> int:
        return self._barrier.parties

    @property
    def span(self) -> Span:
        return self._resource()

    async def wait(self) -> int:
        """Wait for all parties; returns this party's arrival index."""
        resource = self._resource()
        sdk = _get_sdk()
        async_op = sdk.create_span(
            "runtime.resource.async_op",
            target=BARRIER_TARGET,
            level=Level.TRACE,
            parent=resource.id,
            fields=[("source", "Barrier::wait"), ("inherits_child_attrs", True)],
        )
        poll = sdk.create_span(
            "runtime.resource.async_op.poll",
            target=BARRIER_TARGET,
            level=Level.TRACE,
            parent=async_op.id,
        )
        try:
            with poll.entered():
                self._state_update(resource, ("arrived", 1), ("arrived.op", "add"))
                sdk.emit_event(
                    Level.TRACE,
                    target=ASYNC_OP_STATE_UPDATE_TARGET,
                    fields=[("is_ready", False)],
                )
            index = await polled(self._barrier.wait(), poll)
            with poll.entered():
                sdk.emit_event(
                    Level.TRACE,
                    target=ASYNC_OP_STATE_UPDATE_TARGET,
                    fields=[("is_ready", True)],
                )
            return index
        finally:
            poll.close()
            async_op.close()

    def close(self) -> None:
        """Close the resource span once the barrier is no longer used."""
        self._closed = True
        if self._span is not None:
            self._span.close()

    def _resource(self) -> Span:
        sdk = _get_sdk()
        if self._span is not None and (self._closed or self._span.registry is sdk.registry):
            return self._span
        if self._span is not None:
            self._span.close()
        self._span = sdk.create_span(
            "runtime.resource",
            target=BARRIER_TARGET,
            level=Level.TRACE,
            parent=None,
            fields=[("concrete_type", "Barrier"), ("kind", "Sync"), *self._location],
        )
        self._state_update(
            self._span,
            ("size", self._barrier.parties),
            ("size.op", "override"),
            ("arrived", self._barrier.n_waiting),
            ("arrived.op", "override"),
        )
        return self._span

    @staticmethod
    def _state_update(resource: Span, *fields: tuple[str, Any]) -> None:
        with resource.entered():
            _get_sdk().emit_event(
                Level.TRACE, target=RESOURCE_STATE_UPDATE_TARGET, fields=fields
            )
