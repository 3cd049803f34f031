"""SDK singleton: owns the global registry and its formatting layer."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any, TextIO

from taskscope._config import LayerConfig
from taskscope._layer import Layer
from taskscope._registry import CURRENT, Parent, Registry
from taskscope._span import Span
from taskscope._types import Level, Metadata

logger = logging.getLogger("taskscope.sdk")

_sdk_instance: _TaskscopeSDK | None = None


class _TaskscopeSDK:
    """Internal SDK singleton. Not part of the public API."""

    def __init__(self, config: LayerConfig, *, stream: TextIO | None = None) -> None:
        self.config = config
        self.layer = Layer(config, stream=stream)
        self.registry: Registry | None = Registry(self.layer)

    def shutdown(self) -> None:
        if self.registry is not None:
            self.registry.close()
        self.registry = None

    def create_span(
        self,
        name: str,
        *,
        target: str,
        level: Level = Level.INFO,
        parent: Parent = CURRENT,
        fields: Iterable[tuple[str, Any]] = (),
    ) -> Span:
        """Create a span registered with the global registry."""
        metadata = Metadata(name=name, target=target, level=level, is_span=True)
        return Span(metadata, fields, registry=self.registry, parent=parent)

    def emit_event(
        self,
        level: Level,
        *,
        target: str,
        parent: Parent = CURRENT,
        fields: Iterable[tuple[str, Any]] = (),
    ) -> None:
        if self.registry is None:
            return
        metadata = Metadata(name=f"event {target}", target=target, level=level)
        self.registry.event(metadata, fields, parent=parent)


class _NoopSDK:
    """Fallback used when the SDK is not initialized. Nothing is written."""

    registry: Registry | None = None

    def create_span(
        self,
        name: str,
        *,
        target: str,
        level: Level = Level.INFO,
        parent: Parent = CURRENT,
        fields: Iterable[tuple[str, Any]] = (),
    ) -> Span:
        metadata = Metadata(name=name, target=target, level=level, is_span=True)
        return Span(metadata, registry=None)

    def emit_event(
        self,
        level: Level,
        *,
        target: str,
        parent: Parent = CURRENT,
        fields: Iterable[tuple[str, Any]] = (),
    ) -> None:
        return None


_noop = _NoopSDK()


def _get_sdk() -> _TaskscopeSDK | _NoopSDK:
    """Return the active SDK or a noop fallback."""
    if _sdk_instance is not None:
        return _sdk_instance
    return _noop


def init(*, ansi: bool = True, stream: TextIO | None = None) -> None:
    """Initialize taskscope: spans and events are written from now on.

    ``stream`` defaults to standard output. Calling ``init`` again replaces
    the previous registry.
    """
    global _sdk_instance  # noqa: PLW0603

    if _sdk_instance is not None:
        _sdk_instance.shutdown()

    config = LayerConfig(ansi=ansi)
    _sdk_instance = _TaskscopeSDK(config, stream=stream)
    logger.debug("taskscope initialized (ansi=%s)", ansi)


def shutdown() -> None:
    """Stop writing spans and events."""
    global _sdk_instance  # noqa: PLW0603
    if _sdk_instance is not None:
        _sdk_instance.shutdown()
        _sdk_instance = None
        logger.debug("taskscope shut down")
