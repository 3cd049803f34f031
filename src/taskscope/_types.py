"""Core types: levels, callsite metadata and the data handed to layers."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any

from rich.color import Color

from taskscope._color import BLUE, GREEN, PURPLE, RED, YELLOW


class Level(enum.Enum):
    """Severity of a span or event."""

    TRACE = "trace"
    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"

    @property
    def token(self) -> str:
        """Fixed five-character, right-aligned label."""
        return _LEVEL_TOKENS[self]

    @property
    def color(self) -> Color:
        return _LEVEL_COLORS[self]


_LEVEL_TOKENS: dict[Level, str] = {
    Level.TRACE: "TRACE",
    Level.DEBUG: "DEBUG",
    Level.INFO: " INFO",
    Level.WARN: " WARN",
    Level.ERROR: "ERROR",
}

_LEVEL_COLORS: dict[Level, Color] = {
    Level.TRACE: PURPLE,
    Level.DEBUG: BLUE,
    Level.INFO: GREEN,
    Level.WARN: YELLOW,
    Level.ERROR: RED,
}


@dataclass(frozen=True)
class Metadata:
    """Static description of where a span or event comes from."""

    name: str
    target: str
    level: Level = Level.INFO
    is_span: bool = False


@dataclass(frozen=True)
class Attributes:
    """Everything a layer learns about a span when it is created."""

    metadata: Metadata
    fields: tuple[tuple[str, Any], ...] = ()
    parent: int | None = None


@dataclass(frozen=True)
class Event:
    """A single point-in-time record with its fields."""

    metadata: Metadata
    fields: tuple[tuple[str, Any], ...] = ()
    parent: int | None = None
