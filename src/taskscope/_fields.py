"""Field recording: ordered name/value pairs with a memoized rendering."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

MESSAGE_FIELD = "message"


def stringify(value: Any) -> str:
    """Render a field value as text. Never raises."""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    try:
        return repr(value)
    except Exception:  # noqa: BLE001
        return f"<unprintable {type(value).__name__}>"


class RecordedFields:
    """Ordered field entries plus a cached ``name=value`` rendering.

    The rendering is only recomputed by :meth:`formatted_updated` and only
    when a field was recorded since the last computation. A field named
    ``message`` is not rendered as ``message=...``; it is appended after the
    other fields instead, and the last one recorded wins.
    """

    def __init__(self, message: str | None = None) -> None:
        self._entries: list[tuple[str, str]] = []
        self._message = message
        self._dirty = message is not None
        self._formatted = ""

    @classmethod
    def for_span(cls) -> RecordedFields:
        return cls()

    @classmethod
    def for_event(cls) -> RecordedFields:
        return cls()

    @classmethod
    def with_message(cls, message: str) -> RecordedFields:
        """Fields holding a single message, used for span lifecycle lines."""
        return cls(message=message)

    def record(self, name: str, value: Any) -> None:
        self._entries.append((name, stringify(value)))
        self._dirty = True

    def record_all(self, pairs: Iterable[tuple[str, Any]]) -> None:
        for name, value in pairs:
            self.record(name, value)

    @property
    def entries(self) -> list[tuple[str, str]]:
        return list(self._entries)

    @property
    def dirty(self) -> bool:
        return self._dirty

    def formatted(self) -> str:
        """Return the last computed rendering without recomputing it."""
        return self._formatted

    def formatted_updated(self) -> str:
        """Recompute the rendering if fields were recorded, then return it."""
        if self._dirty:
            self._format()
        return self._formatted

    def _format(self) -> None:
        parts: list[str] = []
        for name, value in self._entries:
            if name == MESSAGE_FIELD:
                self._message = value
                continue
            parts.append(f"{name}={value}")

        formatted = ", ".join(parts)
        if self._message is not None:
            if formatted:
                formatted += " "
            formatted += self._message

        self._formatted = formatted
        self._dirty = False

    def __len__(self) -> int:
        return len(self._entries)
