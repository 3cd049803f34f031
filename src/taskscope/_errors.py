"""Errors raised when the registry breaks a guarantee the layer relies on.

These signal bugs, not runtime conditions: nothing in taskscope catches them.
"""

from __future__ import annotations


class InvariantViolation(RuntimeError):
    """Base class for broken registry guarantees."""


class SpanNotFoundError(InvariantViolation):
    """A callback referenced a span id the registry does not know."""

    def __init__(self, span_id: int) -> None:
        super().__init__(f"span {span_id} not found, this is a bug")
        self.span_id = span_id


class MissingSpanRecordError(InvariantViolation):
    """A span in scope has no formatted record in the layer."""

    def __init__(self, span_id: int) -> None:
        super().__init__(f"no formatted record for in-scope span {span_id}, this is a bug")
        self.span_id = span_id
