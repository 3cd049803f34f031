"""Formatting layer configuration."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class LayerConfig:
    """Immutable layer configuration."""

    ansi: bool = True
