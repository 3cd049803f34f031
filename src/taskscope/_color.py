"""Truecolor palette and the styling primitive used by the formatters."""

from __future__ import annotations

from dataclasses import dataclass

from rich.color import Color, ColorSystem
from rich.style import Style

RED = Color.from_rgb(0xBA, 0x5A, 0x57)
RED_BOLD = Color.from_rgb(0xDF, 0x58, 0x53)
GREEN = Color.from_rgb(0x48, 0x9E, 0x6C)
GREEN_BOLD = Color.from_rgb(0x5A, 0xBA, 0x84)
BLUE = Color.from_rgb(0x5C, 0x8D, 0xCE)
BLUE_BOLD = Color.from_rgb(0x50, 0x8E, 0xE3)
YELLOW = Color.from_rgb(0xE5, 0xE4, 0x4D)
YELLOW_BOLD = Color.from_rgb(0xF5, 0xF4, 0x66)
ORANGE = Color.from_rgb(0xFF, 0xBF, 0x69)
ORANGE_BOLD = Color.from_rgb(0xFF, 0x9F, 0x1C)
PURPLE = Color.from_rgb(0x9D, 0x4E, 0xDD)
PURPLE_BOLD = Color.from_rgb(0xC7, 0x7D, 0xFF)
PINK = Color.from_rgb(0xC9, 0x18, 0x4A)
PINK_BOLD = Color.from_rgb(0xFF, 0x4D, 0x6D)
TURQUOISE = Color.from_rgb(0x9C, 0xEA, 0xEF)
TURQUOISE_BOLD = Color.from_rgb(0x68, 0xD8, 0xD6)
WHITE = Color.parse("white")


@dataclass(frozen=True)
class ColorPair:
    """Base and bold color for one span or event kind."""

    base: Color
    bold: Color


def paint(text: str, style: Style, *, ansi: bool = True) -> str:
    """Wrap ``text`` in the ANSI sequences for ``style``.

    With ``ansi=False`` the text is returned unchanged.
    """
    if not ansi:
        return text
    return style.render(text, color_system=ColorSystem.TRUECOLOR)
