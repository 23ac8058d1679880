"""ANSI color utilities for terminal output."""
from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from typing import TextIO

__all__ = [
    "ColorMode",
    "FG_GREEN",
    "FG_RED",
    "FG_YELLOW",
    "detect_color_mode",
    "style",
]

FG_RED = 31
FG_GREEN = 32
FG_YELLOW = 33


@dataclass(frozen=True)
class ColorMode:
    enabled: bool


def detect_color_mode(mode: str, stream: TextIO | None = None) -> ColorMode:
    """
    Resolve a --color choice ("auto", "always", "never").

    In auto mode colors are off when the stream is not a TTY or NO_COLOR is set.
    """
    choice = (mode or "auto").lower().strip()
    if choice in ("always", "never"):
        return ColorMode(enabled=choice == "always")

    target = stream if stream is not None else sys.stdout
    isatty = getattr(target, "isatty", None)
    if not (callable(isatty) and isatty()) or os.getenv("NO_COLOR"):
        return ColorMode(enabled=False)
    return ColorMode(enabled=True)


def style(text: str, *, mode: ColorMode, fg: int | None = None, bold: bool = False) -> str:
    if not mode.enabled:
        return text
    codes = ([1] if bold else []) + ([fg] if fg is not None else [])
    if not codes:
        return text
    return f"\x1b[{';'.join(map(str, codes))}m{text}\x1b[0m"
