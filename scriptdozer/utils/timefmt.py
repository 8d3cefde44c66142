"""Time formatting utilities for the transport display and timeline cursor."""

from __future__ import annotations

import math

__all__ = ["format_time", "format_display", "cursor_percent"]


def format_time(seconds: float) -> str:
    """Return ``MM:SS`` using floor semantics for both fields.

    Negative or non-finite input clamps to ``00:00``. Minutes are not
    wrapped into hours, so 3725s renders as ``62:05``.
    """
    if not math.isfinite(seconds) or seconds < 0:
        seconds = 0.0
    mins = int(seconds // 60)
    secs = int(seconds % 60)
    return f"{mins:02d}:{secs:02d}"


def format_display(current: float, duration: float) -> str:
    return f"{format_time(current)} / {format_time(duration)}"


def cursor_percent(current: float, duration: float) -> float:
    """Playhead position as a percentage of ``duration``."""
    if duration <= 0:
        return 0.0
    return current / duration * 100.0
