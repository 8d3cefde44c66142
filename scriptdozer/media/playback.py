"""Playback clock: single source of truth for time, duration and play state.

Modes:
    SIMULATED      no media attached; a ``QTimer`` feeds ``tick`` every
                   ``tick_interval_ms`` and ``advance`` moves time forward.
    MEDIA_BACKED   a ``MediaSource`` drives time through its signals; the
                   clock only forwards play/pause/seek requests.

The mode is fixed when the clock is constructed. ``advance`` is a pure
function over ``PlaybackState`` so the simulated behaviour is testable
without waiting on wall-clock time; ``tick(elapsed)`` is the injectable
entry point the timer uses.

Signals:
    timeChanged(float, float)   # current, duration (after any state change)
    playingChanged(bool)
    durationChanged(float)
"""

from __future__ import annotations

import enum
import logging
import math
from dataclasses import dataclass, replace
from typing import Optional

from PySide6.QtCore import QObject, QTimer, Signal

from ..utils.timefmt import cursor_percent, format_display
from .sources import MediaSource

logger = logging.getLogger(__name__)

DEFAULT_DURATION = 60.0


class PlaybackMode(str, enum.Enum):
    SIMULATED = "simulated"
    MEDIA_BACKED = "media"


class ClockStatus(str, enum.Enum):
    STOPPED = "stopped"
    PLAYING_SIMULATED = "playing-simulated"
    PLAYING_MEDIA_BACKED = "playing-media"


@dataclass(frozen=True)
class PlaybackState:
    current_time: float = 0.0
    duration: float = DEFAULT_DURATION
    is_playing: bool = False
    mode: PlaybackMode = PlaybackMode.SIMULATED


def _clamp(t: float, duration: float) -> float:
    return max(0.0, min(t, duration))


def advance(state: PlaybackState, elapsed: float) -> PlaybackState:
    """Simulated tick: move time forward by ``elapsed`` seconds.

    Reaching the end rewinds to 0 and stops playback (no looping).
    """
    if not state.is_playing or state.mode is not PlaybackMode.SIMULATED:
        return state
    # round away float drift so 600 ticks of 0.1 land exactly on 60.0
    t = round(state.current_time + elapsed, 6)
    if t >= state.duration:
        return replace(state, current_time=0.0, is_playing=False)
    return replace(state, current_time=t)


class PlaybackClock(QObject):
    timeChanged = Signal(float, float)
    playingChanged = Signal(bool)
    durationChanged = Signal(float)

    def __init__(
        self,
        media: Optional[MediaSource] = None,
        parent: Optional[QObject] = None,
        *,
        duration: float = DEFAULT_DURATION,
        tick_interval_ms: int = 100,
        tick_step: float = 0.1,
    ):
        super().__init__(parent)
        mode = PlaybackMode.MEDIA_BACKED if media is not None else PlaybackMode.SIMULATED
        self._state = PlaybackState(duration=duration, mode=mode)
        self._media = media
        self._tick_step = tick_step
        self._timer = QTimer(self)
        self._timer.setInterval(tick_interval_ms)
        self._timer.timeout.connect(self._onTimeout)
        if media is not None:
            media.metadataReady.connect(self.on_metadata_ready)
            media.timeUpdated.connect(self.on_time_update)
            media.ended.connect(self.on_ended)
            media.open()

    # --- Read access ---
    @property
    def state(self) -> PlaybackState:
        return self._state

    @property
    def mode(self) -> PlaybackMode:
        return self._state.mode

    @property
    def media(self) -> Optional[MediaSource]:
        return self._media

    @property
    def status(self) -> ClockStatus:
        if not self._state.is_playing:
            return ClockStatus.STOPPED
        if self._state.mode is PlaybackMode.MEDIA_BACKED:
            return ClockStatus.PLAYING_MEDIA_BACKED
        return ClockStatus.PLAYING_SIMULATED

    @property
    def cursor_percent(self) -> float:
        return cursor_percent(self._state.current_time, self._state.duration)

    def display(self) -> str:
        return format_display(self._state.current_time, self._state.duration)

    # --- Transport ---
    def toggle(self) -> bool:
        """Flip the playing flag; returns the new value."""
        playing = not self._state.is_playing
        self._set_playing(playing)
        if self._media is not None:
            if playing:
                self._media.play()
            else:
                self._media.pause()
        elif playing:
            self._timer.start()
        else:
            self._timer.stop()
        self._emit_time()
        return playing

    def seek(self, position: float) -> float:
        """Seek to a fraction of the duration; out-of-range input clamps."""
        if not math.isfinite(position):
            position = 0.0
        fraction = max(0.0, min(1.0, position))
        t = fraction * self._state.duration
        self._state = replace(self._state, current_time=t)
        if self._media is not None:
            self._media.seek(t)
        self._emit_time()
        return t

    def tick(self, elapsed: Optional[float] = None) -> PlaybackState:
        was_playing = self._state.is_playing
        self._state = advance(
            self._state, self._tick_step if elapsed is None else elapsed
        )
        if was_playing and not self._state.is_playing:
            self._timer.stop()
            self.playingChanged.emit(False)
        self._emit_time()
        return self._state

    def stop(self) -> None:
        """Halt playback without changing position (session teardown)."""
        self._timer.stop()
        if self._media is not None:
            self._media.pause()
        self._set_playing(False)

    # --- Media-backed lifecycle events ---
    def on_metadata_ready(self, duration: float) -> None:
        if not math.isfinite(duration) or duration <= 0:
            logger.debug("ignoring media duration %r", duration)
            return
        self._state = replace(
            self._state,
            duration=duration,
            current_time=_clamp(self._state.current_time, duration),
        )
        self.durationChanged.emit(duration)
        self._emit_time()

    def on_time_update(self, t: float) -> None:
        # media started outside an explicit toggle
        if (
            not self._state.is_playing
            and self._media is not None
            and not self._media.paused
        ):
            self._set_playing(True)
        self._state = replace(
            self._state, current_time=_clamp(t, self._state.duration)
        )
        self._emit_time()

    def on_ended(self) -> None:
        self._set_playing(False)
        self._emit_time()

    # Internal
    def _onTimeout(self):
        self.tick()

    def _set_playing(self, playing: bool) -> None:
        if self._state.is_playing == playing:
            return
        self._state = replace(self._state, is_playing=playing)
        self.playingChanged.emit(playing)

    def _emit_time(self) -> None:
        self.timeChanged.emit(self._state.current_time, self._state.duration)


__all__ = [
    "PlaybackClock",
    "PlaybackState",
    "PlaybackMode",
    "ClockStatus",
    "advance",
    "DEFAULT_DURATION",
]
