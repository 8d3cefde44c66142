"""Media subsystem backing the playback clock.

A ``MediaSource`` owns real media and reports its lifecycle through three
signals that map onto the clock's media-backed events:

    metadataReady(float)   # duration in seconds, once known
    timeUpdated(float)     # current position in seconds
    ended()                # reached end of media

Two implementations:

``QtMediaSource``
    Wraps ``QMediaPlayer``; used for remote URLs. Position/duration arrive
    from the player in milliseconds.

``ClipMediaSource``
    Drives a MoviePy clip (through ``ClipAdapter``) with a precise
    ``QTimer`` at the clip frame rate. Frame pacing follows wall
    clock elapsed time; when decoding lags, intermediate frames are skipped
    so the reported position keeps real-time pace.
    Frames are only decoded when constructed with ``preview=True``; the
    optional ``frameReady`` hook then carries each decoded frame array.
"""

from __future__ import annotations

import logging
from pathlib import Path
from time import perf_counter
from typing import Optional
from urllib.parse import urlparse

from PySide6.QtCore import QObject, QTimer, QUrl, Qt, Signal
from PySide6.QtMultimedia import QAudioOutput, QMediaPlayer

logger = logging.getLogger(__name__)


class MediaSource(QObject):
    metadataReady = Signal(float)
    timeUpdated = Signal(float)
    ended = Signal()

    def open(self) -> None:
        """Start loading; emit ``metadataReady`` once duration is known."""
        raise NotImplementedError

    def play(self) -> None:
        raise NotImplementedError

    def pause(self) -> None:
        raise NotImplementedError

    def seek(self, seconds: float) -> None:
        raise NotImplementedError

    @property
    def paused(self) -> bool:
        raise NotImplementedError

    def close(self) -> None:
        pass


class QtMediaSource(MediaSource):
    def __init__(self, url: str, parent: Optional[QObject] = None, *, player=None):
        super().__init__(parent)
        self._url = url
        if player is None:
            player = QMediaPlayer(self)
            self._audio = QAudioOutput(self)
            player.setAudioOutput(self._audio)
        self._player = player
        self._player.durationChanged.connect(self._onDurationChanged)
        self._player.positionChanged.connect(self._onPositionChanged)
        self._player.mediaStatusChanged.connect(self._onMediaStatusChanged)

    def open(self) -> None:
        self._player.setSource(QUrl(self._url))

    def play(self) -> None:
        self._player.play()

    def pause(self) -> None:
        self._player.pause()

    def seek(self, seconds: float) -> None:
        self._player.setPosition(int(seconds * 1000))

    @property
    def paused(self) -> bool:
        return self._player.playbackState() != QMediaPlayer.PlaybackState.PlayingState

    def close(self) -> None:
        self._player.stop()

    # Player callbacks
    def _onDurationChanged(self, ms: int):
        if ms > 0:
            self.metadataReady.emit(ms / 1000.0)

    def _onPositionChanged(self, ms: int):
        self.timeUpdated.emit(ms / 1000.0)

    def _onMediaStatusChanged(self, status):
        if status == QMediaPlayer.MediaStatus.EndOfMedia:
            self.ended.emit()


class ClipMediaSource(MediaSource):
    frameReady = Signal(object, float)  # (frame array, t seconds)

    def __init__(
        self,
        adapter,
        parent: Optional[QObject] = None,
        *,
        frame_skip: bool = True,
        preview: bool = False,
    ):
        super().__init__(parent)
        self._adapter = adapter
        self._fps = adapter.fps or 24.0
        duration = adapter.duration
        self._total_frames = int(round(self._fps * duration)) if duration > 0 else 0
        self._current_frame = 0
        self._frame_skip_enabled = frame_skip
        self._preview = preview
        self._play_start_time: Optional[float] = None
        self._timer = QTimer(self)
        self._timer.setTimerType(Qt.TimerType.PreciseTimer)
        self._timer.timeout.connect(self._tick)

    @property
    def adapter(self):
        return self._adapter

    def open(self) -> None:
        self.metadataReady.emit(self._adapter.duration)
        self._emit_frame()

    def play(self) -> None:
        if self._total_frames <= 0:
            return
        if self._current_frame >= self._total_frames - 1:
            self._current_frame = 0
        if not self._timer.isActive():
            self._play_start_time = perf_counter() - self._current_frame / self._fps
            self._timer.start(int(1000 / self._fps))

    def pause(self) -> None:
        self._timer.stop()

    def seek(self, seconds: float) -> None:
        index = int(seconds * self._fps)
        self._current_frame = max(0, min(index, max(0, self._total_frames - 1)))
        if self._timer.isActive():
            self._play_start_time = perf_counter() - self._current_frame / self._fps
        self._emit_frame()
        self.timeUpdated.emit(self.position())

    @property
    def paused(self) -> bool:
        return not self._timer.isActive()

    def position(self) -> float:
        return self._current_frame / self._fps

    def close(self) -> None:
        self._timer.stop()
        self._adapter.close()

    # Internal
    def _emit_frame(self):
        if not self._preview:
            return
        t = self.position()
        self.frameReady.emit(self._adapter.get_frame(t), t)

    def _tick(self):
        target = self._current_frame + 1
        if self._play_start_time is not None:
            desired = int((perf_counter() - self._play_start_time) * self._fps)
            if self._frame_skip_enabled and desired > self._current_frame:
                target = desired
        if target >= self._total_frames:
            self._timer.stop()
            self._current_frame = max(0, self._total_frames - 1)
            self.timeUpdated.emit(self.position())
            self.ended.emit()
            return
        self._current_frame = target
        self._emit_frame()
        self.timeUpdated.emit(self.position())


def _local_path(url: str) -> Optional[Path]:
    parsed = urlparse(url)
    if parsed.scheme == "file":
        return Path(QUrl(url).toLocalFile())
    if parsed.scheme == "" or (len(parsed.scheme) == 1 and Path(url).exists()):
        # bare paths, including Windows drive letters
        return Path(url)
    return None


def open_media_source(url: str, parent: Optional[QObject] = None) -> MediaSource:
    """Pick a media source for ``url``: MoviePy for local files, Qt otherwise."""
    path = _local_path(url)
    if path is not None:
        from .clip_adapter import ClipAdapter

        logger.info("opening local media %s", path)
        return ClipMediaSource(ClipAdapter.from_path(str(path)), parent)
    logger.info("opening remote media %s", url)
    return QtMediaSource(url, parent)


__all__ = ["MediaSource", "QtMediaSource", "ClipMediaSource", "open_media_source"]
