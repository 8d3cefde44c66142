"""Thread-safe adapter around a MoviePy clip providing simplified access.

Encapsulates the mutex locking strategy so media sources and preview
consumers can pull frames without duplicating code.
"""

from __future__ import annotations

from moviepy import VideoFileClip
from PySide6.QtCore import QMutex


class ClipAdapter:
    def __init__(self, clip):
        self._clip = clip
        self._mutex = QMutex()

    @property
    def clip(self):
        return self._clip

    @property
    def duration(self) -> float:
        return float(getattr(self._clip, "duration", 0.0) or 0.0)

    @property
    def fps(self) -> float:
        return float(getattr(self._clip, "fps", 0.0) or 0.0)

    def get_frame(self, t: float):
        self._mutex.lock()
        try:
            return self._clip.get_frame(t)
        finally:
            self._mutex.unlock()

    def close(self) -> None:
        self._mutex.lock()
        try:
            self._clip.close()
        finally:
            self._mutex.unlock()

    @classmethod
    def from_path(cls, path: str) -> "ClipAdapter":
        return cls(VideoFileClip(path))

    @classmethod
    def from_clip(cls, clip) -> "ClipAdapter":
        return cls(clip)


__all__ = ["ClipAdapter"]
