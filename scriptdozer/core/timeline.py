"""Timeline tracks and structural clip edits.

Clip widths are independent percentages of the timeline duration; nothing
here renormalizes them to sum to 100.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Iterable, List, Optional

from .project import Clip, TimelineTrack

VIDEO_COLOR = "#667eea"
AUDIO_COLOR = "#d4229b"
VOICEOVER_COLOR = "#8b5cf6"
REMOVED_COLOR = "rgba(239, 68, 68, 0.3)"
TRACK_PALETTE = ("#f472b6", "#34d399", "#60a5fa", "#a78bfa")

NEW_TRACK_LABEL = "New Clip"
NEW_TRACK_WIDTH = 20.0
SPLIT_WIDTH = 15.0
SPLIT_CLONE_OPACITY = 0.8
CUT_TRACK_LABEL = "Video (AI Cut)"
MIN_KEPT_WIDTH = 1.0  # percent; shorter kept segments before a cut are dropped


@dataclass(frozen=True)
class Cut:
    start: float
    end: float
    reason: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "Cut":
        return cls(
            start=float(data["start"]),
            end=float(data["end"]),
            reason=str(data.get("reason", "")),
        )


def default_tracks() -> List[TimelineTrack]:
    return [
        TimelineTrack("Video", [Clip(100.0, VIDEO_COLOR)]),
        TimelineTrack("Audio", [Clip(40.0, AUDIO_COLOR)]),
    ]


class TimelineModel:
    def __init__(self, tracks: Optional[List[TimelineTrack]] = None):
        self._tracks: List[TimelineTrack] = (
            default_tracks() if tracks is None else list(tracks)
        )

    @property
    def tracks(self) -> List[TimelineTrack]:
        return list(self._tracks)

    def add_track(self, rng: Optional[random.Random] = None) -> TimelineTrack:
        color = (rng or random).choice(TRACK_PALETTE)
        track = TimelineTrack(NEW_TRACK_LABEL, [Clip(NEW_TRACK_WIDTH, color)])
        self._tracks.append(track)
        return track

    def split_clip(self) -> Optional[Clip]:
        """Split the first clip of the first track.

        The clip shrinks to 15% and a lighter clone is inserted right after
        it. Returns the clone, or None when there is nothing to split.
        """
        if not self._tracks or not self._tracks[0].clips:
            return None
        clips = self._tracks[0].clips
        first = clips[0]
        first.width = SPLIT_WIDTH
        clone = first.clone()
        clone.opacity = SPLIT_CLONE_OPACITY
        clips.insert(1, clone)
        return clone

    def apply_cuts(self, cuts: Iterable[Cut], total_duration: float) -> List[Clip]:
        """Rebuild the first track from kept/removed segments.

        Cuts are consumed in the order given; callers supply them sorted by
        ``start``.
        """
        if total_duration <= 0:
            raise ValueError("total_duration must be positive")

        def pct(seconds: float) -> float:
            return seconds / total_duration * 100.0

        segments: List[Clip] = []
        last = 0.0
        for cut in cuts:
            kept = pct(cut.start - last)
            if kept > MIN_KEPT_WIDTH:
                segments.append(Clip(kept, VIDEO_COLOR))
            segments.append(
                Clip(
                    pct(cut.end - cut.start),
                    REMOVED_COLOR,
                    removed=True,
                    reason=cut.reason,
                    title=f"AI Removed: {cut.reason}",
                )
            )
            last = cut.end
        segments.append(Clip(pct(total_duration - last), VIDEO_COLOR))

        if self._tracks:
            self._tracks[0].label = CUT_TRACK_LABEL
            self._tracks[0].clips = segments
        else:
            self._tracks.append(TimelineTrack(CUT_TRACK_LABEL, segments))
        return segments

    def add_voiceover(self, seconds: float, total_duration: float) -> Optional[Clip]:
        """Append a voiceover clip to the audio lane (second track if any)."""
        if not self._tracks:
            return None
        track = self._tracks[1] if len(self._tracks) > 1 else self._tracks[0]
        width = min(100.0, seconds / total_duration * 100.0) if total_duration > 0 else 0.0
        clip = Clip(width, VOICEOVER_COLOR, title="AI Voiceover")
        track.clips.append(clip)
        return clip

    def to_list(self) -> List[dict]:
        return [t.to_dict() for t in self._tracks]


__all__ = ["TimelineModel", "Cut", "default_tracks", "TRACK_PALETTE"]
