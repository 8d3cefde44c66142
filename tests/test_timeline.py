import random

import pytest

from scriptdozer.core.project import Clip, TimelineTrack
from scriptdozer.core.timeline import (
    REMOVED_COLOR,
    TRACK_PALETTE,
    Cut,
    TimelineModel,
)


def test_default_tracks_seeded_when_missing():
    model = TimelineModel(None)
    labels = [t.label for t in model.tracks]
    assert labels == ["Video", "Audio"]
    assert [c.width for c in model.tracks[0].clips] == [100.0]
    assert [c.width for c in model.tracks[1].clips] == [40.0]
    # an explicitly empty timeline stays empty
    assert TimelineModel([]).tracks == []


def test_add_track_uses_palette_without_renormalizing():
    model = TimelineModel(None)
    track = model.add_track(random.Random(3))
    assert len(model.tracks) == 3
    assert track.label == "New Clip"
    assert track.clips[0].width == 20.0
    assert track.clips[0].color in TRACK_PALETTE
    assert model.tracks[0].clips[0].width == 100.0


def test_split_targets_first_clip_of_first_track():
    model = TimelineModel(
        [
            TimelineTrack("Video", [Clip(60.0, "#111"), Clip(40.0, "#222")]),
            TimelineTrack("Audio", [Clip(40.0, "#333")]),
        ]
    )
    clone = model.split_clip()
    clips = model.tracks[0].clips
    assert clips[0].width == 15.0
    assert clips[1] is clone
    assert clone.color == "#111" and clone.width == 15.0 and clone.opacity == 0.8
    assert clips[2].color == "#222"
    assert model.tracks[1].clips[0].width == 40.0


def test_split_on_empty_timeline_is_noop():
    assert TimelineModel([]).split_clip() is None
    assert TimelineModel([TimelineTrack("Video", [])]).split_clip() is None


def test_apply_single_cut():
    model = TimelineModel(None)
    segments = model.apply_cuts([Cut(5, 8, "silence")], 60)
    assert [round(s.width, 2) for s in segments] == [8.33, 5.0, 86.67]
    assert [s.removed for s in segments] == [False, True, False]
    assert segments[1].reason == "silence"
    assert segments[1].color == REMOVED_COLOR
    assert segments[1].title == "AI Removed: silence"
    assert model.tracks[0].label == "Video (AI Cut)"
    assert model.tracks[0].clips == segments
    assert model.tracks[1].label == "Audio"


def test_apply_cuts_skips_tiny_kept_segments_and_keeps_order():
    model = TimelineModel(None)
    cuts = [Cut(0.3, 2, "silence"), Cut(2.2, 4, "breath"), Cut(10, 12, "silence")]
    segments = model.apply_cuts(cuts, 60)
    # 0.3s and 0.2s kept spans are under 1% of 60s and are dropped
    assert [s.removed for s in segments] == [True, True, False, True, False]
    assert [s.reason for s in segments if s.removed] == ["silence", "breath", "silence"]
    assert segments[-1].width == pytest.approx(80.0)


def test_apply_cuts_rejects_zero_duration():
    with pytest.raises(ValueError):
        TimelineModel(None).apply_cuts([], 0)


def test_voiceover_goes_to_audio_lane_and_caps_width():
    model = TimelineModel(None)
    clip = model.add_voiceover(12.0, 60.0)
    assert model.tracks[1].clips[-1] is clip
    assert clip.width == pytest.approx(20.0)
    long_clip = model.add_voiceover(300.0, 60.0)
    assert long_clip.width == 100.0
    single = TimelineModel([TimelineTrack("Video", [])])
    assert single.add_voiceover(6.0, 60.0) is single.tracks[0].clips[0]
