import random

import pytest

from conftest import FakeMedia, FakeTransport, project_doc, spin
from scriptdozer.config import EditorConfig
from scriptdozer.core.commands import AddElement, Notify, Persist, Seek, SplitClip
from scriptdozer.media.playback import PlaybackMode
from scriptdozer.session import EditorSession, EntryParams

PROJECT = "/api/projects/p1"


def _session(transport, **kwargs):
    kwargs.setdefault("rng", random.Random(1))
    config = kwargs.pop("config", EditorConfig(auto_open_delay_ms=10, download_delay_ms=10))
    session = EditorSession(transport, config, **kwargs)
    notes = []
    session.notified.connect(notes.append)
    return session, notes


def _load(session, transport, doc=None):
    session.load("p1")
    transport.resolve_path("GET", PROJECT, data=doc or project_doc())


def _messages(notes):
    return [n.message for n in notes]


def test_load_seeds_defaults_and_simulated_clock(qt_app, transport):
    session, notes = _session(transport)
    _load(session, transport)
    assert [s.title for s in session.script.sections] == ["Intro", "Video", "Outro"]
    assert [t.label for t in session.timeline.tracks] == ["Video", "Audio"]
    assert session.canvas.elements == []
    assert session.clock.mode is PlaybackMode.SIMULATED
    assert session.clock.state.duration == 60.0
    assert session.autosave.running
    session.close()


def test_video_project_uses_media_backed_clock(qt_app, transport):
    opened = []

    def factory(url, parent):
        opened.append(url)
        return FakeMedia(parent)

    session, _ = _session(transport, media_factory=factory)
    _load(session, transport, project_doc(videoUrl="https://cdn/x.mp4"))
    assert opened == ["https://cdn/x.mp4"]
    assert session.clock.mode is PlaybackMode.MEDIA_BACKED

    other_transport = FakeTransport()
    other, _ = _session(other_transport, media_factory=factory)
    doc = project_doc()
    doc["type"] = "video"
    _load(other, other_transport, doc)
    assert opened[-1] == other.config.default_video_url


def test_media_open_failure_falls_back_to_simulated(qt_app, transport):
    def broken(url, parent):
        raise OSError("no such file")

    session, notes = _session(transport, media_factory=broken)
    _load(session, transport, project_doc(videoUrl="/missing.mp4"))
    assert session.clock.mode is PlaybackMode.SIMULATED
    assert any(n.level == "error" for n in notes)


def test_load_failure_keeps_previous_state(qt_app, transport):
    session, notes = _session(transport)
    _load(session, transport)
    session.add_section()
    session.load("nope")
    transport.resolve_path("GET", "/api/projects/nope", status=404)
    assert session.project.id == "p1"
    assert len(session.script) == 4
    assert notes[-1] == Notify("Failed to load project", "error")


def test_save_reload_round_trip(qt_app, transport):
    session, _ = _session(transport)
    _load(session, transport, project_doc(videoUrl=None))
    session.edit_section(0, title="Hook", content="Grab attention")
    session.add_track()
    session.split_clip()
    session.add_element("Text", "Hello")
    session.reposition_element(0)
    while transport.requests:
        transport.resolve(data={"success": True})

    assert session.save(silent=True)
    while transport.requests:
        transport.resolve(data={"success": True})
    stored = session.project.to_dict()

    again, _ = _session(transport)
    again.load("p1")
    transport.resolve(data=stored)
    assert again.script.to_list() == session.script.to_list()
    assert again.timeline.to_list() == session.timeline.to_list()
    assert again.canvas.to_list() == session.canvas.to_list()
    assert again.timeline.tracks[0].clips[0].width == 15.0


def test_mutations_trigger_silent_saves(qt_app, transport):
    session, notes = _session(transport)
    _load(session, transport)
    intents = session.add_section()
    assert intents == [Persist()]
    puts = transport.pending("PUT", PROJECT)
    assert len(puts) == 1
    assert len(puts[0].body["content"]["scripts"]) == 4
    transport.resolve_path("PUT", PROJECT, data={"success": True})
    assert session.saved_indicator
    # silent saves never notify
    assert not any("saved" in m for m in _messages(notes))


def test_explicit_save_notifies(qt_app, transport):
    session, notes = _session(transport)
    _load(session, transport)
    session.save()
    transport.resolve_path("PUT", PROJECT, status=500)
    assert _messages(notes)[-2:] == ["Saving project...", "Failed to save project"]
    session.save()
    transport.resolve_path("PUT", PROJECT, data={"success": True})
    assert notes[-1] == Notify("Project saved successfully!", "success")


def test_delete_section_uses_confirmation(qt_app, transport):
    answers = [False, True]
    session, _ = _session(transport, confirm=lambda prompt: answers.pop(0))
    _load(session, transport)
    assert session.delete_section(0) == []
    assert len(session.script) == 3
    assert session.delete_section(0) == [Persist()]
    assert session.script.labels() == [1, 2]


def test_dispatch_reports_bad_indices(qt_app, transport):
    session, notes = _session(transport)
    _load(session, transport)
    intents = session.reposition_element(3)
    assert intents[0].level == "error"
    assert notes[-1].level == "error"


def test_split_and_add_element_notifications(qt_app, transport):
    session, notes = _session(transport)
    _load(session, transport)
    session.dispatch(Seek(0.5))
    intents = session.dispatch(SplitClip())
    assert intents[0] == Notify("Clip split at 00:30")
    intents = session.dispatch(AddElement("Shape"))
    assert intents[0] == Notify("Shape added to canvas")
    assert session.canvas.elements[0].text == "Shape"


def test_speech_adds_voiceover_and_releases_control(qt_app, transport):
    session, notes = _session(transport)
    _load(session, transport)
    assert session.generate_speech()
    state = session.controls.state("speech")
    assert not state.enabled and state.label == "Generating..."
    assert not session.generate_speech()  # busy
    req = transport.pending("POST", "/api/ai/tts")[0]
    assert req.body == {"text": session.script.sections[0].content, "voice": "alloy"}
    transport.resolve_path("POST", "/api/ai/tts", data={"success": True, "duration": 12})
    assert session.controls.state("speech").enabled
    assert session.controls.state("speech").label == "Generate Speech"
    voice = session.timeline.tracks[1].clips[-1]
    assert voice.width == pytest.approx(20.0) and voice.title == "AI Voiceover"
    assert "Voiceover generated!" in _messages(notes)


def test_speech_failure_and_validation(qt_app, transport):
    session, notes = _session(transport)
    _load(session, transport, project_doc(scripts=[{"title": "A", "content": ""}]))
    assert not session.generate_speech()
    assert notes[-1] == Notify("Please enter script text first", "error")

    session.edit_section(0, content="Say this")
    session.generate_speech()
    transport.resolve_path("POST", "/api/ai/tts", status=502)
    assert notes[-1] == Notify("Failed to generate speech", "error")
    assert session.controls.state("speech").enabled


def test_control_released_when_request_raises(qt_app):
    class ExplodingTransport(FakeTransport):
        def send(self, method, path, body=None, on_reply=None):
            if path.startswith("/api/ai"):
                raise RuntimeError("socket closed")
            super().send(method, path, body, on_reply)

    transport = ExplodingTransport()
    session, notes = _session(transport)
    _load(session, transport)
    assert not session.translate()
    assert session.controls.state("translate").enabled
    assert notes[-1] == Notify("Translation failed", "error")


def test_rewrite_requires_focus(qt_app, transport):
    session, notes = _session(transport)
    _load(session, transport)
    assert not session.rewrite_section()
    assert notes[-1].message == "Please click inside a script section to rewrite"
    session.focus_section(1)
    assert session.rewrite_section()
    assert transport.pending("POST", "/api/ai/rewrite")[0].body["tone"] == "professional"
    transport.resolve_path(
        "POST", "/api/ai/rewrite", data={"success": True, "text": "Polished"}
    )
    assert session.script.sections[1].content == "Polished"
    assert transport.pending("PUT", PROJECT)


def test_translate_tags_sections_and_closes_dialog(qt_app, transport):
    session, notes = _session(transport)
    _load(session, transport)
    session.open_translate_dialog()
    session.translate()
    body = transport.pending("POST", "/api/ai/translate")[0].body
    assert body["sourceLang"] == "English" and body["targetLang"] == "Spanish"
    assert body["text"].count("\n") == 2
    transport.resolve_path(
        "POST", "/api/ai/translate", data={"success": True, "lang": "Spanish"}
    )
    assert all(s.content.startswith("[Spanish] ") for s in session.script.sections)
    assert not session.translate_dialog_open
    assert "Project translated to Spanish" in _messages(notes)


def test_unsuccessful_body_is_a_failure(qt_app, transport):
    session, notes = _session(transport)
    _load(session, transport)
    session.open_translate_dialog()
    session.translate()
    transport.resolve_path("POST", "/api/ai/translate", data={"success": False})
    assert notes[-1] == Notify("Translation failed", "error")
    assert session.translate_dialog_open


def test_subtitles_use_first_non_empty_section(qt_app, transport):
    session, notes = _session(transport)
    _load(
        session,
        transport,
        project_doc(
            scripts=[
                {"title": "A", "content": "   "},
                {"title": "B", "content": "[Spanish] Hola a todos"},
            ]
        ),
    )
    assert session.generate_subtitles()
    sub = session.canvas.elements[-1]
    assert sub.type == "subtitle" and sub.text == "Hola a todos"
    assert notes[-1].message == "Subtitles generated successfully!"


def test_subtitles_without_script(qt_app, transport):
    session, notes = _session(transport)
    _load(session, transport, project_doc(scripts=[]))
    assert not session.generate_subtitles()
    assert notes[-1] == Notify("No script found to generate subtitles", "error")


def test_auto_cut_rebuilds_first_track(qt_app, transport):
    session, notes = _session(transport)
    _load(session, transport)
    session.auto_cut()
    assert transport.pending("POST", "/api/ai/cuts")[0].body == {"projectId": "p1"}
    transport.resolve_path(
        "POST",
        "/api/ai/cuts",
        data={"success": True, "cuts": [{"start": 5, "end": 8, "reason": "silence"}]},
    )
    clips = session.timeline.tracks[0].clips
    assert [round(c.width, 2) for c in clips] == [8.33, 5.0, 86.67]
    assert clips[1].reason == "silence"
    assert "AI found 1 silences. Applying cuts..." in _messages(notes)

    session.auto_cut()
    transport.resolve_path("POST", "/api/ai/cuts", data={"success": True, "cuts": []})
    assert notes[-1] == Notify("No silences found", "info")


def test_export_announces_download(qt_app, transport):
    session, notes = _session(transport)
    _load(session, transport)
    downloads = []
    session.downloadReady.connect(downloads.append)
    session.export()
    transport.resolve_path("POST", "/api/projects/p1/export", data={"success": True})
    spin(50)
    assert downloads == ["project.mp4"]
    session.export()
    transport.resolve_path("POST", "/api/projects/p1/export", status=500)
    assert notes[-1] == Notify("Export failed", "error")


def test_entry_params_open_translate(qt_app, transport):
    params = EntryParams.parse("https://app.example/editor?id=p1&open=translate")
    assert params == EntryParams("p1", "translate")
    assert EntryParams.parse("?id=9") == EntryParams("9", None)
    session, _ = _session(transport)
    session.start(params)
    transport.resolve_path("GET", PROJECT, data=project_doc())
    assert not session.translate_dialog_open
    spin(60)
    assert session.translate_dialog_open


def test_actions_without_project_are_ignored(qt_app, transport):
    session, notes = _session(transport)
    assert not session.save()
    assert not session.generate_speech()
    assert not session.auto_cut()
    assert not session.export()
    assert transport.requests == []


def test_periodic_autosave_sends_only_changed_content(qt_app, transport):
    config = EditorConfig(autosave_interval_ms=20)
    session, notes = _session(transport, config=config)
    stored = project_doc(
        scripts=[{"title": "A", "content": "first"}],
        timeline=[{"label": "Video", "clips": [{"width": "100%", "color": "#667eea"}]}],
        elements=[],
    )
    _load(session, transport, stored)
    spin(80)
    assert transport.pending("PUT", PROJECT) == []

    session.edit_section(0, content="x")
    assert transport.pending("PUT", PROJECT) == []  # edits wait for the timer
    spin(80)
    puts = transport.pending("PUT", PROJECT)
    assert len(puts) == 1
    assert puts[0].body["content"]["scripts"][0]["content"] == "x"

    transport.resolve_path("PUT", PROJECT, data={"success": True})
    spin(60)
    assert transport.pending("PUT", PROJECT) == []
    assert session.saved_indicator
    assert notes == []
    session.close()


def test_ai_results_after_reload_are_dropped(qt_app, transport):
    session, notes = _session(transport)
    _load(session, transport)
    session.generate_speech()
    session.auto_cut()

    other = project_doc()
    other["id"] = "p2"
    session.load("p2")
    transport.resolve_path("GET", "/api/projects/p2", data=other)
    before = session.timeline.to_list()

    transport.resolve_path("POST", "/api/ai/tts", data={"success": True, "duration": 12})
    transport.resolve_path(
        "POST",
        "/api/ai/cuts",
        data={"success": True, "cuts": [{"start": 5, "end": 8, "reason": "silence"}]},
    )
    assert session.timeline.to_list() == before
    assert transport.pending("PUT", "/api/projects/p2") == []
    assert "Voiceover generated!" not in _messages(notes)
    assert session.controls.state("speech").enabled
    assert session.controls.state("cuts").enabled


def test_rewrite_without_text_is_a_failure(qt_app, transport):
    session, notes = _session(transport)
    _load(session, transport)
    session.focus_section(0)
    original = session.script.sections[0].content
    session.rewrite_section()
    transport.resolve_path("POST", "/api/ai/rewrite", data={"success": True, "text": None})
    assert session.script.sections[0].content == original
    assert notes[-1] == Notify("Rewrite failed", "error")
    assert session.controls.state("rewrite").enabled
