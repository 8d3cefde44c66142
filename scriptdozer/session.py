"""Editor session: one loaded project and everything derived from it.

``EditorSession`` owns the project store, the script/timeline/canvas
models, the playback clock and the autosave scheduler. A UI drives it with
typed commands (``dispatch``) or the convenience methods wrapping them,
plus the AI actions that wait on the backend.

All work happens on the Qt event loop thread. Failures never escape an
action: they are logged and turned into ``notified`` events.

Signals:
    notified(Notify)          # user-facing message; the UI renders/dismisses it
    projectLoaded(Project)
    changed()                 # model state changed, re-render
    translateDialogChanged(bool)
    downloadReady(str)        # export finished, suggested file name
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import parse_qs, urlparse

from PySide6.QtCore import QObject, QTimer, Signal

from .config import EditorConfig
from .controls import ControlHold, ControlRegistry
from .core.canvas import CanvasOverlayModel
from .core.commands import (
    AddElement,
    AddSection,
    AddSubtitle,
    AddTrack,
    AddVoiceover,
    ApplyCuts,
    Command,
    DeleteSection,
    EditSection,
    FocusSection,
    Intents,
    Notify,
    Persist,
    RepositionElement,
    Seek,
    SplitClip,
    TagTranslation,
    TogglePlayback,
)
from .core.project import Project
from .core.script import ConfirmFn, ScriptModel
from .core.timeline import TimelineModel
from .errors import EditorError, ValidationGap
from .media.playback import PlaybackClock
from .media.sources import MediaSource, open_media_source
from .services.ai import AIService
from .services.autosave import AutosaveScheduler
from .services.captions import build_subtitle
from .services.export import ExportService
from .services.store import ProjectStore
from .services.transport import Transport
from .utils.timefmt import format_time

logger = logging.getLogger(__name__)

CONTROL_LABELS = {
    "speech": "Generate Speech",
    "rewrite": "AI Rewrite",
    "translate": "Start Translation",
    "cuts": "Auto Cut",
}
BUSY_LABELS = {
    "speech": "Generating...",
    "rewrite": "Rewriting...",
    "translate": "Translating...",
    "cuts": "Analyzing...",
}

MediaFactory = Callable[[str, Optional[QObject]], MediaSource]


def confirm_always(prompt: str) -> bool:
    return True


@dataclass(frozen=True)
class EntryParams:
    project_id: Optional[str] = None
    open: Optional[str] = None

    @classmethod
    def parse(cls, query: str) -> "EntryParams":
        """Accept a full URL, ``?id=..&open=..`` or a bare query string."""
        if "://" in query:
            query = urlparse(query).query
        params = parse_qs(query.lstrip("?"))

        def first(key: str) -> Optional[str]:
            values = params.get(key)
            return values[0] if values else None

        return cls(project_id=first("id"), open=first("open"))


class EditorSession(QObject):
    notified = Signal(object)
    projectLoaded = Signal(object)
    changed = Signal()
    translateDialogChanged = Signal(bool)
    downloadReady = Signal(str)

    def __init__(
        self,
        transport: Transport,
        config: Optional[EditorConfig] = None,
        parent: Optional[QObject] = None,
        *,
        confirm: ConfirmFn = confirm_always,
        media_factory: MediaFactory = open_media_source,
        rng: Optional[random.Random] = None,
    ):
        super().__init__(parent)
        self.config = config or EditorConfig()
        self._confirm = confirm
        self._media_factory = media_factory
        self._rng = rng or random.Random()

        self._store = ProjectStore(transport, self)
        self._store.loaded.connect(self._onLoaded)
        self._store.loadFailed.connect(self._onLoadFailed)
        self._store.saved.connect(self._onSaved)
        self._store.saveFailed.connect(self._onSaveFailed)
        self._ai = AIService(transport)
        self._export = ExportService(
            transport, self, download_delay_ms=self.config.download_delay_ms
        )
        self._export.downloadReady.connect(self.downloadReady.emit)
        self._autosave = AutosaveScheduler(
            self._autosave_fn,
            self.has_project,
            self,
            interval_ms=self.config.autosave_interval_ms,
        )
        self.controls = ControlRegistry(CONTROL_LABELS, self)

        self.script = ScriptModel()
        self.timeline = TimelineModel([])
        self.canvas = CanvasOverlayModel()
        self.clock = self._make_clock(None)
        self.translate_dialog_open = False
        self.saved_indicator = False

        self._handlers: Dict[type, Callable[[Any], Intents]] = {
            TogglePlayback: self._toggle,
            Seek: self._seek,
            AddSection: self._add_section,
            EditSection: self._edit_section,
            FocusSection: self._focus_section,
            DeleteSection: self._delete_section,
            AddElement: self._add_element,
            RepositionElement: self._reposition_element,
            AddTrack: self._add_track,
            SplitClip: self._split_clip,
            AddVoiceover: self._add_voiceover,
            ApplyCuts: self._apply_cuts,
            TagTranslation: self._tag_translation,
            AddSubtitle: self._add_subtitle,
        }

    # --- Lifecycle ---
    @property
    def project(self) -> Optional[Project]:
        return self._store.project

    @property
    def store(self) -> ProjectStore:
        return self._store

    @property
    def autosave(self) -> AutosaveScheduler:
        return self._autosave

    def has_project(self) -> bool:
        return self._store.project is not None

    def start(self, params: EntryParams) -> None:
        """Apply entry parameters: load ``id`` and honour ``open=translate``."""
        if params.project_id:
            self.load(params.project_id)
        if params.open == "translate":
            QTimer.singleShot(self.config.auto_open_delay_ms, self.open_translate_dialog)

    def load(self, project_id: str) -> None:
        self._store.load(project_id)

    def close(self) -> None:
        self._autosave.stop()
        self.clock.stop()
        if self.clock.media is not None:
            self.clock.media.close()

    def _make_clock(self, media: Optional[MediaSource]) -> PlaybackClock:
        return PlaybackClock(
            media,
            self,
            duration=self.config.default_duration,
            tick_interval_ms=self.config.tick_interval_ms,
            tick_step=self.config.tick_step,
        )

    def _onLoaded(self, project: Project):
        content = project.content
        self.script = ScriptModel.hydrate(content.scripts, project.name)
        self.timeline = TimelineModel(content.timeline)
        self.canvas = CanvasOverlayModel(content.elements)

        media = None
        if project.wants_media:
            url = content.video_url or self.config.default_video_url
            try:
                media = self._media_factory(url, self)
            except (OSError, RuntimeError) as e:
                logger.warning("media %s unavailable, using simulated clock: %s", url, e)
                self._notify("Failed to open video, playback is simulated", "error")
        old = self.clock
        old.stop()
        if old.media is not None:
            old.media.close()
        old.deleteLater()
        self.clock = self._make_clock(media)

        self.saved_indicator = False
        self._autosave.start()
        self.projectLoaded.emit(project)
        self.changed.emit()

    def _onLoadFailed(self, error: EditorError):
        logger.warning("project load failed: %s", error)
        self._notify("Failed to load project", "error")

    # --- Persistence ---
    def gather(self) -> dict:
        """Current model state as a partial content update."""
        return {
            "scripts": self.script.to_list(),
            "timeline": self.timeline.to_list(),
            "elements": self.canvas.to_list(),
            "lastModified": datetime.now(timezone.utc).isoformat(),
        }

    def save(self, silent: bool = False) -> bool:
        if not self.has_project():
            return False
        if not silent:
            self._notify("Saving project...", "info")
        return self._store.save(self.gather(), silent=silent)

    def _autosave_fn(self) -> bool:
        return self._store.save_if_changed(self.gather(), silent=True)

    def _onSaved(self, content: dict, silent: bool):
        self.saved_indicator = True
        if not silent:
            self._notify("Project saved successfully!", "success")

    def _onSaveFailed(self, error: EditorError, silent: bool):
        if not silent:
            self._notify("Failed to save project", "error")

    # --- Command dispatch ---
    def dispatch(self, command: Command) -> Intents:
        handler = self._handlers[type(command)]
        try:
            intents = handler(command)
        except EditorError as e:
            logger.info("%s rejected: %s", type(command).__name__, e)
            intents = [Notify(str(e), "error")]
        except (IndexError, ValueError) as e:
            logger.warning("%s failed: %s", type(command).__name__, e)
            intents = [Notify(str(e), "error")]
        self._perform(intents)
        self.changed.emit()
        return intents

    def _perform(self, intents: Intents) -> None:
        for intent in intents:
            if isinstance(intent, Persist):
                if intent.silent:
                    self._autosave.request()
                else:
                    self.save(silent=False)
            elif isinstance(intent, Notify):
                self.notified.emit(intent)

    def _notify(self, message: str, level: str = "success") -> None:
        self._perform([Notify(message, level)])

    # Handlers
    def _toggle(self, cmd: TogglePlayback) -> Intents:
        self.clock.toggle()
        return []

    def _seek(self, cmd: Seek) -> Intents:
        self.clock.seek(cmd.position)
        return []

    def _add_section(self, cmd: AddSection) -> Intents:
        self.script.add_section()
        return [Persist()]

    def _edit_section(self, cmd: EditSection) -> Intents:
        self.script.edit_section(cmd.index, title=cmd.title, content=cmd.content)
        return []

    def _focus_section(self, cmd: FocusSection) -> Intents:
        self.script.focus(cmd.index)
        return []

    def _delete_section(self, cmd: DeleteSection) -> Intents:
        if self.script.delete_section(cmd.index, self._confirm):
            return [Persist()]
        return []

    def _add_element(self, cmd: AddElement) -> Intents:
        element = self.canvas.add_element(cmd.type, cmd.text, cmd.style)
        return [Notify(f"{element.type} added to canvas"), Persist()]

    def _reposition_element(self, cmd: RepositionElement) -> Intents:
        self.canvas.reposition(cmd.index, self._rng)
        return [Persist()]

    def _add_track(self, cmd: AddTrack) -> Intents:
        self.timeline.add_track(self._rng)
        return [Notify("New clip added to timeline"), Persist()]

    def _split_clip(self, cmd: SplitClip) -> Intents:
        if self.timeline.split_clip() is None:
            return []
        at = format_time(self.clock.state.current_time)
        return [Notify(f"Clip split at {at}"), Persist()]

    def _add_voiceover(self, cmd: AddVoiceover) -> Intents:
        if self.timeline.add_voiceover(cmd.seconds, self.clock.state.duration) is None:
            return []
        return [Persist()]

    def _apply_cuts(self, cmd: ApplyCuts) -> Intents:
        self.timeline.apply_cuts(cmd.cuts, self.clock.state.duration)
        return [Persist()]

    def _tag_translation(self, cmd: TagTranslation) -> Intents:
        self.script.tag_translation(cmd.lang)
        return [Persist()]

    def _add_subtitle(self, cmd: AddSubtitle) -> Intents:
        self.canvas.add_subtitle(cmd.text)
        return [Persist()]

    # --- Convenience wrappers ---
    def toggle_playback(self) -> Intents:
        return self.dispatch(TogglePlayback())

    def seek(self, position: float) -> Intents:
        return self.dispatch(Seek(position))

    def add_section(self) -> Intents:
        return self.dispatch(AddSection())

    def edit_section(self, index: int, *, title=None, content=None) -> Intents:
        return self.dispatch(EditSection(index, title, content))

    def focus_section(self, index: Optional[int]) -> Intents:
        return self.dispatch(FocusSection(index))

    def delete_section(self, index: int) -> Intents:
        return self.dispatch(DeleteSection(index))

    def add_element(self, type: str, text=None, style=None) -> Intents:
        return self.dispatch(AddElement(type, text, style))

    def reposition_element(self, index: int) -> Intents:
        return self.dispatch(RepositionElement(index))

    def add_track(self) -> Intents:
        return self.dispatch(AddTrack())

    def split_clip(self) -> Intents:
        return self.dispatch(SplitClip())

    # --- Translate dialog ---
    def open_translate_dialog(self) -> None:
        self.translate_dialog_open = True
        self.translateDialogChanged.emit(True)

    def close_translate_dialog(self) -> None:
        self.translate_dialog_open = False
        self.translateDialogChanged.emit(False)

    # --- Backend actions ---
    def _run(
        self,
        control: str,
        start: Callable[[Callable, Callable], None],
        on_success: Callable[[Any], None],
        failure_message: str,
    ) -> bool:
        """Run an async backend call while ``control`` is held busy."""
        if self.controls.busy(control):
            return False
        hold: ControlHold = self.controls.hold(control, BUSY_LABELS[control])

        def ok(result):
            try:
                on_success(result)
            finally:
                hold.release()
                self.changed.emit()

        def fail(error: EditorError):
            try:
                logger.warning("%s: %s", failure_message, error)
                self._notify(failure_message, "error")
            finally:
                hold.release()
                self.changed.emit()

        try:
            start(ok, fail)
        except Exception:
            logger.exception(failure_message)
            hold.release()
            self._notify(failure_message, "error")
            return False
        return True

    def _is_current(self, project: Project, action: str) -> bool:
        """False when another load replaced ``project`` while a request was out."""
        if self.project is project:
            return True
        logger.info("%s result for %s arrived after a reload; dropping", action, project.id)
        return False

    def _rejected(self, error: ValidationGap) -> bool:
        logger.info("validation: %s", error)
        self._notify(str(error), "error")
        return False

    def _speech_text(self) -> str:
        section = self.script.focused_section()
        if section is None and len(self.script):
            section = self.script.sections[0]
        if section is None or not section.content:
            raise ValidationGap("Please enter script text first")
        return section.content

    def _rewrite_target(self):
        section = self.script.focused_section()
        if section is None:
            raise ValidationGap("Please click inside a script section to rewrite")
        if not section.content:
            raise ValidationGap("Script section is empty")
        return section

    def _subtitle_text(self) -> str:
        if not len(self.script):
            raise ValidationGap("No script found to generate subtitles")
        text = build_subtitle(self.script.sections)
        if not text:
            raise ValidationGap("Script sections are empty")
        return text

    def generate_speech(self) -> bool:
        if not self.has_project():
            return False
        project = self.project
        try:
            text = self._speech_text()
        except ValidationGap as e:
            return self._rejected(e)

        def done(result):
            if not self._is_current(project, "speech"):
                return
            self._notify("Voiceover generated!")
            self.dispatch(AddVoiceover(result.duration))

        return self._run(
            "speech",
            lambda ok, fail: self._ai.tts(text, self.config.voice, ok, fail),
            done,
            "Failed to generate speech",
        )

    def rewrite_section(self) -> bool:
        if not self.has_project():
            return False
        try:
            section = self._rewrite_target()
        except ValidationGap as e:
            return self._rejected(e)

        def done(result):
            index = next(
                (i for i, s in enumerate(self.script.sections) if s is section), None
            )
            if index is None:
                logger.info("rewrite target was deleted; dropping result")
                return
            self.dispatch(EditSection(index, content=result.text))
            self._perform([Notify("Script rewritten by AI"), Persist()])

        return self._run(
            "rewrite",
            lambda ok, fail: self._ai.rewrite(section.content, self.config.tone, ok, fail),
            done,
            "Rewrite failed",
        )

    def translate(self) -> bool:
        if not self.has_project():
            return False
        text = self.script.full_text()

        def done(result):
            self._notify(f"Project translated to {result.lang}")
            self.dispatch(TagTranslation(result.lang))
            self.close_translate_dialog()

        return self._run(
            "translate",
            lambda ok, fail: self._ai.translate(
                text, self.config.source_lang, self.config.target_lang, ok, fail
            ),
            done,
            "Translation failed",
        )

    def generate_subtitles(self) -> bool:
        if not self.has_project():
            return False
        self._notify("AI is generating subtitles from script...", "info")
        try:
            text = self._subtitle_text()
        except ValidationGap as e:
            return self._rejected(e)
        self.dispatch(AddSubtitle(text))
        self._notify("Subtitles generated successfully!")
        return True

    def auto_cut(self) -> bool:
        project = self.project
        if project is None:
            return False
        self._notify("AI is analyzing video for silences...", "info")

        def done(result):
            if not self._is_current(project, "auto-cut"):
                return
            if not result.cuts:
                self._notify("No silences found", "info")
                return
            self._notify(
                f"AI found {len(result.cuts)} silences. Applying cuts...", "success"
            )
            self.dispatch(ApplyCuts(tuple(result.cuts)))

        return self._run(
            "cuts",
            lambda ok, fail: self._ai.cuts(project.id, ok, fail),
            done,
            "AI Auto-Cut failed",
        )

    def export(self) -> bool:
        project = self.project
        if project is None:
            return False
        self._notify("Starting export...", "info")

        def fail(error: EditorError):
            logger.warning("export failed: %s", error)
            self._notify("Export failed", "error")

        self._export.export_project(
            project.id,
            lambda: self._notify("Export processed! Download starting...", "success"),
            fail,
        )
        return True


__all__ = ["EditorSession", "EntryParams", "CONTROL_LABELS", "confirm_always"]
