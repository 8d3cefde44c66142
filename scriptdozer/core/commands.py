"""Typed editor commands and the side-effect intents they produce.

A UI (or test) builds a command and hands it to ``EditorSession.dispatch``.
The session routes it to the owning model and returns the intents the
model change implies; the session then performs them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union

from .style import ElementStyle
from .timeline import Cut


# --- Commands ---
@dataclass(frozen=True)
class TogglePlayback:
    pass


@dataclass(frozen=True)
class Seek:
    position: float  # fraction of duration, clamped to [0, 1]


@dataclass(frozen=True)
class AddSection:
    pass


@dataclass(frozen=True)
class EditSection:
    index: int
    title: Optional[str] = None
    content: Optional[str] = None


@dataclass(frozen=True)
class FocusSection:
    index: Optional[int]


@dataclass(frozen=True)
class DeleteSection:
    index: int


@dataclass(frozen=True)
class AddElement:
    type: str
    text: Optional[str] = None
    style: Union[str, ElementStyle, None] = None


@dataclass(frozen=True)
class RepositionElement:
    index: int


@dataclass(frozen=True)
class AddTrack:
    pass


@dataclass(frozen=True)
class SplitClip:
    pass


@dataclass(frozen=True)
class AddVoiceover:
    seconds: float


@dataclass(frozen=True)
class ApplyCuts:
    cuts: Tuple[Cut, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class TagTranslation:
    lang: str


@dataclass(frozen=True)
class AddSubtitle:
    text: str


Command = Union[
    TogglePlayback,
    Seek,
    AddSection,
    EditSection,
    FocusSection,
    DeleteSection,
    AddElement,
    RepositionElement,
    AddTrack,
    SplitClip,
    AddVoiceover,
    ApplyCuts,
    TagTranslation,
    AddSubtitle,
]


# --- Intents ---
@dataclass(frozen=True)
class Persist:
    silent: bool = True


@dataclass(frozen=True)
class Notify:
    message: str
    level: str = "success"  # success | error | info


Intent = Union[Persist, Notify]
Intents = List[Intent]


__all__ = [
    "TogglePlayback",
    "Seek",
    "AddSection",
    "EditSection",
    "FocusSection",
    "DeleteSection",
    "AddElement",
    "RepositionElement",
    "AddTrack",
    "SplitClip",
    "AddVoiceover",
    "ApplyCuts",
    "TagTranslation",
    "AddSubtitle",
    "Command",
    "Persist",
    "Notify",
    "Intent",
    "Intents",
]
