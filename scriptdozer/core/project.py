"""Project document model.

A project is ``{id, name, type, content}``; ``content`` holds the script
sections, timeline tracks, canvas elements, optional media reference and a
modification timestamp. Keys the editor does not own are carried through
``extra`` so a save never drops them.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, List, Optional

from .style import ElementStyle

_WIDTH_RE = re.compile(r"^\s*(-?\d+(?:\.\d+)?(?:[eE][-+]?\d+)?)\s*%?\s*$")


def parse_width(value: Any) -> float:
    """Accept ``40``, ``40.5`` or ``"40%"`` and return the percentage."""
    if isinstance(value, (int, float)):
        return float(value)
    m = _WIDTH_RE.match(str(value))
    if not m:
        raise ValueError(f"invalid clip width: {value!r}")
    return float(m.group(1))


def _mapping(data: Any, what: str) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise TypeError(f"{what} must be an object, got {type(data).__name__}")
    return data


def format_width(width: float) -> str:
    if float(width).is_integer():
        return f"{int(width)}%"
    return f"{width!r}%"


@dataclass
class ScriptSection:
    title: str = ""
    content: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"title": self.title, "content": self.content}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ScriptSection":
        data = _mapping(data, "script section")
        return cls(title=str(data.get("title", "")), content=str(data.get("content", "")))


@dataclass
class Clip:
    width: float  # percent of timeline duration
    color: str
    opacity: Optional[float] = None
    removed: bool = False
    reason: Optional[str] = None
    title: Optional[str] = None

    def clone(self) -> "Clip":
        return Clip(
            width=self.width,
            color=self.color,
            opacity=self.opacity,
            removed=self.removed,
            reason=self.reason,
            title=self.title,
        )

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"width": format_width(self.width), "color": self.color}
        if self.opacity is not None:
            d["opacity"] = self.opacity
        if self.removed:
            d["removed"] = True
        if self.reason is not None:
            d["reason"] = self.reason
        if self.title is not None:
            d["title"] = self.title
        return d

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Clip":
        data = _mapping(data, "clip")
        opacity = data.get("opacity")
        return cls(
            width=parse_width(data.get("width", 0)),
            color=str(data.get("color", "")),
            opacity=float(opacity) if opacity is not None else None,
            removed=bool(data.get("removed", False)),
            reason=data.get("reason"),
            title=data.get("title"),
        )


@dataclass
class TimelineTrack:
    label: str
    clips: List[Clip] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"label": self.label, "clips": [c.to_dict() for c in self.clips]}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TimelineTrack":
        data = _mapping(data, "timeline track")
        return cls(
            label=str(data.get("label", "")),
            clips=[Clip.from_dict(c) for c in data.get("clips", [])],
        )


@dataclass
class CanvasElement:
    type: str
    text: str
    style: ElementStyle = field(default_factory=ElementStyle)

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "text": self.text, "style": self.style.to_css()}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CanvasElement":
        data = _mapping(data, "canvas element")
        return cls(
            type=str(data.get("type", "")),
            text=str(data.get("text", "")),
            style=ElementStyle.parse(data.get("style")),
        )


_CONTENT_KEYS = ("scripts", "timeline", "elements", "videoUrl", "lastModified")


@dataclass
class ProjectContent:
    # None means "never saved" so callers can seed defaults.
    scripts: Optional[List[ScriptSection]] = None
    timeline: Optional[List[TimelineTrack]] = None
    elements: List[CanvasElement] = field(default_factory=list)
    video_url: Optional[str] = None
    last_modified: Optional[str] = None
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = dict(self.extra)
        if self.scripts is not None:
            d["scripts"] = [s.to_dict() for s in self.scripts]
        if self.timeline is not None:
            d["timeline"] = [t.to_dict() for t in self.timeline]
        d["elements"] = [e.to_dict() for e in self.elements]
        if self.video_url is not None:
            d["videoUrl"] = self.video_url
        if self.last_modified is not None:
            d["lastModified"] = self.last_modified
        return d

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]]) -> "ProjectContent":
        data = _mapping(data or {}, "project content")
        scripts = data.get("scripts")
        timeline = data.get("timeline")
        return cls(
            scripts=(
                [ScriptSection.from_dict(s) for s in scripts]
                if isinstance(scripts, list)
                else None
            ),
            timeline=(
                [TimelineTrack.from_dict(t) for t in timeline]
                if isinstance(timeline, list)
                else None
            ),
            elements=[CanvasElement.from_dict(e) for e in data.get("elements") or []],
            video_url=data.get("videoUrl"),
            last_modified=data.get("lastModified"),
            extra={k: v for k, v in data.items() if k not in _CONTENT_KEYS},
        )


_PROJECT_KEYS = ("id", "name", "type", "content")


@dataclass
class Project:
    id: str
    name: str = "Untitled"
    type: str = "script"
    content: ProjectContent = field(default_factory=ProjectContent)
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def wants_media(self) -> bool:
        """True when playback should be backed by a real media source."""
        return self.type == "video" or bool(self.content.video_url)

    def to_dict(self) -> dict[str, Any]:
        d = dict(self.extra)
        d.update(
            id=self.id, name=self.name, type=self.type, content=self.content.to_dict()
        )
        return d

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Project":
        data = _mapping(data, "project")
        return cls(
            id=str(data["id"]),
            name=str(data.get("name") or "Untitled"),
            type=str(data.get("type") or "script"),
            content=ProjectContent.from_dict(data.get("content")),
            extra={k: v for k, v in data.items() if k not in _PROJECT_KEYS},
        )


__all__ = [
    "Project",
    "ProjectContent",
    "ScriptSection",
    "TimelineTrack",
    "Clip",
    "CanvasElement",
    "parse_width",
    "format_width",
]
