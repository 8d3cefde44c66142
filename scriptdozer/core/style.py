"""Structured positioning descriptor for canvas overlay elements.

Persisted projects store element styles as opaque CSS declaration strings.
``ElementStyle`` parses that string into ordered declarations with typed
accessors for the placement fields, and re-emits the original text verbatim
unless something was changed, so saved data round-trips unchanged.
"""

from __future__ import annotations

import re
from typing import Any, Dict, Iterator, Mapping, Optional, Tuple, Union

_PERCENT_RE = re.compile(r"^\s*(-?\d+(?:\.\d+)?(?:[eE][-+]?\d+)?)\s*%\s*$")


def _format_percent(value: float) -> str:
    if float(value).is_integer():
        return f"{int(value)}%"
    return f"{value!r}%"


class ElementStyle:
    def __init__(self, declarations: Optional[Mapping[str, str]] = None, *, raw: Optional[str] = None):
        self._decls: Dict[str, str] = dict(declarations or {})
        self._raw = raw

    # --- Parsing / serialization ---
    @classmethod
    def parse(cls, value: Union[str, Mapping[str, Any], "ElementStyle", None]) -> "ElementStyle":
        if value is None:
            return cls()
        if isinstance(value, ElementStyle):
            return value.copy()
        if isinstance(value, Mapping):
            return cls({str(k).strip().lower(): str(v) for k, v in value.items()})
        decls: Dict[str, str] = {}
        for chunk in str(value).split(";"):
            if ":" not in chunk:
                continue
            name, _, val = chunk.partition(":")
            name = name.strip().lower()
            if name:
                decls[name] = val.strip()
        return cls(decls, raw=str(value))

    def to_css(self) -> str:
        if self._raw is not None:
            return self._raw
        return " ".join(f"{k}: {v};" for k, v in self._decls.items())

    def copy(self) -> "ElementStyle":
        return ElementStyle(self._decls, raw=self._raw)

    # --- Declaration access ---
    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self._decls.get(name.lower(), default)

    def set(self, name: str, value: str) -> None:
        self._decls[name.lower()] = value
        self._raw = None  # re-render from declarations

    def items(self) -> Iterator[Tuple[str, str]]:
        return iter(self._decls.items())

    def _percent(self, name: str) -> Optional[float]:
        val = self._decls.get(name)
        if val is None:
            return None
        m = _PERCENT_RE.match(val)
        return float(m.group(1)) if m else None

    @property
    def top(self) -> Optional[float]:
        return self._percent("top")

    @top.setter
    def top(self, value: float) -> None:
        self.set("top", _format_percent(value))

    @property
    def left(self) -> Optional[float]:
        return self._percent("left")

    @left.setter
    def left(self, value: float) -> None:
        self.set("left", _format_percent(value))

    @property
    def position(self) -> Optional[str]:
        return self._decls.get("position")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ElementStyle):
            return NotImplemented
        return self.to_css() == other.to_css()

    def __repr__(self) -> str:
        return f"ElementStyle({self.to_css()!r})"


DEFAULT_ELEMENT_STYLE = (
    "position: absolute; top: 50%; left: 50%; transform: translate(-50%, -50%); "
    "padding: 0.5rem 1rem; background: rgba(255, 255, 255, 0.1); "
    "border: 1px solid rgba(255,255,255,0.2); border-radius: 4px; color: white; "
    "cursor: move; font-weight: 500; z-index: 10; user-select: none;"
)

SUBTITLE_STYLE = (
    "position: absolute; bottom: 10%; left: 50%; transform: translateX(-50%); "
    "width: 80%; text-align: center; color: white; background: rgba(0,0,0,0.6); "
    "padding: 8px 16px; border-radius: 4px; font-size: 1.2rem; font-weight: 500; "
    "font-family: Outfit, sans-serif; pointer-events: none; "
    "text-shadow: 1px 1px 2px rgba(0,0,0,0.8);"
)


__all__ = ["ElementStyle", "DEFAULT_ELEMENT_STYLE", "SUBTITLE_STYLE"]
