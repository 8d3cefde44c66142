"""Free-floating overlay elements rendered above the preview surface."""

from __future__ import annotations

import random
from typing import List, Mapping, Optional, Union

from .project import CanvasElement
from .style import DEFAULT_ELEMENT_STYLE, SUBTITLE_STYLE, ElementStyle

REPOSITION_MIN = 20.0
REPOSITION_MAX = 80.0

StyleLike = Union[str, Mapping[str, str], ElementStyle, None]


class CanvasOverlayModel:
    def __init__(self, elements: Optional[List[CanvasElement]] = None):
        self._elements: List[CanvasElement] = []
        for el in elements or []:
            self.add_element(el.type, el.text, el.style)

    @property
    def elements(self) -> List[CanvasElement]:
        return list(self._elements)

    def __len__(self) -> int:
        return len(self._elements)

    def add_element(
        self, type: str, text: Optional[str] = None, style: StyleLike = None
    ) -> CanvasElement:
        """Append an overlay; a supplied style is kept verbatim."""
        parsed = ElementStyle.parse(DEFAULT_ELEMENT_STYLE if style is None else style)
        element = CanvasElement(type=type, text=type if text is None else text, style=parsed)
        self._elements.append(element)
        return element

    def add_subtitle(self, text: str, style: StyleLike = SUBTITLE_STYLE) -> CanvasElement:
        return self.add_element("subtitle", text, style)

    def reposition(
        self, index: int, rng: Optional[random.Random] = None
    ) -> CanvasElement:
        """Move element ``index`` to a random spot in the central 20-80% box."""
        if index < 0 or index >= len(self._elements):
            raise IndexError("element index out of range")
        r = rng or random
        element = self._elements[index]
        element.style.top = REPOSITION_MIN + r.random() * (REPOSITION_MAX - REPOSITION_MIN)
        element.style.left = REPOSITION_MIN + r.random() * (REPOSITION_MAX - REPOSITION_MIN)
        return element

    def to_list(self) -> List[dict]:
        return [e.to_dict() for e in self._elements]


__all__ = ["CanvasOverlayModel", "REPOSITION_MIN", "REPOSITION_MAX"]
