"""Subtitle text derived from the script.

Only a single subtitle is produced for now: the first non-empty section,
with any leading translation tag such as ``[Spanish] `` removed.
"""

from __future__ import annotations

import re
from typing import Iterable, Optional

from ..core.project import ScriptSection

TRANSLATION_TAG = re.compile(r"^\[.*?\]\s*")


def strip_translation_tag(text: str) -> str:
    return TRANSLATION_TAG.sub("", text, count=1)


def build_subtitle(sections: Iterable[ScriptSection]) -> Optional[str]:
    for section in sections:
        text = section.content.strip()
        if text:
            return strip_translation_tag(text)
    return None


__all__ = ["build_subtitle", "strip_translation_tag", "TRANSLATION_TAG"]
