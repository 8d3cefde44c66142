"""Ordered script sections.

Section numbers shown to the user are always the 1-based list positions;
``_renumber`` runs after every structural change.
"""

from __future__ import annotations

from typing import Callable, List, Optional

from .project import ScriptSection

ConfirmFn = Callable[[str], bool]

UNTITLED = "Untitled Section"
DELETE_PROMPT = "Delete section?"


def default_sections(project_name: str) -> List[ScriptSection]:
    name = project_name or "Untitled"
    return [
        ScriptSection(
            "Intro", f"Welcome to {name}. This is an AI-generated video tutorial."
        ),
        ScriptSection(
            "Video", "Let me show you the key features and how to use them effectively."
        ),
        ScriptSection(
            "Outro",
            "Thank you for watching. Don't forget to subscribe for more tutorials!",
        ),
    ]


class ScriptModel:
    def __init__(self, sections: Optional[List[ScriptSection]] = None):
        self._sections: List[ScriptSection] = list(sections or [])
        self._numbers: List[int] = []
        self.focused: Optional[int] = None
        self._renumber()

    @classmethod
    def hydrate(
        cls, sections: Optional[List[ScriptSection]], project_name: str
    ) -> "ScriptModel":
        if sections is None:
            return cls(default_sections(project_name))
        return cls([ScriptSection(s.title, s.content) for s in sections])

    # --- Read access ---
    @property
    def sections(self) -> List[ScriptSection]:
        return list(self._sections)

    def __len__(self) -> int:
        return len(self._sections)

    def labels(self) -> List[int]:
        return list(self._numbers)

    def focused_section(self) -> Optional[ScriptSection]:
        if self.focused is None:
            return None
        return self._sections[self.focused]

    def full_text(self) -> str:
        return "\n".join(s.content for s in self._sections)

    # --- Mutations ---
    def add_section(self) -> int:
        """Append an empty untitled section and focus it; returns its index."""
        self._sections.append(ScriptSection(UNTITLED, ""))
        self._renumber()
        self.focused = len(self._sections) - 1
        return self.focused

    def edit_section(
        self, index: int, *, title: Optional[str] = None, content: Optional[str] = None
    ) -> ScriptSection:
        section = self._at(index)
        if title is not None:
            section.title = title
        if content is not None:
            section.content = content
        return section

    def focus(self, index: Optional[int]) -> None:
        if index is not None:
            self._at(index)
        self.focused = index

    def delete_section(self, index: int, confirm: ConfirmFn) -> bool:
        """Remove the section at ``index`` if ``confirm`` approves.

        Returns True when the section was removed.
        """
        self._at(index)
        if not confirm(DELETE_PROMPT):
            return False
        del self._sections[index]
        if self.focused is not None:
            if self.focused == index:
                self.focused = None
            elif self.focused > index:
                self.focused -= 1
        self._renumber()
        return True

    def tag_translation(self, lang: str) -> int:
        """Prefix ``[lang] `` to sections not already tagged; returns count."""
        tagged = 0
        for section in self._sections:
            if not section.content.startswith("["):
                section.content = f"[{lang}] {section.content}"
                tagged += 1
        return tagged

    def to_list(self) -> List[dict]:
        return [s.to_dict() for s in self._sections]

    # Internal
    def _at(self, index: int) -> ScriptSection:
        if index < 0 or index >= len(self._sections):
            raise IndexError("section index out of range")
        return self._sections[index]

    def _renumber(self) -> None:
        self._numbers = [i + 1 for i in range(len(self._sections))]


__all__ = ["ScriptModel", "default_sections", "UNTITLED", "DELETE_PROMPT"]
