"""Busy state for action controls.

An action that waits on the backend disables its control and swaps in a
busy label for the duration of the request. ``ControlRegistry.hold``
returns a ``ControlHold``; releasing it (explicitly or by leaving a
``with`` block) restores the original label and re-enables the control.
Release is idempotent, so success, failure and exception paths can all
call it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Mapping, Optional

from PySide6.QtCore import QObject, Signal


@dataclass
class ControlState:
    label: str
    enabled: bool = True


class ControlHold:
    def __init__(self, registry: "ControlRegistry", name: str, original: str):
        self._registry = registry
        self._name = name
        self._original = original
        self._released = False

    @property
    def released(self) -> bool:
        return self._released

    def release(self) -> None:
        if self._released:
            return
        self._released = True
        self._registry._restore(self._name, self._original)

    def __enter__(self) -> "ControlHold":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()


class ControlRegistry(QObject):
    changed = Signal(str)  # control name

    def __init__(self, labels: Mapping[str, str], parent: Optional[QObject] = None):
        super().__init__(parent)
        self._controls: Dict[str, ControlState] = {
            name: ControlState(label) for name, label in labels.items()
        }

    def state(self, name: str) -> ControlState:
        s = self._controls[name]
        return ControlState(s.label, s.enabled)

    def busy(self, name: str) -> bool:
        return not self._controls[name].enabled

    def hold(self, name: str, busy_label: str) -> ControlHold:
        control = self._controls[name]
        if not control.enabled:
            raise RuntimeError(f"control {name!r} is already busy")
        hold = ControlHold(self, name, control.label)
        control.enabled = False
        control.label = busy_label
        self.changed.emit(name)
        return hold

    def _restore(self, name: str, label: str) -> None:
        control = self._controls[name]
        control.enabled = True
        control.label = label
        self.changed.emit(name)


__all__ = ["ControlRegistry", "ControlHold", "ControlState"]
