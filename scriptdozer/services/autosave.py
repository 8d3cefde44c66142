"""Autosave scheduling.

A repeating timer asks for a silent save while a project is loaded, and
mutating actions call ``request`` for an immediate one. Both paths go
through ``save_fn``, which is expected to skip unchanged content.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from PySide6.QtCore import QObject, QTimer

logger = logging.getLogger(__name__)


class AutosaveScheduler(QObject):
    def __init__(
        self,
        save_fn: Callable[[], bool],
        is_active: Callable[[], bool],
        parent: Optional[QObject] = None,
        *,
        interval_ms: int = 30000,
    ):
        super().__init__(parent)
        self._save_fn = save_fn
        self._is_active = is_active
        self._timer = QTimer(self)
        self._timer.setInterval(interval_ms)
        self._timer.timeout.connect(self._onTimeout)

    @property
    def running(self) -> bool:
        return self._timer.isActive()

    @property
    def interval_ms(self) -> int:
        return self._timer.interval()

    def start(self) -> None:
        self._timer.start()

    def stop(self) -> None:
        self._timer.stop()

    def request(self) -> bool:
        """Immediate silent save; returns True if one was issued."""
        if not self._is_active():
            return False
        return self._save_fn()

    def _onTimeout(self):
        if self.request():
            logger.debug("autosave issued")


__all__ = ["AutosaveScheduler"]
