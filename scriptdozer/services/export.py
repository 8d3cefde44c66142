"""Export trigger.

The backend renders the project; the client only asks for it and, on
success, announces a download after a short delay. The download itself is
a stub: ``downloadReady`` carries the suggested file name and the UI
decides what to do with it.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from PySide6.QtCore import QObject, QTimer, Signal

from ..errors import EditorError, TransportFailure
from .transport import Reply, Transport

logger = logging.getLogger(__name__)

DOWNLOAD_NAME = "project.mp4"


class ExportService(QObject):
    downloadReady = Signal(str)

    def __init__(
        self,
        transport: Transport,
        parent: Optional[QObject] = None,
        *,
        download_delay_ms: int = 1000,
    ):
        super().__init__(parent)
        self._transport = transport
        self._delay = download_delay_ms

    def export_project(
        self,
        project_id: str,
        on_success: Callable[[], None],
        on_error: Callable[[EditorError], None],
    ) -> None:
        def done(reply: Reply):
            data = reply.data if isinstance(reply.data, dict) else {}
            if not reply.ok or not data.get("success"):
                logger.warning("export %s failed: %s", project_id, reply.error or reply.status)
                on_error(TransportFailure(reply.error or "export failed", reply.status))
                return
            on_success()
            QTimer.singleShot(self._delay, lambda: self.downloadReady.emit(DOWNLOAD_NAME))

        self._transport.send("POST", f"/api/projects/{project_id}/export", None, done)


__all__ = ["ExportService", "DOWNLOAD_NAME"]
