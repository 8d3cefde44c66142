"""Project persistence against the backend.

Saves are partial: callers pass only the content fields they recomputed and
the store merges them over the last known content, preserving fields it
does not own (``videoUrl`` and anything unknown). A successful save makes
the merged object the new source of truth; a failed one changes nothing.

At most one save is in flight. Saves requested meanwhile collapse into a
single pending save (latest state wins) that is issued when the in-flight
request resolves, so responses can never land out of order.
"""

from __future__ import annotations

import hashlib
import json
import logging
from dataclasses import dataclass
from typing import Any, Optional

from PySide6.QtCore import QObject, Signal

from ..core.project import Project, ProjectContent
from ..errors import NotFound, TransportFailure
from .transport import Reply, Transport

logger = logging.getLogger(__name__)


def content_digest(content: dict[str, Any]) -> str:
    """Stable hash of a content dict, ignoring ``lastModified``."""
    body = {k: v for k, v in content.items() if k != "lastModified"}
    return hashlib.sha1(
        json.dumps(body, sort_keys=True, default=str).encode("utf-8")
    ).hexdigest()


@dataclass
class _SaveRequest:
    project_id: str
    partial: dict[str, Any]
    silent: bool


class ProjectStore(QObject):
    loaded = Signal(object)  # Project
    loadFailed = Signal(object)  # EditorError
    saved = Signal(object, bool)  # merged content dict, silent
    saveFailed = Signal(object, bool)  # EditorError, silent

    def __init__(self, transport: Transport, parent: Optional[QObject] = None):
        super().__init__(parent)
        self._transport = transport
        self._project: Optional[Project] = None
        self._in_flight: Optional[_SaveRequest] = None
        self._pending: Optional[_SaveRequest] = None
        self._saved_digest: Optional[str] = None
        self._requested_digest: Optional[str] = None

    @property
    def project(self) -> Optional[Project]:
        return self._project

    @property
    def saving(self) -> bool:
        return self._in_flight is not None

    # --- Load ---
    def load(self, project_id: str) -> None:
        self._transport.send(
            "GET",
            f"/api/projects/{project_id}",
            None,
            lambda reply: self._onLoaded(project_id, reply),
        )

    def _onLoaded(self, project_id: str, reply: Reply):
        if not reply.ok or not isinstance(reply.data, dict):
            logger.warning("load %s failed (status %s)", project_id, reply.status)
            self.loadFailed.emit(NotFound(project_id, reply.status or None))
            return
        try:
            project = Project.from_dict(reply.data)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("malformed project %s: %s", project_id, e)
            self.loadFailed.emit(TransportFailure(f"malformed project: {e}", reply.status))
            return
        self._project = project
        self._pending = None
        self._saved_digest = content_digest(project.content.to_dict())
        self._requested_digest = self._saved_digest
        logger.info("loaded project %s (%s)", project.id, project.type)
        self.loaded.emit(project)

    # --- Save ---
    def merge(self, partial: dict[str, Any]) -> dict[str, Any]:
        if self._project is None:
            raise RuntimeError("no project loaded")
        merged = self._project.content.to_dict()
        merged.update(partial)
        return merged

    def is_dirty(self, partial: dict[str, Any]) -> bool:
        if self._project is None:
            return False
        return content_digest(self.merge(partial)) != self._requested_digest

    def save(self, partial: dict[str, Any], *, silent: bool = False) -> bool:
        """Queue a save; returns False when no project is loaded."""
        if self._project is None:
            return False
        self._requested_digest = content_digest(self.merge(partial))
        request = _SaveRequest(self._project.id, dict(partial), silent)
        if self._in_flight is not None:
            if self._pending is not None and not self._pending.silent:
                request.silent = False
            self._pending = request
            return True
        self._send(request)
        return True

    def save_if_changed(self, partial: dict[str, Any], *, silent: bool = True) -> bool:
        if not self.is_dirty(partial):
            return False
        return self.save(partial, silent=silent)

    def _send(self, request: _SaveRequest):
        merged = self.merge(request.partial)
        self._in_flight = request
        self._transport.send(
            "PUT",
            f"/api/projects/{request.project_id}",
            {"content": merged},
            lambda reply: self._onSaved(request, merged, reply),
        )

    def _onSaved(self, request: _SaveRequest, merged: dict[str, Any], reply: Reply):
        self._in_flight = None
        current = self._project is not None and self._project.id == request.project_id
        if reply.ok and current:
            self._project.content = ProjectContent.from_dict(merged)
            self._saved_digest = content_digest(merged)
            self.saved.emit(merged, request.silent)
        elif reply.ok:
            logger.info("dropping save result for unloaded project %s", request.project_id)
        else:
            # force the next dirty check to resubmit
            self._requested_digest = None
            logger.warning(
                "save %s failed: %s", request.project_id, reply.error or reply.status
            )
            self.saveFailed.emit(
                TransportFailure(reply.error or "save failed", reply.status or None),
                request.silent,
            )
        if self._pending is not None and self._project is not None:
            nxt, self._pending = self._pending, None
            self._send(nxt)


__all__ = ["ProjectStore", "content_digest"]
