"""Editor error taxonomy.

Every failure a session action can hit is one of these. Services raise or
deliver them; ``EditorSession`` converts them into notifications at the
point of the triggering action.
"""

from __future__ import annotations

from typing import Optional


class EditorError(Exception):
    """Base class for recoverable editor failures."""


class NotFound(EditorError):
    """The requested project does not exist (or the backend refused it)."""

    def __init__(self, project_id: str, status: Optional[int] = None):
        super().__init__(f"project {project_id!r} not found")
        self.project_id = project_id
        self.status = status


class TransportFailure(EditorError):
    """Network error, non-2xx response or ``{success: false}`` body."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class ValidationGap(EditorError):
    """Required input is missing, e.g. no script text for an AI action."""


__all__ = ["EditorError", "NotFound", "TransportFailure", "ValidationGap"]
