"""Top-level package exports.

Public API surface (keep minimal):
 - EditorSession, EntryParams (session controller)
 - EditorConfig (runtime configuration)
 - format_time (transport display)
"""

from .config import EditorConfig  # noqa: F401
from .session import EditorSession, EntryParams  # noqa: F401
from .utils.timefmt import format_time  # noqa: F401

__all__ = ["EditorSession", "EntryParams", "EditorConfig", "format_time"]
