"""Runtime configuration.

Values come from constructor defaults, optionally overridden by
``SCRIPTDOZER_*`` environment variables via ``EditorConfig.from_env``.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace
from typing import Mapping, Optional

logger = logging.getLogger(__name__)

DEFAULT_VIDEO_URL = (
    "https://commondatastorage.googleapis.com/gtv-videos-bucket/sample/BigBuckBunny.mp4"
)


@dataclass(frozen=True)
class EditorConfig:
    api_base: str = "http://localhost:3000"
    autosave_interval_ms: int = 30000
    tick_interval_ms: int = 100
    tick_step: float = 0.1  # seconds advanced per simulated tick
    default_duration: float = 60.0
    auto_open_delay_ms: int = 500
    download_delay_ms: int = 1000
    default_video_url: str = DEFAULT_VIDEO_URL
    voice: str = "alloy"
    tone: str = "professional"
    source_lang: str = "English"
    target_lang: str = "Spanish"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "EditorConfig":
        env = os.environ if environ is None else environ
        cfg = cls()
        overrides = {}
        if env.get("SCRIPTDOZER_API_BASE"):
            overrides["api_base"] = env["SCRIPTDOZER_API_BASE"].rstrip("/")
        if env.get("SCRIPTDOZER_DEFAULT_VIDEO"):
            overrides["default_video_url"] = env["SCRIPTDOZER_DEFAULT_VIDEO"]
        if env.get("SCRIPTDOZER_LOG_LEVEL"):
            overrides["log_level"] = env["SCRIPTDOZER_LOG_LEVEL"].upper()
        autosave = env.get("SCRIPTDOZER_AUTOSAVE_MS")
        if autosave is not None:
            try:
                value = int(autosave)
                if value > 0:
                    overrides["autosave_interval_ms"] = value
            except ValueError:
                logger.warning("ignoring SCRIPTDOZER_AUTOSAVE_MS=%r", autosave)
        return replace(cfg, **overrides)


__all__ = ["EditorConfig", "DEFAULT_VIDEO_URL"]
