"""Client for the AI endpoints (speech, rewrite, translate, silence cuts).

Each call is asynchronous and reports through ``on_success(result)`` or
``on_error(EditorError)``. A non-2xx status, a transport error, a body
without ``success: true`` or a malformed body all count as
``TransportFailure``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, List

from ..core.timeline import Cut
from ..errors import EditorError, TransportFailure
from .transport import Reply, Transport

logger = logging.getLogger(__name__)

ErrorCallback = Callable[[EditorError], None]


@dataclass(frozen=True)
class SpeechResult:
    duration: float


@dataclass(frozen=True)
class RewriteResult:
    text: str


@dataclass(frozen=True)
class TranslateResult:
    lang: str


@dataclass(frozen=True)
class CutsResult:
    cuts: List[Cut]


def _parse_rewrite(data: dict) -> RewriteResult:
    text = data.get("text")
    if not isinstance(text, str):
        raise TypeError(f"rewrite text must be a string, got {type(text).__name__}")
    return RewriteResult(text=text)


class AIService:
    def __init__(self, transport: Transport):
        self._transport = transport

    def tts(self, text: str, voice: str, on_success, on_error: ErrorCallback) -> None:
        self._post(
            "/api/ai/tts",
            {"text": text, "voice": voice},
            lambda d: SpeechResult(duration=float(d.get("duration") or 0.0)),
            on_success,
            on_error,
        )

    def rewrite(self, text: str, tone: str, on_success, on_error: ErrorCallback) -> None:
        self._post(
            "/api/ai/rewrite",
            {"text": text, "tone": tone},
            _parse_rewrite,
            on_success,
            on_error,
        )

    def translate(
        self, text: str, source_lang: str, target_lang: str, on_success, on_error: ErrorCallback
    ) -> None:
        self._post(
            "/api/ai/translate",
            {"text": text, "sourceLang": source_lang, "targetLang": target_lang},
            lambda d: TranslateResult(lang=str(d.get("lang") or target_lang)),
            on_success,
            on_error,
        )

    def cuts(self, project_id: str, on_success, on_error: ErrorCallback) -> None:
        # order is preserved as returned; the timeline expects ascending starts
        self._post(
            "/api/ai/cuts",
            {"projectId": project_id},
            lambda d: CutsResult(cuts=[Cut.from_dict(c) for c in d.get("cuts") or []]),
            on_success,
            on_error,
        )

    def _post(
        self,
        path: str,
        body: dict,
        parse: Callable[[dict], Any],
        on_success,
        on_error: ErrorCallback,
    ) -> None:
        def done(reply: Reply):
            if not reply.ok:
                logger.warning("%s failed: %s", path, reply.error or reply.status)
                on_error(TransportFailure(reply.error or f"HTTP {reply.status}", reply.status))
                return
            data = reply.data
            if not isinstance(data, dict) or not data.get("success"):
                on_error(TransportFailure(f"{path} reported failure", reply.status))
                return
            try:
                result = parse(data)
            except (KeyError, TypeError, ValueError) as e:
                on_error(TransportFailure(f"malformed response from {path}: {e}", reply.status))
                return
            on_success(result)

        self._transport.send("POST", path, body, done)


__all__ = [
    "AIService",
    "SpeechResult",
    "RewriteResult",
    "TranslateResult",
    "CutsResult",
]
