"""JSON-over-HTTP transport to the editor backend.

``Transport.send`` is asynchronous: it returns immediately and calls
``on_reply`` with a ``Reply`` once the request resolves on the event loop.
``QtTransport`` implements it with ``QNetworkAccessManager``; tests provide
their own in-memory transport.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from PySide6.QtCore import QByteArray, QObject, QUrl
from PySide6.QtNetwork import QNetworkAccessManager, QNetworkReply, QNetworkRequest

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Reply:
    status: int  # 0 when the request never reached the server
    data: Any = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and 200 <= self.status < 300


ReplyCallback = Callable[[Reply], None]


class Transport:
    def send(
        self,
        method: str,
        path: str,
        body: Optional[dict] = None,
        on_reply: Optional[ReplyCallback] = None,
    ) -> None:
        raise NotImplementedError


def decode_body(raw: bytes) -> Any:
    """Decode a JSON body; empty or malformed payloads decode to None."""
    if not raw:
        return None
    try:
        return json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError):
        return None


class QtTransport(QObject, Transport):
    def __init__(self, base_url: str, parent: Optional[QObject] = None, *, manager=None):
        super().__init__(parent)
        self._base = base_url.rstrip("/")
        self._manager = manager or QNetworkAccessManager(self)

    def url_for(self, path: str) -> str:
        return f"{self._base}/{path.lstrip('/')}"

    def send(self, method, path, body=None, on_reply=None):
        request = QNetworkRequest(QUrl(self.url_for(path)))
        request.setHeader(
            QNetworkRequest.KnownHeaders.ContentTypeHeader, "application/json"
        )
        payload = QByteArray(json.dumps(body).encode("utf-8")) if body is not None else QByteArray()
        verb = method.upper().encode("ascii")
        logger.debug("%s %s", method.upper(), path)
        reply = self._manager.sendCustomRequest(request, QByteArray(verb), payload)
        reply.finished.connect(lambda: self._finish(reply, method, path, on_reply))

    def _finish(self, reply: QNetworkReply, method: str, path: str, on_reply):
        status = reply.attribute(QNetworkRequest.Attribute.HttpStatusCodeAttribute)
        status = int(status) if status is not None else 0
        data = decode_body(bytes(reply.readAll().data()))
        error = None
        if reply.error() != QNetworkReply.NetworkError.NoError and status == 0:
            error = reply.errorString()
            logger.warning("%s %s failed: %s", method.upper(), path, error)
        reply.deleteLater()
        if on_reply is not None:
            on_reply(Reply(status=status, data=data, error=error))


__all__ = ["Transport", "QtTransport", "Reply", "ReplyCallback", "decode_body"]
