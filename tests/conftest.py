"""Shared fixtures: Qt application, in-memory backend, fake media."""

from dataclasses import dataclass
from typing import Any, Callable, List, Optional

import pytest
from PySide6.QtCore import QCoreApplication, QEventLoop, QTimer

from scriptdozer.media.sources import MediaSource
from scriptdozer.services.transport import Reply, Transport


@pytest.fixture(scope="session")
def qt_app():
    return QCoreApplication.instance() or QCoreApplication([])


def spin(ms: int) -> None:
    """Process Qt events for ``ms`` milliseconds."""
    loop = QEventLoop()
    QTimer.singleShot(ms, loop.quit)
    loop.exec()


@dataclass
class PendingRequest:
    method: str
    path: str
    body: Optional[dict]
    on_reply: Optional[Callable[[Reply], None]]


class FakeTransport(Transport):
    """Records requests; tests resolve them explicitly, in any order."""

    def __init__(self):
        self.requests: List[PendingRequest] = []
        self.sent: List[PendingRequest] = []

    def send(self, method, path, body=None, on_reply=None):
        req = PendingRequest(method, path, body, on_reply)
        self.requests.append(req)
        self.sent.append(req)

    def pending(self, method: str, path: str) -> List[PendingRequest]:
        return [r for r in self.requests if r.method == method and r.path == path]

    def resolve(self, index: int = 0, status: int = 200, data: Any = None, error=None):
        req = self.requests.pop(index)
        if req.on_reply is not None:
            req.on_reply(Reply(status=status, data=data, error=error))
        return req

    def resolve_path(self, method: str, path: str, **kwargs):
        for i, r in enumerate(self.requests):
            if r.method == method and r.path == path:
                return self.resolve(i, **kwargs)
        raise AssertionError(f"no pending {method} {path}")


class FakeMedia(MediaSource):
    def __init__(self, parent=None):
        super().__init__(parent)
        self.calls: List[tuple] = []
        self._paused = True

    def open(self):
        self.calls.append(("open",))

    def play(self):
        self._paused = False
        self.calls.append(("play",))

    def pause(self):
        self._paused = True
        self.calls.append(("pause",))

    def seek(self, seconds):
        self.calls.append(("seek", seconds))

    @property
    def paused(self):
        return self._paused

    def start_externally(self):
        self._paused = False


@pytest.fixture
def transport():
    return FakeTransport()


def project_doc(**content) -> dict:
    doc = {"id": "p1", "name": "Demo", "type": "script", "content": {}}
    doc["content"].update(content)
    return doc
