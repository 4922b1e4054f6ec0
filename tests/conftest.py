from typing import Any, Callable

import httpx
import pytest
from fastapi.testclient import TestClient

from app import create_app
from core.config import Config
from ui import log_utils


class RecordingLogger:
    """RequestLogger that keeps every event in memory."""

    def __init__(self):
        self.events: list[tuple[str, dict[str, Any]]] = []

    def log(self, event: str, fields: dict[str, Any]) -> None:
        self.events.append((event, fields))

    def named(self, event: str) -> list[dict[str, Any]]:
        return [fields for name, fields in self.events if name == event]


class StubUpstream:
    """MockTransport handler that records requests and answers with a fixed reply."""

    def __init__(self, status_code: int = 200, content: bytes = b"hello", headers=None):
        self.status_code = status_code
        self.content = content
        self.headers = headers or {"content-type": "text/plain"}
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, content=self.content, headers=self.headers)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture(autouse=True)
def cli_log_file(tmp_path, monkeypatch):
    path = tmp_path / "logs" / "proxy.log"
    monkeypatch.setattr(log_utils, "CLI_LOG_FILE", path)
    return path


@pytest.fixture
def logger():
    return RecordingLogger()


@pytest.fixture
def config():
    return Config()


@pytest.fixture
def make_stub():
    return StubUpstream


@pytest.fixture
def upstream(make_stub):
    return make_stub()


@pytest.fixture
def make_client(config, logger) -> Callable[[Callable], TestClient]:
    """Build a TestClient whose outbound calls go to the given handler."""
    clients = []

    def _make(handler) -> TestClient:
        app = create_app(config, logger, transport=httpx.MockTransport(handler))
        client = TestClient(app)
        client.__enter__()
        clients.append(client)
        return client

    yield _make
    for client in clients:
        client.__exit__(None, None, None)


@pytest.fixture
def client(make_client, upstream) -> TestClient:
    return make_client(upstream)
