import contextlib

import httpx
import pytest
from fastapi.testclient import TestClient

from app import create_app
from core.config import Config


class RecordingLogger:
    """RequestLogger that keeps everything it is told."""

    def __init__(self):
        self.forwards = []
        self.errors = []

    def log_forward(self, method, target_url, status):
        self.forwards.append((method, target_url, status))

    def log_error(self, route, status, message):
        self.errors.append((route, status, message))


class FakeUpstream:
    """MockTransport handler recording every outbound request."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.respond = lambda request: httpx.Response(200, content=b"ok")

    def __call__(self, request: httpx.Request):
        self.requests.append(request)
        return self.respond(request)


@pytest.fixture
def request_logger():
    return RecordingLogger()


@pytest.fixture
def upstream():
    return FakeUpstream()


@pytest.fixture
def make_client(request_logger, upstream):
    """Build a TestClient around a fresh app; lifespan runs for the test."""
    with contextlib.ExitStack() as stack:

        def _make(config: Config | None = None) -> TestClient:
            app = create_app(
                config or Config(),
                request_logger,
                transport=httpx.MockTransport(upstream),
            )
            return stack.enter_context(TestClient(app))

        yield _make


@pytest.fixture
def client(make_client):
    return make_client()
