"""
Shared pytest fixtures for all tests.

Provides isolated configuration stores, fake httpx/requests transports and
cleanup of the process-wide interceptor state.
"""

from typing import Callable

import httpx
import pytest
import requests

from genai_relay.config import DISABLED, GLOBAL_CONFIG, ConfigStore
from genai_relay.emitter import RewriteRecord
from genai_relay.http_proxy import unmount


PROXY_URL = "https://my-proxy.example/v1"
GEMINI_URL = (
    "https://generativelanguage.googleapis.com/v1beta/models/foo:generateContent"
)


@pytest.fixture(autouse=True)
def reset_global_state():
    """Every test starts with the relay disabled and unmounted."""
    previous = GLOBAL_CONFIG.replace(DISABLED)
    yield
    unmount()
    GLOBAL_CONFIG.replace(previous)


@pytest.fixture
def store():
    return ConfigStore()


@pytest.fixture
def proxy_store(store):
    store.configure(True, PROXY_URL)
    return store


class RecordingHandler:
    """httpx.MockTransport handler that records requests."""

    def __init__(self, error: Exception | None = None):
        self.error = error
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        request.read()
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return httpx.Response(200, json={"ok": True})

    @property
    def urls(self) -> list[str]:
        return [str(r.url) for r in self.requests]


class RecordingAdapter(requests.adapters.BaseAdapter):
    """requests adapter that records prepared requests instead of sending them."""

    def __init__(self, error: Exception | None = None):
        super().__init__()
        self.error = error
        self.requests: list[requests.PreparedRequest] = []

    def send(self, request, **kwargs):
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        response = requests.Response()
        response.status_code = 200
        response.url = request.url
        response.request = request
        response._content = b'{"ok": true}'
        return response

    def close(self):
        pass


class RecordingEmitter:
    def __init__(self):
        self.records: list[RewriteRecord] = []

    def emit(self, record: RewriteRecord) -> None:
        self.records.append(record)


@pytest.fixture
def handler_factory() -> Callable[..., RecordingHandler]:
    return RecordingHandler


@pytest.fixture
def adapter_factory() -> Callable[..., RecordingAdapter]:
    return RecordingAdapter


@pytest.fixture
def emitter():
    return RecordingEmitter()
