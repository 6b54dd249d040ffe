"""Pytest configuration and shared fixtures."""
import os
from typing import Callable, List

import httpx
import pytest
from fastapi.testclient import TestClient

from chatproxy.config import Settings, get_settings


def _pin_settings_env() -> None:
    """Drop host environment variables that would override Settings fields.

    Runs before the app module builds its limiters and CORS policy from settings.
    """
    for key in list(os.environ):
        if key.lower() in Settings.model_fields:
            del os.environ[key]
    get_settings.cache_clear()


_pin_settings_env()

from chatproxy.api.chat import get_chat_service  # noqa: E402
from chatproxy.core.ratelimit import api_limiter, brute_force_guard, chat_limiter  # noqa: E402
from chatproxy.main import app  # noqa: E402
from chatproxy.schemas.chat import AIConfig, ChatMessage, ChatRequest  # noqa: E402
from chatproxy.services.chat_service import ChatService  # noqa: E402

VALID_KEY = "sk-or-v1-abcdefghijklmnopqrstuvwxyz"


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class Upstream:
    """Scripted provider API behind an httpx.MockTransport."""

    def __init__(self, status_code: int = 200, json=None, content: bytes = None):
        self.status_code = status_code
        self.json = json
        self.content = content
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.content is not None:
            return httpx.Response(self.status_code, content=self.content)
        return httpx.Response(self.status_code, json=self.json)

    def service(self) -> ChatService:
        return ChatService(client=httpx.AsyncClient(transport=httpx.MockTransport(self)))


@pytest.fixture
def reset_request_gate():
    """Rate limiter and lockout state is process-global."""
    api_limiter.reset()
    chat_limiter.reset()
    brute_force_guard.reset()
    yield
    api_limiter.reset()
    chat_limiter.reset()
    brute_force_guard.reset()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_request() -> Callable[..., ChatRequest]:
    def _make(*contents, provider="openrouter", api_key=VALID_KEY, model_id="openai/gpt-4") -> ChatRequest:
        contents = contents or ("Hello",)
        messages = [
            ChatMessage(id=str(i), role="user" if i % 2 == 0 else "assistant", content=text)
            for i, text in enumerate(contents)
        ]
        return ChatRequest(messages=messages, config=AIConfig(provider=provider, apiKey=api_key, modelId=model_id))

    return _make


@pytest.fixture
def chat_body() -> Callable[..., dict]:
    def _body(content="Hello", provider="openrouter", api_key=VALID_KEY, model_id="openai/gpt-4", role="user") -> dict:
        return {
            "messages": [
                {"id": "1", "role": role, "content": content, "timestamp": "2024-05-01T10:00:00Z"},
            ],
            "config": {"provider": provider, "apiKey": api_key, "modelId": model_id},
        }

    return _body


@pytest.fixture
def upstream() -> Upstream:
    return Upstream(json={"choices": [{"message": {"content": "Hi there"}}]})


@pytest.fixture
def api_client(upstream, reset_request_gate):
    app.dependency_overrides[get_chat_service] = upstream.service
    with TestClient(app, raise_server_exceptions=False) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def fresh_settings(monkeypatch):
    """Re-read settings from a monkeypatched environment, restoring defaults afterwards."""
    get_settings.cache_clear()
    yield monkeypatch
    monkeypatch.undo()
    get_settings.cache_clear()
