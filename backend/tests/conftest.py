"""Shared test fixtures and configuration for backend tests."""
import json
from typing import List, Optional

import httpx
import pytest
from fastapi.testclient import TestClient

from filechat.ai_provider import OpenAIProvider
from filechat.config import AppConfig
from filechat.main import create_app


class FakeUpstream:
    """Stand-in for the completion service.

    Records every request it receives and answers with a canned response,
    or raises ``exc`` to simulate a transport failure.
    """

    def __init__(
        self,
        status_code: int = 200,
        json_body: Optional[dict] = None,
        text: Optional[str] = None,
        exc: Optional[Exception] = None,
    ):
        self.status_code = status_code
        self.json_body = json_body
        self.text = text
        self.exc = exc
        self.requests: List[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.exc is not None:
            raise self.exc
        if self.text is not None:
            return httpx.Response(self.status_code, text=self.text)
        return httpx.Response(self.status_code, json=self.json_body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def last_payload(self) -> dict:
        return json.loads(self.requests[-1].content)


def completion_body(content: str = "Hi there") -> dict:
    return {
        "id": "chatcmpl-test",
        "object": "chat.completion",
        "choices": [
            {"index": 0, "message": {"role": "assistant", "content": content}, "finish_reason": "stop"}
        ],
    }


@pytest.fixture
def config(tmp_path, monkeypatch) -> AppConfig:
    """Default config pointed at a per-test upload directory, no API key."""
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    cfg = AppConfig()
    cfg.uploads.dir = str(tmp_path / "uploads")
    return cfg


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream(json_body=completion_body())


@pytest.fixture
def api_key(monkeypatch) -> str:
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    return "sk-test"


def build_client(config: AppConfig, upstream: FakeUpstream) -> TestClient:
    completion = config.completion
    provider = OpenAIProvider(
        base_url=completion.base_url,
        model=completion.model,
        max_tokens=completion.max_tokens,
        temperature=completion.temperature,
        timeout=completion.timeout_seconds,
        transport=upstream.transport,
    )
    return TestClient(create_app(config, provider=provider))


@pytest.fixture
def api_client(config, upstream) -> TestClient:
    """Provide a TestClient for an app wired to the fake upstream."""
    return build_client(config, upstream)


@pytest.fixture
def make_client(config, upstream):
    """Build a TestClient after a test has adjusted ``config``."""
    return lambda: build_client(config, upstream)
