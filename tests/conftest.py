"""Shared fixtures for research-signals tests."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
import structlog

from research_signals.config import Settings


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch, tmp_path):
    """Keep real credentials and any local .env out of the tests."""
    for name in ("PERPLEXITY_API_KEY", "GEMINI_API_KEY", "PERPLEXITY_MODEL", "GEMINI_MODEL", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    yield
    # The CLI binds structlog to the (captured) stderr of the current test.
    structlog.reset_defaults()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        PERPLEXITY_API_KEY="test-pplx-key",
        PERPLEXITY_MODEL="sonar",
        GEMINI_API_KEY="test-gemini-key",
        GEMINI_MODEL="gemini-3-flash-preview",
        HTTP_TIMEOUT_SECONDS=30.0,
    )


# --- httpx mocking helpers ---


def make_response(payload, status_code: int = 200) -> MagicMock:
    """MagicMock shaped like an httpx.Response carrying ``payload``."""
    response = MagicMock()
    response.status_code = status_code
    if isinstance(payload, (dict, list)):
        response.json.return_value = payload
        response.text = json.dumps(payload)
    else:
        response.json.side_effect = ValueError("not json")
        response.text = payload
    if status_code >= 400:
        response.raise_for_status = MagicMock(
            side_effect=httpx.HTTPStatusError(
                f"status {status_code}",
                request=MagicMock(),
                response=response,
            )
        )
    else:
        response.raise_for_status = MagicMock()
    return response


def make_http_client(post_result=None, post_side_effect=None) -> AsyncMock:
    """AsyncMock usable as ``async with httpx.AsyncClient() as http``."""
    http = AsyncMock()
    http.post = AsyncMock(return_value=post_result, side_effect=post_side_effect)
    http.__aenter__ = AsyncMock(return_value=http)
    http.__aexit__ = AsyncMock(return_value=False)
    return http


@pytest.fixture
def perplexity_payload():
    def _build(content: str, citations: list[str] | None = None) -> dict:
        return {
            "id": "resp-1",
            "model": "sonar-pro",
            "choices": [
                {
                    "message": {"role": "assistant", "content": content},
                    "finish_reason": "stop",
                }
            ],
            "usage": {"prompt_tokens": 40, "completion_tokens": 60, "total_tokens": 100},
            "citations": citations or [],
        }

    return _build


@pytest.fixture
def gemini_payload():
    def _build(text: str) -> dict:
        return {
            "candidates": [
                {
                    "content": {"parts": [{"text": text}], "role": "model"},
                    "finishReason": "STOP",
                }
            ],
            "usageMetadata": {
                "promptTokenCount": 30,
                "candidatesTokenCount": 20,
                "totalTokenCount": 50,
            },
        }

    return _build


@pytest.fixture(name="make_response")
def _make_response_fixture():
    return make_response


@pytest.fixture(name="make_http_client")
def _make_http_client_fixture():
    return make_http_client
