"""Tests for the OpenAI-compatible client and its error hierarchy.

HTTP is faked with httpx.MockTransport -- no real API calls.
"""

from __future__ import annotations

import json

import httpx
import pytest

from palaver.exceptions import PalaverError
from palaver.llm import (
    LLMAuthError,
    LLMClient,
    LLMClientError,
    LLMConfigError,
    LLMRateLimitError,
    LLMResponseError,
    OpenAIClient,
    is_retryable,
)
from palaver.llm.client import DEFAULT_BASE_URL

from tests.conftest import no_tool_call_response


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_client(
    handler=None,
    api_key: str = "test-key",
    base_url: str = "http://test-api",
    **kwargs,
) -> OpenAIClient:
    """Create an OpenAIClient whose HTTP goes to a mock transport."""
    client = OpenAIClient(api_key=api_key, base_url=base_url, **kwargs)
    if handler is not None:
        client._client.close()
        client._client = httpx.Client(
            transport=httpx.MockTransport(handler),
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {api_key}",
            },
        )
    return client


def _status_error(status: int) -> httpx.HTTPStatusError:
    request = httpx.Request("POST", "http://test-api/chat/completions")
    response = httpx.Response(status, request=request)
    return httpx.HTTPStatusError("err", request=request, response=response)


# ===========================================================================
# Error hierarchy
# ===========================================================================


class TestErrorHierarchy:
    def test_client_error_inherits_palaver_error(self):
        assert issubclass(LLMClientError, PalaverError)

    @pytest.mark.parametrize(
        "cls", [LLMConfigError, LLMRateLimitError, LLMAuthError, LLMResponseError]
    )
    def test_subclasses(self, cls):
        assert issubclass(cls, LLMClientError)

    def test_rate_limit_retry_after(self):
        err = LLMRateLimitError("rate limited", retry_after=30.0)
        assert err.retry_after == 30.0
        assert "30.0s" in str(err)

    def test_rate_limit_no_retry_after(self):
        err = LLMRateLimitError("rate limited")
        assert err.retry_after is None
        assert str(err) == "rate limited"


# ===========================================================================
# Configuration
# ===========================================================================


class TestConfiguration:
    def test_missing_key_raises(self):
        with pytest.raises(LLMConfigError, match="API key"):
            OpenAIClient()

    def test_palaver_key_from_env(self, monkeypatch):
        monkeypatch.setenv("PALAVER_API_KEY", "env-key")
        with OpenAIClient() as client:
            assert client._api_key == "env-key"

    def test_openrouter_key_fallback(self, monkeypatch):
        monkeypatch.setenv("OPENROUTER_KEY", "or-key")
        with OpenAIClient() as client:
            assert client._api_key == "or-key"

    def test_argument_wins_over_env(self, monkeypatch):
        monkeypatch.setenv("PALAVER_API_KEY", "env-key")
        with OpenAIClient(api_key="arg-key") as client:
            assert client._api_key == "arg-key"

    def test_default_base_url_is_openrouter(self):
        with OpenAIClient(api_key="k") as client:
            assert client.base_url == DEFAULT_BASE_URL == "https://openrouter.ai/api/v1"

    def test_base_url_from_env_strips_slash(self, monkeypatch):
        monkeypatch.setenv("PALAVER_BASE_URL", "http://localhost:8080/v1/")
        with OpenAIClient(api_key="k") as client:
            assert client.base_url == "http://localhost:8080/v1"

    def test_satisfies_protocol(self):
        with OpenAIClient(api_key="k") as client:
            assert isinstance(client, LLMClient)


# ===========================================================================
# chat()
# ===========================================================================


class TestChat:
    def test_posts_payload(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["auth"] = request.headers["Authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=no_tool_call_response("hello"))

        client = _make_client(handler)
        data = client.chat(
            [{"role": "user", "content": "hi"}],
            model="deepseek/deepseek-chat:free",
            max_tokens=1000,
            tools=[{"type": "function"}],
            tool_choice="auto",
        )
        assert data["choices"][0]["message"]["content"] == "hello"
        assert seen["url"] == "http://test-api/chat/completions"
        assert seen["auth"] == "Bearer test-key"
        body = seen["body"]
        assert body["model"] == "deepseek/deepseek-chat:free"
        assert body["max_tokens"] == 1000
        assert body["messages"] == [{"role": "user", "content": "hi"}]
        assert body["tool_choice"] == "auto"
        assert "temperature" not in body

    def test_default_model_used(self):
        seen = {}

        def handler(request):
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=no_tool_call_response())

        client = _make_client(handler, default_model="fallback-model")
        client.chat([{"role": "user", "content": "hi"}])
        assert seen["body"]["model"] == "fallback-model"

    def test_no_model_raises(self):
        client = _make_client(lambda r: httpx.Response(200, json={}))
        with pytest.raises(LLMConfigError, match="model"):
            client.chat([{"role": "user", "content": "hi"}])

    @pytest.mark.parametrize("status", [401, 403])
    def test_auth_errors(self, status):
        client = _make_client(lambda r: httpx.Response(status, text="denied"))
        with pytest.raises(LLMAuthError, match=str(status)):
            client.chat([], model="m")

    def test_rate_limit_with_retry_after(self):
        client = _make_client(
            lambda r: httpx.Response(429, headers={"Retry-After": "7"}, text="slow down")
        )
        with pytest.raises(LLMRateLimitError) as exc_info:
            client.chat([], model="m")
        assert exc_info.value.retry_after == 7.0

    def test_rate_limit_unparseable_retry_after(self):
        client = _make_client(
            lambda r: httpx.Response(429, headers={"Retry-After": "soon"})
        )
        with pytest.raises(LLMRateLimitError) as exc_info:
            client.chat([], model="m")
        assert exc_info.value.retry_after is None

    def test_server_error_raises_status_error(self):
        client = _make_client(lambda r: httpx.Response(503, text="down"))
        with pytest.raises(httpx.HTTPStatusError):
            client.chat([], model="m")

    def test_invalid_json(self):
        client = _make_client(lambda r: httpx.Response(200, text="<html>"))
        with pytest.raises(LLMResponseError, match="not valid JSON"):
            client.chat([], model="m")

    def test_provider_error_body(self):
        client = _make_client(
            lambda r: httpx.Response(200, json={"error": {"message": "model overloaded"}})
        )
        with pytest.raises(LLMResponseError, match="Provider error: model overloaded"):
            client.chat([], model="m")

    def test_missing_choices(self):
        client = _make_client(lambda r: httpx.Response(200, json={"id": "x"}))
        with pytest.raises(LLMResponseError, match="missing 'choices'"):
            client.chat([], model="m")

    def test_network_error_propagates(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = _make_client(handler)
        with pytest.raises(httpx.ConnectError):
            client.chat([], model="m")

    def test_close(self):
        client = _make_client(lambda r: httpx.Response(200, json=no_tool_call_response()))
        client.close()
        assert client._client.is_closed


# ===========================================================================
# Retry classification
# ===========================================================================


class TestIsRetryable:
    @pytest.mark.parametrize("status", [429, 500, 502, 503, 504])
    def test_retryable_statuses(self, status):
        assert is_retryable(_status_error(status))

    @pytest.mark.parametrize("status", [400, 404, 422])
    def test_client_statuses_not_retryable(self, status):
        assert not is_retryable(_status_error(status))

    def test_rate_limit_retryable(self):
        assert is_retryable(LLMRateLimitError())

    def test_auth_not_retryable(self):
        assert not is_retryable(LLMAuthError("nope"))

    def test_response_error_not_retryable(self):
        assert not is_retryable(LLMResponseError("bad"))

    def test_config_error_not_retryable(self):
        assert not is_retryable(LLMConfigError("no key"))

    def test_network_errors_retryable(self):
        assert is_retryable(httpx.ConnectError("refused"))
        assert is_retryable(httpx.ReadTimeout("slow"))

    def test_other_exceptions_not_retryable(self):
        assert not is_retryable(ValueError("x"))
