"""Built-in OpenAI-compatible httpx client.

Provides a sync HTTP client for OpenAI-compatible chat completion APIs
(OpenRouter by default). Reads configuration from constructor arguments
or environment variables. Each ``chat()`` is a single request; retrying
is the agent loop's decision, guided by :func:`is_retryable`.
"""

from __future__ import annotations

import logging
import os
from typing import Any

import httpx

from palaver.llm.errors import (
    LLMAuthError,
    LLMConfigError,
    LLMRateLimitError,
    LLMResponseError,
)

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://openrouter.ai/api/v1"

_RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}
_AUTH_ERROR_STATUS_CODES = {401, 403}


def is_retryable(exc: BaseException) -> bool:
    """Check if an exception is retryable.

    Retryable: 429, 500, 502, 503, 504, connection errors, timeouts.
    Not retryable: 401, 403, 400, other client errors, bad responses.
    """
    if isinstance(exc, LLMAuthError):
        return False
    if isinstance(exc, LLMRateLimitError):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code in _RETRYABLE_STATUS_CODES
    return isinstance(exc, httpx.TransportError)


class OpenAIClient:
    """Sync httpx client for OpenAI-compatible chat completions.

    Implements the LLMClient protocol. Fails immediately on
    authentication errors (401, 403) and reports rate limiting (429)
    as LLMRateLimitError.

    Usage::

        with OpenAIClient(api_key="sk-...", default_model="gpt-4o-mini") as client:
            response = client.chat([{"role": "user", "content": "Hello"}])
            text = response["choices"][0]["message"]["content"]
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        default_model: str | None = None,
        timeout: float = 120.0,
    ) -> None:
        """Initialize the OpenAI-compatible client.

        Args:
            api_key: API key. Falls back to PALAVER_API_KEY, then to
                OPENROUTER_KEY.
            base_url: API base URL. Falls back to PALAVER_BASE_URL env var,
                then to https://openrouter.ai/api/v1.
            default_model: Model used when chat() is called without one.
            timeout: Request timeout in seconds.

        Raises:
            LLMConfigError: If no API key is provided or found in environment.
        """
        self._api_key = (
            api_key
            or os.environ.get("PALAVER_API_KEY")
            or os.environ.get("OPENROUTER_KEY", "")
        )
        if not self._api_key:
            raise LLMConfigError(
                "No API key provided. Pass api_key= or set PALAVER_API_KEY "
                "(or OPENROUTER_KEY) environment variable."
            )
        self._base_url = (
            base_url or os.environ.get("PALAVER_BASE_URL", DEFAULT_BASE_URL)
        ).rstrip("/")
        self._default_model = default_model
        self._timeout = timeout
        self._client = httpx.Client(
            timeout=timeout,
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {self._api_key}",
            },
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    def chat(
        self,
        messages: list[dict],
        *,
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        **kwargs: Any,
    ) -> dict:
        """Send a single chat completion request.

        Args:
            messages: List of OpenAI message dicts.
            model: Model to use. Falls back to default_model.
            temperature: Sampling temperature.
            max_tokens: Maximum tokens to generate.
            **kwargs: Additional payload parameters forwarded to the API
                (e.g. ``tools``, ``tool_choice``).

        Returns:
            Full response dict with 'choices', 'usage', 'model', etc.

        Raises:
            LLMConfigError: If neither model nor default_model is set.
            LLMAuthError: On 401/403.
            LLMRateLimitError: On 429.
            LLMResponseError: On unexpected response format.
            httpx.HTTPStatusError: On other HTTP errors.
            httpx.TransportError: On network errors and timeouts.
        """
        resolved_model = model or self._default_model
        if not resolved_model:
            raise LLMConfigError("No model given and no default_model configured.")
        payload: dict[str, Any] = {
            "model": resolved_model,
            "messages": messages,
        }
        if temperature is not None:
            payload["temperature"] = temperature
        if max_tokens is not None:
            payload["max_tokens"] = max_tokens
        payload.update(kwargs)

        logger.debug(
            "POST %s/chat/completions model=%s messages=%d",
            self._base_url, resolved_model, len(messages),
        )
        response = self._client.post(
            f"{self._base_url}/chat/completions",
            json=payload,
        )

        # Check for auth errors before raise_for_status
        if response.status_code in _AUTH_ERROR_STATUS_CODES:
            raise LLMAuthError(
                f"Authentication failed: HTTP {response.status_code} - "
                f"{response.text}"
            )

        if response.status_code == 429:
            retry_after_raw = response.headers.get("Retry-After")
            retry_after: float | None = None
            if retry_after_raw is not None:
                try:
                    retry_after = float(retry_after_raw)
                except (ValueError, TypeError):
                    pass
            raise LLMRateLimitError(
                f"Rate limited: HTTP 429 - {response.text}",
                retry_after=retry_after,
            )

        response.raise_for_status()

        try:
            data = response.json()
        except ValueError as exc:
            raise LLMResponseError(
                f"Response is not valid JSON: {response.text[:200]}"
            ) from exc
        if not isinstance(data, dict) or "choices" not in data:
            # Some providers (OpenRouter) return HTTP 200 with an error body.
            error = data.get("error") if isinstance(data, dict) else None
            if isinstance(error, dict) and error.get("message"):
                raise LLMResponseError(f"Provider error: {error['message']}")
            raise LLMResponseError(
                f"Unexpected response format: missing 'choices' key. "
                f"Response: {data}"
            )
        return data

    def close(self) -> None:
        """Close the underlying httpx client."""
        self._client.close()

    def __enter__(self) -> OpenAIClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()
