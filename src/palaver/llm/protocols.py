"""Pluggable LLM client protocol."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class LLMClient(Protocol):
    """Protocol for chat-completion clients used by ModelTransport.

    Any object with chat() and close() methods matching this signature works.
    The built-in OpenAIClient implements this protocol. ``chat()`` returns
    an OpenAI-style response dict (``choices[0].message``).
    """

    def chat(
        self,
        messages: list[dict],
        *,
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        **kwargs: Any,
    ) -> dict:
        """Send messages, return response dict."""
        ...

    def close(self) -> None:
        """Release underlying resources."""
        ...
