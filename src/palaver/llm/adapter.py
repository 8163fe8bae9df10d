"""Model transport adapter.

Turns a transcript snapshot plus the tool catalog into one chat
completion request and normalises whatever comes back into a single
CompletionResult: AssistantText, ToolCallsRequested or TransportFailure.
The adapter never raises for transport problems and never retries.
"""

from __future__ import annotations

import dataclasses
import logging
import uuid
from typing import TYPE_CHECKING, Any

import httpx

from palaver.llm.client import is_retryable
from palaver.llm.errors import LLMClientError, LLMRateLimitError
from palaver.models.completion import (
    AssistantText,
    ToolCallsRequested,
    TransportFailure,
)
from palaver.protocols import ToolCall

if TYPE_CHECKING:
    from collections.abc import Sequence

    from palaver.llm.protocols import LLMClient
    from palaver.models.completion import CompletionResult
    from palaver.models.config import AgentConfig
    from palaver.protocols import Message

logger = logging.getLogger(__name__)


class ModelTransport:
    """Sends the full transcript and tool catalog to an LLMClient.

    Usage::

        transport = ModelTransport(client, model="gpt-4o-mini", max_tokens=1000)
        result = transport.complete(transcript.snapshot(), registry.describe_all())
        if isinstance(result, AssistantText):
            print(result.text)
    """

    def __init__(
        self,
        client: LLMClient,
        *,
        model: str,
        max_tokens: int | None = None,
        temperature: float | None = None,
    ) -> None:
        self._client = client
        self._model = model
        self._max_tokens = max_tokens
        self._temperature = temperature

    @classmethod
    def from_config(cls, client: LLMClient, config: AgentConfig) -> ModelTransport:
        return cls(
            client,
            model=config.model,
            max_tokens=config.max_tokens,
            temperature=config.temperature,
        )

    @property
    def model(self) -> str:
        return self._model

    def complete(
        self,
        messages: Sequence[Message],
        tools: list[dict],
    ) -> CompletionResult:
        """Run one completion call and normalise the outcome.

        Args:
            messages: Every transcript message, in order.
            tools: Tool catalog in OpenAI function-calling format.
                Omitted from the request when empty.

        Returns:
            AssistantText, ToolCallsRequested, or TransportFailure.
        """
        kwargs: dict[str, Any] = {}
        if tools:
            kwargs["tools"] = tools
            kwargs["tool_choice"] = "auto"
        payload = [m.to_openai() for m in messages]
        try:
            response = self._client.chat(
                payload,
                model=self._model,
                temperature=self._temperature,
                max_tokens=self._max_tokens,
                **kwargs,
            )
        except (LLMClientError, httpx.HTTPError) as exc:
            retryable = is_retryable(exc)
            logger.debug("Completion call failed (retryable=%s): %s", retryable, exc)
            return TransportFailure(
                cause=f"{type(exc).__name__}: {exc}",
                retryable=retryable,
                retry_after=(
                    exc.retry_after if isinstance(exc, LLMRateLimitError) else None
                ),
            )
        return parse_completion(response)


def parse_completion(response: object) -> CompletionResult:
    """Normalise an OpenAI-style response dict.

    Tool calls win over text: text sent alongside tool calls is kept on the
    ToolCallsRequested. A response with neither is a TransportFailure.
    """
    try:
        choice = response["choices"][0]  # type: ignore[index]
        message = choice["message"]
    except (KeyError, IndexError, TypeError):
        return TransportFailure(cause="Malformed response: no message in 'choices'")
    if not isinstance(message, dict):
        return TransportFailure(cause="Malformed response: message is not an object")

    content = message.get("content")
    text = content if isinstance(content, str) and content.strip() else None

    raw_calls = message.get("tool_calls") or []
    if raw_calls:
        if not isinstance(raw_calls, list) or not all(isinstance(r, dict) for r in raw_calls):
            return TransportFailure(cause="Malformed response: bad 'tool_calls' array")
        requests = []
        for raw in raw_calls:
            call = ToolCall.from_openai(raw)
            if not call.id:
                call = dataclasses.replace(call, id=f"call_{uuid.uuid4().hex[:8]}")
                logger.warning("Tool call %r arrived without an id; assigned %s", call.name, call.id)
            requests.append(call)
        ids = [r.id for r in requests]
        if len(set(ids)) != len(ids):
            return TransportFailure(cause=f"Malformed response: duplicate tool call ids {ids}")
        return ToolCallsRequested(requests=tuple(requests), text=text)

    if text is None:
        finish = choice.get("finish_reason") if isinstance(choice, dict) else None
        cause = "Malformed response: no text and no tool calls"
        if finish:
            cause += f" (finish_reason={finish})"
        return TransportFailure(cause=cause)
    return AssistantText(text=text)
