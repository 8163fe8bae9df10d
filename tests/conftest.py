"""Shared test fixtures and helpers for Palaver.

Provides a scripted LLM client, OpenAI-style response builders, and
agent factories with zero retry waits.  All tests use fake clients or
httpx.MockTransport -- no real API calls.
"""

from __future__ import annotations

import json

import pytest

from palaver.agent import Agent
from palaver.llm.adapter import ModelTransport
from palaver.models.config import AgentConfig
from palaver.toolkit import ToolRegistry, get_builtin_tools


# ------------------------------------------------------------------
# Response builders
# ------------------------------------------------------------------

def no_tool_call_response(text: str = "hi there") -> dict:
    """LLM response with a text reply and no tool calls."""
    return {
        "choices": [
            {
                "message": {"role": "assistant", "content": text},
                "finish_reason": "stop",
            }
        ]
    }


def tool_call_response(
    tool_name: str,
    arguments: dict,
    call_id: str = "call_1",
    text: str = "",
) -> dict:
    """LLM response with a single tool call."""
    return multi_tool_call_response([(tool_name, arguments, call_id)], text=text)


def multi_tool_call_response(
    calls: list[tuple[str, dict, str]],
    text: str = "",
) -> dict:
    """LLM response with multiple tool calls.

    Args:
        calls: List of (tool_name, arguments, call_id) tuples.
        text: Optional text content.
    """
    return {
        "choices": [
            {
                "message": {
                    "role": "assistant",
                    "content": text,
                    "tool_calls": [
                        {
                            "id": cid,
                            "type": "function",
                            "function": {
                                "name": name,
                                "arguments": json.dumps(args),
                            },
                        }
                        for name, args, cid in calls
                    ],
                },
                "finish_reason": "tool_calls",
            }
        ]
    }


# ------------------------------------------------------------------
# Fake client
# ------------------------------------------------------------------

class ScriptedClient:
    """LLMClient that replays a script of responses or exceptions.

    Each ``chat()`` pops the next entry; exceptions are raised, dicts are
    returned.  Every call is recorded (messages are deep-copied through
    JSON so later mutations cannot leak into assertions).
    """

    def __init__(self, script: list[object]) -> None:
        self._script = list(script)
        self.calls: list[dict] = []
        self.closed = False

    def chat(self, messages, *, model=None, temperature=None, max_tokens=None, **kwargs):
        self.calls.append({
            "messages": json.loads(json.dumps(messages)),
            "model": model,
            "temperature": temperature,
            "max_tokens": max_tokens,
            **kwargs,
        })
        if not self._script:
            raise AssertionError("ScriptedClient ran out of responses")
        item = self._script.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item

    def close(self) -> None:
        self.closed = True


def fast_config(**overrides) -> AgentConfig:
    """AgentConfig with zero retry waits."""
    defaults = {
        "model": "test-model",
        "system_prompt": "You are a test assistant.",
        "retry_min_wait": 0.0,
        "retry_max_wait": 0.0,
        "retry_jitter": 0.0,
    }
    defaults.update(overrides)
    return AgentConfig(**defaults)


def make_agent(
    script: list[object],
    *,
    registry: ToolRegistry | None = None,
    root=None,
    inputs: list[str | None] | None = None,
    **config_overrides,
) -> tuple[Agent, ScriptedClient]:
    """Build an Agent over a ScriptedClient and the built-in tools."""
    client = ScriptedClient(script)
    config = fast_config(**config_overrides)
    if registry is None:
        registry = ToolRegistry.from_definitions(get_builtin_tools(root))
    read_input = None
    if inputs is not None:
        feed = iter(inputs)
        read_input = lambda: next(feed, None)  # noqa: E731
    agent = Agent(
        ModelTransport.from_config(client, config),
        registry,
        config=config,
        read_input=read_input,
    )
    return agent, client


# ------------------------------------------------------------------
# Fixtures
# ------------------------------------------------------------------

@pytest.fixture
def registry(tmp_path) -> ToolRegistry:
    """Registry with the built-in tools rooted at tmp_path."""
    return ToolRegistry.from_definitions(get_builtin_tools(tmp_path))


@pytest.fixture(autouse=True)
def _clear_api_env(monkeypatch):
    """Keep developer credentials out of the tests."""
    for name in ("PALAVER_API_KEY", "OPENROUTER_KEY", "PALAVER_BASE_URL"):
        monkeypatch.delenv(name, raising=False)
