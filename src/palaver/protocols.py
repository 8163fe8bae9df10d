"""Core value types shared by the transcript, transport and agent loop.

Defines the OpenAI wire-format TypedDicts and the frozen dataclasses
for a tool call request (ToolCall) and a transcript entry (Message).
"""

from __future__ import annotations

import json as _json
from dataclasses import dataclass, field
from typing import Literal, Optional, TypedDict

Role = Literal["system", "user", "assistant", "tool"]


class _ToolCallOpenAIFunction(TypedDict):
    """OpenAI function sub-object."""

    name: str
    arguments: str


class ToolCallOpenAIDict(TypedDict):
    """OpenAI wire format for a single tool call."""

    id: str
    type: str
    function: _ToolCallOpenAIFunction


@dataclass(frozen=True)
class ToolCall:
    """A tool invocation requested by the model.

    Arguments are stored parsed. OpenAI sends them as a JSON string;
    text that does not decode is kept under ``"_raw"`` so that it fails
    schema validation at the registry instead of aborting the turn.
    ``raw_arguments`` keeps the string exactly as the model sent it, and
    ``to_openai()`` echoes it back unchanged.
    """

    id: str
    name: str
    arguments: object
    type: str = "function"
    raw_arguments: Optional[str] = field(default=None, compare=False, repr=False)

    @classmethod
    def from_openai(cls, tc: dict) -> ToolCall:
        """Parse from OpenAI/compatible format."""
        func = tc.get("function") or {}
        raw_args = func.get("arguments")
        if raw_args is None or (isinstance(raw_args, str) and not raw_args.strip()):
            arguments: object = {}
        elif isinstance(raw_args, str):
            try:
                arguments = _json.loads(raw_args)
            except _json.JSONDecodeError:
                arguments = {"_raw": raw_args}
        else:
            arguments = raw_args
        return cls(
            id=tc.get("id") or "",
            name=func.get("name") or "",
            arguments=arguments,
            type=tc.get("type") or "function",
            raw_arguments=raw_args if isinstance(raw_args, str) else None,
        )

    def to_openai(self) -> ToolCallOpenAIDict:
        """Serialize to OpenAI wire format."""
        if self.raw_arguments is not None:
            arguments = self.raw_arguments
        else:
            arguments = _json.dumps(self.arguments)
        return {
            "id": self.id,
            "type": self.type,
            "function": {
                "name": self.name,
                "arguments": arguments,
            },
        }


@dataclass(frozen=True)
class Message:
    """A single transcript entry."""

    role: Role
    content: Optional[str] = None
    tool_calls: Optional[tuple[ToolCall, ...]] = None
    tool_call_id: Optional[str] = None

    def __post_init__(self) -> None:
        if self.role not in ("system", "user", "assistant", "tool"):
            raise ValueError(f"Unknown message role: {self.role!r}")
        if self.tool_calls is not None and self.role != "assistant":
            raise ValueError("Only assistant messages may carry tool calls")
        if self.role == "tool" and not self.tool_call_id:
            raise ValueError("Tool messages require a tool_call_id")
        if self.role != "tool" and self.tool_call_id is not None:
            raise ValueError("Only tool messages may carry a tool_call_id")
        if self.content is None and not self.tool_calls:
            raise ValueError("Message needs content or tool calls")

    @classmethod
    def system(cls, text: str) -> Message:
        return cls(role="system", content=text)

    @classmethod
    def user(cls, text: str) -> Message:
        return cls(role="user", content=text)

    @classmethod
    def assistant(
        cls,
        text: str | None,
        tool_calls: tuple[ToolCall, ...] | list[ToolCall] | None = None,
    ) -> Message:
        return cls(
            role="assistant",
            content=text,
            tool_calls=tuple(tool_calls) if tool_calls else None,
        )

    @classmethod
    def tool(cls, tool_call_id: str, content: str) -> Message:
        return cls(role="tool", content=content, tool_call_id=tool_call_id)

    def to_openai(self) -> dict:
        """Render as an OpenAI chat message dict.

        Assistant messages that only request tools are sent with
        ``"content": None``, which OpenAI-compatible APIs accept.
        """
        d: dict = {"role": self.role, "content": self.content}
        if self.tool_calls:
            d["tool_calls"] = [tc.to_openai() for tc in self.tool_calls]
        if self.tool_call_id is not None:
            d["tool_call_id"] = self.tool_call_id
        return d
