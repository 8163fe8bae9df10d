"""Data models: agent configuration and completion results."""

from palaver.models.completion import (
    AssistantText,
    CompletionResult,
    ToolCallsRequested,
    TransportFailure,
)
from palaver.models.config import DEFAULT_MODEL, AgentConfig

__all__ = [
    "AgentConfig",
    "DEFAULT_MODEL",
    "AssistantText",
    "CompletionResult",
    "ToolCallsRequested",
    "TransportFailure",
]
