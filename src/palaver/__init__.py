"""Palaver: an interactive tool-using chat agent.

The model can call registered tools (reading files, listing directories)
before it answers; tool results are folded back into the transcript and
the model is queried again until it replies with text.
"""

from palaver._version import __version__

# Agent
from palaver.agent import Agent, AgentState, SessionResult, ToolStep, TurnResult

# Configuration and completion results
from palaver.models.config import DEFAULT_MODEL, AgentConfig
from palaver.models.completion import (
    AssistantText,
    CompletionResult,
    ToolCallsRequested,
    TransportFailure,
)

# Messages
from palaver.protocols import Message, ToolCall
from palaver.transcript import Transcript

# Tools
from palaver.toolkit import (
    ToolDefinition,
    ToolFailure,
    ToolRegistry,
    ToolResult,
    get_builtin_tools,
)

# LLM
from palaver.llm import LLMClient, ModelTransport, OpenAIClient

# Exceptions
from palaver.exceptions import (
    AgentStateError,
    DuplicateToolError,
    FileReadError,
    InvalidArgumentsError,
    LoopBoundExceededError,
    PalaverError,
    ToolError,
    TranscriptError,
    TransportError,
    UnknownToolError,
)

__all__ = [
    "__version__",
    "Agent",
    "AgentState",
    "SessionResult",
    "ToolStep",
    "TurnResult",
    "AgentConfig",
    "DEFAULT_MODEL",
    "AssistantText",
    "CompletionResult",
    "ToolCallsRequested",
    "TransportFailure",
    "Message",
    "ToolCall",
    "Transcript",
    "ToolDefinition",
    "ToolFailure",
    "ToolRegistry",
    "ToolResult",
    "get_builtin_tools",
    "LLMClient",
    "ModelTransport",
    "OpenAIClient",
    "PalaverError",
    "TranscriptError",
    "AgentStateError",
    "ToolError",
    "DuplicateToolError",
    "UnknownToolError",
    "InvalidArgumentsError",
    "FileReadError",
    "TransportError",
    "LoopBoundExceededError",
]
