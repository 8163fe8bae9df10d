"""Palaver exception hierarchy.

All Palaver-specific exceptions inherit from PalaverError.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from palaver.models.completion import TransportFailure


class PalaverError(Exception):
    """Base exception for all Palaver errors."""


class TranscriptError(PalaverError):
    """Raised when an append would break the transcript's ordering rules."""


class AgentStateError(PalaverError):
    """Raised when an agent operation is called in the wrong state."""


class ToolError(PalaverError):
    """Base for errors raised at the tool registry boundary."""

    def __init__(self, tool_name: str, message: str) -> None:
        self.tool_name = tool_name
        super().__init__(message)


class DuplicateToolError(ToolError):
    """Raised when registering a tool whose name is already taken."""

    def __init__(self, tool_name: str) -> None:
        super().__init__(tool_name, f"Tool already registered: {tool_name}")


class UnknownToolError(ToolError):
    """Raised when a tool lookup by name fails."""

    def __init__(self, tool_name: str, available: list[str] | None = None) -> None:
        self.available = available or []
        msg = f"Unknown tool: {tool_name!r}"
        if self.available:
            msg += f". Available tools: {', '.join(self.available)}"
        super().__init__(tool_name, msg)


class InvalidArgumentsError(ToolError):
    """Raised when tool arguments fail schema validation."""

    def __init__(self, tool_name: str, details: str) -> None:
        self.details = details
        super().__init__(
            tool_name, f"Invalid arguments for tool {tool_name!r}: {details}"
        )


class FileReadError(PalaverError):
    """Raised by the file tools when a path cannot be read."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot read {path!r}: {reason}")


class TransportError(PalaverError):
    """The completion call failed and retries (if any) were exhausted."""

    def __init__(self, failure: TransportFailure, attempts: int = 1) -> None:
        self.failure = failure
        self.attempts = attempts
        msg = f"Model request failed: {failure.cause}"
        if attempts > 1:
            msg += f" (after {attempts} attempts)"
        super().__init__(msg)


class LoopBoundExceededError(PalaverError):
    """Raised when the model keeps requesting tools past the round limit."""

    def __init__(self, max_rounds: int) -> None:
        self.max_rounds = max_rounds
        super().__init__(
            f"Model requested tools for more than {max_rounds} consecutive "
            f"round(s) without replying"
        )
