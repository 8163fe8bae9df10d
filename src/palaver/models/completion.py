"""Normalised outcomes of a single model round-trip.

Exactly one of AssistantText, ToolCallsRequested or TransportFailure
is produced per transport call.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Union

if TYPE_CHECKING:
    from palaver.protocols import ToolCall


@dataclass(frozen=True)
class AssistantText:
    """Terminal assistant reply for the current turn."""

    text: str


@dataclass(frozen=True)
class ToolCallsRequested:
    """The model asked for one or more tools to run before it replies.

    Attributes:
        requests: Tool calls in the order the model listed them. Never empty.
        text: Assistant text sent alongside the calls, if any.
    """

    requests: tuple[ToolCall, ...]
    text: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.requests:
            raise ValueError("ToolCallsRequested needs at least one request")


@dataclass(frozen=True)
class TransportFailure:
    """The completion call failed.

    Attributes:
        cause: Human-readable description of the failure.
        retryable: Whether a repeat of the same request may succeed
            (rate limits, 5xx, network errors, timeouts).
        retry_after: Seconds the provider asked us to wait before
            retrying (Retry-After), or None.
    """

    cause: str
    retryable: bool = False
    retry_after: Optional[float] = None


CompletionResult = Union[AssistantText, ToolCallsRequested, TransportFailure]
