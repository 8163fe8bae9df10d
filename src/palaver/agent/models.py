"""Agent turn and session result models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from palaver.agent.config import AgentState
    from palaver.exceptions import PalaverError
    from palaver.protocols import ToolCall
    from palaver.toolkit.models import ToolResult


@dataclass(frozen=True)
class ToolStep:
    """One executed tool call.

    Frozen: step records are immutable records of what happened.
    """

    round: int
    tool_call: ToolCall
    result: ToolResult


@dataclass(frozen=True)
class TurnResult:
    """Outcome of one completed user turn.

    Attributes:
        text: The assistant's final reply.
        steps: Every tool call executed during the turn, in order.
        tool_rounds: Number of tool rounds before the reply.
        model_calls: Completion requests sent, retries included.
    """

    text: str
    steps: tuple[ToolStep, ...] = ()
    tool_rounds: int = 0
    model_calls: int = 1


@dataclass(frozen=True)
class SessionResult:
    """Outcome of :meth:`Agent.run`.

    ``failure`` is set when the session ended on a fatal error
    (transport failure, loop bound) rather than end of input.
    """

    turns: tuple[TurnResult, ...] = field(default_factory=tuple)
    state: Optional[AgentState] = None
    failure: Optional[PalaverError] = None

    @property
    def ok(self) -> bool:
        return self.failure is None
