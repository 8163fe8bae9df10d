"""Agent turn-loop: state machine, turn results, and the Agent itself."""

from palaver.agent.config import AgentState
from palaver.agent.loop import Agent
from palaver.agent.models import SessionResult, ToolStep, TurnResult

__all__ = [
    "Agent",
    "AgentState",
    "SessionResult",
    "ToolStep",
    "TurnResult",
]
