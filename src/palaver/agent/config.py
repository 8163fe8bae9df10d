"""Agent state machine states."""

from __future__ import annotations

import enum


class AgentState(str, enum.Enum):
    """States the agent can be in during a session.

    - ``AWAITING_USER_INPUT``: between turns; the only state that accepts input.
    - ``AWAITING_MODEL``: a completion call is in flight (or about to be).
    - ``EXECUTING_TOOLS``: running the tool calls of the latest model response.
    - ``TERMINATED``: the session is over; nothing more is appended.
    """

    AWAITING_USER_INPUT = "awaiting_user_input"
    AWAITING_MODEL = "awaiting_model"
    EXECUTING_TOOLS = "executing_tools"
    TERMINATED = "terminated"
