"""Append-only conversation transcript.

The transcript is the model's context: every message, in insertion order.
It is written only by the agent loop and never reordered or pruned.
Readers get an immutable snapshot via :meth:`Transcript.snapshot`.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from palaver.exceptions import TranscriptError

if TYPE_CHECKING:
    from collections.abc import Iterator

    from palaver.protocols import Message

logger = logging.getLogger(__name__)


class Transcript:
    """Ordered, append-only log of :class:`Message` objects.

    Enforces request/response adjacency for tool calls: once an assistant
    message requests tools, only tool messages answering those requests
    may follow until every request has been resolved exactly once.

    Usage::

        transcript = Transcript()
        transcript.append(Message.system("You are helpful."))
        transcript.append(Message.user("hello"))
        payload = [m.to_openai() for m in transcript.snapshot()]
    """

    def __init__(self) -> None:
        self._messages: list[Message] = []
        # Request ids of the latest assistant tool-call message still
        # waiting for a tool result, in request order.
        self._pending: list[str] = []

    def append(self, message: Message) -> None:
        """Append a message, validating tool-call bookkeeping.

        Raises:
            TranscriptError: If a tool message answers no pending request,
                a non-tool message arrives while requests are unresolved,
                or an assistant message repeats a tool call id.
        """
        if message.role == "tool":
            if message.tool_call_id not in self._pending:
                raise TranscriptError(
                    f"Tool result {message.tool_call_id!r} does not answer "
                    f"a pending tool call"
                )
            self._pending.remove(message.tool_call_id)
        else:
            if self._pending:
                raise TranscriptError(
                    f"Cannot append {message.role} message: tool calls "
                    f"{self._pending} are unresolved"
                )
            if message.tool_calls:
                ids = [tc.id for tc in message.tool_calls]
                if len(set(ids)) != len(ids):
                    raise TranscriptError(f"Duplicate tool call ids: {ids}")
                self._pending = ids
        self._messages.append(message)
        logger.debug("transcript[%d] %s", len(self._messages) - 1, message.role)

    @property
    def pending_tool_calls(self) -> tuple[str, ...]:
        """Ids of tool calls that still need a result."""
        return tuple(self._pending)

    def snapshot(self) -> tuple[Message, ...]:
        """Return an immutable view of the messages so far."""
        return tuple(self._messages)

    def to_openai(self) -> list[dict]:
        return [m.to_openai() for m in self._messages]

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(tuple(self._messages))

    def __getitem__(self, index: int) -> Message:
        return self._messages[index]
