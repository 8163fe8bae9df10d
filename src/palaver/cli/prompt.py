"""Line input for interactive sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

    from rich.console import Console

PROMPT = "You: "


def console_reader(console: Console) -> Callable[[], str | None]:
    """Build a ``read_input`` callable for :class:`~palaver.agent.Agent`.

    Each call prompts with ``You: `` and returns the stripped line, or None
    at end of session (blank line, EOF, or Ctrl+C).
    """

    def read() -> str | None:
        try:
            line = console.input(PROMPT)
        except (EOFError, KeyboardInterrupt):
            console.print()
            return None
        line = line.strip()
        return line or None

    return read
