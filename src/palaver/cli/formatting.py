"""Rich formatting helpers for the Palaver CLI.

Rich auto-detects TTY and degrades gracefully when piped (no ANSI codes).
Model and tool text is escaped so square brackets are printed verbatim.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape
from rich.table import Table

if TYPE_CHECKING:
    from palaver.protocols import ToolCall
    from palaver.toolkit.models import ToolResult

_PREVIEW_CHARS = 200


def get_console() -> Console:
    """Create a Rich Console that auto-detects TTY for graceful pipe degradation."""
    return Console(stderr=False)


def format_reply(text: str, console: Console) -> None:
    """Display the assistant's final reply."""
    console.print(f"[bold green]Assistant:[/bold green] {escape(text)}", highlight=False)


def format_tool_result(call: ToolCall, result: ToolResult, console: Console) -> None:
    """Display one executed tool call (shown with --verbose)."""
    args = json.dumps(call.arguments, ensure_ascii=False, default=str)
    if result.success:
        status = "[green]ok[/green]"
        body = result.output
    else:
        status = "[red]failed[/red]"
        body = result.error
    if len(body) > _PREVIEW_CHARS:
        body = body[:_PREVIEW_CHARS] + "..."
    console.print(
        f"[dim]tool[/dim] [cyan]{escape(call.name)}[/cyan]({escape(args)}) {status}",
        highlight=False,
    )
    if body:
        console.print(f"  [dim]{escape(body)}[/dim]", highlight=False)


def format_tools(tools: list[dict], console: Console) -> None:
    """Display the tool catalog as a table."""
    if not tools:
        console.print("[dim]No tools registered.[/dim]")
        return

    table = Table(show_header=True, header_style="bold", box=None, pad_edge=False)
    table.add_column("Name", style="cyan")
    table.add_column("Parameters", style="yellow")
    table.add_column("Description")

    for tool in tools:
        fn = tool["function"]
        props = fn.get("parameters", {}).get("properties", {})
        required = set(fn.get("parameters", {}).get("required", []))
        params = ", ".join(
            name if name in required else f"{name}?" for name in props
        )
        table.add_row(fn["name"], escape(params), escape(fn.get("description", "")))

    console.print(table)


def format_error(message: str, console: Console) -> None:
    """Display an error message."""
    console.print(f"[red]Error:[/red] {escape(message)}", highlight=False)
