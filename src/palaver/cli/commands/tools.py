"""palaver tools -- show the tool catalog the model is offered."""

from __future__ import annotations

from pathlib import Path

import click

from palaver.cli.formatting import format_tools, get_console
from palaver.toolkit import ToolRegistry, get_builtin_tools


@click.command()
@click.option(
    "--root",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    envvar="PALAVER_ROOT",
    help="Directory relative paths resolve against (default: current directory).",
)
def tools(root: Path | None) -> None:
    """List the registered tools and their parameters."""
    registry = ToolRegistry.from_definitions(get_builtin_tools(root))
    format_tools(registry.describe_all(), get_console())
