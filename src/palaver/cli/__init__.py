"""Palaver CLI -- terminal interface for the chat agent.

This module is never imported from palaver/__init__.py.
It is only loaded via the ``palaver`` entry point defined in pyproject.toml.
"""

from __future__ import annotations

import logging

import click
from dotenv import find_dotenv, load_dotenv
from rich.logging import RichHandler

from palaver._version import __version__
from palaver.cli.formatting import get_console


def _configure_logging(verbose: bool) -> None:
    """Route palaver's loggers through Rich; DEBUG with --verbose, else WARNING."""
    handler = RichHandler(
        console=get_console(),
        show_path=False,
        rich_tracebacks=verbose,
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    root = logging.getLogger("palaver")
    root.handlers[:] = [handler]
    root.setLevel(logging.DEBUG if verbose else logging.WARNING)
    root.propagate = False


@click.group()
@click.version_option(__version__, prog_name="palaver")
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    default=False,
    help="Show tool calls and debug logging.",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """Palaver: chat with a model that can read your files."""
    load_dotenv(find_dotenv(usecwd=True))
    _configure_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose


# Register subcommands after cli group is defined
from palaver.cli.commands.chat import chat  # noqa: E402
from palaver.cli.commands.tools import tools  # noqa: E402

cli.add_command(chat)
cli.add_command(tools)
