"""palaver chat -- run an interactive session with the agent."""

from __future__ import annotations

from pathlib import Path

import click

from palaver.agent import Agent
from palaver.cli.formatting import (
    format_error,
    format_reply,
    format_tool_result,
    get_console,
)
from palaver.cli.prompt import console_reader
from palaver.llm import ModelTransport, OpenAIClient
from palaver.models.config import DEFAULT_MODEL, AgentConfig
from palaver.toolkit import ToolRegistry, get_builtin_tools

BANNER = "Chat with Assistant (Ctrl+C to exit):"


@click.command()
@click.option("--model", default=DEFAULT_MODEL, show_default=True, envvar="PALAVER_MODEL", help="Model identifier.")
@click.option("--max-tokens", type=click.IntRange(min=1), default=1000, show_default=True, envvar="PALAVER_MAX_TOKENS", help="Upper bound on each response.")
@click.option("--temperature", type=click.FloatRange(0.0, 2.0), default=None, envvar="PALAVER_TEMPERATURE", help="Sampling temperature.")
@click.option("--max-tool-rounds", type=click.IntRange(min=1), default=10, show_default=True, envvar="PALAVER_MAX_TOOL_ROUNDS", help="Tool rounds allowed per turn.")
@click.option("--retries", type=click.IntRange(min=0), default=2, show_default=True, envvar="PALAVER_RETRIES", help="Retries for transient model request failures.")
@click.option("--tool-timeout", type=click.FloatRange(min=0.0, min_open=True), default=None, envvar="PALAVER_TOOL_TIMEOUT", help="Seconds a tool may run before it fails.")
@click.option("--parallel-tools", is_flag=True, default=False, help="Run the tool calls of one round concurrently.")
@click.option("--root", type=click.Path(file_okay=False, path_type=Path), default=None, envvar="PALAVER_ROOT", help="Directory relative paths resolve against.")
@click.option("--system-prompt", default=None, envvar="PALAVER_SYSTEM_PROMPT", help="Override the system prompt.")
@click.option("--api-key", default=None, help="API key (default: PALAVER_API_KEY or OPENROUTER_KEY).")
@click.option("--base-url", default=None, help="API base URL (default: PALAVER_BASE_URL or OpenRouter).")
@click.option("--timeout", type=click.FloatRange(min=0.0, min_open=True), default=120.0, show_default=True, help="HTTP request timeout in seconds.")
@click.pass_context
def chat(
    ctx: click.Context,
    model: str,
    max_tokens: int,
    temperature: float | None,
    max_tool_rounds: int,
    retries: int,
    tool_timeout: float | None,
    parallel_tools: bool,
    root: Path | None,
    system_prompt: str | None,
    api_key: str | None,
    base_url: str | None,
    timeout: float,
) -> None:
    """Chat with the assistant. A blank line, Ctrl+D or Ctrl+C ends the session."""
    console = get_console()
    verbose = bool(ctx.obj and ctx.obj.get("verbose"))

    kwargs: dict = {
        "model": model,
        "max_tokens": max_tokens,
        "temperature": temperature,
        "max_tool_rounds": max_tool_rounds,
        "transport_retries": retries,
        "tool_timeout": tool_timeout,
        "parallel_tools": parallel_tools,
    }
    if system_prompt:
        kwargs["system_prompt"] = system_prompt
    config = AgentConfig(**kwargs)

    try:
        client = OpenAIClient(api_key=api_key, base_url=base_url, timeout=timeout)
    except SystemExit:
        raise
    except Exception as e:
        format_error(str(e), console)
        raise SystemExit(1) from None

    try:
        registry = ToolRegistry.from_definitions(get_builtin_tools(root))
        agent = Agent(
            ModelTransport.from_config(client, config),
            registry,
            config=config,
            read_input=console_reader(console),
            on_reply=lambda text: format_reply(text, console),
            on_tool_result=(
                (lambda call, result: format_tool_result(call, result, console))
                if verbose
                else None
            ),
        )

        console.print(BANNER)
        result = agent.run()
    except KeyboardInterrupt:
        console.print()
        return
    except SystemExit:
        raise
    except Exception as e:
        format_error(str(e), console)
        raise SystemExit(1) from None
    finally:
        client.close()

    if result.failure is not None:
        format_error(str(result.failure), console)
        raise SystemExit(1)
