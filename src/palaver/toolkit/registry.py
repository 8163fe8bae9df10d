"""ToolRegistry: the catalog of tools the model may call.

Tools are registered once at startup into a name -> definition table.
``invoke()`` validates arguments and runs the handler; ``execute()``
additionally turns lookup and validation errors into failed results so
the agent loop can hand every outcome back to the model.
"""

from __future__ import annotations

import concurrent.futures
import logging
import threading
from typing import TYPE_CHECKING

from palaver.exceptions import DuplicateToolError, ToolError, UnknownToolError
from palaver.toolkit.models import ToolFailure, ToolResult

if TYPE_CHECKING:
    from collections.abc import Iterable

    from palaver.toolkit.models import ToolDefinition

logger = logging.getLogger(__name__)


class _ToolTimeout(Exception):
    """A handler was still running when its timeout expired."""


class ToolRegistry:
    """Name-indexed table of :class:`ToolDefinition` objects.

    Usage::

        registry = ToolRegistry.from_definitions(get_builtin_tools())
        result = registry.execute("read_file", {"filePath": "notes.txt"})
        if result.success:
            print(result.output)
        else:
            print(result.error)
    """

    def __init__(self) -> None:
        self._tools: dict[str, ToolDefinition] = {}

    @classmethod
    def from_definitions(cls, definitions: Iterable[ToolDefinition]) -> ToolRegistry:
        """Build a registry from definitions, registering each in order.

        Raises:
            DuplicateToolError: If two definitions share a name.
        """
        registry = cls()
        for definition in definitions:
            registry.register(definition)
        return registry

    def register(self, definition: ToolDefinition) -> None:
        """Add a tool definition.

        Raises:
            DuplicateToolError: If a tool with the same name exists.
        """
        if definition.name in self._tools:
            raise DuplicateToolError(definition.name)
        self._tools[definition.name] = definition
        logger.debug("Registered tool %s", definition.name)

    def get(self, name: str) -> ToolDefinition | None:
        return self._tools.get(name)

    def names(self) -> list[str]:
        """Return tool names in registration order."""
        return list(self._tools)

    def describe_all(self) -> list[dict]:
        """Build the tool catalog in OpenAI function-calling format.

        A fresh list is built on every call so callers may not mutate
        the registry through it.
        """
        return [tool.to_openai() for tool in self._tools.values()]

    def invoke(
        self,
        name: str,
        arguments: object,
        *,
        timeout: float | None = None,
    ) -> ToolResult:
        """Validate arguments and run the named tool.

        A failing handler (or one exceeding ``timeout``) yields a failed
        ToolResult instead of raising.

        Raises:
            UnknownToolError: If no tool has this name.
            InvalidArgumentsError: If the arguments fail validation.
        """
        tool = self._tools.get(name)
        if tool is None:
            raise UnknownToolError(name, self.names())
        validated = tool.validate(arguments)
        try:
            output = self._run(tool, validated, timeout)
        except _ToolTimeout:
            logger.warning("Tool %s timed out after %ss", name, timeout)
            return ToolResult(
                tool_name=name,
                success=False,
                error=f"Tool {name!r} timed out after {timeout}s",
                failure=ToolFailure.EXECUTION_FAILED,
            )
        except Exception as exc:
            logger.debug("Tool %s failed: %s", name, exc, exc_info=True)
            return ToolResult(
                tool_name=name,
                success=False,
                error=f"{type(exc).__name__}: {exc}",
                failure=ToolFailure.EXECUTION_FAILED,
            )
        return ToolResult(tool_name=name, success=True, output=str(output))

    def execute(
        self,
        name: str,
        arguments: object,
        *,
        timeout: float | None = None,
    ) -> ToolResult:
        """Run a tool, capturing every model-directed failure as a result.

        Returns:
            ToolResult with success/failure status and output/error.
        """
        try:
            return self.invoke(name, arguments, timeout=timeout)
        except ToolError as exc:
            failure = (
                ToolFailure.UNKNOWN_TOOL
                if isinstance(exc, UnknownToolError)
                else ToolFailure.INVALID_ARGUMENTS
            )
            logger.info("Tool call %s rejected: %s", name, exc)
            return ToolResult(
                tool_name=name,
                success=False,
                error=str(exc),
                failure=failure,
            )

    @staticmethod
    def _run(tool: ToolDefinition, validated: object, timeout: float | None) -> object:
        if timeout is None:
            return tool.handler(validated)
        # Daemon thread: a handler that never returns must not block exit.
        future: concurrent.futures.Future = concurrent.futures.Future()

        def target() -> None:
            if not future.set_running_or_notify_cancel():
                return
            try:
                future.set_result(tool.handler(validated))
            except BaseException as exc:
                future.set_exception(exc)

        threading.Thread(target=target, name=f"tool-{tool.name}", daemon=True).start()
        try:
            return future.result(timeout=timeout)
        except concurrent.futures.TimeoutError:
            if future.done():
                raise
            raise _ToolTimeout from None

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)
