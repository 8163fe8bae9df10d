"""Toolkit data models for agent tool definitions.

Frozen dataclasses for tool definitions and execution results.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from pydantic import BaseModel, ValidationError

from palaver.exceptions import InvalidArgumentsError

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolDefinition:
    """A single tool definition for LLM consumption.

    Attributes:
        name: Tool name (e.g. "read_file").
        description: Human-readable description of when/why to use this tool.
        arguments: Pydantic model describing and validating the arguments.
        handler: Callable taking a validated ``arguments`` instance and
            returning the tool output.
    """

    name: str
    description: str
    arguments: type[BaseModel]
    handler: Callable[[BaseModel], object]

    @property
    def parameters(self) -> dict:
        """JSON Schema for the arguments, as sent to the model."""
        return self.arguments.model_json_schema(by_alias=True)

    def validate(self, arguments: object) -> BaseModel:
        """Validate raw arguments into a typed arguments instance.

        Raises:
            InvalidArgumentsError: If the arguments do not match the schema.
        """
        try:
            return self.arguments.model_validate(arguments)
        except ValidationError as exc:
            details = "; ".join(
                f"{'.'.join(str(p) for p in err['loc']) or '(root)'}: {err['msg']}"
                for err in exc.errors()
            )
            raise InvalidArgumentsError(self.name, details) from exc

    def to_openai(self) -> dict:
        """Convert to OpenAI function-calling format.

        Returns:
            Dict with "type": "function" and nested "function" object.
        """
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }


class ToolFailure(str, enum.Enum):
    """Why a tool call did not produce output."""

    UNKNOWN_TOOL = "unknown_tool"
    INVALID_ARGUMENTS = "invalid_arguments"
    EXECUTION_FAILED = "execution_failed"


@dataclass(frozen=True)
class ToolResult:
    """Structured result from executing a tool.

    Attributes:
        tool_name: Name of the tool that was requested.
        success: Whether execution succeeded.
        output: String output on success.
        error: Error message on failure.
        failure: Failure category, None on success.
    """

    tool_name: str
    success: bool
    output: str = ""
    error: str = ""
    failure: Optional[ToolFailure] = None

    @property
    def content(self) -> str:
        """Text fed back to the model as the tool message content."""
        if self.success:
            return self.output
        return f"Error: {self.error}"
