"""Agent toolkit: tool definitions, registry, and built-in file tools.

Provides the ToolRegistry that validates and dispatches model tool
calls, plus function-calling schemas for the catalog sent to the LLM.
"""

from palaver.toolkit.definitions import get_builtin_tools
from palaver.toolkit.models import ToolDefinition, ToolFailure, ToolResult
from palaver.toolkit.registry import ToolRegistry

__all__ = [
    "ToolDefinition",
    "ToolFailure",
    "ToolResult",
    "ToolRegistry",
    "get_builtin_tools",
]
