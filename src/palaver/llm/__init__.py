"""LLM client infrastructure for Palaver.

Provides an OpenAI-compatible HTTP client, the pluggable LLMClient
protocol, and the transport adapter that normalises completion responses.
"""

from palaver.llm.adapter import ModelTransport, parse_completion
from palaver.llm.client import OpenAIClient, is_retryable
from palaver.llm.errors import (
    LLMAuthError,
    LLMClientError,
    LLMConfigError,
    LLMRateLimitError,
    LLMResponseError,
)
from palaver.llm.protocols import LLMClient

__all__ = [
    "OpenAIClient",
    "LLMClient",
    "ModelTransport",
    "parse_completion",
    "is_retryable",
    "LLMClientError",
    "LLMConfigError",
    "LLMRateLimitError",
    "LLMAuthError",
    "LLMResponseError",
]
