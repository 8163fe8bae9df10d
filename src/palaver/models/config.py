"""Configuration models for Palaver.

AgentConfig holds the model request settings, the retry policy for
failed completion calls, and the limits applied to tool execution.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from palaver.prompts import DEFAULT_SYSTEM_PROMPT

DEFAULT_MODEL = "deepseek/deepseek-chat:free"


class AgentConfig(BaseModel):
    """Per-session agent configuration.

    Attributes:
        model: Model identifier sent with every completion request.
        max_tokens: Upper bound on the size of each model response.
        temperature: Sampling temperature (None = provider default).
        system_prompt: Instruction seeded as the first transcript message.
        max_tool_rounds: Tool rounds allowed in one turn before the
            session is ended with LoopBoundExceededError.
        transport_retries: Extra attempts for retryable transport failures.
            0 disables retrying.
        retry_min_wait: Minimum backoff between attempts, in seconds.
        retry_max_wait: Maximum backoff between attempts, in seconds.
        retry_jitter: Upper bound of random jitter added to each wait.
        parallel_tools: Run the requests of one round on a thread pool.
            Results are still appended in request order.
        max_parallel_tools: Thread pool size when parallel_tools is set.
        tool_timeout: Seconds a tool may run before it is reported as
            failed (None = no limit).
    """

    model_config = {"frozen": True}

    model: str = DEFAULT_MODEL
    max_tokens: int = Field(default=1000, ge=1)
    temperature: Optional[float] = Field(default=None, ge=0.0, le=2.0)
    system_prompt: str = DEFAULT_SYSTEM_PROMPT
    max_tool_rounds: int = Field(default=10, ge=1)
    transport_retries: int = Field(default=2, ge=0)
    retry_min_wait: float = Field(default=1.0, ge=0.0)
    retry_max_wait: float = Field(default=30.0, ge=0.0)
    retry_jitter: float = Field(default=2.0, ge=0.0)
    parallel_tools: bool = False
    max_parallel_tools: int = Field(default=4, ge=1)
    tool_timeout: Optional[float] = Field(default=None, gt=0.0)
