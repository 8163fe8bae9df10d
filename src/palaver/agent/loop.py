"""Core agent turn loop.

Provides the Agent class that runs a conversational session: read a
user line, call the model, execute any tool calls it requests, feed the
results back, and repeat until the model replies with text. The user is
not consulted between tool execution and the follow-up model call.

Failures caused by the model's own choices (unknown tool, bad arguments,
a tool that errors) are written into the transcript as tool results so
the model can correct itself. Transport failures (after retries) and
runaway tool loops end the session.
"""

from __future__ import annotations

import concurrent.futures
import logging
from typing import TYPE_CHECKING

import tenacity

from palaver.agent.config import AgentState
from palaver.agent.models import SessionResult, ToolStep, TurnResult
from palaver.exceptions import (
    AgentStateError,
    LoopBoundExceededError,
    PalaverError,
    TransportError,
)
from palaver.models.completion import (
    AssistantText,
    ToolCallsRequested,
    TransportFailure,
)
from palaver.models.config import AgentConfig
from palaver.protocols import Message
from palaver.transcript import Transcript

if TYPE_CHECKING:
    from collections.abc import Callable

    from palaver.llm.adapter import ModelTransport
    from palaver.models.completion import CompletionResult
    from palaver.protocols import ToolCall
    from palaver.toolkit.models import ToolResult
    from palaver.toolkit.registry import ToolRegistry

logger = logging.getLogger(__name__)


def _is_retryable_failure(result: object) -> bool:
    return isinstance(result, TransportFailure) and result.retryable


def _wait_for_retry_after(
    backoff: Callable[[tenacity.RetryCallState], float],
    *,
    cap: float,
) -> Callable[[tenacity.RetryCallState], float]:
    """Wrap a tenacity wait so a provider's Retry-After is honoured.

    The delay is the larger of the backoff and ``retry_after``, with
    ``retry_after`` capped at ``cap`` seconds.
    """

    def wait(retry_state: tenacity.RetryCallState) -> float:
        delay = backoff(retry_state)
        outcome = retry_state.outcome
        if outcome is None or outcome.failed:
            return delay
        hint = getattr(outcome.result(), "retry_after", None)
        if hint is None:
            return delay
        return max(delay, min(hint, cap))

    return wait


class Agent:
    """Tool-calling chat agent over a single append-only transcript.

    Usage::

        registry = ToolRegistry.from_definitions(get_builtin_tools())
        transport = ModelTransport.from_config(OpenAIClient(), config)
        agent = Agent(transport, registry, config=config,
                      read_input=read_line, on_reply=print)
        result = agent.run()
        if result.failure:
            print(f"Error: {result.failure}")
    """

    def __init__(
        self,
        transport: ModelTransport,
        registry: ToolRegistry,
        *,
        config: AgentConfig | None = None,
        read_input: Callable[[], str | None] | None = None,
        on_reply: Callable[[str], None] | None = None,
        on_tool_result: Callable[[ToolCall, ToolResult], None] | None = None,
    ) -> None:
        self._transport = transport
        self._registry = registry
        self._config = config or AgentConfig()
        self._read_input = read_input
        self._on_reply = on_reply
        self._on_tool_result = on_tool_result
        self._transcript = Transcript()
        self._transcript.append(Message.system(self._config.system_prompt))
        self._state = AgentState.AWAITING_USER_INPUT
        self._failure: PalaverError | None = None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def state(self) -> AgentState:
        """Return the current agent state."""
        return self._state

    @property
    def config(self) -> AgentConfig:
        return self._config

    @property
    def transcript(self) -> tuple[Message, ...]:
        """Immutable snapshot of the conversation so far."""
        return self._transcript.snapshot()

    @property
    def failure(self) -> PalaverError | None:
        """The error that ended the session, if any."""
        return self._failure

    def run(self) -> SessionResult:
        """Run the session until end of input or a fatal failure.

        Returns:
            SessionResult with every completed turn, the final state, and
            the failure that ended the session (None on a normal end).

        Raises:
            AgentStateError: If no input source is configured or the
                session is not awaiting input.
        """
        if self._read_input is None:
            raise AgentStateError("No read_input callable configured for run()")
        if self._state is not AgentState.AWAITING_USER_INPUT:
            raise AgentStateError(f"Cannot run session in state {self._state.value}")

        turns: list[TurnResult] = []
        while self._state is AgentState.AWAITING_USER_INPUT:
            text = self._read_input()
            if text is None or not text.strip():
                self.end()
                break
            try:
                turns.append(self.run_turn(text))
            except (TransportError, LoopBoundExceededError) as exc:
                logger.error("Session ended: %s", exc)
                break

        return SessionResult(
            turns=tuple(turns),
            state=self._state,
            failure=self._failure,
        )

    def end(self) -> None:
        """End the session between turns. No message is appended."""
        if self._state not in (AgentState.AWAITING_USER_INPUT, AgentState.TERMINATED):
            raise AgentStateError(f"Cannot end session in state {self._state.value}")
        if self._state is AgentState.AWAITING_USER_INPUT:
            logger.debug("End of session after %d messages", len(self._transcript))
        self._state = AgentState.TERMINATED

    def run_turn(self, text: str) -> TurnResult:
        """Process one user input through to the assistant's reply.

        1. Append the user message
        2. Loop: call model -> append assistant message -> execute tool
           calls, appending each result -> repeat until the model replies
        3. Return the reply and the tool steps taken

        Raises:
            ValueError: If ``text`` is blank.
            AgentStateError: If the agent is not awaiting user input.
            TransportError: If the model call failed (after retries).
                The session is terminated.
            LoopBoundExceededError: If the model kept requesting tools past
                ``max_tool_rounds``. The session is terminated.
        """
        if self._state is not AgentState.AWAITING_USER_INPUT:
            raise AgentStateError(f"Cannot start a turn in state {self._state.value}")
        if not text or not text.strip():
            raise ValueError("User input must not be blank")

        try:
            return self._run_turn(text)
        except BaseException:
            self._state = AgentState.TERMINATED
            raise

    # ------------------------------------------------------------------
    # Internal methods
    # ------------------------------------------------------------------

    def _run_turn(self, text: str) -> TurnResult:
        self._transcript.append(Message.user(text))
        self._state = AgentState.AWAITING_MODEL

        steps: list[ToolStep] = []
        rounds = 0
        model_calls = 0
        while True:
            result, attempts = self._complete()
            model_calls += attempts

            if isinstance(result, TransportFailure):
                raise self._fail(TransportError(result, attempts=attempts))

            if isinstance(result, AssistantText):
                self._transcript.append(Message.assistant(result.text))
                self._state = AgentState.AWAITING_USER_INPUT
                if self._on_reply is not None:
                    self._on_reply(result.text)
                return TurnResult(
                    text=result.text,
                    steps=tuple(steps),
                    tool_rounds=rounds,
                    model_calls=model_calls,
                )

            # ToolCallsRequested
            if rounds >= self._config.max_tool_rounds:
                raise self._fail(LoopBoundExceededError(self._config.max_tool_rounds))
            rounds += 1
            self._transcript.append(Message.assistant(result.text, tool_calls=result.requests))
            self._state = AgentState.EXECUTING_TOOLS
            logger.info(
                "Round %d: executing %d tool call(s): %s",
                rounds, len(result.requests), [r.name for r in result.requests],
            )
            steps.extend(self._dispatch(result, rounds))
            self._state = AgentState.AWAITING_MODEL

    def _complete(self) -> tuple[CompletionResult, int]:
        """Call the transport, retrying retryable failures with backoff.

        Uses tenacity.Retrying programmatically so the retry budget comes
        from the per-agent config. When retries run out the last
        TransportFailure is returned rather than raised.
        """
        cfg = self._config
        retryer = tenacity.Retrying(
            retry=tenacity.retry_if_result(_is_retryable_failure),
            wait=_wait_for_retry_after(
                tenacity.wait_exponential(
                    multiplier=1, min=cfg.retry_min_wait, max=cfg.retry_max_wait
                )
                + tenacity.wait_random(0, cfg.retry_jitter),
                cap=cfg.retry_max_wait,
            ),
            stop=tenacity.stop_after_attempt(cfg.transport_retries + 1),
            before_sleep=tenacity.before_sleep_log(logger, logging.WARNING),
            retry_error_callback=lambda state: state.outcome.result(),
        )
        attempts = 0

        def attempt() -> CompletionResult:
            nonlocal attempts
            attempts += 1
            return self._transport.complete(
                self._transcript.snapshot(),
                self._registry.describe_all(),
            )

        return retryer(attempt), attempts

    def _dispatch(self, result: ToolCallsRequested, round_num: int) -> list[ToolStep]:
        """Execute every request of one round, appending results in request order."""
        requests = result.requests
        if self._config.parallel_tools and len(requests) > 1:
            workers = min(self._config.max_parallel_tools, len(requests))
            with concurrent.futures.ThreadPoolExecutor(
                max_workers=workers, thread_name_prefix="palaver-tool"
            ) as pool:
                outcomes = list(pool.map(self._execute, requests))
            return [
                self._record(tc, outcome, round_num)
                for tc, outcome in zip(requests, outcomes)
            ]
        return [self._record(tc, self._execute(tc), round_num) for tc in requests]

    def _execute(self, tc: ToolCall) -> ToolResult:
        return self._registry.execute(
            tc.name, tc.arguments, timeout=self._config.tool_timeout
        )

    def _record(self, tc: ToolCall, result: ToolResult, round_num: int) -> ToolStep:
        self._transcript.append(Message.tool(tc.id, result.content))
        if result.success:
            logger.debug("Tool %s (%s) succeeded", tc.name, tc.id)
        else:
            logger.info("Tool %s (%s) failed: %s", tc.name, tc.id, result.error)
        if self._on_tool_result is not None:
            self._on_tool_result(tc, result)
        return ToolStep(round=round_num, tool_call=tc, result=result)

    def _fail(self, exc: PalaverError) -> PalaverError:
        self._failure = exc
        self._state = AgentState.TERMINATED
        return exc
