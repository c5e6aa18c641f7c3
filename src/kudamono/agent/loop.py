"""Turn processor: the tool-calling control loop.

Calls the model with the current conversation, emits text blocks,
executes requested tools in response order, appends their results, and
calls the model again until it stops asking for tools or the iteration
cap is reached.

Each tool request is recorded as its own assistant turn followed by a
user turn holding the matching result, so every result correlates with
the request in the immediately preceding assistant turn.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Any

from kudamono.agent.config import AgentConfig, TurnState
from kudamono.agent.models import MAX_ITERATIONS_REACHED, ToolStep, TurnResult
from kudamono.conversation import (
    ConversationTurn,
    TextBlock,
    ToolInvocationResult,
)
from kudamono.exceptions import AgentError
from kudamono.failures import TransportFailure
from kudamono.prompts.system import build_system_prompt
from kudamono.result import err, is_err, ok

if TYPE_CHECKING:
    from collections.abc import Callable

    from kudamono.conversation import Conversation, ToolInvocationRequest
    from kudamono.llm.models import ModelResponse
    from kudamono.llm.protocols import ModelClient
    from kudamono.result import Result
    from kudamono.toolkit.registry import ToolRegistry

logger = logging.getLogger(__name__)

CANCELLED_REASON = "cancelled"


class TurnProcessor:
    """Runs one interaction cycle per ``run()`` call.

    Transport failures end the cycle and are returned to the caller; no
    automatic retry happens at this level. Tool failures of any kind are
    sent back to the model as error tool results.

    Usage::

        processor = TurnProcessor(client, registry, AgentConfig(on_text=print))
        conversation.append_user_text("What is 2 + 3?")
        outcome = processor.run(conversation)
        if is_err(outcome):
            print(outcome.error)
    """

    def __init__(
        self,
        client: ModelClient,
        registry: ToolRegistry,
        config: AgentConfig | None = None,
    ) -> None:
        self._client = client
        self._registry = registry
        self._config = config or AgentConfig()
        self._state = TurnState.IDLE
        self._cancel_event = threading.Event()
        self._running = False

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def state(self) -> TurnState:
        """Return the current processor state."""
        return self._state

    @property
    def config(self) -> AgentConfig:
        return self._config

    @property
    def registry(self) -> ToolRegistry:
        return self._registry

    def run(self, conversation: Conversation) -> Result[TurnResult, TransportFailure]:
        """Drive the model until it produces a final answer.

        Args:
            conversation: Conversation whose last turn is the user request.
                Modified in place.

        Returns:
            ``Ok(TurnResult)``, or ``Err(TransportFailure)`` when a model
            call failed or the cycle was cancelled.

        Raises:
            AgentError: If this processor is already running.
        """
        if self._running:
            raise AgentError("TurnProcessor.run() is already in progress")
        self._running = True

        texts: list[str] = []
        steps: list[ToolStep] = []
        response: ModelResponse | None = None
        stop_reason: str | None = None
        iterations = 0

        system_prompt = self._config.system_prompt or build_system_prompt(self._registry)
        manifest = self._registry.manifest()

        try:
            while True:
                if iterations >= self._config.max_iterations:
                    logger.warning(
                        "Stopping after %d model calls; the model kept requesting tools",
                        iterations,
                    )
                    stop_reason = MAX_ITERATIONS_REACHED
                    break
                if self._cancel_event.is_set():
                    return err(TransportFailure(reason=CANCELLED_REASON))

                # AwaitingModel
                self._state = TurnState.AWAITING_MODEL
                iterations += 1
                outcome = self._client.complete(conversation, manifest, system_prompt)

                # A response that arrives after cancellation is never observed.
                if self._cancel_event.is_set():
                    logger.info("Discarding model response received after cancellation")
                    return err(TransportFailure(reason=CANCELLED_REASON))
                if is_err(outcome):
                    logger.warning("Model call failed: %s", outcome.error)
                    return outcome

                # ProcessingBlocks
                response = outcome.value
                self._state = TurnState.PROCESSING_BLOCKS
                for block in response.content_blocks:
                    if isinstance(block, TextBlock):
                        if not block.text:
                            continue
                        conversation.append(ConversationTurn.assistant_text(block.text))
                        texts.append(block.text)
                        self._notify(self._config.on_text, block.text)
                    else:
                        step = self._process_tool_request(conversation, block, iterations)
                        steps.append(step)
                        self._notify(self._config.on_step, step)

                if not response.wants_tools:
                    if response.stop_reason is not None:
                        stop_reason = response.stop_reason.value
                    break
        finally:
            self._state = TurnState.DONE
            self._running = False

        return ok(
            TurnResult(
                texts=texts,
                steps=steps,
                iterations=iterations,
                stop_reason=stop_reason,
                response=response,
            )
        )

    def cancel(self) -> None:
        """Abandon the current cycle.

        Safe to call from another thread. The loop stops at the next
        iteration boundary; a model response still in flight is discarded.
        Stays in effect until ``reset()``.
        """
        self._cancel_event.set()

    def reset(self) -> None:
        """Clear a cancellation so the processor can be reused."""
        self._cancel_event.clear()
        self._state = TurnState.IDLE

    # ------------------------------------------------------------------
    # Internal methods
    # ------------------------------------------------------------------

    def _process_tool_request(
        self,
        conversation: Conversation,
        request: ToolInvocationRequest,
        iteration: int,
    ) -> ToolStep:
        """Echo the request, execute it, and append the correlated result."""
        conversation.append(ConversationTurn.tool_request(request))
        self._notify(self._config.on_tool_call, request)

        result = self._execute(request)
        conversation.append(ConversationTurn.tool_result(result))
        return ToolStep(iteration=iteration, request=request, result=result)

    def _execute(self, request: ToolInvocationRequest) -> ToolInvocationResult:
        """Resolve and invoke a tool, folding every failure into the result."""
        lookup = self._registry.lookup(request.tool_name)
        if is_err(lookup):
            logger.info("Model requested unknown tool: %s", request.tool_name)
            return ToolInvocationResult(
                invocation_id=request.invocation_id,
                payload=lookup.error.message,
                is_error=True,
            )

        logger.debug("Invoking tool %s (%s)", request.tool_name, request.invocation_id)
        outcome = lookup.value.invoke(request.arguments())
        if is_err(outcome):
            logger.info("Tool %s failed: %s", request.tool_name, outcome.error)
            return ToolInvocationResult(
                invocation_id=request.invocation_id,
                payload=outcome.error.message,
                is_error=True,
            )
        return ToolInvocationResult(
            invocation_id=request.invocation_id,
            payload=outcome.value,
            is_error=False,
        )

    @staticmethod
    def _notify(callback: Callable[[Any], None] | None, value: Any) -> None:
        if callback is None:
            return
        try:
            callback(value)
        except Exception:
            logger.debug("Callback error", exc_info=True)
