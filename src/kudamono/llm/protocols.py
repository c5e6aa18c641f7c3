"""Model client protocol.

Any object with ``complete()`` and ``close()`` matching these signatures
can drive the turn processor. The built-in AnthropicClient implements it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from kudamono.conversation import Conversation
    from kudamono.failures import TransportFailure
    from kudamono.llm.models import ModelResponse
    from kudamono.result import Result


@runtime_checkable
class ModelClient(Protocol):
    """Protocol for pluggable model backends."""

    def complete(
        self,
        conversation: Conversation,
        tool_manifest: list[dict],
        system_prompt: str,
    ) -> Result[ModelResponse, TransportFailure]:
        """Issue one model call with the full conversation history."""
        ...

    def close(self) -> None:
        """Release underlying resources."""
        ...
