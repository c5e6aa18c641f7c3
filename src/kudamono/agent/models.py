"""Turn processor result models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from kudamono.conversation import ToolInvocationRequest, ToolInvocationResult
    from kudamono.llm.models import ModelResponse

MAX_ITERATIONS_REACHED = "max_iterations"


@dataclass(frozen=True)
class ToolStep:
    """One executed tool request and the result sent back to the model."""

    iteration: int
    request: ToolInvocationRequest
    result: ToolInvocationResult

    @property
    def success(self) -> bool:
        return not self.result.is_error


@dataclass(frozen=True)
class TurnResult:
    """Outcome of one interaction cycle (a single user request).

    Attributes:
        texts: Text blocks emitted, in order.
        steps: Tool executions, in order.
        iterations: Number of model calls made.
        stop_reason: Final model stop reason value, or ``"max_iterations"``
            when the loop was cut off.
        response: The last model response observed.
    """

    texts: list[str] = field(default_factory=list)
    steps: list[ToolStep] = field(default_factory=list)
    iterations: int = 0
    stop_reason: str | None = None
    response: ModelResponse | None = None

    @property
    def text(self) -> str:
        return "\n".join(self.texts)

    @property
    def failed_steps(self) -> list[ToolStep]:
        return [s for s in self.steps if not s.success]

    @property
    def truncated(self) -> bool:
        return self.stop_reason == MAX_ITERATIONS_REACHED
