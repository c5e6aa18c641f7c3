"""Agent package -- the tool-calling turn processor and its types."""

from kudamono.agent.config import AgentConfig, TurnState
from kudamono.agent.loop import CANCELLED_REASON, TurnProcessor
from kudamono.agent.models import MAX_ITERATIONS_REACHED, ToolStep, TurnResult

__all__ = [
    # Core
    "TurnProcessor",
    # Config
    "AgentConfig",
    "TurnState",
    # Models
    "ToolStep",
    "TurnResult",
    "CANCELLED_REASON",
    "MAX_ITERATIONS_REACHED",
]
