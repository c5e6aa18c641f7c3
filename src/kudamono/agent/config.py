"""Turn processor configuration types.

Provides TurnState and AgentConfig for configuring the tool-calling loop.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from kudamono.agent.models import ToolStep
    from kudamono.conversation import ToolInvocationRequest


class TurnState(str, enum.Enum):
    """States of the turn processor during one interaction cycle."""

    IDLE = "idle"
    AWAITING_MODEL = "awaiting_model"
    PROCESSING_BLOCKS = "processing_blocks"
    DONE = "done"


@dataclass
class AgentConfig:
    """Configuration for the turn processor.

    Mutable dataclass -- callers may adjust settings between runs.

    Attributes:
        max_iterations: Maximum number of model calls per user request.
            Stops run-away tool-call loops.
        system_prompt: Override for the prompt built from the registry.
        on_text: Output collaborator; receives each text block in order.
        on_tool_call: Invoked before a requested tool is resolved.
        on_step: Invoked after each tool result is appended.
    """

    max_iterations: int = 10
    system_prompt: str | None = None
    on_text: Callable[[str], None] | None = None
    on_tool_call: Callable[[ToolInvocationRequest], None] | None = None
    on_step: Callable[[ToolStep], None] | None = None
