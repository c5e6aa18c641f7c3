"""Kudamono: a tool-calling conversational agent runtime.

Keeps a multi-turn conversation with a remote model, lets the model call
schema-validated local tools, and feeds their results back until the
model produces a final answer.
"""

from kudamono._version import __version__

# Core loop
from kudamono.agent import AgentConfig, ToolStep, TurnProcessor, TurnResult, TurnState

# Conversation
from kudamono.conversation import (
    Conversation,
    ConversationTurn,
    TextBlock,
    ToolInvocationRequest,
    ToolInvocationResult,
)

# Results and failures
from kudamono.result import Err, Ok, Result, err, is_err, is_ok, ok
from kudamono.failures import (
    HandlerFailure,
    ToolNotFound,
    TransportFailure,
    ValidationFailure,
)

# Tools
from kudamono.toolkit import ToolDefinition, ToolRegistry, register_builtin_tools

# Model clients
from kudamono.llm import AnthropicClient, ModelClient, ModelResponse, PlannerClient, StopReason

# Configuration and errors
from kudamono.config import Settings
from kudamono.exceptions import AgentError, ConfigError, KudamonoError, ToolDefinitionError

__all__ = [
    "__version__",
    "TurnProcessor",
    "AgentConfig",
    "TurnResult",
    "TurnState",
    "ToolStep",
    "Conversation",
    "ConversationTurn",
    "TextBlock",
    "ToolInvocationRequest",
    "ToolInvocationResult",
    "Result",
    "Ok",
    "Err",
    "ok",
    "err",
    "is_ok",
    "is_err",
    "ToolNotFound",
    "ValidationFailure",
    "HandlerFailure",
    "TransportFailure",
    "ToolDefinition",
    "ToolRegistry",
    "register_builtin_tools",
    "AnthropicClient",
    "PlannerClient",
    "ModelClient",
    "ModelResponse",
    "StopReason",
    "Settings",
    "KudamonoError",
    "ConfigError",
    "AgentError",
    "ToolDefinitionError",
]
