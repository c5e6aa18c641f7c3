"""Model client infrastructure for Kudamono.

Provides the Anthropic Messages API client, response models, the
ModelClient protocol, and the planning-service client used by the
``plan`` tool.
"""

from kudamono.llm.client import AnthropicClient
from kudamono.llm.models import ModelResponse, StopReason, parse_response
from kudamono.llm.planner import PlannerClient
from kudamono.llm.protocols import ModelClient

__all__ = [
    "AnthropicClient",
    "PlannerClient",
    "ModelClient",
    "ModelResponse",
    "StopReason",
    "parse_response",
]
