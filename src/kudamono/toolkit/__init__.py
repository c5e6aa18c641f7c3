"""Toolkit: tool definitions, the tool registry, and built-in tools."""

from kudamono.toolkit.builtin import register_builtin_tools
from kudamono.toolkit.models import ToolDefinition
from kudamono.toolkit.registry import ToolRegistry

__all__ = [
    "ToolDefinition",
    "ToolRegistry",
    "register_builtin_tools",
]
