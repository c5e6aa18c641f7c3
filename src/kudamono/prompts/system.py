"""System prompt for the tool-calling assistant.

The prompt enumerates the registered tools (via
``ToolRegistry.prompt_fragment()``) and tells the model how to use them.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from kudamono.toolkit.registry import ToolRegistry

DEFAULT_ASSISTANT_NAME = "Kudamono"

SYSTEM_PROMPT_TEMPLATE = """\
You are {name}, a helpful assistant. You can use the following tools:
{tools}

Use these tools when they help answer the user's request. Call a tool with \
arguments that match its input schema; if a tool reports an error, read the \
message and retry with corrected arguments or explain the problem. \
If you don't need a tool, just respond with your answer."""

NO_TOOLS_PROMPT_TEMPLATE = "You are {name}, a helpful assistant."


def build_system_prompt(
    registry: ToolRegistry, *, name: str = DEFAULT_ASSISTANT_NAME
) -> str:
    """Render the system prompt for the tools currently in ``registry``."""
    fragment = registry.prompt_fragment()
    if not fragment:
        return NO_TOOLS_PROMPT_TEMPLATE.format(name=name)
    return SYSTEM_PROMPT_TEMPLATE.format(name=name, tools=fragment)
