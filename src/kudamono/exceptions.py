"""Kudamono exception hierarchy.

Expected runtime failures (bad tool arguments, unknown tools, HTTP errors)
travel as ``Result`` values, see ``kudamono.result``. The exceptions here
are raised for misuse and configuration problems only.
"""


class KudamonoError(Exception):
    """Base exception for all Kudamono errors."""


class ConfigError(KudamonoError):
    """Raised when settings are missing or invalid."""


class AgentError(KudamonoError):
    """Raised when the turn processor is used incorrectly."""


class ToolDefinitionError(KudamonoError):
    """Raised when a tool is registered with an unusable definition."""

    def __init__(self, name: str, reason: str) -> None:
        self.name = name
        self.reason = reason
        super().__init__(f"Invalid tool definition '{name}': {reason}")
