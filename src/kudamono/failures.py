"""Failure payloads carried by ``Err`` results.

Tool-level failures (``ToolNotFound``, ``ValidationFailure``,
``HandlerFailure``) are reported back to the model as error tool results.
``TransportFailure`` aborts the current interaction cycle and is reported
to the operator.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Union


@dataclass(frozen=True)
class ToolNotFound:
    """The model named a tool that is not registered."""

    tool_name: str

    @property
    def message(self) -> str:
        return f"Unknown tool: {self.tool_name}"

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class ValidationFailure:
    """Tool arguments were rejected by the tool's input schema.

    Attributes:
        tool_name: Tool whose schema rejected the arguments.
        arguments: The raw arguments as received from the model.
        detail: Validator error text.
    """

    tool_name: str
    arguments: Any
    detail: str = ""

    @property
    def message(self) -> str:
        try:
            shown = json.dumps(self.arguments, default=str)
        except (TypeError, ValueError):
            shown = repr(self.arguments)
        msg = f"Wrong arguments for tool ({self.tool_name}): {shown}"
        if self.detail:
            msg += f"\n{self.detail}"
        return msg

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class HandlerFailure:
    """The tool's underlying operation failed."""

    tool_name: str
    reason: str

    @classmethod
    def from_exception(cls, tool_name: str, exc: BaseException) -> HandlerFailure:
        return cls(tool_name=tool_name, reason=f"{type(exc).__name__}: {exc}")

    @property
    def message(self) -> str:
        return f"Tool {self.tool_name} failed: {self.reason}"

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class TransportFailure:
    """A remote call failed at the network or HTTP layer.

    Attributes:
        reason: Short description of what went wrong.
        status_code: HTTP status, or None when no response was received.
        body: Raw error body returned by the service, if any.
    """

    reason: str
    status_code: int | None = None
    body: str = field(default="", repr=False)

    @property
    def message(self) -> str:
        if self.status_code is not None:
            msg = f"HTTP {self.status_code}: {self.reason}"
        else:
            msg = self.reason
        if self.body:
            msg += f" - {self.body}"
        return msg

    def __str__(self) -> str:
        return self.message


ToolFailure = Union[ToolNotFound, ValidationFailure, HandlerFailure]
