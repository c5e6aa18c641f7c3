"""Toolkit data models: tool definitions and their invocation contract.

A ``ToolDefinition`` pairs a pydantic input model with a handler.
``invoke()`` validates untyped model arguments and never raises for bad
input; failures come back as ``Err`` values.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ValidationError

from kudamono.failures import HandlerFailure, ValidationFailure
from kudamono.result import Err, Ok, err

if TYPE_CHECKING:
    from collections.abc import Callable

    from kudamono.result import Result

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolDefinition:
    """A single tool the model may invoke.

    Attributes:
        name: Tool name (e.g. "fetch_file").
        description: Human-readable description of when/why to use this tool.
        schema: Pydantic model class describing the tool's input.
        handler: Callable taking a validated ``schema`` instance and
            returning ``Result[str, HandlerFailure]``.
    """

    name: str
    description: str | None
    schema: type[BaseModel]
    handler: Callable[[Any], Result[str, HandlerFailure]]

    @property
    def input_schema(self) -> dict:
        """JSON Schema for the tool's input."""
        return self.schema.model_json_schema()

    def to_anthropic(self) -> dict:
        """Convert to Anthropic tool-use format.

        Returns:
            Dict with "name", "description", and "input_schema".
        """
        entry: dict[str, Any] = {"name": self.name}
        if self.description is not None:
            entry["description"] = self.description
        entry["input_schema"] = self.input_schema
        return entry

    def invoke(
        self, raw_arguments: Any
    ) -> Result[str, ValidationFailure | HandlerFailure]:
        """Validate ``raw_arguments`` and run the handler.

        The handler is only called when validation succeeds. Handlers are
        expected to return ``Err`` for their own I/O problems; an exception
        that escapes anyway is logged and reported as a ``HandlerFailure``.
        """
        try:
            arguments = self.schema.model_validate(raw_arguments)
        except ValidationError as exc:
            logger.info("Rejected arguments for tool %s", self.name)
            return err(
                ValidationFailure(
                    tool_name=self.name,
                    arguments=raw_arguments,
                    detail=str(exc),
                )
            )

        try:
            result = self.handler(arguments)
        except Exception as exc:
            logger.error(
                "Tool %s raised instead of returning a failure",
                self.name,
                exc_info=True,
            )
            return err(HandlerFailure.from_exception(self.name, exc))

        if not isinstance(result, (Ok, Err)):
            # Plain return values are accepted as successful text.
            return Ok(str(result))
        return result
