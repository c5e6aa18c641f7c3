"""ToolRegistry: the set of tools offered to the model.

An explicitly constructed, owned instance (no module-level registry), so
several agents or tests can hold independent tool sets.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel

from kudamono.exceptions import ToolDefinitionError
from kudamono.failures import ToolNotFound
from kudamono.result import err, ok
from kudamono.toolkit.models import ToolDefinition

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from kudamono.failures import HandlerFailure
    from kudamono.result import Result

logger = logging.getLogger(__name__)


class ToolRegistry:
    """Mapping from tool name to ``ToolDefinition``.

    Names are identity: registering a name again replaces the earlier
    definition.

    Usage::

        registry = ToolRegistry()

        class AddArgs(BaseModel):
            a: float
            b: float

        @registry.tool("add_numbers", description="Add two numbers", schema=AddArgs)
        def add(args: AddArgs):
            return ok(str(args.a + args.b))

        registry.manifest()
    """

    def __init__(self) -> None:
        self._tools: dict[str, ToolDefinition] = {}
        self._closers: list[Callable[[], None]] = []

    def register(
        self,
        name: str,
        *,
        schema: type[BaseModel],
        handler: Callable[[Any], Result[str, HandlerFailure]],
        description: str | None = None,
    ) -> ToolDefinition:
        """Store a tool definition under ``name``; the last write wins.

        Raises:
            ToolDefinitionError: If the name is empty, the schema is not a
                pydantic model, or the handler is not callable.
        """
        if not name:
            raise ToolDefinitionError(name, "name must be a non-empty string")
        if not (isinstance(schema, type) and issubclass(schema, BaseModel)):
            raise ToolDefinitionError(name, "schema must be a pydantic BaseModel subclass")
        if not callable(handler):
            raise ToolDefinitionError(name, "handler must be callable")

        if name in self._tools:
            logger.debug("Replacing tool definition: %s", name)
        tool = ToolDefinition(
            name=name, description=description, schema=schema, handler=handler
        )
        self._tools[name] = tool
        return tool

    def tool(
        self,
        name: str,
        *,
        schema: type[BaseModel],
        description: str | None = None,
    ) -> Callable[[Callable], Callable]:
        """Decorator form of ``register()``. Returns the handler unchanged."""

        def decorator(handler: Callable) -> Callable:
            self.register(name, schema=schema, handler=handler, description=description)
            return handler

        return decorator

    def lookup(self, name: str) -> Result[ToolDefinition, ToolNotFound]:
        tool = self._tools.get(name)
        if tool is None:
            return err(ToolNotFound(tool_name=name))
        return ok(tool)

    def manifest(self) -> list[dict]:
        """Describe every registered tool for the model (handlers excluded)."""
        return [tool.to_anthropic() for tool in self._tools.values()]

    def prompt_fragment(self) -> str:
        """Render one ``- name: description`` line per tool."""
        lines = []
        for tool in self._tools.values():
            if tool.description:
                lines.append(f"- {tool.name}: {tool.description}")
            else:
                lines.append(f"- {tool.name}")
        return "\n".join(lines)

    def on_close(self, closer: Callable[[], None]) -> None:
        """Register a cleanup callable for a resource the tools depend on."""
        self._closers.append(closer)

    def close(self) -> None:
        """Release tool resources, most recently registered first.

        Idempotent; every closer runs even if an earlier one raises, and
        the first error is re-raised afterwards.
        """
        closers, self._closers = self._closers, []
        first_error: Exception | None = None
        for closer in reversed(closers):
            try:
                closer()
            except Exception as exc:
                logger.warning("Error releasing tool resource", exc_info=True)
                if first_error is None:
                    first_error = exc
        if first_error is not None:
            raise first_error

    def __enter__(self) -> ToolRegistry:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def names(self) -> list[str]:
        return list(self._tools.keys())

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def __iter__(self) -> Iterator[ToolDefinition]:
        return iter(list(self._tools.values()))
