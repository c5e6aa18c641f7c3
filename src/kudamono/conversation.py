"""Conversation log: turns exchanged between user, assistant, and tools.

Frozen dataclasses for content blocks and turns, plus the append-only
``Conversation`` that is threaded through every model call.
"""

from __future__ import annotations

import logging
import types
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Literal, Mapping, Union

if TYPE_CHECKING:
    from collections.abc import Iterator

logger = logging.getLogger(__name__)

Role = Literal["user", "assistant"]


def _freeze(value: Any) -> Any:
    """Return a read-only copy of a JSON-like value."""
    if isinstance(value, Mapping):
        return types.MappingProxyType({k: _freeze(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(v) for v in value)
    return value


def _thaw(value: Any) -> Any:
    """Return a fresh mutable copy of a value built by ``_freeze``."""
    if isinstance(value, Mapping):
        return {k: _thaw(v) for k, v in value.items()}
    if isinstance(value, tuple):
        return [_thaw(v) for v in value]
    return value


@dataclass(frozen=True)
class TextBlock:
    """Plain text emitted by the model."""

    text: str

    def to_dict(self) -> dict:
        return {"type": "text", "text": self.text}


@dataclass(frozen=True)
class ToolInvocationRequest:
    """A tool_use block produced by the model.

    Attributes:
        invocation_id: Model-assigned id, echoed back by the matching result.
        tool_name: Name of the tool the model wants to run.
        raw_arguments: Arguments exactly as the model sent them, stored as
            a read-only mapping. Use ``arguments()`` for a mutable copy.
    """

    invocation_id: str
    tool_name: str
    raw_arguments: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "raw_arguments", _freeze(self.raw_arguments))

    def arguments(self) -> dict:
        """Return a fresh, mutable copy of the arguments."""
        return _thaw(self.raw_arguments)

    @classmethod
    def from_anthropic(cls, block: dict) -> ToolInvocationRequest:
        """Parse from an Anthropic ``tool_use`` content block."""
        raw = block.get("input")
        return cls(
            invocation_id=block["id"],
            tool_name=block["name"],
            raw_arguments=raw if isinstance(raw, dict) else {"_raw": raw},
        )

    def to_dict(self) -> dict:
        return {
            "type": "tool_use",
            "id": self.invocation_id,
            "name": self.tool_name,
            "input": self.arguments(),
        }


@dataclass(frozen=True)
class ToolInvocationResult:
    """Outcome of a tool invocation, folded back into the conversation."""

    invocation_id: str
    payload: str
    is_error: bool = False

    def to_dict(self) -> dict:
        return {
            "type": "tool_result",
            "tool_use_id": self.invocation_id,
            "content": self.payload,
            "is_error": self.is_error,
        }


ContentBlock = Union[TextBlock, ToolInvocationRequest]
ToolRecord = Union[ToolInvocationRequest, ToolInvocationResult]


@dataclass(frozen=True)
class ConversationTurn:
    """One role-attributed entry in the conversation log.

    ``content`` is either plain text or a tuple of tool records. Tool
    results are user-role turns by protocol convention.
    """

    role: Role
    content: str | tuple[ToolRecord, ...]

    def __post_init__(self) -> None:
        if isinstance(self.content, list):
            object.__setattr__(self, "content", tuple(self.content))

    @classmethod
    def user_text(cls, text: str) -> ConversationTurn:
        return cls(role="user", content=text)

    @classmethod
    def assistant_text(cls, text: str) -> ConversationTurn:
        return cls(role="assistant", content=text)

    @classmethod
    def tool_request(cls, request: ToolInvocationRequest) -> ConversationTurn:
        return cls(role="assistant", content=(request,))

    @classmethod
    def tool_result(cls, result: ToolInvocationResult) -> ConversationTurn:
        return cls(role="user", content=(result,))

    @property
    def tool_records(self) -> tuple[ToolRecord, ...]:
        if isinstance(self.content, str):
            return ()
        return self.content

    def to_dict(self) -> dict:
        """Render in Anthropic Messages API format."""
        if isinstance(self.content, str):
            return {"role": self.role, "content": self.content}
        return {
            "role": self.role,
            "content": [record.to_dict() for record in self.content],
        }


class Conversation:
    """Ordered, append-only log of conversation turns.

    Role alternation is not enforced here; the turn processor is
    responsible for producing sequences the model accepts.

    Usage::

        conversation = Conversation()
        conversation.append_user_text("What is 2 + 3?")
        messages = conversation.to_messages()
    """

    def __init__(self, turns: list[ConversationTurn] | None = None) -> None:
        self._turns: list[ConversationTurn] = list(turns or [])

    def append(self, turn: ConversationTurn) -> None:
        """Add a turn to the end of the log."""
        self._turns.append(turn)
        logger.debug("Appended %s turn (%d total)", turn.role, len(self._turns))

    def append_user_text(self, text: str) -> None:
        self.append(ConversationTurn.user_text(text))

    def snapshot(self) -> tuple[ConversationTurn, ...]:
        """Return the turns as an immutable sequence."""
        return tuple(self._turns)

    def to_messages(self) -> list[dict]:
        """Return a fresh list of wire-format messages for a model call."""
        return [turn.to_dict() for turn in self._turns]

    @property
    def last(self) -> ConversationTurn | None:
        return self._turns[-1] if self._turns else None

    def __len__(self) -> int:
        return len(self._turns)

    def __iter__(self) -> Iterator[ConversationTurn]:
        return iter(tuple(self._turns))

    def __repr__(self) -> str:
        return f"Conversation(turns={len(self._turns)})"
