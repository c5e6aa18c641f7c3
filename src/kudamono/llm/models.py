"""Model response types for the Anthropic Messages API.

Provides StopReason and ModelResponse, plus ``parse_response()`` which
turns a decoded response body into a ModelResponse while preserving the
order of content blocks.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field

from kudamono.conversation import ContentBlock, TextBlock, ToolInvocationRequest
from kudamono.failures import TransportFailure
from kudamono.result import err, ok

logger = logging.getLogger(__name__)


class StopReason(str, enum.Enum):
    """Why the model ended its turn."""

    END_TURN = "end_turn"
    MAX_TOKENS = "max_tokens"
    STOP_SEQUENCE = "stop_sequence"
    TOOL_USE = "tool_use"
    PAUSE_TURN = "pause_turn"
    REFUSAL = "refusal"

    @classmethod
    def parse(cls, raw: object) -> StopReason | None:
        if raw is None:
            return None
        try:
            return cls(raw)
        except ValueError:
            logger.debug("Unrecognized stop_reason: %r", raw)
            return None


@dataclass(frozen=True)
class ModelResponse:
    """A parsed model turn.

    Attributes:
        content_blocks: Text and tool-use blocks in response order.
        stop_reason: Parsed stop reason, None if absent or unknown.
        id: Message id assigned by the service.
        model: Model that produced the response.
        usage: Token usage dict, if reported.
    """

    content_blocks: tuple[ContentBlock, ...] = ()
    stop_reason: StopReason | None = None
    id: str = ""
    model: str = ""
    usage: dict = field(default_factory=dict)

    @property
    def tool_requests(self) -> list[ToolInvocationRequest]:
        return [b for b in self.content_blocks if isinstance(b, ToolInvocationRequest)]

    @property
    def text(self) -> str:
        return "".join(b.text for b in self.content_blocks if isinstance(b, TextBlock))

    @property
    def wants_tools(self) -> bool:
        """True when the model asked for at least one tool invocation."""
        return bool(self.tool_requests)


def parse_response(body: dict):
    """Parse a Messages API response body.

    Unknown block types (e.g. ``thinking``) are skipped.

    Returns:
        ``Ok(ModelResponse)``, or ``Err(TransportFailure)`` when the body
        lacks a ``content`` list or holds a malformed tool_use block.
    """
    raw_blocks = body.get("content")
    if not isinstance(raw_blocks, list):
        return err(
            TransportFailure(
                reason="Unexpected response format: missing 'content' list",
                body=str(body),
            )
        )

    blocks: list[ContentBlock] = []
    for raw in raw_blocks:
        if not isinstance(raw, dict):
            continue
        block_type = raw.get("type")
        if block_type == "text":
            blocks.append(TextBlock(text=raw.get("text", "")))
        elif block_type == "tool_use":
            try:
                blocks.append(ToolInvocationRequest.from_anthropic(raw))
            except KeyError as exc:
                return err(
                    TransportFailure(
                        reason=f"Malformed tool_use block: missing {exc}",
                        body=str(raw),
                    )
                )
        else:
            logger.debug("Skipping content block of type %r", block_type)

    return ok(
        ModelResponse(
            content_blocks=tuple(blocks),
            stop_reason=StopReason.parse(body.get("stop_reason")),
            id=body.get("id", ""),
            model=body.get("model", ""),
            usage=body.get("usage") or {},
        )
    )
