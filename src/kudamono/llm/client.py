"""Built-in Anthropic Messages API client over httpx.

Sends the conversation, system prompt and tool manifest in one blocking
round-trip and parses the reply into a ModelResponse. The API key is read
from the environment at call time; a missing key produces an
unauthenticated request that the service rejects.
"""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING

import httpx

from kudamono.config import ANTHROPIC_API_KEY_ENV, Settings
from kudamono.llm.models import parse_response
from kudamono.llm.transport import post_json
from kudamono.result import is_err

if TYPE_CHECKING:
    from kudamono.conversation import Conversation
    from kudamono.failures import TransportFailure
    from kudamono.llm.models import ModelResponse
    from kudamono.result import Result

logger = logging.getLogger(__name__)


class AnthropicClient:
    """Sync httpx client for the Anthropic Messages API.

    Implements the ModelClient protocol. Automatic retry is off unless
    ``settings.max_retries`` is raised above 1.

    Usage::

        with AnthropicClient(Settings.from_env()) as client:
            result = client.complete(conversation, registry.manifest(), prompt)
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        api_key_env: str = ANTHROPIC_API_KEY_ENV,
        http_client: httpx.Client | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            settings: Runtime settings; defaults to ``Settings()``.
            api_key_env: Environment variable holding the API key.
            http_client: Pre-built httpx client (tests pass a mock transport).
        """
        self._settings = settings or Settings()
        self._api_key_env = api_key_env
        self._client = http_client or httpx.Client(timeout=self._settings.timeout)

    @property
    def settings(self) -> Settings:
        return self._settings

    def build_request(
        self,
        conversation: Conversation,
        tool_manifest: list[dict],
        system_prompt: str,
    ) -> dict:
        """Build the request body for one Messages API call."""
        return {
            "model": self._settings.model,
            "max_tokens": self._settings.max_tokens,
            "messages": conversation.to_messages(),
            "system": system_prompt,
            "tools": tool_manifest,
        }

    def _headers(self) -> dict[str, str]:
        return {
            "x-api-key": os.environ.get(self._api_key_env, ""),
            "anthropic-version": self._settings.anthropic_version,
            "content-type": "application/json",
        }

    def complete(
        self,
        conversation: Conversation,
        tool_manifest: list[dict],
        system_prompt: str,
    ) -> Result[ModelResponse, TransportFailure]:
        """Send one completion request.

        Returns:
            ``Ok(ModelResponse)`` or ``Err(TransportFailure)`` carrying the
            raw error body on a non-success response.
        """
        payload = self.build_request(conversation, tool_manifest, system_prompt)
        logger.debug(
            "Calling %s with %d messages and %d tools",
            self._settings.model,
            len(payload["messages"]),
            len(tool_manifest),
        )
        body = post_json(
            self._client,
            self._settings.api_url,
            payload,
            headers=self._headers(),
            max_retries=self._settings.max_retries,
        )
        if is_err(body):
            return body
        return parse_response(body.value)

    def close(self) -> None:
        """Close the underlying httpx client."""
        self._client.close()

    def __enter__(self) -> AnthropicClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()
