"""OpenAI-compatible chat client used by the ``plan`` tool.

A separate service with its own credential
(``KUDAMONO_PLANNER_API_KEY``), asked to turn a task into a numbered
step-by-step plan.
"""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING, Any

import httpx

from kudamono.config import PLANNER_API_KEY_ENV, Settings
from kudamono.failures import TransportFailure
from kudamono.llm.transport import post_json
from kudamono.result import err, is_err, ok

if TYPE_CHECKING:
    from kudamono.result import Result

logger = logging.getLogger(__name__)

PLANNER_SYSTEM_PROMPT = (
    "You are a planning assistant. Break the user's task into a short, "
    "numbered list of concrete steps. Reply with the plan only."
)


class PlannerClient:
    """Sync httpx client for OpenAI-compatible chat completions."""

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        api_key_env: str = PLANNER_API_KEY_ENV,
        http_client: httpx.Client | None = None,
    ) -> None:
        self._settings = settings or Settings()
        self._api_key_env = api_key_env
        self._base_url = self._settings.planner_base_url.rstrip("/")
        self._client = http_client or httpx.Client(timeout=self._settings.timeout)

    def _headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {os.environ.get(self._api_key_env, '')}",
        }

    def plan(self, task: str) -> Result[str, TransportFailure]:
        """Ask the planning model for a step-by-step plan for ``task``."""
        payload: dict[str, Any] = {
            "model": self._settings.planner_model,
            "messages": [
                {"role": "system", "content": PLANNER_SYSTEM_PROMPT},
                {"role": "user", "content": task},
            ],
        }
        if self._settings.planner_max_tokens is not None:
            payload["max_tokens"] = self._settings.planner_max_tokens

        body = post_json(
            self._client,
            f"{self._base_url}/chat/completions",
            payload,
            headers=self._headers(),
            max_retries=self._settings.max_retries,
        )
        if is_err(body):
            return body
        return self.extract_content(body.value)

    @staticmethod
    def extract_content(response: dict) -> Result[str, TransportFailure]:
        """Extract the assistant's message content from a response dict."""
        try:
            return ok(response["choices"][0]["message"].get("content") or "")
        except (KeyError, IndexError, TypeError, AttributeError) as exc:
            return err(
                TransportFailure(
                    reason=f"Cannot extract content from response: {exc}",
                    body=str(response),
                )
            )

    def close(self) -> None:
        """Close the underlying httpx client."""
        self._client.close()

    def __enter__(self) -> PlannerClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()
