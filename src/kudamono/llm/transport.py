"""Shared httpx POST helper with operator-configurable tenacity retry.

Converts every HTTP-level problem into a ``TransportFailure`` result so
callers never see httpx exceptions.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
import tenacity

from kudamono.failures import TransportFailure
from kudamono.result import err, ok

logger = logging.getLogger(__name__)

_RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}


class _RetryableResponse(Exception):
    """Raised internally so tenacity can retry on a retryable status."""

    def __init__(self, response: httpx.Response) -> None:
        self.response = response
        super().__init__(f"HTTP {response.status_code}")


def _is_retryable(exc: BaseException) -> bool:
    """Check if an exception is retryable.

    Retryable: 429, 500, 502, 503, 504, connection errors.
    Not retryable: 401, 403, 400, other client errors.
    """
    if isinstance(exc, _RetryableResponse):
        return True
    return isinstance(exc, (httpx.ConnectError, httpx.ConnectTimeout))


def post_json(
    client: httpx.Client,
    url: str,
    payload: dict[str, Any],
    *,
    headers: dict[str, str] | None = None,
    max_retries: int = 1,
):
    """POST ``payload`` as JSON and return the decoded response body.

    Args:
        client: Open httpx client.
        url: Endpoint URL.
        payload: JSON-serializable request body.
        headers: Per-request headers (credentials are passed here).
        max_retries: Total attempts; 1 disables retry.

    Returns:
        ``Ok(dict)`` with the JSON body, or ``Err(TransportFailure)``.
    """

    def _send() -> httpx.Response:
        response = client.post(url, json=payload, headers=headers)
        if response.status_code in _RETRYABLE_STATUS_CODES:
            raise _RetryableResponse(response)
        return response

    retryer = tenacity.Retrying(
        retry=tenacity.retry_if_exception(_is_retryable),
        wait=(
            tenacity.wait_exponential(multiplier=1, min=1, max=30)
            + tenacity.wait_random(0, 2)
        ),
        stop=tenacity.stop_after_attempt(max_retries),
        before_sleep=tenacity.before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )

    try:
        response = retryer(_send)
    except _RetryableResponse as exc:
        response = exc.response
    except httpx.HTTPError as exc:
        logger.warning("Request to %s failed: %s", url, exc)
        return err(TransportFailure(reason=f"{type(exc).__name__}: {exc}"))

    if not response.is_success:
        logger.warning("Request to %s returned HTTP %d", url, response.status_code)
        return err(
            TransportFailure(
                reason=response.reason_phrase or "request failed",
                status_code=response.status_code,
                body=response.text,
            )
        )

    try:
        data = response.json()
    except ValueError:
        return err(
            TransportFailure(
                reason="Response body is not valid JSON",
                status_code=response.status_code,
                body=response.text,
            )
        )
    if not isinstance(data, dict):
        return err(
            TransportFailure(
                reason="Response body is not a JSON object",
                status_code=response.status_code,
                body=response.text,
            )
        )
    return ok(data)
