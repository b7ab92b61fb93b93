"""Outbound HTTP delivery with retry/backoff."""

from __future__ import annotations

import asyncio
import logging
import random
from urllib.parse import urlsplit

import httpx

logger = logging.getLogger(__name__)

RETRYABLE_STATUSES = frozenset({429, 500, 502, 503, 504})


def safe_url(url: str | None) -> str:
    """Strip query string and fragment (tokens often live there) for logging."""
    if not url:
        return ""
    parts = urlsplit(url)
    return f"{parts.scheme}://{parts.netloc}{parts.path}"


def backoff_delay(attempt: int, base_delay: float, max_delay: float) -> float:
    delay = min(max_delay, base_delay * (2**attempt))
    if delay:
        delay += random.uniform(0, delay / 2)
    return delay


async def post_json_with_retries(
    client: httpx.AsyncClient,
    url: str,
    payload: dict,
    *,
    headers: dict[str, str] | None = None,
    max_attempts: int = 3,
    base_delay: float = 0.5,
    max_delay: float = 4.0,
) -> httpx.Response:
    """
    POST a JSON body, retrying transport errors and 429/5xx responses.

    The last response is returned as-is (the caller decides whether its status
    is a failure); the last transport error is re-raised.
    """
    for attempt in range(max_attempts):
        is_last = attempt == max_attempts - 1
        try:
            response = await client.post(url, json=payload, headers=headers)
        except httpx.RequestError as exc:
            if is_last:
                raise
            logger.warning(
                "POST %s failed (%s), retrying", safe_url(url), type(exc).__name__
            )
        else:
            if is_last or response.status_code not in RETRYABLE_STATUSES:
                return response
            logger.warning(
                "POST %s returned %s, retrying", safe_url(url), response.status_code
            )

        delay = backoff_delay(attempt, base_delay, max_delay)
        if delay:
            await asyncio.sleep(delay)

    raise RuntimeError("max_attempts must be at least 1")
