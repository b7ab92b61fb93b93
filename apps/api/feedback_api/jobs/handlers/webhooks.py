"""Webhook job handlers."""

from __future__ import annotations

import logging

import httpx

from feedback_api.services import webhook_service
from feedback_api.services.http_service import safe_url

logger = logging.getLogger(__name__)


async def process_feedback_webhook(
    db, job, *, transport: httpx.AsyncBaseTransport | None = None
) -> None:
    """Notify the downstream automation that a form received its feedback."""
    logger.info("Processing feedback webhook job %s", job.id)
    payload = job.payload or {}

    webhook_url = payload.get("url")
    webhook_data = payload.get("data")
    webhook_headers = payload.get("headers", {})

    if not webhook_url or not webhook_data:
        # Retrying cannot fix a malformed payload
        logger.warning("Invalid feedback webhook payload: missing url or data")
        return

    try:
        await webhook_service.deliver_webhook(
            webhook_url, webhook_data, webhook_headers, transport=transport
        )
    except Exception as e:
        logger.error(
            "Feedback webhook failed: %s (%s)",
            safe_url(webhook_url),
            type(e).__name__,
        )
        raise
