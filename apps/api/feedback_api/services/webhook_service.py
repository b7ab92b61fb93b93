"""Completion webhook: outbox enqueue and delivery."""

from __future__ import annotations

import logging
import uuid

import httpx
from sqlalchemy.orm import Session

from feedback_api.core.config import settings
from feedback_api.db.enums import JobType
from feedback_api.db.models import Form, Job
from feedback_api.services import job_service
from feedback_api.services.http_service import post_json_with_retries, safe_url

logger = logging.getLogger(__name__)

JSON_HEADERS = {"Content-Type": "application/json"}


class WebhookDeliveryError(Exception):
    """The endpoint did not accept the webhook."""

    pass


def resolve_webhook_url(form: Form) -> str:
    """A form's own webhook_url wins over the global FEEDBACK_WEBHOOK_URL."""
    return (form.webhook_url or "").strip() or settings.FEEDBACK_WEBHOOK_URL


def build_completion_payload(client_name: str) -> dict:
    return {"client_name": client_name}


def enqueue_completion_webhook(
    db: Session,
    *,
    form_id: uuid.UUID,
    client_name: str,
    url: str,
) -> Job:
    """
    Write the outbox job for a completed form into the caller's transaction.

    Nothing is sent here; the worker picks the job up after commit.
    """
    return job_service.schedule_job(
        db,
        JobType.FEEDBACK_WEBHOOK,
        payload={
            "form_id": str(form_id),
            "url": url,
            "data": build_completion_payload(client_name),
            "headers": JSON_HEADERS,
        },
        idempotency_key=f"{JobType.FEEDBACK_WEBHOOK.value}:{form_id}",
        max_attempts=settings.WEBHOOK_MAX_ATTEMPTS,
        commit=False,
    )


async def deliver_webhook(
    url: str,
    data: dict,
    headers: dict[str, str] | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.Response:
    """POST the webhook body. Raises WebhookDeliveryError on a non-2xx answer."""
    async with httpx.AsyncClient(
        timeout=settings.WEBHOOK_TIMEOUT_SECONDS, transport=transport
    ) as client:
        response = await post_json_with_retries(
            client, url, data, headers=headers or JSON_HEADERS
        )

    if not response.is_success:
        raise WebhookDeliveryError(
            f"Webhook {safe_url(url)} answered {response.status_code}"
        )
    logger.info("Webhook delivered: %s", safe_url(url))
    return response
