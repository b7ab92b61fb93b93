"""Job handler registry."""

from __future__ import annotations

from typing import Awaitable, Callable, Mapping

from feedback_api.db.enums import JobType
from feedback_api.jobs.handlers import webhooks

JobHandler = Callable[..., Awaitable[None]]

JOB_HANDLERS: Mapping[str, JobHandler] = {
    JobType.FEEDBACK_WEBHOOK.value: webhooks.process_feedback_webhook,
}


def resolve_job_handler(job_type: str) -> JobHandler:
    handler = JOB_HANDLERS.get(job_type)
    if not handler:
        raise ValueError(f"Unknown job type: {job_type}")
    return handler
