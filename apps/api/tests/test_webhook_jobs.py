"""Tests for webhook delivery through the jobs outbox and worker."""

import json

import httpx
import pytest

from feedback_api.db.enums import JobStatus, JobType
from feedback_api.jobs.registry import resolve_job_handler
from feedback_api.schemas.feedback import FeedbackEntry
from feedback_api.services import feedback_service, http_service, job_service
from feedback_api.worker import run_pending_jobs


def _complete_form(db, form) -> None:
    feedback_service.submit_feedback(
        db,
        form.id,
        form.slug,
        [FeedbackEntry(variant_id=form.email_variants[0].id, feedback_text="Prima")],
    )


class RecordingTransport(httpx.MockTransport):
    """MockTransport that answers with a fixed sequence of status codes."""

    def __init__(self, *statuses: int):
        self.requests: list[httpx.Request] = []
        self._statuses = list(statuses)
        super().__init__(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        status = self._statuses.pop(0) if len(self._statuses) > 1 else self._statuses[0]
        return httpx.Response(status, json={"ok": status < 400})


@pytest.mark.asyncio
async def test_worker_delivers_completion_webhook(db, make_form):
    form = make_form()
    _complete_form(db, form)
    transport = RecordingTransport(200)

    processed = await run_pending_jobs(db, transport=transport)

    assert processed == 1
    assert len(transport.requests) == 1
    request = transport.requests[0]
    assert str(request.url) == "https://hooks.example.com/feedback"
    assert request.headers["content-type"] == "application/json"
    assert json.loads(request.content) == {"client_name": "Acme Corp"}

    job = job_service.list_jobs(db)[0]
    assert job.status == JobStatus.COMPLETED.value
    assert job.attempts == 1
    assert job.completed_at is not None


@pytest.mark.asyncio
async def test_rejected_webhook_is_rescheduled(db, make_form):
    form = make_form()
    _complete_form(db, form)
    transport = RecordingTransport(400)

    await run_pending_jobs(db, transport=transport)

    job = job_service.list_jobs(db)[0]
    assert job.status == JobStatus.PENDING.value
    assert job.attempts == 1
    assert "WebhookDeliveryError" in job.last_error
    # Backoff pushes the next attempt into the future
    assert job_service.get_pending_jobs(db) == []


@pytest.mark.asyncio
async def test_webhook_failure_does_not_reopen_form(db, make_form):
    form = make_form()
    _complete_form(db, form)

    await run_pending_jobs(db, transport=RecordingTransport(400))

    db.refresh(form)
    assert form.status == "completed"


@pytest.mark.asyncio
async def test_job_fails_after_max_attempts(db):
    job_service.schedule_job(
        db,
        JobType.FEEDBACK_WEBHOOK,
        payload={
            "url": "https://hooks.example.com/feedback",
            "data": {"client_name": "Acme Corp"},
        },
        max_attempts=1,
    )

    await run_pending_jobs(db, transport=RecordingTransport(400))

    job = job_service.list_jobs(db)[0]
    assert job.status == JobStatus.FAILED.value
    assert job.attempts == 1


@pytest.mark.asyncio
async def test_transient_server_error_is_retried(db, make_form, monkeypatch):
    monkeypatch.setattr(http_service, "backoff_delay", lambda *args: 0)
    form = make_form()
    _complete_form(db, form)
    transport = RecordingTransport(503, 200)

    await run_pending_jobs(db, transport=transport)

    assert len(transport.requests) == 2
    assert job_service.list_jobs(db)[0].status == JobStatus.COMPLETED.value


@pytest.mark.asyncio
async def test_malformed_payload_is_dropped(db):
    job_service.schedule_job(db, JobType.FEEDBACK_WEBHOOK, payload={})
    transport = RecordingTransport(200)

    await run_pending_jobs(db, transport=transport)

    assert transport.requests == []
    assert job_service.list_jobs(db)[0].status == JobStatus.COMPLETED.value


def test_unknown_job_type_is_rejected():
    with pytest.raises(ValueError):
        resolve_job_handler("unknown")


@pytest.mark.parametrize(
    "attempts,seconds",
    [(1, 30), (2, 60), (3, 120), (10, 1800)],
)
def test_retry_delay_backoff(attempts, seconds):
    assert job_service.retry_delay(attempts).total_seconds() == seconds


def test_safe_url_strips_query():
    assert (
        http_service.safe_url("https://hook.example.com/abc?token=secret#x")
        == "https://hook.example.com/abc"
    )
