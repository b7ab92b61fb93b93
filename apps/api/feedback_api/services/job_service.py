"""Job service - business logic for background job scheduling and processing."""

from datetime import datetime, timedelta, timezone

from sqlalchemy.orm import Session

from feedback_api.db.enums import JobStatus, JobType
from feedback_api.db.models import Job
from feedback_api.db.models.jobs import DEFAULT_MAX_ATTEMPTS

RETRY_BASE_DELAY_SECONDS = 30
RETRY_MAX_DELAY_SECONDS = 30 * 60


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


def schedule_job(
    db: Session,
    job_type: JobType,
    payload: dict,
    run_at: datetime | None = None,
    idempotency_key: str | None = None,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    commit: bool = True,
) -> Job:
    """
    Schedule a new background job.

    If run_at is None, the job runs immediately.
    If idempotency_key is provided, duplicate jobs with same key will fail
    with IntegrityError (caller should catch and handle).
    With commit=False the job joins the caller's transaction (outbox write).
    """
    job = Job(
        job_type=job_type.value,
        payload=payload,
        run_at=run_at or _now_utc(),
        status=JobStatus.PENDING.value,
        attempts=0,
        max_attempts=max_attempts,
        idempotency_key=idempotency_key,
    )
    db.add(job)
    if commit:
        db.commit()
        db.refresh(job)
    else:
        db.flush()
    return job


def get_pending_jobs(db: Session, limit: int = 10) -> list[Job]:
    """
    Get pending jobs that are due to run.

    Returns jobs where status='pending' and run_at <= now, ordered by run_at.
    """
    now = _now_utc()
    return (
        db.query(Job)
        .filter(
            Job.status == JobStatus.PENDING.value,
            Job.run_at <= now,
        )
        .order_by(Job.run_at)
        .limit(limit)
        .all()
    )


def list_jobs(
    db: Session,
    status: JobStatus | None = None,
    job_type: JobType | None = None,
    limit: int = 50,
) -> list[Job]:
    """List jobs with optional filters, newest first."""
    query = db.query(Job)
    if status:
        query = query.filter(Job.status == status.value)
    if job_type:
        query = query.filter(Job.job_type == job_type.value)
    return query.order_by(Job.created_at.desc()).limit(limit).all()


def mark_job_running(db: Session, job: Job) -> Job:
    """Mark a job as running (increment attempts)."""
    job.status = JobStatus.RUNNING.value
    job.attempts += 1
    db.commit()
    db.refresh(job)
    return job


def mark_job_completed(db: Session, job: Job) -> Job:
    """Mark a job as completed."""
    job.status = JobStatus.COMPLETED.value
    job.completed_at = _now_utc()
    job.last_error = None
    db.commit()
    db.refresh(job)
    return job


def retry_delay(attempts: int) -> timedelta:
    """Exponential backoff: 30s, 60s, 120s, ... capped at 30 minutes."""
    seconds = RETRY_BASE_DELAY_SECONDS * (2 ** max(attempts - 1, 0))
    return timedelta(seconds=min(seconds, RETRY_MAX_DELAY_SECONDS))


def mark_job_failed(db: Session, job: Job, error: str) -> Job:
    """
    Mark a job as failed.

    If attempts < max_attempts, reset to pending and push run_at out by the
    backoff delay.
    """
    job.last_error = error
    if job.attempts < job.max_attempts:
        job.status = JobStatus.PENDING.value
        job.run_at = _now_utc() + retry_delay(job.attempts)
    else:
        job.status = JobStatus.FAILED.value
    db.commit()
    db.refresh(job)
    return job
