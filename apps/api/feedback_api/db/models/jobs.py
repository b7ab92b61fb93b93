"""SQLAlchemy ORM models."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, Index, Integer, String, Text, Uuid, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from feedback_api.db.base import Base
from feedback_api.db.enums import DEFAULT_JOB_STATUS

DEFAULT_MAX_ATTEMPTS = 5


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


class Job(Base):
    """
    Background job for async processing.

    Used as the outbox for webhook deliveries: the row is written in the same
    transaction as the change it announces, and the worker polls for pending
    jobs and processes them. Jobs are not owned by a form, so delivery history
    survives a form delete.
    """

    __tablename__ = "jobs"
    __table_args__ = (
        Index("idx_jobs_pending", "status", "run_at"),
        Index("uq_job_idempotency", "idempotency_key", unique=True),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    job_type: Mapped[str] = mapped_column(String(50), nullable=False)
    payload: Mapped[dict] = mapped_column(
        JSON().with_variant(JSONB(), "postgresql"), nullable=False, default=dict
    )
    run_at: Mapped[datetime] = mapped_column(
        default=_now_utc, server_default=func.now(), nullable=False
    )
    status: Mapped[str] = mapped_column(
        String(20),
        default=DEFAULT_JOB_STATUS.value,
        server_default=DEFAULT_JOB_STATUS.value,
        nullable=False,
    )
    attempts: Mapped[int] = mapped_column(
        Integer, default=0, server_default="0", nullable=False
    )
    max_attempts: Mapped[int] = mapped_column(
        Integer,
        default=DEFAULT_MAX_ATTEMPTS,
        server_default=str(DEFAULT_MAX_ATTEMPTS),
        nullable=False,
    )
    last_error: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        default=_now_utc, server_default=func.now(), nullable=False
    )
    completed_at: Mapped[datetime | None] = mapped_column(nullable=True)

    # Idempotency key for deduplication (unique when set)
    idempotency_key: Mapped[str | None] = mapped_column(String(255), nullable=True)
