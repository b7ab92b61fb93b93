"""SQLAlchemy ORM models."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from feedback_api.db.base import Base
from feedback_api.db.enums import DEFAULT_FORM_STATUS


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


class Form(Base):
    """A client feedback request holding grouped email variants."""

    __tablename__ = "forms"
    __table_args__ = (
        UniqueConstraint("slug", name="uq_forms_slug"),
        Index("idx_forms_created_at", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    client_name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(300), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20),
        default=DEFAULT_FORM_STATUS.value,
        server_default=DEFAULT_FORM_STATUS.value,
        nullable=False,
    )
    webhook_url: Mapped[str | None] = mapped_column(String(2000), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        default=_now_utc, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        default=_now_utc,
        server_default=func.now(),
        onupdate=_now_utc,
        nullable=False,
    )

    email_variants: Mapped[list["EmailVariant"]] = relationship(
        back_populates="form",
        order_by="EmailVariant.sort_order",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class EmailVariant(Base):
    """One candidate email (subject + body) within a stage group."""

    __tablename__ = "email_variants"
    __table_args__ = (
        Index("idx_email_variants_form_sort", "form_id", "sort_order"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    form_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("forms.id", ondelete="CASCADE"),
        nullable=False,
    )
    email_type: Mapped[str] = mapped_column(String(20), nullable=False)
    variant_number: Mapped[int] = mapped_column(Integer, nullable=False)
    subject_line: Mapped[str] = mapped_column(Text, nullable=False)
    email_body: Mapped[str] = mapped_column(Text, nullable=False)
    sort_order: Mapped[int] = mapped_column(
        Integer, default=0, server_default="0", nullable=False
    )

    created_at: Mapped[datetime] = mapped_column(
        default=_now_utc, server_default=func.now(), nullable=False
    )

    form: Mapped["Form"] = relationship(back_populates="email_variants")
    feedback_responses: Mapped[list["FeedbackResponse"]] = relationship(
        back_populates="variant",
        order_by="FeedbackResponse.submitted_at",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class FeedbackResponse(Base):
    """One recipient comment tied to one email variant."""

    __tablename__ = "feedback_responses"
    __table_args__ = (
        Index("idx_feedback_responses_form", "form_id"),
        Index("idx_feedback_responses_variant", "variant_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    form_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("forms.id", ondelete="CASCADE"),
        nullable=False,
    )
    variant_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("email_variants.id", ondelete="CASCADE"),
        nullable=False,
    )
    feedback_text: Mapped[str] = mapped_column(Text, nullable=False)
    submitted_at: Mapped[datetime] = mapped_column(
        default=_now_utc, server_default=func.now(), nullable=False
    )

    variant: Mapped["EmailVariant"] = relationship(back_populates="feedback_responses")
