"""Feedback submission: validate, persist, complete the form, queue the webhook."""

import logging
import uuid
from datetime import datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from feedback_api.db.enums import FEEDBACK_RATING_LABELS, FormStatus
from feedback_api.db.models import EmailVariant, FeedbackResponse, Form
from feedback_api.schemas.feedback import FeedbackEntry
from feedback_api.services import webhook_service
from feedback_api.services.form_service import (
    FormNotFoundError,
    FormServiceError,
    PersistenceError,
)
from feedback_api.utils.normalization import normalize_feedback_text

logger = logging.getLogger(__name__)

NO_FEEDBACK_MESSAGE = "Geen feedback om te versturen"
SAVE_FAILED_MESSAGE = "Er ging iets mis bij het opslaan van je feedback"
UNKNOWN_CLIENT_NAME = "Unknown Client"


class NoFeedbackProvided(FormServiceError):
    """No entry carries any feedback text."""

    pass


class FormAlreadyCompletedError(FormServiceError):
    """Feedback was already submitted for this form."""

    pass


class FeedbackValidationError(FormServiceError):
    """Entries reference data that does not belong to the form."""

    def __init__(self, field_errors: dict[str, list[str]]):
        self.field_errors = field_errors
        super().__init__("Invalid feedback entries")


def compose_feedback_text(entry: FeedbackEntry) -> str:
    """
    Stored text for one entry.

    A rating is kept as a bracketed label in front of the free text:
    "[Positief] Mooie opening", or just "[Positief]" without text.
    """
    text = normalize_feedback_text(entry.feedback_text)
    if entry.rating is None:
        return text
    label = f"[{FEEDBACK_RATING_LABELS[entry.rating]}]"
    return f"{label} {text}" if text else label


def collect_valid_entries(entries: list[FeedbackEntry]) -> list[tuple[uuid.UUID, str]]:
    """(variant_id, text) pairs for entries that carry any feedback."""
    valid = []
    for entry in entries:
        text = compose_feedback_text(entry)
        if text:
            valid.append((entry.variant_id, text))
    return valid


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


def submit_feedback(
    db: Session,
    form_id: uuid.UUID,
    slug: str,
    entries: list[FeedbackEntry],
) -> list[FeedbackResponse]:
    """
    Store a recipient's feedback and complete the form.

    Runs as one transaction: the active → completed status flip, the feedback
    rows (sharing one submitted_at) and the webhook outbox job are committed
    together or not at all. The status flip is conditional on the form still
    being active, so only one submission per form can win.

    Raises:
        NoFeedbackProvided: no entry has text or a rating
        FormNotFoundError: unknown form, or slug does not match the form
        FeedbackValidationError: an entry points at a variant of another form
        FormAlreadyCompletedError: feedback was already submitted
        PersistenceError: storage failure (nothing is stored)
    """
    if not entries:
        raise NoFeedbackProvided(NO_FEEDBACK_MESSAGE)

    valid_entries = collect_valid_entries(entries)
    if not valid_entries:
        raise NoFeedbackProvided(NO_FEEDBACK_MESSAGE)

    try:
        form = db.scalars(select(Form).where(Form.id == form_id)).first()
        if not form or form.slug != slug:
            raise FormNotFoundError(f"Form {form_id} not found for slug {slug}")

        form_variant_ids = set(
            db.scalars(select(EmailVariant.id).where(EmailVariant.form_id == form.id)).all()
        )
        if any(variant_id not in form_variant_ids for variant_id, _ in valid_entries):
            raise FeedbackValidationError(
                {"entries": ["Feedback verwijst naar een onbekende variant"]}
            )

        client_name = form.client_name or UNKNOWN_CLIENT_NAME
        webhook_url = webhook_service.resolve_webhook_url(form)

        submitted_at = _now_utc()
        result = db.execute(
            update(Form)
            .where(Form.id == form.id, Form.status == FormStatus.ACTIVE.value)
            .values(status=FormStatus.COMPLETED.value, updated_at=submitted_at)
        )
        if result.rowcount != 1:
            raise FormAlreadyCompletedError(f"Form {form_id} is already completed")

        responses = [
            FeedbackResponse(
                form_id=form.id,
                variant_id=variant_id,
                feedback_text=text,
                submitted_at=submitted_at,
            )
            for variant_id, text in valid_entries
        ]
        db.add_all(responses)

        webhook_service.enqueue_completion_webhook(
            db, form_id=form.id, client_name=client_name, url=webhook_url
        )
        db.commit()
    except FormServiceError:
        db.rollback()
        raise
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Feedback submission failed for form_id=%s", form_id)
        raise PersistenceError(SAVE_FAILED_MESSAGE) from exc

    logger.info(
        "Form %s completed with %s feedback entries", form_id, len(responses)
    )
    return responses
