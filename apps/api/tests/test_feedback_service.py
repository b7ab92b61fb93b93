"""Tests for the feedback submission workflow."""

import uuid

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from feedback_api.db.enums import FeedbackRating, JobStatus, JobType
from feedback_api.db.models import FeedbackResponse, Form, Job
from feedback_api.schemas.feedback import FeedbackEntry
from feedback_api.services import feedback_service, webhook_service
from feedback_api.services.feedback_service import (
    FeedbackValidationError,
    FormAlreadyCompletedError,
    NoFeedbackProvided,
)
from feedback_api.services.form_service import FormNotFoundError, PersistenceError


def _count(db, model) -> int:
    return db.scalar(select(func.count()).select_from(model))


def _status(db, form_id) -> str:
    return db.scalar(select(Form.status).where(Form.id == form_id))


def _entry(variant, text="", rating=None) -> FeedbackEntry:
    return FeedbackEntry(variant_id=variant.id, feedback_text=text, rating=rating)


# =============================================================================
# Text composition
# =============================================================================


def test_compose_text_only():
    entry = FeedbackEntry(variant_id=uuid.uuid4(), feedback_text="  Mooie opening \n")
    assert feedback_service.compose_feedback_text(entry) == "Mooie opening"


def test_compose_rating_and_text():
    entry = FeedbackEntry(
        variant_id=uuid.uuid4(), feedback_text="Te lang", rating=FeedbackRating.NEGATIEF
    )
    assert feedback_service.compose_feedback_text(entry) == "[Negatief] Te lang"


def test_compose_rating_only():
    entry = FeedbackEntry(variant_id=uuid.uuid4(), rating=FeedbackRating.POSITIEF)
    assert feedback_service.compose_feedback_text(entry) == "[Positief]"


def test_collect_skips_blank_entries():
    kept = uuid.uuid4()
    entries = [
        FeedbackEntry(variant_id=uuid.uuid4(), feedback_text="   "),
        FeedbackEntry(variant_id=uuid.uuid4(), feedback_text=None),
        FeedbackEntry(variant_id=kept, feedback_text="Goed"),
    ]
    assert feedback_service.collect_valid_entries(entries) == [(kept, "Goed")]


# =============================================================================
# Submission
# =============================================================================


def test_empty_entries_rejected(db, make_form):
    form = make_form()

    with pytest.raises(NoFeedbackProvided) as exc_info:
        feedback_service.submit_feedback(db, form.id, form.slug, [])

    assert str(exc_info.value) == "Geen feedback om te versturen"
    assert _status(db, form.id) == "active"


def test_all_blank_entries_rejected(db, make_form):
    form = make_form(eerste=2)
    entries = [_entry(v, "  ") for v in form.email_variants]

    with pytest.raises(NoFeedbackProvided):
        feedback_service.submit_feedback(db, form.id, form.slug, entries)

    assert _count(db, FeedbackResponse) == 0
    assert _count(db, Job) == 0


def test_successful_submission(db, make_form):
    form = make_form(eerste=3)
    first, second, third = form.email_variants
    entries = [
        _entry(first, "Mooie opening"),
        _entry(second, ""),
        _entry(third, "Te lang", FeedbackRating.NEGATIEF),
    ]

    responses = feedback_service.submit_feedback(db, form.id, form.slug, entries)

    assert len(responses) == 2
    assert {r.feedback_text for r in responses} == {"Mooie opening", "[Negatief] Te lang"}
    assert len({r.submitted_at for r in responses}) == 1
    assert _status(db, form.id) == "completed"

    jobs = db.scalars(select(Job)).all()
    assert len(jobs) == 1
    assert jobs[0].job_type == JobType.FEEDBACK_WEBHOOK.value
    assert jobs[0].status == JobStatus.PENDING.value
    assert jobs[0].payload["data"] == {"client_name": "Acme Corp"}
    assert jobs[0].payload["url"] == "https://hooks.example.com/feedback"


def test_form_webhook_url_overrides_default(db, make_form):
    form = make_form(webhook_url="https://hooks.example.com/acme")

    feedback_service.submit_feedback(
        db, form.id, form.slug, [_entry(form.email_variants[0], "Prima")]
    )

    job = db.scalars(select(Job)).one()
    assert job.payload["url"] == "https://hooks.example.com/acme"


def test_second_submission_rejected(db, make_form):
    form = make_form(eerste=1)
    variant = form.email_variants[0]
    feedback_service.submit_feedback(db, form.id, form.slug, [_entry(variant, "Eerste")])

    with pytest.raises(FormAlreadyCompletedError):
        feedback_service.submit_feedback(
            db, form.id, form.slug, [_entry(variant, "Tweede")]
        )

    texts = db.scalars(select(FeedbackResponse.feedback_text)).all()
    assert texts == ["Eerste"]
    assert _count(db, Job) == 1


def test_slug_mismatch_is_not_found(db, make_form):
    form = make_form()

    with pytest.raises(FormNotFoundError):
        feedback_service.submit_feedback(
            db, form.id, "andere-slug", [_entry(form.email_variants[0], "Hoi")]
        )

    assert _status(db, form.id) == "active"


def test_unknown_form_is_not_found(db):
    with pytest.raises(FormNotFoundError):
        feedback_service.submit_feedback(
            db,
            uuid.uuid4(),
            "acme",
            [FeedbackEntry(variant_id=uuid.uuid4(), feedback_text="Hoi")],
        )


def test_variant_of_other_form_rejected(db, make_form):
    form = make_form(client_name="Acme")
    other = make_form(client_name="Globex")

    with pytest.raises(FeedbackValidationError) as exc_info:
        feedback_service.submit_feedback(
            db, form.id, form.slug, [_entry(other.email_variants[0], "Verkeerd")]
        )

    assert "entries" in exc_info.value.field_errors
    assert _status(db, form.id) == "active"
    assert _count(db, FeedbackResponse) == 0


def test_storage_failure_rolls_back_everything(db, make_form, monkeypatch):
    form = make_form(eerste=2)

    def failing_enqueue(*args, **kwargs):
        raise SQLAlchemyError("outbox write failed")

    monkeypatch.setattr(webhook_service, "enqueue_completion_webhook", failing_enqueue)

    with pytest.raises(PersistenceError) as exc_info:
        feedback_service.submit_feedback(
            db, form.id, form.slug, [_entry(form.email_variants[0], "Goed")]
        )

    assert str(exc_info.value) == "Er ging iets mis bij het opslaan van je feedback"
    assert _status(db, form.id) == "active"
    assert _count(db, FeedbackResponse) == 0
    assert _count(db, Job) == 0
