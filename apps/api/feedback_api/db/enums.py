"""Enum definitions for application constants."""

from enum import Enum


class FormStatus(str, Enum):
    """
    Form lifecycle.

    active → completed (terminal). A form is completed by its one feedback
    submission and never reopens.
    """
    ACTIVE = "active"
    COMPLETED = "completed"


class EmailType(str, Enum):
    """Sequential email stages a form can hold variants for."""
    EERSTE_MAIL = "eerste_mail"
    OPVOLGMAIL_1 = "opvolgmail_1"
    OPVOLGMAIL_2 = "opvolgmail_2"


# Fixed stage order; sort_order is assigned across groups in this order
EMAIL_TYPE_ORDER: tuple[EmailType, ...] = (
    EmailType.EERSTE_MAIL,
    EmailType.OPVOLGMAIL_1,
    EmailType.OPVOLGMAIL_2,
)

EMAIL_TYPE_LABELS: dict[EmailType, str] = {
    EmailType.EERSTE_MAIL: "Eerste mail",
    EmailType.OPVOLGMAIL_1: "Opvolgmail 1",
    EmailType.OPVOLGMAIL_2: "Opvolgmail 2",
}


class FeedbackRating(str, Enum):
    """Coarse rating a recipient can attach to a variant."""
    POSITIEF = "positief"
    NEUTRAAL = "neutraal"
    NEGATIEF = "negatief"


FEEDBACK_RATING_LABELS: dict[FeedbackRating, str] = {
    FeedbackRating.POSITIEF: "Positief",
    FeedbackRating.NEUTRAAL: "Neutraal",
    FeedbackRating.NEGATIEF: "Negatief",
}


class JobType(str, Enum):
    """Types of background jobs."""
    FEEDBACK_WEBHOOK = "feedback_webhook"


class JobStatus(str, Enum):
    """Status of background jobs."""
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


DEFAULT_FORM_STATUS = FormStatus.ACTIVE
DEFAULT_JOB_STATUS = JobStatus.PENDING
