"""SQLAlchemy ORM models."""

from feedback_api.db.models.forms import EmailVariant, FeedbackResponse, Form
from feedback_api.db.models.jobs import Job

__all__ = [
    "EmailVariant",
    "FeedbackResponse",
    "Form",
    "Job",
]
