"""Pydantic schemas for API request/response models."""

from feedback_api.schemas.feedback import (
    FeedbackEntry,
    FeedbackSubmitRequest,
    FeedbackSubmitResponse,
)
from feedback_api.schemas.forms import (
    EmailVariantRead,
    FeedbackResponseRead,
    FormCreate,
    FormCreateResponse,
    FormDashboardRead,
    FormPublicRead,
    FormSummary,
    VariantGroupRead,
    VariantInput,
)

__all__ = [
    # Forms
    "EmailVariantRead",
    "FeedbackResponseRead",
    "FormCreate",
    "FormCreateResponse",
    "FormDashboardRead",
    "FormPublicRead",
    "FormSummary",
    "VariantGroupRead",
    "VariantInput",
    # Feedback
    "FeedbackEntry",
    "FeedbackSubmitRequest",
    "FeedbackSubmitResponse",
]
