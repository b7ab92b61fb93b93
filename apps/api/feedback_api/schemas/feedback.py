"""Schemas for public feedback submission."""

from uuid import UUID

from pydantic import BaseModel, Field

from feedback_api.db.enums import FeedbackRating


class FeedbackEntry(BaseModel):
    variant_id: UUID
    feedback_text: str | None = None
    rating: FeedbackRating | None = None


class FeedbackSubmitRequest(BaseModel):
    form_id: UUID
    entries: list[FeedbackEntry] = Field(default_factory=list)


class FeedbackSubmitResponse(BaseModel):
    success: bool
    error: str | None = None
