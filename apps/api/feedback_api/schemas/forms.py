"""Schemas for feedback forms and their email variants."""

from datetime import datetime
from uuid import UUID

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class VariantInput(BaseModel):
    """Subject + body for one email variant, as typed by the operator.

    Emptiness is checked by the form service so that every problem is
    reported per field instead of failing on the first one.
    """

    subject: str = ""
    body: str = ""


class FormCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    client_name: str = Field(
        "", validation_alias=AliasChoices("client_name", "klantnaam")
    )
    eerste_mail_variants: list[VariantInput] = Field(default_factory=list)
    opvolgmail_1_enabled: bool = False
    opvolgmail_1_variants: list[VariantInput] | None = None
    opvolgmail_2_enabled: bool = False
    opvolgmail_2_variants: list[VariantInput] | None = None
    webhook_url: str | None = None


class FormCreateResponse(BaseModel):
    success: bool = True
    id: UUID
    slug: str
    public_url: str


class FormSummary(BaseModel):
    id: UUID
    client_name: str
    slug: str
    status: str
    created_at: datetime
    public_url: str


class FeedbackResponseRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    variant_id: UUID
    feedback_text: str
    submitted_at: datetime


class EmailVariantRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email_type: str
    variant_number: int
    subject_line: str
    email_body: str
    sort_order: int
    feedback_responses: list[FeedbackResponseRead] = Field(default_factory=list)


class VariantGroupRead(BaseModel):
    email_type: str
    label: str
    variants: list[EmailVariantRead]


class FormDashboardRead(BaseModel):
    id: UUID
    client_name: str
    slug: str
    status: str
    webhook_url: str | None
    created_at: datetime
    public_url: str
    email_variants: list[EmailVariantRead]
    variant_groups: list[VariantGroupRead]


class FormPublicRead(BaseModel):
    """Recipient view. Feedback is only included once the form is completed."""

    id: UUID
    client_name: str
    slug: str
    status: str
    read_only: bool
    email_variants: list[EmailVariantRead]
    variant_groups: list[VariantGroupRead]
