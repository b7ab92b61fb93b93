"""Form service: creation, lookups, listing and deletion of feedback forms."""

import logging
import uuid
from urllib.parse import urlsplit

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from feedback_api.core.config import settings
from feedback_api.db.enums import (
    EMAIL_TYPE_LABELS,
    EMAIL_TYPE_ORDER,
    EmailType,
    FormStatus,
)
from feedback_api.db.models import EmailVariant, Form
from feedback_api.schemas.forms import FormCreate, VariantInput
from feedback_api.services import slug_service
from feedback_api.utils.normalization import normalize_name

logger = logging.getLogger(__name__)

MIN_VARIANTS_PER_STAGE = 1
MAX_VARIANTS_PER_STAGE = 5
MAX_CLIENT_NAME_LENGTH = 255
MAX_WEBHOOK_URL_LENGTH = 2000

CREATE_FAILED_MESSAGE = "Er ging iets mis bij het aanmaken"
DELETE_FAILED_MESSAGE = "Er ging iets mis bij het verwijderen"


class FormServiceError(Exception):
    """Base exception for form service errors."""

    pass


class FormNotFoundError(FormServiceError):
    """Form not found."""

    pass


class PersistenceError(FormServiceError):
    """A storage operation failed. The message is safe to show to users."""

    pass


class FormValidationError(FormServiceError):
    """Form input failed validation; errors are keyed by input field."""

    def __init__(self, field_errors: dict[str, list[str]]):
        self.field_errors = field_errors
        super().__init__("Invalid form input")


# =============================================================================
# Validation
# =============================================================================


def _add_error(errors: dict[str, list[str]], field: str, message: str) -> None:
    errors.setdefault(field, []).append(message)


def _validate_variant_group(
    errors: dict[str, list[str]],
    field: str,
    variants: list[VariantInput] | None,
    stage_suffix: str = "",
) -> None:
    if not variants:
        _add_error(errors, field, f"Minimaal 1 variant vereist{stage_suffix}")
        return
    if len(variants) > MAX_VARIANTS_PER_STAGE:
        _add_error(errors, field, f"Maximaal 5 varianten toegestaan{stage_suffix}")

    for index, variant in enumerate(variants):
        if not variant.subject.strip():
            _add_error(errors, f"{field}.{index}.subject", "Onderwerp is verplicht")
        if not variant.body.strip():
            _add_error(errors, f"{field}.{index}.body", "Inhoud is verplicht")


def _is_http_url(value: str) -> bool:
    parts = urlsplit(value)
    return parts.scheme in ("http", "https") and bool(parts.netloc)


def validate_form_create(data: FormCreate) -> dict[str, list[str]]:
    """Return field-level errors for a creation request (empty when valid)."""
    errors: dict[str, list[str]] = {}

    client_name = normalize_name(data.client_name)
    if not client_name:
        _add_error(errors, "client_name", "Klantnaam is verplicht")
    elif len(client_name) > MAX_CLIENT_NAME_LENGTH:
        _add_error(
            errors,
            "client_name",
            f"Klantnaam mag maximaal {MAX_CLIENT_NAME_LENGTH} tekens bevatten",
        )

    _validate_variant_group(errors, "eerste_mail_variants", data.eerste_mail_variants)

    if data.opvolgmail_1_enabled:
        _validate_variant_group(
            errors, "opvolgmail_1_variants", data.opvolgmail_1_variants, " voor opvolgmail 1"
        )

    if data.opvolgmail_2_enabled:
        _validate_variant_group(
            errors, "opvolgmail_2_variants", data.opvolgmail_2_variants, " voor opvolgmail 2"
        )
        if not data.opvolgmail_1_enabled:
            _add_error(
                errors,
                "opvolgmail_2_enabled",
                "Opvolgmail 2 kan alleen worden ingeschakeld als opvolgmail 1 actief is",
            )

    webhook_url = (data.webhook_url or "").strip()
    if webhook_url:
        if len(webhook_url) > MAX_WEBHOOK_URL_LENGTH:
            _add_error(
                errors,
                "webhook_url",
                f"Webhook URL mag maximaal {MAX_WEBHOOK_URL_LENGTH} tekens bevatten",
            )
        elif not _is_http_url(webhook_url):
            _add_error(errors, "webhook_url", "Webhook URL moet met http(s):// beginnen")

    return errors


# =============================================================================
# Create
# =============================================================================


def enabled_variant_groups(data: FormCreate) -> list[tuple[EmailType, list[VariantInput]]]:
    """Variant groups to persist, in fixed stage order. Disabled stages are skipped."""
    groups = [(EmailType.EERSTE_MAIL, data.eerste_mail_variants)]
    if data.opvolgmail_1_enabled and data.opvolgmail_1_variants:
        groups.append((EmailType.OPVOLGMAIL_1, data.opvolgmail_1_variants))
    if data.opvolgmail_2_enabled and data.opvolgmail_2_variants:
        groups.append((EmailType.OPVOLGMAIL_2, data.opvolgmail_2_variants))
    return groups


def build_variant_rows(form_id: uuid.UUID, data: FormCreate) -> list[EmailVariant]:
    """
    Build EmailVariant rows for a new form.

    sort_order runs across all groups (0, 1, 2, ...); variant_number restarts
    at 1 for each email type.
    """
    rows: list[EmailVariant] = []
    sort_order = 0
    for email_type, variants in enabled_variant_groups(data):
        for index, variant in enumerate(variants):
            rows.append(
                EmailVariant(
                    form_id=form_id,
                    email_type=email_type.value,
                    variant_number=index + 1,
                    subject_line=variant.subject,
                    email_body=variant.body,
                    sort_order=sort_order,
                )
            )
            sort_order += 1
    return rows


def create_form(db: Session, data: FormCreate) -> Form:
    """
    Validate input, pick a slug and insert the form with all its variants.

    The form row and the variant rows are committed together; if any insert
    fails nothing is kept.

    Raises:
        FormValidationError: input invalid (field-level errors)
        SlugGenerationExhausted: no free slug after 3 attempts
        PersistenceError: storage failure
    """
    errors = validate_form_create(data)
    if errors:
        raise FormValidationError(errors)

    client_name = normalize_name(data.client_name)
    webhook_url = (data.webhook_url or "").strip() or None

    try:
        slug = slug_service.generate_unique_slug(db, client_name)
        form = Form(
            client_name=client_name,
            slug=slug,
            webhook_url=webhook_url,
            status=FormStatus.ACTIVE.value,
        )
        db.add(form)
        db.flush()

        db.add_all(build_variant_rows(form.id, data))
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Form creation failed for client_name=%s", client_name)
        raise PersistenceError(CREATE_FAILED_MESSAGE) from exc

    db.refresh(form)
    logger.info("Created form %s (slug=%s)", form.id, form.slug)
    return form


# =============================================================================
# Read
# =============================================================================


def list_forms(db: Session) -> list[Form]:
    """All forms, newest first. Variants are not loaded."""
    return list(db.scalars(select(Form).order_by(Form.created_at.desc())).all())


def get_form_for_dashboard(db: Session, form_id: uuid.UUID) -> Form | None:
    """Form with variants (by sort_order) and the feedback left on each."""
    query = (
        select(Form)
        .where(Form.id == form_id)
        .options(
            selectinload(Form.email_variants).selectinload(EmailVariant.feedback_responses)
        )
        .execution_options(populate_existing=True)
    )
    return db.scalars(query).first()


def get_form_for_public(db: Session, slug: str) -> Form | None:
    """Form with variants (by sort_order), looked up by its public slug."""
    query = (
        select(Form)
        .where(Form.slug == slug)
        .options(
            selectinload(Form.email_variants).selectinload(EmailVariant.feedback_responses)
        )
        .execution_options(populate_existing=True)
    )
    return db.scalars(query).first()


def is_read_only(form: Form) -> bool:
    return form.status == FormStatus.COMPLETED.value


def group_variants_by_type(variants: list[EmailVariant]) -> list[dict]:
    """Group variants per email type in stage order, skipping empty stages."""
    groups = []
    for email_type in EMAIL_TYPE_ORDER:
        members = [v for v in variants if v.email_type == email_type.value]
        if not members:
            continue
        groups.append(
            {
                "email_type": email_type.value,
                "label": EMAIL_TYPE_LABELS[email_type],
                "variants": sorted(members, key=lambda v: v.sort_order),
            }
        )
    return groups


def build_public_url(slug: str) -> str:
    base_url = settings.PUBLIC_SITE_URL.strip().rstrip("/")
    return f"{base_url}/feedback/{slug}"


# =============================================================================
# Delete
# =============================================================================


def delete_form(db: Session, form_id: uuid.UUID) -> None:
    """
    Delete a form. Variants and feedback go with it through ON DELETE CASCADE.

    Raises:
        FormNotFoundError: no form with this id
        PersistenceError: storage failure
    """
    try:
        result = db.execute(delete(Form).where(Form.id == form_id))
        if result.rowcount == 0:
            db.rollback()
            raise FormNotFoundError(f"Form {form_id} not found")
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Form deletion failed for form_id=%s", form_id)
        raise PersistenceError(DELETE_FAILED_MESSAGE) from exc

    logger.info("Deleted form %s", form_id)
