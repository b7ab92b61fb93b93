"""Public feedback endpoints for recipients of a shared form link."""

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from feedback_api.core.config import settings
from feedback_api.core.deps import get_db
from feedback_api.core.rate_limit import limiter
from feedback_api.db.models import EmailVariant, Form
from feedback_api.schemas.feedback import FeedbackSubmitRequest, FeedbackSubmitResponse
from feedback_api.schemas.forms import EmailVariantRead, FormPublicRead, VariantGroupRead
from feedback_api.services import feedback_service, form_service
from feedback_api.services.feedback_service import (
    FeedbackValidationError,
    FormAlreadyCompletedError,
    NoFeedbackProvided,
)
from feedback_api.services.form_service import FormNotFoundError, PersistenceError

router = APIRouter()

FORM_NOT_FOUND_MESSAGE = "Formulier niet gevonden"
ALREADY_COMPLETED_MESSAGE = "Feedback voor dit formulier is al verstuurd"


def _variant_read(variant: EmailVariant, include_feedback: bool) -> EmailVariantRead:
    read = EmailVariantRead.model_validate(variant)
    if not include_feedback:
        read.feedback_responses = []
    return read


def _to_public(form: Form) -> FormPublicRead:
    # Submitted feedback is only shown back once the form is read-only
    read_only = form_service.is_read_only(form)
    return FormPublicRead(
        id=form.id,
        client_name=form.client_name,
        slug=form.slug,
        status=form.status,
        read_only=read_only,
        email_variants=[_variant_read(v, read_only) for v in form.email_variants],
        variant_groups=[
            VariantGroupRead(
                email_type=group["email_type"],
                label=group["label"],
                variants=[_variant_read(v, read_only) for v in group["variants"]],
            )
            for group in form_service.group_variants_by_type(form.email_variants)
        ],
    )


def _failure(status_code: int, error: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=FeedbackSubmitResponse(success=False, error=error).model_dump(),
    )


@router.get("/{slug}", response_model=FormPublicRead)
@limiter.limit(f"{settings.RATE_LIMIT_PUBLIC_READ}/minute")
def get_public_form(request: Request, slug: str, db: Session = Depends(get_db)):
    form = form_service.get_form_for_public(db, slug)
    if not form:
        raise HTTPException(status_code=404, detail=FORM_NOT_FOUND_MESSAGE)
    return _to_public(form)


@router.post("/{slug}/submit", response_model=FeedbackSubmitResponse)
@limiter.limit(f"{settings.RATE_LIMIT_PUBLIC_SUBMIT}/minute")
def submit_feedback(
    request: Request,
    slug: str,
    data: FeedbackSubmitRequest,
    db: Session = Depends(get_db),
):
    """Store the recipient's feedback and lock the form."""
    try:
        feedback_service.submit_feedback(db, data.form_id, slug, data.entries)
    except NoFeedbackProvided as e:
        return _failure(status.HTTP_400_BAD_REQUEST, str(e))
    except FormNotFoundError:
        return _failure(status.HTTP_404_NOT_FOUND, FORM_NOT_FOUND_MESSAGE)
    except FormAlreadyCompletedError:
        return _failure(status.HTTP_409_CONFLICT, ALREADY_COMPLETED_MESSAGE)
    except FeedbackValidationError as e:
        return _failure(
            422,
            "; ".join(msg for msgs in e.field_errors.values() for msg in msgs),
        )
    except PersistenceError as e:
        return _failure(status.HTTP_500_INTERNAL_SERVER_ERROR, str(e))

    return FeedbackSubmitResponse(success=True)
