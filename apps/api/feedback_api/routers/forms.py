"""Operator endpoints: create, list, inspect and delete feedback forms."""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Response, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from feedback_api.core.deps import get_db
from feedback_api.db.models import Form
from feedback_api.schemas.forms import (
    EmailVariantRead,
    FormCreate,
    FormCreateResponse,
    FormDashboardRead,
    FormSummary,
    VariantGroupRead,
)
from feedback_api.services import form_service
from feedback_api.services.form_service import (
    CREATE_FAILED_MESSAGE,
    FormNotFoundError,
    FormValidationError,
    PersistenceError,
)
from feedback_api.services.slug_service import SlugGenerationExhausted

logger = logging.getLogger(__name__)

router = APIRouter()


def _to_summary(form: Form) -> FormSummary:
    return FormSummary(
        id=form.id,
        client_name=form.client_name,
        slug=form.slug,
        status=form.status,
        created_at=form.created_at,
        public_url=form_service.build_public_url(form.slug),
    )


def _to_dashboard(form: Form) -> FormDashboardRead:
    return FormDashboardRead(
        id=form.id,
        client_name=form.client_name,
        slug=form.slug,
        status=form.status,
        webhook_url=form.webhook_url,
        created_at=form.created_at,
        public_url=form_service.build_public_url(form.slug),
        email_variants=[
            EmailVariantRead.model_validate(v) for v in form.email_variants
        ],
        variant_groups=[
            VariantGroupRead(
                email_type=group["email_type"],
                label=group["label"],
                variants=[EmailVariantRead.model_validate(v) for v in group["variants"]],
            )
            for group in form_service.group_variants_by_type(form.email_variants)
        ],
    )


@router.get("", response_model=list[FormSummary])
def list_forms(db: Session = Depends(get_db)):
    """All forms, newest first."""
    return [_to_summary(form) for form in form_service.list_forms(db)]


@router.post(
    "",
    response_model=FormCreateResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_form(data: FormCreate, db: Session = Depends(get_db)):
    """Create a form with its email variants and return the shareable link."""
    try:
        form = form_service.create_form(db, data)
    except FormValidationError as e:
        return JSONResponse(
            status_code=422,
            content={"field_errors": e.field_errors},
        )
    except SlugGenerationExhausted:
        logger.error("Slug generation exhausted for client_name=%s", data.client_name)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"message": CREATE_FAILED_MESSAGE},
        )
    except PersistenceError as e:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"message": str(e)},
        )

    return FormCreateResponse(
        id=form.id,
        slug=form.slug,
        public_url=form_service.build_public_url(form.slug),
    )


@router.get("/{form_id}", response_model=FormDashboardRead)
def get_form(form_id: UUID, db: Session = Depends(get_db)):
    """Form detail for the dashboard, including any submitted feedback."""
    form = form_service.get_form_for_dashboard(db, form_id)
    if not form:
        raise HTTPException(status_code=404, detail="Form not found")
    return _to_dashboard(form)


@router.delete("/{form_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_form(form_id: UUID, db: Session = Depends(get_db)):
    """Delete a form together with its variants and feedback."""
    try:
        form_service.delete_form(db, form_id)
    except FormNotFoundError:
        raise HTTPException(status_code=404, detail="Form not found")
    except PersistenceError as e:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"message": str(e)},
        )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
