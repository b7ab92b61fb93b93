"""FastAPI application entry point."""
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text

from feedback_api.core.config import settings
from feedback_api.db.session import engine
from feedback_api.schemas.feedback import FeedbackSubmitResponse

# ============================================================================
# Sentry Integration (optional, for production error tracking)
# ============================================================================

if settings.SENTRY_DSN and settings.ENV != "dev":
    import sentry_sdk
    from sentry_sdk.integrations.fastapi import FastApiIntegration
    from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.ENV,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            SqlalchemyIntegration(),
        ],
        traces_sample_rate=0.1,
        send_default_pii=False,  # Client names and feedback stay out of Sentry
    )
    logging.info("Sentry initialized for error tracking")

# ============================================================================
# Rate Limiting
# ============================================================================

from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from feedback_api.core.rate_limit import limiter

# ============================================================================
# FastAPI App
# ============================================================================

app = FastAPI(
    title="Mail Feedback API",
    description="Shareable feedback forms for email copy variants",
    version=settings.VERSION,
    docs_url="/docs" if settings.ENV == "dev" else None,
    redoc_url="/redoc" if settings.ENV == "dev" else None,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# CORS middleware - must be added before routers
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=False,
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "X-Requested-With"],
)


FEEDBACK_SUBMIT_PATH = "/feedback/{slug}/submit"
INVALID_FEEDBACK_MESSAGE = "Ongeldige feedback"


def _collect_field_errors(exc: RequestValidationError) -> dict[str, list[str]]:
    field_errors: dict[str, list[str]] = {}
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part != "body"]
        field = ".".join(loc) or "body"
        field_errors.setdefault(field, []).append(error.get("msg", "Invalid value"))
    return field_errors


def _is_feedback_submit(request: Request) -> bool:
    route = request.scope.get("route")
    if route is not None:
        return getattr(route, "path", None) == FEEDBACK_SUBMIT_PATH
    path = request.url.path
    return path.startswith("/feedback/") and path.endswith("/submit")


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """
    Report malformed payloads in the shape each client already handles.

    The public submit route answers {"success": false, "error": ...}; every
    other route answers {"field_errors": {...}} like form validation.
    """
    field_errors = _collect_field_errors(exc)

    if _is_feedback_submit(request):
        details = "; ".join(
            f"{field}: {msg}" for field, msgs in field_errors.items() for msg in msgs
        )
        return JSONResponse(
            status_code=422,
            content=FeedbackSubmitResponse(
                success=False, error=f"{INVALID_FEEDBACK_MESSAGE} ({details})"
            ).model_dump(),
        )

    return JSONResponse(status_code=422, content={"field_errors": field_errors})


# ============================================================================
# Routers
# ============================================================================

from feedback_api.routers import feedback_public, forms

# Operator dashboard
app.include_router(forms.router, prefix="/forms", tags=["forms"])

# Public feedback pages (unauthenticated, rate limited)
app.include_router(feedback_public.router, prefix="/feedback", tags=["feedback"])


# ============================================================================
# Health Check
# ============================================================================

@app.get("/health")
def health():
    """
    Health check endpoint.

    Verifies database connectivity and returns environment info.
    """
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))
    return {"status": "ok", "env": settings.ENV, "version": settings.VERSION}
