"""Service layer modules."""

# Import service modules (not individual functions) for cleaner access
from feedback_api.services import slug_service
from feedback_api.services import job_service
from feedback_api.services import http_service
from feedback_api.services import webhook_service
from feedback_api.services import form_service
from feedback_api.services import feedback_service

__all__ = [
    "feedback_service",
    "form_service",
    "http_service",
    "job_service",
    "slug_service",
    "webhook_service",
]
