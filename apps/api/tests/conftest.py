"""
Test configuration and fixtures.

Provides:
- A fresh in-memory SQLite schema per test
- HTTPX AsyncClient bound to the app with get_db overridden
- Builders for form creation payloads
"""
import os
from typing import AsyncGenerator, Generator

# Must be set before any feedback_api import reads settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["TESTING"] = "1"
os.environ["PUBLIC_SITE_URL"] = "https://feedback.example.com"
os.environ["FEEDBACK_WEBHOOK_URL"] = "https://hooks.example.com/feedback"

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.orm import Session

from feedback_api.main import app
from feedback_api.core.deps import get_db
from feedback_api.db.base import Base
from feedback_api.db.session import engine, SessionLocal
from feedback_api.schemas.forms import FormCreate
from feedback_api.services import form_service


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """
    Creates all tables, yields a session, then drops everything.

    App code commits freely; isolation comes from rebuilding the schema.
    """
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()

    yield session

    session.close()
    Base.metadata.drop_all(bind=engine)


# =============================================================================
# Payload Builders
# =============================================================================

def variants(count: int, prefix: str = "Variant") -> list[dict]:
    return [
        {"subject": f"{prefix} {i} onderwerp", "body": f"{prefix} {i} inhoud"}
        for i in range(1, count + 1)
    ]


def form_payload(
    client_name: str = "Acme Corp",
    eerste: int = 2,
    opvolg_1: int | None = None,
    opvolg_2: int | None = None,
    **extra,
) -> dict:
    payload = {
        "client_name": client_name,
        "eerste_mail_variants": variants(eerste, "Eerste"),
        "opvolgmail_1_enabled": opvolg_1 is not None,
        "opvolgmail_2_enabled": opvolg_2 is not None,
    }
    if opvolg_1 is not None:
        payload["opvolgmail_1_variants"] = variants(opvolg_1, "Opvolg1")
    if opvolg_2 is not None:
        payload["opvolgmail_2_variants"] = variants(opvolg_2, "Opvolg2")
    payload.update(extra)
    return payload


@pytest.fixture
def make_form(db: Session):
    """Create a form through the service layer."""

    def _make(**kwargs):
        return form_service.create_form(db, FormCreate(**form_payload(**kwargs)))

    return _make


# =============================================================================
# Client Fixtures
# =============================================================================

@pytest.fixture(scope="function")
async def client(db: Session) -> AsyncGenerator[AsyncClient, None]:
    """AsyncClient for the API, sharing the test session."""
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture
def build_payload():
    """Creation payload builder: build_payload(eerste=2, opvolg_1=1, ...)."""
    return form_payload
