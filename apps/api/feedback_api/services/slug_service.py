"""Public slug generation for feedback forms."""

import logging
import secrets
import string

from sqlalchemy import select
from sqlalchemy.orm import Session

from feedback_api.db.models import Form
from feedback_api.utils.normalization import slugify

logger = logging.getLogger(__name__)

SUFFIX_LENGTH = 6
SUFFIX_ALPHABET = string.ascii_lowercase + string.digits
MAX_SLUG_ATTEMPTS = 3
MAX_SLUG_LENGTH = 300
MAX_BASE_LENGTH = MAX_SLUG_LENGTH - SUFFIX_LENGTH - 1


class SlugGenerationExhausted(Exception):
    """No free slug was found within MAX_SLUG_ATTEMPTS."""

    pass


def random_suffix() -> str:
    return "".join(secrets.choice(SUFFIX_ALPHABET) for _ in range(SUFFIX_LENGTH))


def build_slug(base: str, suffix: str) -> str:
    return f"{base}-{suffix}" if base else suffix


def slug_exists(db: Session, slug: str) -> bool:
    return db.execute(select(Form.id).where(Form.slug == slug)).first() is not None


def generate_unique_slug(db: Session, client_name: str) -> str:
    """
    Derive a slug like "acme-corp-x7k2p9" that no form uses yet.

    The base is cut so base, hyphen and suffix fit in MAX_SLUG_LENGTH.
    Only the random suffix changes between attempts. Raises
    SlugGenerationExhausted after MAX_SLUG_ATTEMPTS collisions.
    """
    base = slugify(client_name)[:MAX_BASE_LENGTH].rstrip("-")
    for attempt in range(1, MAX_SLUG_ATTEMPTS + 1):
        slug = build_slug(base, random_suffix())
        if not slug_exists(db, slug):
            return slug
        logger.warning("Slug collision on attempt %s for base=%s", attempt, base)

    raise SlugGenerationExhausted(
        f"Could not generate unique slug after {MAX_SLUG_ATTEMPTS} attempts"
    )
