"""Utility modules."""

from feedback_api.utils.normalization import (
    normalize_feedback_text,
    normalize_name,
    slugify,
    transliterate,
)

__all__ = [
    # Normalization
    "normalize_feedback_text",
    "normalize_name",
    "slugify",
    "transliterate",
]
