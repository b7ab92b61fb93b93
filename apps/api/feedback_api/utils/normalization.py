"""Data normalization utilities for slugs and free text."""

import re
import unicodedata
from typing import Optional


# Characters NFKD does not decompose into ASCII, plus the Dutch "&" → "en"
_TRANSLITERATIONS = {
    "&": " en ",
    "ß": "ss",
    "æ": "ae",
    "Æ": "AE",
    "œ": "oe",
    "Œ": "OE",
    "ø": "o",
    "Ø": "O",
    "đ": "d",
    "Đ": "D",
    "ł": "l",
    "Ł": "L",
    "þ": "th",
    "ĳ": "ij",
    "Ĳ": "IJ",
}

_NON_SLUG_CHARS = re.compile(r"[^a-z0-9]+")


def _strip_accents(value: str) -> str:
    """Remove diacritics (é → e, ë → e, ç → c)."""
    return "".join(
        ch for ch in unicodedata.normalize("NFKD", value) if not unicodedata.combining(ch)
    )


def transliterate(value: str) -> str:
    """Map a string onto ASCII, following Dutch conventions where they differ."""
    replaced = "".join(_TRANSLITERATIONS.get(ch, ch) for ch in value)
    stripped = _strip_accents(replaced)
    return stripped.encode("ascii", "ignore").decode("ascii")


def slugify(value: Optional[str]) -> str:
    """
    Build a lowercase, ASCII-only, hyphenated slug.

    - Transliterate diacritics ("Café Ärzte" → "cafe-arzte")
    - Collapse every run of other characters into a single hyphen
    - Strip leading/trailing hyphens

    Returns an empty string when nothing slug-safe remains.
    """
    if not value:
        return ""
    lowered = transliterate(value).lower()
    return _NON_SLUG_CHARS.sub("-", lowered).strip("-")


def normalize_name(name: Optional[str]) -> Optional[str]:
    """
    Normalize name by stripping whitespace and collapsing multiple spaces.

    Returns None if empty.
    """
    if not name:
        return None
    collapsed = " ".join(name.split())
    return collapsed or None


def normalize_feedback_text(value: Optional[str]) -> str:
    """Trim surrounding whitespace; internal line breaks are kept."""
    if not value:
        return ""
    return value.strip()
