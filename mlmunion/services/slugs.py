"""Slug utilities: slug normalisation, country segments and identifier detection."""

import re
from typing import Optional

_DISALLOWED_RE = re.compile(r"[^a-z0-9\s-]")
_WHITESPACE_RE = re.compile(r"\s+")
_HYPHENS_RE = re.compile(r"-+")

# Primary keys issued by the database (UUID text form)
_ID_RE = re.compile(
    r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}",
    re.IGNORECASE,
)

UNKNOWN_COUNTRY = "unknown"


def normalize(text: Optional[str]) -> str:
    """Turn free text into a URL slug.

    The result is lowercased, limited to ``[a-z0-9-]``, and has no leading,
    trailing or repeated hyphens.  An empty string is returned when nothing
    survives; callers fall back to the record identifier in that case.
    """
    if not text:
        return ""
    slug = _DISALLOWED_RE.sub("", text.lower())
    slug = _WHITESPACE_RE.sub("-", slug)
    slug = _HYPHENS_RE.sub("-", slug)
    return slug.strip("-")


def country_slug(name: Optional[str]) -> str:
    """Return the country path segment used in company URLs."""
    return normalize(name) or UNKNOWN_COUNTRY


def looks_like_id(segment: Optional[str]) -> bool:
    """Return *True* when *segment* has the textual shape of a record identifier."""
    return bool(segment) and _ID_RE.fullmatch(segment) is not None
