"""Validated view of a content row returned by the store."""

from datetime import datetime
from typing import Any, List, NamedTuple, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

# Row columns that feed each record field, first non-empty value wins
_TITLE_KEYS = ("title", "name", "full_name", "username")
_BODY_KEYS = ("content", "description", "seller_bio")
_IMAGE_KEYS = ("cover_image", "image_url", "logo_url")
_UPDATED_KEYS = ("updated_at", "last_updated")
_AUTHOR_KEYS = ("author", "user")


class ContentRecord(BaseModel):
    """A blog post, news article, classified, company, seller profile or static page."""

    model_config = ConfigDict(coerce_numbers_to_str=True)

    id: str = Field(min_length=1)
    slug: Optional[str] = None
    title: str = ""
    body: str = ""
    meta_description: Optional[str] = None
    meta_keywords: Optional[str] = None
    focus_keyword: Optional[str] = None
    image: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    country_name: Optional[str] = None
    country: Optional[str] = None
    website: Optional[str] = None
    headquarters: Optional[str] = None
    established: Optional[int] = None
    author_name: Optional[str] = None
    specialties: List[str] = []
    location: Optional[str] = None

    @field_validator("id")
    @classmethod
    def _strip_id(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("id must not be blank")
        return value

    @field_validator("slug", "meta_description", "meta_keywords", "focus_keyword", "image")
    @classmethod
    def _blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        return value or None

    @field_validator("established", mode="before")
    @classmethod
    def _lenient_year(cls, value: Any) -> Any:
        try:
            return int(value) if value not in (None, "") else None
        except (TypeError, ValueError):
            return None

    @field_validator("specialties", mode="before")
    @classmethod
    def _listify(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [part.strip() for part in value.split(",") if part.strip()]
        return value or []

    @property
    def canonical_slug(self) -> str:
        """The slug used in public URLs; records without one are addressed by id."""
        return self.slug or self.id


class Ok(NamedTuple):
    record: ContentRecord


class Invalid(NamedTuple):
    reason: str


ParseResult = Union[Ok, Invalid]


def _first(row: dict, keys) -> Any:
    for key in keys:
        value = row.get(key)
        if value not in (None, ""):
            return value
    return None


def _author_name(row: dict) -> Optional[str]:
    """Return the display name of an embedded ``profiles`` relation, if any."""
    author = _first(row, _AUTHOR_KEYS)
    if isinstance(author, list):
        author = author[0] if author else None
    if not isinstance(author, dict):
        return None
    return author.get("full_name") or author.get("username") or None


def _location(row: dict) -> Optional[str]:
    parts = [str(row[key]) for key in ("city", "state", "country") if row.get(key)]
    return ", ".join(parts) or None


def parse_record(
    row: Any, slug_column: str = "slug", alt_slug_column: Optional[str] = None
) -> ParseResult:
    """Validate a raw store row into a :class:`ContentRecord`.

    *slug_column* names the column holding the record's public slug
    (``username`` for seller profiles).  *alt_slug_column*, when given, is
    used for rows whose slug is empty.
    """
    if not isinstance(row, dict):
        return Invalid(f"expected an object, got {type(row).__name__}")

    slug_keys = (slug_column, alt_slug_column) if alt_slug_column else (slug_column,)
    data = {
        "id": row.get("id"),
        "slug": _first(row, slug_keys),
        "title": _first(row, _TITLE_KEYS) or "",
        "body": _first(row, _BODY_KEYS) or "",
        "meta_description": row.get("meta_description"),
        "meta_keywords": row.get("meta_keywords"),
        "focus_keyword": row.get("focus_keyword"),
        "image": _first(row, _IMAGE_KEYS),
        "created_at": row.get("created_at"),
        "updated_at": _first(row, _UPDATED_KEYS),
        "country_name": row.get("country_name"),
        "country": row.get("country"),
        "website": row.get("website"),
        "headquarters": row.get("headquarters"),
        "established": row.get("established"),
        "author_name": _author_name(row),
        "specialties": row.get("specialties") or [],
        "location": _location(row),
    }
    if data["id"] is None:
        return Invalid("row has no id")

    try:
        return Ok(ContentRecord.model_validate(data))
    except ValidationError as exc:
        reason = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
        )
        return Invalid(reason)
