"""Page metadata: titles, meta descriptions, keywords and JSON-LD blocks."""

import logging
import re
from typing import Any, Dict, List, Optional

from bs4 import BeautifulSoup

from mlmunion.models.page import PageMetadata
from mlmunion.models.record import ContentRecord
from mlmunion.models.resource import ResourceConfig

logger = logging.getLogger(__name__)

META_DESCRIPTION_LENGTH = 155
STRUCTURED_DESCRIPTION_LENGTH = 160

# A word-boundary cut is only taken when it keeps more than this many characters
_MIN_BOUNDARY = 100

_WHITESPACE_RE = re.compile(r"\s+")

_ARTICLE_TYPES = {"Article", "BlogPosting", "NewsArticle"}


def strip_markup(html: Optional[str]) -> str:
    """Return the visible text of *html* with whitespace collapsed."""
    if not html:
        return ""
    if "<" in html or "&" in html:
        text = BeautifulSoup(html, "lxml").get_text(separator=" ")
    else:
        text = html
    return _WHITESPACE_RE.sub(" ", text).strip()


def truncate_meta_description(text: Optional[str], max_len: int = META_DESCRIPTION_LENGTH) -> str:
    """Shorten *text* to at most *max_len* characters without cutting a word.

    The cut happens at the last space inside the limit.  When no space exists
    past the first hundred characters the text is cut exactly at *max_len*.
    """
    cleaned = _WHITESPACE_RE.sub(" ", text or "").strip()
    if not cleaned or len(cleaned) <= max_len:
        return cleaned
    truncated = cleaned[:max_len]
    last_space = truncated.rfind(" ")
    if last_space >= _MIN_BOUNDARY:
        return truncated[:last_space].rstrip()
    return truncated


def parse_keywords(text: Optional[str]) -> List[str]:
    """Split a comma-separated keyword override into a clean list."""
    if not text:
        return []
    return [kw.strip() for kw in text.split(",") if kw.strip()]


def _compact(data: Dict[str, Any]) -> Dict[str, Any]:
    """Drop keys whose value is empty."""
    return {key: value for key, value in data.items() if value not in (None, "", [], {})}


def _description_source(resource: ResourceConfig, record: ContentRecord) -> str:
    if record.meta_description:
        return record.meta_description
    if resource.name == "seller":
        return _seller_description(record)
    return strip_markup(record.body)


def _seller_description(record: ContentRecord) -> str:
    name = record.title or "This seller"
    specialties = ", ".join(record.specialties) or "network marketing"
    bio = strip_markup(record.body)
    parts = [
        f"Connect with {name}, a recommended direct seller specializing in {specialties}.",
        truncate_meta_description(bio, 120)
        if bio
        else "View their profile, achievements, and contact information.",
    ]
    if record.location:
        parts.append(f"Located in {record.location}.")
    return " ".join(parts)


def _structured_data(
    resource: ResourceConfig,
    record: ContentRecord,
    title: str,
    description: str,
    canonical_url: str,
    image: Optional[str],
    base_url: str,
    site_name: str,
) -> Dict[str, Any]:
    schema: Dict[str, Any] = {
        "@context": "https://schema.org",
        "@type": resource.schema_type,
        "url": canonical_url,
        "description": description,
    }
    publisher = {"@type": "Organization", "name": site_name, "url": base_url}

    if resource.schema_type in _ARTICLE_TYPES:
        published = record.created_at.isoformat() if record.created_at else None
        modified = record.updated_at.isoformat() if record.updated_at else published
        schema.update(
            headline=title,
            image=[image] if image and resource.schema_type == "NewsArticle" else image,
            datePublished=published,
            dateModified=modified,
            author={"@type": "Person", "name": record.author_name or site_name},
            publisher=publisher,
            mainEntityOfPage={"@type": "WebPage", "@id": canonical_url},
        )
    elif resource.schema_type == "Organization":
        address = (
            {"@type": "PostalAddress", "addressLocality": record.headquarters}
            if record.headquarters
            else None
        )
        schema.update(
            name=title,
            logo=image,
            image=image,
            sameAs=[record.website] if record.website else None,
            address=address,
            foundingDate=str(record.established) if record.established else None,
        )
    elif resource.schema_type == "ProfilePage":
        schema.update(
            name=title,
            mainEntity=_compact(
                {
                    "@type": "Person",
                    "name": record.title,
                    "image": image,
                    "description": description,
                    "knowsAbout": record.specialties,
                }
            ),
        )
    else:
        schema.update(
            name=title,
            image=image,
            dateModified=record.updated_at.isoformat() if record.updated_at else None,
            publisher=publisher,
        )
    return _compact(schema)


def _synthesize(
    resource: ResourceConfig,
    record: ContentRecord,
    canonical_url: str,
    base_url: str,
    site_name: str,
) -> PageMetadata:
    name = record.title or resource.default_title
    title = resource.title_format.format(title=name, site_name=site_name)
    source = _description_source(resource, record)
    description = truncate_meta_description(source, META_DESCRIPTION_LENGTH) or None
    keywords = parse_keywords(record.meta_keywords)
    image = record.image or resource.default_image

    open_graph = _compact(
        {
            "title": title,
            "description": description,
            "type": resource.og_type,
            "url": canonical_url,
            "site_name": site_name,
            "images": [{"url": image, "alt": name}] if image else None,
            "published_time": record.created_at.isoformat()
            if record.created_at and resource.og_type == "article"
            else None,
            "authors": [record.author_name] if record.author_name else None,
        }
    )
    twitter = _compact(
        {
            "card": "summary_large_image" if image else "summary",
            "title": title,
            "description": description,
            "images": [image] if image else None,
        }
    )
    structured = _structured_data(
        resource,
        record,
        title=name,
        description=truncate_meta_description(source, STRUCTURED_DESCRIPTION_LENGTH),
        canonical_url=canonical_url,
        image=image,
        base_url=base_url,
        site_name=site_name,
    )
    return PageMetadata(
        title=title,
        description=description,
        keywords=keywords,
        canonical_url=canonical_url,
        image=image,
        open_graph=open_graph,
        twitter=twitter,
        structured_data=structured,
    )


def synthesize(
    resource: ResourceConfig,
    record: ContentRecord,
    canonical_url: str,
    base_url: str,
    site_name: str,
) -> PageMetadata:
    """Build the :class:`PageMetadata` of a detail page.

    Missing fields are left out of the result.  Metadata must never keep a
    page from rendering, so an unexpected failure yields the resource's
    default title and nothing else.
    """
    try:
        return _synthesize(resource, record, canonical_url, base_url, site_name)
    except Exception as exc:
        logger.warning("Metadata synthesis failed for %s %s: %s", resource.name, record.id, exc)
        return PageMetadata(title=resource.default_title, canonical_url=canonical_url)
