"""Sitemap generation: one urlset per content type plus a sitemap index."""

import logging
from datetime import date, datetime, timezone
from typing import Dict, Iterable, List, NamedTuple, Optional
from xml.sax.saxutils import escape

from mlmunion.models.record import ContentRecord, Invalid, parse_record
from mlmunion.models.resource import BLOG, CLASSIFIEDS, COMPANY, NEWS, ResourceConfig
from mlmunion.services.resolver import absolute_url, canonical_path, status_filter
from mlmunion.services.store import ContentStore

logger = logging.getLogger(__name__)

SITEMAP_NS = "http://www.sitemaps.org/schemas/sitemap/0.9"
_XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'
_STYLESHEET = '<?xml-stylesheet type="text/xsl" href="/sitemap.xsl"?>'

# escape() covers & < >; quotes are added for attribute-safe output
_QUOTE_ENTITIES = {"'": "&apos;", '"': "&quot;"}

# (path, changefreq, priority) of the hand-written pages
STATIC_PAGES = (
    ("/", "daily", "1.0"),
    ("/companies", "weekly", "0.9"),
    ("/classifieds", "daily", "0.9"),
    ("/blog", "daily", "0.9"),
    ("/news", "daily", "0.9"),
    ("/direct-sellers", "weekly", "0.8"),
    ("/contact", "monthly", "0.7"),
    ("/faq", "monthly", "0.7"),
)

# Sitemap name → content type it lists ("static" has no table)
SITEMAP_RESOURCES: Dict[str, Optional[ResourceConfig]] = {
    "static": None,
    "blogs": BLOG,
    "news": NEWS,
    "classifieds": CLASSIFIEDS,
    "companies": COMPANY,
}


class SitemapEntry(NamedTuple):
    url: str
    lastmod: str
    changefreq: str
    priority: str


def escape_xml(value: str) -> str:
    """Entity-escape ``& < > ' "`` in *value*."""
    return escape(value, _QUOTE_ENTITIES)


def today() -> date:
    return datetime.now(timezone.utc).date()


def lastmod_for(record: ContentRecord, fallback: date) -> str:
    """Return the record's last-modified date as ``YYYY-MM-DD``.

    Uses the update timestamp, then the creation timestamp, then *fallback*.
    """
    stamp = record.updated_at or record.created_at
    if stamp is None:
        return fallback.isoformat()
    if stamp.tzinfo is not None:
        stamp = stamp.astimezone(timezone.utc)
    return stamp.date().isoformat()


def build_urlset(entries: Iterable[SitemapEntry]) -> str:
    lines = [
        _XML_DECLARATION,
        _STYLESHEET,
        f'<urlset xmlns="{SITEMAP_NS}">',
    ]
    for entry in entries:
        lines.extend(
            [
                "  <url>",
                f"    <loc>{escape_xml(entry.url)}</loc>",
                f"    <lastmod>{escape_xml(entry.lastmod)}</lastmod>",
                f"    <changefreq>{escape_xml(entry.changefreq)}</changefreq>",
                f"    <priority>{escape_xml(entry.priority)}</priority>",
                "  </url>",
            ]
        )
    lines.append("</urlset>")
    return "\n".join(lines)


def build_index(locations: Iterable[str], lastmod: str) -> str:
    lines = [
        _XML_DECLARATION,
        _STYLESHEET,
        f'<sitemapindex xmlns="{SITEMAP_NS}">',
    ]
    for loc in locations:
        lines.extend(
            [
                "  <sitemap>",
                f"    <loc>{escape_xml(loc)}</loc>",
                f"    <lastmod>{escape_xml(lastmod)}</lastmod>",
                "  </sitemap>",
            ]
        )
    lines.append("</sitemapindex>")
    return "\n".join(lines)


def error_document(message: str) -> str:
    """Minimal well-formed XML body reporting a generation failure."""
    return f"{_XML_DECLARATION}<error>{escape_xml(message)}</error>"


class SitemapEmitter:
    """Render the sitemap documents from the store's published rows."""

    def __init__(self, store: ContentStore, base_url: str):
        self._store = store
        self._base_url = base_url.rstrip("/")

    async def emit(self, kind: str) -> str:
        """Return the urlset document for *kind* (a key of ``SITEMAP_RESOURCES``).

        Raises:
            KeyError: for an unknown sitemap name.
            StoreError: when the underlying query fails.
        """
        resource = SITEMAP_RESOURCES[kind]
        current = today()
        if resource is None:
            entries = [
                SitemapEntry(absolute_url(self._base_url, path), current.isoformat(), freq, prio)
                for path, freq, prio in STATIC_PAGES
            ]
        else:
            entries = await self._entries(resource, current)
        logger.info("Generated %s sitemap with %d entries", kind, len(entries))
        return build_urlset(entries)

    def emit_index(self) -> str:
        locations = [f"{self._base_url}/sitemap-{kind}.xml" for kind in SITEMAP_RESOURCES]
        return build_index(locations, today().isoformat())

    async def _entries(self, resource: ResourceConfig, current: date) -> List[SitemapEntry]:
        entries: List[SitemapEntry] = []
        async for row in self._store.iter_all(
            resource.table, resource.sitemap_select, [status_filter(resource)]
        ):
            result = parse_record(
                row, slug_column=resource.slug_column, alt_slug_column=resource.alt_slug_column
            )
            if isinstance(result, Invalid):
                logger.debug("Sitemap: skipping %s row – %s", resource.name, result.reason)
                continue
            record = result.record
            entries.append(
                SitemapEntry(
                    url=absolute_url(self._base_url, canonical_path(resource, record)),
                    lastmod=lastmod_for(record, current),
                    changefreq=resource.changefreq,
                    priority=resource.priority,
                )
            )
        return entries
