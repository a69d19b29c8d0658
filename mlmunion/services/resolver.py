"""Canonical slug/id resolution for the public detail routes.

A path segment is looked up by slug first.  When that misses and the segment
has the shape of a record identifier, the lookup is repeated by id.  Either
way the canonical slug of the row found is ``slug or id``; every URL the site
builds goes through :func:`canonical_path` so that the redirect check always
compares against the same value.
"""

import logging
from typing import List, NamedTuple, Optional
from urllib.parse import quote

from mlmunion.models.record import ContentRecord, Invalid, parse_record
from mlmunion.models.resource import ResourceConfig
from mlmunion.services.slugs import country_slug, looks_like_id
from mlmunion.services.store import ContentStore, Filter, StoreError, eq

logger = logging.getLogger(__name__)


class ResolvedLocation(NamedTuple):
    id: str
    slug: str
    path: str
    record: ContentRecord


def canonical_path(resource: ResourceConfig, record: ContentRecord, with_id: bool = False) -> str:
    """Return the site-relative canonical path of *record*.

    *with_id* selects the ``/<slug>/<id>`` form offered by resources whose
    secondary segment is the identifier.
    """
    slug = quote(record.canonical_slug, safe="")
    if resource.secondary == "country":
        country = country_slug(record.country_name or record.country)
        return f"{resource.path}/{country}/{slug}"
    if with_id and resource.secondary == "id":
        return f"{resource.path}/{slug}/{quote(record.id, safe='')}"
    return f"{resource.path}/{slug}"


def absolute_url(base_url: str, path: str) -> str:
    return f"{base_url.rstrip('/')}{path or '/'}"


def status_filter(resource: ResourceConfig) -> Filter:
    return eq(resource.status_column, resource.status_value)


class CanonicalResolver:
    """Resolve slug-or-id path segments to published records."""

    def __init__(self, store: ContentStore):
        self._store = store

    async def resolve(self, resource: ResourceConfig, segment: str) -> Optional[ResolvedLocation]:
        """Return the canonical location for *segment*, or *None* when not found.

        Store failures are reported as not found so that a broken query never
        exposes a half-rendered page.
        """
        if not segment:
            return None

        record = await self._lookup(resource, [eq(resource.slug_column, segment)])
        if record is None and resource.alt_slug_column:
            record = await self._lookup(resource, [eq(resource.alt_slug_column, segment)])
        if record is None and looks_like_id(segment):
            logger.debug("Slug miss for %s '%s', retrying by id", resource.name, segment)
            record = await self._lookup(resource, [eq("id", segment)])
        return self._locate(resource, record)

    async def resolve_by_id(
        self, resource: ResourceConfig, record_id: str
    ) -> Optional[ResolvedLocation]:
        """Resolve an explicit identifier segment (``/<slug>/<id>`` routes)."""
        if not looks_like_id(record_id):
            return None
        record = await self._lookup(resource, [eq("id", record_id)])
        return self._locate(resource, record)

    async def _lookup(
        self, resource: ResourceConfig, filters: List[Filter]
    ) -> Optional[ContentRecord]:
        filters = filters + [status_filter(resource)]
        try:
            row = await self._store.fetch_one(resource.table, resource.select, filters)
        except StoreError as exc:
            logger.warning("Lookup on %s failed, treating as not found: %s", resource.name, exc)
            return None
        if row is None:
            return None

        result = parse_record(
            row, slug_column=resource.slug_column, alt_slug_column=resource.alt_slug_column
        )
        if isinstance(result, Invalid):
            logger.warning("Discarding malformed %s row: %s", resource.name, result.reason)
            return None
        return result.record

    @staticmethod
    def _locate(
        resource: ResourceConfig, record: Optional[ContentRecord]
    ) -> Optional[ResolvedLocation]:
        if record is None:
            return None
        return ResolvedLocation(
            id=record.id,
            slug=record.canonical_slug,
            path=canonical_path(resource, record),
            record=record,
        )
