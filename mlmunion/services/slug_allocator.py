"""Unique slug allocation for records whose title changes.

:func:`regenerate_slug` is the entry point for the admin edit path, which
calls it after saving a new title.

The check-then-write sequence runs without a lock, so two concurrent edits
can still end up with the same slug.  Edits go through the admin screens
only, where that race has not mattered in practice.
"""

import logging
from typing import List, Optional

from mlmunion.models.resource import ResourceConfig
from mlmunion.services.slugs import normalize
from mlmunion.services.store import ContentStore, Filter, eq, neq

logger = logging.getLogger(__name__)

# Numeric suffixes tried after the bare slug before giving up
MAX_SLUG_ATTEMPTS = 100


class SlugAllocationError(ValueError):
    """No usable slug could be derived for a title."""


async def _slug_taken(
    store: ContentStore,
    resource: ResourceConfig,
    candidate: str,
    exclude_id: Optional[str],
) -> bool:
    filters: List[Filter] = [eq(resource.slug_column, candidate)]
    if exclude_id:
        filters.append(neq("id", exclude_id))
    return await store.fetch_one(resource.table, "id", filters) is not None


async def allocate_unique_slug(
    store: ContentStore,
    resource: ResourceConfig,
    title: str,
    exclude_id: Optional[str] = None,
    max_attempts: int = MAX_SLUG_ATTEMPTS,
) -> str:
    """Return a slug for *title* that no other row of *resource* uses.

    ``acme`` is tried first, then ``acme-1``, ``acme-2`` … up to
    *max_attempts* suffixes.  *exclude_id* is the record being edited, whose
    own current slug does not count as a collision.

    Raises:
        SlugAllocationError: if *title* has no sluggable characters or every
            candidate is taken.
        StoreError: when a collision check fails.
    """
    base = normalize(title)
    if not base:
        raise SlugAllocationError(f"Title {title!r} does not produce a slug")

    for counter in range(max_attempts + 1):
        candidate = f"{base}-{counter}" if counter else base
        if not await _slug_taken(store, resource, candidate, exclude_id):
            return candidate
        logger.debug("Slug '%s' already used in %s", candidate, resource.table)

    raise SlugAllocationError(
        f"No free slug for {base!r} in {resource.table} after {max_attempts} attempts"
    )


async def regenerate_slug(
    store: ContentStore,
    resource: ResourceConfig,
    record_id: str,
    title: str,
) -> str:
    """Assign a fresh unique slug derived from *title* to record *record_id*."""
    slug = await allocate_unique_slug(store, resource, title, exclude_id=record_id)
    await store.update(resource.table, record_id, {resource.slug_column: slug})
    logger.info(
        "Slug regenerated", extra={"table": resource.table, "id": record_id, "slug": slug}
    )
    return slug
