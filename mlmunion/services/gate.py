"""Redirect decision for a resolved (or unresolved) detail request."""

from typing import NamedTuple, Optional, Union

from mlmunion.models.resource import ResourceConfig
from mlmunion.services.resolver import ResolvedLocation, canonical_path
from mlmunion.services.slugs import country_slug


class Render(NamedTuple):
    location: ResolvedLocation


class RedirectTo(NamedTuple):
    path: str


class NotFoundPage(NamedTuple):
    # Listing page to send the visitor to; None means answer with a 404
    fallback: Optional[str]


Decision = Union[Render, RedirectTo, NotFoundPage]


def route(
    resource: ResourceConfig,
    resolution: Optional[ResolvedLocation],
    requested: str,
    requested_secondary: Optional[str] = None,
    with_id: bool = False,
) -> Decision:
    """Decide whether to render, redirect to the canonical URL, or give up.

    *requested* is compared with ``resolution.slug``, which already falls back
    to the identifier for records without a slug.  The secondary segment (the
    country for companies, the id on ``/<slug>/<id>`` routes) is checked on
    its own.
    """
    if resolution is None:
        return NotFoundPage(fallback=resource.index_path if resource.fail_soft else None)

    record = resolution.record
    target = canonical_path(resource, record, with_id=with_id)

    if requested != resolution.slug:
        return RedirectTo(target)

    if resource.secondary == "country":
        if requested_secondary != country_slug(record.country_name or record.country):
            return RedirectTo(target)
    elif with_id and requested_secondary != resolution.id:
        return RedirectTo(target)

    return Render(resolution)
