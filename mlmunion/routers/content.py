"""Public content routes: listing pages and canonical detail pages."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import RedirectResponse, Response

from mlmunion.config import Settings, get_settings
from mlmunion.dependencies import get_resolver, get_store, limiter
from mlmunion.models.page import DetailPage, ListingItem, ListingPage
from mlmunion.models.record import Invalid, parse_record
from mlmunion.models.resource import (
    BLOG,
    CLASSIFIEDS,
    COMPANY,
    NEWS,
    PAGE,
    SELLER,
    ResourceConfig,
)
from mlmunion.services.gate import NotFoundPage, RedirectTo, route
from mlmunion.services.metadata import strip_markup, synthesize, truncate_meta_description
from mlmunion.services.resolver import (
    CanonicalResolver,
    absolute_url,
    canonical_path,
    status_filter,
)
from mlmunion.services.store import ContentStore, StoreError

logger = logging.getLogger(__name__)

router = APIRouter()

# Canonicalisation redirects are permanent; fail-soft bounces to a listing are not
CANONICAL_REDIRECT_STATUS = 301
FALLBACK_REDIRECT_STATUS = 307

DEFAULT_PAGE_SIZE = 12
MAX_PAGE_SIZE = 50


def _page_limit() -> str:
    return get_settings().page_rate_limit


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

async def _detail(
    resource: ResourceConfig,
    requested: str,
    resolver: CanonicalResolver,
    settings: Settings,
    requested_secondary: Optional[str] = None,
    with_id: bool = False,
) -> Response | DetailPage:
    """Resolve a detail request and render, redirect or fail per resource convention."""
    if with_id:
        resolution = await resolver.resolve_by_id(resource, requested_secondary or "")
    else:
        resolution = await resolver.resolve(resource, requested)

    decision = route(
        resource, resolution, requested, requested_secondary=requested_secondary, with_id=with_id
    )

    if isinstance(decision, RedirectTo):
        logger.info(
            "Redirecting to canonical URL",
            extra={"resource": resource.name, "requested": requested, "target": decision.path},
        )
        return RedirectResponse(decision.path, status_code=CANONICAL_REDIRECT_STATUS)

    if isinstance(decision, NotFoundPage):
        if decision.fallback is not None:
            return RedirectResponse(decision.fallback, status_code=FALLBACK_REDIRECT_STATUS)
        raise HTTPException(status_code=404, detail="Not found")

    location = decision.location
    canonical_url = absolute_url(
        settings.site_url, canonical_path(resource, location.record, with_id=with_id)
    )
    metadata = synthesize(
        resource, location.record, canonical_url, settings.site_url, settings.site_name
    )
    return DetailPage(
        resource=resource.name,
        id=location.id,
        slug=location.slug,
        canonical_url=canonical_url,
        record=location.record,
        metadata=metadata,
    )


async def _listing(
    resource: ResourceConfig,
    page: int,
    page_size: int,
    store: ContentStore,
    settings: Settings,
) -> ListingPage:
    """Return one page of published records, newest first."""
    try:
        rows = await store.fetch_all(
            resource.table,
            resource.select,
            [status_filter(resource)],
            order="created_at.desc",
            limit=page_size + 1,
            offset=(page - 1) * page_size,
        )
    except StoreError as exc:
        logger.error("Listing %s failed: %s", resource.name, exc)
        raise HTTPException(status_code=502, detail="Content is temporarily unavailable.")

    items = []
    for row in rows[:page_size]:
        result = parse_record(
            row, slug_column=resource.slug_column, alt_slug_column=resource.alt_slug_column
        )
        if isinstance(result, Invalid):
            logger.warning("Skipping malformed %s row: %s", resource.name, result.reason)
            continue
        record = result.record
        items.append(
            ListingItem(
                id=record.id,
                slug=record.canonical_slug,
                title=record.title,
                url=absolute_url(settings.site_url, canonical_path(resource, record)),
                description=truncate_meta_description(
                    record.meta_description or strip_markup(record.body)
                ),
                image=record.image or resource.default_image,
                created_at=record.created_at,
            )
        )

    return ListingPage(
        resource=resource.name,
        page=page,
        page_size=page_size,
        has_more=len(rows) > page_size,
        items=items,
    )


# ---------------------------------------------------------------------------
# Listing pages
# ---------------------------------------------------------------------------

@router.get("/blog", response_model=ListingPage, summary="List published blog posts")
@limiter.limit(_page_limit)
async def list_blog(
    request: Request,
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    store: ContentStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> ListingPage:
    return await _listing(BLOG, page, page_size, store, settings)


@router.get("/news", response_model=ListingPage, summary="List published news articles")
@limiter.limit(_page_limit)
async def list_news(
    request: Request,
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    store: ContentStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> ListingPage:
    return await _listing(NEWS, page, page_size, store, settings)


@router.get("/classifieds", response_model=ListingPage, summary="List active classifieds")
@limiter.limit(_page_limit)
async def list_classifieds(
    request: Request,
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    store: ContentStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> ListingPage:
    return await _listing(CLASSIFIEDS, page, page_size, store, settings)


@router.get("/companies", response_model=ListingPage, summary="List approved companies")
@limiter.limit(_page_limit)
async def list_companies(
    request: Request,
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    store: ContentStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> ListingPage:
    return await _listing(COMPANY, page, page_size, store, settings)


@router.get(
    "/recommended-direct-sellers",
    response_model=ListingPage,
    summary="List recommended direct sellers",
)
@limiter.limit(_page_limit)
async def list_sellers(
    request: Request,
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    store: ContentStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> ListingPage:
    return await _listing(SELLER, page, page_size, store, settings)


# ---------------------------------------------------------------------------
# Detail pages
# ---------------------------------------------------------------------------

@router.get("/blog/{slug}", response_model=DetailPage, summary="Blog post by slug or id")
@limiter.limit(_page_limit)
async def blog_detail(
    request: Request,
    slug: str,
    resolver: CanonicalResolver = Depends(get_resolver),
    settings: Settings = Depends(get_settings),
) -> Response | DetailPage:
    return await _detail(BLOG, slug, resolver, settings)


@router.get("/blog/{slug}/{record_id}", response_model=DetailPage, summary="Blog post by id")
@limiter.limit(_page_limit)
async def blog_detail_by_id(
    request: Request,
    slug: str,
    record_id: str,
    resolver: CanonicalResolver = Depends(get_resolver),
    settings: Settings = Depends(get_settings),
) -> Response | DetailPage:
    return await _detail(
        BLOG, slug, resolver, settings, requested_secondary=record_id, with_id=True
    )


@router.get("/news/{slug}", response_model=DetailPage, summary="News article by slug or id")
@limiter.limit(_page_limit)
async def news_detail(
    request: Request,
    slug: str,
    resolver: CanonicalResolver = Depends(get_resolver),
    settings: Settings = Depends(get_settings),
) -> Response | DetailPage:
    return await _detail(NEWS, slug, resolver, settings)


@router.get("/news/{slug}/{record_id}", response_model=DetailPage, summary="News article by id")
@limiter.limit(_page_limit)
async def news_detail_by_id(
    request: Request,
    slug: str,
    record_id: str,
    resolver: CanonicalResolver = Depends(get_resolver),
    settings: Settings = Depends(get_settings),
) -> Response | DetailPage:
    return await _detail(
        NEWS, slug, resolver, settings, requested_secondary=record_id, with_id=True
    )


@router.get(
    "/classifieds/{slug}", response_model=DetailPage, summary="Classified listing by slug or id"
)
@limiter.limit(_page_limit)
async def classified_detail(
    request: Request,
    slug: str,
    resolver: CanonicalResolver = Depends(get_resolver),
    settings: Settings = Depends(get_settings),
) -> Response | DetailPage:
    return await _detail(CLASSIFIEDS, slug, resolver, settings)


@router.get(
    "/company/{country_slug}/{slug}",
    response_model=DetailPage,
    summary="Company profile by country and slug",
)
@limiter.limit(_page_limit)
async def company_detail(
    request: Request,
    country_slug: str,
    slug: str,
    resolver: CanonicalResolver = Depends(get_resolver),
    settings: Settings = Depends(get_settings),
) -> Response | DetailPage:
    return await _detail(COMPANY, slug, resolver, settings, requested_secondary=country_slug)


@router.get(
    "/recommended-direct-sellers/{username}",
    response_model=DetailPage,
    summary="Direct seller profile by username",
)
@limiter.limit(_page_limit)
async def seller_detail(
    request: Request,
    username: str,
    resolver: CanonicalResolver = Depends(get_resolver),
    settings: Settings = Depends(get_settings),
) -> Response | DetailPage:
    return await _detail(SELLER, username, resolver, settings)


# Registered last: catches every single-segment path not claimed above
@router.get("/{slug}", response_model=DetailPage, summary="Static content page")
@limiter.limit(_page_limit)
async def static_page(
    request: Request,
    slug: str,
    resolver: CanonicalResolver = Depends(get_resolver),
    settings: Settings = Depends(get_settings),
) -> Response | DetailPage:
    return await _detail(PAGE, slug, resolver, settings)
