"""Sitemap endpoints: ``/sitemap.xml`` index and one document per content type."""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response

from mlmunion.config import Settings, get_settings
from mlmunion.dependencies import get_emitter, limiter
from mlmunion.services.sitemap import SitemapEmitter, error_document

logger = logging.getLogger(__name__)

router = APIRouter()

XML_MEDIA_TYPE = "application/xml; charset=utf-8"


def _sitemap_limit() -> str:
    return get_settings().sitemap_rate_limit


def _xml(body: str, settings: Settings) -> Response:
    return Response(
        content=body,
        media_type=XML_MEDIA_TYPE,
        headers={"Cache-Control": settings.sitemap_cache_control},
    )


async def _urlset(kind: str, emitter: SitemapEmitter, settings: Settings) -> Response:
    """Render one sitemap, or an XML error document with status 500."""
    try:
        body = await emitter.emit(kind)
    except Exception:
        logger.exception("Error generating %s sitemap", kind)
        return Response(
            content=error_document(f"Failed to generate {kind} sitemap"),
            status_code=500,
            media_type=XML_MEDIA_TYPE,
        )
    return _xml(body, settings)


@router.get("/sitemap.xml", summary="Sitemap index")
@limiter.limit(_sitemap_limit)
async def sitemap_index(
    request: Request,
    emitter: SitemapEmitter = Depends(get_emitter),
    settings: Settings = Depends(get_settings),
) -> Response:
    return _xml(emitter.emit_index(), settings)


@router.get("/sitemap-static.xml", summary="Static pages sitemap")
@limiter.limit(_sitemap_limit)
async def sitemap_static(
    request: Request,
    emitter: SitemapEmitter = Depends(get_emitter),
    settings: Settings = Depends(get_settings),
) -> Response:
    return await _urlset("static", emitter, settings)


@router.get("/sitemap-blogs.xml", summary="Blog posts sitemap")
@limiter.limit(_sitemap_limit)
async def sitemap_blogs(
    request: Request,
    emitter: SitemapEmitter = Depends(get_emitter),
    settings: Settings = Depends(get_settings),
) -> Response:
    return await _urlset("blogs", emitter, settings)


@router.get("/sitemap-news.xml", summary="News articles sitemap")
@limiter.limit(_sitemap_limit)
async def sitemap_news(
    request: Request,
    emitter: SitemapEmitter = Depends(get_emitter),
    settings: Settings = Depends(get_settings),
) -> Response:
    return await _urlset("news", emitter, settings)


@router.get("/sitemap-classifieds.xml", summary="Classifieds sitemap")
@limiter.limit(_sitemap_limit)
async def sitemap_classifieds(
    request: Request,
    emitter: SitemapEmitter = Depends(get_emitter),
    settings: Settings = Depends(get_settings),
) -> Response:
    return await _urlset("classifieds", emitter, settings)


@router.get("/sitemap-companies.xml", summary="Companies sitemap")
@limiter.limit(_sitemap_limit)
async def sitemap_companies(
    request: Request,
    emitter: SitemapEmitter = Depends(get_emitter),
    settings: Settings = Depends(get_settings),
) -> Response:
    return await _urlset("companies", emitter, settings)
