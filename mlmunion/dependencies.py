"""FastAPI dependencies shared by the routers."""

from fastapi import Depends, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from mlmunion.config import Settings, get_settings
from mlmunion.services.resolver import CanonicalResolver
from mlmunion.services.sitemap import SitemapEmitter
from mlmunion.services.store import ContentStore

limiter = Limiter(key_func=get_remote_address)


def get_store(request: Request) -> ContentStore:
    """Return the store constructed at application startup."""
    return request.app.state.store


def get_resolver(store: ContentStore = Depends(get_store)) -> CanonicalResolver:
    return CanonicalResolver(store)


def get_emitter(
    store: ContentStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> SitemapEmitter:
    return SitemapEmitter(store, settings.site_url)
