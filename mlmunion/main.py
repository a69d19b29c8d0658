import logging
import logging.config
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from mlmunion.config import get_settings
from mlmunion.dependencies import limiter
from mlmunion.routers.content import router as content_router
from mlmunion.routers.sitemap import router as sitemap_router
from mlmunion.services.store import ContentStore, create_client

logging.config.dictConfig(
    {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {
                "format": '{"time": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", "message": "%(message)s"}',
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "json",
            },
        },
        "root": {"level": "INFO", "handlers": ["console"]},
    }
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    if not settings.supabase_url:
        logger.warning("SUPABASE_URL is not set; every store query will fail")
    store = ContentStore(
        create_client(settings.supabase_url, settings.supabase_key, settings.store_timeout)
    )
    app.state.store = store
    try:
        yield
    finally:
        await store.aclose()


app = FastAPI(
    title="MLM Union – Public Site API",
    description="Canonical content pages, listings and sitemaps for the MLM Union directory.",
    version="1.0.0",
    lifespan=lifespan,
)

# Rate-limiting state
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception for %s", request.url)
    return JSONResponse(status_code=500, content={"detail": "An unexpected error occurred."})


@app.get("/", summary="Health check")
async def root() -> dict:
    return {"message": "MLM Union site API is running"}


# Sitemaps first: the content router ends with a single-segment catch-all
app.include_router(sitemap_router)
app.include_router(content_router)
