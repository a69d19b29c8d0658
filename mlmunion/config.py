"""Application settings, read from the environment (or a local ``.env`` file)."""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SITE_URL = "https://www.mlmunion.in"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Base for every absolute canonical URL and sitemap <loc>
    site_url: str = DEFAULT_SITE_URL
    site_name: str = "MLM Union"

    # PostgREST endpoint of the managed database
    supabase_url: str = ""
    supabase_key: str = ""
    store_timeout: float = 10.0

    sitemap_cache_control: str = "public, s-maxage=3600, stale-while-revalidate=86400"

    # slowapi limit strings
    page_rate_limit: str = "120/minute"
    sitemap_rate_limit: str = "30/minute"

    @field_validator("site_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.strip().rstrip("/") or DEFAULT_SITE_URL


@lru_cache
def get_settings() -> Settings:
    return Settings()
