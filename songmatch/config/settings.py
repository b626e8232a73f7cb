"""Application settings loaded from environment variables via pydantic-settings.

Sources, in priority order:

  1. Environment variables - e.g. CACHE_TTL_SECONDS=60 (always wins)
  2. .env file in the working directory
  3. config/config.yaml section defaults (see :mod:`songmatch.config.loader`)
  4. The field defaults below

Field ``cache_ttl_seconds`` maps to env var ``CACHE_TTL_SECONDS``.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """songmatch application settings."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # === Remote catalog ===
    catalog_base_url: str = "https://studio-api.prod.suno.com"
    catalog_page_timeout: float = Field(default=15.0, gt=0)  # seconds per page, then "empty"
    max_consecutive_empty_pages: int = Field(default=10, ge=1)
    # None = no ceiling; collection ends only on a run of empty pages.
    max_pages: int | None = Field(default=None, ge=1)

    # === Catalog cache ===
    cache_ttl_seconds: float = Field(default=300.0, gt=0)
    cache_max_size: int = Field(default=256, ge=1)

    # === Search ===
    max_search_results: int = Field(default=10, ge=1)
    artist_debounce_ms: int = Field(default=500, ge=0)
    query_defer_ms: int = Field(default=0, ge=0)

    # === App Config ===
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    app_env: str = "development"
    log_level: str = "INFO"

    @property
    def artist_debounce_seconds(self) -> float:
        return self.artist_debounce_ms / 1000.0

    @property
    def query_defer_seconds(self) -> float:
        return self.query_defer_ms / 1000.0
