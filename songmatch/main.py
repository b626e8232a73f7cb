"""songmatch FastAPI application entry point.

Wires together the catalog provider, collector, cache, and ranking engine
via dependency injection, configures structured logging, and mounts the
REST routes and the live-search WebSocket.

Also exposes ``build_components`` for CLI or scripting usage outside the
web server.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

import httpx
import structlog
import uvicorn
from fastapi import FastAPI, WebSocket

from songmatch import __version__
from songmatch.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from songmatch.api.routes import router as api_router
from songmatch.api.websocket import websocket_search
from songmatch.config.loader import load_settings
from songmatch.config.settings import Settings
from songmatch.providers.cache.memory_cache import MemoryCacheProvider
from songmatch.providers.catalog.suno_provider import SunoCatalogProvider
from songmatch.services.catalog_cache import CatalogCache
from songmatch.services.collector import CatalogCollector
from songmatch.services.ranking import RankingEngine
from songmatch.utils.logging import configure_logging, get_logger

_logger: structlog.BoundLogger = get_logger(__name__)


def build_components(
    app_settings: Settings,
    http_client: httpx.AsyncClient | None = None,
) -> dict[str, Any]:
    """Construct the pipeline components with injected dependencies.

    Parameters
    ----------
    app_settings:
        Resolved application settings.
    http_client:
        Shared HTTP client.  A new one is created when omitted; the caller
        owns closing it either way (it is returned under ``"http_client"``).

    Returns
    -------
    dict
        Components keyed by role name.
    """
    client = http_client or httpx.AsyncClient(timeout=app_settings.catalog_page_timeout)

    provider = SunoCatalogProvider(
        http_client=client,
        base_url=app_settings.catalog_base_url,
        page_timeout=app_settings.catalog_page_timeout,
    )
    collector = CatalogCollector(
        provider,
        max_consecutive_empty=app_settings.max_consecutive_empty_pages,
        max_pages=app_settings.max_pages,
    )
    cache = MemoryCacheProvider(
        max_size=app_settings.cache_max_size,
        ttl=app_settings.cache_ttl_seconds,
    )

    return {
        "settings": app_settings,
        "http_client": client,
        "catalog_provider": provider,
        "catalog_cache": CatalogCache(collector, cache),
        "ranking_engine": RankingEngine(max_results=app_settings.max_search_results),
    }


def create_app(app_settings: Settings | None = None) -> FastAPI:
    """Build the FastAPI application.

    Components are created in the lifespan handler so the HTTP client is
    opened and closed with the server.
    """
    resolved = app_settings or load_settings()

    @asynccontextmanager
    async def _lifespan(application: FastAPI):  # noqa: ANN202
        components = build_components(resolved)
        for key, value in components.items():
            setattr(application.state, key, value)

        _logger.info(
            "app_startup",
            version=__version__,
            catalog=resolved.catalog_base_url,
            cache_ttl=resolved.cache_ttl_seconds,
        )
        try:
            yield
        finally:
            await components["http_client"].aclose()
            _logger.info("app_shutdown")

    application = FastAPI(title="songmatch", version=__version__, lifespan=_lifespan)

    application.add_middleware(ErrorHandlingMiddleware)
    application.add_middleware(RequestLoggingMiddleware)
    configure_cors(application)

    application.include_router(api_router)

    @application.websocket("/ws/search")
    async def _ws_search(websocket: WebSocket) -> None:
        await websocket_search(websocket)

    return application


def main() -> None:
    """Run the API server with uvicorn."""
    settings = load_settings()
    configure_logging(
        log_level=settings.log_level,
        json_output=(settings.app_env == "production"),
    )
    uvicorn.run(create_app(settings), host=settings.app_host, port=settings.app_port)


if __name__ == "__main__":
    main()
