"""FastAPI routes for the songmatch API.

# ─── API ROUTE MAP ────────────────────────────────────────────────────
#
# Endpoint                               Method  Description
# ─────────────────────────────────────────────────────────────────────
# /api/v1/search                         POST    Rank an artist's songs for a lyric fragment
# /api/v1/artists/{artist}/validate      GET     Does the artist have any songs?
# /api/v1/cache/stats                    GET     Cached artist keys
# /api/v1/cache                          DELETE  Evict every cached catalog
# /api/v1/cache/{artist}                 DELETE  Evict one artist's catalog
# /api/v1/health                         GET     Health check
#
# Live, keystroke-level search runs over the /ws/search WebSocket instead
# (see songmatch.api.websocket).
# ──────────────────────────────────────────────────────────────────────

Service dependencies are resolved from ``app.state`` (populated in
``songmatch.main``) via ``Annotated[..., Depends(...)]`` aliases.
"""

from __future__ import annotations

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request

from songmatch import __version__
from songmatch.api.schemas import (
    ArtistValidationResponse,
    CacheClearResponse,
    CacheStatsResponse,
    HealthResponse,
    SearchRequest,
    SearchResponse,
    matches_from_result,
)
from songmatch.services.catalog_cache import CatalogCache
from songmatch.services.ranking import RankingEngine
from songmatch.utils.logging import get_logger
from songmatch.utils.text_normalizer import normalize_artist_key

_logger: structlog.BoundLogger = get_logger(__name__)

router = APIRouter(prefix="/api/v1")


def _get_catalog_cache(request: Request) -> CatalogCache:
    """Resolve the shared CatalogCache from app state."""
    return request.app.state.catalog_cache


def _get_ranking_engine(request: Request) -> RankingEngine:
    """Resolve the shared RankingEngine from app state."""
    return request.app.state.ranking_engine


CacheDep = Annotated[CatalogCache, Depends(_get_catalog_cache)]
RankerDep = Annotated[RankingEngine, Depends(_get_ranking_engine)]


@router.post(
    "/search",
    response_model=SearchResponse,
    summary="Rank an artist's songs against a lyric fragment",
)
async def search_songs(body: SearchRequest, catalog_cache: CacheDep, ranker: RankerDep) -> SearchResponse:
    """Load (or reuse) the artist's catalog and return the best matches.

    Raises 400 when the query or artist is blank.  A failed catalog
    harvest surfaces as a 502 via the error-handling middleware.
    """
    if not body.query.strip() or not normalize_artist_key(body.artist):
        raise HTTPException(status_code=400, detail="Missing query or artist")

    corpus = await catalog_cache.fetch_for_artist(body.artist)
    if not corpus:
        return SearchResponse(
            artist=body.artist,
            query=body.query,
            message=f'No songs found for artist "{body.artist.strip()}".',
        )

    result = ranker.rank(body.query, corpus)
    _logger.info(
        "search_complete",
        artist=normalize_artist_key(body.artist),
        corpus_size=len(corpus),
        matches=len(result),
    )
    return SearchResponse(
        artist=body.artist,
        query=body.query,
        results=matches_from_result(result),
        total_matches=len(result),
        stats=result.stats(),
    )


@router.get(
    "/artists/{artist}/validate",
    response_model=ArtistValidationResponse,
    summary="Check whether an artist has any songs",
)
async def validate_artist(artist: str, catalog_cache: CacheDep) -> ArtistValidationResponse:
    valid = await catalog_cache.validate_artist(artist)
    return ArtistValidationResponse(artist=artist, valid=valid)


@router.get("/cache/stats", response_model=CacheStatsResponse, summary="Catalog cache statistics")
async def cache_stats(catalog_cache: CacheDep) -> CacheStatsResponse:
    stats = await catalog_cache.cache_stats()
    return CacheStatsResponse(size=stats.size, artist_keys=stats.artist_keys)


@router.delete("/cache", response_model=CacheClearResponse, summary="Evict every cached catalog")
async def clear_cache(catalog_cache: CacheDep) -> CacheClearResponse:
    await catalog_cache.clear()
    return CacheClearResponse(cleared="*")


@router.delete(
    "/cache/{artist}",
    response_model=CacheClearResponse,
    summary="Evict one artist's cached catalog",
)
async def clear_artist_cache(artist: str, catalog_cache: CacheDep) -> CacheClearResponse:
    await catalog_cache.clear(artist)
    return CacheClearResponse(cleared=normalize_artist_key(artist))


@router.get("/health", response_model=HealthResponse, summary="Application health check")
async def health_check() -> HealthResponse:
    return HealthResponse(status="healthy", version=__version__)
