"""Pydantic request/response schemas for the songmatch API.

Request schemas end with "Request", response schemas with "Response".
FastAPI uses them for validation, serialization and the OpenAPI docs.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from songmatch.models.search import CoordinatorSnapshot, SearchResult, SearchStats


class SearchRequest(BaseModel):
    """Lyric search against one artist's catalog."""

    query: str = Field(default="", max_length=2000, description="Lyric fragment, typed or transcribed")
    artist: str = Field(default="", max_length=200, description="Profile name on the catalog platform")


class SongMatch(BaseModel):
    """A single ranked song in a search response."""

    id: str
    title: str
    lyrics: str
    audio_url: str | None = None
    image_url: str | None = None
    tags: str = ""
    match_score: float = Field(ge=0.0, le=1.0)


class SearchResponse(BaseModel):
    """Ranked matches for a search request."""

    artist: str
    query: str
    results: list[SongMatch] = Field(default_factory=list)
    total_matches: int = 0
    stats: SearchStats = Field(default_factory=SearchStats)
    message: str | None = None


class ArtistValidationResponse(BaseModel):
    artist: str
    valid: bool


class CacheStatsResponse(BaseModel):
    size: int
    artist_keys: list[str] = Field(default_factory=list)


class CacheClearResponse(BaseModel):
    cleared: str = Field(description='Artist key that was evicted, or "*" for everything')


class HealthResponse(BaseModel):
    """Application health check response."""

    status: str
    version: str


class ErrorResponse(BaseModel):
    """Standard error response body."""

    error: str
    detail: str | None = None


class SessionMessage(BaseModel):
    """A client → server WebSocket message.

    ``type`` is one of ``set_artist``, ``set_query`` or ``clear``.
    """

    type: str
    artist: str | None = None
    query: str | None = None


class SessionUpdate(BaseModel):
    """A server → client WebSocket message carrying the coordinator state."""

    type: str = "state"
    state: CoordinatorSnapshot


def matches_from_result(result: SearchResult) -> list[SongMatch]:
    """Flatten scored entries into the API's song representation."""
    return [
        SongMatch(
            id=item.entry.id,
            title=item.entry.title,
            lyrics=item.entry.lyrics,
            audio_url=item.entry.audio_url,
            image_url=item.entry.image_url,
            tags=item.entry.tags,
            match_score=item.score,
        )
        for item in result.entries
    ]
