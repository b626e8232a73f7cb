"""Catalog domain models: entries, pages, corpora and cache records.

All models use frozen config.  A :data:`Corpus` is a plain tuple of
:class:`CatalogEntry` so that every snapshot handed to listeners (and to
the ranking worker thread) is immutable.  The collector builds a new tuple
for each snapshot instead of mutating a shared list.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class CatalogEntry(BaseModel):
    """One song in an artist's catalog.

    Produced only by :func:`songmatch.models.raw.entry_from_raw`; malformed
    or missing remote fields are defaulted there.
    """

    model_config = ConfigDict(frozen=True)

    id: str                             # Remote clip id, unique within a catalog
    title: str = "Untitled"
    lyrics: str = ""                    # Prompt text, or the generated description
    audio_url: str | None = None
    image_url: str | None = None        # Large image preferred over the standard one
    tags: str = ""                      # Comma-separated style tags


# Deduplicated, first-seen-ordered collection of entries for one artist.
Corpus = tuple[CatalogEntry, ...]


class CatalogPage(BaseModel):
    """A single page of catalog entries returned by a catalog provider."""

    model_config = ConfigDict(frozen=True)

    page: int = Field(ge=0)
    entries: tuple[CatalogEntry, ...] = ()
    # Raw candidates dropped at the boundary (no id, not an object).
    skipped: int = Field(default=0, ge=0)

    @property
    def is_empty(self) -> bool:
        """True when the remote returned no candidates at all."""
        return not self.entries and self.skipped == 0


class CacheRecord(BaseModel):
    """A memoized corpus for one artist key.

    ``created_at`` is taken from the cache's clock (monotonic seconds by
    default), not wall time.
    """

    model_config = ConfigDict(frozen=True)

    artist_key: str
    corpus: tuple[CatalogEntry, ...] = ()
    created_at: float

    def age(self, now: float) -> float:
        return now - self.created_at


class CacheStats(BaseModel):
    """Summary of the catalog cache contents."""

    model_config = ConfigDict(frozen=True)

    size: int = 0
    artist_keys: list[str] = Field(default_factory=list)
