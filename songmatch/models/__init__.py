"""songmatch domain models - re-exports all public model classes.

    - catalog.py - catalog entries, pages, corpora and cache records
    - search.py  - scored entries, ranked results and coordinator state
    - raw.py     - loosely-typed remote payload and the boundary extraction
"""

from __future__ import annotations

from songmatch.models.catalog import (
    CacheRecord,
    CacheStats,
    CatalogEntry,
    CatalogPage,
    Corpus,
)
from songmatch.models.raw import RawClip, RawClipMetadata, entry_from_raw, extract_clips
from songmatch.models.search import (
    CoordinatorSnapshot,
    ScoredEntry,
    SearchResult,
    SearchState,
    SearchStats,
)

__all__ = [
    "CacheRecord",
    "CacheStats",
    "CatalogEntry",
    "CatalogPage",
    "CoordinatorSnapshot",
    "Corpus",
    "RawClip",
    "RawClipMetadata",
    "ScoredEntry",
    "SearchResult",
    "SearchState",
    "SearchStats",
    "entry_from_raw",
    "extract_clips",
]
