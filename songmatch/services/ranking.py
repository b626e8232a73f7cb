"""Ranking engine: (query, corpus) → ordered, capped, scored subset.

Pure and synchronous.  Every entry is scored with
:func:`~songmatch.utils.similarity.calculate_similarity`; zero scores are
dropped, the rest are sorted best-first (Python's sort is stable, so equal
scores keep corpus order) and truncated to the result cap.
"""

from __future__ import annotations

from collections.abc import Iterable

from songmatch.models.catalog import CatalogEntry
from songmatch.models.search import ScoredEntry, SearchResult
from songmatch.utils.similarity import calculate_similarity

DEFAULT_MAX_RESULTS = 10


def rank(
    query: str,
    corpus: Iterable[CatalogEntry],
    limit: int = DEFAULT_MAX_RESULTS,
) -> SearchResult:
    """Rank *corpus* against *query*.

    Args:
        query: Lyric fragment, typed or transcribed.
        corpus: Entries in first-seen order.
        limit: Maximum number of results.

    Returns:
        A :class:`SearchResult` sorted non-increasing by score, without
        zero-score entries, at most *limit* long.
    """
    if not query.strip():
        return SearchResult(query=query)

    scored: list[ScoredEntry] = []
    for entry in corpus:
        score = calculate_similarity(entry.lyrics, query)
        if score > 0:
            scored.append(ScoredEntry(entry=entry, score=score))

    scored.sort(key=lambda item: item.score, reverse=True)
    return SearchResult(query=query, entries=tuple(scored[:limit]))


class RankingEngine:
    """Binds :func:`rank` to a configured result cap."""

    def __init__(self, max_results: int = DEFAULT_MAX_RESULTS) -> None:
        self._max_results = max_results

    @property
    def max_results(self) -> int:
        return self._max_results

    def rank(self, query: str, corpus: Iterable[CatalogEntry]) -> SearchResult:
        return rank(query, corpus, limit=self._max_results)
