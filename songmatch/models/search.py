"""Search models: scored entries, ranked results and coordinator state.

``SearchResult`` objects are recomputed for every (query, corpus) pairing
and superseded results are discarded, never merged.  ``CoordinatorSnapshot``
is the read-only view the search coordinator publishes to its listeners
(the WebSocket session, the CLI progress printer, tests).
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from songmatch.models.catalog import CatalogEntry


class SearchState(str, Enum):
    """States of the search coordinator.

    IDLE → COMPUTING → SETTLED, and back to COMPUTING on any input change.
    There is no terminal state.
    """

    IDLE = "IDLE"              # No query
    COMPUTING = "COMPUTING"    # Query present, recompute in flight
    SETTLED = "SETTLED"        # Result published for the latest inputs


class ScoredEntry(BaseModel):
    """A catalog entry paired with its similarity score for one query."""

    model_config = ConfigDict(frozen=True)

    entry: CatalogEntry
    score: float = Field(ge=0.0, le=1.0)


class SearchStats(BaseModel):
    """Aggregate statistics over a result list (scores as whole percentages)."""

    model_config = ConfigDict(frozen=True)

    count: int = 0
    avg_score: int = 0
    top_score: int = 0


class SearchResult(BaseModel):
    """Ranked matches for one query, best first, capped in length."""

    model_config = ConfigDict(frozen=True)

    query: str = ""
    entries: tuple[ScoredEntry, ...] = ()

    def __len__(self) -> int:
        return len(self.entries)

    @property
    def is_empty(self) -> bool:
        return not self.entries

    def stats(self) -> SearchStats:
        if not self.entries:
            return SearchStats()

        scores = [item.score for item in self.entries]
        return SearchStats(
            count=len(scores),
            avg_score=round(sum(scores) / len(scores) * 100),
            top_score=round(max(scores) * 100),
        )


class CoordinatorSnapshot(BaseModel):
    """Everything a UI needs to render the current search state."""

    model_config = ConfigDict(frozen=True)

    artist: str = ""
    query: str = ""
    state: SearchState = SearchState.IDLE
    results: SearchResult = Field(default_factory=SearchResult)
    is_loading: bool = False
    error: str | None = None
    song_count: int = 0
