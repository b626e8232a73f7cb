"""Shared pytest fixtures for the songmatch test suite."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Sequence

import pytest

from songmatch.interfaces.catalog_provider import ICatalogProvider
from songmatch.models.catalog import CatalogEntry, CatalogPage
from songmatch.providers.cache.memory_cache import MemoryCacheProvider
from songmatch.services.catalog_cache import CatalogCache
from songmatch.services.collector import CatalogCollector
from songmatch.services.ranking import RankingEngine

# A scripted page is either absent (None), a list of entries, or a ready page.
ScriptedPage = CatalogPage | Sequence[CatalogEntry] | None


def make_entry(entry_id: str, lyrics: str = "", title: str | None = None) -> CatalogEntry:
    """Build a CatalogEntry with a readable default title."""
    return CatalogEntry(id=entry_id, title=title or f"Song {entry_id}", lyrics=lyrics)


class ScriptedCatalogProvider(ICatalogProvider):
    """Catalog provider that replays canned pages per artist.

    Pages beyond the script are absent.  Every call is recorded in
    ``calls`` as ``(artist_key, page)``.  ``delay`` adds an await before
    each response so tests can interleave other work with a run.  While
    ``error`` is set, every call raises it.
    """

    def __init__(
        self,
        pages: dict[str, Sequence[ScriptedPage]] | None = None,
        *,
        page_factory: Callable[[str, int], ScriptedPage] | None = None,
        delay: float = 0.0,
        error: Exception | None = None,
    ) -> None:
        self._pages = {key: list(value) for key, value in (pages or {}).items()}
        self._page_factory = page_factory
        self._delay = delay
        self.error = error
        self.calls: list[tuple[str, int]] = []

    def get_provider_name(self) -> str:
        return "scripted"

    def calls_for(self, artist_key: str) -> list[int]:
        return [page for key, page in self.calls if key == artist_key]

    async def fetch_page(self, artist_key: str, page: int) -> CatalogPage | None:
        self.calls.append((artist_key, page))
        if self._delay:
            await asyncio.sleep(self._delay)
        if self.error is not None:
            raise self.error

        if self._page_factory is not None:
            scripted = self._page_factory(artist_key, page)
        else:
            script = self._pages.get(artist_key, [])
            scripted = script[page] if page < len(script) else None

        if scripted is None or isinstance(scripted, CatalogPage):
            return scripted
        return CatalogPage(page=page, entries=tuple(scripted))


class FakeClock:
    """Manually advanced clock for TTL tests."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def empty_pages(count: int) -> list[ScriptedPage]:
    return [[] for _ in range(count)]


def build_catalog_cache(
    provider: ICatalogProvider,
    clock: FakeClock | None = None,
    ttl: float = 300.0,
) -> CatalogCache:
    backend = MemoryCacheProvider(max_size=16, ttl=ttl, timer=clock or FakeClock())
    return CatalogCache(CatalogCollector(provider), backend)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def demo_songs() -> list[CatalogEntry]:
    """A small catalog modelled on the demo profile."""
    return [
        make_entry(
            "song-001",
            "Walking down the beach at sunset\nThe waves are calling out to me\n"
            "Summer dreams are made of moments\nThat we hold in memory",
            title="Summer Dreams",
        ),
        make_entry(
            "song-002",
            "Neon signs are glowing bright\nIn the darkness of the night\n"
            "City lights will guide my way\nThrough the streets where I will stay",
            title="City Lights",
        ),
        make_entry(
            "song-003",
            "Climbing up the mountain trail\nThrough the mist and morning veil\n"
            "Standing at the summit peak\nFinding what I came to seek",
            title="Mountain High",
        ),
    ]


@pytest.fixture
def demo_provider(demo_songs: list[CatalogEntry]) -> ScriptedCatalogProvider:
    return ScriptedCatalogProvider({"demo": [demo_songs[:2], demo_songs[2:]]})


@pytest.fixture
def ranking_engine() -> RankingEngine:
    return RankingEngine(max_results=10)
