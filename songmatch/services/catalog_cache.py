"""Time-bounded catalog cache that fronts the collector.

Repeated queries against the same artist within the freshness window are
served from memory with no network activity and no snapshot callbacks.  On
a miss the full collection run is delegated to :class:`CatalogCollector`
and its final corpus is stored, replacing any previous record for the key.

The cache is an explicit object: build one per process (see
``songmatch.main`` and ``songmatch.cli.search``) and pass it to every
search coordinator that should share it.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog

from songmatch.interfaces.cache_provider import ICacheProvider
from songmatch.models.catalog import CacheRecord, CacheStats, Corpus
from songmatch.services.collector import CatalogCollector, SnapshotCallback
from songmatch.utils.errors import CatalogLoadError, CollectionCancelledError
from songmatch.utils.logging import get_logger
from songmatch.utils.text_normalizer import normalize_artist_key


class CatalogCache:
    """Memoizes collected corpora per normalized artist key.

    Parameters
    ----------
    collector:
        Performs the actual paginated harvest on a cache miss.
    cache:
        Backend holding :class:`CacheRecord` objects; responsible for
        expiring records older than its time-to-live.
    """

    def __init__(self, collector: CatalogCollector, cache: ICacheProvider) -> None:
        self._collector = collector
        self._cache = cache
        # One lock per key serializes check-then-collect-then-store so two
        # callers for the same artist never run two collections.  Each entry
        # carries a count of holders and waiters and is dropped at zero.
        self._locks: dict[str, tuple[asyncio.Lock, int]] = {}
        self._logger: structlog.BoundLogger = get_logger(__name__)

    async def fetch_for_artist(
        self,
        artist: str,
        on_snapshot: SnapshotCallback | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> Corpus:
        """Return the corpus for *artist*, collecting it on a cache miss.

        Parameters
        ----------
        artist:
            Raw artist identifier; normalized before lookup.
        on_snapshot:
            Forwarded to the collector on a miss.  Not called on a hit.
        cancel_event:
            Forwarded to the collector; a cancelled run stores nothing.

        Returns
        -------
        Corpus
            The cached or freshly collected corpus.

        Raises
        ------
        CatalogLoadError
            If the collection run fails unexpectedly.
        CollectionCancelledError
            If *cancel_event* was set before the run finished.
        """
        key = normalize_artist_key(artist)
        if not key:
            return ()

        async with self._key_lock(key):
            record = await self._cache.get(key)
            if record is not None:
                self._logger.info("catalog_cache_hit", artist=key, entries=len(record.corpus))
                return record.corpus

            self._logger.info("catalog_cache_miss", artist=key)
            try:
                corpus = await self._collector.collect(
                    key, on_snapshot=on_snapshot, cancel_event=cancel_event
                )
            except CollectionCancelledError:
                raise
            except Exception as exc:
                self._logger.error("catalog_load_failed", artist=key, error=str(exc))
                raise CatalogLoadError(
                    provider_name=self._collector.provider.get_provider_name()
                ) from exc

            await self._cache.set(
                key,
                CacheRecord(artist_key=key, corpus=corpus, created_at=self._cache.now()),
            )
            return corpus

    async def clear(self, artist: str | None = None) -> None:
        """Evict one artist's record, or every record when *artist* is None."""
        if artist is None:
            await self._cache.clear()
            self._logger.info("catalog_cache_cleared")
            return

        key = normalize_artist_key(artist)
        await self._cache.delete(key)
        self._logger.info("catalog_cache_evicted", artist=key)

    async def validate_artist(self, artist: str) -> bool:
        """Return ``True`` if the artist's first page lists at least one clip.

        Probes the provider directly; the cache is neither read nor written.
        """
        key = normalize_artist_key(artist)
        if not key:
            return False

        try:
            page = await self._collector.provider.fetch_page(key, 0)
        except Exception as exc:
            self._logger.warning("artist_validation_failed", artist=key, error=str(exc))
            return False
        return page is not None and not page.is_empty

    async def cache_stats(self) -> CacheStats:
        keys = await self._cache.keys()
        return CacheStats(size=len(keys), artist_keys=keys)

    @asynccontextmanager
    async def _key_lock(self, key: str) -> AsyncIterator[None]:
        lock, users = self._locks.get(key, (None, 0))
        if lock is None:
            lock = asyncio.Lock()
        self._locks[key] = (lock, users + 1)
        try:
            async with lock:
                yield
        finally:
            lock, users = self._locks[key]
            if users <= 1:
                del self._locks[key]
            else:
                self._locks[key] = (lock, users - 1)
