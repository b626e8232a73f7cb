"""In-memory catalog cache backend using cachetools.TTLCache.

Simple, fast cache suitable for single-process deployments.  Lives for the
lifetime of the process only.  Can be swapped for another backend via the
ICacheProvider interface.
"""

from __future__ import annotations

import time
from collections.abc import Callable

import structlog
from cachetools import TTLCache

from songmatch.interfaces.cache_provider import ICacheProvider
from songmatch.models.catalog import CacheRecord

logger = structlog.get_logger(logger_name=__name__)


class MemoryCacheProvider(ICacheProvider):
    """In-memory TTL cache backed by ``cachetools.TTLCache``.

    Parameters
    ----------
    max_size:
        Maximum number of artist records before the least-recently-used
        record is evicted.
    ttl:
        Time-to-live in seconds.  A record is fresh while
        ``now - created_at < ttl``.
    timer:
        Clock used for expiry and ``created_at``.  Defaults to
        ``time.monotonic``; tests inject a fake clock.
    """

    def __init__(
        self,
        max_size: int = 256,
        ttl: float = 300.0,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl = ttl
        self._timer = timer
        self._cache: TTLCache[str, CacheRecord] = TTLCache(maxsize=max_size, ttl=ttl, timer=timer)

    @property
    def ttl(self) -> float:
        return self._ttl

    # ------------------------------------------------------------------
    # ICacheProvider implementation
    # ------------------------------------------------------------------

    async def get(self, key: str) -> CacheRecord | None:
        """Retrieve the record for *key*, or ``None`` if missing/expired."""
        record = self._cache.get(key)
        if record is not None:
            logger.debug("cache_hit", key=key, age=round(record.age(self._timer()), 3))
        else:
            logger.debug("cache_miss", key=key)
        return record

    async def set(self, key: str, record: CacheRecord) -> None:
        self._cache[key] = record
        logger.debug("cache_set", key=key, entries=len(record.corpus))

    async def delete(self, key: str) -> None:
        """Remove *key* from the cache (no-op if absent)."""
        self._cache.pop(key, None)
        logger.debug("cache_delete", key=key)

    async def clear(self) -> None:
        self._cache.clear()
        logger.debug("cache_clear")

    async def keys(self) -> list[str]:
        self._cache.expire()
        return list(self._cache.keys())

    def now(self) -> float:
        return self._timer()
