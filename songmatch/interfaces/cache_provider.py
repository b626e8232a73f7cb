"""Abstract base class for catalog cache backends.

Stores one :class:`~songmatch.models.catalog.CacheRecord` per artist key.
Backends are responsible for expiry: a record older than the configured
time-to-live must read back as missing.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from songmatch.models.catalog import CacheRecord


class ICacheProvider(ABC):
    """Contract for artist-keyed cache services.

    All operations are async to allow for network-backed stores without
    blocking the event loop.
    """

    @abstractmethod
    async def get(self, key: str) -> CacheRecord | None:
        """Return the fresh record stored under *key*, or ``None``."""

    @abstractmethod
    async def set(self, key: str, record: CacheRecord) -> None:
        """Store *record* under *key*, replacing any previous record."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove the record under *key*; no-op if absent."""

    @abstractmethod
    async def clear(self) -> None:
        """Remove every record."""

    @abstractmethod
    async def keys(self) -> list[str]:
        """Return the keys of all fresh records."""

    @abstractmethod
    def now(self) -> float:
        """Return the backend clock reading used for ``created_at``."""
