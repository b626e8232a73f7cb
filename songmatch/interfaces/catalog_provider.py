"""Abstract base class for remote catalog providers.

Defines the contract for fetching one page of an artist's song catalog from
a third-party platform.  The collector only depends on this interface, so a
different platform (or a canned feed in tests) can be swapped in without
touching the pagination logic.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from songmatch.models.catalog import CatalogPage


class ICatalogProvider(ABC):
    """Contract for paginated catalog sources.

    Providers issue exactly one request per call.  They never retry and
    never cache; every failure mode collapses into an absent page.
    """

    @abstractmethod
    async def fetch_page(self, artist_key: str, page: int) -> CatalogPage | None:
        """Fetch page *page* of the catalog for *artist_key*.

        Parameters
        ----------
        artist_key:
            Normalized (trimmed, lowercased) artist identifier.
        page:
            Zero-based page number.

        Returns
        -------
        CatalogPage or None
            The page's entries (possibly none), or ``None`` when the page is
            absent: non-success status, transport error, timeout, or a body
            without the expected collection field.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short provider name used in logs and error messages."""
