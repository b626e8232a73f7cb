"""Paginated catalog collector with id-based deduplication.

Drives an :class:`ICatalogProvider` across pages ``0, 1, 2, ...`` and folds
every page into one ordered, deduplicated corpus.

# ─── HOW COLLECTION TERMINATES ────────────────────────────────────────
#
# The remote API has no "last page" marker and is known to return sparse
# or out-of-order gaps.  A single empty page therefore does not end the
# run; only a *run* of consecutive empty pages does:
#
#   page:    0    1    2   ...  10   11   ...  20
#   result: [a,b] []   []  ...  []   [a]  ...
#   empty:   0    1    2   ...  9    0        (reset by page 11)
#
# Absent pages (HTTP errors, timeouts, odd bodies) count as empty.
# Re-delivered entries are skipped; the first-seen data is kept.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable

import structlog

from songmatch.interfaces.catalog_provider import ICatalogProvider
from songmatch.models.catalog import CatalogEntry, Corpus
from songmatch.utils.errors import CollectionCancelledError
from songmatch.utils.logging import get_logger

DEFAULT_MAX_CONSECUTIVE_EMPTY_PAGES = 10

# Receives every growing snapshot of the corpus; may be sync or async.
SnapshotCallback = Callable[[Corpus], Awaitable[None] | None]


class CatalogCollector:
    """Harvests an artist's full catalog into a :data:`Corpus`.

    Parameters
    ----------
    provider:
        The catalog source to page through.
    max_consecutive_empty:
        Number of back-to-back empty or absent pages that ends a run.
    max_pages:
        Optional hard ceiling on page requests per run.  ``None`` (the
        default) leaves termination entirely to the empty-page run.
    """

    def __init__(
        self,
        provider: ICatalogProvider,
        max_consecutive_empty: int = DEFAULT_MAX_CONSECUTIVE_EMPTY_PAGES,
        max_pages: int | None = None,
    ) -> None:
        self._provider = provider
        self._max_consecutive_empty = max_consecutive_empty
        self._max_pages = max_pages
        self._logger: structlog.BoundLogger = get_logger(__name__)

    @property
    def provider(self) -> ICatalogProvider:
        return self._provider

    async def collect(
        self,
        artist_key: str,
        on_snapshot: SnapshotCallback | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> Corpus:
        """Collect every reachable entry for *artist_key*.

        Parameters
        ----------
        artist_key:
            Normalized artist identifier.
        on_snapshot:
            Called with the materialized corpus after each page that added
            at least one new entry.  Snapshots fire in page order.
        cancel_event:
            Checked before every page request; once set, the run stops
            issuing requests and raises :class:`CollectionCancelledError`.

        Returns
        -------
        Corpus
            All unique entries in first-seen order.
        """
        entries: dict[str, CatalogEntry] = {}
        page = 0
        consecutive_empty = 0
        log = self._logger.bind(artist=artist_key, provider=self._provider.get_provider_name())

        while consecutive_empty < self._max_consecutive_empty:
            if cancel_event is not None and cancel_event.is_set():
                log.info("collection_cancelled", page=page, entries=len(entries))
                raise CollectionCancelledError(provider_name=self._provider.get_provider_name())

            if self._max_pages is not None and page >= self._max_pages:
                log.warning("collection_page_ceiling_reached", max_pages=self._max_pages)
                break

            result = await self._provider.fetch_page(artist_key, page)
            page += 1

            if result is None or result.is_empty:
                consecutive_empty += 1
                continue

            consecutive_empty = 0
            added = 0
            for entry in result.entries:
                if entry.id and entry.id not in entries:
                    entries[entry.id] = entry
                    added += 1

            log.debug("page_merged", page=result.page, added=added, total=len(entries))

            if added and on_snapshot is not None:
                await self._emit_snapshot(on_snapshot, tuple(entries.values()), log)

        corpus: Corpus = tuple(entries.values())
        log.info("collection_complete", pages=page, entries=len(corpus))
        return corpus

    @staticmethod
    async def _emit_snapshot(
        callback: SnapshotCallback,
        corpus: Corpus,
        log: structlog.BoundLogger,
    ) -> None:
        """Invoke a snapshot listener without letting it abort the run."""
        try:
            result = callback(corpus)
            if asyncio.iscoroutine(result):
                await result
        except Exception as exc:
            log.warning(
                "snapshot_callback_error",
                error=str(exc),
                callback=getattr(callback, "__name__", repr(callback)),
            )
