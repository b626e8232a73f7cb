"""Search coordinator: live query + live corpus → published search result.

Owns the only UI-visible search state.  Two inputs drive it:

- the **query**, edited on every keystroke (or replaced by a speech
  transcript) via :meth:`SearchCoordinator.set_query`;
- the **corpus**, delivered by the catalog cache, possibly growing snapshot
  by snapshot while a collection run is still in flight.

# ─── HOW RECOMPUTATION IS SCHEDULED ───────────────────────────────────
#
#   set_query("be")  ─┐
#   set_query("bea") ─┼─→ version += 1 each time, one recompute task
#   snapshot(corpus) ─┘
#
#   recompute task:  yield / sleep(query_defer)
#                    capture (version, query, corpus)
#                    rank in a worker thread
#                    version unchanged? → publish   else → loop again
#
# Input setters never await, so the caller (an input handler) is never
# blocked behind a ranking pass.  Staleness is decided by the input version
# captured before ranking, not by completion order: a result computed for
# an outdated (query, corpus) pairing is dropped unpublished.
#
# Artist changes are debounced, and every collection run gets a generation
# number plus its own cancel event.  Starting a new run sets the previous
# run's event (so it stops requesting pages) and snapshots or final corpora
# from an older generation are ignored.
#
# Listener deliveries are queued as chained tasks in occurrence order;
# neither the collection run nor the recompute task waits on a listener.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable

import structlog

from songmatch.models.catalog import Corpus
from songmatch.models.search import CoordinatorSnapshot, SearchResult, SearchState
from songmatch.services.catalog_cache import CatalogCache
from songmatch.services.ranking import RankingEngine
from songmatch.utils.errors import CatalogLoadError, CollectionCancelledError
from songmatch.utils.logging import get_logger
from songmatch.utils.text_normalizer import normalize_artist_key

DEFAULT_ARTIST_DEBOUNCE = 0.5


class SearchCoordinator:
    """Re-ranks the current corpus whenever the query or the corpus changes.

    Must be used from inside a running event loop: the input setters
    schedule background tasks on it.

    Parameters
    ----------
    catalog_cache:
        Shared catalog cache used to load artists.
    ranking_engine:
        Ranking engine with the configured result cap.
    artist_debounce:
        Seconds :meth:`set_artist` waits for further changes before loading.
    query_defer:
        Seconds a recompute waits before reading the latest query.  ``0``
        still yields to the event loop, so a burst of edits made without an
        intervening await is ranked once.
    """

    def __init__(
        self,
        catalog_cache: CatalogCache,
        ranking_engine: RankingEngine | None = None,
        *,
        artist_debounce: float = DEFAULT_ARTIST_DEBOUNCE,
        query_defer: float = 0.0,
    ) -> None:
        self._catalog_cache = catalog_cache
        self._ranker = ranking_engine or RankingEngine()
        self._artist_debounce = artist_debounce
        self._query_defer = query_defer

        self._artist = ""
        self._corpus: Corpus = ()
        self._corpus_artist = ""
        self._query = ""
        self._results = SearchResult()
        self._state = SearchState.IDLE
        self._is_loading = False
        self._error: str | None = None

        # Bumped on every query or corpus change.
        self._version = 0
        # Bumped on every collection run.
        self._generation = 0
        self._cancel_event: asyncio.Event | None = None

        self._debounce_task: asyncio.Task | None = None
        self._load_task: asyncio.Task | None = None
        self._recompute_task: asyncio.Task | None = None
        self._notify_tasks: set[asyncio.Task] = set()
        self._last_notify: asyncio.Task | None = None

        self._listeners: list[Callable] = []
        self._logger: structlog.BoundLogger = get_logger(__name__)

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------

    @property
    def artist(self) -> str:
        return self._artist

    @property
    def query(self) -> str:
        return self._query

    @property
    def results(self) -> SearchResult:
        return self._results

    @property
    def state(self) -> SearchState:
        return self._state

    @property
    def is_loading(self) -> bool:
        return self._is_loading

    @property
    def error(self) -> str | None:
        return self._error

    @property
    def corpus(self) -> Corpus:
        return self._corpus

    @property
    def corpus_artist(self) -> str:
        """Normalized key of the artist the held corpus belongs to."""
        return self._corpus_artist

    def is_current_corpus(self, artist: str | None = None) -> bool:
        """Return ``True`` if the held corpus belongs to *artist*.

        Defaults to the most recently requested artist.
        """
        requested = self._artist if artist is None else artist
        return self._corpus_artist == normalize_artist_key(requested)

    def snapshot(self) -> CoordinatorSnapshot:
        return CoordinatorSnapshot(
            artist=self._artist,
            query=self._query,
            state=self._state,
            results=self._results,
            is_loading=self._is_loading,
            error=self._error,
            song_count=len(self._corpus),
        )

    # ------------------------------------------------------------------
    # Query input
    # ------------------------------------------------------------------

    def set_query(self, query: str) -> None:
        """Replace the query.  Returns immediately; ranking happens later."""
        self._query = query
        self._invalidate()

    def clear_search(self) -> None:
        """Reset query and result to empty, synchronously."""
        self._query = ""
        self._version += 1
        self._results = SearchResult()
        self._state = SearchState.IDLE
        self._schedule_notify()

    # ------------------------------------------------------------------
    # Artist input
    # ------------------------------------------------------------------

    def set_artist(self, artist: str) -> None:
        """Request a new artist; loading starts after the debounce window.

        Switching to a different (or blank) artist abandons the active run
        and empties the corpus immediately.  Re-selecting the artist whose
        run is in flight or finished keeps that run; after a failed load it
        retries.
        """
        self._artist = artist
        if self._debounce_task is not None and not self._debounce_task.done():
            self._debounce_task.cancel()

        key = normalize_artist_key(artist)
        if key and key == self._corpus_artist and self._error is None:
            return

        if key != self._corpus_artist or not key:
            # The displayed corpus belongs to another artist: drop it now
            # rather than when the debounced load starts.
            self._abandon_run()
            self._is_loading = False
            self._error = None
            self._replace_corpus((), "")
            self._schedule_notify()

        if not key:
            return

        loop = asyncio.get_running_loop()
        self._debounce_task = loop.create_task(self._debounced_load(artist))

    async def load_artist(self, artist: str) -> Corpus:
        """Load *artist* now, superseding any in-flight run.

        Returns
        -------
        Corpus
            The corpus applied for this run, or an empty tuple when the run
            failed or was superseded.
        """
        self._artist = artist
        key = normalize_artist_key(artist)

        self._abandon_run()
        self._generation += 1
        generation = self._generation
        cancel_event = asyncio.Event()
        self._cancel_event = cancel_event

        if not key:
            self._is_loading = False
            self._error = None
            self._replace_corpus((), "")
            self._schedule_notify()
            return ()

        self._is_loading = True
        self._error = None
        self._replace_corpus((), key)
        self._schedule_notify()

        log = self._logger.bind(artist=key, generation=generation)
        log.info("artist_load_started")

        def _on_snapshot(corpus: Corpus) -> None:
            if generation != self._generation:
                log.debug("stale_snapshot_discarded", entries=len(corpus))
                return
            self._replace_corpus(corpus, key)
            self._schedule_notify()

        try:
            corpus = await self._catalog_cache.fetch_for_artist(
                key, on_snapshot=_on_snapshot, cancel_event=cancel_event
            )
        except CollectionCancelledError:
            log.info("artist_load_superseded")
            return ()
        except CatalogLoadError as exc:
            if generation == self._generation:
                self._is_loading = False
                self._error = exc.message
                self._schedule_notify()
            log.warning("artist_load_failed", error=str(exc))
            return ()

        if generation != self._generation:
            log.debug("stale_corpus_discarded", entries=len(corpus))
            return ()

        self._is_loading = False
        self._replace_corpus(corpus, key)
        self._schedule_notify()
        log.info("artist_load_complete", entries=len(corpus))
        return corpus

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def register_listener(self, callback: Callable) -> None:
        """Register a sync or async callable receiving :class:`CoordinatorSnapshot`."""
        if callback not in self._listeners:
            self._listeners.append(callback)

    def unregister_listener(self, callback: Callable) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def wait_idle(self) -> None:
        """Wait until no debounce, load, recompute or notification is pending."""
        while True:
            pending = [
                task
                for task in (
                    self._debounce_task,
                    self._load_task,
                    self._recompute_task,
                    *self._notify_tasks,
                )
                if task is not None and not task.done()
            ]
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)

    async def close(self) -> None:
        """Abandon the active run and cancel all background work."""
        self._abandon_run()
        tasks = [
            task
            for task in (
                self._debounce_task,
                self._load_task,
                self._recompute_task,
                *self._notify_tasks,
            )
            if task is not None and not task.done()
        ]
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._listeners.clear()

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    async def _debounced_load(self, artist: str) -> None:
        await asyncio.sleep(self._artist_debounce)
        loop = asyncio.get_running_loop()
        self._load_task = loop.create_task(self.load_artist(artist))

    def _abandon_run(self) -> None:
        if self._cancel_event is not None:
            self._cancel_event.set()
            self._cancel_event = None
        self._generation += 1

    def _replace_corpus(self, corpus: Corpus, artist_key: str) -> None:
        self._corpus = corpus
        self._corpus_artist = artist_key
        self._invalidate(notify_idle=False)

    def _invalidate(self, notify_idle: bool = True) -> None:
        """Record an input change and make sure a recompute will see it."""
        self._version += 1

        if not self._query.strip():
            if self._state is not SearchState.IDLE or not self._results.is_empty:
                self._results = SearchResult(query=self._query)
                self._state = SearchState.IDLE
                if notify_idle:
                    self._schedule_notify()
            return

        self._state = SearchState.COMPUTING
        if self._recompute_task is None or self._recompute_task.done():
            loop = asyncio.get_running_loop()
            self._recompute_task = loop.create_task(self._recompute())

    async def _recompute(self) -> None:
        while True:
            await asyncio.sleep(self._query_defer)

            version = self._version
            query = self._query
            corpus = self._corpus
            if not query.strip():
                return

            result = await asyncio.to_thread(self._ranker.rank, query, corpus)

            if version != self._version:
                self._logger.debug("stale_result_discarded", query=query, entries=len(corpus))
                continue

            self._results = result
            self._state = SearchState.SETTLED
            self._logger.debug(
                "search_result_published",
                query=query,
                matches=len(result),
                corpus_size=len(corpus),
            )
            self._schedule_notify()
            return

    def _schedule_notify(self) -> None:
        """Queue delivery of the current state to every listener.

        The snapshot is taken now.  Deliveries run as tasks chained one
        after another, so listeners see states in the order they occurred
        and a slow listener never stalls collection or ranking.
        """
        if not self._listeners:
            return

        snapshot = self.snapshot()
        loop = asyncio.get_running_loop()
        task = loop.create_task(self._notify_after(self._last_notify, snapshot))
        self._last_notify = task
        self._notify_tasks.add(task)
        task.add_done_callback(self._notify_tasks.discard)

    async def _notify_after(
        self,
        previous: asyncio.Task | None,
        snapshot: CoordinatorSnapshot,
    ) -> None:
        if previous is not None and not previous.done():
            await asyncio.wait({previous})
        await self._notify(snapshot)

    async def _notify(self, snapshot: CoordinatorSnapshot) -> None:
        """Invoke every listener; a failing listener is logged and skipped."""
        for callback in list(self._listeners):
            try:
                result = callback(snapshot)
                if asyncio.iscoroutine(result):
                    await result
            except Exception as exc:
                self._logger.warning(
                    "listener_callback_error",
                    error=str(exc),
                    callback=getattr(callback, "__name__", repr(callback)),
                )
