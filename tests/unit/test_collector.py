"""Unit tests for CatalogCollector pagination, dedup and termination."""

from __future__ import annotations

import asyncio

import pytest

from songmatch.models.catalog import CatalogEntry, CatalogPage, Corpus
from songmatch.services.collector import CatalogCollector
from songmatch.utils.errors import CollectionCancelledError
from tests.conftest import ScriptedCatalogProvider, empty_pages, make_entry


class TestCatalogCollector:
    @pytest.mark.asyncio
    async def test_merges_pages_and_deduplicates(self) -> None:
        a, b, c = make_entry("A"), make_entry("B"), make_entry("C")
        provider = ScriptedCatalogProvider({"demo": [[a, b], [b, c], []]})
        snapshots: list[Corpus] = []

        corpus = await CatalogCollector(provider).collect("demo", on_snapshot=snapshots.append)

        assert [entry.id for entry in corpus] == ["A", "B", "C"]
        assert [[entry.id for entry in snap] for snap in snapshots] == [["A", "B"], ["A", "B", "C"]]

    @pytest.mark.asyncio
    async def test_stops_after_ten_consecutive_empty_pages(self) -> None:
        provider = ScriptedCatalogProvider({"demo": [[make_entry("A")]]})

        corpus = await CatalogCollector(provider).collect("demo")

        assert [entry.id for entry in corpus] == ["A"]
        # Page 0 has data, pages 1..10 are absent.
        assert provider.calls_for("demo") == list(range(11))

    @pytest.mark.asyncio
    async def test_nine_empty_pages_do_not_end_the_run(self) -> None:
        script = [[make_entry("A")], *empty_pages(9), [make_entry("B")]]
        provider = ScriptedCatalogProvider({"demo": script})

        corpus = await CatalogCollector(provider).collect("demo")

        assert [entry.id for entry in corpus] == ["A", "B"]
        assert provider.calls_for("demo") == list(range(21))

    @pytest.mark.asyncio
    async def test_unknown_artist_yields_empty_corpus(self) -> None:
        provider = ScriptedCatalogProvider()
        snapshots: list[Corpus] = []

        corpus = await CatalogCollector(provider).collect("nobody", on_snapshot=snapshots.append)

        assert corpus == ()
        assert snapshots == []
        assert len(provider.calls) == 10

    @pytest.mark.asyncio
    async def test_custom_empty_threshold(self) -> None:
        provider = ScriptedCatalogProvider()

        await CatalogCollector(provider, max_consecutive_empty=3).collect("demo")

        assert provider.calls_for("demo") == [0, 1, 2]

    @pytest.mark.asyncio
    async def test_first_seen_data_is_kept(self) -> None:
        original = make_entry("A", "first version", title="Original")
        redelivered = make_entry("A", "changed", title="Changed")
        provider = ScriptedCatalogProvider({"demo": [[original], [redelivered]]})

        corpus = await CatalogCollector(provider).collect("demo")

        assert corpus == (original,)

    @pytest.mark.asyncio
    async def test_page_of_only_duplicates_resets_empty_count_without_snapshot(self) -> None:
        a = make_entry("A")
        script = [[a], *empty_pages(9), [a], *empty_pages(9), [make_entry("B")]]
        provider = ScriptedCatalogProvider({"demo": script})
        snapshots: list[Corpus] = []

        corpus = await CatalogCollector(provider).collect("demo", on_snapshot=snapshots.append)

        assert [entry.id for entry in corpus] == ["A", "B"]
        assert len(snapshots) == 2

    @pytest.mark.asyncio
    async def test_page_with_only_unusable_candidates_resets_empty_count(self) -> None:
        script: list = [
            [make_entry("A")],
            *empty_pages(9),
            CatalogPage(page=10, skipped=3),
            *empty_pages(9),
            [make_entry("B")],
        ]
        provider = ScriptedCatalogProvider({"demo": script})

        corpus = await CatalogCollector(provider).collect("demo")

        assert [entry.id for entry in corpus] == ["A", "B"]

    @pytest.mark.asyncio
    async def test_async_snapshot_callback_is_awaited(self) -> None:
        provider = ScriptedCatalogProvider({"demo": [[make_entry("A")], [make_entry("B")]]})
        seen: list[int] = []

        async def _on_snapshot(corpus: Corpus) -> None:
            await asyncio.sleep(0)
            seen.append(len(corpus))

        await CatalogCollector(provider).collect("demo", on_snapshot=_on_snapshot)

        assert seen == [1, 2]

    @pytest.mark.asyncio
    async def test_failing_snapshot_callback_does_not_abort(self) -> None:
        provider = ScriptedCatalogProvider({"demo": [[make_entry("A")], [make_entry("B")]]})

        def _boom(corpus: Corpus) -> None:
            raise RuntimeError("listener broke")

        corpus = await CatalogCollector(provider).collect("demo", on_snapshot=_boom)

        assert len(corpus) == 2

    @pytest.mark.asyncio
    async def test_snapshots_are_immutable_tuples(self) -> None:
        provider = ScriptedCatalogProvider({"demo": [[make_entry("A")], [make_entry("B")]]})
        snapshots: list[Corpus] = []

        await CatalogCollector(provider).collect("demo", on_snapshot=snapshots.append)

        assert all(isinstance(snap, tuple) for snap in snapshots)
        assert len(snapshots[0]) == 1

    @pytest.mark.asyncio
    async def test_cancel_before_start_issues_no_requests(self) -> None:
        provider = ScriptedCatalogProvider({"demo": [[make_entry("A")]]})
        cancel = asyncio.Event()
        cancel.set()

        with pytest.raises(CollectionCancelledError):
            await CatalogCollector(provider).collect("demo", cancel_event=cancel)

        assert provider.calls == []

    @pytest.mark.asyncio
    async def test_cancel_mid_run_stops_paging(self) -> None:
        cancel = asyncio.Event()

        def _page(artist_key: str, page: int) -> list[CatalogEntry]:
            if page == 2:
                cancel.set()
            return [make_entry(f"s{page}")]

        provider = ScriptedCatalogProvider(page_factory=_page)

        with pytest.raises(CollectionCancelledError):
            await CatalogCollector(provider).collect("demo", cancel_event=cancel)

        assert provider.calls_for("demo") == [0, 1, 2]

    @pytest.mark.asyncio
    async def test_page_ceiling(self) -> None:
        provider = ScriptedCatalogProvider(page_factory=lambda key, page: [make_entry(f"s{page}")])

        corpus = await CatalogCollector(provider, max_pages=5).collect("demo")

        assert len(corpus) == 5
        assert provider.calls_for("demo") == [0, 1, 2, 3, 4]

    @pytest.mark.asyncio
    async def test_provider_error_propagates(self) -> None:
        provider = ScriptedCatalogProvider(error=RuntimeError("boom"))

        with pytest.raises(RuntimeError, match="boom"):
            await CatalogCollector(provider).collect("demo")
