"""Integration tests for the REST endpoints and the live-search WebSocket."""

from __future__ import annotations

from collections.abc import Callable, Iterator

import pytest
from fastapi import FastAPI, WebSocket
from fastapi.testclient import TestClient
from starlette.testclient import WebSocketTestSession

from songmatch import __version__
from songmatch.api.middleware import ErrorHandlingMiddleware, RequestLoggingMiddleware
from songmatch.api.routes import router as api_router
from songmatch.api.websocket import websocket_search
from songmatch.config.settings import Settings
from songmatch.main import create_app
from songmatch.services.ranking import RankingEngine
from tests.conftest import ScriptedCatalogProvider, build_catalog_cache


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _create_test_app(provider: ScriptedCatalogProvider) -> FastAPI:
    """Create a FastAPI app wired to a scripted catalog provider."""
    app = FastAPI()
    app.add_middleware(ErrorHandlingMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.include_router(api_router)

    @app.websocket("/ws/search")
    async def _ws(websocket: WebSocket) -> None:
        await websocket_search(websocket)

    app.state.settings = Settings(artist_debounce_ms=0, query_defer_ms=0)
    app.state.catalog_cache = build_catalog_cache(provider)
    app.state.ranking_engine = RankingEngine(max_results=10)
    return app


def _receive_until(
    ws: WebSocketTestSession,
    predicate: Callable[[dict], bool],
    limit: int = 50,
) -> dict:
    """Read state messages until one satisfies *predicate*."""
    for _ in range(limit):
        message = ws.receive_json()
        if message.get("type") == "state" and predicate(message["state"]):
            return message["state"]
    raise AssertionError("expected state never arrived")


@pytest.fixture
def client(demo_provider: ScriptedCatalogProvider) -> Iterator[TestClient]:
    with TestClient(_create_test_app(demo_provider)) as test_client:
        yield test_client


# ======================================================================
# POST /api/v1/search
# ======================================================================


class TestSearchEndpoint:
    def test_returns_ranked_matches(self, client: TestClient) -> None:
        resp = client.post("/api/v1/search", json={"artist": "demo", "query": "beach at sunset"})

        assert resp.status_code == 200
        data = resp.json()
        assert data["artist"] == "demo"
        assert data["results"][0]["id"] == "song-001"
        assert data["results"][0]["title"] == "Summer Dreams"
        assert data["results"][0]["match_score"] == 1.0
        assert data["total_matches"] == len(data["results"])
        assert data["stats"]["top_score"] == 100
        assert data["message"] is None

    def test_artist_is_case_insensitive_and_cached(
        self, client: TestClient, demo_provider: ScriptedCatalogProvider
    ) -> None:
        client.post("/api/v1/search", json={"artist": "demo", "query": "night"})
        calls = len(demo_provider.calls)

        resp = client.post("/api/v1/search", json={"artist": " DEMO ", "query": "mountain"})

        assert resp.status_code == 200
        assert resp.json()["results"][0]["id"] == "song-003"
        assert len(demo_provider.calls) == calls

    @pytest.mark.parametrize(
        "body",
        [
            {"artist": "demo", "query": "   "},
            {"artist": "", "query": "beach"},
            {"query": "beach"},
        ],
    )
    def test_blank_input_is_400(self, client: TestClient, body: dict) -> None:
        resp = client.post("/api/v1/search", json=body)

        assert resp.status_code == 400
        assert resp.json()["detail"] == "Missing query or artist"

    def test_unknown_artist_returns_message(self, client: TestClient) -> None:
        resp = client.post("/api/v1/search", json={"artist": "Nobody", "query": "beach"})

        assert resp.status_code == 200
        data = resp.json()
        assert data["results"] == []
        assert data["total_matches"] == 0
        assert data["message"] == 'No songs found for artist "Nobody".'

    def test_no_match_returns_empty_results(self, client: TestClient) -> None:
        resp = client.post("/api/v1/search", json={"artist": "demo", "query": "xylophone"})

        assert resp.status_code == 200
        assert resp.json()["results"] == []
        assert resp.json()["message"] is None

    def test_catalog_failure_is_502(self) -> None:
        provider = ScriptedCatalogProvider(error=RuntimeError("upstream down"))
        with TestClient(_create_test_app(provider)) as failing:
            resp = failing.post("/api/v1/search", json={"artist": "demo", "query": "beach"})

        assert resp.status_code == 502
        assert resp.json() == {
            "error": "CatalogLoadError",
            "detail": "Failed to load songs. Please try again.",
        }


# ======================================================================
# Artist validation, cache management, health
# ======================================================================


class TestSupportEndpoints:
    def test_validate_known_artist(self, client: TestClient) -> None:
        resp = client.get("/api/v1/artists/demo/validate")

        assert resp.status_code == 200
        assert resp.json() == {"artist": "demo", "valid": True}

    def test_validate_unknown_artist(self, client: TestClient) -> None:
        assert client.get("/api/v1/artists/nobody/validate").json()["valid"] is False

    def test_cache_stats_and_eviction(self, client: TestClient) -> None:
        client.post("/api/v1/search", json={"artist": "Demo", "query": "beach"})

        stats = client.get("/api/v1/cache/stats").json()
        assert stats == {"size": 1, "artist_keys": ["demo"]}

        resp = client.delete("/api/v1/cache/Demo")
        assert resp.json() == {"cleared": "demo"}
        assert client.get("/api/v1/cache/stats").json()["size"] == 0

    def test_clear_all(self, client: TestClient) -> None:
        client.post("/api/v1/search", json={"artist": "demo", "query": "beach"})
        client.post("/api/v1/search", json={"artist": "other", "query": "beach"})

        resp = client.delete("/api/v1/cache")

        assert resp.json() == {"cleared": "*"}
        assert client.get("/api/v1/cache/stats").json()["size"] == 0

    def test_health(self, client: TestClient) -> None:
        resp = client.get("/api/v1/health")

        assert resp.status_code == 200
        assert resp.json() == {"status": "healthy", "version": __version__}

    def test_create_app_serves_health(self) -> None:
        with TestClient(create_app(Settings())) as app_client:
            assert app_client.get("/api/v1/health").json()["status"] == "healthy"
            assert app_client.app.state.catalog_cache is not None


# ======================================================================
# WebSocket /ws/search
# ======================================================================


class TestSearchWebSocket:
    def test_live_search_session(self, client: TestClient) -> None:
        with client.websocket_connect("/ws/search") as ws:
            initial = ws.receive_json()
            assert initial["type"] == "state"
            assert initial["state"]["state"] == "IDLE"

            ws.send_json({"type": "set_artist", "artist": "demo"})
            loaded = _receive_until(
                ws, lambda state: not state["is_loading"] and state["song_count"] == 3
            )
            assert loaded["error"] is None

            ws.send_json({"type": "set_query", "query": "beach at sunset"})
            settled = _receive_until(
                ws, lambda state: state["state"] == "SETTLED" and state["query"] == "beach at sunset"
            )
            assert settled["results"]["entries"][0]["entry"]["id"] == "song-001"
            assert settled["results"]["entries"][0]["score"] == 1.0

            ws.send_json({"type": "clear"})
            cleared = _receive_until(ws, lambda state: state["query"] == "")
            assert cleared["state"] == "IDLE"
            assert cleared["results"]["entries"] == []

    def test_malformed_message(self, client: TestClient) -> None:
        with client.websocket_connect("/ws/search") as ws:
            ws.receive_json()
            ws.send_text("not json")

            assert ws.receive_json() == {"type": "error", "detail": "Malformed message"}

    def test_unknown_message_type(self, client: TestClient) -> None:
        with client.websocket_connect("/ws/search") as ws:
            ws.receive_json()
            ws.send_json({"type": "shuffle"})

            message = ws.receive_json()
            assert message["type"] == "error"
            assert "shuffle" in message["detail"]

    def test_load_failure_reaches_client(self) -> None:
        provider = ScriptedCatalogProvider(error=RuntimeError("upstream down"))
        with TestClient(_create_test_app(provider)) as failing, failing.websocket_connect("/ws/search") as ws:
            ws.receive_json()
            ws.send_json({"type": "set_artist", "artist": "demo"})

            failed = _receive_until(ws, lambda state: state["error"] is not None)

            assert failed["error"] == "Failed to load songs. Please try again."
            assert failed["is_loading"] is False
