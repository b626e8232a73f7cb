"""WebSocket endpoint for live, keystroke-level lyric search.

Each connection owns one :class:`SearchCoordinator` that shares the
application's catalog cache.  The coordinator's listener pushes its state
to the client after every published change.

    Client                                   Server
    ──────                                   ──────
    connect                       ──────→    accept, register listener
                                  ←──────    initial state
    {"type": "set_artist", ...}   ──────→    debounced catalog load
                                  ←──────    state (loading, song_count grows)
    {"type": "set_query", ...}    ──────→    deferred re-rank
                                  ←──────    state (results)
    {"type": "clear"}             ──────→    query and results reset
    close                         ──────→    coordinator.close()

Server messages: ``{"type": "state", "state": {...}}`` or
``{"type": "error", "detail": "..."}`` for malformed client messages.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable

import structlog
from fastapi import WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from songmatch.api.schemas import SessionMessage, SessionUpdate
from songmatch.config.settings import Settings
from songmatch.models.search import CoordinatorSnapshot
from songmatch.pipeline.search_coordinator import SearchCoordinator
from songmatch.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)


def build_session_coordinator(websocket: WebSocket) -> SearchCoordinator:
    """Create a per-connection coordinator from the shared app components."""
    state = websocket.app.state
    settings: Settings = state.settings
    return SearchCoordinator(
        state.catalog_cache,
        state.ranking_engine,
        artist_debounce=settings.artist_debounce_seconds,
        query_defer=settings.query_defer_seconds,
    )


def state_pusher(websocket: WebSocket) -> Callable[[CoordinatorSnapshot], Awaitable[None]]:
    """Build a coordinator listener that sends each state to *websocket*.

    A socket that closed between the change and the send is logged and
    skipped; the session loop tears the connection down.  Any other send
    failure propagates to the coordinator, which logs it.
    """

    async def _push(snapshot: CoordinatorSnapshot) -> None:
        try:
            await websocket.send_json(SessionUpdate(state=snapshot).model_dump(mode="json"))
        except (WebSocketDisconnect, RuntimeError) as exc:
            _logger.debug("websocket_send_skipped", error=str(exc))

    return _push


async def websocket_search(websocket: WebSocket) -> None:
    """Run one live search session over *websocket*."""
    coordinator = build_session_coordinator(websocket)

    await websocket.accept()
    _logger.info("websocket_connected")

    coordinator.register_listener(state_pusher(websocket))

    try:
        await websocket.send_json(SessionUpdate(state=coordinator.snapshot()).model_dump(mode="json"))

        while True:
            raw = await websocket.receive_text()
            try:
                message = SessionMessage.model_validate_json(raw)
            except ValidationError:
                await websocket.send_json({"type": "error", "detail": "Malformed message"})
                continue

            if message.type == "set_artist":
                coordinator.set_artist(message.artist or "")
            elif message.type == "set_query":
                coordinator.set_query(message.query or "")
            elif message.type == "clear":
                coordinator.clear_search()
            else:
                await websocket.send_json(
                    {"type": "error", "detail": f"Unknown message type: {message.type}"}
                )

    except WebSocketDisconnect:
        _logger.info("websocket_disconnected")

    finally:
        await coordinator.close()
        _logger.debug("websocket_session_closed")
