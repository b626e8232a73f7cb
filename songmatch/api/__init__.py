"""songmatch API layer - routes, schemas, WebSocket, and middleware."""

from songmatch.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from songmatch.api.routes import router
from songmatch.api.websocket import websocket_search

__all__ = [
    "ErrorHandlingMiddleware",
    "RequestLoggingMiddleware",
    "configure_cors",
    "router",
    "websocket_search",
]
