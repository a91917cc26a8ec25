"""whenItDropped API layer - routes, schemas, WebSocket, and middleware."""

from src.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from src.api.routes import router
from src.api.schemas import (
    DateParseRequest,
    DateParseResponse,
    ErrorResponse,
    HealthResponse,
    PickerEntry,
    PickerResponse,
    ProvidersResponse,
)
from src.api.websocket import WebSocketSink, websocket_explore

__all__ = [
    "ErrorHandlingMiddleware",
    "RequestLoggingMiddleware",
    "configure_cors",
    "router",
    "websocket_explore",
    "WebSocketSink",
    "DateParseRequest",
    "DateParseResponse",
    "ErrorResponse",
    "HealthResponse",
    "PickerEntry",
    "PickerResponse",
    "ProvidersResponse",
]
