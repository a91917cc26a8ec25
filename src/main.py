"""whenItDropped FastAPI application entry point.

Wires together all providers, services, and routes via dependency injection.
Loads configuration from ``.env`` and ``config/config.yaml``, configures
structured logging, and exposes the exploration WebSocket.

Also exposes :func:`build_components` / :func:`build_orchestrator` for the
CLI, which runs the same aggregation sessions against a console sink.
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import Any

import httpx
import structlog
import uvicorn
from fastapi import FastAPI, WebSocket

from src.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from src.api.routes import router as api_router
from src.api.websocket import websocket_explore
from src.config.loader import PanelLimits, load_config
from src.config.settings import Settings
from src.interfaces.presentation_sink import IPresentationSink
from src.pipeline.orchestrator import AggregationOrchestrator
from src.providers.broadcast.tvmaze_provider import TVmazeProvider
from src.providers.encyclopedia.wikipedia_provider import WikipediaProvider
from src.providers.film.tmdb_provider import TMDBProvider
from src.providers.music_db.musicbrainz_provider import MusicBrainzProvider
from src.services.entity_search import EntitySearch
from src.utils.http_json import build_http_client
from src.utils.logging import configure_logging, get_logger

_VERSION = "1.0.0"

# ---------------------------------------------------------------------------
# Module-level settings & logging
# ---------------------------------------------------------------------------

settings = Settings()
config = load_config()

configure_logging(
    log_level=settings.log_level,
    json_output=(settings.app_env == "production"),
)
_logger: structlog.BoundLogger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Component wiring
# ---------------------------------------------------------------------------


def build_components(
    app_settings: Settings,
    app_config: dict | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> dict[str, Any]:
    """Construct every provider and service instance for the application.

    Returns a flat dict of named components to be stored on ``app.state``.
    *transport* is passed through to the shared HTTP client (tests use
    ``httpx.MockTransport``).
    """
    # -- Shared resources --
    http_client = build_http_client(
        user_agent=app_settings.http_user_agent,
        timeout=app_settings.http_timeout_seconds,
        transport=transport,
    )
    semaphore = asyncio.Semaphore(app_settings.provider_max_concurrency)
    limits = PanelLimits.from_config(app_config)

    # -- Providers --
    music_db = MusicBrainzProvider(http_client=http_client, base_url=app_settings.musicbrainz_base_url)
    encyclopedia = WikipediaProvider(http_client=http_client, base_url=app_settings.wikipedia_base_url)
    broadcast = TVmazeProvider(http_client=http_client, base_url=app_settings.tvmaze_base_url)
    film = TMDBProvider(
        http_client=http_client,
        api_token=app_settings.tmdb_api_token,
        base_url=app_settings.tmdb_base_url,
        image_base_url=app_settings.tmdb_image_base_url,
    )

    # -- Services --
    entity_search = EntitySearch(music_db, picker_limit=limits.picker_limit)

    # -- Provider registry for /health --
    providers = [
        (music_db, "music_db"),
        (encyclopedia, "encyclopedia"),
        (broadcast, "broadcast"),
        (film, "film"),
    ]
    provider_registry: dict[str, bool] = {p.get_provider_name(): p.is_available() for p, _ in providers}

    # -- Provider list for /providers --
    provider_list: list[dict[str, Any]] = [
        {"name": p.get_provider_name(), "type": kind, "available": p.is_available()}
        for p, kind in providers
    ]

    return {
        "http_client": http_client,
        "semaphore": semaphore,
        "limits": limits,
        "music_db": music_db,
        "encyclopedia": encyclopedia,
        "broadcast": broadcast,
        "film": film,
        "entity_search": entity_search,
        "provider_registry": provider_registry,
        "provider_list": provider_list,
    }


def build_orchestrator(components: dict[str, Any], sink: IPresentationSink) -> AggregationOrchestrator:
    """Create an orchestrator bound to *sink*, sharing the built providers.

    Each consumer (a WebSocket connection or a CLI run) gets its own
    orchestrator, and therefore its own session registry.
    """
    return AggregationOrchestrator(
        music_db=components["music_db"],
        encyclopedia=components["encyclopedia"],
        broadcast=components["broadcast"],
        film=components["film"],
        sink=sink,
        entity_search=components["entity_search"],
        limits=components["limits"],
        semaphore=components["semaphore"],
    )


# ---------------------------------------------------------------------------
# Application lifespan (startup / shutdown)
# ---------------------------------------------------------------------------


@asynccontextmanager
async def _lifespan(application: FastAPI):  # noqa: ANN201
    """Initialise all providers and services on startup, clean up on shutdown."""
    components = build_components(settings, config)

    for key, value in components.items():
        setattr(application.state, key, value)
    application.state.build_orchestrator = lambda sink: build_orchestrator(components, sink)

    _logger.info(
        "app_startup",
        version=_VERSION,
        environment=settings.app_env,
        providers=[p["name"] for p in components["provider_list"] if p["available"]],
    )

    yield

    # -- Shutdown: close shared httpx client --
    http_client: httpx.AsyncClient = components["http_client"]
    await http_client.aclose()
    _logger.info("app_shutdown", message="HTTP client closed")


# ---------------------------------------------------------------------------
# FastAPI application factory
# ---------------------------------------------------------------------------


def create_app() -> FastAPI:
    """Build and configure the FastAPI application."""
    application = FastAPI(
        title="whenItDropped API",
        version=_VERSION,
        description=(
            "Look up a song, album or date and see what else was happening: "
            "release details, world history, other releases that day, TV "
            "premieres, films in cinemas, and the artist's story."
        ),
        lifespan=_lifespan,
    )

    # -- Middleware (order matters: last added = first executed) --
    application.add_middleware(ErrorHandlingMiddleware)
    application.add_middleware(RequestLoggingMiddleware)
    configure_cors(application)

    # -- API routes --
    application.include_router(api_router)

    # -- WebSocket --
    @application.websocket("/ws/explore")
    async def ws_explore(websocket: WebSocket) -> None:
        await websocket_explore(websocket)

    return application


app = create_app()

# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    uvicorn.run(
        "src.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=(settings.app_env == "development"),
    )
