"""FastAPI API routes for whenItDropped.

Provides REST endpoints for health checks, provider listing, song and
album picker searches, and date parsing.  Aggregation sessions stream
over the WebSocket (see ``src/api/websocket.py``), not over REST.
Service dependencies are resolved from ``app.state`` via FastAPI's
``Depends`` using the ``Annotated`` pattern.

# ─── API ROUTE MAP ─────────────────────────────────────────────────────
#
# Endpoint                              Method  Description
# ─────────────────────────────────────────────────────────────────────
# /api/v1/health                        GET     Health check + provider status
# /api/v1/providers                     GET     List all configured providers
# /api/v1/search/recordings             GET     Ordered song picker list
# /api/v1/search/release-groups         GET     Ordered album picker list
# /api/v1/dates/parse                   POST    Free-text date → partial date
# /ws/explore                           WS      Picker, sessions, live panels
#
# DEPENDENCY INJECTION PATTERN:
# Each route declares its dependencies as type-annotated params.
# FastAPI resolves these via Depends() helpers that read from app.state
# (populated at startup in main.py's _lifespan).
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from typing import Annotated, Any

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, Request

from src.api.schemas import (
    DateParseRequest,
    DateParseResponse,
    ErrorResponse,
    HealthResponse,
    PickerEntry,
    PickerResponse,
    ProvidersResponse,
)
from src.models.catalog import EntityKind
from src.services.date_parser import format_for_display, parse_free_text
from src.services.entity_search import EntitySearch
from src.utils.errors import DateNotParseableError
from src.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

router = APIRouter(prefix="/api/v1")

_VERSION = "1.0.0"


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------


def _get_entity_search(request: Request) -> EntitySearch:
    return request.app.state.entity_search


EntitySearchDep = Annotated[EntitySearch, Depends(_get_entity_search)]


# ---------------------------------------------------------------------------
# Search
# ---------------------------------------------------------------------------


async def _picker(
    entity_search: EntitySearch, kind: EntityKind, title: str, artist: str | None
) -> PickerResponse:
    entities = await entity_search.picker_list(title, artist, kind)
    return PickerResponse(
        kind=kind,
        query_title=title,
        query_artist=artist,
        results=[PickerEntry.from_entity(e) for e in entities],
    )


@router.get(
    "/search/recordings",
    response_model=PickerResponse,
    summary="Search songs and return the ordered picker list",
)
async def search_recordings(
    entity_search: EntitySearchDep,
    title: Annotated[str, Query(min_length=1, max_length=200)],
    artist: Annotated[str | None, Query(max_length=200)] = None,
) -> PickerResponse:
    """Earliest official release first; an unreachable catalog yields an empty list."""
    return await _picker(entity_search, EntityKind.RECORDING, title, artist)


@router.get(
    "/search/release-groups",
    response_model=PickerResponse,
    summary="Search albums and return the ordered picker list",
)
async def search_release_groups(
    entity_search: EntitySearchDep,
    title: Annotated[str, Query(min_length=1, max_length=200)],
    artist: Annotated[str | None, Query(max_length=200)] = None,
) -> PickerResponse:
    return await _picker(entity_search, EntityKind.RELEASE_GROUP, title, artist)


# ---------------------------------------------------------------------------
# Dates
# ---------------------------------------------------------------------------


@router.post(
    "/dates/parse",
    response_model=DateParseResponse,
    responses={422: {"model": ErrorResponse}},
    summary="Parse a free-text date",
)
async def parse_date(body: DateParseRequest) -> DateParseResponse:
    """Parse ``"14 June 1955"``, ``"6/14/1955"``, ``"1955"`` and friends.

    Returns 422 with a hint when no supported notation matches.
    """
    try:
        partial = parse_free_text(body.text)
    except DateNotParseableError as exc:
        _logger.info("date_not_parseable", text=body.text)
        raise HTTPException(
            status_code=422,
            detail=ErrorResponse(error=type(exc).__name__, detail=exc.message, hint=exc.hint).model_dump(),
        ) from exc

    return DateParseResponse(
        year=partial.year,
        month=partial.month,
        day=partial.day,
        iso=partial.to_iso(),
        display=format_for_display(partial),
    )


# ---------------------------------------------------------------------------
# Health / providers
# ---------------------------------------------------------------------------


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Application health check",
)
async def health_check(request: Request) -> HealthResponse:
    """Return application health, version, and provider availability.

    The catalog is critical (nothing resolves without it); the other
    providers only leave their own panel empty.
    """
    providers: dict[str, Any] = {}
    if hasattr(request.app.state, "provider_registry"):
        providers = dict(request.app.state.provider_registry)

    if not providers.get("musicbrainz", False):
        status = "unhealthy"
    elif all(providers.values()):
        status = "healthy"
    else:
        status = "degraded"

    return HealthResponse(status=status, version=_VERSION, providers=providers)


@router.get(
    "/providers",
    response_model=ProvidersResponse,
    summary="List configured providers",
)
async def list_providers(request: Request) -> ProvidersResponse:
    """List all configured providers, their types, and availability status."""
    providers: list[dict[str, Any]] = []
    if hasattr(request.app.state, "provider_list"):
        providers = request.app.state.provider_list

    return ProvidersResponse(providers=providers)
