"""Integration tests for the REST routes and the exploration WebSocket.

The app under test is assembled from the real router, middleware and
WebSocket endpoint, with mocked providers behind them.
"""

from __future__ import annotations

import asyncio
from typing import Any
from unittest.mock import MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.api.middleware import ErrorHandlingMiddleware, RequestLoggingMiddleware
from src.api.routes import router as api_router
from src.api.websocket import websocket_explore
from src.config.loader import PanelLimits
from src.models.catalog import CandidateEntity
from src.pipeline.orchestrator import AggregationOrchestrator
from src.services.entity_search import EntitySearch
from src.utils.errors import DATE_INPUT_HINT, ConfigurationError, ProviderUnavailableError


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _build_app(
    mock_music_db: MagicMock,
    mock_encyclopedia: MagicMock,
    mock_broadcast: MagicMock,
    mock_film: MagicMock,
) -> FastAPI:
    """Create a FastAPI app with mocked providers on ``app.state``."""
    app = FastAPI()
    app.add_middleware(ErrorHandlingMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.include_router(api_router)
    app.add_api_websocket_route("/ws/explore", websocket_explore)

    limits = PanelLimits(history_window_days=0, broadcast_window_days=0, broadcast_countries=("US",))

    def build_orchestrator(sink) -> AggregationOrchestrator:
        return AggregationOrchestrator(
            music_db=mock_music_db,
            encyclopedia=mock_encyclopedia,
            broadcast=mock_broadcast,
            film=mock_film,
            sink=sink,
            limits=limits,
            semaphore=asyncio.Semaphore(4),
        )

    app.state.entity_search = EntitySearch(mock_music_db)
    app.state.build_orchestrator = build_orchestrator
    app.state.provider_registry = {"musicbrainz": True, "wikipedia": True, "tvmaze": True, "tmdb": True}
    app.state.provider_list = [
        {"name": "musicbrainz", "type": "music_db", "available": True},
        {"name": "tmdb", "type": "film", "available": True},
    ]
    return app


def _receive_until_complete(ws, total: int) -> list[dict[str, Any]]:
    """Collect messages until the progress counter reaches *total*."""
    messages: list[dict[str, Any]] = []
    while True:
        message = ws.receive_json()
        messages.append(message)
        if message["type"] == "progress" and message["done"] == total:
            return messages


@pytest.fixture()
def app(mock_music_db, mock_encyclopedia, mock_broadcast, mock_film) -> FastAPI:
    return _build_app(mock_music_db, mock_encyclopedia, mock_broadcast, mock_film)


@pytest.fixture()
def client(app: FastAPI) -> TestClient:
    return TestClient(app)


# ======================================================================
# Health and providers
# ======================================================================


class TestHealth:
    def test_healthy(self, client: TestClient) -> None:
        response = client.get("/api/v1/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["version"] == "1.0.0"
        assert body["providers"]["musicbrainz"] is True

    def test_degraded_without_film_provider(self, app: FastAPI, client: TestClient) -> None:
        app.state.provider_registry = {"musicbrainz": True, "wikipedia": True, "tvmaze": True, "tmdb": False}
        assert client.get("/api/v1/health").json()["status"] == "degraded"

    def test_unhealthy_without_catalog(self, app: FastAPI, client: TestClient) -> None:
        app.state.provider_registry = {"musicbrainz": False, "wikipedia": True}
        assert client.get("/api/v1/health").json()["status"] == "unhealthy"

    def test_providers(self, client: TestClient) -> None:
        providers = client.get("/api/v1/providers").json()["providers"]
        assert [p["name"] for p in providers] == ["musicbrainz", "tmdb"]


# ======================================================================
# Search
# ======================================================================


class TestSearch:
    def test_recording_picker(
        self, client: TestClient, mock_music_db: MagicMock, heroes_recording: CandidateEntity
    ) -> None:
        mock_music_db.search_recordings.return_value = [heroes_recording]

        response = client.get("/api/v1/search/recordings", params={"title": "Heroes", "artist": "David Bowie"})

        assert response.status_code == 200
        body = response.json()
        assert body["kind"] == "recording"
        assert body["query_artist"] == "David Bowie"
        entry = body["results"][0]
        assert entry["entity"]["id"] == "rec-heroes"
        assert entry["date"] == "October 14, 1977"
        assert entry["subtitle"] == '"Heroes"'
        query = mock_music_db.search_recordings.await_args.args[0]
        assert query == 'recording:"Heroes" AND artist:"David Bowie" AND status:Official'

    def test_unreachable_catalog_gives_empty_list(self, client: TestClient) -> None:
        response = client.get("/api/v1/search/release-groups", params={"title": "Low"})
        assert response.status_code == 200
        assert response.json()["results"] == []

    def test_title_required(self, client: TestClient) -> None:
        assert client.get("/api/v1/search/recordings").status_code == 422
        assert client.get("/api/v1/search/recordings", params={"title": ""}).status_code == 422


# ======================================================================
# Date parsing
# ======================================================================


class TestParseDate:
    def test_us_numeric(self, client: TestClient) -> None:
        response = client.post("/api/v1/dates/parse", json={"text": "6/14/1955"})
        assert response.status_code == 200
        assert response.json() == {
            "year": 1955,
            "month": 6,
            "day": 14,
            "iso": "1955-06-14",
            "display": "June 14, 1955",
        }

    def test_unparseable_has_hint(self, client: TestClient) -> None:
        response = client.post("/api/v1/dates/parse", json={"text": "next tuesday"})
        assert response.status_code == 422
        detail = response.json()["detail"]
        assert detail["error"] == "DateNotParseableError"
        assert detail["hint"] == DATE_INPUT_HINT

    def test_empty_text_rejected(self, client: TestClient) -> None:
        assert client.post("/api/v1/dates/parse", json={"text": ""}).status_code == 422


# ======================================================================
# Error-handling middleware
# ======================================================================


class TestErrorMapping:
    @pytest.fixture()
    def failing_client(self, app: FastAPI) -> TestClient:
        @app.get("/boom/provider")
        async def provider_down() -> None:
            raise ProviderUnavailableError(message="catalog down", provider_name="musicbrainz")

        @app.get("/boom/config")
        async def bad_config() -> None:
            raise ConfigurationError(message="bad config")

        return TestClient(app)

    def test_provider_unavailable_is_503(self, failing_client: TestClient) -> None:
        response = failing_client.get("/boom/provider")
        assert response.status_code == 503
        assert response.json() == {"error": "ProviderUnavailableError", "detail": "catalog down", "hint": None}

    def test_other_errors_are_500(self, failing_client: TestClient) -> None:
        response = failing_client.get("/boom/config")
        assert response.status_code == 500
        assert response.json()["error"] == "ConfigurationError"


# ======================================================================
# Exploration WebSocket
# ======================================================================


class TestExploreWebSocket:
    def test_date_session_streams_panels(self, client: TestClient) -> None:
        with client.websocket_connect("/ws/explore") as ws:
            ws.send_json({"command": "date", "text": "14 June 1955"})
            messages = _receive_until_complete(ws, total=4)

        header = next(m for m in messages if m["type"] == "header")
        assert header["title"] == "June 14, 1955"
        assert header["artist"] == "Explore this date in history"
        panels = sorted(m["panel"] for m in messages if m["type"] == "panel")
        assert panels == ["broadcast", "concurrent", "films", "history"]
        assert all(m["data"] == [] for m in messages if m["type"] == "panel")

    def test_search_then_select(
        self, client: TestClient, mock_music_db: MagicMock, heroes_recording: CandidateEntity
    ) -> None:
        mock_music_db.search_recordings.return_value = [heroes_recording]

        with client.websocket_connect("/ws/explore") as ws:
            ws.send_json({"command": "search", "kind": "recording", "title": "Heroes"})
            picker = ws.receive_json()
            assert picker["type"] == "picker"
            entity = picker["entries"][0]["entity"]

            ws.send_json({"command": "select", "entity": entity})
            messages = _receive_until_complete(ws, total=6)

        header = next(m for m in messages if m["type"] == "header")
        assert header["title"] == "Heroes"
        assert header["date"] == "1977-10-14"
        assert header["date_display"] == "October 14, 1977"
        panels = {m["panel"]: m["data"] for m in messages if m["type"] == "panel"}
        assert set(panels) == {"detail", "history", "concurrent", "broadcast", "films", "artist"}
        assert panels["detail"]["title"] == "Heroes"
        assert panels["artist"] is None

    def test_invalid_command(self, client: TestClient) -> None:
        with client.websocket_connect("/ws/explore") as ws:
            ws.send_text('{"command": "dance"}')
            message = ws.receive_json()
        assert message["type"] == "error"
        assert message["error"] == "InvalidCommand"

    def test_malformed_json(self, client: TestClient) -> None:
        with client.websocket_connect("/ws/explore") as ws:
            ws.send_text("not json at all")
            assert ws.receive_json()["error"] == "InvalidCommand"

    def test_unparseable_date_sends_hint(self, client: TestClient) -> None:
        with client.websocket_connect("/ws/explore") as ws:
            ws.send_json({"command": "date", "text": "someday"})
            message = ws.receive_json()
        assert message == {
            "type": "error",
            "error": "DateNotParseableError",
            "detail": "Could not parse date: 'someday'",
            "hint": DATE_INPUT_HINT,
        }
