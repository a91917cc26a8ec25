"""Unit tests for factory functions in src/main.py.

Covers component wiring (providers, limits, registries), the per-consumer
orchestrator factory, and the create_app factory.  The shared HTTP client
runs on an ``httpx.MockTransport`` so nothing touches the network.
"""

from __future__ import annotations

import httpx
import pytest
from fastapi import FastAPI

from src.config.settings import Settings
from src.main import build_components, build_orchestrator, create_app
from src.pipeline.orchestrator import AggregationOrchestrator
from src.providers.film.tmdb_provider import TMDBProvider
from src.providers.music_db.musicbrainz_provider import MusicBrainzProvider
from src.services.entity_search import EntitySearch
from src.utils.errors import ConfigurationError


# ======================================================================
# Shared helpers
# ======================================================================


def _settings(**overrides) -> Settings:
    """Build a Settings instance with safe defaults and optional overrides."""
    defaults = {
        "tmdb_api_token": "",
        "musicbrainz_base_url": "https://mb.test/ws/2",
        "http_user_agent": "whenItDropped-tests/1.0",
        "app_env": "test",
    }
    defaults.update(overrides)
    return Settings(**defaults)


def _empty_catalog(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, json={"recordings": [], "release-groups": []})


# ======================================================================
# build_components
# ======================================================================


class TestBuildComponents:
    @pytest.mark.asyncio
    async def test_provider_registry_without_tmdb_token(self) -> None:
        components = build_components(_settings(), transport=httpx.MockTransport(_empty_catalog))
        try:
            assert components["provider_registry"] == {
                "musicbrainz": True,
                "wikipedia": True,
                "tvmaze": True,
                "tmdb": False,
            }
            assert isinstance(components["music_db"], MusicBrainzProvider)
            assert isinstance(components["film"], TMDBProvider)
            assert isinstance(components["entity_search"], EntitySearch)
        finally:
            await components["http_client"].aclose()

    @pytest.mark.asyncio
    async def test_provider_list_types(self) -> None:
        components = build_components(_settings(tmdb_api_token="token"))
        try:
            assert components["provider_list"] == [
                {"name": "musicbrainz", "type": "music_db", "available": True},
                {"name": "wikipedia", "type": "encyclopedia", "available": True},
                {"name": "tvmaze", "type": "broadcast", "available": True},
                {"name": "tmdb", "type": "film", "available": True},
            ]
        finally:
            await components["http_client"].aclose()

    @pytest.mark.asyncio
    async def test_limits_from_config(self) -> None:
        components = build_components(_settings(), {"panels": {"picker_limit": 3}})
        try:
            assert components["limits"].picker_limit == 3
        finally:
            await components["http_client"].aclose()

    def test_invalid_panels_config(self) -> None:
        with pytest.raises(ConfigurationError):
            build_components(_settings(), {"panels": {"broadcast_window_days": -1}})

    @pytest.mark.asyncio
    async def test_client_carries_user_agent_and_transport(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return _empty_catalog(request)

        components = build_components(_settings(), transport=httpx.MockTransport(handler))
        try:
            assert await components["entity_search"].picker_list("Heroes") == []
        finally:
            await components["http_client"].aclose()

        assert seen[0].url.host == "mb.test"
        assert seen[0].headers["User-Agent"] == "whenItDropped-tests/1.0"


# ======================================================================
# build_orchestrator
# ======================================================================


class TestBuildOrchestrator:
    @pytest.mark.asyncio
    async def test_each_consumer_gets_its_own_registry(self, sink) -> None:
        components = build_components(_settings())
        try:
            first = build_orchestrator(components, sink)
            second = build_orchestrator(components, sink)
            assert isinstance(first, AggregationOrchestrator)
            assert first.registry is not second.registry
        finally:
            await components["http_client"].aclose()


# ======================================================================
# create_app
# ======================================================================


class TestCreateApp:
    def test_returns_fastapi_with_routes(self) -> None:
        application = create_app()
        assert isinstance(application, FastAPI)
        paths = {route.path for route in application.routes}
        assert "/api/v1/health" in paths
        assert "/api/v1/search/recordings" in paths
        assert "/api/v1/dates/parse" in paths
        assert "/ws/explore" in paths
