"""Shared pytest fixtures for the whenItDropped test suite."""

from __future__ import annotations

import asyncio
import datetime
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.config.loader import PanelLimits
from src.interfaces.broadcast_provider import IBroadcastProvider
from src.interfaces.encyclopedia_provider import IEncyclopediaProvider
from src.interfaces.film_provider import IFilmProvider
from src.interfaces.music_db_provider import IMusicDatabaseProvider
from src.interfaces.presentation_sink import IPresentationSink
from src.models.catalog import (
    CandidateEntity,
    CandidateRelease,
    EntityKind,
    ReleaseStatus,
)
from src.models.dates import PartialDate
from src.pipeline.orchestrator import AggregationOrchestrator
from src.services.date_parser import parse_iso


# ---------------------------------------------------------------------------
# Recording sink
# ---------------------------------------------------------------------------


class RecordingSink(IPresentationSink):
    """Presentation sink that records every call for assertions."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, Any]] = []
        self.progress: list[tuple[int, int]] = []

    def payloads(self, method: str) -> list[Any]:
        return [payload for name, payload in self.calls if name == method]

    async def render_picker_list(self, entities: list[CandidateEntity]) -> None:
        self.calls.append(("picker", entities))

    async def render_canonical_header(self, title: str, artist: str, date: PartialDate | None) -> None:
        self.calls.append(("header", (title, artist, date)))

    async def render_detail_panel(self, detail: Any) -> None:
        self.calls.append(("detail", detail))

    async def render_history_panel(self, events: list) -> None:
        self.calls.append(("history", events))

    async def render_concurrent_panel(self, releases: list) -> None:
        self.calls.append(("concurrent", releases))

    async def render_broadcast_panel(self, premieres: list) -> None:
        self.calls.append(("broadcast", premieres))

    async def render_film_panel(self, films: list) -> None:
        self.calls.append(("films", films))

    async def render_artist_panel(self, bio: Any) -> None:
        self.calls.append(("artist", bio))

    async def report_progress(self, done: int, total: int) -> None:
        self.progress.append((done, total))


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------


def make_release(
    release_id: str,
    date: str | None,
    primary_type: str | None = "Album",
    secondary_types: tuple[str, ...] = (),
    status: ReleaseStatus = ReleaseStatus.OFFICIAL,
    title: str = "",
    country: str | None = None,
) -> CandidateRelease:
    return CandidateRelease(
        id=release_id,
        title=title or release_id,
        date=parse_iso(date),
        primary_type=primary_type,
        secondary_types=secondary_types,
        status=status,
        country=country,
        release_group_id=f"rg-{release_id}",
    )


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def release_factory():
    """Return :func:`make_release` so tests can build catalog releases."""
    return make_release


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def heroes_recording() -> CandidateEntity:
    """A recording whose canonical release is the 1977 studio album."""
    return CandidateEntity(
        id="rec-heroes",
        kind=EntityKind.RECORDING,
        title="Heroes",
        artist_name="David Bowie",
        artist_id="artist-bowie",
        score=100,
        length_ms=371000,
        releases=(
            make_release("heroes-lp", "1977-10-14", title='"Heroes"', country="GB"),
            make_release("heroes-single", "1977-09-23", primary_type="Single", title="Heroes"),
            make_release(
                "changestwobowie",
                "1981-11",
                secondary_types=("Compilation",),
                title="ChangesTwoBowie",
            ),
            make_release("stage", "1978-09-08", secondary_types=("Live",), title="Stage"),
        ),
    )


@pytest.fixture
def mock_music_db() -> MagicMock:
    """Catalog provider mock; every call yields "unavailable" by default."""
    provider = MagicMock(spec=IMusicDatabaseProvider)
    provider.search_recordings = AsyncMock(return_value=None)
    provider.search_release_groups = AsyncMock(return_value=None)
    provider.lookup_recording = AsyncMock(return_value=None)
    provider.search_releases_on_date = AsyncMock(return_value=None)
    provider.get_artist = AsyncMock(return_value=None)
    provider.get_provider_name.return_value = "musicbrainz"
    provider.is_available.return_value = True
    return provider


@pytest.fixture
def mock_encyclopedia() -> MagicMock:
    provider = MagicMock(spec=IEncyclopediaProvider)
    provider.get_summary = AsyncMock(return_value=None)
    provider.find_summary = AsyncMock(return_value=None)
    provider.get_on_this_day = AsyncMock(return_value=None)
    provider.get_provider_name.return_value = "wikipedia"
    provider.is_available.return_value = True
    return provider


@pytest.fixture
def mock_broadcast() -> MagicMock:
    provider = MagicMock(spec=IBroadcastProvider)
    provider.get_schedule = AsyncMock(return_value=None)
    provider.get_provider_name.return_value = "tvmaze"
    provider.is_available.return_value = True
    return provider


@pytest.fixture
def mock_film() -> MagicMock:
    provider = MagicMock(spec=IFilmProvider)
    provider.discover_films = AsyncMock(return_value=None)
    provider.get_credits = AsyncMock(return_value=None)
    provider.get_provider_name.return_value = "tmdb"
    provider.is_available.return_value = True
    return provider


@pytest.fixture
def small_limits() -> PanelLimits:
    """Narrow windows so fan-outs stay small in tests."""
    return PanelLimits(history_window_days=1, broadcast_window_days=1, broadcast_countries=("US",))


@pytest.fixture
def orchestrator(
    mock_music_db: MagicMock,
    mock_encyclopedia: MagicMock,
    mock_broadcast: MagicMock,
    mock_film: MagicMock,
    sink: RecordingSink,
    small_limits: PanelLimits,
) -> AggregationOrchestrator:
    return AggregationOrchestrator(
        music_db=mock_music_db,
        encyclopedia=mock_encyclopedia,
        broadcast=mock_broadcast,
        film=mock_film,
        sink=sink,
        limits=small_limits,
        semaphore=asyncio.Semaphore(4),
    )


@pytest.fixture
def june_14_1955() -> datetime.date:
    return datetime.date(1955, 6, 14)
