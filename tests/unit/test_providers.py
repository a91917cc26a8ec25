"""Unit tests for the HTTP provider adapters.

Each adapter runs against an ``httpx.MockTransport`` so the real request
building, status handling and payload mapping are exercised without a
network.
"""

from __future__ import annotations

import datetime
from typing import Callable

import httpx
import pytest

from src.models.catalog import EntityKind, ReleaseStatus
from src.models.dates import PartialDate
from src.providers.broadcast.tvmaze_provider import TVmazeProvider
from src.providers.encyclopedia.wikipedia_provider import WikipediaProvider
from src.providers.film.tmdb_provider import TMDBProvider
from src.providers.music_db.musicbrainz_provider import MusicBrainzProvider
from src.utils.http_json import build_http_client

Handler = Callable[[httpx.Request], httpx.Response]


def _client(handler: Handler) -> httpx.AsyncClient:
    return build_http_client("whenItDropped-tests/1.0", transport=httpx.MockTransport(handler))


class _Recorder:
    """Transport handler that serves one canned response and keeps requests."""

    def __init__(self, status: int = 200, payload: object = None) -> None:
        self.status = status
        self.payload = payload
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status, json=self.payload)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


# ======================================================================
# MusicBrainz
# ======================================================================


RECORDING_PAYLOAD = {
    "id": "rec-heroes",
    "title": "Heroes",
    "score": 100,
    "length": 371000,
    "artist-credit": [{"name": "David Bowie", "artist": {"id": "artist-bowie", "name": "David Bowie"}}],
    "releases": [
        {
            "id": "heroes-lp",
            "title": '"Heroes"',
            "date": "1977-10-14",
            "status": "Official",
            "country": "GB",
            "release-group": {"id": "rg-heroes", "primary-type": "Album", "secondary-types": []},
        },
        {
            "id": "bootleg",
            "title": "Live Somewhere",
            "date": "not a date",
            "status": "Bootleg",
            "release-group": {"id": "rg-boot", "primary-type": "Album", "secondary-types": ["Live"]},
        },
    ],
}


class TestMusicBrainzProvider:
    @pytest.mark.asyncio
    async def test_search_recordings_maps_payload(self) -> None:
        recorder = _Recorder(payload={"recordings": [RECORDING_PAYLOAD]})
        async with _client(recorder) as client:
            provider = MusicBrainzProvider(client, base_url="https://mb.test/ws/2")
            results = await provider.search_recordings('recording:"Heroes"', limit=5)

        assert results is not None and len(results) == 1
        recording = results[0]
        assert recording.kind == EntityKind.RECORDING
        assert recording.artist_name == "David Bowie"
        assert recording.artist_id == "artist-bowie"
        assert recording.length_ms == 371000

        lp, bootleg = recording.releases
        assert lp.date == PartialDate(year=1977, month=10, day=14, raw="1977-10-14")
        assert lp.release_group_id == "rg-heroes"
        assert lp.status == ReleaseStatus.OFFICIAL
        assert bootleg.date is None
        assert bootleg.secondary_types == ("Live",)

        request = recorder.last
        assert request.url.path == "/ws/2/recording"
        assert request.url.params["fmt"] == "json"
        assert request.url.params["limit"] == "5"
        assert request.headers["User-Agent"] == "whenItDropped-tests/1.0"

    @pytest.mark.asyncio
    async def test_search_release_groups(self) -> None:
        recorder = _Recorder(
            payload={
                "release-groups": [
                    {
                        "id": "rg-low",
                        "title": "Low",
                        "primary-type": "Album",
                        "first-release-date": "1977-01-14",
                        "score": 98,
                        "artist-credit": [{"name": "David Bowie", "artist": {"id": "a", "name": "David Bowie"}}],
                    }
                ]
            }
        )
        async with _client(recorder) as client:
            groups = await MusicBrainzProvider(client).search_release_groups('releasegroup:"Low"')

        assert groups[0].kind == EntityKind.RELEASE_GROUP
        assert groups[0].primary_type == "Album"
        assert groups[0].first_release_date.year == 1977
        assert recorder.last.url.path == "/ws/2/release-group"

    @pytest.mark.asyncio
    async def test_service_unavailable_is_none(self) -> None:
        async with _client(_Recorder(status=503, payload={"error": "busy"})) as client:
            assert await MusicBrainzProvider(client).search_recordings("x") is None

    @pytest.mark.asyncio
    async def test_timeout_is_none(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("too slow", request=request)

        async with _client(handler) as client:
            assert await MusicBrainzProvider(client).lookup_recording("rec-heroes") is None

    @pytest.mark.asyncio
    async def test_malformed_json_is_none(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=b"<html>not json</html>")

        async with _client(handler) as client:
            assert await MusicBrainzProvider(client).search_recordings("x") is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "payload",
        [
            {"recordings": [{"id": "r1", "title": "Heroes", "length": "six minutes"}]},
            {"recordings": [None]},
            {"recordings": [{"id": "r1", "artist-credit": "David Bowie"}]},
        ],
    )
    async def test_unmappable_search_payload_is_none(self, payload: dict) -> None:
        async with _client(_Recorder(payload=payload)) as client:
            assert await MusicBrainzProvider(client).search_recordings("Heroes") is None

    @pytest.mark.asyncio
    async def test_unmappable_lookup_is_none(self) -> None:
        async with _client(_Recorder(payload={"id": "r1", "releases": [None]})) as client:
            assert await MusicBrainzProvider(client).lookup_recording("r1") is None

    @pytest.mark.asyncio
    async def test_unmappable_release_groups_and_dates_are_none(self) -> None:
        payload = {"release-groups": [{"id": "rg", "score": "high"}], "releases": [None]}
        async with _client(_Recorder(payload=payload)) as client:
            provider = MusicBrainzProvider(client)
            assert await provider.search_release_groups("Low") is None
            assert await provider.search_releases_on_date(datetime.date(1955, 6, 14)) is None

    @pytest.mark.asyncio
    async def test_unmappable_artist_is_none(self) -> None:
        async with _client(_Recorder(payload={"id": "a1", "life-span": "1947-2016"})) as client:
            assert await MusicBrainzProvider(client).get_artist("a1") is None

    @pytest.mark.asyncio
    async def test_lookup_recording(self) -> None:
        recorder = _Recorder(payload=RECORDING_PAYLOAD)
        async with _client(recorder) as client:
            recording = await MusicBrainzProvider(client).lookup_recording("rec-heroes")

        assert recording.id == "rec-heroes"
        assert recorder.last.url.path == "/ws/2/recording/rec-heroes"
        assert recorder.last.url.params["inc"] == "releases+artist-credits+release-groups"

    @pytest.mark.asyncio
    async def test_lookup_without_id_is_none(self) -> None:
        async with _client(_Recorder(payload={"error": "Not Found"})) as client:
            assert await MusicBrainzProvider(client).lookup_recording("missing") is None

    @pytest.mark.asyncio
    async def test_releases_on_date(self) -> None:
        recorder = _Recorder(
            payload={
                "releases": [
                    {
                        "id": "r1",
                        "title": "Rock Around the Clock",
                        "date": "1955-06-14",
                        "score": 87,
                        "artist-credit": [{"name": "Bill Haley", "artist": {"id": "bh", "name": "Bill Haley"}}],
                    },
                    {"title": "No id"},
                ]
            }
        )
        async with _client(recorder) as client:
            releases = await MusicBrainzProvider(client).search_releases_on_date(datetime.date(1955, 6, 14))

        assert [r.id for r in releases] == ["r1"]
        assert releases[0].artist_name == "Bill Haley"
        assert releases[0].score == 87
        assert recorder.last.url.params["query"] == "date:1955-06-14 AND status:Official"

    @pytest.mark.asyncio
    async def test_get_artist(self) -> None:
        recorder = _Recorder(
            payload={
                "id": "artist-bowie",
                "name": "David Bowie",
                "type": "Person",
                "country": "GB",
                "area": {"name": "United Kingdom"},
                "begin-area": {"name": "Brixton"},
                "life-span": {"begin": "1947-01-08"},
            }
        )
        async with _client(recorder) as client:
            artist = await MusicBrainzProvider(client).get_artist("artist-bowie")

        assert artist.area == "United Kingdom"
        assert artist.begin_area == "Brixton"
        assert artist.life_span_begin.year == 1947
        assert recorder.last.url.path == "/ws/2/artist/artist-bowie"

    def test_metadata(self) -> None:
        provider = MusicBrainzProvider(httpx.AsyncClient())
        assert provider.get_provider_name() == "musicbrainz"
        assert provider.is_available() is True


# ======================================================================
# Wikipedia
# ======================================================================


class TestWikipediaProvider:
    @pytest.mark.asyncio
    async def test_get_summary(self) -> None:
        recorder = _Recorder(
            payload={
                "title": "David Bowie",
                "type": "standard",
                "extract": "David Robert Jones was an English singer.",
                "content_urls": {"desktop": {"page": "https://en.wikipedia.org/wiki/David_Bowie"}},
                "thumbnail": {"source": "https://upload.example/bowie.jpg"},
            }
        )
        async with _client(recorder) as client:
            summary = await WikipediaProvider(client).get_summary("David Bowie")

        assert summary.is_usable
        assert summary.page_url == "https://en.wikipedia.org/wiki/David_Bowie"
        assert summary.thumbnail_url == "https://upload.example/bowie.jpg"
        assert recorder.last.url.path == "/api/rest_v1/page/summary/David_Bowie"

    @pytest.mark.asyncio
    async def test_missing_page_is_none(self) -> None:
        async with _client(_Recorder(status=404, payload={"type": "not_found"})) as client:
            assert await WikipediaProvider(client).get_summary("No Such Page") is None

    @pytest.mark.asyncio
    async def test_blank_title_skips_request(self) -> None:
        recorder = _Recorder(payload={})
        async with _client(recorder) as client:
            assert await WikipediaProvider(client).get_summary("  ") is None
        assert recorder.requests == []

    @pytest.mark.asyncio
    async def test_on_this_day(self) -> None:
        recorder = _Recorder(
            payload={
                "events": [{"year": 1955, "text": "An event."}, {"year": 1960}],
                "births": [{"year": "unknown", "text": "Someone born."}],
                "deaths": [],
            }
        )
        async with _client(recorder) as client:
            feed = await WikipediaProvider(client).get_on_this_day(6, 4)

        assert recorder.last.url.path == "/api/rest_v1/feed/onthisday/all/06/04"
        assert [e.text for e in feed.events] == ["An event."]
        assert feed.births[0].year is None
        assert feed.deaths == ()

    @pytest.mark.asyncio
    async def test_find_summary_skips_disambiguation(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path.endswith("/Yellow_(Coldplay_song)"):
                return httpx.Response(404, json={"type": "not_found"})
            if request.url.path.endswith("/Yellow_(song)"):
                return httpx.Response(200, json={"title": "Yellow", "type": "disambiguation", "extract": "May refer to"})
            return httpx.Response(200, json={"title": "Yellow", "type": "standard", "extract": "A colour."})

        async with _client(handler) as client:
            summary = await WikipediaProvider(client).find_summary(
                ["Yellow (Coldplay song)", "Yellow (song)", "Yellow"]
            )

        assert summary is not None
        assert summary.extract == "A colour."
    @pytest.mark.asyncio
    async def test_unmappable_summary_is_none(self) -> None:
        payload = {"title": "David Bowie", "content_urls": ["https://en.wikipedia.org/wiki/David_Bowie"]}
        async with _client(_Recorder(payload=payload)) as client:
            assert await WikipediaProvider(client).get_summary("David Bowie") is None

    @pytest.mark.asyncio
    async def test_unmappable_on_this_day_is_none(self) -> None:
        payload = {"events": [{"year": 1955, "text": ["not", "a", "string"]}]}
        async with _client(_Recorder(payload=payload)) as client:
            assert await WikipediaProvider(client).get_on_this_day(6, 14) is None



# ======================================================================
# TVmaze
# ======================================================================


class TestTVmazeProvider:
    @pytest.mark.asyncio
    async def test_schedule_maps_episodes(self) -> None:
        recorder = _Recorder(
            payload=[
                {
                    "name": "Pilot",
                    "season": 1,
                    "number": 1,
                    "airdate": "1955-06-14",
                    "show": {
                        "name": "Gunsmoke",
                        "genres": ["Western"],
                        "network": {"name": "CBS"},
                        "image": {"medium": "https://static.tvmaze.com/gunsmoke.jpg"},
                        "url": "https://www.tvmaze.com/shows/1",
                    },
                },
                {
                    "name": "Episode 2",
                    "season": 1,
                    "number": 2,
                    "airdate": "1955-06-14",
                    "show": {"name": "Streamer", "network": None, "webChannel": {"name": "Netflix"}},
                },
                "garbage",
            ]
        )
        async with _client(recorder) as client:
            episodes = await TVmazeProvider(client).get_schedule(datetime.date(1955, 6, 14), "US")

        assert len(episodes) == 2
        assert episodes[0].is_series_premiere
        assert episodes[0].network == "CBS"
        assert episodes[0].country == "US"
        assert episodes[1].network == "Netflix"
        assert recorder.last.url.params["date"] == "1955-06-14"
        assert recorder.last.url.params["country"] == "US"

    @pytest.mark.asyncio
    async def test_non_list_payload_is_none(self) -> None:
        async with _client(_Recorder(payload={"unexpected": True})) as client:
            assert await TVmazeProvider(client).get_schedule(datetime.date(1955, 6, 14), "GB") is None

    @pytest.mark.asyncio
    async def test_server_error_is_none(self) -> None:
        async with _client(_Recorder(status=500, payload=[])) as client:
            assert await TVmazeProvider(client).get_schedule(datetime.date(1955, 6, 14), "GB") is None

    @pytest.mark.asyncio
    async def test_unmappable_episode_is_none(self) -> None:
        payload = [{"name": "Pilot", "season": 1, "number": 1, "show": "The Show"}]
        async with _client(_Recorder(payload=payload)) as client:
            assert await TVmazeProvider(client).get_schedule(datetime.date(1955, 6, 14), "GB") is None


# ======================================================================
# TMDB
# ======================================================================


class TestTMDBProvider:
    @pytest.mark.asyncio
    async def test_without_token_makes_no_request(self) -> None:
        recorder = _Recorder(payload={"results": []})
        async with _client(recorder) as client:
            provider = TMDBProvider(client, api_token="")
            assert provider.is_available() is False
            assert await provider.discover_films(datetime.date(1955, 6, 10), datetime.date(1955, 6, 18)) is None
            assert await provider.get_credits(1) is None
        assert recorder.requests == []

    @pytest.mark.asyncio
    async def test_discover_films(self) -> None:
        recorder = _Recorder(
            payload={
                "results": [
                    {
                        "id": 550,
                        "title": "Film",
                        "release_date": "1955-06-15",
                        "popularity": 12.5,
                        "poster_path": "/poster.jpg",
                    },
                    {"title": "No id"},
                ]
            }
        )
        async with _client(recorder) as client:
            provider = TMDBProvider(client, api_token="token-123", image_base_url="https://img.test/w200")
            films = await provider.discover_films(datetime.date(1955, 6, 10), datetime.date(1955, 6, 18))

        assert len(films) == 1
        film = films[0]
        assert film.poster_url == "https://img.test/w200/poster.jpg"
        assert film.page_url == "https://www.themoviedb.org/movie/550"
        assert film.release_date.day == 15

        request = recorder.last
        assert request.headers["Authorization"] == "Bearer token-123"
        assert request.url.params["primary_release_date.gte"] == "1955-06-10"
        assert request.url.params["primary_release_date.lte"] == "1955-06-18"
        assert request.url.params["sort_by"] == "popularity.desc"

    @pytest.mark.asyncio
    async def test_get_credits(self) -> None:
        recorder = _Recorder(
            payload={
                "crew": [
                    {"name": "Ann", "job": "Director"},
                    {"name": "Bob", "job": "Screenplay"},
                    {"job": "Producer"},
                ]
            }
        )
        async with _client(recorder) as client:
            crew = await TMDBProvider(client, api_token="t").get_credits(550)

        assert [(c.name, c.job) for c in crew] == [("Ann", "Director"), ("Bob", "Screenplay")]
        assert recorder.last.url.path == "/3/movie/550/credits"

    @pytest.mark.asyncio
    async def test_unmappable_discover_is_none(self) -> None:
        async with _client(_Recorder(payload={"results": [None]})) as client:
            provider = TMDBProvider(client, api_token="t")
            assert await provider.discover_films(datetime.date(1955, 6, 10), datetime.date(1955, 6, 18)) is None

    @pytest.mark.asyncio
    async def test_unmappable_credits_is_none(self) -> None:
        async with _client(_Recorder(payload={"crew": [{"name": 7, "job": "Director"}]})) as client:
            assert await TMDBProvider(client, api_token="t").get_credits(550) is None
