"""TMDB provider implementing IFilmProvider.

Uses The Movie Database v3 API with a static read-access bearer token:
``/discover/movie`` filtered by primary release date and sorted by
popularity, and ``/movie/{id}/credits`` for crew lists.
"""

from __future__ import annotations

import datetime

import httpx
import structlog

from src.interfaces.film_provider import IFilmProvider
from src.models.context import CrewCredit, FilmRelease
from src.services.date_parser import parse_iso
from src.utils.errors import ProviderUnavailableError
from src.utils.http_json import MALFORMED_PAYLOAD_ERRORS, fetch_json, log_malformed_payload

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_BASE_URL = "https://api.themoviedb.org/3"
_DEFAULT_IMAGE_BASE_URL = "https://image.tmdb.org/t/p/w200"
_FILM_PAGE_URL = "https://www.themoviedb.org/movie/{id}"


class TMDBProvider(IFilmProvider):
    """Film releases and credits from TMDB.

    Parameters
    ----------
    http_client:
        Shared async client.
    api_token:
        TMDB v4 read-access token, sent as ``Authorization: Bearer``.  An
        empty token makes the provider unavailable.
    base_url, image_base_url:
        API root and poster image root (poster paths are appended).
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        api_token: str,
        base_url: str = _DEFAULT_BASE_URL,
        image_base_url: str = _DEFAULT_IMAGE_BASE_URL,
    ) -> None:
        self._client = http_client
        self._api_token = api_token
        self._base_url = base_url.rstrip("/")
        self._image_base_url = image_base_url.rstrip("/")

    async def _get(self, path: str, params: dict) -> dict | None:
        if not self.is_available():
            return None
        try:
            data = await fetch_json(
                self._client,
                f"{self._base_url}{path}",
                provider_name=self.get_provider_name(),
                params={**params, "language": "en-US"},
                headers={"Authorization": f"Bearer {self._api_token}"},
            )
        except ProviderUnavailableError as exc:
            logger.warning("provider_request_failed", provider=self.get_provider_name(), path=path, error=exc.message)
            return None
        return data if isinstance(data, dict) else None

    # ------------------------------------------------------------------
    # IFilmProvider implementation
    # ------------------------------------------------------------------

    async def discover_films(
        self, start: datetime.date, end: datetime.date
    ) -> list[FilmRelease] | None:
        data = await self._get(
            "/discover/movie",
            {
                "primary_release_date.gte": start.isoformat(),
                "primary_release_date.lte": end.isoformat(),
                "sort_by": "popularity.desc",
            },
        )
        if data is None:
            return None
        try:
            return [self._map_film(item) for item in data.get("results") or [] if item.get("id") is not None]
        except MALFORMED_PAYLOAD_ERRORS as exc:
            log_malformed_payload(self.get_provider_name(), "/discover/movie", exc)
            return None

    async def get_credits(self, film_id: int) -> list[CrewCredit] | None:
        path = f"/movie/{film_id}/credits"
        data = await self._get(path, {})
        if data is None:
            return None
        try:
            return [
                CrewCredit(name=member["name"], job=member.get("job") or "")
                for member in data.get("crew") or []
                if member.get("name")
            ]
        except MALFORMED_PAYLOAD_ERRORS as exc:
            log_malformed_payload(self.get_provider_name(), path, exc)
            return None

    def get_provider_name(self) -> str:
        return "tmdb"

    def is_available(self) -> bool:
        return bool(self._api_token)

    def _map_film(self, item: dict) -> FilmRelease:
        poster_path = item.get("poster_path")
        return FilmRelease(
            id=item["id"],
            title=item.get("title") or item.get("original_title") or "",
            release_date=parse_iso(item.get("release_date")),
            popularity=item.get("popularity") or 0.0,
            poster_url=f"{self._image_base_url}{poster_path}" if poster_path else None,
            page_url=_FILM_PAGE_URL.format(id=item["id"]),
        )
