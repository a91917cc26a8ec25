"""TVmaze provider implementing IBroadcastProvider.

``GET /schedule?date=YYYY-MM-DD&country=CC`` returns every episode aired
that day in that country, each embedding its show.  No API key is needed.
"""

from __future__ import annotations

import datetime

import httpx
import structlog

from src.interfaces.broadcast_provider import IBroadcastProvider
from src.models.context import BroadcastEpisode
from src.utils.errors import ProviderUnavailableError
from src.utils.http_json import MALFORMED_PAYLOAD_ERRORS, fetch_json, log_malformed_payload

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_BASE_URL = "https://api.tvmaze.com"


class TVmazeProvider(IBroadcastProvider):
    """Daily TV schedules by country."""

    def __init__(self, http_client: httpx.AsyncClient, base_url: str = _DEFAULT_BASE_URL) -> None:
        self._client = http_client
        self._base_url = base_url.rstrip("/")

    async def get_schedule(self, day: datetime.date, country: str) -> list[BroadcastEpisode] | None:
        try:
            data = await fetch_json(
                self._client,
                f"{self._base_url}/schedule",
                provider_name=self.get_provider_name(),
                params={"date": day.isoformat(), "country": country},
            )
        except ProviderUnavailableError as exc:
            logger.warning(
                "provider_request_failed",
                provider=self.get_provider_name(),
                day=day.isoformat(),
                country=country,
                error=exc.message,
            )
            return None
        if not isinstance(data, list):
            return None
        try:
            return [self._map_episode(ep, country) for ep in data if isinstance(ep, dict)]
        except MALFORMED_PAYLOAD_ERRORS as exc:
            log_malformed_payload(self.get_provider_name(), "/schedule", exc)
            return None

    def get_provider_name(self) -> str:
        return "tvmaze"

    def is_available(self) -> bool:
        return True

    @staticmethod
    def _map_episode(ep: dict, country: str) -> BroadcastEpisode:
        show = ep.get("show") or {}
        network = (show.get("network") or {}).get("name") or (show.get("webChannel") or {}).get("name")
        return BroadcastEpisode(
            show_name=show.get("name"),
            episode_name=ep.get("name"),
            season=ep.get("season"),
            number=ep.get("number"),
            airdate=ep.get("airdate") or "",
            network=network,
            genres=tuple(show.get("genres") or ()),
            image_url=(show.get("image") or {}).get("medium"),
            show_url=show.get("url"),
            country=country,
        )
