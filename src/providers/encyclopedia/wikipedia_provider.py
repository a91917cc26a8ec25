"""Wikipedia provider implementing IEncyclopediaProvider.

Uses the Wikimedia REST API: ``/page/summary/{title}`` for article
summaries and ``/feed/onthisday/all/{MM}/{DD}`` for the events, births and
deaths recorded on a calendar day.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

import httpx
import structlog

from src.interfaces.encyclopedia_provider import IEncyclopediaProvider
from src.models.context import EncyclopediaSummary, OnThisDayEntry, OnThisDayFeed
from src.utils.errors import ProviderUnavailableError
from src.utils.http_json import MALFORMED_PAYLOAD_ERRORS, fetch_json, log_malformed_payload
from src.utils.text_normalizer import title_slug

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_BASE_URL = "https://en.wikipedia.org/api/rest_v1"


class WikipediaProvider(IEncyclopediaProvider):
    """English Wikipedia summaries and "on this day" feeds."""

    def __init__(self, http_client: httpx.AsyncClient, base_url: str = _DEFAULT_BASE_URL) -> None:
        self._client = http_client
        self._base_url = base_url.rstrip("/")

    async def _get(self, path: str) -> dict | None:
        try:
            data = await fetch_json(
                self._client,
                f"{self._base_url}{path}",
                provider_name=self.get_provider_name(),
            )
        except ProviderUnavailableError as exc:
            # Missing pages are routine while walking title variants.
            logger.debug("provider_request_failed", provider=self.get_provider_name(), path=path, error=exc.message)
            return None
        return data if isinstance(data, dict) else None

    # ------------------------------------------------------------------
    # IEncyclopediaProvider implementation
    # ------------------------------------------------------------------

    async def get_summary(self, title: str) -> EncyclopediaSummary | None:
        if not title or not title.strip():
            return None
        path = f"/page/summary/{quote(title_slug(title), safe='')}"
        data = await self._get(path)
        if data is None:
            return None
        try:
            return EncyclopediaSummary(
                title=data.get("title") or title,
                page_type=data.get("type") or "standard",
                extract=data.get("extract") or None,
                page_url=((data.get("content_urls") or {}).get("desktop") or {}).get("page"),
                thumbnail_url=(data.get("thumbnail") or {}).get("source"),
            )
        except MALFORMED_PAYLOAD_ERRORS as exc:
            log_malformed_payload(self.get_provider_name(), path, exc)
            return None

    async def get_on_this_day(self, month: int, day: int) -> OnThisDayFeed | None:
        path = f"/feed/onthisday/all/{month:02d}/{day:02d}"
        data = await self._get(path)
        if data is None:
            return None
        try:
            return OnThisDayFeed(
                events=self._map_entries(data.get("events")),
                births=self._map_entries(data.get("births")),
                deaths=self._map_entries(data.get("deaths")),
            )
        except MALFORMED_PAYLOAD_ERRORS as exc:
            log_malformed_payload(self.get_provider_name(), path, exc)
            return None

    def get_provider_name(self) -> str:
        return "wikipedia"

    def is_available(self) -> bool:
        return True

    @staticmethod
    def _map_entries(items: Any) -> tuple[OnThisDayEntry, ...]:
        entries: list[OnThisDayEntry] = []
        for item in items or []:
            text = item.get("text") if isinstance(item, dict) else None
            if not text:
                continue
            year = item.get("year")
            entries.append(OnThisDayEntry(year=year if isinstance(year, int) else None, text=text))
        return tuple(entries)
