"""MusicBrainz provider implementing IMusicDatabaseProvider.

Talks to the MusicBrainz WS/2 JSON API over the shared ``httpx.AsyncClient``
for recording and release-group searches, full recording lookups, releases
issued on an exact date, and artist records.

Every call resolves to a mapped payload or ``None``; transport failures
and payloads that do not map onto the catalog models are logged and
swallowed at this boundary.  Release dates that are not well-formed
partial ISO dates are dropped while mapping.
"""

from __future__ import annotations

import datetime
from typing import Any

import httpx
import structlog

from src.interfaces.music_db_provider import IMusicDatabaseProvider
from src.models.catalog import (
    ArtistRecord,
    CandidateEntity,
    CandidateRelease,
    EntityKind,
    OtherRelease,
    ReleaseStatus,
)
from src.services.date_parser import parse_iso
from src.utils.errors import ProviderUnavailableError
from src.utils.http_json import MALFORMED_PAYLOAD_ERRORS, fetch_json, log_malformed_payload

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_BASE_URL = "https://musicbrainz.org/ws/2"
_RECORDING_LOOKUP_INC = "releases+artist-credits+release-groups"


class MusicBrainzProvider(IMusicDatabaseProvider):
    """MusicBrainz metadata provider.

    MusicBrainz is a free, open music encyclopedia.  No API key is
    required, but clients must identify themselves with a User-Agent, which
    the shared HTTP client carries.

    Parameters
    ----------
    http_client:
        Shared async client (see :func:`src.utils.http_json.build_http_client`).
    base_url:
        WS/2 root, overridable for tests and mirrors.
    """

    def __init__(self, http_client: httpx.AsyncClient, base_url: str = _DEFAULT_BASE_URL) -> None:
        self._client = http_client
        self._base_url = base_url.rstrip("/")

    # ------------------------------------------------------------------
    # Transport helper
    # ------------------------------------------------------------------

    async def _get(self, path: str, params: dict[str, Any]) -> dict | None:
        try:
            data = await fetch_json(
                self._client,
                f"{self._base_url}{path}",
                provider_name=self.get_provider_name(),
                params={**params, "fmt": "json"},
            )
        except ProviderUnavailableError as exc:
            logger.warning("provider_request_failed", provider=self.get_provider_name(), path=path, error=exc.message)
            return None
        return data if isinstance(data, dict) else None

    # ------------------------------------------------------------------
    # IMusicDatabaseProvider implementation
    # ------------------------------------------------------------------

    async def search_recordings(self, query: str, limit: int = 50) -> list[CandidateEntity] | None:
        data = await self._get(
            "/recording",
            {"query": query, "limit": limit, "inc": "releases+artist-credits"},
        )
        if data is None:
            return None
        try:
            recordings = [self._map_recording(rec) for rec in data.get("recordings") or []]
        except MALFORMED_PAYLOAD_ERRORS as exc:
            log_malformed_payload(self.get_provider_name(), "/recording", exc)
            return None
        logger.debug("musicbrainz_recordings_found", query=query, count=len(recordings))
        return recordings

    async def search_release_groups(
        self, query: str, limit: int = 20
    ) -> list[CandidateEntity] | None:
        data = await self._get(
            "/release-group",
            {"query": query, "limit": limit, "inc": "artist-credits"},
        )
        if data is None:
            return None
        try:
            groups = [self._map_release_group(rg) for rg in data.get("release-groups") or []]
        except MALFORMED_PAYLOAD_ERRORS as exc:
            log_malformed_payload(self.get_provider_name(), "/release-group", exc)
            return None
        logger.debug("musicbrainz_release_groups_found", query=query, count=len(groups))
        return groups

    async def lookup_recording(self, recording_id: str) -> CandidateEntity | None:
        path = f"/recording/{recording_id}"
        data = await self._get(path, {"inc": _RECORDING_LOOKUP_INC})
        if data is None or not data.get("id"):
            return None
        try:
            return self._map_recording(data)
        except MALFORMED_PAYLOAD_ERRORS as exc:
            log_malformed_payload(self.get_provider_name(), path, exc)
            return None

    async def search_releases_on_date(
        self, day: datetime.date, limit: int = 25
    ) -> list[OtherRelease] | None:
        query = f"date:{day.isoformat()} AND status:Official"
        data = await self._get("/release", {"query": query, "limit": limit, "inc": "artist-credits"})
        if data is None:
            return None
        try:
            return [self._map_other_release(rel) for rel in data.get("releases") or [] if rel.get("id")]
        except MALFORMED_PAYLOAD_ERRORS as exc:
            log_malformed_payload(self.get_provider_name(), "/release", exc)
            return None

    async def get_artist(self, artist_id: str) -> ArtistRecord | None:
        path = f"/artist/{artist_id}"
        data = await self._get(path, {})
        if data is None or not data.get("id"):
            return None
        try:
            life_span = data.get("life-span") or {}
            return ArtistRecord(
                id=data["id"],
                name=data.get("name") or "",
                area=(data.get("area") or {}).get("name"),
                begin_area=(data.get("begin-area") or {}).get("name"),
                life_span_begin=parse_iso(life_span.get("begin")),
                country=data.get("country"),
                type=data.get("type"),
            )
        except MALFORMED_PAYLOAD_ERRORS as exc:
            log_malformed_payload(self.get_provider_name(), path, exc)
            return None

    def get_provider_name(self) -> str:
        return "musicbrainz"

    def is_available(self) -> bool:
        return True

    # ------------------------------------------------------------------
    # Mapping helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _primary_credit(item: dict) -> tuple[str | None, str | None]:
        """Return ``(name, id)`` of the first credited artist."""
        credits = item.get("artist-credit") or []
        if not credits:
            return None, None
        artist = credits[0].get("artist") or {}
        return artist.get("name") or credits[0].get("name"), artist.get("id")

    @staticmethod
    def _map_release(rel: dict) -> CandidateRelease:
        group = rel.get("release-group") or {}
        return CandidateRelease(
            id=rel.get("id") or "",
            title=rel.get("title") or "",
            date=parse_iso(rel.get("date")),
            primary_type=group.get("primary-type"),
            secondary_types=tuple(group.get("secondary-types") or ()),
            status=ReleaseStatus.from_catalog(rel.get("status")),
            country=rel.get("country"),
            release_group_id=group.get("id"),
        )

    @classmethod
    def _map_recording(cls, rec: dict) -> CandidateEntity:
        artist_name, artist_id = cls._primary_credit(rec)
        return CandidateEntity(
            id=rec.get("id") or "",
            kind=EntityKind.RECORDING,
            title=rec.get("title") or "",
            artist_name=artist_name or "Unknown Artist",
            artist_id=artist_id,
            releases=tuple(cls._map_release(rel) for rel in rec.get("releases") or []),
            first_release_date=parse_iso(rec.get("first-release-date")),
            score=rec.get("score"),
            length_ms=rec.get("length"),
        )

    @classmethod
    def _map_release_group(cls, rg: dict) -> CandidateEntity:
        artist_name, artist_id = cls._primary_credit(rg)
        return CandidateEntity(
            id=rg.get("id") or "",
            kind=EntityKind.RELEASE_GROUP,
            title=rg.get("title") or "",
            artist_name=artist_name or "Unknown Artist",
            artist_id=artist_id,
            first_release_date=parse_iso(rg.get("first-release-date")),
            score=rg.get("score"),
            primary_type=rg.get("primary-type"),
        )

    @classmethod
    def _map_other_release(cls, rel: dict) -> OtherRelease:
        artist_name, _ = cls._primary_credit(rel)
        return OtherRelease(
            id=rel["id"],
            title=rel.get("title") or "",
            artist_name=artist_name or "",
            date=parse_iso(rel.get("date")),
            score=rel.get("score") or 0,
            country=rel.get("country"),
        )
