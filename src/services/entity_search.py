"""Text search for songs and albums.

Turns a title (and optional artist) into candidate catalog entities for
the user to pick from, and refines a picked recording with the full
release list canonical selection needs.

The query is an exact-phrase Lucene query against the catalog search
index.  Double quotes are stripped from user text before quoting so a
title cannot close the phrase early and inject query syntax.

Provider failure and "no results" are deliberately indistinguishable
here: both yield an empty list.
"""

from __future__ import annotations

import structlog

from src.interfaces.music_db_provider import IMusicDatabaseProvider
from src.models.catalog import CandidateEntity, EntityKind
from src.services.release_ranker import DEFAULT_PICKER_LIMIT, order_candidates
from src.utils.logging import get_logger
from src.utils.text_normalizer import quoted_phrase

RECORDING_SEARCH_LIMIT = 50
RELEASE_GROUP_SEARCH_LIMIT = 20

_QUERY_FIELDS = {
    EntityKind.RECORDING: "recording",
    EntityKind.RELEASE_GROUP: "releasegroup",
}


def build_query(title: str, artist: str | None, kind: EntityKind) -> str:
    """Build the catalog search query.

    >>> build_query('Say "Hello"', "", EntityKind.RELEASE_GROUP)
    'releasegroup:"Say Hello"'
    """
    query = quoted_phrase(_QUERY_FIELDS[kind], title)
    if artist and artist.strip():
        query += f" AND {quoted_phrase('artist', artist)}"
    if kind == EntityKind.RECORDING:
        query += " AND status:Official"
    return query


class EntitySearch:
    """Song/album search and refinement over the music-database provider.

    Parameters
    ----------
    music_db:
        The catalog provider.
    picker_limit:
        Maximum number of entries in a picker list.
    """

    def __init__(
        self,
        music_db: IMusicDatabaseProvider,
        picker_limit: int = DEFAULT_PICKER_LIMIT,
    ) -> None:
        self._music_db = music_db
        self._picker_limit = picker_limit
        self._logger: structlog.BoundLogger = get_logger(__name__)

    async def search_by_text(
        self, title: str, artist: str | None = None, kind: EntityKind = EntityKind.RECORDING
    ) -> list[CandidateEntity]:
        """Search the catalog; returns ``[]`` on no results or provider failure."""
        if not title or not title.strip():
            return []
        query = build_query(title, artist, kind)
        if kind == EntityKind.RECORDING:
            results = await self._music_db.search_recordings(query, limit=RECORDING_SEARCH_LIMIT)
        else:
            results = await self._music_db.search_release_groups(
                query, limit=RELEASE_GROUP_SEARCH_LIMIT
            )
        if results is None:
            self._logger.info("entity_search_unavailable", kind=kind.value, query=query)
            return []
        self._logger.info("entity_search_completed", kind=kind.value, query=query, count=len(results))
        return list(results)

    async def refine(self, entity: CandidateEntity) -> CandidateEntity:
        """Replace a search-time recording with its full catalog lookup.

        Search results carry a truncated release list with no secondary
        types, which would let a live album pass as a studio album.  Falls
        back to *entity* when the lookup fails or returns no releases.
        Release groups are returned unchanged.
        """
        if entity.kind != EntityKind.RECORDING:
            return entity
        full = await self._music_db.lookup_recording(entity.id)
        if full is None or not full.releases:
            self._logger.info("entity_refine_fallback", entity_id=entity.id)
            return entity
        # The lookup carries no relevance score; keep the search-time one.
        return full.model_copy(
            update={
                "score": entity.score,
                "artist_id": full.artist_id or entity.artist_id,
                "length_ms": full.length_ms or entity.length_ms,
            }
        )

    async def picker_list(
        self, title: str, artist: str | None = None, kind: EntityKind = EntityKind.RECORDING
    ) -> list[CandidateEntity]:
        """Search, then order and cap for display."""
        results = await self.search_by_text(title, artist, kind)
        return order_candidates(results, limit=self._picker_limit)
