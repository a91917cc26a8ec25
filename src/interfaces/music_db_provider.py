"""Abstract base class for music-database service providers.

Defines the contract for querying the music metadata catalog (MusicBrainz)
for recordings, release groups, releases issued on a date, and artists.
The adapter pattern keeps the catalog swappable and lets tests inject a
fake.

Every method follows the same contract: a usable payload, or ``None``
when the catalog could not be reached or answered with something
unusable.  Implementations never raise for transport failures.
"""

from __future__ import annotations

import datetime
from abc import ABC, abstractmethod

from src.models.catalog import ArtistRecord, CandidateEntity, OtherRelease


class IMusicDatabaseProvider(ABC):
    """Contract for the music metadata catalog."""

    @abstractmethod
    async def search_recordings(self, query: str, limit: int = 50) -> list[CandidateEntity] | None:
        """Run a recording search.

        Parameters
        ----------
        query:
            A Lucene-style query already built by the caller, e.g.
            ``recording:"Heroes" AND artist:"David Bowie" AND status:Official``.
        limit:
            Maximum number of recordings to request.

        Returns
        -------
        list[CandidateEntity] or None
            Recordings with their search-time release lists, in catalog
            relevance order; ``None`` if the catalog is unavailable.
        """

    @abstractmethod
    async def search_release_groups(
        self, query: str, limit: int = 20
    ) -> list[CandidateEntity] | None:
        """Run a release-group (album) search with a pre-built query."""

    @abstractmethod
    async def lookup_recording(self, recording_id: str) -> CandidateEntity | None:
        """Fetch one recording with every release and its release-group types.

        Search results carry a truncated release list without secondary
        types (Live, Compilation); the full lookup is what makes canonical
        selection reliable.
        """

    @abstractmethod
    async def search_releases_on_date(
        self, day: datetime.date, limit: int = 25
    ) -> list[OtherRelease] | None:
        """Return official releases issued on exactly *day*."""

    @abstractmethod
    async def get_artist(self, artist_id: str) -> ArtistRecord | None:
        """Look up one artist by catalog identifier."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this provider."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the provider is configured and usable."""
