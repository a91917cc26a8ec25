"""Abstract base class for film-catalog providers (TMDB)."""

from __future__ import annotations

import datetime
from abc import ABC, abstractmethod

from src.models.context import CrewCredit, FilmRelease


class IFilmProvider(ABC):
    """Contract for film release and credit lookups."""

    @abstractmethod
    async def discover_films(
        self, start: datetime.date, end: datetime.date
    ) -> list[FilmRelease] | None:
        """Return films first released between *start* and *end* inclusive.

        Results are ordered by popularity, most popular first, and carry no
        credits yet.
        """

    @abstractmethod
    async def get_credits(self, film_id: int) -> list[CrewCredit] | None:
        """Return the crew list of one film."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this provider."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the provider is configured and usable.

        The film provider needs an API token; without one it reports
        itself unavailable and the film panel renders empty.
        """
