"""Abstract base class for broadcast-schedule providers (TVmaze)."""

from __future__ import annotations

import datetime
from abc import ABC, abstractmethod

from src.models.context import BroadcastEpisode


class IBroadcastProvider(ABC):
    """Contract for TV schedule lookups."""

    @abstractmethod
    async def get_schedule(self, day: datetime.date, country: str) -> list[BroadcastEpisode] | None:
        """Return every episode scheduled on *day* in *country*.

        Parameters
        ----------
        day:
            The air date.
        country:
            ISO 3166-1 alpha-2 country code, e.g. ``"US"`` or ``"GB"``.

        Returns
        -------
        list[BroadcastEpisode] or None
            The day's schedule, or ``None`` if the provider is unavailable.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this provider."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the provider is configured and usable."""
