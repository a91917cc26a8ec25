"""Abstract base class for encyclopedia providers.

The encyclopedia (Wikipedia's REST API) supplies two things: page
summaries for the detail and artist panels, and "on this day" feeds for
the history panel.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from src.models.context import EncyclopediaSummary, OnThisDayFeed


class IEncyclopediaProvider(ABC):
    """Contract for encyclopedia lookups."""

    @abstractmethod
    async def get_summary(self, title: str) -> EncyclopediaSummary | None:
        """Fetch the summary of the page titled *title*.

        Returns the summary even when it is a disambiguation page; callers
        decide whether it is usable.  ``None`` when the page does not exist
        or the provider is unavailable.
        """

    async def find_summary(self, variants: list[str]) -> EncyclopediaSummary | None:
        """Return the first usable summary among ranked title *variants*.

        Variants are tried in order, one request at a time, because the
        most specific title (``"Yellow (Coldplay song)"``) must win over
        the generic one (``"Yellow"``, the colour).  Disambiguation pages
        and pages without an extract are skipped.

        Parameters
        ----------
        variants:
            Candidate page titles, most specific first.

        Returns
        -------
        EncyclopediaSummary or None
            The first usable summary, or ``None`` if no variant yields one.
        """
        for title in variants:
            summary = await self.get_summary(title)
            if summary is not None and summary.is_usable:
                return summary
        return None

    @abstractmethod
    async def get_on_this_day(self, month: int, day: int) -> OnThisDayFeed | None:
        """Fetch events, births and deaths recorded for a calendar day."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this provider."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the provider is configured and usable."""
