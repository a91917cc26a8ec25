"""Abstract base class for presentation sinks.

A sink is the passive consumer of the orchestrator's output: one call per
panel plus progress.  Everything it receives is already shaped,
deduplicated, ranked and capped, so a sink only formats.  An empty list
(or ``None`` for the single-object panels) means "render the empty state";
the sink cannot tell an unavailable provider from an empty result.

Concrete sinks: :class:`~src.api.websocket.WebSocketSink` streams JSON
render instructions to a browser; :class:`~src.cli.lookup.ConsoleSink`
prints to a terminal.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from src.models.catalog import CandidateEntity, OtherRelease
from src.models.context import FilmRelease
from src.models.dates import PartialDate
from src.models.panels import ArtistBio, BroadcastPremiere, DetailPanel, HistoryItem


class IPresentationSink(ABC):
    """Contract for anything that renders session output."""

    @abstractmethod
    async def render_picker_list(self, entities: list[CandidateEntity]) -> None:
        """Show the ordered disambiguation list for a song or album search."""

    @abstractmethod
    async def render_canonical_header(
        self, title: str, artist: str, date: PartialDate | None
    ) -> None:
        """Show the resolved entity's header.

        Parameters
        ----------
        title:
            Song or album title; for date sessions the formatted date.
        artist:
            Primary artist name; for date sessions a subtitle.
        date:
            Canonical release date, or ``None`` when unknown or when the
            session is a date session (the date is already the title).
        """

    @abstractmethod
    async def render_detail_panel(self, detail: DetailPanel | None) -> None: ...

    @abstractmethod
    async def render_history_panel(self, events: list[HistoryItem]) -> None: ...

    @abstractmethod
    async def render_concurrent_panel(self, releases: list[OtherRelease]) -> None: ...

    @abstractmethod
    async def render_broadcast_panel(self, premieres: list[BroadcastPremiere]) -> None: ...

    @abstractmethod
    async def render_film_panel(self, films: list[FilmRelease]) -> None: ...

    @abstractmethod
    async def render_artist_panel(self, bio: ArtistBio | None) -> None: ...

    @abstractmethod
    async def report_progress(self, done: int, total: int) -> None:
        """Report that *done* of *total* panels have rendered.  Cosmetic only."""
