"""Contextual data returned by the encyclopedia, broadcast and film providers.

These are the provider-shaped payloads, before panel shaping.  They keep
only the fields the panels read; everything else in the upstream JSON is
discarded by the adapters.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from src.models.dates import PartialDate


class EncyclopediaSummary(BaseModel):
    """A Wikipedia page summary (``/page/summary/{title}``)."""

    model_config = ConfigDict(frozen=True)

    title: str
    page_type: str = "standard"
    extract: str | None = None
    page_url: str | None = None
    thumbnail_url: str | None = None

    @property
    def is_disambiguation(self) -> bool:
        return self.page_type == "disambiguation"

    @property
    def is_usable(self) -> bool:
        """A summary is usable when it is a real article with text."""
        return not self.is_disambiguation and bool(self.extract)


class OnThisDayEntry(BaseModel):
    """One line of an "on this day" feed: an event, a birth, or a death."""

    model_config = ConfigDict(frozen=True)

    year: int | None = None
    text: str


class OnThisDayFeed(BaseModel):
    """Events, births and deaths for one or more calendar days, pooled."""

    model_config = ConfigDict(frozen=True)

    events: tuple[OnThisDayEntry, ...] = ()
    births: tuple[OnThisDayEntry, ...] = ()
    deaths: tuple[OnThisDayEntry, ...] = ()

    def merge(self, other: OnThisDayFeed) -> OnThisDayFeed:
        return OnThisDayFeed(
            events=self.events + other.events,
            births=self.births + other.births,
            deaths=self.deaths + other.deaths,
        )


class BroadcastEpisode(BaseModel):
    """One scheduled TV episode from the broadcast provider."""

    model_config = ConfigDict(frozen=True)

    show_name: str | None = None
    episode_name: str | None = None
    season: int | None = None
    number: int | None = None
    airdate: str = ""
    network: str | None = None
    genres: tuple[str, ...] = ()
    image_url: str | None = None
    show_url: str | None = None
    country: str | None = None

    @property
    def is_series_premiere(self) -> bool:
        return self.season == 1 and self.number == 1


class CrewCredit(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    job: str


class FilmRelease(BaseModel):
    """A film released near the resolved date, with key credits attached."""

    model_config = ConfigDict(frozen=True)

    id: int
    title: str
    release_date: PartialDate | None = None
    popularity: float = 0.0
    poster_url: str | None = None
    page_url: str
    directors: tuple[str, ...] = Field(default=())
    writers: tuple[str, ...] = Field(default=())
