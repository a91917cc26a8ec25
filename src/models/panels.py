"""Shaped panel payloads handed to the presentation sink.

Everything here is already filtered, deduplicated, ranked and capped; a
sink only formats.  Dates stay as :class:`PartialDate` so each sink can
render them in its own way (``format_for_display`` for people, ISO for
JSON clients).
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict

from src.models.catalog import EntityKind
from src.models.dates import PartialDate


class HistoryKind(str, Enum):  # noqa: UP042 - StrEnum requires Python 3.11+
    EVENT = "event"
    BIRTH = "birth"
    DEATH = "death"


class HistoryItem(BaseModel):
    """One line of the "this week in history" panel.

    Births and deaths already carry their ``Born:`` / ``Died:`` prefix.
    """

    model_config = ConfigDict(frozen=True)

    year: int | None
    text: str
    kind: HistoryKind = HistoryKind.EVENT


class BroadcastPremiere(BaseModel):
    """A TV series premiere (season 1, episode 1) near the resolved date."""

    model_config = ConfigDict(frozen=True)

    show_name: str
    airdate: PartialDate | None = None
    network: str | None = None
    genres: tuple[str, ...] = ()
    image_url: str | None = None
    show_url: str | None = None


class DetailField(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str
    value: str


class DetailPanel(BaseModel):
    """The song or album panel: artwork, catalog facts and an encyclopedia excerpt."""

    model_config = ConfigDict(frozen=True)

    kind: EntityKind
    title: str
    cover_url: str | None = None
    catalog_url: str | None = None
    fields: tuple[DetailField, ...] = ()
    excerpt: str | None = None
    page_url: str | None = None

    @property
    def is_empty(self) -> bool:
        return not (self.cover_url or self.fields or self.excerpt)


class ArtistBio(BaseModel):
    """The artist panel, joined from the catalog record and the encyclopedia."""

    model_config = ConfigDict(frozen=True)

    name: str = ""
    origin: str | None = None
    active_since: str | None = None
    photo_url: str | None = None
    excerpt: str | None = None
    page_url: str | None = None

    @property
    def is_empty(self) -> bool:
        return not (self.name or self.origin or self.active_since or self.excerpt)
