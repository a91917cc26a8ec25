"""Music catalog models: searchable entities, their releases, and artists.

These mirror the subset of MusicBrainz data the resolver needs.  A
*recording* is one specific sound recording ("Heroes" by David Bowie, the
1977 studio take); a *release group* is the abstract album uniting every
pressing of it.  Each carries zero or more :class:`CandidateRelease`
records, one per concrete issue, from which the canonical release is
picked by :mod:`src.services.release_ranker`.

All models are frozen.  Dates that could not be parsed as partial ISO
dates are dropped by the provider adapter before a model is built, so a
present ``date`` is always well-formed.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from src.models.dates import PartialDate


class EntityKind(str, Enum):  # noqa: UP042 - StrEnum requires Python 3.11+
    """What a :class:`CandidateEntity` identifies in the catalog."""

    RECORDING = "recording"
    RELEASE_GROUP = "release-group"


class ReleaseType(str, Enum):  # noqa: UP042 - StrEnum requires Python 3.11+
    """Closed release-type classification used for canonical ranking.

    Declaration order is the ranking order: an Album is the most canonical
    issue of a recording, a Live album the least; anything unrecognised is
    OTHER and ranks after all of them.
    """

    ALBUM = "Album"
    SINGLE = "Single"
    EP = "EP"
    COMPILATION = "Compilation"
    LIVE = "Live"
    OTHER = "Other"


class ReleaseStatus(str, Enum):  # noqa: UP042 - StrEnum requires Python 3.11+
    OFFICIAL = "Official"
    NON_OFFICIAL = "Non-official"
    UNKNOWN = "Unknown"

    @classmethod
    def from_catalog(cls, value: str | None) -> ReleaseStatus:
        """Map a raw catalog status string (``"Official"``, ``"Bootleg"``, …)."""
        if not value:
            return cls.UNKNOWN
        if value == cls.OFFICIAL.value:
            return cls.OFFICIAL
        return cls.NON_OFFICIAL


class CandidateRelease(BaseModel):
    """One concrete pressing or issue of a recording or album."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str = ""
    date: PartialDate | None = None
    primary_type: str | None = None
    secondary_types: tuple[str, ...] = ()
    status: ReleaseStatus = ReleaseStatus.UNKNOWN
    country: str | None = None
    release_group_id: str | None = None

    @property
    def release_type(self) -> ReleaseType:
        """Classify the release.

        Live albums carry primary type "Album" in the catalog, so the
        secondary types are checked first: Live, then Compilation, and
        only then the primary type.
        """
        if ReleaseType.LIVE.value in self.secondary_types:
            return ReleaseType.LIVE
        if ReleaseType.COMPILATION.value in self.secondary_types:
            return ReleaseType.COMPILATION
        try:
            return ReleaseType(self.primary_type)
        except ValueError:
            return ReleaseType.OTHER

    @property
    def is_official_or_unset(self) -> bool:
        return self.status in (ReleaseStatus.OFFICIAL, ReleaseStatus.UNKNOWN)

    @property
    def raw_date(self) -> str:
        """The date exactly as the catalog wrote it, or ``""`` when absent."""
        return self.date.text if self.date is not None else ""


class CandidateEntity(BaseModel):
    """One searchable unit: a recording or a release group.

    ``releases`` is empty for release groups (the album itself is the
    entity) and for recordings the catalog returned without issues.
    ``length_ms`` and ``primary_type`` feed the detail panel only.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    kind: EntityKind
    title: str
    artist_name: str = "Unknown Artist"
    artist_id: str | None = None
    releases: tuple[CandidateRelease, ...] = ()
    first_release_date: PartialDate | None = None
    score: int | None = None
    length_ms: int | None = None
    primary_type: str | None = None


class RankedRelease(BaseModel):
    """A release plus its canonical score; lower is more canonical."""

    model_config = ConfigDict(frozen=True)

    release: CandidateRelease
    score: int


class ArtistRecord(BaseModel):
    """Catalog facts about an artist used by the artist panel."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    area: str | None = None
    begin_area: str | None = None
    life_span_begin: PartialDate | None = None
    country: str | None = None
    type: str | None = None


class OtherRelease(BaseModel):
    """A release issued on the same date, for the concurrent-releases panel."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    artist_name: str = ""
    date: PartialDate | None = None
    score: int = Field(default=0)
    country: str | None = None
