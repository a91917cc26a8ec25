"""Partial calendar dates.

Catalog data rarely knows the full date of an old release: MusicBrainz
stores ``1977``, ``1977-10`` or ``1977-10-28`` depending on what the
editors could verify.  :class:`PartialDate` keeps that precision explicit
instead of inventing a month or day, and remembers the original text so
display and ordering can fall back to it.
"""

from __future__ import annotations

import datetime

from pydantic import BaseModel, ConfigDict, Field


class PartialDate(BaseModel):
    """A date known to year, year+month, or full year-month-day precision.

    Ordering is lexicographic on ``(year, month or 0, day or 0)``, so a
    year-only date sorts before any dated month of the same year.  The day
    is not validated against the month length; :meth:`to_date` returns
    ``None`` for impossible combinations such as February 30.
    """

    model_config = ConfigDict(frozen=True)

    year: int
    month: int | None = Field(default=None, ge=1, le=12)
    day: int | None = Field(default=None, ge=1, le=31)
    raw: str = ""

    # -- Precision ------------------------------------------------------

    @property
    def is_full(self) -> bool:
        """``True`` when year, month and day are all known."""
        return self.month is not None and self.day is not None

    @property
    def sort_key(self) -> tuple[int, int, int]:
        return (self.year, self.month or 0, self.day or 0)

    # -- Conversions ----------------------------------------------------

    def to_date(self) -> datetime.date | None:
        """Return a :class:`datetime.date` for full, valid dates only."""
        if not self.is_full:
            return None
        try:
            return datetime.date(self.year, self.month, self.day)  # type: ignore[arg-type]
        except ValueError:
            return None

    def to_iso(self) -> str:
        """Render as ``YYYY``, ``YYYY-MM`` or ``YYYY-MM-DD``."""
        text = f"{self.year:04d}"
        if self.month is not None:
            text += f"-{self.month:02d}"
            if self.day is not None:
                text += f"-{self.day:02d}"
        return text

    @property
    def text(self) -> str:
        """The original text when known, otherwise the ISO rendering."""
        return self.raw or self.to_iso()

    @classmethod
    def from_date(cls, value: datetime.date) -> PartialDate:
        return cls(year=value.year, month=value.month, day=value.day, raw=value.isoformat())

    # -- Ordering -------------------------------------------------------

    def __lt__(self, other: PartialDate) -> bool:
        return self.sort_key < other.sort_key

    def __le__(self, other: PartialDate) -> bool:
        return self.sort_key <= other.sort_key

    def __gt__(self, other: PartialDate) -> bool:
        return self.sort_key > other.sort_key

    def __ge__(self, other: PartialDate) -> bool:
        return self.sort_key >= other.sort_key


# Ordering value for entities with no usable date.  Compared as a raw
# string it sorts after every real ISO date, so undated entries go last.
UNKNOWN_DATE = PartialDate(year=9999, raw="9999")
