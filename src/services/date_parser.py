"""Free-text and partial-ISO date parsing.

Two very different inputs become a :class:`PartialDate` here:

1. **User text** typed into the date search (``"14 June 1955"``,
   ``"6/14/1955"``, ``"22/9/88"``, ``"June 1955"``, ``"1955"``).  The parser
   tries a fixed list of notations in priority order and raises
   :class:`DateNotParseableError` when none match; it never guesses
   "today".  Month-only and year-only input is completed to the first of
   the month or of January, because the date search is a day search.

2. **Catalog dates** (``"1977"``, ``"1977-10"``, ``"1977-10-28"``), which
   keep their precision; see :func:`parse_iso`.

Numeric notations are ambiguous between US (month first) and European
(day first) order.  Whichever of the two non-year parts exceeds 12 must be
the day; when neither does, month-first is assumed.
"""

from __future__ import annotations

import datetime
import re

from src.models.dates import PartialDate
from src.utils.errors import DateNotParseableError

_MONTHS = ("jan", "feb", "mar", "apr", "may", "jun", "jul", "aug", "sep", "oct", "nov", "dec")

_ISO_RE = re.compile(r"^(\d{4})[/\-](\d{1,2})[/\-](\d{1,2})$")
_NUMERIC_RE = re.compile(r"^(\d{1,2})[/\-.](\d{1,2})[/\-.](\d{2,4})$")
_DAY_MONTH_YEAR_RE = re.compile(r"^(\d{1,2})\s+([A-Za-z]+)[,\s]+(\d{4})$")
_MONTH_DAY_YEAR_RE = re.compile(r"^([A-Za-z]+)\s+(\d{1,2})[,\s]+(\d{4})$")
_MONTH_YEAR_RE = re.compile(r"^([A-Za-z]+)\s+(\d{4})$")
_YEAR_RE = re.compile(r"^(\d{4})$")

# Two-digit years up to this value are read as 20xx, the rest as 19xx.
_CENTURY_PIVOT = 30


def _month_index(name: str) -> int | None:
    """Match a month name by its case-insensitive three-letter prefix."""
    lowered = name.lower()
    for idx, prefix in enumerate(_MONTHS):
        if lowered.startswith(prefix):
            return idx + 1
    return None


def _expand_year(text: str) -> int:
    value = int(text)
    if len(text) == 2:
        return 2000 + value if value <= _CENTURY_PIVOT else 1900 + value
    return value


def _match_notation(text: str) -> tuple[int, int, int] | None:
    """Return ``(year, month, day)`` for the first notation that matches."""
    m = _ISO_RE.match(text)
    if m:
        return int(m[1]), int(m[2]), int(m[3])

    m = _NUMERIC_RE.match(text)
    if m:
        a, b = int(m[1]), int(m[2])
        year = _expand_year(m[3])
        if b > 12:
            return year, a, b
        if a > 12:
            return year, b, a
        return year, a, b

    m = _DAY_MONTH_YEAR_RE.match(text)
    if m:
        month = _month_index(m[2])
        if month is not None:
            return int(m[3]), month, int(m[1])

    m = _MONTH_DAY_YEAR_RE.match(text)
    if m:
        month = _month_index(m[1])
        if month is not None:
            return int(m[3]), month, int(m[2])

    m = _MONTH_YEAR_RE.match(text)
    if m:
        month = _month_index(m[1])
        if month is not None:
            return int(m[2]), month, 1

    m = _YEAR_RE.match(text)
    if m:
        return int(m[1]), 1, 1

    return None


def parse_free_text(text: str) -> PartialDate:
    """Parse a user-typed date expression.

    Parameters
    ----------
    text:
        Raw input; surrounding whitespace is ignored.

    Returns
    -------
    PartialDate
        Always a full date (missing month/day default to 1).

    Raises
    ------
    DateNotParseableError
        If no supported notation matches, or the month is outside 1–12 or
        the day outside 1–31.
    """
    stripped = (text or "").strip()
    parsed = _match_notation(stripped)
    if parsed is None:
        raise DateNotParseableError(text)

    year, month, day = parsed
    if not (1 <= month <= 12 and 1 <= day <= 31):
        raise DateNotParseableError(text)
    return PartialDate(year=year, month=month, day=day, raw=stripped)


def parse_iso(text: str | None) -> PartialDate | None:
    """Parse a catalog date of the form ``YYYY``, ``YYYY-MM`` or ``YYYY-MM-DD``.

    ``None`` or empty input yields ``None``.  Input that does not split
    into one to three numeric components, or whose month/day fall outside
    their ranges, also yields ``None`` so the adapter can drop it.
    """
    if not text:
        return None
    parts = text.strip().split("-")
    if not 1 <= len(parts) <= 3 or not all(p.isdigit() for p in parts):
        return None

    year = int(parts[0])
    month = int(parts[1]) if len(parts) > 1 else None
    day = int(parts[2]) if len(parts) > 2 else None
    if month is not None and not 1 <= month <= 12:
        return None
    if day is not None and not 1 <= day <= 31:
        return None
    return PartialDate(year=year, month=month, day=day, raw=text.strip())


def format_for_display(partial: PartialDate) -> str:
    """Render a partial date for people.

    ``June 14, 1955`` when the day is known, ``June 1955`` with only the
    month, ``1955`` with only the year.  Never raises: combinations that
    are not real calendar dates fall back to the raw text.
    """
    if partial.month is None:
        return str(partial.year)
    try:
        value = datetime.date(partial.year, partial.month, partial.day or 1)
    except ValueError:
        return partial.text
    month_name = value.strftime("%B")
    if partial.day is None:
        return f"{month_name} {value.year}"
    return f"{month_name} {value.day}, {value.year}"


def format_raw_date(raw: str | None) -> str:
    """Format a catalog date string, or ``"Unknown date"`` when absent."""
    if not raw:
        return "Unknown date"
    partial = parse_iso(raw)
    if partial is None:
        return raw
    return format_for_display(partial)
