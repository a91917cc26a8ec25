"""Canonical release selection and picker ordering.

A popular recording appears on dozens of releases: the original album,
the single, regional reissues, greatest-hits compilations, live albums.
:func:`select_canonical` picks the one that best represents the original
publication, and :func:`order_candidates` orders a disambiguation list so
the original recording surfaces before its live and compilation copies.

The score is ``type_rank * 100 + (0 if the date is full else 10)``; lower
wins, ties go to the lexicographically smaller raw date string.  Country
plays no part: a country bonus once let a later US compilation outrank
the original UK album.
"""

from __future__ import annotations

from src.models.catalog import (
    CandidateEntity,
    CandidateRelease,
    EntityKind,
    RankedRelease,
    ReleaseType,
)
from src.models.dates import UNKNOWN_DATE, PartialDate

TYPE_RANK: dict[ReleaseType, int] = {
    ReleaseType.ALBUM: 0,
    ReleaseType.SINGLE: 1,
    ReleaseType.EP: 2,
    ReleaseType.COMPILATION: 3,
    ReleaseType.LIVE: 4,
}
UNKNOWN_TYPE_RANK = 5

_PARTIAL_DATE_PENALTY = 10

DEFAULT_PICKER_LIMIT = 8


def type_rank(release: CandidateRelease) -> int:
    return TYPE_RANK.get(release.release_type, UNKNOWN_TYPE_RANK)


def release_score(release: CandidateRelease) -> int:
    """Canonical score of one dated release; lower is more canonical."""
    full = release.date is not None and release.date.is_full
    return type_rank(release) * 100 + (0 if full else _PARTIAL_DATE_PENALTY)


def _official_pool(releases: list[CandidateRelease]) -> list[CandidateRelease]:
    official = [r for r in releases if r.is_official_or_unset]
    return official or list(releases)


def rank_releases(releases: list[CandidateRelease]) -> list[RankedRelease]:
    """Score and sort the dated, official-or-unset releases.

    Uses the same pool filters as :func:`select_canonical`; undated
    releases are not ranked.
    """
    pool = _official_pool(releases)
    dated = [r for r in pool if r.date is not None]
    ranked = [RankedRelease(release=r, score=release_score(r)) for r in dated]
    ranked.sort(key=lambda rr: (rr.score, rr.release.raw_date))
    return ranked


def select_canonical(releases: list[CandidateRelease] | tuple[CandidateRelease, ...]) -> CandidateRelease | None:
    """Pick the single release that best represents the original issue.

    1. Keep Official or status-less releases, unless none are, in which
       case keep all of them.
    2. If none of those carry a date, return the first one as-is.
    3. Otherwise return the best-scoring dated release.

    Returns ``None`` only for empty input.
    """
    releases = list(releases)
    if not releases:
        return None
    pool = _official_pool(releases)
    if not any(r.date is not None for r in pool):
        return pool[0]
    return rank_releases(releases)[0].release


def score_for_ordering(entity: CandidateEntity) -> PartialDate:
    """Date used to order an entity within a picker list.

    Recordings use their earliest official-or-unset dated release (by raw
    string); release groups use their first-release date.  Entities
    without a usable date get the ``9999`` sentinel so they sort last.
    """
    if entity.kind == EntityKind.RELEASE_GROUP:
        return entity.first_release_date or UNKNOWN_DATE

    dated = [r.date for r in entity.releases if r.date is not None and r.is_official_or_unset]
    if not dated:
        return UNKNOWN_DATE
    return min(dated, key=lambda d: d.text)


def order_candidates(
    entities: list[CandidateEntity],
    limit: int = DEFAULT_PICKER_LIMIT,
) -> list[CandidateEntity]:
    """Order a disambiguation list: earliest first, then most relevant.

    Dates are compared as raw strings, so ``"1977"`` sorts before
    ``"1977-10-14"`` and the ``"9999"`` sentinel after every real date.
    """
    ordered = sorted(
        entities,
        key=lambda e: (score_for_ordering(e).text, -(e.score or 0)),
    )
    return ordered[:limit]
