"""Panel shaping: turn raw provider payloads into sink-ready panel data.

Each function here is pure.  Filtering, deduplication, ranking and caps
all happen in this module so that a presentation sink only formats.

Shaping rules
-------------
- **History**: the "on this day" pool for the week around the date is
  filtered to the resolved year; an empty category is widened to ±N
  years (births and deaths then keep just one entry).  At most three
  events, one birth and one death, four lines in total, events first.
- **Concurrent releases**: the searched artist is excluded
  (case-insensitive), duplicates by ``title||artist`` dropped, the rest
  sorted by catalog relevance, most relevant first.
- **Broadcast**: only series premieres (season 1, episode 1), one per
  show name, in airdate order.
- **Film credits**: every unique director, then up to two writers
  (Screenplay, Writer or Story) not already credited as director.
"""

from __future__ import annotations

from src.models.catalog import (
    ArtistRecord,
    CandidateEntity,
    CandidateRelease,
    EntityKind,
    OtherRelease,
)
from src.models.context import (
    BroadcastEpisode,
    CrewCredit,
    EncyclopediaSummary,
    OnThisDayEntry,
    OnThisDayFeed,
)
from src.models.panels import (
    ArtistBio,
    BroadcastPremiere,
    DetailField,
    DetailPanel,
    HistoryItem,
    HistoryKind,
)
from src.services.date_parser import format_for_display, format_raw_date, parse_iso
from src.services.release_ranker import select_canonical
from src.utils.text_normalizer import excerpt, match_key

COVER_ART_URL = "https://coverartarchive.org/release-group/{id}/front-250"
RELEASE_GROUP_URL = "https://musicbrainz.org/release-group/{id}"

DETAIL_EXCERPT_SENTENCES = 4
ARTIST_EXCERPT_SENTENCES = 5

MAX_HISTORY_EVENTS = 3
MAX_HISTORY_BIRTHS = 1
MAX_HISTORY_DEATHS = 1
MAX_HISTORY_ITEMS = 4

WRITER_JOBS = frozenset({"Screenplay", "Writer", "Story"})
DIRECTOR_JOB = "Director"

_MAX_PREMIERE_GENRES = 2


# ---------------------------------------------------------------------------
# Picker entries and encyclopedia title variants
# ---------------------------------------------------------------------------

def title_variants(entity: CandidateEntity) -> list[str]:
    """Ranked encyclopedia page titles for a song or album, most specific first.

    ``"Yellow (Coldplay song)"`` must beat ``"Yellow"`` (the colour), so the
    bare title is tried last.
    """
    noun = "song" if entity.kind == EntityKind.RECORDING else "album"
    return [
        f"{entity.title} ({entity.artist_name} {noun})",
        f"{entity.title} ({noun})",
        entity.title,
    ]


def describe_candidate(entity: CandidateEntity) -> tuple[str, str | None]:
    """Return the ``(date, subtitle)`` shown beside a picker entry.

    Songs show their canonical release date and its album title; albums
    show their first-release year and primary type.
    """
    if entity.kind == EntityKind.RECORDING:
        release = select_canonical(entity.releases)
        date_text = format_raw_date(release.date.text if release and release.date else None)
        return date_text, (release.title or None) if release else None

    year = str(entity.first_release_date.year) if entity.first_release_date else ""
    return year, entity.primary_type


# ---------------------------------------------------------------------------
# History
# ---------------------------------------------------------------------------

def _for_year(entries: tuple[OnThisDayEntry, ...], year: int) -> list[OnThisDayEntry]:
    return [e for e in entries if e.year == year]


def _for_range(entries: tuple[OnThisDayEntry, ...], year: int, spread: int) -> list[OnThisDayEntry]:
    return [e for e in entries if e.year is not None and abs(e.year - year) <= spread]


def shape_history(feed: OnThisDayFeed, year: int, widen_years: int = 2) -> list[HistoryItem]:
    """Select the history panel lines for *year* from a pooled feed."""
    events = _for_year(feed.events, year) or _for_range(feed.events, year, widen_years)
    births = _for_year(feed.births, year) or _for_range(feed.births, year, widen_years)[:1]
    deaths = _for_year(feed.deaths, year) or _for_range(feed.deaths, year, widen_years)[:1]

    items = [HistoryItem(year=e.year, text=e.text, kind=HistoryKind.EVENT) for e in events[:MAX_HISTORY_EVENTS]]
    items += [
        HistoryItem(year=e.year, text=f"Born: {e.text}", kind=HistoryKind.BIRTH)
        for e in births[:MAX_HISTORY_BIRTHS]
    ]
    items += [
        HistoryItem(year=e.year, text=f"Died: {e.text}", kind=HistoryKind.DEATH)
        for e in deaths[:MAX_HISTORY_DEATHS]
    ]
    return items[:MAX_HISTORY_ITEMS]


# ---------------------------------------------------------------------------
# Concurrent releases
# ---------------------------------------------------------------------------

def shape_concurrent(
    releases: list[OtherRelease],
    exclude_artist: str | None,
    limit: int,
) -> list[OtherRelease]:
    """Drop the current artist and duplicates, rank by relevance, cap."""
    excluded = match_key(exclude_artist)
    seen: set[str] = set()
    kept: list[OtherRelease] = []
    for release in releases:
        if excluded and match_key(release.artist_name) == excluded:
            continue
        key = f"{release.title}||{release.artist_name}"
        if key in seen:
            continue
        seen.add(key)
        kept.append(release)
    kept.sort(key=lambda r: r.score, reverse=True)
    return kept[:limit]


# ---------------------------------------------------------------------------
# Broadcast premieres
# ---------------------------------------------------------------------------

def shape_premieres(episodes: list[BroadcastEpisode], limit: int) -> list[BroadcastPremiere]:
    """Keep one series premiere per show, earliest airdate first."""
    seen: set[str] = set()
    premieres: list[BroadcastEpisode] = []
    for episode in episodes:
        if not episode.is_series_premiere or not episode.show_name:
            continue
        if episode.show_name in seen:
            continue
        seen.add(episode.show_name)
        premieres.append(episode)
    premieres.sort(key=lambda ep: ep.airdate)

    return [
        BroadcastPremiere(
            show_name=ep.show_name,
            airdate=parse_iso(ep.airdate),
            network=ep.network,
            genres=ep.genres[:_MAX_PREMIERE_GENRES],
            image_url=ep.image_url,
            show_url=ep.show_url,
        )
        for ep in premieres[:limit]
    ]


# ---------------------------------------------------------------------------
# Film credits
# ---------------------------------------------------------------------------

def pick_credits(crew: list[CrewCredit], max_writers: int = 2) -> tuple[tuple[str, ...], tuple[str, ...]]:
    """Return ``(directors, writers)`` from a crew list.

    Names are unique across both roles: a director who also wrote the
    screenplay is listed once, as director.
    """
    seen: set[str] = set()
    directors: list[str] = []
    for member in crew:
        if member.job == DIRECTOR_JOB and member.name not in seen:
            seen.add(member.name)
            directors.append(member.name)

    writers: list[str] = []
    for member in crew:
        if member.job in WRITER_JOBS and member.name not in seen:
            seen.add(member.name)
            writers.append(member.name)
    return tuple(directors), tuple(writers[:max_writers])


# ---------------------------------------------------------------------------
# Detail and artist panels
# ---------------------------------------------------------------------------

def format_duration(length_ms: int) -> str:
    """``354000`` → ``"5:54"``."""
    minutes, remainder = divmod(length_ms, 60_000)
    return f"{minutes}:{remainder // 1000:02d}"


def build_detail_panel(
    entity: CandidateEntity,
    release: CandidateRelease | None,
    summary: EncyclopediaSummary | None,
) -> DetailPanel:
    """Combine catalog facts and an encyclopedia summary into the detail panel.

    Recordings describe their canonical *release*; release groups
    describe themselves.
    """
    fields: list[DetailField] = []
    if entity.kind == EntityKind.RECORDING:
        group_id = release.release_group_id if release else None
        if release is not None:
            if release.date is not None:
                fields.append(DetailField(label="Release Date", value=format_for_display(release.date)))
            if release.title:
                fields.append(DetailField(label="Album / Release", value=release.title))
            if release.country:
                fields.append(DetailField(label="Country", value=release.country))
        if entity.length_ms:
            fields.append(DetailField(label="Duration", value=format_duration(entity.length_ms)))
    else:
        group_id = entity.id
        if entity.first_release_date is not None:
            fields.append(DetailField(label="Release Date", value=format_for_display(entity.first_release_date)))
        if entity.primary_type:
            fields.append(DetailField(label="Type", value=entity.primary_type))

    usable = summary if summary is not None and summary.is_usable else None
    return DetailPanel(
        kind=entity.kind,
        title=entity.title,
        cover_url=COVER_ART_URL.format(id=group_id) if group_id else None,
        catalog_url=RELEASE_GROUP_URL.format(id=group_id) if group_id else None,
        fields=tuple(fields),
        excerpt=excerpt(usable.extract, DETAIL_EXCERPT_SENTENCES) if usable else None,
        page_url=usable.page_url if usable else None,
    )


def build_artist_bio(record: ArtistRecord | None, summary: EncyclopediaSummary | None) -> ArtistBio:
    """Join the catalog artist record with the encyclopedia summary.

    A disambiguation summary counts as absent.  The encyclopedia title is
    preferred for the name because it carries the artist's usual styling.
    """
    if summary is not None and summary.is_disambiguation:
        summary = None

    name = (summary.title if summary else None) or (record.name if record else "") or ""
    origin = (record.area or record.begin_area) if record else None
    active_since = (
        str(record.life_span_begin.year) if record and record.life_span_begin is not None else None
    )
    return ArtistBio(
        name=name,
        origin=origin,
        active_since=active_since,
        photo_url=summary.thumbnail_url if summary else None,
        excerpt=excerpt(summary.extract, ARTIST_EXCERPT_SENTENCES) if summary else None,
        page_url=summary.page_url if summary and summary.extract else None,
    )
