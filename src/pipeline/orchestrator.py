"""Progressive fan-out orchestrator for aggregation sessions.

Given a resolved entity or date, fans out one task per panel to the
contextual providers and delivers each panel to the presentation sink as
soon as its own data is ready, followed by a progress update.

ARCHITECTURE NOTE:
    A session runs in three steps:

        1. begin_session()  → registers the session as current (superseding
                              any live one) and resets progress to 0 of N
        2. resolve          → entity sessions refine the recording and pick
                              the canonical release; this is awaited, since
                              every date-dependent panel needs its output
        3. spawn            → one asyncio task per panel, no ordering
                              between them; start_* returns immediately

    Every panel task follows the same pattern:
        1. Skip with Unavailable if it needs a full date and has none
        2. Call its fetch_* method; any exception becomes Unavailable
        3. Check the captured session against the registry; stale → drop
        4. Render on the sink, then advance the done counter

    Nothing is cancelled when a session is superseded.  Late results from
    the old session simply fail the registry check in step 3.

    Panel fetches never raise into the orchestrator: providers return
    ``None`` on failure, and fetch_* turns ``None`` or an empty shaped
    result into ProviderResult.unavailable().
"""

from __future__ import annotations

import asyncio
import datetime
from collections.abc import Awaitable, Callable
from functools import reduce

import structlog

from src.config.loader import PanelLimits
from src.interfaces.broadcast_provider import IBroadcastProvider
from src.interfaces.encyclopedia_provider import IEncyclopediaProvider
from src.interfaces.film_provider import IFilmProvider
from src.interfaces.music_db_provider import IMusicDatabaseProvider
from src.interfaces.presentation_sink import IPresentationSink
from src.models.catalog import CandidateEntity, EntityKind
from src.models.context import OnThisDayFeed
from src.models.dates import PartialDate
from src.models.session import (
    FULL_DATE_PANELS,
    AggregationSession,
    Panel,
    ProviderResult,
    SessionKind,
)
from src.pipeline.progress_tracker import ProgressTracker
from src.pipeline.session_registry import SessionRegistry
from src.services.date_parser import format_for_display
from src.services.entity_search import EntitySearch
from src.services.panel_formatter import (
    build_artist_bio,
    build_detail_panel,
    pick_credits,
    shape_concurrent,
    shape_history,
    shape_premieres,
    title_variants,
)
from src.services.release_ranker import select_canonical
from src.utils.concurrency import gather_available, throttled_gather
from src.utils.errors import SessionSupersededError
from src.utils.logging import get_logger

DATE_SESSION_TOTAL = 4
ENTITY_SESSION_TOTAL = 6

DATE_HEADER_SUBTITLE = "Explore this date in history"


async def _no_result() -> None:
    return None


def _days_around(center: datetime.date, radius: int) -> list[datetime.date]:
    return [center + datetime.timedelta(days=offset) for offset in range(-radius, radius + 1)]


class AggregationOrchestrator:
    """Runs aggregation sessions against the contextual providers.

    All dependencies are injected; the orchestrator never builds providers
    or sinks itself.  One orchestrator serves one consumer (a WebSocket
    connection or a CLI run) and owns that consumer's session registry.

    Parameters
    ----------
    music_db, encyclopedia, broadcast, film:
        Provider adapters.
    sink:
        Where panels and progress are rendered.
    entity_search:
        Search/refine service; built over *music_db* when omitted.
    registry, progress_tracker:
        Injected for tests; fresh instances by default.
    limits:
        Panel caps and date windows.
    semaphore:
        Bounds the wide fan-outs (history week, broadcast window, film
        credits); the shared module semaphore when omitted.
    """

    def __init__(
        self,
        music_db: IMusicDatabaseProvider,
        encyclopedia: IEncyclopediaProvider,
        broadcast: IBroadcastProvider,
        film: IFilmProvider,
        sink: IPresentationSink,
        entity_search: EntitySearch | None = None,
        registry: SessionRegistry | None = None,
        progress_tracker: ProgressTracker | None = None,
        limits: PanelLimits | None = None,
        semaphore: asyncio.Semaphore | None = None,
    ) -> None:
        self._music_db = music_db
        self._encyclopedia = encyclopedia
        self._broadcast = broadcast
        self._film = film
        self._sink = sink
        self._limits = limits or PanelLimits()
        self._entity_search = entity_search or EntitySearch(
            music_db, picker_limit=self._limits.picker_limit
        )
        self._registry = registry or SessionRegistry()
        self._progress_tracker = progress_tracker or ProgressTracker()
        self._semaphore = semaphore
        self._tasks: set[asyncio.Task] = set()
        self._logger: structlog.BoundLogger = get_logger(__name__)

        self._fetchers: dict[Panel, Callable[[AggregationSession], Awaitable[ProviderResult]]] = {
            Panel.DETAIL: self.fetch_detail,
            Panel.HISTORY: self.fetch_history,
            Panel.CONCURRENT: self.fetch_concurrent,
            Panel.BROADCAST: self.fetch_broadcast,
            Panel.FILMS: self.fetch_films,
            Panel.ARTIST: self.fetch_artist,
        }

    @property
    def registry(self) -> SessionRegistry:
        return self._registry

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    async def present_picker(
        self, title: str, artist: str | None, kind: EntityKind
    ) -> list[CandidateEntity]:
        """Search and render the picker list.

        A new search abandons whatever session was live: its remaining
        panels will be discarded on arrival.
        """
        self._supersede_current()
        entities = await self._entity_search.picker_list(title, artist, kind)
        await self._sink.render_picker_list(entities)
        return entities

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------

    async def begin_session(
        self,
        kind: SessionKind,
        entity: CandidateEntity | None = None,
        resolved_date: PartialDate | None = None,
    ) -> AggregationSession:
        """Create a session, make it current, and report ``0`` of N.

        The expected total is fixed here: 4 panels for a date session, 6
        for a song or album session (the artist panel counts once even
        though it joins two provider calls).
        """
        total = DATE_SESSION_TOTAL if kind == SessionKind.DATE else ENTITY_SESSION_TOTAL
        session = AggregationSession(kind=kind, entity=entity, resolved_date=resolved_date, total=total)

        previous = self._registry.activate(session)
        if previous is not None:
            self._progress_tracker.forget(previous.id)

        self._progress_tracker.register_listener(session.id, self._forward_progress)
        await self._progress_tracker.start(session.id, total)

        self._logger.info(
            "session_started",
            session_id=session.id,
            kind=kind.value,
            entity_id=entity.id if entity else None,
            total=total,
        )
        return session

    async def start_date_session(self, partial: PartialDate) -> AggregationSession:
        """Begin a date session, render its header, and spawn its panels."""
        session = await self.begin_session(SessionKind.DATE, resolved_date=partial)
        await self._open(session, format_for_display(partial), DATE_HEADER_SUBTITLE, None)
        return session

    async def start_entity_session(self, entity: CandidateEntity) -> AggregationSession:
        """Begin a song/album session.

        The canonical lookup is awaited before any panel is spawned, since
        the date-dependent panels need the resolved date.  If another
        session begins during that lookup, this one returns superseded
        without rendering anything; the same holds when it is superseded
        while its progress reset is being reported.
        """
        session = await self.begin_session(SessionKind.ENTITY, entity=entity)
        try:
            await self._resolve(session)
        except SessionSupersededError:
            self._logger.info("session_abandoned_during_resolve", session_id=session.id)
            return session

        resolved = session.entity or entity
        await self._open(session, resolved.title, resolved.artist_name, session.resolved_date)
        return session

    async def drain(self) -> None:
        """Wait until every spawned panel task has finished."""
        while True:
            pending = [task for task in self._tasks if not task.done()]
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)

    async def _open(
        self, session: AggregationSession, title: str, subtitle: str, date: PartialDate | None
    ) -> None:
        """Render the header and spawn the panels, unless *session* is stale.

        ``begin_session`` awaits the sink, so another command can take over
        before the header is drawn.
        """
        if not self._registry.is_current(session):
            self._logger.info("session_abandoned_before_header", session_id=session.id)
            return
        await self._sink.render_canonical_header(title, subtitle, date)
        self._spawn_panels(session)

    async def _resolve(self, session: AggregationSession) -> None:
        entity = session.entity
        if entity is None:
            return

        refined = await self._entity_search.refine(entity)
        if not self._registry.is_current(session):
            raise SessionSupersededError(session.id)

        if refined.kind == EntityKind.RECORDING:
            release = select_canonical(refined.releases)
            session.canonical_release = release
            session.resolved_date = release.date if release is not None else None
        else:
            session.resolved_date = refined.first_release_date
        session.entity = refined

        self._logger.info(
            "session_resolved",
            session_id=session.id,
            release_id=session.canonical_release.id if session.canonical_release else None,
            resolved_date=session.resolved_date.text if session.resolved_date else None,
            full_date=session.has_full_date,
        )

    def _supersede_current(self) -> None:
        current = self._registry.current
        if current is not None:
            self._progress_tracker.forget(current.id)
        self._registry.clear()

    # ------------------------------------------------------------------
    # Panel tasks and delivery
    # ------------------------------------------------------------------

    def _spawn_panels(self, session: AggregationSession) -> None:
        for panel in session.panels:
            task = asyncio.create_task(self._run_panel(session, panel), name=f"{session.id}:{panel.value}")
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)

    async def _run_panel(self, session: AggregationSession, panel: Panel) -> None:
        if panel in FULL_DATE_PANELS and not session.has_full_date:
            self._logger.debug("panel_skipped_partial_date", session_id=session.id, panel=panel.value)
            result = ProviderResult.unavailable()
        else:
            try:
                result = await self._fetchers[panel](session)
            except Exception as exc:
                self._logger.warning(
                    "panel_fetch_failed",
                    session_id=session.id,
                    panel=panel.value,
                    error=str(exc),
                    exc_info=True,
                )
                result = ProviderResult.unavailable()

        await self._deliver(session, panel, result)

    async def _deliver(self, session: AggregationSession, panel: Panel, result: ProviderResult) -> None:
        """Render one panel for *session* unless it has been superseded."""
        if not self._registry.is_current(session):
            self._logger.debug("stale_result_discarded", session_id=session.id, panel=panel.value)
            return

        try:
            await self._render(panel, result)
        except Exception as exc:
            self._logger.warning("sink_render_failed", session_id=session.id, panel=panel.value, error=str(exc))

        if not self._registry.is_current(session):
            return

        done = session.record_completion()
        self._logger.info(
            "panel_dispatched",
            session_id=session.id,
            panel=panel.value,
            available=result.available,
            done=done,
            total=session.total,
        )
        await self._progress_tracker.update(session.id, done, session.total)
        if done >= session.total:
            self._logger.info("session_completed", session_id=session.id)
            self._progress_tracker.forget(session.id)

    async def _render(self, panel: Panel, result: ProviderResult) -> None:
        payload = result.payload if result.available else None
        if panel == Panel.DETAIL:
            await self._sink.render_detail_panel(payload)
        elif panel == Panel.HISTORY:
            await self._sink.render_history_panel(payload or [])
        elif panel == Panel.CONCURRENT:
            await self._sink.render_concurrent_panel(payload or [])
        elif panel == Panel.BROADCAST:
            await self._sink.render_broadcast_panel(payload or [])
        elif panel == Panel.FILMS:
            await self._sink.render_film_panel(payload or [])
        elif panel == Panel.ARTIST:
            await self._sink.render_artist_panel(payload)

    async def _forward_progress(self, session_id: str, done: int, total: int) -> None:
        await self._sink.report_progress(done, total)

    # ------------------------------------------------------------------
    # Panel fetches
    # ------------------------------------------------------------------

    async def fetch_detail(self, session: AggregationSession) -> ProviderResult:
        """Song or album panel: catalog facts plus an encyclopedia excerpt."""
        entity = session.entity
        if entity is None:
            return ProviderResult.unavailable()
        summary = await self._encyclopedia.find_summary(title_variants(entity))
        detail = build_detail_panel(entity, session.canonical_release, summary)
        if detail.is_empty:
            return ProviderResult.unavailable()
        return ProviderResult.success(detail)

    async def fetch_history(self, session: AggregationSession) -> ProviderResult:
        """History panel: pooled "on this day" feeds for the days around the date."""
        day = session.resolved_date.to_date() if session.resolved_date else None
        if day is None:
            return ProviderResult.unavailable()

        feeds = await gather_available(
            [
                self._encyclopedia.get_on_this_day(d.month, d.day)
                for d in _days_around(day, self._limits.history_window_days)
            ],
            semaphore=self._semaphore,
            logger=self._logger,
            error_msg="history_feed_failed",
        )
        if not feeds:
            return ProviderResult.unavailable()

        pooled = reduce(OnThisDayFeed.merge, feeds)
        items = shape_history(pooled, day.year, widen_years=self._limits.history_widen_years)
        if not items:
            return ProviderResult.unavailable()
        return ProviderResult.success(items)

    async def fetch_concurrent(self, session: AggregationSession) -> ProviderResult:
        """Other official releases issued on the exact date."""
        day = session.resolved_date.to_date() if session.resolved_date else None
        if day is None:
            return ProviderResult.unavailable()

        releases = await self._music_db.search_releases_on_date(day, limit=self._limits.concurrent_fetch_limit)
        if not releases:
            return ProviderResult.unavailable()

        if session.kind == SessionKind.DATE:
            exclude, limit = None, self._limits.concurrent_max_date
        else:
            exclude = session.entity.artist_name if session.entity else None
            limit = self._limits.concurrent_max_entity
        shaped = shape_concurrent(releases, exclude_artist=exclude, limit=limit)
        if not shaped:
            return ProviderResult.unavailable()
        return ProviderResult.success(shaped)

    async def fetch_broadcast(self, session: AggregationSession) -> ProviderResult:
        """TV series premieres within the broadcast window, per country."""
        day = session.resolved_date.to_date() if session.resolved_date else None
        if day is None:
            return ProviderResult.unavailable()

        days = _days_around(day, self._limits.broadcast_window_days)
        episodes = await gather_available(
            [
                self._broadcast.get_schedule(d, country)
                for country in self._limits.broadcast_countries
                for d in days
            ],
            semaphore=self._semaphore,
            logger=self._logger,
            error_msg="broadcast_schedule_failed",
        )
        premieres = shape_premieres(episodes, limit=self._limits.broadcast_max_items)
        if not premieres:
            return ProviderResult.unavailable()
        return ProviderResult.success(premieres)

    async def fetch_films(self, session: AggregationSession) -> ProviderResult:
        """Most popular films released around the date, with key credits."""
        day = session.resolved_date.to_date() if session.resolved_date else None
        if day is None or not self._film.is_available():
            return ProviderResult.unavailable()

        window = datetime.timedelta(days=self._limits.film_window_days)
        films = await self._film.discover_films(day - window, day + window)
        if not films:
            return ProviderResult.unavailable()

        top = films[: self._limits.film_max_items]
        credits = await throttled_gather(
            [self._film.get_credits(film.id) for film in top],
            semaphore=self._semaphore,
        )
        enriched = []
        for film, crew in zip(top, credits):
            if isinstance(crew, list):
                directors, writers = pick_credits(crew, max_writers=self._limits.film_max_writers)
                film = film.model_copy(update={"directors": directors, "writers": writers})
            elif isinstance(crew, BaseException):
                self._logger.warning("film_credits_failed", film_id=film.id, error=str(crew))
            enriched.append(film)
        return ProviderResult.success(enriched)

    async def fetch_artist(self, session: AggregationSession) -> ProviderResult:
        """Artist panel: catalog record and encyclopedia summary, joined.

        Both calls must finish before the panel emits.
        """
        entity = session.entity
        if entity is None:
            return ProviderResult.unavailable()

        record_call = (
            self._music_db.get_artist(entity.artist_id) if entity.artist_id else _no_result()
        )
        record, summary = await asyncio.gather(
            record_call,
            self._encyclopedia.get_summary(entity.artist_name),
            return_exceptions=True,
        )
        if isinstance(record, BaseException):
            self._logger.warning("artist_record_failed", artist_id=entity.artist_id, error=str(record))
            record = None
        if isinstance(summary, BaseException):
            self._logger.warning("artist_summary_failed", artist=entity.artist_name, error=str(summary))
            summary = None

        bio = build_artist_bio(record, summary)
        if bio.is_empty:
            return ProviderResult.unavailable()
        return ProviderResult.success(bio)
