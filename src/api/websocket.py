"""WebSocket endpoint for interactive exploration sessions.

One connection drives one orchestrator.  The client sends commands
(``search``, ``select``, ``date``); the server streams back JSON render
instructions as each panel becomes ready.

# ─── HOW THE EXPLORE SOCKET WORKS ─────────────────────────────────────
#
#   Frontend                               Backend (this file)
#   ────────                               ──────────────────
#   ws = new WebSocket(url)     ──────→   websocket.accept()
#                                          build_orchestrator(WebSocketSink)
#   {"command": "search", ...}  ──────→   present_picker()
#                               ←──────   {"type": "picker", ...}
#   {"command": "select", ...}  ──────→   start_entity_session()
#                               ←──────   {"type": "header", ...}
#                               ←──────   {"type": "panel", ...}  (any order)
#                               ←──────   {"type": "progress", ...}
#   {"command": "date", ...}    ──────→   start_date_session()   (supersedes)
#   ws.close()                  ──────→   WebSocketDisconnect
#                                          registry.clear()
#
# Commands run as background tasks so that a new command can arrive (and
# supersede the live session) while the previous one is still resolving.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import asyncio
import contextlib
import uuid
from typing import Annotated, Any, Union

import structlog
from fastapi import WebSocket, WebSocketDisconnect
from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from src.api.schemas import (
    DateCommand,
    ErrorMessage,
    HeaderMessage,
    PanelMessage,
    PickerEntry,
    PickerMessage,
    ProgressMessage,
    SearchCommand,
    SelectCommand,
)
from src.interfaces.presentation_sink import IPresentationSink
from src.models.catalog import CandidateEntity, OtherRelease
from src.models.context import FilmRelease
from src.models.dates import PartialDate
from src.models.panels import ArtistBio, BroadcastPremiere, DetailPanel, HistoryItem
from src.models.session import Panel
from src.pipeline.orchestrator import AggregationOrchestrator
from src.services.date_parser import format_for_display, parse_free_text
from src.utils.errors import DateNotParseableError
from src.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

Command = Annotated[
    Union[SearchCommand, SelectCommand, DateCommand],
    Field(discriminator="command"),
]
_command_adapter: TypeAdapter[Command] = TypeAdapter(Command)


def _dump(payload: Any) -> Any:
    if isinstance(payload, BaseModel):
        return payload.model_dump(mode="json")
    if isinstance(payload, list):
        return [_dump(item) for item in payload]
    return payload


class WebSocketSink(IPresentationSink):
    """Presentation sink that streams JSON render instructions to one client."""

    def __init__(self, websocket: WebSocket) -> None:
        self._websocket = websocket

    async def send(self, message: BaseModel) -> None:
        await self._websocket.send_json(message.model_dump(mode="json"))

    async def _panel(self, panel: Panel, payload: Any) -> None:
        await self.send(PanelMessage(panel=panel.value, data=_dump(payload)))

    async def render_picker_list(self, entities: list[CandidateEntity]) -> None:
        await self.send(PickerMessage(entries=[PickerEntry.from_entity(e) for e in entities]))

    async def render_canonical_header(self, title: str, artist: str, date: PartialDate | None) -> None:
        await self.send(
            HeaderMessage(
                title=title,
                artist=artist,
                date=date.to_iso() if date else None,
                date_display=format_for_display(date) if date else None,
            )
        )

    async def render_detail_panel(self, detail: DetailPanel | None) -> None:
        await self._panel(Panel.DETAIL, detail)

    async def render_history_panel(self, events: list[HistoryItem]) -> None:
        await self._panel(Panel.HISTORY, events)

    async def render_concurrent_panel(self, releases: list[OtherRelease]) -> None:
        await self._panel(Panel.CONCURRENT, releases)

    async def render_broadcast_panel(self, premieres: list[BroadcastPremiere]) -> None:
        await self._panel(Panel.BROADCAST, premieres)

    async def render_film_panel(self, films: list[FilmRelease]) -> None:
        await self._panel(Panel.FILMS, films)

    async def render_artist_panel(self, bio: ArtistBio | None) -> None:
        await self._panel(Panel.ARTIST, bio)

    async def report_progress(self, done: int, total: int) -> None:
        # The client may already be gone; the receive loop handles cleanup.
        with contextlib.suppress(Exception):
            await self.send(ProgressMessage(done=done, total=total))


async def _run_command(
    command: SearchCommand | SelectCommand | DateCommand,
    orchestrator: AggregationOrchestrator,
    sink: WebSocketSink,
) -> None:
    try:
        if isinstance(command, SearchCommand):
            await orchestrator.present_picker(command.title, command.artist, command.kind)
        elif isinstance(command, SelectCommand):
            await orchestrator.start_entity_session(command.entity)
        else:
            try:
                partial = parse_free_text(command.text)
            except DateNotParseableError as exc:
                await sink.send(ErrorMessage(error=type(exc).__name__, detail=exc.message, hint=exc.hint))
                return
            await orchestrator.start_date_session(partial)
    except asyncio.CancelledError:
        raise
    except Exception as exc:
        _logger.error("websocket_command_failed", command=command.command, error=str(exc), exc_info=True)
        with contextlib.suppress(Exception):
            await sink.send(ErrorMessage(error=type(exc).__name__, detail=str(exc)))


async def websocket_explore(websocket: WebSocket) -> None:
    """Serve one exploration client until it disconnects.

    Parameters
    ----------
    websocket:
        The WebSocket connection managed by FastAPI / Starlette.
    """
    await websocket.accept()
    with structlog.contextvars.bound_contextvars(connection_id=uuid.uuid4().hex[:12]):
        await _serve(websocket)


async def _serve(websocket: WebSocket) -> None:
    sink = WebSocketSink(websocket)
    orchestrator: AggregationOrchestrator = websocket.app.state.build_orchestrator(sink)
    tasks: set[asyncio.Task] = set()
    _logger.info("websocket_connected")

    try:
        while True:
            raw = await websocket.receive_text()
            try:
                command = _command_adapter.validate_json(raw)
            except ValidationError as exc:
                _logger.info("websocket_command_invalid", errors=exc.error_count())
                await sink.send(ErrorMessage(error="InvalidCommand", detail=str(exc)))
                continue

            task = asyncio.create_task(_run_command(command, orchestrator, sink))
            tasks.add(task)
            task.add_done_callback(tasks.discard)

    except WebSocketDisconnect:
        _logger.info("websocket_disconnected")

    finally:
        for task in tasks:
            task.cancel()
        # Panel tasks still in flight find no current session and drop.
        orchestrator.registry.clear()
        _logger.debug("websocket_session_cleaned_up")
