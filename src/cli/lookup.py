# =============================================================================
# src/cli/lookup.py - CLI Lookup Command (Search + Run Session)
# =============================================================================
#
# Runs one aggregation session from the command line against the live
# providers, bypassing the web server entirely:
#
#   song  "Title" [--artist A] [--pick N]   → picker list, then session
#   album "Title" [--artist A] [--pick N]   → picker list, then session
#   date  "14 June 1955"                    → date session
#
# Output modes:
#   - Text (default): one section per panel, printed as each panel lands
#   - JSON (--json): one JSON object per line, the same envelopes the
#     WebSocket endpoint sends ({"type": "panel", "panel": ..., "data": ...})
#
# Logs always go to stderr so stdout holds only the rendered output.
#
# Exit codes: 0 success, 1 no catalog matches, 2 unparseable date.
# =============================================================================

"""Standalone CLI for running whenItDropped sessions.

Usage::

    python -m src.cli.lookup song "Yesterday" --artist "The Beatles"
    python -m src.cli.lookup album "Abbey Road" --pick 2
    python -m src.cli.lookup date "14 June 1955" --json
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import Any, TextIO

from pydantic import BaseModel

from src.api.schemas import HeaderMessage, PanelMessage, PickerEntry, PickerMessage, ProgressMessage
from src.interfaces.presentation_sink import IPresentationSink
from src.models.catalog import CandidateEntity, EntityKind, OtherRelease
from src.models.context import FilmRelease
from src.models.dates import PartialDate
from src.models.panels import ArtistBio, BroadcastPremiere, DetailPanel, HistoryItem
from src.models.session import Panel
from src.services.date_parser import format_for_display, parse_free_text
from src.utils.errors import DateNotParseableError

EXIT_OK = 0
EXIT_NO_MATCHES = 1
EXIT_BAD_DATE = 2

_EMPTY = "  Nothing found."

_KINDS = {
    "song": EntityKind.RECORDING,
    "album": EntityKind.RELEASE_GROUP,
}


def _dump(payload: Any) -> Any:
    if isinstance(payload, BaseModel):
        return payload.model_dump(mode="json")
    if isinstance(payload, list):
        return [_dump(item) for item in payload]
    return payload


# ---------------------------------------------------------------------------
# Console sink
# ---------------------------------------------------------------------------


class ConsoleSink(IPresentationSink):
    """Presentation sink that prints panels to a terminal as they arrive.

    With ``json_output`` every render instruction becomes one JSON line,
    matching the WebSocket message envelopes.
    """

    def __init__(self, json_output: bool = False, stream: TextIO | None = None) -> None:
        self._json_output = json_output
        self._stream = stream or sys.stdout

    def _emit(self, message: BaseModel) -> None:
        print(json.dumps(message.model_dump(mode="json")), file=self._stream, flush=True)

    def _section(self, heading: str, lines: list[str]) -> None:
        print(f"\n[{heading}]", file=self._stream)
        for line in lines or [_EMPTY]:
            print(line, file=self._stream)
        self._stream.flush()

    async def render_picker_list(self, entities: list[CandidateEntity]) -> None:
        entries = [PickerEntry.from_entity(e) for e in entities]
        if self._json_output:
            self._emit(PickerMessage(entries=entries))
            return
        lines = []
        for number, entry in enumerate(entries, start=1):
            suffix = f", {entry.subtitle}" if entry.subtitle else ""
            lines.append(f"  {number}. {entry.entity.title} - {entry.entity.artist_name} ({entry.date}{suffix})")
        self._section("Matches", lines)

    async def render_canonical_header(self, title: str, artist: str, date: PartialDate | None) -> None:
        if self._json_output:
            self._emit(
                HeaderMessage(
                    title=title,
                    artist=artist,
                    date=date.to_iso() if date else None,
                    date_display=format_for_display(date) if date else None,
                )
            )
            return
        print(f"\n=== {title} ===", file=self._stream)
        print(artist, file=self._stream)
        if date is not None:
            print(f"Released {format_for_display(date)}", file=self._stream)
        self._stream.flush()

    async def _panel(self, panel: Panel, payload: Any, heading: str, lines: list[str]) -> None:
        if self._json_output:
            self._emit(PanelMessage(panel=panel.value, data=_dump(payload)))
        else:
            self._section(heading, lines)

    async def render_detail_panel(self, detail: DetailPanel | None) -> None:
        lines = []
        if detail is not None:
            lines = [f"  {f.label}: {f.value}" for f in detail.fields]
            if detail.excerpt:
                lines.append(f"  {detail.excerpt}")
            if detail.page_url:
                lines.append(f"  {detail.page_url}")
        await self._panel(Panel.DETAIL, detail, "Details", lines)

    async def render_history_panel(self, events: list[HistoryItem]) -> None:
        lines = [f"  {item.year or ''}  {item.text}" for item in events]
        await self._panel(Panel.HISTORY, events, "On this day", lines)

    async def render_concurrent_panel(self, releases: list[OtherRelease]) -> None:
        lines = [f"  {r.title} - {r.artist_name}" for r in releases]
        await self._panel(Panel.CONCURRENT, releases, "Also released", lines)

    async def render_broadcast_panel(self, premieres: list[BroadcastPremiere]) -> None:
        lines = []
        for p in premieres:
            details = [d for d in (p.network, format_for_display(p.airdate) if p.airdate else None) if d]
            lines.append(f"  {p.show_name}" + (f" ({', '.join(details)})" if details else ""))
        await self._panel(Panel.BROADCAST, premieres, "TV premieres", lines)

    async def render_film_panel(self, films: list[FilmRelease]) -> None:
        lines = []
        for film in films:
            line = f"  {film.title}"
            if film.release_date is not None:
                line += f" ({format_for_display(film.release_date)})"
            if film.directors:
                line += f"; dir. {', '.join(film.directors)}"
            if film.writers:
                line += f"; written by {', '.join(film.writers)}"
            lines.append(line)
        await self._panel(Panel.FILMS, films, "In cinemas", lines)

    async def render_artist_panel(self, bio: ArtistBio | None) -> None:
        lines = []
        if bio is not None:
            lines.append(f"  {bio.name}")
            if bio.origin:
                lines.append(f"  From: {bio.origin}")
            if bio.active_since:
                lines.append(f"  Active since: {bio.active_since}")
            if bio.excerpt:
                lines.append(f"  {bio.excerpt}")
        await self._panel(Panel.ARTIST, bio, "Artist", lines)

    async def report_progress(self, done: int, total: int) -> None:
        if self._json_output:
            self._emit(ProgressMessage(done=done, total=total))
        else:
            print(f"  ({done}/{total} panels)", file=sys.stderr, flush=True)


# ---------------------------------------------------------------------------
# Session runner
# ---------------------------------------------------------------------------


async def _run(args: argparse.Namespace, sink: IPresentationSink) -> int:
    """Build the providers, run one session to completion, and return the exit code."""
    # Deferred import: src.main builds the FastAPI app and configures logging.
    from src.main import build_components, build_orchestrator, config, settings

    components = build_components(settings, config)
    orchestrator = build_orchestrator(components, sink)
    try:
        if args.command == "date":
            try:
                partial = parse_free_text(args.text)
            except DateNotParseableError as exc:
                print(f"Error: {exc.message}. {exc.hint}", file=sys.stderr)
                return EXIT_BAD_DATE
            await orchestrator.start_date_session(partial)
        else:
            entities = await orchestrator.present_picker(args.text, args.artist, _KINDS[args.command])
            if not entities:
                print("No matches found.", file=sys.stderr)
                return EXIT_NO_MATCHES
            if not 1 <= args.pick <= len(entities):
                print(f"Error: --pick must be between 1 and {len(entities)}", file=sys.stderr)
                return EXIT_NO_MATCHES
            await orchestrator.start_entity_session(entities[args.pick - 1])

        await orchestrator.drain()
    finally:
        await components["http_client"].aclose()
    return EXIT_OK


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the lookup CLI."""
    parser = argparse.ArgumentParser(
        prog="python -m src.cli.lookup",
        description="Look up a song, album or date and print what else was happening.",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        dest="json_output",
        help="Emit one JSON render instruction per line instead of text.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    for name, noun in (("song", "song title"), ("album", "album title")):
        sub = subparsers.add_parser(name, help=f"Search by {noun}.")
        sub.add_argument("text", help=f"The {noun}.")
        sub.add_argument("--artist", "-a", default=None, help="Narrow the search to this artist.")
        sub.add_argument(
            "--pick", "-p",
            type=int,
            default=1,
            help="Which match to explore (1-based position in the list).",
        )

    date_parser = subparsers.add_parser("date", help="Explore a date.")
    date_parser.add_argument("text", help='A date such as "14 June 1955", "6/14/1955" or "1955".')
    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the lookup tool."""
    args = build_parser().parse_args(argv)

    from src.main import settings
    from src.utils.logging import configure_logging

    # src.main logs to stdout; rendered output owns stdout here.
    configure_logging(log_level=settings.log_level, json_output=args.json_output, stream=sys.stderr)

    sink = ConsoleSink(json_output=args.json_output)
    sys.exit(asyncio.run(_run(args, sink)))


if __name__ == "__main__":
    main()
