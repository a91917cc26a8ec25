"""Aggregation session state.

An :class:`AggregationSession` is one user-initiated resolution run: a
selected song or album, or a typed date.  It records what was resolved
and counts panel completions against a total fixed at creation.  Only
one session is live at a time; the orchestrator's
:class:`~src.pipeline.session_registry.SessionRegistry` holds the pointer
and every panel task compares its captured session against it before
delivering anything.

Unlike the catalog models this one is mutable: the done counter and the
state advance as panels complete.  Only the orchestrator's delivery path
mutates it, and that path never interleaves with itself on the event
loop.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from src.models.catalog import CandidateEntity, CandidateRelease
from src.models.dates import PartialDate

T = TypeVar("T")


class SessionKind(str, Enum):  # noqa: UP042 - StrEnum requires Python 3.11+
    DATE = "date"
    ENTITY = "entity"


class SessionState(str, Enum):  # noqa: UP042 - StrEnum requires Python 3.11+
    """Lifecycle of a session.

    PENDING → IN_FLIGHT → COMPLETE, or SUPERSEDED from either of the first
    two when a newer session begins.  COMPLETE and SUPERSEDED are terminal.
    """

    PENDING = "PENDING"
    IN_FLIGHT = "IN_FLIGHT"
    COMPLETE = "COMPLETE"
    SUPERSEDED = "SUPERSEDED"


class Panel(str, Enum):  # noqa: UP042 - StrEnum requires Python 3.11+
    """The independently-rendered result panels."""

    DETAIL = "detail"
    HISTORY = "history"
    CONCURRENT = "concurrent"
    BROADCAST = "broadcast"
    FILMS = "films"
    ARTIST = "artist"


DATE_SESSION_PANELS: tuple[Panel, ...] = (
    Panel.HISTORY,
    Panel.CONCURRENT,
    Panel.BROADCAST,
    Panel.FILMS,
)
ENTITY_SESSION_PANELS: tuple[Panel, ...] = (Panel.DETAIL, *DATE_SESSION_PANELS, Panel.ARTIST)

# Panels that need a full year-month-day date to be attempted at all.
FULL_DATE_PANELS: frozenset[Panel] = frozenset(DATE_SESSION_PANELS)


class ProviderResult(BaseModel, Generic[T]):
    """Outcome of one panel fetch: a usable payload, or unavailable.

    There is deliberately no error detail: network failures, malformed
    payloads and empty results all collapse to :meth:`unavailable`.
    """

    model_config = ConfigDict(frozen=True)

    available: bool
    payload: T | None = None

    @classmethod
    def success(cls, payload: Any) -> ProviderResult:
        return cls(available=True, payload=payload)

    @classmethod
    def unavailable(cls) -> ProviderResult:
        return cls(available=False)


class AggregationSession(BaseModel):
    """Mutable state of one in-flight aggregation run."""

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    kind: SessionKind
    entity: CandidateEntity | None = None
    canonical_release: CandidateRelease | None = None
    resolved_date: PartialDate | None = None
    total: int
    done: int = 0
    state: SessionState = SessionState.PENDING
    started_at: datetime = Field(
        default_factory=lambda: datetime.now(tz=timezone.utc)  # noqa: UP017
    )

    @property
    def panels(self) -> tuple[Panel, ...]:
        return DATE_SESSION_PANELS if self.kind == SessionKind.DATE else ENTITY_SESSION_PANELS

    @property
    def superseded(self) -> bool:
        return self.state == SessionState.SUPERSEDED

    @property
    def has_full_date(self) -> bool:
        return self.resolved_date is not None and self.resolved_date.to_date() is not None

    def record_completion(self) -> int:
        """Advance the done counter by one, capped at the total."""
        if self.state in (SessionState.COMPLETE, SessionState.SUPERSEDED):
            return self.done
        self.done = min(self.done + 1, self.total)
        self.state = SessionState.COMPLETE if self.done >= self.total else SessionState.IN_FLIGHT
        return self.done

    def mark_superseded(self) -> None:
        if self.state != SessionState.COMPLETE:
            self.state = SessionState.SUPERSEDED
