"""Pydantic request/response schemas for the whenItDropped API.

Defines the public contract for the REST endpoints and the WebSocket
message envelopes.

# ─── HOW SCHEMAS WORK ──────────────────────────────────────────────────
#
# These Pydantic models define the *shape* of every HTTP request body,
# response body and WebSocket message.  FastAPI uses them for:
#
#   1. **Validation** - Incoming JSON is validated against the schema.
#      Invalid requests get a 422 error with details.
#   2. **Serialization** - Outgoing objects are converted to JSON
#      matching the schema (via response_model=...).
#   3. **Documentation** - OpenAPI docs at /docs.
#
# Convention: Request schemas end with "Request", response schemas end
# with "Response", WebSocket envelopes end with "Message".
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

from src.models.catalog import CandidateEntity, EntityKind
from src.services.panel_formatter import describe_candidate


class ErrorResponse(BaseModel):
    """Standard error body returned by the error-handling middleware."""

    error: str
    detail: str
    hint: str | None = None


class HealthResponse(BaseModel):
    status: str
    version: str
    providers: dict[str, Any]


class ProvidersResponse(BaseModel):
    providers: list[dict[str, Any]]


class PickerEntry(BaseModel):
    """One row of a picker list.

    ``entity`` is echoed back verbatim in the WebSocket ``select`` command.
    """

    entity: CandidateEntity
    date: str = Field(description="Canonical release date for display, or 'Unknown date'")
    subtitle: str | None = Field(default=None, description="Album title (songs) or type (albums)")

    @classmethod
    def from_entity(cls, entity: CandidateEntity) -> PickerEntry:
        date, subtitle = describe_candidate(entity)
        return cls(entity=entity, date=date, subtitle=subtitle)


class PickerResponse(BaseModel):
    kind: EntityKind
    query_title: str
    query_artist: str | None = None
    results: list[PickerEntry] = Field(default_factory=list)


class DateParseRequest(BaseModel):
    text: str = Field(min_length=1, max_length=100)


class DateParseResponse(BaseModel):
    year: int
    month: int | None = None
    day: int | None = None
    iso: str
    display: str


# ---------------------------------------------------------------------------
# WebSocket commands (client → server)
# ---------------------------------------------------------------------------


class SearchCommand(BaseModel):
    command: Literal["search"]
    kind: EntityKind = EntityKind.RECORDING
    title: str = Field(min_length=1)
    artist: str | None = None


class SelectCommand(BaseModel):
    command: Literal["select"]
    entity: CandidateEntity


class DateCommand(BaseModel):
    command: Literal["date"]
    text: str = Field(min_length=1)


# ---------------------------------------------------------------------------
# WebSocket render instructions (server → client)
# ---------------------------------------------------------------------------


class PickerMessage(BaseModel):
    type: Literal["picker"] = "picker"
    entries: list[PickerEntry]


class HeaderMessage(BaseModel):
    type: Literal["header"] = "header"
    title: str
    artist: str
    date: str | None = None
    date_display: str | None = None


class PanelMessage(BaseModel):
    type: Literal["panel"] = "panel"
    panel: str
    data: Any = None


class ProgressMessage(BaseModel):
    type: Literal["progress"] = "progress"
    done: int
    total: int


class ErrorMessage(BaseModel):
    type: Literal["error"] = "error"
    error: str
    detail: str
    hint: str | None = None
