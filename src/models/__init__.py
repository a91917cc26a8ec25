"""whenItDropped domain models - re-exports all public model classes.

Instead of importing models from their individual module files (e.g.
``from src.models.catalog import CandidateEntity``), other parts of the
codebase can import directly from ``src.models``.

The models are organized across five submodules by domain concern:
    - dates.py    - PartialDate, the year / year-month / full date value
    - catalog.py  - Recordings, release groups, releases, artists
    - context.py  - Encyclopedia, broadcast and film provider payloads
    - panels.py   - Shaped panel data handed to the presentation sink
    - session.py  - Aggregation session lifecycle and ProviderResult
"""

from __future__ import annotations

from src.models.catalog import (
    ArtistRecord,
    CandidateEntity,
    CandidateRelease,
    EntityKind,
    OtherRelease,
    RankedRelease,
    ReleaseStatus,
    ReleaseType,
)
from src.models.context import (
    BroadcastEpisode,
    CrewCredit,
    EncyclopediaSummary,
    FilmRelease,
    OnThisDayEntry,
    OnThisDayFeed,
)
from src.models.dates import UNKNOWN_DATE, PartialDate
from src.models.panels import (
    ArtistBio,
    BroadcastPremiere,
    DetailField,
    DetailPanel,
    HistoryItem,
    HistoryKind,
)
from src.models.session import (
    AggregationSession,
    Panel,
    ProviderResult,
    SessionKind,
    SessionState,
)

__all__ = [
    "UNKNOWN_DATE",
    "AggregationSession",
    "ArtistBio",
    "ArtistRecord",
    "BroadcastEpisode",
    "BroadcastPremiere",
    "CandidateEntity",
    "CandidateRelease",
    "CrewCredit",
    "DetailField",
    "DetailPanel",
    "EncyclopediaSummary",
    "EntityKind",
    "FilmRelease",
    "HistoryItem",
    "HistoryKind",
    "OnThisDayEntry",
    "OnThisDayFeed",
    "OtherRelease",
    "Panel",
    "PartialDate",
    "ProviderResult",
    "RankedRelease",
    "ReleaseStatus",
    "ReleaseType",
    "SessionKind",
    "SessionState",
]
