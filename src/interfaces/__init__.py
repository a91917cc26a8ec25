"""Public interface definitions for all external collaborators.

Every external API in whenItDropped is accessed exclusively through the
abstract base classes defined in this package.  Concrete adapters
implement these interfaces and are injected at runtime, so the resolver
and orchestrator never import an HTTP client or a provider module
directly, and unit tests can inject mocks.

The concrete providers live in ``src/providers/`` and are wired together
in ``src/main.py``.

CONCRETE PROVIDER MAP:
    Interface                  →  Concrete implementations
    ─────────────────────────────────────────────────────────────────────
    IMusicDatabaseProvider     →  MusicBrainzProvider
    IEncyclopediaProvider      →  WikipediaProvider
    IBroadcastProvider         →  TVmazeProvider
    IFilmProvider              →  TMDBProvider
    IPresentationSink          →  WebSocketSink (src/api/websocket.py),
                                  ConsoleSink (src/cli/lookup.py)
"""

from src.interfaces.broadcast_provider import IBroadcastProvider
from src.interfaces.encyclopedia_provider import IEncyclopediaProvider
from src.interfaces.film_provider import IFilmProvider
from src.interfaces.music_db_provider import IMusicDatabaseProvider
from src.interfaces.presentation_sink import IPresentationSink

__all__ = [
    "IBroadcastProvider",
    "IEncyclopediaProvider",
    "IFilmProvider",
    "IMusicDatabaseProvider",
    "IPresentationSink",
]
