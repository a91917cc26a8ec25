"""Music-database provider implementations.

One concrete implementation of IMusicDatabaseProvider:

    MusicBrainzProvider - MusicBrainz WS/2 JSON API.  No key required;
    requests carry the identifying User-Agent configured in Settings.
"""

from src.providers.music_db.musicbrainz_provider import MusicBrainzProvider

__all__ = ["MusicBrainzProvider"]
