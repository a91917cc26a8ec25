"""Application settings loaded from environment variables via pydantic-settings.

# ─── HOW SETTINGS WORK ─────────────────────────────────────────────────
#
# This class uses pydantic-settings to read configuration from TWO
# sources (in priority order):
#
#   1. **Environment variables** - e.g., TMDB_API_TOKEN=eyJ...
#      (highest priority - always wins)
#   2. **.env file** - key=value lines in the project root .env file
#      (lower priority - used for local development)
#
# Field name `tmdb_api_token` maps to env var `TMDB_API_TOKEN`.
#
# Every provider base URL is a setting so tests and staging can point the
# adapters at a local fake without touching code.
# ──────────────────────────────────────────────────────────────────────
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """whenItDropped application settings.

    Environment variables override defaults. Loaded from .env file when present.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # === Providers ===
    musicbrainz_base_url: str = "https://musicbrainz.org/ws/2"
    wikipedia_base_url: str = "https://en.wikipedia.org/api/rest_v1"
    tvmaze_base_url: str = "https://api.tvmaze.com"
    tmdb_base_url: str = "https://api.themoviedb.org/3"
    tmdb_image_base_url: str = "https://image.tmdb.org/t/p/w200"
    # Empty string = "not configured" → the film provider reports itself
    # unavailable and the film panel renders its empty state.
    tmdb_api_token: str = ""

    # === HTTP transport ===
    # MusicBrainz requires an identifying User-Agent on every request.
    http_user_agent: str = "WhenItDropped/1.0 (https://conortmcardle.github.io)"
    http_timeout_seconds: float = 15.0
    provider_max_concurrency: int = 8

    # === App Config ===
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    app_env: str = "development"
    log_level: str = "INFO"

    def get_configured_providers(self) -> list[str]:
        """Return the provider names that can be used with this configuration."""
        providers = ["musicbrainz", "wikipedia", "tvmaze"]
        if self.tmdb_api_token:
            providers.append("tmdb")
        return providers
