"""YAML configuration loader with environment variable overrides.

# ─── CONFIGURATION HIERARCHY ───────────────────────────────────────────
#
# Configuration is loaded in layers (later layers override earlier):
#
#   1. config/config.yaml  - Static panel tuning checked into the repo
#   2. .env file           - Local developer overrides (not committed)
#   3. Environment vars    - Set at deploy time
#
# load_config() reads the YAML file first, then deep-merges
# environment-based values on top.  The "panels" section only lives in
# YAML; PanelLimits.from_config() turns it into typed limits for the
# orchestrator, falling back to the built-in defaults for missing keys.
# ──────────────────────────────────────────────────────────────────────
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from src.config.settings import Settings
from src.utils.errors import ConfigurationError


class PanelLimits(BaseModel):
    """Caps and date windows applied when shaping panel data."""

    model_config = ConfigDict(frozen=True)

    picker_limit: int = Field(default=8, ge=1)
    concurrent_max_entity: int = Field(default=8, ge=1)
    concurrent_max_date: int = Field(default=16, ge=1)
    concurrent_fetch_limit: int = Field(default=25, ge=1)
    history_window_days: int = Field(default=4, ge=0)
    history_widen_years: int = Field(default=2, ge=0)
    broadcast_window_days: int = Field(default=30, ge=0)
    broadcast_countries: tuple[str, ...] = ("US", "GB")
    broadcast_max_items: int = Field(default=8, ge=1)
    film_window_days: int = Field(default=4, ge=0)
    film_max_items: int = Field(default=8, ge=1)
    film_max_writers: int = Field(default=2, ge=0)

    @classmethod
    def from_config(cls, config: dict | None = None) -> "PanelLimits":
        """Build limits from the ``panels`` section of a loaded config dict.

        Raises
        ------
        ConfigurationError
            If the section holds values of the wrong type or out of range.
        """
        section = (config or {}).get("panels") or {}
        try:
            return cls(**section)
        except (TypeError, ValidationError) as exc:
            raise ConfigurationError(message=f"Invalid 'panels' configuration: {exc}") from exc


def load_config(path: str = "config/config.yaml") -> dict:
    """Load YAML config and merge with environment-based Settings.

    Environment variables (via Settings) override YAML values where keys overlap.

    Args:
        path: Path to the YAML configuration file.

    Returns:
        Fully resolved configuration dictionary.

    Raises:
        ConfigurationError: If the file exists but is not a YAML mapping.
    """
    config_path = Path(path)
    if config_path.exists():
        try:
            with open(config_path) as f:
                yaml_config: Any = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ConfigurationError(message=f"Malformed YAML in {path}: {exc}") from exc
        if not isinstance(yaml_config, dict):
            raise ConfigurationError(message=f"{path} must contain a mapping at the top level")
    else:
        yaml_config = {}

    settings = Settings()
    env_overrides = {
        "app": {
            "host": settings.app_host,
            "port": settings.app_port,
            "env": settings.app_env,
        },
        "providers": {
            "musicbrainz_base_url": settings.musicbrainz_base_url,
            "wikipedia_base_url": settings.wikipedia_base_url,
            "tvmaze_base_url": settings.tvmaze_base_url,
            "tmdb_base_url": settings.tmdb_base_url,
            "available": settings.get_configured_providers(),
        },
        "http": {
            "user_agent": settings.http_user_agent,
            "timeout_seconds": settings.http_timeout_seconds,
            "max_concurrency": settings.provider_max_concurrency,
        },
        "logging": {
            "level": settings.log_level,
        },
    }

    _deep_merge(yaml_config, env_overrides)
    return yaml_config


def _deep_merge(base: dict, overrides: dict) -> None:
    """Recursively merge overrides into base dict, mutating base in place."""
    for key, value in overrides.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
