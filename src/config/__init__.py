"""Configuration module - exports Settings, load_config, PanelLimits, and a module-level singleton."""

from src.config.loader import PanelLimits, load_config
from src.config.settings import Settings

settings = Settings()

__all__ = ["PanelLimits", "Settings", "load_config", "settings"]
