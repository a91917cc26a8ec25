"""Broadcast-schedule provider implementations."""

from src.providers.broadcast.tvmaze_provider import TVmazeProvider

__all__ = ["TVmazeProvider"]
