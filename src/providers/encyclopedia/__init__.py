"""Encyclopedia provider implementations."""

from src.providers.encyclopedia.wikipedia_provider import WikipediaProvider

__all__ = ["WikipediaProvider"]
