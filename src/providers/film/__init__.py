"""Film-catalog provider implementations."""

from src.providers.film.tmdb_provider import TMDBProvider

__all__ = ["TMDBProvider"]
