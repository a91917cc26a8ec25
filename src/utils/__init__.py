"""Utility modules for whenItDropped.

Available utility modules (all re-exported here for convenience):

- **errors** -- Domain-specific exception hierarchy rooted at
  WhenItDroppedError; provider failures, unparseable dates and superseded
  sessions each get their own subclass so callers can handle them
  without broad ``except Exception`` blocks.
- **concurrency** -- asyncio semaphore throttling and fan-out helpers that
  keep the wide per-panel fan-outs (history week, broadcast window, film
  credits) under a shared connection budget.
- **http_json** -- shared ``httpx.AsyncClient`` factory and the JSON GET
  helper that collapses every transport failure into one error type.
- **logging** -- structlog setup with a dual-renderer pattern: coloured
  console output in development, structured JSON in production.
- **text_normalizer** -- query quoting, case-insensitive match keys, and
  sentence-limited excerpts for encyclopedia text.
"""

# -- Domain exception hierarchy --------------------------------------------
from src.utils.errors import (
    ConfigurationError,
    DateNotParseableError,
    ProviderUnavailableError,
    SessionSupersededError,
    WhenItDroppedError,
)

# -- Async concurrency helpers ---------------------------------------------
from src.utils.concurrency import gather_available, throttled_gather

# -- Shared JSON transport -------------------------------------------------
from src.utils.http_json import build_http_client, fetch_json

# -- Structured logging setup ----------------------------------------------
from src.utils.logging import configure_logging, get_logger

# -- Text normalization (query quoting, match keys, excerpts) --------------
from src.utils.text_normalizer import excerpt, match_key, quoted_phrase, strip_quotes

__all__ = [
    "ConfigurationError",
    "DateNotParseableError",
    "ProviderUnavailableError",
    "SessionSupersededError",
    "WhenItDroppedError",
    "build_http_client",
    "configure_logging",
    "excerpt",
    "fetch_json",
    "gather_available",
    "get_logger",
    "match_key",
    "quoted_phrase",
    "strip_quotes",
    "throttled_gather",
]
