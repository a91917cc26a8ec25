"""Shared JSON-over-HTTP transport for provider adapters.

Every external provider in whenItDropped speaks JSON over HTTPS and follows
the same contract: a call yields a parsed payload or nothing.  This module
collapses every failure mode (connection error, timeout, non-2xx status,
undecodable body) into :class:`ProviderUnavailableError`, which the
adapters catch and turn into ``None``.  A body that decodes but cannot be
mapped (see :data:`MALFORMED_PAYLOAD_ERRORS`) ends the same way.

There is no retry here: one failed attempt is final.  The
deadline is the ``httpx.Timeout`` configured on the shared client, so a
hung provider resolves to "unavailable" instead of stalling its panel.
"""

from __future__ import annotations

from typing import Any

import httpx
from pydantic import ValidationError

from src.utils.errors import ProviderUnavailableError
from src.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_TIMEOUT_SECONDS = 15.0

# Raised while mapping a decoded body that does not have the expected shape
# (wrong field types, null list items, missing keys).  Adapters catch these
# around their mapping step and report the payload as unavailable.
MALFORMED_PAYLOAD_ERRORS: tuple[type[Exception], ...] = (ValidationError, AttributeError, TypeError, KeyError)


def build_http_client(
    user_agent: str,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Create the shared ``httpx.AsyncClient`` used by all providers.

    Parameters
    ----------
    user_agent:
        Identifying User-Agent string (MusicBrainz rejects anonymous clients).
    timeout:
        Per-request deadline in seconds.
    transport:
        Optional transport override, used by tests (``httpx.MockTransport``).
    """
    return httpx.AsyncClient(
        timeout=httpx.Timeout(timeout),
        headers={"User-Agent": user_agent, "Accept": "application/json"},
        follow_redirects=True,
        transport=transport,
    )


async def fetch_json(
    client: httpx.AsyncClient,
    url: str,
    *,
    provider_name: str,
    params: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
) -> Any:
    """GET *url* and return the decoded JSON body.

    Raises
    ------
    ProviderUnavailableError
        On any transport error, non-success status, or malformed JSON.
    """
    try:
        response = await client.get(url, params=params, headers=headers)
        response.raise_for_status()
    except httpx.TimeoutException as exc:
        raise ProviderUnavailableError(
            message=f"Timeout fetching {url}: {exc}",
            provider_name=provider_name,
        ) from exc
    except httpx.HTTPStatusError as exc:
        raise ProviderUnavailableError(
            message=f"HTTP {exc.response.status_code} fetching {url}",
            provider_name=provider_name,
        ) from exc
    except httpx.HTTPError as exc:
        raise ProviderUnavailableError(
            message=f"HTTP error fetching {url}: {exc}",
            provider_name=provider_name,
        ) from exc

    try:
        return response.json()
    except ValueError as exc:
        raise ProviderUnavailableError(
            message=f"Malformed JSON from {url}",
            provider_name=provider_name,
        ) from exc


def log_malformed_payload(provider_name: str, path: str, exc: Exception) -> None:
    """Log a decoded body that could not be mapped onto the domain models."""
    logger.warning(
        "provider_payload_malformed",
        provider=provider_name,
        path=path,
        error=f"{type(exc).__name__}: {exc}",
    )
