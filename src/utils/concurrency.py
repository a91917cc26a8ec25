"""Shared concurrency primitives for wide provider fan-outs.

Some panels need many small requests at once: the history panel pools nine
"on this day" feeds, the broadcast panel walks a two-month schedule window
in two countries, and the film panel fetches credits for every listed film.
These all go through a shared semaphore so one panel cannot open hundreds of
sockets while the others wait.

Two main patterns are exposed:

1. **throttled_gather** -- A drop-in replacement for ``asyncio.gather`` that
   wraps each awaitable in a semaphore acquire/release.

2. **gather_available** -- The fan-out-then-merge pattern used by the
   providers: dispatch N calls, drop the ones that failed or returned
   ``None``, and return the flattened payloads.
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, TypeVar

import structlog

from src.utils.logging import get_logger

_T = TypeVar("_T")

# Shared across every panel of every session.  Eight parallel requests keep
# a 122-request broadcast window to a few seconds on a normal connection.
_PROVIDER_SEMAPHORE = asyncio.Semaphore(8)

_logger: structlog.BoundLogger = get_logger(__name__)


async def throttled_gather(
    coros: list[Awaitable[_T]],
    semaphore: asyncio.Semaphore | None = None,
    return_exceptions: bool = True,
) -> list[_T | BaseException]:
    """Run awaitables concurrently with semaphore throttling.

    Parameters
    ----------
    coros:
        Awaitable objects to execute concurrently.
    semaphore:
        Optional semaphore for concurrency control.  Defaults to the
        module-level ``_PROVIDER_SEMAPHORE``.
    return_exceptions:
        If ``True``, exceptions are returned in the results list rather
        than being raised.  Mirrors ``asyncio.gather`` semantics.

    Returns
    -------
    list[_T | BaseException]
        Results in the same order as the input coroutines.
    """
    if semaphore is None:
        semaphore = _PROVIDER_SEMAPHORE

    async def _wrapped(coro: Awaitable[_T]) -> _T:
        async with semaphore:
            return await coro

    tasks = [_wrapped(c) for c in coros]
    return await asyncio.gather(*tasks, return_exceptions=return_exceptions)


async def gather_available(
    coros: list[Awaitable[Any]],
    semaphore: asyncio.Semaphore | None = None,
    logger: structlog.BoundLogger | None = None,
    error_msg: str = "fan_out_call_failed",
) -> list[Any]:
    """Run provider calls in parallel and keep only the usable payloads.

    ``None`` results (the provider's "unavailable" signal) and raised
    exceptions are dropped; list payloads are flattened into the output.

    Parameters
    ----------
    coros:
        Provider coroutines, one per request.
    semaphore:
        Optional semaphore; defaults to the shared provider semaphore.
    logger:
        Optional structured logger for warnings on raised exceptions.
    error_msg:
        Log event name for calls that raised.

    Returns
    -------
    list[Any]
        Flattened payloads from every call that produced one, in input order.
    """
    if logger is None:
        logger = _logger

    raw_results = await throttled_gather(coros, semaphore=semaphore, return_exceptions=True)

    merged: list[Any] = []
    for idx, result in enumerate(raw_results):
        if isinstance(result, BaseException):
            logger.warning(error_msg, index=idx, error=str(result))
        elif result is None:
            continue
        elif isinstance(result, list):
            merged.extend(result)
        else:
            merged.append(result)

    return merged
