"""Session progress tracking with callback-based listener notification.

Tracks how many panels of each aggregation session have rendered and
broadcasts updates to registered listener callbacks.  Listeners are keyed
by session ID so a superseded session's listener can be dropped without
touching the live one.

# ─── HOW PROGRESS TRACKING WORKS ───────────────────────────────────────
#
# This implements the Observer pattern:
#
#   Orchestrator ──update()──→ ProgressTracker ──callback()──→ sink.report_progress
#                                                           ──→ (any other listener)
#
#   1. begin_session() calls tracker.start(session_id, total) → "0 of N"
#   2. each dispatched panel calls tracker.update(session_id, done, total)
#   3. the sink's report_progress (registered as a listener) renders it
#
#   - Progress is cosmetic: panels render the moment their data is ready,
#     never when the counter reaches its total
#   - The done counter is monotonic and capped at the total
#   - Listener errors are caught and logged → one broken listener can't
#     block panel delivery
#   - Both sync and async callbacks are supported (asyncio.iscoroutine check)
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass

import structlog

from src.utils.logging import get_logger


@dataclass
class _SessionStatus:
    """Internal snapshot of a single session's progress."""

    done: int = 0
    total: int = 0


class ProgressTracker:
    """Tracks and broadcasts panel-completion progress via callbacks."""

    def __init__(self) -> None:
        self._statuses: dict[str, _SessionStatus] = {}
        self._listeners: dict[str, list[Callable]] = {}
        self._logger: structlog.BoundLogger = get_logger(__name__)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def start(self, session_id: str, total: int) -> None:
        """Reset a session to ``0`` of *total* and notify listeners."""
        self._statuses[session_id] = _SessionStatus(done=0, total=total)
        await self._notify_listeners(session_id, 0, total)

    async def update(self, session_id: str, done: int, total: int) -> None:
        """Record a progress update and notify all registered listeners.

        Parameters
        ----------
        session_id:
            The aggregation session to update.
        done:
            Panels completed so far.  Values lower than the last recorded
            one are ignored so progress never moves backwards.
        total:
            Panels expected for the session.
        """
        status = self._statuses.setdefault(session_id, _SessionStatus(total=total))
        status.total = total
        status.done = max(status.done, min(done, total))

        self._logger.debug(
            "progress_update",
            session_id=session_id,
            done=status.done,
            total=total,
        )

        await self._notify_listeners(session_id, status.done, total)

    def register_listener(self, session_id: str, callback: Callable) -> None:
        """Register a callback to receive progress updates for a session.

        Parameters
        ----------
        session_id:
            The session to listen to.
        callback:
            An async or sync callable accepting ``(session_id, done, total)``.
        """
        if session_id not in self._listeners:
            self._listeners[session_id] = []

        if callback not in self._listeners[session_id]:
            self._listeners[session_id].append(callback)
            self._logger.debug(
                "listener_registered",
                session_id=session_id,
                total_listeners=len(self._listeners[session_id]),
            )

    def forget(self, session_id: str) -> None:
        """Drop all state and listeners for a finished or superseded session."""
        self._statuses.pop(session_id, None)
        self._listeners.pop(session_id, None)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    async def _notify_listeners(self, session_id: str, done: int, total: int) -> None:
        """Invoke all registered listeners for a session.

        Listeners that raise exceptions are logged and skipped so a single
        faulty listener (a closed WebSocket, typically) cannot block panel
        delivery.
        """
        listeners = list(self._listeners.get(session_id, []))
        for callback in listeners:
            try:
                result = callback(session_id, done, total)
                if asyncio.iscoroutine(result):
                    await result
            except Exception as exc:
                self._logger.warning(
                    "listener_callback_error",
                    session_id=session_id,
                    error=str(exc),
                    callback=getattr(callback, "__name__", repr(callback)),
                )
