"""The "current session" pointer.

Exactly one aggregation session is live per registry.  Beginning a new
one swaps the pointer and marks the previous session superseded; panel
tasks hold a reference to the session they were spawned for and ask
:meth:`SessionRegistry.is_current` before delivering anything, so stale
output is dropped at the delivery boundary rather than cancelled in
flight.

Each WebSocket connection and each CLI run owns its own registry.
"""

from __future__ import annotations

import structlog

from src.models.session import AggregationSession
from src.utils.logging import get_logger


class SessionRegistry:
    def __init__(self) -> None:
        self._current: AggregationSession | None = None
        self._logger: structlog.BoundLogger = get_logger(__name__)

    @property
    def current(self) -> AggregationSession | None:
        return self._current

    def activate(self, session: AggregationSession) -> AggregationSession | None:
        """Make *session* current; return the session it superseded, if any."""
        previous = self._current
        if previous is not None and previous is not session:
            previous.mark_superseded()
            self._logger.info(
                "session_superseded",
                session_id=previous.id,
                superseded_by=session.id,
                done=previous.done,
                total=previous.total,
            )
        self._current = session
        return previous

    def is_current(self, session: AggregationSession) -> bool:
        """Identity check against the live pointer, never an id string compare."""
        return self._current is session

    def clear(self) -> None:
        if self._current is not None:
            self._current.mark_superseded()
        self._current = None
