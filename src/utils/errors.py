"""Custom exception hierarchy for whenItDropped.

All application exceptions inherit from :class:`WhenItDroppedError`, which
carries an optional ``provider_name`` so error handlers can identify which
external service (e.g. "musicbrainz", "wikipedia", "tmdb") caused the failure.

The hierarchy is organized by where the failure is handled:

    WhenItDroppedError  (base -- catch-all for any whenItDropped error)
    +-- DateNotParseableError    (user input: free-text date not understood)
    +-- ProviderUnavailableError (external call failed, collapsed to "no data")
    +-- SessionSupersededError   (internal: a newer session replaced this one)
    +-- ConfigurationError       (startup / invalid config)

Only :class:`DateNotParseableError` ever reaches a user.  Provider failures
are caught inside each provider method and become an empty panel; a
superseded session is dropped silently by the orchestrator.
"""


class WhenItDroppedError(Exception):
    """Base exception for all whenItDropped errors.

    Every subclass carries a human-readable ``message`` and an optional
    ``provider_name`` identifying which external service triggered the
    error.  The ``__str__`` method prefixes the provider name in brackets
    for structured log output, e.g. ``[tvmaze] HTTP 503``.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# User input errors
# ---------------------------------------------------------------------------

DATE_INPUT_HINT = 'Try "14 June 1955", "6/14/1955", or just "1955"'


class DateNotParseableError(WhenItDroppedError):
    """Raised when free-text date input matches none of the known notations.

    The caller is expected to show ``hint`` next to the input field so the
    user can correct it.  The parser never substitutes a default date.
    """

    def __init__(self, text: str, hint: str = DATE_INPUT_HINT) -> None:
        self._text = text
        self._hint = hint
        super().__init__(message=f"Could not parse date: {text!r}")

    @property
    def text(self) -> str:
        return self._text

    @property
    def hint(self) -> str:
        return self._hint


# ---------------------------------------------------------------------------
# External service / provider errors
# ---------------------------------------------------------------------------

class ProviderUnavailableError(WhenItDroppedError):
    """Raised when an external provider call yields no usable payload.

    Network errors, timeouts, non-success status codes and malformed JSON
    all map to this one error.  Provider adapters catch it and return
    ``None`` so callers only ever see "payload" or "absence".
    """

    def __init__(
        self,
        message: str = "External service is unavailable",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Orchestration / configuration errors
# ---------------------------------------------------------------------------

class SessionSupersededError(WhenItDroppedError):
    """Raised when a session is replaced while it is still resolving.

    Internal signal only -- the orchestrator catches it and discards the
    session's remaining work without touching the presentation sink.
    """

    def __init__(self, session_id: str) -> None:
        self._session_id = session_id
        super().__init__(message=f"Session {session_id} was superseded")

    @property
    def session_id(self) -> str:
        return self._session_id


class ConfigurationError(WhenItDroppedError):
    """Raised when configuration is invalid or missing at startup."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
