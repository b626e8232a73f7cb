"""Custom exception hierarchy for songmatch.

All application exceptions inherit from :class:`SongMatchError`, which
carries an optional ``provider_name`` so error handlers can identify which
external service (e.g. "suno") caused the failure.

    SongMatchError  (base -- catch-all for any songmatch error)
    +-- CatalogLoadError          (a collection run failed unexpectedly)
    +-- CollectionCancelledError  (a collection run was superseded)
    +-- ConfigurationError        (startup / invalid config)

Ordinary "page missing" conditions are never raised: the catalog provider
reports them as an absent page and the collector counts them as empty.
"""


class SongMatchError(Exception):
    """Base exception for all songmatch errors.

    Every subclass carries a human-readable ``message`` and an optional
    ``provider_name``.  ``__str__`` prefixes the provider name in brackets
    for structured log output, e.g. ``[suno] Failed to load songs``.
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


class CatalogLoadError(SongMatchError):
    """Raised when harvesting an artist's catalog fails.

    The message is user-facing; the underlying cause is chained via
    ``__cause__`` and logged server-side only.
    """

    def __init__(
        self,
        message: str = "Failed to load songs. Please try again.",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class CollectionCancelledError(SongMatchError):
    """Raised inside a collection run whose cancel event has been set."""

    def __init__(
        self,
        message: str = "Collection run was cancelled",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ConfigurationError(SongMatchError):
    """Raised when configuration is invalid or missing at startup."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
