"""Exception hierarchy for enriched-events."""


class EnrichedEventsError(Exception):
    """Base exception for all enriched-events errors."""

    pass


class ConfigError(EnrichedEventsError):
    """Raised when no base path can be resolved from the configuration."""

    pass


class ValidationError(EnrichedEventsError):
    """Raised when a filter value fails validation."""

    pass


class RangeError(ValidationError):
    """Raised when a date range starts after it ends."""

    pass


class AuthError(EnrichedEventsError):
    """Raised when the token exchange fails or returns a bad response."""

    pass


class CommandExecutionError(EnrichedEventsError):
    """Raised when an object store operation fails."""

    pass
