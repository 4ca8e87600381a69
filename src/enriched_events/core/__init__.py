"""Core utilities and shared components for enriched-events."""

from .config import Settings, settings
from .exceptions import (
    AuthError,
    CommandExecutionError,
    ConfigError,
    EnrichedEventsError,
    RangeError,
    ValidationError,
)
from .observability import get_logger, get_tracer

__all__ = [
    "Settings",
    "settings",
    "EnrichedEventsError",
    "AuthError",
    "CommandExecutionError",
    "ConfigError",
    "RangeError",
    "ValidationError",
    "get_logger",
    "get_tracer",
]
