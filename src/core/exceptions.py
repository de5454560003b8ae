"""Exceptions raised by the calendar sync pipeline."""


class SyncError(Exception):
    """Base exception for calendar sync errors."""

    stage = "sync"


class AuthError(SyncError):
    """Raised when the credential exchange or login check fails."""

    stage = "authentication"


class CalendarError(SyncError):
    """Raised when MS Graph rejects or fails a calendar query."""

    stage = "calendar"


class PersistError(SyncError):
    """Raised when the event store cannot be opened or written."""

    stage = "persist"


class ConfigurationError(SyncError):
    """Raised when required configuration is missing or invalid."""

    stage = "configuration"
