"""Typed failures returned to the CLI and any other front-end."""


class DevlogError(Exception):
    """Base class for every failure the store and report engine raise."""

    pass


class ValidationError(DevlogError):
    """Raised when required input is missing or malformed."""

    pass


class ConflictError(DevlogError):
    """Raised when a write would break a uniqueness rule."""

    pass


class NotFoundError(DevlogError):
    """Raised when a referenced category or sprint does not exist."""

    pass


class StorageError(DevlogError):
    """Raised when the database or a report file cannot be read or written."""

    pass


class LegacyImportError(DevlogError):
    """Raised when the legacy JSON snapshot is unreadable or malformed."""

    pass
