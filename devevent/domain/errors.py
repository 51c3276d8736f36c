"""Error taxonomy shared by the write path, the guards and the HTTP layer."""

from __future__ import annotations


class EventPlatformError(Exception):
    """Base error carrying the offending field so callers can render it."""

    field: str | None = None

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        if field is not None:
            self.field = field


class ValidationError(EventPlatformError):
    """Malformed or missing field, bad enum value, empty agenda/tags."""


class InvalidDateError(ValidationError):
    field = "date"


class InvalidTimeError(ValidationError):
    field = "time"


class NotFoundError(EventPlatformError):
    pass


class ReferentialIntegrityError(EventPlatformError):
    """A booking points at an event that does not exist."""

    field = "event_id"


class UniquenessConflictError(EventPlatformError):
    """Storage refused a write because the slug is already taken.

    Two writers racing on the same title end up here; the losing write can
    be retried after the title is changed.
    """

    field = "slug"
    retryable = True


class UploadError(EventPlatformError):
    field = "image"
