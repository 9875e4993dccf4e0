class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class InvalidDate(ValidationError):
    """Raised when a date is not a valid YYYY-MM-DD calendar date."""


class InvalidPeriod(ValidationError):
    """Raised when a period index is negative or not an integer."""


class InvalidRange(ValidationError):
    """Raised when a date range starts after it ends."""


class AuthenticationError(DomainError):
    """Raised when the caller identity is missing."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class TimetableLockedError(AuthorizationError):
    """Raised when a locked semester timetable would be overwritten."""


class NotFoundError(DomainError):
    """Raised when a looked-up record does not exist."""


class StorageError(DomainError):
    """Wraps any failure of the underlying store."""


class Cancelled(DomainError):
    """Raised when the caller aborted a long-running computation."""
