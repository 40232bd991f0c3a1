"""Exceptions raised by the service layer."""


class ServiceError(Exception):
    """Base exception for service errors."""

    pass


class ListingNotFoundError(ServiceError):
    """Raised when a listing doesn't exist (or isn't visible to the caller)."""

    pass


class InvalidTransitionError(ServiceError):
    """Raised when a moderation status change is not allowed."""

    pass
