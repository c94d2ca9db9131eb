"""Custom exceptions for the barter backend.

Services raise these; ``app.main`` maps each class to an HTTP status and a
``{"error": message}`` body.
"""

from typing import Optional


class BarterError(Exception):
    """Base exception for all barter backend errors."""

    status_code = 500

    def __init__(self, message: str, details: Optional[dict] = None):
        """Initialize exception with message and optional details.

        Args:
            message: Human-readable error message
            details: Optional dictionary with additional error context
        """
        super().__init__(message)
        self.message = message
        self.details = details


class Unauthorized(BarterError):
    """Raised when the caller cannot be identified. Not retryable."""

    status_code = 401


class DataUnavailable(BarterError):
    """Raised when the backing store cannot be queried or a call times out.

    Safe to retry with backoff. Never equivalent to an empty result.
    """

    status_code = 503


class ValidationError(BarterError):
    """Raised when input validation fails."""

    status_code = 400


class PermissionDenied(BarterError):
    """Raised when the caller may not act on a resource."""

    status_code = 403


class ResourceNotFound(BarterError):
    """Raised when a requested resource is not found."""

    status_code = 404


class InvalidTransition(BarterError):
    """Raised when a trade status change is not allowed from its current state.

    Attributes:
        current: Status the trade is in
        requested: Status the caller asked for
    """

    status_code = 409

    def __init__(self, message: str, current: str, requested: str):
        super().__init__(message, details={"current": current, "requested": requested})
        self.current = current
        self.requested = requested


class StaleTrade(BarterError):
    """Raised when a trade changed between being read and being written."""

    status_code = 409
