"""Exception hierarchy for the trip tracking core.

Transient errors may succeed if the driver re-invokes the same action;
permanent ones will not. Nothing in this package retries automatically.
"""

from typing import Any


class TrackingError(Exception):
    """Base exception for all trip tracking errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class TransientError(TrackingError):
    pass


class NetworkError(TransientError):
    """Backend unreachable or the request timed out."""

    pass


class ServiceUnavailableError(TransientError):
    """Backend answered with a 5xx."""

    pass


class PermanentError(TrackingError):
    pass


class NotFoundError(PermanentError):
    """Requested trip or record does not exist."""

    pass


class StateError(PermanentError):
    """Invalid trip status transition."""

    pass
