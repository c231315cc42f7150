"""Service error taxonomy.

Core operations raise these instead of ``HTTPException`` so they stay usable
outside a request. ``libs.common.error_handler`` turns them into
``{"error": "<message>"}`` responses.
"""

from typing import Any, Optional


class ServiceError(Exception):
    """Base class for expected, client-visible failures."""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None, **details: Any):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


class InvalidInput(ServiceError):
    status_code = 400
    default_message = "Invalid input"


class InvalidDateRange(InvalidInput):
    default_message = "Invalid date range"


class DurationExceeded(InvalidInput):
    default_message = "Duration exceeded"


class NotFound(ServiceError):
    status_code = 404
    default_message = "Not found"


class StateConflict(ServiceError):
    status_code = 400
    default_message = "Invalid state"


class AlreadyPaused(StateConflict):
    default_message = "Membership is already paused"


class NotPaused(StateConflict):
    default_message = "Membership is not currently paused"


class InvalidState(StateConflict):
    pass


class ConcurrencyConflict(ServiceError):
    status_code = 409
    default_message = "The record was modified by another request, please retry"


class UpstreamFailure(ServiceError):
    status_code = 500
    default_message = "Upstream service failure"


class SignatureError(ServiceError):
    status_code = 400
    default_message = "Webhook signature verification failed"


class AuthenticationFailed(ServiceError):
    status_code = 401
    default_message = "Invalid credentials"


class PermissionDenied(ServiceError):
    status_code = 403
    default_message = "Insufficient permissions"
