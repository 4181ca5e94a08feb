"""
Centralized error handling for service/API failures.
Services raise the domain errors below; routes stay thin and the app-level handler
renders them as {"detail", "code"} JSON.
"""
from __future__ import annotations

from sqlalchemy.exc import NoResultFound

# ---------------------------------------------------------------------------
# Constants: status codes and user-facing messages
# ---------------------------------------------------------------------------

STATUS_BAD_REQUEST = 400
STATUS_UNAUTHORIZED = 401
STATUS_FORBIDDEN = 403
STATUS_NOT_FOUND = 404
STATUS_CONFLICT = 409
STATUS_INTERNAL_ERROR = 500
STATUS_BAD_GATEWAY = 502  # SMS provider rejected or unreachable

MSG_UNEXPECTED = "Internal server error"
MSG_SLOT_UNAVAILABLE = "This time slot is already booked for the selected staff member"


class AppError(Exception):
    """Base for errors that map to a specific HTTP status and machine-readable code."""

    status_code = STATUS_INTERNAL_ERROR
    code = "unexpected"

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail or self.__class__.__doc__ or self.code
        super().__init__(self.detail)


class ValidationFailed(AppError):
    """Request is missing or has malformed fields."""

    status_code = STATUS_BAD_REQUEST
    code = "validation_failed"


class Unauthorized(AppError):
    """Authentication required."""

    status_code = STATUS_UNAUTHORIZED
    code = "unauthorized"


class Forbidden(AppError):
    """Not allowed to access this resource."""

    status_code = STATUS_FORBIDDEN
    code = "forbidden"


class NotFoundError(AppError):
    """Resource not found."""

    status_code = STATUS_NOT_FOUND
    code = "not_found"


class ConflictError(AppError):
    """Resource already exists."""

    status_code = STATUS_CONFLICT
    code = "conflict"


class SlotUnavailableError(ConflictError):
    code = "slot_unavailable"

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(detail or MSG_SLOT_UNAVAILABLE)


class SmsDeliveryError(AppError):
    """SMS could not be sent."""

    status_code = STATUS_BAD_GATEWAY
    code = "sms_failed"


# ---------------------------------------------------------------------------
# Error rules: (exception type, status_code, code, message) for errors raised outside our
# services. First match wins. Add new rules here instead of scattering checks in routes.
# ---------------------------------------------------------------------------

EXTERNAL_ERROR_RULES: list[tuple[type[Exception], int, str, str]] = [
    (NoResultFound, STATUS_NOT_FOUND, NotFoundError.code, "Resource not found"),
]


def error_payload(exc: Exception) -> tuple[int, dict[str, str]]:
    """Status code and JSON body for an exception. Unknown errors never leak their message."""
    if isinstance(exc, AppError):
        return exc.status_code, {"detail": exc.detail, "code": exc.code}
    for exc_type, status_code, code, message in EXTERNAL_ERROR_RULES:
        if isinstance(exc, exc_type):
            return status_code, {"detail": message, "code": code}
    return STATUS_INTERNAL_ERROR, {"detail": MSG_UNEXPECTED, "code": "unexpected"}
