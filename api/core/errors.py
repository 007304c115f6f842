"""
Status-classified service failures.

Every service either returns a value or raises one of these. The HTTP layer
maps them to `{status, message, details}` responses (see `api/main.py`).
Failures raised by a lower layer propagate unchanged; only unexpected store
errors are wrapped in `InternalError`.
"""

from __future__ import annotations

from collections.abc import Iterable


class ServiceError(Exception):
    status_code = 500
    default_message = "Internal Server Error"

    def __init__(self, details: Iterable[str] | str | None = None, *, message: str | None = None):
        if details is None:
            details = []
        elif isinstance(details, str):
            details = [details]
        self.message = message or self.default_message
        self.details: list[str] = list(details)
        super().__init__(self.message, self.details)

    def to_dict(self) -> dict:
        return {
            "status": self.status_code,
            "message": self.message,
            "details": list(self.details),
        }


class BadRequestError(ServiceError):
    status_code = 400
    default_message = "Bad Request"


class UnauthorizedError(ServiceError):
    status_code = 401
    default_message = "Invalid Credentials"


class ForbiddenError(ServiceError):
    status_code = 403
    default_message = "Forbidden"


class NotFoundError(ServiceError):
    status_code = 404
    default_message = "Not Found"


class ConflictError(ServiceError):
    status_code = 409
    default_message = "Conflict Error"


class ValidationError(ServiceError):
    status_code = 422
    default_message = "Validation Error"


class InternalError(ServiceError):
    status_code = 500
    default_message = "Internal Server Error"
