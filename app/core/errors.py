"""API error base class and the non-auth errors raised by services."""

from typing import Any


class ApiError(Exception):
    """
    Error rendered as {"error": {"message": ..., "code": ..., **context}}.

    Subclasses set code, status_code and default_message; raise sites may
    override the message and add context fields.
    """

    code = "INTERNAL_ERROR"
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None, **context: Any) -> None:
        self.message = message or self.default_message
        self.context = context
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        return {"error": {"message": self.message, "code": self.code, **self.context}}


class ValidationFailed(ApiError):
    code = "VALIDATION_ERROR"
    status_code = 400
    default_message = "Validation failed"


class NotFound(ApiError):
    code = "NOT_FOUND"
    status_code = 404
    default_message = "Resource not found"


class Conflict(ApiError):
    code = "CONFLICT"
    status_code = 409
    default_message = "Resource already exists"
