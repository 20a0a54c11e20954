"""
Authentication and authorization errors.

Each error carries a stable machine-readable code, the HTTP status it maps to,
a human-readable message and optional context fields. The API renders them as
{"error": {"message": ..., "code": ..., **context}}.
"""

from app.core.errors import ApiError


class AuthError(ApiError):
    """Base class for authentication (401) and authorization (403) failures."""

    code = "AUTH_FAILED"
    status_code = 401
    default_message = "Authentication failed"


# 401: authentication


class MissingAuthHeader(AuthError):
    code = "MISSING_AUTH_HEADER"
    default_message = "Authorization header missing"


class MissingToken(AuthError):
    code = "MISSING_TOKEN"
    default_message = "Token missing from authorization header"


class InvalidToken(AuthError):
    code = "INVALID_TOKEN"
    default_message = "Invalid token"


class InvalidRefreshToken(InvalidToken):
    code = "INVALID_REFRESH_TOKEN"
    default_message = "Invalid or expired refresh token"


class TokenExpired(AuthError):
    code = "TOKEN_EXPIRED"
    default_message = "Token expired"


class AuthFailed(AuthError):
    code = "AUTH_FAILED"
    default_message = "Authentication failed"


class AuthRequired(AuthError):
    code = "AUTH_REQUIRED"
    default_message = "Authentication required"


class InvalidCredentials(AuthError):
    code = "INVALID_CREDENTIALS"
    default_message = "Invalid username or password"


class UserNotFound(InvalidToken):
    code = "USER_NOT_FOUND"
    default_message = "User not found or inactive"


# 403: authorization


class InsufficientPermissions(AuthError):
    code = "INSUFFICIENT_PERMISSIONS"
    status_code = 403
    default_message = "Insufficient permissions"


class ActionNotPermitted(AuthError):
    code = "ACTION_NOT_PERMITTED"
    status_code = 403
    default_message = "Action not permitted"


class OwnershipRequired(AuthError):
    code = "OWNERSHIP_REQUIRED"
    status_code = 403
    default_message = "Can only access own resources"


class AccountDisabled(AuthError):
    code = "ACCOUNT_DISABLED"
    status_code = 403
    default_message = "Account is disabled"
