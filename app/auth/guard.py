"""
Per-request authentication and authorization checks.

AuthGuard is built once by the application factory around a TokenService and
stored on app.state; app.api.deps adapts its methods to FastAPI dependencies.
Authentication turns an Authorization header into a TokenPayload. The
authorization checks run only on an already-authenticated payload and raise
AuthRequired when there is none.
"""

import logging

from app.auth.errors import (
    ActionNotPermitted,
    AuthError,
    AuthFailed,
    AuthRequired,
    InsufficientPermissions,
    InvalidToken,
    MissingAuthHeader,
    MissingToken,
    OwnershipRequired,
)
from app.auth.policy import Action
from app.auth.roles import Role, has_permission
from app.auth.tokens import TokenService
from app.schemas.auth import TokenPayload

logger = logging.getLogger(__name__)

BEARER_SCHEME = "bearer"


class AuthGuard:
    def __init__(self, tokens: TokenService) -> None:
        self.tokens = tokens

    def authenticate(self, authorization: str | None) -> TokenPayload:
        """
        Verify an "Authorization: Bearer <token>" header value.

        Raises MissingAuthHeader, MissingToken, TokenExpired, InvalidToken, or
        AuthFailed for any unexpected verification error.
        """
        if authorization is None or not authorization.strip():
            raise MissingAuthHeader()
        parts = authorization.split()
        if len(parts) < 2:
            raise MissingToken()
        scheme, token = parts[0], parts[1]
        if scheme.lower() != BEARER_SCHEME:
            raise InvalidToken("Unsupported authorization scheme")
        try:
            return self.tokens.verify_access_token(token)
        except AuthError:
            raise
        except Exception as e:
            logger.exception("Unexpected error verifying access token")
            raise AuthFailed() from e

    def optional(self, authorization: str | None) -> TokenPayload | None:
        """Like authenticate, but any failure yields None (anonymous request)."""
        if authorization is None:
            return None
        try:
            return self.authenticate(authorization)
        except Exception:
            logger.debug("Optional auth failed; continuing anonymously", exc_info=True)
            return None

    @staticmethod
    def _authenticated(user: TokenPayload | None) -> TokenPayload:
        if user is None:
            raise AuthRequired()
        return user

    def require_role(self, user: TokenPayload | None, required: Role) -> TokenPayload:
        user = self._authenticated(user)
        if not has_permission(user.role, required):
            raise InsufficientPermissions(
                required=Role(required).value,
                current=Role(user.role).value,
            )
        return user

    def require_permission(
        self,
        user: TokenPayload | None,
        action: Action,
        target_user_id: int | None = None,
    ) -> TokenPayload:
        user = self._authenticated(user)
        if not self.tokens.can_perform_action(user.role, action, target_user_id, user.user_id):
            raise ActionNotPermitted(
                action=Action(action).value,
                userRole=Role(user.role).value,
            )
        return user

    def require_ownership_or_super_admin(
        self, user: TokenPayload | None, target_user_id: int
    ) -> TokenPayload:
        user = self._authenticated(user)
        if not has_permission(user.role, Role.SUPER_ADMIN) and user.user_id != target_user_id:
            raise OwnershipRequired()
        return user
