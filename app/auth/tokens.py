"""
Access and refresh token issuance and verification (PyJWT, HS256).

Access tokens are short-lived and carry the admin's identity and role; the role
in a token is authoritative until it expires. Refresh tokens are long-lived,
signed with a separate secret and identified by a jti so they can be revoked.
Verification is stateless apart from the optional revocation lookup.
"""

import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any, Protocol

import jwt
from pydantic import ValidationError

from app.auth import policy, roles
from app.auth.errors import InvalidRefreshToken, InvalidToken, TokenExpired, UserNotFound
from app.schemas.auth import TokenPair, TokenPayload

if TYPE_CHECKING:
    from app.core.config import Settings
    from app.models.admin_user import AdminUser

logger = logging.getLogger(__name__)

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"

_ACCESS_REQUIRED_CLAIMS = ["exp", "iat", "user_id", "username", "role", "type"]
_REFRESH_REQUIRED_CLAIMS = ["exp", "iat", "sub", "jti", "type"]


class RevocationStore(Protocol):
    """Deny-list of refresh token ids."""

    def is_revoked(self, jti: str) -> bool: ...

    def revoke(self, jti: str, user_id: int, expires_at: datetime) -> bool:
        """Record jti as revoked; return False if it was already revoked."""
        ...


@dataclass(frozen=True)
class RefreshClaims:
    """Verified contents of a refresh token."""

    user_id: int
    jti: str
    expires_at: datetime


class TokenService:
    """Mints and verifies token pairs; constructed once per application."""

    def __init__(
        self,
        settings: "Settings",
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._secret = settings.JWT_SECRET.get_secret_value()
        self._refresh_secret = settings.JWT_REFRESH_SECRET.get_secret_value()
        self._algorithm = settings.JWT_ALGORITHM
        self._issuer = settings.JWT_ISSUER
        self._audience = settings.JWT_AUDIENCE
        self.access_ttl = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
        self.refresh_ttl = timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)
        self.rotate_refresh_tokens = settings.REFRESH_TOKEN_ROTATION
        self._clock = clock or (lambda: datetime.now(UTC))

    def _now(self) -> datetime:
        # JWT timestamps have one-second resolution; truncate so decoded payloads match.
        return self._clock().replace(microsecond=0)

    def issue(self, user: "AdminUser") -> TokenPair:
        """Mint an access token and a refresh token for user."""
        now = self._now()
        access_claims: dict[str, Any] = {
            "user_id": user.id,
            "username": user.username,
            "email": user.email,
            "role": roles.Role(user.role).value,
            "type": ACCESS_TOKEN_TYPE,
            "iat": now,
            "exp": now + self.access_ttl,
            "iss": self._issuer,
            "aud": self._audience,
        }
        refresh_claims: dict[str, Any] = {
            "sub": str(user.id),
            "jti": uuid.uuid4().hex,
            "type": REFRESH_TOKEN_TYPE,
            "iat": now,
            "exp": now + self.refresh_ttl,
            "iss": self._issuer,
            "aud": self._audience,
        }
        return TokenPair(
            access_token=jwt.encode(access_claims, self._secret, algorithm=self._algorithm),
            refresh_token=jwt.encode(
                refresh_claims, self._refresh_secret, algorithm=self._algorithm
            ),
            expires_in=int(self.access_ttl.total_seconds()),
        )

    def _decode(self, token: str, secret: str, required: list[str]) -> dict[str, Any]:
        return jwt.decode(
            token,
            secret,
            algorithms=[self._algorithm],
            audience=self._audience,
            issuer=self._issuer,
            options={"require": required},
        )

    def verify_access_token(self, token: str) -> TokenPayload:
        """
        Decode and validate an access token.
        Raises TokenExpired for a well-signed token past its expiry and
        InvalidToken for anything malformed, tampered or of the wrong type.
        """
        try:
            claims = self._decode(token, self._secret, _ACCESS_REQUIRED_CLAIMS)
        except jwt.ExpiredSignatureError as e:
            raise TokenExpired("Access token expired") from e
        except jwt.PyJWTError as e:
            raise InvalidToken("Invalid access token") from e
        if claims.get("type") != ACCESS_TOKEN_TYPE:
            raise InvalidToken("Invalid access token")
        try:
            return TokenPayload(
                user_id=claims["user_id"],
                username=claims["username"],
                email=claims.get("email") or "",
                role=claims["role"],
                issued_at=datetime.fromtimestamp(claims["iat"], UTC),
                expires_at=datetime.fromtimestamp(claims["exp"], UTC),
            )
        except (KeyError, TypeError, ValueError, ValidationError) as e:
            raise InvalidToken("Invalid access token") from e

    def verify_refresh_token(self, token: str) -> RefreshClaims:
        """Decode a refresh token. Expired, malformed or wrong-type tokens raise InvalidRefreshToken."""
        try:
            claims = self._decode(token, self._refresh_secret, _REFRESH_REQUIRED_CLAIMS)
        except jwt.ExpiredSignatureError as e:
            raise InvalidRefreshToken("Refresh token expired") from e
        except jwt.PyJWTError as e:
            raise InvalidRefreshToken() from e
        if claims.get("type") != REFRESH_TOKEN_TYPE:
            raise InvalidRefreshToken()
        try:
            return RefreshClaims(
                user_id=int(claims["sub"]),
                jti=str(claims["jti"]),
                expires_at=datetime.fromtimestamp(claims["exp"], UTC),
            )
        except (TypeError, ValueError) as e:
            raise InvalidRefreshToken() from e

    def refresh(
        self,
        refresh_token: str,
        load_user: Callable[[int], "AdminUser | None"],
        revocations: RevocationStore | None = None,
    ) -> TokenPair:
        """
        Exchange a refresh token for a new pair built from the current user row.

        With a revocation store, revoked tokens are refused and, when rotation is
        enabled, the presented token is revoked before the new pair is minted.
        """
        claims = self.verify_refresh_token(refresh_token)
        if revocations is not None and revocations.is_revoked(claims.jti):
            raise InvalidRefreshToken("Refresh token has been revoked")

        user = load_user(claims.user_id)
        if user is None or not user.is_active:
            raise UserNotFound()

        if revocations is not None and self.rotate_refresh_tokens:
            if not revocations.revoke(claims.jti, claims.user_id, claims.expires_at):
                # Lost a race with another refresh of the same token.
                raise InvalidRefreshToken("Refresh token has been revoked")
        return self.issue(user)

    def revoke(self, refresh_token: str, revocations: RevocationStore) -> bool:
        """Revoke a refresh token; invalid or already-revoked tokens return False."""
        try:
            claims = self.verify_refresh_token(refresh_token)
        except InvalidToken:
            logger.info("Ignoring revocation of an invalid refresh token")
            return False
        return revocations.revoke(claims.jti, claims.user_id, claims.expires_at)

    @staticmethod
    def has_permission(current_role: "roles.Role | str | None", required_role: "roles.Role | str") -> bool:
        return roles.has_permission(current_role, required_role)

    @staticmethod
    def can_perform_action(
        role: "roles.Role | str | None",
        action: "policy.Action | str",
        target_user_id: int | None = None,
        acting_user_id: int | None = None,
    ) -> bool:
        return policy.can_perform_action(role, action, target_user_id, acting_user_id)
