"""Login, token refresh, logout and password change flows."""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.auth.errors import AccountDisabled, InvalidCredentials
from app.auth.tokens import TokenService
from app.core.errors import ApiError, ValidationFailed
from app.core.security import check_password_strength, generate_random_password, verify_password
from app.models.admin_user import AdminUser
from app.schemas.auth import TokenPair, TokenPayload
from app.services.audit import AdminAction, AdminActionEvent, AuditDispatcher
from app.services.credential_store import AdminNotFound, CredentialStore
from app.services.revocation_store import SqlRevocationStore

logger = logging.getLogger(__name__)


class InvalidCurrentPassword(ApiError):
    code = "INVALID_CURRENT_PASSWORD"
    status_code = 400
    default_message = "Current password is incorrect"


class WeakPassword(ValidationFailed):
    default_message = "Password is too weak"


def ensure_strong_password(password: str) -> None:
    """Raise WeakPassword with the strength feedback unless password is strong."""
    strength = check_password_strength(password)
    if not strength.is_strong:
        raise WeakPassword(
            f"Password is too weak: {', '.join(strength.feedback)}",
            feedback=strength.feedback,
        )


def generate_strong_password(length: int = 16) -> str:
    """Random password that also passes check_password_strength."""
    while True:
        candidate = generate_random_password(length)
        if check_password_strength(candidate).is_strong:
            return candidate


class AuthService:
    """Per-request service composing the credential store, tokens and audit trail."""

    def __init__(
        self,
        db: Session,
        tokens: TokenService,
        audit: AuditDispatcher | None = None,
    ) -> None:
        self.credentials = CredentialStore(db)
        self.revocations = SqlRevocationStore(db)
        self.tokens = tokens
        self.audit = audit

    def _emit(self, event: AdminActionEvent) -> None:
        if self.audit is not None:
            self.audit.emit(event)

    def login(
        self,
        username: str,
        password: str,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> tuple[AdminUser, TokenPair]:
        """
        Verify credentials and mint a token pair.
        Raises InvalidCredentials for unknown users or wrong passwords and
        AccountDisabled for deactivated accounts.
        """
        user = self.credentials.verify_credentials(username, password)
        if user is None:
            known = self.credentials.get_by_username(username)
            self._emit(
                AdminActionEvent(
                    admin_user_id=known.id if known else 0,
                    admin_username=username,
                    action=AdminAction.LOGIN_FAILED.value,
                    target_type="admin",
                    details={"reason": "Invalid password" if known else "User not found"},
                    ip_address=ip_address,
                    user_agent=user_agent,
                    success=False,
                    error_message="Invalid credentials",
                )
            )
            raise InvalidCredentials()

        if not user.is_active:
            self._emit(
                AdminActionEvent(
                    admin_user_id=user.id,
                    admin_username=user.username,
                    action=AdminAction.LOGIN_FAILED.value,
                    target_type="admin",
                    details={"reason": "Account disabled"},
                    ip_address=ip_address,
                    user_agent=user_agent,
                    success=False,
                    error_message="Account is disabled",
                )
            )
            raise AccountDisabled()

        self.credentials.record_login(user)
        tokens = self.tokens.issue(user)
        self._emit(
            AdminActionEvent(
                admin_user_id=user.id,
                admin_username=user.username,
                action=AdminAction.LOGIN.value,
                target_type="admin",
                target_id=user.id,
                details={"role": user.role},
                ip_address=ip_address,
                user_agent=user_agent,
            )
        )
        logger.info("Admin login: user_id=%s", user.id)
        return user, tokens

    def refresh(self, refresh_token: str) -> TokenPair:
        """Rotate a refresh token; the new access token reflects the current role."""
        return self.tokens.refresh(refresh_token, self.credentials.get_by_id, self.revocations)

    def logout(
        self,
        user: TokenPayload,
        refresh_token: str | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> None:
        """Revoke the refresh token if given. Never fails: logout must always succeed."""
        if refresh_token:
            try:
                self.tokens.revoke(refresh_token, self.revocations)
            except SQLAlchemyError:
                logger.exception("Failed to revoke refresh token on logout: user_id=%s", user.user_id)
        self._emit(
            AdminActionEvent(
                admin_user_id=user.user_id,
                admin_username=user.username,
                action=AdminAction.LOGOUT.value,
                target_type="admin",
                target_id=user.user_id,
                ip_address=ip_address,
                user_agent=user_agent,
            )
        )

    def change_password(self, user_id: int, current_password: str, new_password: str) -> None:
        user = self.credentials.get_by_id(user_id)
        if user is None:
            raise AdminNotFound()
        if not verify_password(current_password, user.password_hash):
            raise InvalidCurrentPassword()
        ensure_strong_password(new_password)
        self.credentials.set_password(user, new_password)
