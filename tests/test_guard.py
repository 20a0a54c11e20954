"""Unit tests for app.auth.guard: header parsing and the second-stage authorization checks."""

import unittest
from datetime import UTC, datetime, timedelta
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

from app.auth.errors import (
    ActionNotPermitted,
    AuthFailed,
    AuthRequired,
    InsufficientPermissions,
    InvalidToken,
    MissingAuthHeader,
    MissingToken,
    OwnershipRequired,
    TokenExpired,
)
from app.auth.guard import AuthGuard
from app.auth.policy import Action
from app.auth.roles import ROLE_RANK, Role
from app.auth.tokens import TokenService
from app.core.config import get_settings
from app.schemas.auth import TokenPayload


def _payload(user_id: int = 3, role: Role = Role.ADMIN) -> TokenPayload:
    now = datetime.now(UTC)
    return TokenPayload(
        user_id=user_id,
        username=f"user_{user_id}",
        email=f"user_{user_id}@example.com",
        role=role,
        issued_at=now,
        expires_at=now + timedelta(minutes=15),
    )


class TestAuthenticate(unittest.TestCase):
    def setUp(self) -> None:
        self.tokens = TokenService(get_settings())
        self.guard = AuthGuard(self.tokens)
        user = SimpleNamespace(id=3, username="ops_user", email="ops@example.com", role="admin")
        self.access_token = self.tokens.issue(user).access_token

    def test_missing_header(self) -> None:
        for value in (None, "", "   "):
            with self.subTest(value=value):
                with self.assertRaises(MissingAuthHeader) as ctx:
                    self.guard.authenticate(value)
                self.assertEqual(ctx.exception.code, "MISSING_AUTH_HEADER")
                self.assertEqual(ctx.exception.status_code, 401)

    def test_scheme_without_token(self) -> None:
        with self.assertRaises(MissingToken) as ctx:
            self.guard.authenticate("Bearer")
        self.assertEqual(ctx.exception.code, "MISSING_TOKEN")

    def test_wrong_scheme(self) -> None:
        with self.assertRaises(InvalidToken):
            self.guard.authenticate(f"Basic {self.access_token}")

    def test_valid_token_case_insensitive_scheme(self) -> None:
        payload = self.guard.authenticate(f"bearer {self.access_token}")
        self.assertEqual(payload.user_id, 3)
        self.assertEqual(payload.role, Role.ADMIN)

    def test_expired_token_passes_through(self) -> None:
        tokens = MagicMock()
        tokens.verify_access_token.side_effect = TokenExpired()
        with self.assertRaises(TokenExpired):
            AuthGuard(tokens).authenticate("Bearer abc")

    def test_unexpected_error_becomes_auth_failed(self) -> None:
        tokens = MagicMock()
        tokens.verify_access_token.side_effect = RuntimeError("boom")
        with self.assertRaises(AuthFailed) as ctx:
            AuthGuard(tokens).authenticate("Bearer abc")
        self.assertEqual(ctx.exception.code, "AUTH_FAILED")

    def test_optional_never_raises(self) -> None:
        self.assertIsNone(self.guard.optional(None))
        self.assertIsNone(self.guard.optional("Bearer"))
        self.assertIsNone(self.guard.optional("Bearer nope"))
        self.assertEqual(self.guard.optional(f"Bearer {self.access_token}").user_id, 3)


class TestAuthorizationChecks(unittest.TestCase):
    def setUp(self) -> None:
        self.guard = AuthGuard(TokenService(get_settings()))

    def test_checks_require_authentication(self) -> None:
        with self.assertRaises(AuthRequired):
            self.guard.require_role(None, Role.ADMIN)
        with self.assertRaises(AuthRequired):
            self.guard.require_permission(None, Action.VIEW_REPORTS)
        with self.assertRaises(AuthRequired):
            self.guard.require_ownership_or_super_admin(None, 1)

    def test_require_role_reports_required_and_current(self) -> None:
        with self.assertRaises(InsufficientPermissions) as ctx:
            self.guard.require_role(_payload(role=Role.ADMIN), Role.SUPER_ADMIN)
        err = ctx.exception
        self.assertEqual(err.status_code, 403)
        self.assertEqual(
            err.to_dict(),
            {
                "error": {
                    "message": "Insufficient permissions",
                    "code": "INSUFFICIENT_PERMISSIONS",
                    "required": "super_admin",
                    "current": "admin",
                }
            },
        )

    def test_require_role_allows_higher_rank(self) -> None:
        user = _payload(role=Role.SUPER_ADMIN)
        self.assertIs(self.guard.require_role(user, Role.ADMIN), user)

    def test_require_permission_reports_action_and_role(self) -> None:
        with self.assertRaises(ActionNotPermitted) as ctx:
            self.guard.require_permission(_payload(), Action.CREATE_ADMIN)
        self.assertEqual(ctx.exception.context, {"action": "create_admin", "userRole": "admin"})

    def test_require_permission_ownership_override(self) -> None:
        user = _payload(user_id=3)
        self.assertIs(self.guard.require_permission(user, Action.UPDATE_ADMIN, 3), user)
        with self.assertRaises(ActionNotPermitted):
            self.guard.require_permission(user, Action.UPDATE_ADMIN, 4)

    def test_require_ownership_or_super_admin(self) -> None:
        self.guard.require_ownership_or_super_admin(_payload(user_id=3), 3)
        self.guard.require_ownership_or_super_admin(_payload(user_id=1, role=Role.SUPER_ADMIN), 3)
        with self.assertRaises(OwnershipRequired) as ctx:
            self.guard.require_ownership_or_super_admin(_payload(user_id=3), 4)
        self.assertEqual(ctx.exception.code, "OWNERSHIP_REQUIRED")

    def test_ownership_check_follows_rank_table(self) -> None:
        # A role ranked above super_admin passes without an exact role match.
        with patch.dict(ROLE_RANK, {Role.ADMIN: 3}):
            user = _payload(user_id=3, role=Role.ADMIN)
            self.assertIs(self.guard.require_ownership_or_super_admin(user, 4), user)
        with self.assertRaises(OwnershipRequired):
            self.guard.require_ownership_or_super_admin(_payload(user_id=3, role=Role.ADMIN), 4)
