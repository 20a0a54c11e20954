"""Unit tests for app.auth.tokens: issuance, verification, refresh rotation and revocation."""

import unittest
from datetime import UTC, datetime, timedelta
from types import SimpleNamespace

import jwt

from app.auth.errors import InvalidRefreshToken, InvalidToken, TokenExpired, UserNotFound
from app.auth.roles import Role
from app.auth.tokens import TokenService
from app.core.config import get_settings


def _user(user_id: int = 7, role: str = "admin", is_active: bool = True) -> SimpleNamespace:
    return SimpleNamespace(
        id=user_id,
        username=f"user_{user_id}",
        email=f"user_{user_id}@example.com",
        role=role,
        is_active=is_active,
    )


class MemoryRevocations:
    def __init__(self) -> None:
        self.revoked: dict[str, int] = {}

    def is_revoked(self, jti: str) -> bool:
        return jti in self.revoked

    def revoke(self, jti: str, user_id: int, expires_at: datetime) -> bool:
        if jti in self.revoked:
            return False
        self.revoked[jti] = user_id
        return True


class TestIssueAndVerify(unittest.TestCase):
    def setUp(self) -> None:
        self.settings = get_settings()
        self.now = datetime.now(UTC)
        self.service = TokenService(self.settings, clock=lambda: self.now)

    def test_access_token_round_trip(self) -> None:
        user = _user(role="super_admin")
        pair = self.service.issue(user)
        payload = self.service.verify_access_token(pair.access_token)
        self.assertEqual(payload.user_id, 7)
        self.assertEqual(payload.username, "user_7")
        self.assertEqual(payload.email, "user_7@example.com")
        self.assertEqual(payload.role, Role.SUPER_ADMIN)
        self.assertEqual(payload.issued_at, self.now.replace(microsecond=0))
        self.assertEqual(payload.expires_at - payload.issued_at, timedelta(minutes=15))
        self.assertEqual(pair.token_type, "bearer")
        self.assertEqual(pair.expires_in, 15 * 60)

    def test_claims_carry_issuer_and_audience(self) -> None:
        pair = self.service.issue(_user())
        claims = jwt.decode(pair.access_token, options={"verify_signature": False})
        self.assertEqual(claims["iss"], self.settings.JWT_ISSUER)
        self.assertEqual(claims["aud"], self.settings.JWT_AUDIENCE)
        self.assertEqual(claims["type"], "access")

    def test_refresh_token_has_unique_jti(self) -> None:
        a = self.service.verify_refresh_token(self.service.issue(_user()).refresh_token)
        b = self.service.verify_refresh_token(self.service.issue(_user()).refresh_token)
        self.assertNotEqual(a.jti, b.jti)
        self.assertEqual(a.user_id, 7)

    def test_expired_access_token(self) -> None:
        past = TokenService(self.settings, clock=lambda: self.now - timedelta(days=1))
        pair = past.issue(_user())
        with self.assertRaises(TokenExpired) as ctx:
            self.service.verify_access_token(pair.access_token)
        self.assertEqual(ctx.exception.code, "TOKEN_EXPIRED")
        self.assertEqual(ctx.exception.status_code, 401)

    def test_token_signed_with_other_secret_is_invalid(self) -> None:
        claims = {
            "user_id": 1,
            "username": "x_user",
            "role": "super_admin",
            "type": "access",
            "iat": self.now,
            "exp": self.now + timedelta(minutes=5),
            "iss": self.settings.JWT_ISSUER,
            "aud": self.settings.JWT_AUDIENCE,
        }
        forged = jwt.encode(claims, "not-the-secret", algorithm="HS256")
        with self.assertRaises(InvalidToken) as ctx:
            self.service.verify_access_token(forged)
        self.assertEqual(ctx.exception.code, "INVALID_TOKEN")

    def test_truncated_and_garbage_tokens_are_invalid(self) -> None:
        pair = self.service.issue(_user())
        for token in (pair.access_token[:-10], "not.a.jwt", "garbage"):
            with self.subTest(token=token[:12]):
                with self.assertRaises(InvalidToken):
                    self.service.verify_access_token(token)

    def test_refresh_token_is_not_an_access_token(self) -> None:
        pair = self.service.issue(_user())
        with self.assertRaises(InvalidToken):
            self.service.verify_access_token(pair.refresh_token)
        with self.assertRaises(InvalidRefreshToken):
            self.service.verify_refresh_token(pair.access_token)

    def test_unknown_role_in_token_is_invalid(self) -> None:
        claims = {
            "user_id": 1,
            "username": "x_user",
            "role": "root",
            "type": "access",
            "iat": self.now,
            "exp": self.now + timedelta(minutes=5),
            "iss": self.settings.JWT_ISSUER,
            "aud": self.settings.JWT_AUDIENCE,
        }
        token = jwt.encode(claims, self.settings.JWT_SECRET.get_secret_value(), algorithm="HS256")
        with self.assertRaises(InvalidToken):
            self.service.verify_access_token(token)


class TestRefresh(unittest.TestCase):
    def setUp(self) -> None:
        self.service = TokenService(get_settings())
        self.users = {7: _user()}

    def test_refresh_reflects_current_role(self) -> None:
        pair = self.service.issue(self.users[7])
        self.users[7].role = "super_admin"
        new_pair = self.service.refresh(pair.refresh_token, self.users.get)
        payload = self.service.verify_access_token(new_pair.access_token)
        self.assertEqual(payload.role, Role.SUPER_ADMIN)

    def test_refresh_rejects_missing_or_inactive_user(self) -> None:
        pair = self.service.issue(self.users[7])
        self.users[7].is_active = False
        with self.assertRaises(UserNotFound) as ctx:
            self.service.refresh(pair.refresh_token, self.users.get)
        self.assertEqual(ctx.exception.code, "USER_NOT_FOUND")
        with self.assertRaises(UserNotFound):
            self.service.refresh(pair.refresh_token, lambda _id: None)

    def test_rotation_makes_refresh_tokens_single_use(self) -> None:
        revocations = MemoryRevocations()
        pair = self.service.issue(self.users[7])
        self.service.refresh(pair.refresh_token, self.users.get, revocations)
        with self.assertRaises(InvalidRefreshToken) as ctx:
            self.service.refresh(pair.refresh_token, self.users.get, revocations)
        self.assertEqual(ctx.exception.code, "INVALID_REFRESH_TOKEN")

    def test_lost_revocation_race_is_rejected(self) -> None:
        revocations = MemoryRevocations()
        pair = self.service.issue(self.users[7])
        claims = self.service.verify_refresh_token(pair.refresh_token)
        # Another request revoked the token between the check and the rotation.
        revocations.is_revoked = lambda jti: False
        revocations.revoked[claims.jti] = 7
        with self.assertRaises(InvalidRefreshToken):
            self.service.refresh(pair.refresh_token, self.users.get, revocations)

    def test_without_rotation_tokens_are_reusable(self) -> None:
        settings = get_settings().model_copy(update={"REFRESH_TOKEN_ROTATION": False})
        service = TokenService(settings)
        revocations = MemoryRevocations()
        pair = service.issue(self.users[7])
        service.refresh(pair.refresh_token, self.users.get, revocations)
        service.refresh(pair.refresh_token, self.users.get, revocations)
        self.assertEqual(revocations.revoked, {})

    def test_revoked_token_cannot_refresh(self) -> None:
        revocations = MemoryRevocations()
        pair = self.service.issue(self.users[7])
        self.assertTrue(self.service.revoke(pair.refresh_token, revocations))
        self.assertFalse(self.service.revoke(pair.refresh_token, revocations))
        with self.assertRaises(InvalidRefreshToken):
            self.service.refresh(pair.refresh_token, self.users.get, revocations)

    def test_revoke_ignores_invalid_tokens(self) -> None:
        revocations = MemoryRevocations()
        self.assertFalse(self.service.revoke("garbage", revocations))
        self.assertEqual(revocations.revoked, {})
