"""Credential store: admin accounts, password hashes and role assignments."""

from datetime import UTC, datetime

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from app.auth.roles import Role
from app.core.errors import Conflict, NotFound
from app.core.security import hash_password, verify_password
from app.models.admin_user import AdminUser

# Timing equalization: compared against when the username does not exist so
# response time does not reveal which usernames are valid.
_DUMMY_HASH = hash_password("hotspot_timing_dummy")


class AdminNotFound(NotFound):
    code = "USER_NOT_FOUND"
    default_message = "User not found"


class UsernameExists(Conflict):
    code = "USERNAME_EXISTS"
    default_message = "Username already exists"


class EmailExists(Conflict):
    code = "EMAIL_EXISTS"
    default_message = "Email already exists"


class CredentialStore:
    """Data access for admin_users. Rows are never deleted, only deactivated."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def get_by_id(self, user_id: int) -> AdminUser | None:
        return self.db.get(AdminUser, user_id)

    def get_by_username(self, username: str) -> AdminUser | None:
        return self.db.query(AdminUser).filter(AdminUser.username == username).first()

    def get_by_email(self, email: str) -> AdminUser | None:
        return (
            self.db.query(AdminUser)
            .filter(func.lower(AdminUser.email) == email.lower())
            .first()
        )

    def list_admins(self, search: str | None = None, limit: int = 50, offset: int = 0) -> tuple[list[AdminUser], int]:
        """Return one page of admins ordered by id, and the total matching count."""
        query = self.db.query(AdminUser)
        if search:
            pattern = f"%{search}%"
            query = query.filter(
                or_(AdminUser.username.ilike(pattern), AdminUser.email.ilike(pattern))
            )
        total = query.count()
        rows = query.order_by(AdminUser.id).offset(offset).limit(limit).all()
        return rows, total

    def create(self, username: str, email: str, password: str, role: Role = Role.ADMIN) -> AdminUser:
        user = AdminUser(
            username=username,
            email=email,
            password_hash=hash_password(password),
            role=Role(role).value,
            is_active=True,
        )
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        return user

    def verify_credentials(self, username: str, password: str) -> AdminUser | None:
        """
        Return the admin whose password matches, regardless of is_active.
        Always runs bcrypt, even for unknown usernames.
        """
        user = self.get_by_username(username)
        if user is None:
            verify_password(password, _DUMMY_HASH)
            return None
        if not verify_password(password, user.password_hash):
            return None
        return user

    def record_login(self, user: AdminUser) -> None:
        user.last_login = datetime.now(UTC)
        self.db.commit()

    def update(
        self,
        user: AdminUser,
        email: str | None = None,
        role: Role | None = None,
        is_active: bool | None = None,
    ) -> AdminUser:
        if email is not None:
            user.email = email
        if role is not None:
            user.role = Role(role).value
        if is_active is not None:
            user.is_active = is_active
        self.db.commit()
        self.db.refresh(user)
        return user

    def set_password(self, user: AdminUser, password: str) -> None:
        user.password_hash = hash_password(password)
        self.db.commit()
