"""ORM model for administrator accounts (auth and RBAC)."""

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Integer, String, func

from app.models.base import Base


class AdminUser(Base):
    """
    Administrator account for JWT authentication and role-based access control.

    role: 'admin' or 'super_admin'. Accounts are never deleted, only deactivated.
    """

    __tablename__ = "admin_users"
    __table_args__ = (CheckConstraint("role IN ('admin', 'super_admin')", name="ck_admin_users_role"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(50), nullable=False, unique=True, index=True)
    email = Column(String(100), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default="admin")
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
    last_login = Column(DateTime(timezone=True), nullable=True)
