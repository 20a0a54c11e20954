"""SQLAlchemy ORM models."""

from app.models.admin_log import AdminLog
from app.models.admin_user import AdminUser
from app.models.base import Base
from app.models.revoked_token import RevokedRefreshToken

__all__ = ["AdminLog", "AdminUser", "Base", "RevokedRefreshToken"]
