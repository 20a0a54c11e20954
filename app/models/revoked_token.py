"""ORM model for revoked refresh tokens (deny-list keyed by jti)."""

from sqlalchemy import Column, DateTime, Integer, String, func

from app.models.base import Base


class RevokedRefreshToken(Base):
    """A refresh token that may no longer be exchanged; rows can be pruned after expires_at."""

    __tablename__ = "revoked_refresh_tokens"

    jti = Column(String(64), primary_key=True)
    user_id = Column(Integer, nullable=False, index=True)
    expires_at = Column(DateTime(timezone=True), nullable=False, index=True)
    revoked_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
