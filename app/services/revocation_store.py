"""Persisted deny-list of refresh tokens (revoked on logout and on rotation)."""

import logging
from datetime import UTC, datetime

from sqlalchemy import insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.revoked_token import RevokedRefreshToken

logger = logging.getLogger(__name__)


class SqlRevocationStore:
    """Revocation store backed by the revoked_refresh_tokens table."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def is_revoked(self, jti: str) -> bool:
        return self.db.get(RevokedRefreshToken, jti) is not None

    def revoke(self, jti: str, user_id: int, expires_at: datetime) -> bool:
        """Insert jti; the primary key makes concurrent revocations of one token fail for all but one."""
        stmt = insert(RevokedRefreshToken).values(
            jti=jti, user_id=user_id, expires_at=expires_at, revoked_at=datetime.now(UTC)
        )
        try:
            self.db.execute(stmt)
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            return False
        return True

    def prune_expired(self, now: datetime | None = None) -> int:
        """Delete deny-list rows whose tokens have expired anyway."""
        cutoff = now or datetime.now(UTC)
        deleted = (
            self.db.query(RevokedRefreshToken)
            .filter(RevokedRefreshToken.expires_at < cutoff)
            .delete(synchronize_session=False)
        )
        self.db.commit()
        if deleted > 0:
            logger.info("Pruned expired revoked refresh tokens: count=%s", deleted)
        return deleted
