"""Data retention: prune expired refresh-token revocations and, optionally, old admin logs."""

import logging
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

from app.models import AdminLog
from app.services.revocation_store import SqlRevocationStore

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)


def run_retention(
    session: Session,
    settings: "Settings",
    now: datetime | None = None,
) -> tuple[int, int]:
    """
    Delete revoked_refresh_tokens rows whose tokens have expired, and admin_logs
    older than ADMIN_LOG_RETENTION_DAYS (skipped when 0).

    Returns (revocations_pruned, logs_deleted). Idempotent: safe to run repeatedly.
    """
    now = now or datetime.now(UTC)
    revocations_pruned = SqlRevocationStore(session).prune_expired(now)

    logs_deleted = 0
    if settings.ADMIN_LOG_RETENTION_DAYS > 0:
        cutoff = now - timedelta(days=settings.ADMIN_LOG_RETENTION_DAYS)
        logs_deleted = (
            session.query(AdminLog)
            .filter(AdminLog.timestamp < cutoff)
            .delete(synchronize_session=False)
        )
        session.commit()
        if logs_deleted > 0:
            logger.info(
                "Retention run: cutoff=%s, admin_logs_deleted=%s",
                cutoff.isoformat(),
                logs_deleted,
            )
    return (revocations_pruned, logs_deleted)
