"""Persistence and queries for the admin_logs audit table."""

import json
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.orm import Session

from app.models.admin_log import AdminLog
from app.services.audit import AdminActionEvent


@dataclass
class AdminLogFilters:
    admin_user_id: int | None = None
    action: str | None = None
    target_type: str | None = None
    success: bool | None = None
    date_from: datetime | None = None
    date_to: datetime | None = None


class AdminLogStore:
    """Append-only writer and paginated reader for admin_logs."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def append(self, event: AdminActionEvent) -> AdminLog:
        row = AdminLog(
            admin_user_id=event.admin_user_id,
            admin_username=event.admin_username,
            action=event.action,
            target_type=event.target_type,
            target_id=None if event.target_id is None else str(event.target_id),
            details=json.dumps(event.details or {}, default=str),
            ip_address=event.ip_address or "unknown",
            user_agent=event.user_agent,
            success=event.success,
            error_message=event.error_message,
            timestamp=event.timestamp,
        )
        self.db.add(row)
        self.db.commit()
        return row

    def find(
        self,
        filters: AdminLogFilters | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[AdminLog], int]:
        """Newest first, with the total count of matching rows."""
        f = filters or AdminLogFilters()
        query = self.db.query(AdminLog)
        if f.admin_user_id is not None:
            query = query.filter(AdminLog.admin_user_id == f.admin_user_id)
        if f.action:
            query = query.filter(AdminLog.action == f.action)
        if f.target_type:
            query = query.filter(AdminLog.target_type == f.target_type)
        if f.success is not None:
            query = query.filter(AdminLog.success == f.success)
        if f.date_from is not None:
            query = query.filter(AdminLog.timestamp >= f.date_from)
        if f.date_to is not None:
            query = query.filter(AdminLog.timestamp <= f.date_to)
        total = query.count()
        rows = (
            query.order_by(AdminLog.timestamp.desc(), AdminLog.id.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )
        return rows, total
