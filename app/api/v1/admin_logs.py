"""Read access to the admin action audit trail."""

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.deps import authenticate, require_permission
from app.auth.policy import Action
from app.core.database import get_db
from app.schemas.admin_logs import AdminLogListResponse, AdminLogOut
from app.services.admin_log_store import AdminLogFilters, AdminLogStore

router = APIRouter(
    dependencies=[
        Depends(authenticate),
        Depends(require_permission(Action.VIEW_ADMIN_LOGS)),
    ]
)


@router.get("", response_model=AdminLogListResponse)
def list_admin_logs(
    db: Annotated[Session, Depends(get_db)],
    admin_user_id: int | None = Query(default=None, ge=0),
    action: str | None = Query(default=None, max_length=100),
    target_type: str | None = Query(default=None, max_length=50),
    success: bool | None = None,
    date_from: datetime | None = None,
    date_to: datetime | None = None,
    limit: int = Query(default=50, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
) -> AdminLogListResponse:
    """Newest entries first; filter by admin, action, target type, outcome or time window."""
    filters = AdminLogFilters(
        admin_user_id=admin_user_id,
        action=action,
        target_type=target_type,
        success=success,
        date_from=date_from,
        date_to=date_to,
    )
    rows, total = AdminLogStore(db).find(filters, limit=limit, offset=offset)
    return AdminLogListResponse(
        data=[AdminLogOut.model_validate(r) for r in rows],
        total=total,
        limit=limit,
        offset=offset,
    )
