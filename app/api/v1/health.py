"""Health check: database connectivity, audit consumer state and caller identity."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from app.api.deps import AppSettings, get_audit, optional_auth
from app.core.database import check_db_connected, get_db
from app.schemas.auth import TokenPayload
from app.schemas.health import HealthResponse

router = APIRouter()


@router.get("", response_model=HealthResponse)
def get_health(
    request: Request,
    settings: AppSettings,
    db: Annotated[Session, Depends(get_db)],
    user: Annotated[TokenPayload | None, Depends(optional_auth)],
) -> HealthResponse:
    """
    Return service health. Anonymous callers are allowed; a valid bearer token
    additionally reports who the caller is, an invalid one is ignored.
    """
    return HealthResponse(
        environment=settings.APP_ENV,
        database="connected" if check_db_connected(db) else "disconnected",
        audit="running" if get_audit(request).running else "stopped",
        authenticated=user is not None,
        role=user.role.value if user else None,
    )
