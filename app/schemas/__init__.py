"""Pydantic request/response schemas."""

from app.schemas.admin_logs import AdminLogListResponse, AdminLogOut
from app.schemas.auth import (
    AdminCreateRequest,
    AdminUpdateRequest,
    AdminUserOut,
    LoginRequest,
    TokenPair,
    TokenPayload,
)
from app.schemas.health import HealthResponse

__all__ = [
    "AdminCreateRequest",
    "AdminLogListResponse",
    "AdminLogOut",
    "AdminUpdateRequest",
    "AdminUserOut",
    "HealthResponse",
    "LoginRequest",
    "TokenPair",
    "TokenPayload",
]
