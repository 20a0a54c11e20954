"""Response schemas for the admin audit log endpoint."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class AdminLogOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    admin_user_id: int
    admin_username: str
    action: str
    target_type: str | None = None
    target_id: str | None = None
    details: str
    ip_address: str
    user_agent: str | None = None
    success: bool
    error_message: str | None = None
    timestamp: datetime


class AdminLogListResponse(BaseModel):
    success: bool = True
    data: list[AdminLogOut]
    total: int
    limit: int
    offset: int
