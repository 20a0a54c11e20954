"""Request/response schemas for auth and admin account endpoints."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from app.auth.roles import Role
from app.core.security import (
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
    USERNAME_MAX_LEN,
    USERNAME_MIN_LEN,
    USERNAME_PATTERN,
)


class TokenPayload(BaseModel):
    """Decoded access token; immutable once issued."""

    model_config = ConfigDict(frozen=True)

    user_id: int
    username: str
    email: str
    role: Role
    issued_at: datetime
    expires_at: datetime


class TokenPair(BaseModel):
    """Access and refresh tokens returned at login and refresh."""

    access_token: str = Field(..., description="JWT access token")
    refresh_token: str = Field(..., description="JWT refresh token")
    token_type: str = Field(default="bearer", description="Token type")
    expires_in: int = Field(..., description="Access token lifetime in seconds")


class LoginRequest(BaseModel):
    """Credentials for login."""

    username: str = Field(
        ...,
        min_length=USERNAME_MIN_LEN,
        max_length=USERNAME_MAX_LEN,
        pattern=USERNAME_PATTERN,
        description="Username",
    )
    password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_LEN, description="Password")


class RefreshRequest(BaseModel):
    refresh_token: str = Field(..., min_length=1, description="Refresh token from login")


class LogoutRequest(BaseModel):
    refresh_token: str | None = Field(default=None, description="Refresh token to revoke")


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_LEN)
    new_password: str = Field(..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN)


class PasswordStrengthRequest(BaseModel):
    password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_LEN)


class PasswordStrengthResponse(BaseModel):
    is_strong: bool
    score: int
    feedback: list[str]


class AdminUserOut(BaseModel):
    """Administrator account as returned by the API (no password hash)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str
    role: Role
    is_active: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None
    last_login: datetime | None = None


class AdminCreateRequest(BaseModel):
    username: str = Field(
        ...,
        min_length=USERNAME_MIN_LEN,
        max_length=USERNAME_MAX_LEN,
        pattern=USERNAME_PATTERN,
    )
    email: EmailStr
    password: str = Field(..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN)
    role: Role = Role.ADMIN


class AdminUpdateRequest(BaseModel):
    """Partial update; role and is_active are reserved for super admins."""

    email: EmailStr | None = None
    role: Role | None = None
    is_active: bool | None = None


class PasswordResetRequest(BaseModel):
    """Omit password to have the server generate one."""

    password: str | None = Field(default=None, min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN)


class LoginData(BaseModel):
    user: AdminUserOut
    tokens: TokenPair


class LoginResponse(BaseModel):
    success: bool = True
    data: LoginData
    message: str = "Login successful"


class TokensResponse(BaseModel):
    success: bool = True
    data: TokenPair
    message: str = "Token refreshed successfully"


class AdminResponse(BaseModel):
    success: bool = True
    data: AdminUserOut
    message: str = ""


class AdminListResponse(BaseModel):
    success: bool = True
    data: list[AdminUserOut]
    total: int


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class PasswordResetResponse(MessageResponse):
    generated_password: str | None = None


class PermissionsResponse(BaseModel):
    role: Role
    permissions: list[str]
    session: dict[str, Any] = Field(
        default_factory=dict,
        description="Idle-session watchdog settings for clients",
    )
