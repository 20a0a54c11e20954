"""Login, token refresh, logout and current-admin endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from app.api.deps import (
    CurrentUser,
    authenticate,
    get_auth_service,
    log_admin_action,
)
from app.core.security import check_password_strength
from app.schemas.auth import (
    AdminResponse,
    AdminUserOut,
    ChangePasswordRequest,
    LoginData,
    LoginRequest,
    LoginResponse,
    LogoutRequest,
    MessageResponse,
    PasswordStrengthRequest,
    PasswordStrengthResponse,
    RefreshRequest,
    TokensResponse,
)
from app.services.audit import AdminAction
from app.services.auth_service import AuthService
from app.services.credential_store import AdminNotFound

router = APIRouter()

AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]


def _client_info(request: Request) -> tuple[str, str | None]:
    ip_address = request.client.host if request.client else "unknown"
    return ip_address, request.headers.get("User-Agent")


@router.post("/login", response_model=LoginResponse)
def login(body: LoginRequest, request: Request, service: AuthServiceDep) -> LoginResponse:
    """
    Authenticate with username and password; returns an access/refresh token pair.
    Include the access token in the Authorization header as: Bearer <access_token>
    """
    ip_address, user_agent = _client_info(request)
    user, tokens = service.login(body.username, body.password, ip_address, user_agent)
    return LoginResponse(data=LoginData(user=AdminUserOut.model_validate(user), tokens=tokens))


@router.post("/refresh", response_model=TokensResponse)
def refresh(body: RefreshRequest, service: AuthServiceDep) -> TokensResponse:
    """Exchange a refresh token for a new pair. The presented refresh token is rotated out."""
    return TokensResponse(data=service.refresh(body.refresh_token))


@router.post("/logout", response_model=MessageResponse)
def logout(
    request: Request,
    user: CurrentUser,
    service: AuthServiceDep,
    body: LogoutRequest | None = None,
) -> MessageResponse:
    """Revoke the given refresh token (if any). The client discards its tokens."""
    ip_address, user_agent = _client_info(request)
    service.logout(user, body.refresh_token if body else None, ip_address, user_agent)
    return MessageResponse(message="Logged out successfully")


@router.get("/me", response_model=AdminResponse)
def me(user: CurrentUser, service: AuthServiceDep) -> AdminResponse:
    admin = service.credentials.get_by_id(user.user_id)
    if admin is None:
        raise AdminNotFound()
    return AdminResponse(
        data=AdminUserOut.model_validate(admin),
        message="User information retrieved successfully",
    )


@router.post(
    "/change-password",
    response_model=MessageResponse,
    dependencies=[
        Depends(authenticate),
        Depends(log_admin_action(AdminAction.PASSWORD_CHANGED, "admin")),
    ],
)
def change_password(
    body: ChangePasswordRequest,
    user: CurrentUser,
    service: AuthServiceDep,
) -> MessageResponse:
    service.change_password(user.user_id, body.current_password, body.new_password)
    return MessageResponse(message="Password changed successfully")


@router.post("/check-password-strength", response_model=PasswordStrengthResponse)
def check_strength(body: PasswordStrengthRequest) -> PasswordStrengthResponse:
    strength = check_password_strength(body.password)
    return PasswordStrengthResponse(
        is_strong=strength.is_strong,
        score=strength.score,
        feedback=strength.feedback,
    )
