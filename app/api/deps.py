"""
FastAPI dependencies for authentication, authorization and audit intents.

Protected routes list authenticate first, then any authorization checks, e.g.

    @router.post(
        "",
        dependencies=[
            Depends(authenticate),
            Depends(require_role(Role.SUPER_ADMIN)),
            Depends(log_admin_action(AdminAction.ADMIN_CREATED, "admin")),
        ],
    )

Dependencies run in declaration order, so the checks see request.state.user.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from app.auth.guard import AuthGuard
from app.auth.policy import Action
from app.auth.roles import Role
from app.auth.tokens import TokenService
from app.core.config import Settings
from app.core.database import get_db
from app.core.errors import ValidationFailed
from app.schemas.auth import TokenPayload
from app.services.audit import AdminAction, AuditDispatcher
from app.services.auth_service import AuthService

TargetResolver = Callable[[Request], int | None]


@dataclass(frozen=True)
class AuditIntent:
    """Audit entry to emit once the response has completed with a 2xx status."""

    action: str
    target_type: str | None = None
    target_id: int | str | None = None


def get_app_settings(request: Request) -> Settings:
    """Settings the application was built with (see create_app)."""
    return request.app.state.settings


def get_auth_guard(request: Request) -> AuthGuard:
    return request.app.state.auth_guard


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def get_audit(request: Request) -> AuditDispatcher:
    return request.app.state.audit


def get_auth_service(
    request: Request,
    db: Annotated[Session, Depends(get_db)],
) -> AuthService:
    return AuthService(db, get_token_service(request), get_audit(request))


def authenticate(request: Request) -> TokenPayload:
    """Require a valid bearer access token; attaches the payload to request.state.user."""
    user = get_auth_guard(request).authenticate(request.headers.get("Authorization"))
    request.state.user = user
    return user


def optional_auth(request: Request) -> TokenPayload | None:
    """Attach the payload when a valid token is present; never rejects."""
    user = get_auth_guard(request).optional(request.headers.get("Authorization"))
    request.state.user = user
    return user


def _state_user(request: Request) -> TokenPayload | None:
    return getattr(request.state, "user", None)


def admin_id_from_path(request: Request) -> int:
    raw = request.path_params.get("admin_id")
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise ValidationFailed("admin_id must be an integer", field="admin_id")


def require_role(required: Role) -> Callable[[Request], TokenPayload]:
    def dependency(request: Request) -> TokenPayload:
        return get_auth_guard(request).require_role(_state_user(request), required)

    return dependency


def require_permission(
    action: Action,
    get_target_user_id: TargetResolver | None = None,
) -> Callable[[Request], TokenPayload]:
    def dependency(request: Request) -> TokenPayload:
        user = _state_user(request)
        target = get_target_user_id(request) if get_target_user_id and user else None
        return get_auth_guard(request).require_permission(user, action, target)

    return dependency


def require_ownership_or_super_admin(
    get_user_id: Callable[[Request], int] = admin_id_from_path,
) -> Callable[[Request], TokenPayload]:
    def dependency(request: Request) -> TokenPayload:
        user = _state_user(request)
        target = get_user_id(request) if user else 0
        return get_auth_guard(request).require_ownership_or_super_admin(user, target)

    return dependency


def log_admin_action(
    action: AdminAction | str,
    target_type: str | None = None,
    get_target_id: TargetResolver | None = None,
) -> Callable[[Request], None]:
    """Record an audit intent; AuditMiddleware emits it after a successful response."""
    action_name = action.value if isinstance(action, AdminAction) else action

    def dependency(request: Request) -> None:
        target_id = get_target_id(request) if get_target_id else None
        request.state.audit_intent = AuditIntent(action_name, target_type, target_id)

    return dependency


CurrentUser = Annotated[TokenPayload, Depends(authenticate)]
AppSettings = Annotated[Settings, Depends(get_app_settings)]
