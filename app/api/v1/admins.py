"""Administrator account management (super admin, with self-service for owners)."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from app.api.deps import (
    AppSettings,
    AuditIntent,
    CurrentUser,
    admin_id_from_path,
    authenticate,
    log_admin_action,
    require_ownership_or_super_admin,
    require_permission,
    require_role,
)
from app.auth.errors import InsufficientPermissions
from app.auth.policy import Action, permissions_for
from app.auth.roles import Role, has_permission
from app.core.database import get_db
from app.core.errors import ValidationFailed
from app.schemas.auth import (
    AdminCreateRequest,
    AdminListResponse,
    AdminResponse,
    AdminUpdateRequest,
    AdminUserOut,
    PasswordResetRequest,
    PasswordResetResponse,
    PermissionsResponse,
)
from app.services.audit import AdminAction
from app.services.auth_service import ensure_strong_password, generate_strong_password
from app.services.credential_store import (
    AdminNotFound,
    CredentialStore,
    EmailExists,
    UsernameExists,
)

router = APIRouter(dependencies=[Depends(authenticate)])


def get_credential_store(db: Annotated[Session, Depends(get_db)]) -> CredentialStore:
    return CredentialStore(db)


StoreDep = Annotated[CredentialStore, Depends(get_credential_store)]


def _get_or_404(store: CredentialStore, admin_id: int):
    admin = store.get_by_id(admin_id)
    if admin is None:
        raise AdminNotFound()
    return admin


@router.get(
    "",
    response_model=AdminListResponse,
    dependencies=[Depends(require_permission(Action.VIEW_ADMINS))],
)
def list_admins(
    store: StoreDep,
    search: str | None = Query(default=None, max_length=100),
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
) -> AdminListResponse:
    rows, total = store.list_admins(search=search, limit=limit, offset=offset)
    return AdminListResponse(data=[AdminUserOut.model_validate(r) for r in rows], total=total)


@router.post(
    "",
    response_model=AdminResponse,
    status_code=201,
    dependencies=[
        Depends(require_role(Role.SUPER_ADMIN)),
        Depends(log_admin_action(AdminAction.ADMIN_CREATED, "admin")),
    ],
)
def create_admin(body: AdminCreateRequest, store: StoreDep) -> AdminResponse:
    """Create an administrator account. Usernames and emails must be unique."""
    if store.get_by_username(body.username) is not None:
        raise UsernameExists()
    if store.get_by_email(body.email) is not None:
        raise EmailExists()
    ensure_strong_password(body.password)
    admin = store.create(body.username, body.email, body.password, body.role)
    return AdminResponse(
        data=AdminUserOut.model_validate(admin),
        message="Admin user created successfully",
    )


@router.get("/me/permissions", response_model=PermissionsResponse)
def my_permissions(user: CurrentUser, settings: AppSettings) -> PermissionsResponse:
    """Actions the caller's role allows, plus the idle-session settings clients should use."""
    return PermissionsResponse(
        role=user.role,
        permissions=permissions_for(user.role),
        session={
            "timeout_seconds": settings.SESSION_TIMEOUT_SECONDS,
            "warning_seconds": settings.SESSION_WARNING_SECONDS,
            "countdown_seconds": settings.SESSION_COUNTDOWN_SECONDS,
        },
    )


@router.get(
    "/{admin_id}",
    response_model=AdminResponse,
    dependencies=[Depends(require_ownership_or_super_admin(admin_id_from_path))],
)
def get_admin(admin_id: int, store: StoreDep) -> AdminResponse:
    return AdminResponse(data=AdminUserOut.model_validate(_get_or_404(store, admin_id)))


@router.put(
    "/{admin_id}",
    response_model=AdminResponse,
    dependencies=[
        Depends(require_permission(Action.UPDATE_ADMIN, admin_id_from_path)),
        Depends(log_admin_action(AdminAction.ADMIN_UPDATED, "admin", admin_id_from_path)),
    ],
)
def update_admin(
    admin_id: int,
    body: AdminUpdateRequest,
    user: CurrentUser,
    store: StoreDep,
) -> AdminResponse:
    """Update an account. Owners may change their email; role and status need super_admin."""
    changes_access = body.role is not None or body.is_active is not None
    if changes_access and not has_permission(user.role, Role.SUPER_ADMIN):
        raise InsufficientPermissions(
            required=Role.SUPER_ADMIN.value,
            current=Role(user.role).value,
        )
    if admin_id == user.user_id and body.is_active is False:
        raise ValidationFailed("You cannot deactivate your own account")
    admin = _get_or_404(store, admin_id)
    if body.email is not None:
        existing = store.get_by_email(body.email)
        if existing is not None and existing.id != admin.id:
            raise EmailExists()
    admin = store.update(admin, email=body.email, role=body.role, is_active=body.is_active)
    return AdminResponse(data=AdminUserOut.model_validate(admin), message="Admin user updated successfully")


@router.post(
    "/{admin_id}/toggle-status",
    response_model=AdminResponse,
    dependencies=[Depends(require_permission(Action.DEACTIVATE_ADMIN))],
)
def toggle_status(
    admin_id: int,
    request: Request,
    user: CurrentUser,
    store: StoreDep,
) -> AdminResponse:
    """Activate or deactivate an account. Accounts are never deleted."""
    if admin_id == user.user_id:
        raise ValidationFailed("You cannot deactivate your own account")
    admin = _get_or_404(store, admin_id)
    admin = store.update(admin, is_active=not admin.is_active)
    action = AdminAction.ADMIN_ACTIVATED if admin.is_active else AdminAction.ADMIN_DEACTIVATED
    request.state.audit_intent = AuditIntent(action.value, "admin", admin.id)
    status = "activated" if admin.is_active else "deactivated"
    return AdminResponse(data=AdminUserOut.model_validate(admin), message=f"Admin user {status} successfully")


@router.post(
    "/{admin_id}/reset-password",
    response_model=PasswordResetResponse,
    dependencies=[
        Depends(require_permission(Action.RESET_ADMIN_PASSWORD)),
        Depends(log_admin_action(AdminAction.ADMIN_PASSWORD_RESET, "admin", admin_id_from_path)),
    ],
)
def reset_password(admin_id: int, body: PasswordResetRequest, store: StoreDep) -> PasswordResetResponse:
    """Set a new password; without one in the body a strong password is generated and returned once."""
    admin = _get_or_404(store, admin_id)
    generated = None
    if body.password is None:
        password = generated = generate_strong_password()
    else:
        password = body.password
        ensure_strong_password(password)
    store.set_password(admin, password)
    return PasswordResetResponse(message="Password reset successfully", generated_password=generated)
