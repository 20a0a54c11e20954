"""Tokens, roles, action policy and the per-request auth guard."""

from app.auth.guard import AuthGuard
from app.auth.policy import Action, can_perform_action, permissions_for
from app.auth.roles import Role, has_permission, rank
from app.auth.tokens import TokenService

__all__ = [
    "Action",
    "AuthGuard",
    "Role",
    "TokenService",
    "can_perform_action",
    "has_permission",
    "permissions_for",
    "rank",
]
