"""
Action-level authorization policy.

Every action maps to the minimum role allowed to perform it on someone else's
resource. Anything not listed is denied, including unknown roles and actions.
An actor may perform any known action on their own account (ownership override).
"""

from enum import Enum

from app.auth.roles import Role, has_permission, parse_role


class Action(str, Enum):
    """Actions checked by the policy."""

    # Hotspot users
    CREATE_USER = "create_user"
    UPDATE_USER = "update_user"
    DELETE_USER = "delete_user"
    VIEW_USERS = "view_users"
    # Vouchers and reports
    CREATE_VOUCHER = "create_voucher"
    VIEW_VOUCHERS = "view_vouchers"
    VIEW_REPORTS = "view_reports"
    GENERATE_REPORT = "generate_report"
    # Administrator accounts
    CREATE_ADMIN = "create_admin"
    UPDATE_ADMIN = "update_admin"
    DEACTIVATE_ADMIN = "deactivate_admin"
    VIEW_ADMINS = "view_admins"
    VIEW_ADMIN = "view_admin"
    RESET_ADMIN_PASSWORD = "reset_admin_password"
    CHANGE_PASSWORD = "change_password"
    VIEW_ADMIN_LOGS = "view_admin_logs"
    MANAGE_SYSTEM_SETTINGS = "manage_system_settings"


MINIMUM_ROLE: dict[Action, Role] = {
    Action.CREATE_USER: Role.ADMIN,
    Action.UPDATE_USER: Role.ADMIN,
    Action.DELETE_USER: Role.ADMIN,
    Action.VIEW_USERS: Role.ADMIN,
    Action.CREATE_VOUCHER: Role.ADMIN,
    Action.VIEW_VOUCHERS: Role.ADMIN,
    Action.VIEW_REPORTS: Role.ADMIN,
    Action.GENERATE_REPORT: Role.ADMIN,
    Action.CREATE_ADMIN: Role.SUPER_ADMIN,
    Action.UPDATE_ADMIN: Role.SUPER_ADMIN,
    Action.DEACTIVATE_ADMIN: Role.SUPER_ADMIN,
    Action.VIEW_ADMINS: Role.SUPER_ADMIN,
    Action.VIEW_ADMIN: Role.SUPER_ADMIN,
    Action.RESET_ADMIN_PASSWORD: Role.SUPER_ADMIN,
    Action.CHANGE_PASSWORD: Role.SUPER_ADMIN,
    Action.VIEW_ADMIN_LOGS: Role.SUPER_ADMIN,
    Action.MANAGE_SYSTEM_SETTINGS: Role.SUPER_ADMIN,
}


def parse_action(value: "Action | str") -> Action | None:
    if isinstance(value, Action):
        return value
    try:
        return Action(value)
    except ValueError:
        return None


def can_perform_action(
    role: "Role | str | None",
    action: "Action | str",
    target_user_id: int | None = None,
    acting_user_id: int | None = None,
) -> bool:
    """Decide whether role may perform action, optionally on target_user_id."""
    parsed_role = parse_role(role)
    parsed_action = parse_action(action)
    if parsed_role is None or parsed_action is None:
        return False

    if target_user_id is not None and target_user_id == acting_user_id:
        return True

    required = MINIMUM_ROLE.get(parsed_action)
    if required is None:
        return False
    return has_permission(parsed_role, required)


def permissions_for(role: "Role | str | None") -> list[str]:
    """Sorted action names the role may perform on other accounts."""
    return sorted(a.value for a in Action if can_perform_action(role, a))
