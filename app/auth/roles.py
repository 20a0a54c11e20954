"""Administrator roles and their ranking."""

from enum import Enum


class Role(str, Enum):
    """Administrator roles, lowest privilege first."""

    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"


# Linear hierarchy: a higher rank includes every lower rank's privileges.
# A new intermediate role only needs a Role member and an entry here.
ROLE_RANK: dict[Role, int] = {
    Role.ADMIN: 1,
    Role.SUPER_ADMIN: 2,
}


def parse_role(value: "Role | str | None") -> Role | None:
    """Return the Role for value, or None for unknown or missing roles."""
    if isinstance(value, Role):
        return value
    try:
        return Role(value)
    except ValueError:
        return None


def rank(role: "Role | str | None") -> int:
    """Numeric rank of a role; unknown roles rank 0 and satisfy no requirement."""
    parsed = parse_role(role)
    if parsed is None:
        return 0
    return ROLE_RANK[parsed]


def has_permission(current_role: "Role | str | None", required_role: "Role | str") -> bool:
    """True iff current_role ranks at least as high as required_role."""
    required = rank(required_role)
    if required == 0:
        return False
    return rank(current_role) >= required
