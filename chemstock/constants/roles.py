"""
Role Constants

Defines the ChemStock role tiers used throughout the system for route guards,
action checks and authorization state.

Roles (increasing privilege):
- VIEWER: Read-only access (default when no role is assigned)
- OPERATOR: Stock movements and warehouse transfers
- ANALYST: Laboratory approval workflow
- ADMIN: Full system access, implicitly holds every permission

Usage:
- Resolver: effective role = max(assigned roles) by ROLE_RANK
- Guards: has_role_at_least(state, Role.ANALYST)
- Store rows: parse_role("operator")
"""

from enum import Enum
from typing import Iterable, Optional

from chemstock.core.errors import UnknownRoleError


# ============================================================================
# Role Enum
# ============================================================================

class Role(str, Enum):
    """Closed set of role tiers, valued as stored in `user_roles.role`."""

    VIEWER = "viewer"
    OPERATOR = "operator"
    ANALYST = "analyst"
    ADMIN = "admin"

    @property
    def rank(self) -> int:
        return ROLE_RANK[self]


# Numeric hierarchy (total order)
ROLE_RANK = {
    Role.VIEWER: 1,
    Role.OPERATOR: 2,
    Role.ANALYST: 3,
    Role.ADMIN: 4,
}

# Roles in increasing privilege
ROLES_BY_RANK = tuple(sorted(Role, key=lambda r: ROLE_RANK[r]))

# Safe default for users with no assignment or failed lookups
DEFAULT_ROLE = Role.VIEWER


# ============================================================================
# Helper Functions
# ============================================================================

def is_valid_role(role: Optional[str]) -> bool:
    """
    Check if role is a known role tag (case-insensitive).

    Example:
        >>> is_valid_role("Analyst")
        True
        >>> is_valid_role("superuser")
        False
    """
    if not role or not isinstance(role, str):
        return False
    return role.strip().lower() in {r.value for r in Role}


def parse_role(role) -> Role:
    """
    Convert a role tag to a Role member.

    Args:
        role: Role member or role string (case-insensitive)

    Returns:
        Matching Role

    Raises:
        UnknownRoleError: If the tag is not part of the role vocabulary
    """
    if isinstance(role, Role):
        return role
    if isinstance(role, str) and is_valid_role(role):
        return Role(role.strip().lower())
    raise UnknownRoleError(
        message=f"Unknown role: {role!r}",
        details={"role": str(role), "allowed": [r.value for r in ROLES_BY_RANK]}
    )


def highest_role(roles: Iterable[Role]) -> Role:
    """
    Return the highest-privilege role, or DEFAULT_ROLE for an empty iterable.

    Example:
        >>> highest_role([Role.OPERATOR, Role.ANALYST])
        <Role.ANALYST: 'analyst'>
        >>> highest_role([])
        <Role.VIEWER: 'viewer'>
    """
    return max(roles, key=lambda r: ROLE_RANK[r], default=DEFAULT_ROLE)
