"""
Authorization Predicates

Pure capability checks over a resolved UserAuthorizationState. No I/O.

A None state means "not resolved yet" and always answers False. Tags may
be passed as enum members or their string values; an unknown string is a
programming error at the call site and raises.
"""

from typing import Iterable, Optional

from chemstock.constants.permissions import ALL_PERMISSIONS, parse_permission
from chemstock.constants.roles import ROLE_RANK, Role, parse_role
from chemstock.schemas.authorization import UserAuthorizationState


def has_permission(state: Optional[UserAuthorizationState], permission) -> bool:
    """
    True iff permission is in the effective set.

    Raises:
        UnknownPermissionTagError: permission is not part of the vocabulary
    """
    permission = parse_permission(permission)
    if state is None:
        return False
    return permission in state.permissions


def has_any_permission(state: Optional[UserAuthorizationState], permissions: Iterable) -> bool:
    """True iff at least one of the listed permissions is held (empty list: False)."""
    wanted = [parse_permission(p) for p in permissions]
    if state is None:
        return False
    return any(p in state.permissions for p in wanted)


def has_all_permissions(state: Optional[UserAuthorizationState], permissions: Iterable) -> bool:
    """True iff every listed permission is held (empty list: True once resolved)."""
    wanted = [parse_permission(p) for p in permissions]
    if state is None:
        return False
    return all(p in state.permissions for p in wanted)


def has_role_at_least(state: Optional[UserAuthorizationState], required_role) -> bool:
    """
    True iff rank(state.role) >= rank(required_role).

    Example:
        >>> has_role_at_least(UserAuthorizationState(role=Role.ANALYST), "operator")
        True
    """
    required_role = parse_role(required_role)
    if state is None:
        return False
    return ROLE_RANK[state.role] >= ROLE_RANK[required_role]


# ==================== Canonical States ====================

def viewer_state(degraded: bool = False) -> UserAuthorizationState:
    """Safe default: viewer with no permissions."""
    return UserAuthorizationState(role=Role.VIEWER, permissions=frozenset(), degraded=degraded)


def admin_state() -> UserAuthorizationState:
    return UserAuthorizationState(role=Role.ADMIN, permissions=ALL_PERMISSIONS)


def state_for(role, granted: Iterable = ()) -> UserAuthorizationState:
    """
    Build the effective state for a role and a set of grants, applying the
    admin override.
    """
    role = parse_role(role)
    if role == Role.ADMIN:
        return admin_state()
    return UserAuthorizationState(
        role=role, permissions=frozenset(parse_permission(p) for p in granted)
    )
