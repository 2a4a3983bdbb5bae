"""
Authorization Package

Resolution of effective role/permissions and the checks built on them.

Modules:
- resolver: AuthorizationResolver (store -> UserAuthorizationState)
- predicates: has_permission, has_any_permission, has_role_at_least
- policy: action/capability guards raising ForbiddenError on denial
- context: AuthorizationContext, per-session single-writer state
- identity: IdentitySession login/logout notifications
"""

from chemstock.authorization.predicates import (
    has_permission,
    has_any_permission,
    has_all_permissions,
    has_role_at_least,
    viewer_state,
    admin_state,
    state_for,
)
from chemstock.authorization.resolver import AuthorizationResolver
from chemstock.authorization.policy import (
    PolicyResult,
    check_action,
    check_permission,
    require_action,
    require_permission,
    require_role_at_least,
)
from chemstock.authorization.identity import IdentitySession
from chemstock.authorization.context import AuthorizationContext

__all__ = [
    "has_permission",
    "has_any_permission",
    "has_all_permissions",
    "has_role_at_least",
    "viewer_state",
    "admin_state",
    "state_for",
    "AuthorizationResolver",
    "PolicyResult",
    "check_action",
    "check_permission",
    "require_action",
    "require_permission",
    "require_role_at_least",
    "IdentitySession",
    "AuthorizationContext",
]
