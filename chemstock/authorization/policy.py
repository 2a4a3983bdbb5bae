"""
Policy - Action and Capability Guards

Structured decisions for user-initiated actions, built on the pure
predicates. check_* functions never raise on a denial; require_* functions
raise ForbiddenError carrying the user-facing "access denied" message.

Rules:
- Actions: minimum role per ACTION_REQUIREMENTS (create_movement, approve_product, ...)
- Capabilities: individual permission tags (admin holds all)
- Unresolved state (None): denied with 401, never elevated
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from chemstock.authorization.predicates import has_permission, has_role_at_least
from chemstock.constants.guards import ACTION_REQUIREMENTS
from chemstock.constants.permissions import parse_permission, permission_label
from chemstock.constants.roles import parse_role
from chemstock.core.errors import ForbiddenError, NotAuthenticatedError, NotFoundError
from chemstock.schemas.authorization import UserAuthorizationState

logger = logging.getLogger(__name__)


@dataclass
class PolicyResult:
    """Policy check result with detailed decision."""
    allowed: bool
    status_code: int  # HTTP status code
    reason: str  # Human-readable reason
    required_role: Optional[str] = None
    required_permission: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)


def _unresolved(subject: str) -> PolicyResult:
    return PolicyResult(
        allowed=False,
        status_code=401,
        reason="Authorization not resolved",
        metadata={"subject": subject, "reason": "unresolved"}
    )


def check_action(
    state: Optional[UserAuthorizationState],
    action: str
) -> Tuple[bool, PolicyResult]:
    """
    Check whether the state may perform a named action.

    Raises:
        NotFoundError: If action is not a known action
    """
    requirement = ACTION_REQUIREMENTS.get(action)
    if requirement is None:
        raise NotFoundError(message=f"Unknown action: {action}", details={"action": action})

    if state is None:
        return False, _unresolved(action)

    if not has_role_at_least(state, requirement.min_role):
        return False, PolicyResult(
            allowed=False,
            status_code=403,
            reason=requirement.denial_message,
            required_role=requirement.min_role.value,
            metadata={"action": action, "role": state.role.value, "reason": "insufficient_role"}
        )

    return True, PolicyResult(
        allowed=True,
        status_code=200,
        reason="Access granted",
        metadata={"action": action, "role": state.role.value}
    )


def check_permission(
    state: Optional[UserAuthorizationState],
    permission
) -> Tuple[bool, PolicyResult]:
    permission = parse_permission(permission)

    if state is None:
        return False, _unresolved(permission.value)

    if not has_permission(state, permission):
        return False, PolicyResult(
            allowed=False,
            status_code=403,
            reason=f"Missing permission: {permission_label(permission)}",
            required_permission=permission.value,
            metadata={"role": state.role.value, "reason": "missing_permission"}
        )

    return True, PolicyResult(allowed=True, status_code=200, reason="Access granted")


def _raise_for(result: PolicyResult) -> None:
    if result.status_code == 401:
        raise NotAuthenticatedError(details=result.metadata)
    logger.info(f"Access denied: {result.reason} ({result.metadata})")
    raise ForbiddenError(
        message=result.reason,
        details={
            k: v for k, v in {
                "required_role": result.required_role,
                "required_permission": result.required_permission,
                **result.metadata,
            }.items() if v is not None
        }
    )


def require_action(state: Optional[UserAuthorizationState], action: str) -> PolicyResult:
    ok, result = check_action(state, action)
    if not ok:
        _raise_for(result)
    return result


def require_permission(state: Optional[UserAuthorizationState], permission) -> PolicyResult:
    ok, result = check_permission(state, permission)
    if not ok:
        _raise_for(result)
    return result


def require_role_at_least(state: Optional[UserAuthorizationState], required_role) -> PolicyResult:
    required_role = parse_role(required_role)

    if state is None:
        _raise_for(_unresolved(required_role.value))

    if not has_role_at_least(state, required_role):
        _raise_for(PolicyResult(
            allowed=False,
            status_code=403,
            reason=f"Requires role {required_role.value} or higher",
            required_role=required_role.value,
            metadata={"role": state.role.value, "reason": "insufficient_role"}
        ))

    return PolicyResult(allowed=True, status_code=200, reason="Access granted")
