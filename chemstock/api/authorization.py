"""
Authorization API Endpoints

Caller-facing authorization reads and checks.

Endpoints:
- GET /authorization/me - Resolved role and permissions of the caller
- POST /authorization/check - Permission / minimum-role check
- POST /authorization/actions/{action} - Guard for a user-initiated action
- GET /authorization/vocabulary - Roles, permissions and display groups
"""

import logging

from fastapi import APIRouter, HTTPException, Request, status

from chemstock.api.dependencies import enforce, get_caller, get_trace_id, standard_response
from chemstock.authorization.policy import require_action
from chemstock.authorization.predicates import (
    has_all_permissions,
    has_any_permission,
    has_role_at_least,
)
from chemstock.constants.guards import is_valid_action
from chemstock.constants.permissions import PERMISSION_GROUPS
from chemstock.constants.roles import ROLES_BY_RANK
from chemstock.schemas.authorization import (
    AuthorizationResponse,
    PermissionCheckRequest,
    PermissionCheckResponse,
    VocabularyResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/me", response_model=AuthorizationResponse)
async def get_my_authorization(request: Request):
    """
    Resolve the caller's effective role and permission set.

    `degraded` is true when the store lookup failed and the safe default
    (viewer, no permissions) was returned.
    """
    user_id, state = await get_caller(request)
    return AuthorizationResponse.from_state(user_id, state)


@router.post("/check", response_model=PermissionCheckResponse)
async def check_authorization(body: PermissionCheckRequest, request: Request):
    """
    Evaluate a capability check for the caller.

    - mode "any": at least one listed permission
    - mode "all": every listed permission
    - min_role: additionally require this role or higher
    """
    _, state = await get_caller(request)

    allowed = True
    if body.permissions:
        if body.mode == "all":
            allowed = has_all_permissions(state, body.permissions)
        else:
            allowed = has_any_permission(state, body.permissions)

    if body.min_role is not None:
        allowed = allowed and has_role_at_least(state, body.min_role)

    return PermissionCheckResponse(allowed=allowed, role=state.role)


@router.post("/actions/{action}")
async def authorize_action(action: str, request: Request):
    """
    Guard a user-initiated action (e.g. approve_product).

    Returns 403 with the action's "access denied" message when the caller's
    role is below the action's minimum.
    """
    trace_id = get_trace_id(request)

    if not is_valid_action(action):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown action: {action}"
        )

    user_id, state = await get_caller(request)
    enforce(require_action, state, action)

    return standard_response(
        message=f"Action '{action}' allowed",
        data={"action": action, "allowed": True},
        trace_id=trace_id,
        user_id=user_id,
        state=state,
    )


@router.get("/vocabulary", response_model=VocabularyResponse)
async def get_vocabulary():
    """Role tiers in rank order and permission tags grouped for display."""
    return VocabularyResponse(roles=list(ROLES_BY_RANK), groups=PERMISSION_GROUPS)
