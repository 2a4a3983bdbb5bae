"""
Admin API Endpoints

Role and permission administration for user management.

Endpoints:
- GET /admin/users/{user_id}/authorization - Target user's resolved state (manage_users)
- GET /admin/users/{user_id}/roles - Target user's raw role rows (manage_users)
- GET /admin/roles - Role assignments across users, optional ?role= filter (manage_users)
- POST /admin/users/{user_id}/roles - Assign a role (ADMIN role)
- DELETE /admin/users/{user_id}/roles/{role} - Remove a role (ADMIN role)
- PUT /admin/users/{user_id}/permissions/{permission} - Grant (manage_users)
- DELETE /admin/users/{user_id}/permissions/{permission} - Revoke (manage_users)

Role changes require the ADMIN role itself so that a manage_users grant
cannot be used to escalate to admin. Changes are not pushed: the affected
user's session must re-fetch its authorization.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Request

from chemstock.api.dependencies import (
    enforce,
    get_auth_header,
    get_caller,
    get_resolver,
    get_trace_id,
    standard_response,
)
from chemstock.authorization.policy import require_permission, require_role_at_least
from chemstock.constants.constants import short_request_id
from chemstock.constants.permissions import Permission, permission_label
from chemstock.constants.roles import Role
from chemstock.core.config import settings
from chemstock.core.errors import AppError, to_http_exception
from chemstock.schemas.authorization import AuthorizationResponse, RoleChangeRequest
from chemstock.tools import store_client

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/users/{user_id}/authorization")
async def get_user_authorization(user_id: str, request: Request):
    """
    Resolve another user's effective authorization.

    **Requires**: manage_users
    """
    trace_id = get_trace_id(request)
    caller_id, caller_state = await get_caller(request)
    enforce(require_permission, caller_state, Permission.MANAGE_USERS)

    state = await get_resolver().resolve_permissions(
        user_id, auth_header=get_auth_header(request)
    )

    return standard_response(
        message=f"User {user_id} resolves to role {state.role.value}",
        data=AuthorizationResponse.from_state(user_id, state).model_dump(mode="json"),
        trace_id=trace_id,
        user_id=caller_id,
        state=caller_state,
        sources=[settings.USER_ROLES_TABLE, settings.USER_PERMISSIONS_TABLE],
    )


@router.get("/users/{user_id}/roles")
async def get_user_role_rows(user_id: str, request: Request):
    """
    Raw role assignment rows of a user, as stored (unknown values included).

    **Requires**: manage_users
    """
    trace_id = get_trace_id(request)
    caller_id, caller_state = await get_caller(request)
    enforce(require_permission, caller_state, Permission.MANAGE_USERS)

    try:
        rows = await store_client.fetch_role_rows(user_id, auth_header=get_auth_header(request))
    except AppError as e:
        logger.error(f"[{short_request_id(trace_id)}] Failed to read roles of {user_id}: {e.message}")
        raise to_http_exception(e)

    return standard_response(
        message=f"{len(rows)} role assignment(s) for user {user_id}",
        data={"user_id": user_id, "roles": [row.role for row in rows]},
        trace_id=trace_id,
        user_id=caller_id,
        state=caller_state,
        sources=[settings.USER_ROLES_TABLE],
    )


@router.get("/roles")
async def get_role_assignments(request: Request, role: Optional[Role] = None):
    """
    Role assignments across users, grouped by user.

    **Requires**: manage_users

    Query params:
    - role: Only users holding this role
    """
    trace_id = get_trace_id(request)
    caller_id, caller_state = await get_caller(request)
    enforce(require_permission, caller_state, Permission.MANAGE_USERS)

    try:
        rows = await store_client.list_role_assignments(
            role, auth_header=get_auth_header(request)
        )
    except AppError as e:
        logger.error(f"[{short_request_id(trace_id)}] Failed to list role assignments: {e.message}")
        raise to_http_exception(e)

    users = {}
    for row in rows:
        users.setdefault(row.user_id, []).append(row.role)

    return standard_response(
        message=f"{len(users)} user(s) with role assignments",
        data={
            "role": role.value if role else None,
            "users": [{"user_id": uid, "roles": roles} for uid, roles in users.items()],
        },
        trace_id=trace_id,
        user_id=caller_id,
        state=caller_state,
        sources=[settings.USER_ROLES_TABLE],
    )


@router.post("/users/{user_id}/roles")
async def add_role(user_id: str, body: RoleChangeRequest, request: Request):
    """
    Assign a role to a user.

    **Requires**: ADMIN role
    """
    trace_id = get_trace_id(request)
    caller_id, caller_state = await get_caller(request)
    enforce(require_role_at_least, caller_state, Role.ADMIN)

    try:
        await store_client.add_user_role(user_id, body.role, auth_header=get_auth_header(request))
    except AppError as e:
        logger.error(f"[{short_request_id(trace_id)}] Failed to add role {body.role.value} to {user_id}: {e.message}")
        raise to_http_exception(e)

    return standard_response(
        message=f"Role {body.role.value} added",
        data={"user_id": user_id, "role": body.role.value, "action": "add"},
        trace_id=trace_id,
        user_id=caller_id,
        state=caller_state,
        sources=[settings.USER_ROLES_TABLE],
    )


@router.delete("/users/{user_id}/roles/{role}")
async def remove_role(user_id: str, role: Role, request: Request):
    """
    Remove a role from a user.

    **Requires**: ADMIN role
    """
    trace_id = get_trace_id(request)
    caller_id, caller_state = await get_caller(request)
    enforce(require_role_at_least, caller_state, Role.ADMIN)

    try:
        await store_client.remove_user_role(user_id, role, auth_header=get_auth_header(request))
    except AppError as e:
        logger.error(f"[{short_request_id(trace_id)}] Failed to remove role {role.value} from {user_id}: {e.message}")
        raise to_http_exception(e)

    return standard_response(
        message=f"Role {role.value} removed",
        data={"user_id": user_id, "role": role.value, "action": "remove"},
        trace_id=trace_id,
        user_id=caller_id,
        state=caller_state,
        sources=[settings.USER_ROLES_TABLE],
    )


@router.put("/users/{user_id}/permissions/{permission}")
async def grant_user_permission(user_id: str, permission: Permission, request: Request):
    """
    Grant an individual permission.

    **Requires**: manage_users
    """
    trace_id = get_trace_id(request)
    caller_id, caller_state = await get_caller(request)
    enforce(require_permission, caller_state, Permission.MANAGE_USERS)

    try:
        await store_client.grant_permission(
            user_id,
            permission,
            granted_by=caller_id,
            auth_header=get_auth_header(request),
        )
    except AppError as e:
        logger.error(f"[{short_request_id(trace_id)}] Failed to grant {permission.value} to {user_id}: {e.message}")
        raise to_http_exception(e)

    return standard_response(
        message=f'Permission "{permission_label(permission)}" granted',
        data={"user_id": user_id, "permission": permission.value, "action": "grant"},
        trace_id=trace_id,
        user_id=caller_id,
        state=caller_state,
        sources=[settings.USER_PERMISSIONS_TABLE],
    )


@router.delete("/users/{user_id}/permissions/{permission}")
async def revoke_user_permission(user_id: str, permission: Permission, request: Request):
    """
    Revoke an individual permission.

    **Requires**: manage_users
    """
    trace_id = get_trace_id(request)
    caller_id, caller_state = await get_caller(request)
    enforce(require_permission, caller_state, Permission.MANAGE_USERS)

    try:
        await store_client.revoke_permission(
            user_id, permission, auth_header=get_auth_header(request)
        )
    except AppError as e:
        logger.error(f"[{short_request_id(trace_id)}] Failed to revoke {permission.value} from {user_id}: {e.message}")
        raise to_http_exception(e)

    return standard_response(
        message=f'Permission "{permission_label(permission)}" revoked',
        data={"user_id": user_id, "permission": permission.value, "action": "revoke"},
        trace_id=trace_id,
        user_id=caller_id,
        state=caller_state,
        sources=[settings.USER_PERMISSIONS_TABLE],
    )
