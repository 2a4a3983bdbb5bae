"""
Authorization Resolver

Computes a user's effective role and permission set from the relational store.

Resolution order:
1. Role rows -> highest role by rank (viewer when none)
2. ADMIN -> full vocabulary, permission rows are never read
3. Otherwise -> exactly the individually granted permission rows

Failure semantics:
- Missing user id raises NotAuthenticatedError before any store access
- Any lookup failure degrades to viewer with no permissions (degraded=True)
  and is logged at ERROR; an empty role set is logged at DEBUG only
- Tags outside the vocabulary are dropped with a warning
- No retries; the store client's timeout is the only bound
"""

import logging
from typing import List, Optional, Set, Tuple

from chemstock.constants.permissions import Permission, parse_permission
from chemstock.constants.roles import DEFAULT_ROLE, Role, highest_role, parse_role
from chemstock.core.errors import (
    LookupFailureError,
    NotAuthenticatedError,
    UnknownPermissionTagError,
    UnknownRoleError,
)
from chemstock.authorization.predicates import admin_state, viewer_state
from chemstock.schemas.authorization import UserAuthorizationState

logger = logging.getLogger(__name__)


class AuthorizationResolver:
    """
    Resolves {role, permissions} for a user id.

    Args:
        store: Object exposing async fetch_role_rows(user_id, auth_header) and
            fetch_permission_rows(user_id, auth_header). Defaults to the
            chemstock.tools.store_client module.
    """

    def __init__(self, store=None):
        if store is None:
            from chemstock.tools import store_client
            store = store_client
        self.store = store

    # ==================== Role ====================

    async def resolve_role(self, user_id: Optional[str], auth_header: Optional[str] = None) -> Role:
        """
        Effective role for user_id.

        Raises:
            NotAuthenticatedError: If user_id is missing
        """
        role, _ = await self._resolve_role(user_id, auth_header)
        return role

    async def _resolve_role(
        self,
        user_id: Optional[str],
        auth_header: Optional[str]
    ) -> Tuple[Role, Optional[LookupFailureError]]:
        _require_user_id(user_id)

        try:
            rows = await self.store.fetch_role_rows(user_id, auth_header=auth_header)
        except Exception as e:
            failure = _as_lookup_failure(e, "user_roles")
            logger.error(
                f"Role lookup failure for user {user_id}; defaulting to {DEFAULT_ROLE.value}: "
                f"{failure.message} {failure.details}"
            )
            return DEFAULT_ROLE, failure

        roles = []
        for row in rows:
            try:
                roles.append(parse_role(row.role))
            except UnknownRoleError as e:
                logger.warning(f"Dropping role row for user {user_id}: {e.message}")

        if not roles:
            logger.debug(f"No role assigned to user {user_id}; using {DEFAULT_ROLE.value}")

        return highest_role(roles), None

    # ==================== Permissions ====================

    async def resolve_permissions(
        self,
        user_id: Optional[str],
        auth_header: Optional[str] = None
    ) -> UserAuthorizationState:
        """
        Effective authorization state for user_id.

        Never raises on store errors (degrades to viewer, no permissions).

        Raises:
            NotAuthenticatedError: If user_id is missing
        """
        role, failure = await self._resolve_role(user_id, auth_header)
        if failure is not None:
            return viewer_state(degraded=True)

        if role == Role.ADMIN:
            return admin_state()

        try:
            rows = await self.store.fetch_permission_rows(user_id, auth_header=auth_header)
        except Exception as e:
            failure = _as_lookup_failure(e, "user_permissions")
            logger.error(
                f"Permission lookup failure for user {user_id}; degrading to viewer: "
                f"{failure.message} {failure.details}"
            )
            return viewer_state(degraded=True)

        granted = _valid_permissions([row.permission for row in rows], user_id)
        return UserAuthorizationState(role=role, permissions=frozenset(granted))


# ==================== Helpers ====================

def _require_user_id(user_id: Optional[str]) -> None:
    if user_id is None or not str(user_id).strip():
        raise NotAuthenticatedError(details={"reason": "No user identity"})


def _as_lookup_failure(error: Exception, table: str) -> LookupFailureError:
    if isinstance(error, LookupFailureError):
        return error
    return LookupFailureError(details={"table": table, "reason": type(error).__name__})


def _valid_permissions(tags: List[str], user_id: str) -> Set[Permission]:
    granted = set()
    for tag in tags:
        try:
            granted.add(parse_permission(tag))
        except UnknownPermissionTagError as e:
            logger.warning(
                f"Data integrity: dropping permission for user {user_id}: {e.message}"
            )
    return granted
