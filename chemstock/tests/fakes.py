"""
Test doubles for the relational store.
"""

from typing import Dict, List, Optional

from chemstock.schemas.authorization import PermissionRow, RoleRow


class FakeStore:
    """
    In-memory stand-in for store_client.

    roles / permissions map user_id -> list of raw tags. Errors, when set,
    are raised by the corresponding fetch. credentials records the
    (user_id, auth_header) pair of every role lookup.
    """

    def __init__(
        self,
        roles: Optional[Dict[str, List[str]]] = None,
        permissions: Optional[Dict[str, List[str]]] = None,
        role_error: Optional[Exception] = None,
        permission_error: Optional[Exception] = None,
    ):
        self.roles = roles or {}
        self.permissions = permissions or {}
        self.role_error = role_error
        self.permission_error = permission_error
        self.calls = []
        self.credentials = []

    async def fetch_role_rows(self, user_id, auth_header=None):
        self.calls.append(("roles", user_id))
        self.credentials.append((user_id, auth_header))
        if self.role_error is not None:
            raise self.role_error
        return [RoleRow(role=r) for r in self.roles.get(user_id, [])]

    async def fetch_permission_rows(self, user_id, auth_header=None):
        self.calls.append(("permissions", user_id))
        if self.permission_error is not None:
            raise self.permission_error
        return [PermissionRow(permission=p) for p in self.permissions.get(user_id, [])]
