"""
Authorization Schemas

Pydantic models for the effective authorization state, raw store rows and
the authorization API payloads.
"""

from enum import Enum
from typing import Dict, FrozenSet, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from chemstock.constants.permissions import ALL_PERMISSIONS, Permission
from chemstock.constants.roles import Role


# ==================== Effective State ====================

class UserAuthorizationState(BaseModel):
    """
    Resolved {role, permissions} snapshot used for all authorization checks.

    Invariant (enforced by the resolver): role == ADMIN implies
    permissions == ALL_PERMISSIONS; otherwise permissions is exactly the
    individually granted set.

    `degraded` is set when the state is the safe default produced by a
    lookup failure rather than by stored data.
    """
    role: Role = Field(Role.VIEWER, description="Effective (highest) role")
    permissions: FrozenSet[Permission] = Field(
        default_factory=frozenset, description="Effective permission set"
    )
    degraded: bool = Field(False, description="True when produced by a lookup failure")

    model_config = ConfigDict(frozen=True)

    def sorted_permissions(self) -> List[str]:
        return sorted(p.value for p in self.permissions)


class AuthorizationStatus(str, Enum):
    UNRESOLVED = "unresolved"
    RESOLVING = "resolving"
    RESOLVED = "resolved"


class AuthorizationSnapshot(BaseModel):
    """Synchronous view of a session's authorization for route guards."""
    status: AuthorizationStatus
    user_id: Optional[str] = None
    loading: bool = False
    state: Optional[UserAuthorizationState] = None

    model_config = ConfigDict(frozen=True)


# ==================== Store Rows ====================

class RoleRow(BaseModel):
    """Row of `user_roles` (only the selected column is required)."""
    role: str
    user_id: Optional[str] = None

    model_config = ConfigDict(extra="allow")


class PermissionRow(BaseModel):
    """Row of `user_permissions`."""
    permission: str
    user_id: Optional[str] = None
    granted_by: Optional[str] = None

    model_config = ConfigDict(extra="allow")


# ==================== API Payloads ====================

class AuthorizationResponse(BaseModel):
    user_id: str
    role: Role
    permissions: List[str] = Field(default_factory=list, description="Sorted permission tags")
    degraded: bool = False

    @classmethod
    def from_state(cls, user_id: str, state: UserAuthorizationState) -> "AuthorizationResponse":
        return cls(
            user_id=user_id,
            role=state.role,
            permissions=state.sorted_permissions(),
            degraded=state.degraded,
        )


class PermissionCheckRequest(BaseModel):
    permissions: List[Permission] = Field(default_factory=list)
    mode: Literal["any", "all"] = "any"
    min_role: Optional[Role] = None


class PermissionCheckResponse(BaseModel):
    allowed: bool
    role: Role


class RoleChangeRequest(BaseModel):
    role: Role


class PermissionGroupEntry(BaseModel):
    key: Permission
    label: str


class VocabularyResponse(BaseModel):
    roles: List[Role]
    permissions: List[Permission] = Field(
        default_factory=lambda: sorted(ALL_PERMISSIONS, key=lambda p: p.value)
    )
    groups: Dict[str, List[PermissionGroupEntry]]
