"""
Schemas Package

Pydantic models for authorization state, store rows and API responses.
"""

from chemstock.schemas.base import Proofs, ApiResponse
from chemstock.schemas.authorization import (
    UserAuthorizationState,
    AuthorizationStatus,
    AuthorizationSnapshot,
    RoleRow,
    PermissionRow,
    AuthorizationResponse,
    PermissionCheckRequest,
    PermissionCheckResponse,
    RoleChangeRequest,
    PermissionGroupEntry,
    VocabularyResponse,
)

__all__ = [
    "Proofs",
    "ApiResponse",
    "UserAuthorizationState",
    "AuthorizationStatus",
    "AuthorizationSnapshot",
    "RoleRow",
    "PermissionRow",
    "AuthorizationResponse",
    "PermissionCheckRequest",
    "PermissionCheckResponse",
    "RoleChangeRequest",
    "PermissionGroupEntry",
    "VocabularyResponse",
]
