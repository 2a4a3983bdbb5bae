"""
Constants Package

Centralized constants for the ChemStock authorization service.

Exports:
- Role enum and hierarchy (VIEWER < OPERATOR < ANALYST < ADMIN)
- Permission enum, full vocabulary and display groups
- Action guard table (minimum role per user-initiated action)
- Global constants (headers, store paths, component names)
"""

# Role constants
from .roles import (
    Role,
    ROLE_RANK,
    ROLES_BY_RANK,
    DEFAULT_ROLE,
    is_valid_role,
    parse_role,
    highest_role,
)

# Permission constants
from .permissions import (
    Permission,
    ALL_PERMISSIONS,
    PERMISSION_GROUPS,
    is_valid_permission,
    parse_permission,
    permission_label,
)

# Action guards
from .guards import (
    ActionRequirement,
    ACTION_REQUIREMENTS,
    is_valid_action,
)

# Global constants
from .constants import (
    TRACE_HEADER_NAME,
    AUTHORIZATION_HEADER_NAME,
    APIKEY_HEADER_NAME,
    REST_PATH_PREFIX,
    AUTH_USER_PATH,
    COMPONENT_API,
    normalize_trace_id,
    short_request_id,
)

__all__ = [
    # Roles
    "Role",
    "ROLE_RANK",
    "ROLES_BY_RANK",
    "DEFAULT_ROLE",
    "is_valid_role",
    "parse_role",
    "highest_role",
    # Permissions
    "Permission",
    "ALL_PERMISSIONS",
    "PERMISSION_GROUPS",
    "is_valid_permission",
    "parse_permission",
    "permission_label",
    # Guards
    "ActionRequirement",
    "ACTION_REQUIREMENTS",
    "is_valid_action",
    # Global
    "TRACE_HEADER_NAME",
    "AUTHORIZATION_HEADER_NAME",
    "APIKEY_HEADER_NAME",
    "REST_PATH_PREFIX",
    "AUTH_USER_PATH",
    "COMPONENT_API",
    "normalize_trace_id",
    "short_request_id",
]
