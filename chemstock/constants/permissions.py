"""
Permission Constants

Closed vocabulary of fine-grained capability tags stored in
`user_permissions.permission`.

Permissions are granted individually; the ADMIN role implicitly holds
ALL_PERMISSIONS regardless of what is stored.

PERMISSION_GROUPS mirrors how capabilities are presented in the user
administration screen (one group per inventory area, each tag in exactly
one group).
"""

from enum import Enum
from typing import Dict, List, Optional

from chemstock.core.errors import UnknownPermissionTagError


class Permission(str, Enum):
    """Capability tags, valued as stored in the permission_action enum."""

    VIEW_PRODUCTS = "view_products"
    CREATE_PRODUCTS = "create_products"
    EDIT_PRODUCTS = "edit_products"
    DELETE_PRODUCTS = "delete_products"
    VIEW_INVOICES = "view_invoices"
    CREATE_INVOICES = "create_invoices"
    EDIT_INVOICES = "edit_invoices"
    DELETE_INVOICES = "delete_invoices"
    VIEW_MOVEMENTS = "view_movements"
    CREATE_MOVEMENTS = "create_movements"
    EDIT_MOVEMENTS = "edit_movements"
    DELETE_MOVEMENTS = "delete_movements"
    VIEW_SUPPLIERS = "view_suppliers"
    CREATE_SUPPLIERS = "create_suppliers"
    EDIT_SUPPLIERS = "edit_suppliers"
    DELETE_SUPPLIERS = "delete_suppliers"
    VIEW_LOCATIONS = "view_locations"
    CREATE_LOCATIONS = "create_locations"
    EDIT_LOCATIONS = "edit_locations"
    DELETE_LOCATIONS = "delete_locations"
    MANAGE_USERS = "manage_users"
    VIEW_REPORTS = "view_reports"
    APPROVE_PRODUCTS = "approve_products"


ALL_PERMISSIONS = frozenset(Permission)

_PERMISSION_VALUES = {p.value for p in Permission}


# ============================================================================
# Display Groups
# ============================================================================

PERMISSION_GROUPS: Dict[str, List[Dict[str, str]]] = {
    "Products": [
        {"key": Permission.VIEW_PRODUCTS.value, "label": "View products"},
        {"key": Permission.CREATE_PRODUCTS.value, "label": "Create products"},
        {"key": Permission.EDIT_PRODUCTS.value, "label": "Edit products"},
        {"key": Permission.DELETE_PRODUCTS.value, "label": "Delete products"},
        {"key": Permission.APPROVE_PRODUCTS.value, "label": "Approve products"},
    ],
    "Invoices": [
        {"key": Permission.VIEW_INVOICES.value, "label": "View invoices"},
        {"key": Permission.CREATE_INVOICES.value, "label": "Create invoices"},
        {"key": Permission.EDIT_INVOICES.value, "label": "Edit invoices"},
        {"key": Permission.DELETE_INVOICES.value, "label": "Delete invoices"},
    ],
    "Movements": [
        {"key": Permission.VIEW_MOVEMENTS.value, "label": "View movements"},
        {"key": Permission.CREATE_MOVEMENTS.value, "label": "Create movements"},
        {"key": Permission.EDIT_MOVEMENTS.value, "label": "Edit movements"},
        {"key": Permission.DELETE_MOVEMENTS.value, "label": "Delete movements"},
    ],
    "Suppliers": [
        {"key": Permission.VIEW_SUPPLIERS.value, "label": "View suppliers"},
        {"key": Permission.CREATE_SUPPLIERS.value, "label": "Create suppliers"},
        {"key": Permission.EDIT_SUPPLIERS.value, "label": "Edit suppliers"},
        {"key": Permission.DELETE_SUPPLIERS.value, "label": "Delete suppliers"},
    ],
    "Locations": [
        {"key": Permission.VIEW_LOCATIONS.value, "label": "View locations"},
        {"key": Permission.CREATE_LOCATIONS.value, "label": "Create locations"},
        {"key": Permission.EDIT_LOCATIONS.value, "label": "Edit locations"},
        {"key": Permission.DELETE_LOCATIONS.value, "label": "Delete locations"},
    ],
    "System": [
        {"key": Permission.MANAGE_USERS.value, "label": "Manage users"},
        {"key": Permission.VIEW_REPORTS.value, "label": "View reports"},
    ],
}


# ============================================================================
# Helper Functions
# ============================================================================

def is_valid_permission(tag: Optional[str]) -> bool:
    """Check if tag is part of the permission vocabulary (exact match)."""
    return isinstance(tag, str) and tag in _PERMISSION_VALUES


def parse_permission(tag) -> Permission:
    """
    Convert a permission tag to a Permission member.

    Args:
        tag: Permission member or exact tag string

    Returns:
        Matching Permission

    Raises:
        UnknownPermissionTagError: If the tag is outside the vocabulary

    Example:
        >>> parse_permission("view_products")
        <Permission.VIEW_PRODUCTS: 'view_products'>
    """
    if isinstance(tag, Permission):
        return tag
    if is_valid_permission(tag):
        return Permission(tag)
    raise UnknownPermissionTagError(
        message=f"Unknown permission tag: {tag!r}",
        details={"permission": str(tag)}
    )


def permission_label(permission) -> str:
    """Return the display label for a permission, falling back to its tag."""
    key = parse_permission(permission).value
    for entries in PERMISSION_GROUPS.values():
        for entry in entries:
            if entry["key"] == key:
                return entry["label"]
    return key
