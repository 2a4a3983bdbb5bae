"""
Action Guard Constants

Minimum role required for each user-initiated inventory action, together with
the denial message shown when the check fails.

Screens:
- Movements / Warehouse: create_movement, transfer_product (OPERATOR+)
- Laboratory: add_lab_product, approve_product, reject_product (ANALYST+)
- User administration: manage_users (ADMIN)
"""

from typing import Dict, NamedTuple

from chemstock.constants.roles import Role


class ActionRequirement(NamedTuple):
    min_role: Role
    denial_message: str


CREATE_MOVEMENT = "create_movement"
TRANSFER_PRODUCT = "transfer_product"
ADD_LAB_PRODUCT = "add_lab_product"
APPROVE_PRODUCT = "approve_product"
REJECT_PRODUCT = "reject_product"
MANAGE_USERS = "manage_users"

ACTION_REQUIREMENTS: Dict[str, ActionRequirement] = {
    CREATE_MOVEMENT: ActionRequirement(
        Role.OPERATOR, "Only operators and above can create movements"
    ),
    TRANSFER_PRODUCT: ActionRequirement(
        Role.OPERATOR, "Only operators and above can transfer products"
    ),
    ADD_LAB_PRODUCT: ActionRequirement(
        Role.ANALYST, "Only analysts and administrators can add products"
    ),
    APPROVE_PRODUCT: ActionRequirement(
        Role.ANALYST, "Only analysts and administrators can approve products"
    ),
    REJECT_PRODUCT: ActionRequirement(
        Role.ANALYST, "Only analysts and administrators can reject products"
    ),
    MANAGE_USERS: ActionRequirement(
        Role.ADMIN, "Only administrators can manage users"
    ),
}


def is_valid_action(action: str) -> bool:
    return action in ACTION_REQUIREMENTS
