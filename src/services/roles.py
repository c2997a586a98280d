"""
Closed set of user roles and the permission table deciding who may do what.

Route handlers and services ask ``require(user, Action.X)`` instead of
comparing role strings inline.
"""

from enum import StrEnum
from typing import Dict, FrozenSet

from db.models import User
from utils.errors import PermissionDeniedError, ValidationError


class Role(StrEnum):
    BUYER = "buyer"
    SELLER = "seller"
    ADMIN = "admin"


# roles a user may pick for themselves at registration
SELF_ASSIGNABLE_ROLES = frozenset({Role.BUYER, Role.SELLER})


class Action(StrEnum):
    MANAGE_PRODUCTS = "manage_products"
    PLACE_ORDER = "place_order"
    WRITE_REVIEW = "write_review"
    REQUEST_MODIFICATION = "request_modification"
    RESPOND_MODIFICATION = "respond_modification"
    UPDATE_ORDER_STATUS = "update_order_status"
    VIEW_SELLER_ORDERS = "view_seller_orders"
    VIEW_ALL_ORDERS = "view_all_orders"
    MANAGE_USERS = "manage_users"


PERMISSIONS: Dict[Action, FrozenSet[Role]] = {
    Action.MANAGE_PRODUCTS: frozenset({Role.SELLER, Role.ADMIN}),
    Action.PLACE_ORDER: frozenset({Role.BUYER, Role.SELLER, Role.ADMIN}),
    Action.WRITE_REVIEW: frozenset({Role.BUYER, Role.SELLER, Role.ADMIN}),
    Action.REQUEST_MODIFICATION: frozenset({Role.BUYER}),
    Action.RESPOND_MODIFICATION: frozenset({Role.SELLER, Role.ADMIN}),
    Action.UPDATE_ORDER_STATUS: frozenset({Role.SELLER, Role.ADMIN}),
    Action.VIEW_SELLER_ORDERS: frozenset({Role.SELLER, Role.ADMIN}),
    Action.VIEW_ALL_ORDERS: frozenset({Role.ADMIN}),
    Action.MANAGE_USERS: frozenset({Role.ADMIN}),
}


def parse_role(value: str) -> Role:
    try:
        return Role(value)
    except ValueError:
        raise ValidationError(f"Invalid role: {value}") from None


def can(user: User, action: Action) -> bool:
    try:
        role = Role(user.role)
    except ValueError:
        return False
    return role in PERMISSIONS[action]


def require(user: User, action: Action) -> None:
    """Raise PermissionDeniedError unless the user's role allows `action`."""
    if not can(user, action):
        raise PermissionDeniedError(
            f"Role '{user.role}' is not allowed to {action.value.replace('_', ' ')}"
        )


def is_admin(user: User) -> bool:
    return user.role == Role.ADMIN
