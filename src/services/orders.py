"""
Order lifecycle: atomic checkout and status transitions, with the buyer and
sellers notified after each change.

Status graph::

    pending -> processing -> shipped -> delivered
       \\            \\            \\
        +------------+------------+--> cancelled

Forward skips are allowed (pending -> shipped). delivered and cancelled are
terminal. Setting the status an order already has is rejected.
"""

import asyncio
from dataclasses import dataclass
from enum import StrEnum
from typing import List, Optional, Tuple

from db import crud
from db.models import Order, OrderItem, User
from services import notifications
from services.roles import Action, can, is_admin, require
from utils.errors import (
    InvalidStatusTransitionError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from utils.logger import get_logger

_logger = get_logger(__name__)


class OrderStatus(StrEnum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


_FORWARD = [
    OrderStatus.PENDING,
    OrderStatus.PROCESSING,
    OrderStatus.SHIPPED,
    OrderStatus.DELIVERED,
]
TERMINAL_STATUSES = frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED})

_STATUS_COPY = {
    OrderStatus.PROCESSING: ("Order Processing", "Your order #{id} is now being processed."),
    OrderStatus.SHIPPED: ("Order Shipped", "Your order #{id} has been shipped! It's on the way."),
    OrderStatus.DELIVERED: ("Order Delivered", "Your order #{id} has been delivered. Enjoy!"),
    OrderStatus.CANCELLED: ("Order Cancelled", "Your order #{id} has been cancelled."),
}


@dataclass(frozen=True)
class OrderLine:
    product_id: int
    quantity: int
    unit_price: Optional[float] = None  # informational, the server prices lines


def parse_status(value: str) -> OrderStatus:
    try:
        return OrderStatus(value)
    except ValueError:
        raise ValidationError(f"Invalid status: {value}") from None


def allowed_transitions(current: str) -> List[OrderStatus]:
    """Statuses an order in `current` may move to."""
    current = OrderStatus(current)
    if current in TERMINAL_STATUSES:
        return []
    later = _FORWARD[_FORWARD.index(current) + 1 :]
    return [*later, OrderStatus.CANCELLED]


def can_transition(current: str, new: str) -> bool:
    return OrderStatus(new) in allowed_transitions(current)


def status_copy(order_id: int, status: str) -> Tuple[str, str]:
    """(title, message) shown to the buyer when their order moves to `status`."""
    try:
        title, template = _STATUS_COPY[OrderStatus(status)]
    except (KeyError, ValueError):
        return "Order Update", f"Your order #{order_id} status has been updated to {status}."
    return title, template.format(id=order_id)


# ---------------------------
# Checkout
# ---------------------------


async def place_order(
    buyer: User,
    lines: List[OrderLine],
    total_amount: Optional[float] = None,
    shipping_address: Optional[str] = None,
    payment_intent_id: Optional[str] = None,
) -> Tuple[Order, List[OrderItem]]:
    """
    Create a pending order from the given lines.

    Stock checks, item rows, stock decrements and clearing the buyer's cart
    happen in one transaction; a failure leaves everything untouched. The
    buyer and every seller involved are notified after commit.
    """
    require(buyer, Action.PLACE_ORDER)
    if not lines:
        raise ValidationError("Order must include items")
    for line in lines:
        if line.quantity < 1:
            raise ValidationError("Quantity must be at least 1")
    if total_amount is not None and total_amount < 0:
        raise ValidationError("Total amount cannot be negative")

    order, items = await crud.create_order(
        buyer.id,
        [(line.product_id, line.quantity) for line in lines],
        shipping_address=shipping_address or buyer.address,
        payment_intent_id=payment_intent_id,
        expected_total=total_amount,
    )
    _logger.info(
        f"Order {order.id} placed by user {buyer.id}: {len(items)} item(s), total {order.total_amount:.2f}"
    )

    await notifications.notify(
        buyer.id,
        "order_update",
        "Order Placed",
        f"Your order #{order.id} has been placed successfully.",
        {"orderId": order.id, "status": OrderStatus.PENDING.value},
    )
    for seller_id in await crud.order_seller_ids(order.id):
        await notifications.notify(
            seller_id,
            "system",
            "New Order",
            f"You have a new order #{order.id} containing your products.",
            {"orderId": order.id},
        )
    return order, items


# ---------------------------
# Status updates
# ---------------------------


async def _check_access(actor: User, order: Order) -> None:
    if can(actor, Action.VIEW_ALL_ORDERS) or order.buyer_id == actor.id:
        return
    if can(actor, Action.VIEW_SELLER_ORDERS) and actor.id in await crud.order_seller_ids(order.id):
        return
    raise PermissionDeniedError("You do not have access to this order")


async def update_status(actor: User, order_id: int, new_status: str) -> Order:
    """
    Move an order to `new_status`. Admins may update any order; sellers only
    orders containing one of their products. Exactly one notification goes to
    the buyer on success.
    """
    require(actor, Action.UPDATE_ORDER_STATUS)
    status = parse_status(new_status)

    order = await crud.get_order(order_id)
    if not order:
        raise NotFoundError("Order", order_id)
    if not is_admin(actor) and actor.id not in await crud.order_seller_ids(order_id):
        raise PermissionDeniedError("You can only update orders containing your products")
    if not can_transition(order.status, status):
        raise InvalidStatusTransitionError(order.status, status.value)

    updated = await crud.update_order_status(order_id, order.status, status.value)
    if not updated:
        # changed underneath us since the read above
        current = await crud.get_order(order_id)
        raise InvalidStatusTransitionError(current.status if current else order.status, status.value)
    _logger.info(f"Order {order_id}: {order.status} -> {status} by user {actor.id}")

    title, message = status_copy(order_id, status)
    await notifications.notify(
        updated.buyer_id,
        "order_update",
        title,
        message,
        {"orderId": order_id, "status": status.value},
    )
    return updated


# ---------------------------
# Reads
# ---------------------------


async def _with_items(orders: List[Order]) -> List[Tuple[Order, List[OrderItem]]]:
    items = await asyncio.gather(*(crud.list_order_items(o.id) for o in orders))
    return list(zip(orders, items))


async def get_order(actor: User, order_id: int) -> Tuple[Order, List[OrderItem]]:
    order, items = await crud.get_order_detail(order_id)
    if not order:
        raise NotFoundError("Order", order_id)
    await _check_access(actor, order)
    return order, items


async def list_orders(actor: User) -> List[Tuple[Order, List[OrderItem]]]:
    """Admins see every order, sellers orders with their products, buyers their own."""
    if can(actor, Action.VIEW_ALL_ORDERS):
        orders = await crud.list_all_orders()
    elif can(actor, Action.VIEW_SELLER_ORDERS):
        orders = await crud.list_orders_for_seller(actor.id)
    else:
        orders = await crud.list_orders_by_buyer(actor.id)
    return await _with_items(orders)


async def list_buyer_orders(actor: User) -> List[Tuple[Order, List[OrderItem]]]:
    return await _with_items(await crud.list_orders_by_buyer(actor.id))
