from typing import List

from fastapi import APIRouter, Depends, status

from api.deps import current_user, require_action
from api.schemas import OrderIn, OrderOut, StatusIn, order_out
from db.models import User
from services import orders
from services.orders import OrderLine
from services.roles import Action

router = APIRouter(prefix="/api/orders", tags=["orders"])


@router.get("", response_model=List[OrderOut])
async def list_orders(user: User = Depends(current_user)):
    return [order_out(o, items) for o, items in await orders.list_orders(user)]


@router.post("", response_model=OrderOut, status_code=status.HTTP_201_CREATED)
async def place_order(payload: OrderIn, user: User = Depends(current_user)):
    order, items = await orders.place_order(
        user,
        [OrderLine(i.product_id, i.quantity, i.unit_price) for i in payload.items],
        total_amount=payload.total_amount,
        shipping_address=payload.shipping_address,
        payment_intent_id=payload.payment_intent_id,
    )
    return order_out(order, items)


@router.get("/buyer", response_model=List[OrderOut])
async def list_buyer_orders(user: User = Depends(current_user)):
    return [order_out(o, items) for o, items in await orders.list_buyer_orders(user)]


@router.get("/{order_id}", response_model=OrderOut)
async def get_order(order_id: int, user: User = Depends(current_user)):
    order, items = await orders.get_order(user, order_id)
    return order_out(order, items)


@router.patch("/{order_id}/status", response_model=OrderOut)
async def update_order_status(
    order_id: int,
    payload: StatusIn,
    user: User = Depends(require_action(Action.UPDATE_ORDER_STATUS)),
):
    await orders.update_status(user, order_id, payload.status)
    order, items = await orders.get_order(user, order_id)
    return order_out(order, items)
