from typing import List

from fastapi import APIRouter, Depends, status

from api.deps import current_user
from api.schemas import CartAddIn, CartItemOut, CartUpdateIn, CountOut, MessageOut, product_out
from db.models import CartItem, Product, User
from services import cart, products

router = APIRouter(prefix="/api/cart", tags=["cart"])


def _item_out(item: CartItem, product: Product) -> CartItemOut:
    return CartItemOut(
        id=item.id,
        product_id=item.product_id,
        quantity=item.quantity,
        product=product_out(product),
    )


@router.get("", response_model=List[CartItemOut])
async def get_cart(user: User = Depends(current_user)):
    return [_item_out(item, product) for item, product in await cart.list_items(user)]


@router.post("", response_model=CartItemOut, status_code=status.HTTP_201_CREATED)
async def add_to_cart(payload: CartAddIn, user: User = Depends(current_user)):
    item = await cart.add_item(user, payload.product_id, payload.quantity)
    return _item_out(item, await products.get_product(item.product_id))


@router.put("/{item_id}", response_model=CartItemOut)
async def update_cart_item(
    item_id: int, payload: CartUpdateIn, user: User = Depends(current_user)
):
    item = await cart.update_quantity(user, item_id, payload.quantity)
    return _item_out(item, await products.get_product(item.product_id))


@router.delete("/{item_id}", response_model=MessageOut)
async def remove_cart_item(item_id: int, user: User = Depends(current_user)):
    await cart.remove_item(user, item_id)
    return MessageOut(message="Item removed from cart")


@router.delete("", response_model=CountOut)
async def clear_cart(user: User = Depends(current_user)):
    removed = await cart.clear(user)
    return CountOut(message="Cart cleared", count=removed)
