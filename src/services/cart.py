from typing import List, Tuple

from db import crud
from db.models import CartItem, Product, User
from utils.errors import NotFoundError, ValidationError


def _check_quantity(qty: int) -> None:
    if qty < 1:
        raise ValidationError("Quantity must be at least 1")


async def list_items(user: User) -> List[Tuple[CartItem, Product]]:
    """The user's cart rows paired with their products."""
    items = await crud.list_cart(user.id)
    result = []
    for item in items:
        product = await crud.get_product(item.product_id)
        if product:
            result.append((item, product))
    return result


async def add_item(user: User, product_id: int, qty: int = 1) -> CartItem:
    """
    Add a product to the cart, merging into an existing row for the same
    product. Stock is not checked here; checkout does that.
    """
    _check_quantity(qty)
    if not await crud.get_product(product_id):
        raise NotFoundError("Product", product_id)
    return await crud.add_cart_item(user.id, product_id, qty)


async def _own_item(user: User, item_id: int) -> CartItem:
    item = await crud.get_cart_item(item_id)
    if not item or item.user_id != user.id:
        raise NotFoundError("Cart item", item_id)
    return item


async def update_quantity(user: User, item_id: int, qty: int) -> CartItem:
    _check_quantity(qty)
    await _own_item(user, item_id)
    return await crud.update_cart_item_quantity(item_id, qty)


async def remove_item(user: User, item_id: int) -> None:
    await _own_item(user, item_id)
    await crud.remove_cart_item(item_id)


async def clear(user: User) -> int:
    return await crud.clear_cart(user.id)
