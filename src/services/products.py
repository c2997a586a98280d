from typing import Any, Dict, List, Optional, Tuple

from db import crud
from db.models import Product, User
from services.roles import Action, is_admin, require
from utils.errors import NotFoundError, PermissionDeniedError, ValidationError
from utils.logger import get_logger

_logger = get_logger(__name__)


def _validate_fields(fields: Dict[str, Any], partial: bool) -> None:
    required = ("title", "price", "category", "quantity_available")
    if not partial:
        missing = [f for f in required if fields.get(f) in (None, "")]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")
    cleared = [f for f in (*required, "images") if f in fields and fields[f] is None]
    if cleared:
        raise ValidationError(f"Fields cannot be null: {', '.join(cleared)}")
    if "title" in fields and not str(fields["title"] or "").strip():
        raise ValidationError("Title cannot be empty")
    if "category" in fields and not str(fields["category"] or "").strip():
        raise ValidationError("Category cannot be empty")
    if fields.get("price") is not None and fields["price"] < 0:
        raise ValidationError("Price cannot be negative")
    if fields.get("quantity_available") is not None and fields["quantity_available"] < 0:
        raise ValidationError("Quantity cannot be negative")


async def list_products(
    category: Optional[str] = None,
    search: Optional[str] = None,
    seller_id: Optional[int] = None,
) -> List[Product]:
    return await crud.list_products(category=category, search=search, seller_id=seller_id)


async def get_product(product_id: int) -> Product:
    product = await crud.get_product(product_id)
    if not product:
        raise NotFoundError("Product", product_id)
    return product


async def ratings_for(products: List[Product]) -> Dict[int, Tuple[float, int]]:
    """{product_id: (average, count)}; unreviewed products map to (0.0, 0)."""
    stats = await crud.product_ratings([p.id for p in products])
    return {p.id: stats.get(p.id, (0.0, 0)) for p in products}


async def create_product(actor: User, fields: Dict[str, Any]) -> Product:
    require(actor, Action.MANAGE_PRODUCTS)
    _validate_fields(fields, partial=False)
    product = await crud.create_product(
        seller_id=actor.id,
        title=fields["title"].strip(),
        description=fields.get("description"),
        price=float(fields["price"]),
        images=fields.get("images") or [],
        category=fields["category"].strip(),
        quantity_available=int(fields["quantity_available"]),
    )
    _logger.info(f"Seller {actor.id} listed product {product.id} ({product.title})")
    return product


async def _owned_product(actor: User, product_id: int) -> Product:
    require(actor, Action.MANAGE_PRODUCTS)
    product = await get_product(product_id)
    if product.seller_id != actor.id and not is_admin(actor):
        raise PermissionDeniedError("You can only manage your own products")
    return product


async def update_product(actor: User, product_id: int, fields: Dict[str, Any]) -> Product:
    await _owned_product(actor, product_id)
    _validate_fields(fields, partial=True)
    return await crud.update_product(product_id, fields)


async def delete_product(actor: User, product_id: int) -> None:
    await _owned_product(actor, product_id)
    await crud.delete_product(product_id)
    _logger.info(f"User {actor.id} deleted product {product_id}")
