from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from api.deps import current_user, require_action
from api.schemas import (
    MessageOut,
    ProductIn,
    ProductOut,
    ProductUpdateIn,
    ReviewIn,
    ReviewOut,
    UserSummaryOut,
    product_out,
)
from db.models import User
from services import products, reviews
from services.roles import Action

router = APIRouter(prefix="/api/products", tags=["products"])


@router.get("", response_model=List[ProductOut])
async def list_products(
    category: Optional[str] = None,
    search: Optional[str] = None,
    seller_id: Optional[int] = Query(None, alias="sellerId"),
):
    items = await products.list_products(category=category, search=search, seller_id=seller_id)
    ratings = await products.ratings_for(items)
    return [product_out(p, ratings[p.id]) for p in items]


@router.get("/{product_id}", response_model=ProductOut)
async def get_product(product_id: int):
    product = await products.get_product(product_id)
    ratings = await products.ratings_for([product])
    return product_out(product, ratings[product.id])


@router.post("", response_model=ProductOut, status_code=status.HTTP_201_CREATED)
async def create_product(
    payload: ProductIn, user: User = Depends(require_action(Action.MANAGE_PRODUCTS))
):
    return product_out(await products.create_product(user, payload.model_dump()))


@router.put("/{product_id}", response_model=ProductOut)
async def update_product(
    product_id: int,
    payload: ProductUpdateIn,
    user: User = Depends(require_action(Action.MANAGE_PRODUCTS)),
):
    fields = payload.model_dump(exclude_unset=True)
    product = await products.update_product(user, product_id, fields)
    ratings = await products.ratings_for([product])
    return product_out(product, ratings[product.id])


@router.delete("/{product_id}", response_model=MessageOut)
async def delete_product(
    product_id: int, user: User = Depends(require_action(Action.MANAGE_PRODUCTS))
):
    await products.delete_product(user, product_id)
    return MessageOut(message="Product deleted successfully")


# ---------------------------
# Reviews
# ---------------------------


@router.get("/{product_id}/reviews", response_model=List[ReviewOut])
async def list_reviews(product_id: int):
    result = []
    for review, reviewer in await reviews.list_reviews(product_id):
        out = ReviewOut.model_validate(review)
        out.buyer = UserSummaryOut.model_validate(reviewer)
        result.append(out)
    return result


@router.post(
    "/{product_id}/reviews", response_model=ReviewOut, status_code=status.HTTP_201_CREATED
)
async def create_review(
    product_id: int, payload: ReviewIn, user: User = Depends(current_user)
):
    review = await reviews.create_review(user, product_id, payload.rating, payload.comment)
    out = ReviewOut.model_validate(review)
    out.buyer = UserSummaryOut.model_validate(user)
    return out
