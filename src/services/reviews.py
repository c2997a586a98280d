from typing import List, Tuple

from db import crud
from db.models import Review, User
from services.roles import Action, require
from utils.errors import NotFoundError, PermissionDeniedError, ValidationError


async def list_reviews(product_id: int) -> List[Tuple[Review, User]]:
    """Reviews for a product, newest first, each with its reviewer."""
    if not await crud.get_product(product_id):
        raise NotFoundError("Product", product_id)
    reviews = await crud.list_reviews_for_product(product_id)
    result = []
    for review in reviews:
        reviewer = await crud.get_user(review.buyer_id)
        if reviewer:
            result.append((review, reviewer))
    return result


async def create_review(user: User, product_id: int, rating: int, comment: str) -> Review:
    """Only someone who has ordered the product may review it."""
    require(user, Action.WRITE_REVIEW)
    if not 1 <= rating <= 5:
        raise ValidationError("Rating must be between 1 and 5")
    comment = (comment or "").strip()
    if not comment:
        raise ValidationError("Comment is required")
    if not await crud.get_product(product_id):
        raise NotFoundError("Product", product_id)
    if not await crud.buyer_has_purchased(user.id, product_id):
        raise PermissionDeniedError("You can only review products you have purchased")
    return await crud.create_review(product_id, user.id, rating, comment)
