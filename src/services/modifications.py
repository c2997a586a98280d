"""
Buyers ask the seller of a product for a change (size, colour, engraving...);
the seller answers with a status and a response text.
"""

from enum import StrEnum
from typing import List, Optional

from db import crud
from db.models import ModificationRequest, User
from services import notifications
from services.roles import Action, is_admin, require
from utils.errors import NotFoundError, PermissionDeniedError, ValidationError
from utils.logger import get_logger

_logger = get_logger(__name__)

MIN_DETAILS_LENGTH = 10


class RequestStatus(StrEnum):
    PENDING = "pending"
    APPROVED = "approved"
    DENIED = "denied"


async def create_request(buyer: User, product_id: int, details: str) -> ModificationRequest:
    require(buyer, Action.REQUEST_MODIFICATION)
    details = (details or "").strip()
    if len(details) < MIN_DETAILS_LENGTH:
        raise ValidationError(
            f"Request details must be at least {MIN_DETAILS_LENGTH} characters"
        )
    product = await crud.get_product(product_id)
    if not product:
        raise NotFoundError("Product", product_id)

    request = await crud.create_modification_request(
        product.id, buyer.id, product.seller_id, details
    )
    await notifications.notify(
        product.seller_id,
        "modification_request",
        "New Modification Request",
        f"{buyer.name} requested a modification to {product.title}.",
        {"requestId": request.id, "productId": product.id},
    )
    return request


async def list_for_buyer(buyer: User) -> List[ModificationRequest]:
    return await crud.list_modification_requests(buyer_id=buyer.id)


async def list_for_seller(seller: User) -> List[ModificationRequest]:
    require(seller, Action.RESPOND_MODIFICATION)
    return await crud.list_modification_requests(seller_id=seller.id)


async def respond(
    actor: User, request_id: int, status: str, response: Optional[str] = None
) -> ModificationRequest:
    require(actor, Action.RESPOND_MODIFICATION)
    try:
        new_status = RequestStatus(status)
    except ValueError:
        raise ValidationError(f"Invalid status: {status}") from None

    request = await crud.get_modification_request(request_id)
    if not request:
        raise NotFoundError("Modification request", request_id)
    if request.seller_id != actor.id and not is_admin(actor):
        raise PermissionDeniedError("You can only respond to requests for your products")

    updated = await crud.respond_modification_request(
        request_id, new_status.value, (response or "").strip() or None
    )
    _logger.info(f"Modification request {request_id} marked {new_status} by user {actor.id}")

    product = await crud.get_product(request.product_id)
    title = product.title if product else f"product #{request.product_id}"
    await notifications.notify(
        request.buyer_id,
        "modification_request",
        "Modification Request Updated",
        f"Your request for {title} was marked {new_status.value}.",
        {"requestId": request_id, "status": new_status.value},
    )
    return updated
