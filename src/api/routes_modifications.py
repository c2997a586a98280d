from typing import List

from fastapi import APIRouter, Depends, status

from api.deps import current_user, require_action
from api.schemas import ModificationRequestIn, ModificationRequestOut, ModificationResponseIn
from db.models import User
from services import modifications
from services.roles import Action

router = APIRouter(prefix="/api/product-modification-requests", tags=["modifications"])


@router.post("", response_model=ModificationRequestOut, status_code=status.HTTP_201_CREATED)
async def create_request(
    payload: ModificationRequestIn,
    user: User = Depends(require_action(Action.REQUEST_MODIFICATION)),
):
    request = await modifications.create_request(user, payload.product_id, payload.request_details)
    return ModificationRequestOut.model_validate(request)


@router.get("/buyer", response_model=List[ModificationRequestOut])
async def buyer_requests(user: User = Depends(current_user)):
    return [
        ModificationRequestOut.model_validate(r)
        for r in await modifications.list_for_buyer(user)
    ]


@router.get("/seller", response_model=List[ModificationRequestOut])
async def seller_requests(
    user: User = Depends(require_action(Action.RESPOND_MODIFICATION)),
):
    return [
        ModificationRequestOut.model_validate(r)
        for r in await modifications.list_for_seller(user)
    ]


@router.patch("/{request_id}", response_model=ModificationRequestOut)
async def respond(
    request_id: int,
    payload: ModificationResponseIn,
    user: User = Depends(require_action(Action.RESPOND_MODIFICATION)),
):
    request = await modifications.respond(
        user, request_id, payload.status, payload.seller_response
    )
    return ModificationRequestOut.model_validate(request)
