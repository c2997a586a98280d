from typing import List

from fastapi import APIRouter, Depends, Query

from api.deps import current_user
from api.schemas import CountOut, NotificationOut
from db.models import User
from services import notifications

router = APIRouter(prefix="/api/notifications", tags=["notifications"])


@router.get("", response_model=List[NotificationOut])
async def list_notifications(
    unread_only: bool = Query(False, alias="unreadOnly"),
    user: User = Depends(current_user),
):
    return [
        NotificationOut.model_validate(n)
        for n in await notifications.list_for_user(user, unread_only=unread_only)
    ]


@router.get("/unread-count", response_model=CountOut)
async def unread_count(user: User = Depends(current_user)):
    return CountOut(message="Unread notifications", count=await notifications.unread_count(user))


@router.put("/read-all", response_model=CountOut)
async def mark_all_read(user: User = Depends(current_user)):
    updated = await notifications.mark_all_read(user)
    return CountOut(message="All notifications marked as read", count=updated)


@router.put("/{notification_id}/read", response_model=NotificationOut)
async def mark_read(notification_id: int, user: User = Depends(current_user)):
    return NotificationOut.model_validate(
        await notifications.mark_read(user, notification_id)
    )
