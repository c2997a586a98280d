from typing import Any, Dict, List, Optional

import aiosqlite

from db import crud
from db.models import Notification, User
from utils.errors import NotFoundError
from utils.logger import get_logger

_logger = get_logger(__name__)


async def notify(
    user_id: int,
    type_: str,
    title: str,
    message: str,
    data: Optional[Dict[str, Any]] = None,
) -> Optional[Notification]:
    """
    Store a notification for a user, best-effort.

    Storage failures are logged and swallowed so the operation that triggered
    the notification still succeeds. Returns None in that case.
    """
    try:
        return await crud.create_notification(user_id, type_, title, message, data)
    except aiosqlite.Error:
        _logger.exception(
            f"Failed to store {type_} notification for user {user_id}: {title}"
        )
        return None


async def list_for_user(user: User, unread_only: bool = False) -> List[Notification]:
    return await crud.list_notifications(user.id, unread_only=unread_only)


async def mark_read(user: User, notification_id: int) -> Notification:
    """Mark one of the user's notifications read. Others' are reported missing."""
    notification = await crud.get_notification(notification_id)
    if not notification or notification.user_id != user.id:
        raise NotFoundError("Notification", notification_id)
    await crud.mark_notification_read(notification_id)
    return await crud.get_notification(notification_id)


async def mark_all_read(user: User) -> int:
    return await crud.mark_all_notifications_read(user.id)


async def unread_count(user: User) -> int:
    return await crud.count_unread_notifications(user.id)
