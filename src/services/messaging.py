from typing import List

from db import crud
from db.models import Message, User
from services import notifications
from utils.errors import NotFoundError, ValidationError

PREVIEW_LENGTH = 50


def _preview(content: str) -> str:
    if len(content) <= PREVIEW_LENGTH:
        return content
    return content[:PREVIEW_LENGTH] + "..."


async def send(sender: User, receiver_id: int, content: str) -> Message:
    content = (content or "").strip()
    if not content:
        raise ValidationError("Message content is required")
    if receiver_id == sender.id:
        raise ValidationError("You cannot message yourself")
    receiver = await crud.get_user(receiver_id)
    if not receiver:
        raise NotFoundError("User", receiver_id)

    message = await crud.create_message(sender.id, receiver_id, content)
    await notifications.notify(
        receiver_id,
        "message",
        f"New message from {sender.name}",
        _preview(content),
        {"senderId": sender.id, "messageId": message.id},
    )
    return message


async def conversation(user: User, other_id: int) -> List[Message]:
    """Messages between the two users, oldest first. Incoming ones become read."""
    if not await crud.get_user(other_id):
        raise NotFoundError("User", other_id)
    await crud.mark_messages_read(user.id, other_id)
    return await crud.list_messages_between(user.id, other_id)


async def inbox(user: User) -> List[Message]:
    return await crud.list_messages_for_user(user.id)
