from typing import List

from fastapi import APIRouter, Depends, status

from api.deps import current_user
from api.schemas import ChatMessageOut, MessageIn
from db.models import User
from services import messaging

router = APIRouter(prefix="/api/messages", tags=["messages"])


@router.get("", response_model=List[ChatMessageOut])
async def inbox(user: User = Depends(current_user)):
    return [ChatMessageOut.model_validate(m) for m in await messaging.inbox(user)]


@router.get("/{other_id}", response_model=List[ChatMessageOut])
async def conversation(other_id: int, user: User = Depends(current_user)):
    return [
        ChatMessageOut.model_validate(m)
        for m in await messaging.conversation(user, other_id)
    ]


@router.post("", response_model=ChatMessageOut, status_code=status.HTTP_201_CREATED)
async def send_message(payload: MessageIn, user: User = Depends(current_user)):
    message = await messaging.send(user, payload.receiver_id, payload.content)
    return ChatMessageOut.model_validate(message)
