from typing import List

from fastapi import APIRouter, Depends

from api.deps import require_action
from api.schemas import RoleIn, UserOut
from db.models import User
from services import auth
from services.roles import Action

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.get("/users", response_model=List[UserOut])
async def list_users(admin: User = Depends(require_action(Action.MANAGE_USERS))):
    return [UserOut.model_validate(u) for u in await auth.list_users(admin)]


@router.patch("/users/{user_id}", response_model=UserOut)
async def change_role(
    user_id: int,
    payload: RoleIn,
    admin: User = Depends(require_action(Action.MANAGE_USERS)),
):
    return UserOut.model_validate(await auth.change_role(admin, user_id, payload.role))
