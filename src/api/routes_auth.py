from typing import Optional

from fastapi import APIRouter, Depends, Response, status

from api.deps import current_user, session_id
from api.schemas import LoginIn, MessageOut, ProfileIn, RegisterIn, UserOut, UserSummaryOut
from db.models import Session, User
from services import auth
from utils import config

router = APIRouter(prefix="/api", tags=["auth"])


def _set_session_cookie(response: Response, session: Session) -> None:
    response.set_cookie(
        config.SESSION_COOKIE_NAME,
        session.sid,
        max_age=config.SESSION_TTL_HOURS * 3600,
        httponly=True,
        samesite="lax",
        secure=config.SESSION_COOKIE_SECURE,
    )


@router.post("/auth/register", response_model=UserOut, status_code=status.HTTP_201_CREATED)
async def register(payload: RegisterIn, response: Response):
    user = await auth.register(
        payload.name,
        payload.email,
        payload.username,
        payload.password,
        confirm_password=payload.confirm_password,
        role=payload.role,
    )
    _set_session_cookie(response, await auth.start_session(user))
    return UserOut.model_validate(user)


@router.post("/auth/login", response_model=UserOut)
async def login(payload: LoginIn, response: Response):
    user, session = await auth.login(payload.email, payload.password)
    _set_session_cookie(response, session)
    return UserOut.model_validate(user)


@router.post("/auth/logout", response_model=MessageOut)
async def logout(response: Response, sid: Optional[str] = Depends(session_id)):
    await auth.logout(sid)
    response.delete_cookie(config.SESSION_COOKIE_NAME)
    return MessageOut(message="Logged out successfully")


@router.get("/auth/me", response_model=UserOut)
async def me(user: User = Depends(current_user)):
    return UserOut.model_validate(user)


@router.patch("/users/profile", response_model=UserOut)
async def update_profile(payload: ProfileIn, user: User = Depends(current_user)):
    updated = await auth.update_profile(user, payload.model_dump(exclude_unset=True))
    return UserOut.model_validate(updated)


@router.get("/users/{user_id}", response_model=UserSummaryOut)
async def get_user(user_id: int, _: User = Depends(current_user)):
    return UserSummaryOut.model_validate(await auth.get_user(user_id))
