from typing import Optional

from fastapi import Cookie, Depends

from db.models import User
from services import auth
from services.roles import Action, require
from utils import config


async def session_id(
    sid: Optional[str] = Cookie(None, alias=config.SESSION_COOKIE_NAME),
) -> Optional[str]:
    return sid


async def current_user(sid: Optional[str] = Depends(session_id)) -> User:
    """The logged-in user; 401 without a valid session cookie."""
    return await auth.user_for_session(sid)


def require_action(action: Action):
    """Dependency factory: the current user, if their role allows `action`."""

    async def _guard(user: User = Depends(current_user)) -> User:
        require(user, action)
        return user

    return _guard
