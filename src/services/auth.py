"""
Registration, login, server-side sessions, profiles and admin role changes.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Tuple

from db import crud
from db.models import Session, User
from services.roles import SELF_ASSIGNABLE_ROLES, Action, Role, parse_role, require
from utils import config
from utils.errors import AuthenticationError, NotFoundError, ValidationError
from utils.logger import get_logger
from utils.security import hash_password, new_session_token, verify_password

_logger = get_logger(__name__)

MIN_USERNAME_LENGTH = 3
MIN_PASSWORD_LENGTH = 6


async def register(
    name: str,
    email: str,
    username: str,
    password: str,
    confirm_password: Optional[str] = None,
    role: str = Role.BUYER,
) -> User:
    """
    Create an account. Only buyer and seller can be picked here; admin is
    granted by another admin. Duplicate email or username is rejected.
    """
    name, email, username = name.strip(), email.strip(), username.strip()
    if not name:
        raise ValidationError("Name is required")
    if len(username) < MIN_USERNAME_LENGTH:
        raise ValidationError(
            f"Username must be at least {MIN_USERNAME_LENGTH} characters"
        )
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
        )
    if confirm_password is not None and confirm_password != password:
        raise ValidationError("Passwords do not match")
    role = parse_role(role)
    if role not in SELF_ASSIGNABLE_ROLES:
        raise ValidationError("Role must be buyer or seller")

    if not await crud.email_available(email):
        raise ValidationError("Email already registered")
    if not await crud.username_available(username):
        raise ValidationError("Username already taken")

    user = await crud.create_user(name, email, username, hash_password(password), role.value)
    _logger.info(f"Registered user {user.id} ({user.username}) as {user.role}")
    return user


async def authenticate(email: str, password: str) -> User:
    """Return the user for valid credentials; raise AuthenticationError otherwise."""
    user = await crud.get_user_by_email(email.strip())
    if not user or not verify_password(password, user.password):
        raise AuthenticationError("Invalid email or password")
    return user


async def start_session(user: User, now: Optional[datetime] = None) -> Session:
    now = now or datetime.now(timezone.utc)
    expires = now + timedelta(hours=config.SESSION_TTL_HOURS)
    return await crud.create_session(new_session_token(), user.id, now, expires)


async def login(email: str, password: str) -> Tuple[User, Session]:
    user = await authenticate(email, password)
    session = await start_session(user)
    _logger.info(f"User {user.id} logged in")
    return user, session


async def logout(sid: Optional[str]) -> None:
    if sid:
        await crud.delete_session(sid)


async def user_for_session(sid: Optional[str], now: Optional[datetime] = None) -> User:
    """
    Resolve a session token to its user.

    Expired sessions are removed, together with every other expired session,
    and rejected.
    """
    if not sid:
        raise AuthenticationError()
    session = await crud.get_session(sid)
    if not session:
        raise AuthenticationError()
    now = now or datetime.now(timezone.utc)
    if datetime.fromisoformat(session.expires_at) <= now:
        purged = await crud.purge_expired_sessions(now)
        await crud.delete_session(sid)
        _logger.debug(f"Purged {purged} expired session(s)")
        raise AuthenticationError("Session expired")
    user = await crud.get_user(session.user_id)
    if not user:
        raise AuthenticationError()
    return user


async def get_user(user_id: int) -> User:
    user = await crud.get_user(user_id)
    if not user:
        raise NotFoundError("User", user_id)
    return user


async def update_profile(user: User, fields: Dict[str, Any]) -> User:
    if "name" in fields and not (fields["name"] or "").strip():
        raise ValidationError("Name cannot be empty")
    return await crud.update_user(user.id, fields)


async def list_users(actor: User) -> List[User]:
    require(actor, Action.MANAGE_USERS)
    return await crud.list_users()


async def change_role(actor: User, user_id: int, role: str) -> User:
    require(actor, Action.MANAGE_USERS)
    new_role = parse_role(role)
    updated = await crud.set_user_role(user_id, new_role.value)
    if not updated:
        raise NotFoundError("User", user_id)
    _logger.info(f"Admin {actor.id} changed role of user {user_id} to {new_role}")
    return updated
