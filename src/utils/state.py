from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Literal, Optional

from client.api_client import MarketplaceClient


@dataclass
class GlobalState:
    """
    Centralized application state shared by screens.

    Fields:
      - client: HTTP client holding the session cookie
      - user: the logged-in user as returned by the API (camelCase keys),
        or None before login
      - unread_notifications: last polled unread count, shown in the sidebar
    """

    client: MarketplaceClient = field(default_factory=MarketplaceClient)
    user: Optional[Dict[str, Any]] = None
    unread_notifications: int = 0

    @property
    def uid(self) -> Optional[int]:
        return self.user["id"] if self.user else None

    @property
    def role(self) -> Optional[Literal["buyer", "seller", "admin"]]:
        return self.user["role"] if self.user else None

    async def login(self, email: str, password: str) -> Dict[str, Any]:
        """Log in through the API and remember the user. Raises ApiError."""
        self.user = await self.client.login(email, password)
        return self.user

    async def refresh_user(self) -> Dict[str, Any]:
        self.user = await self.client.me()
        return self.user

    async def end_session(self) -> None:
        """
        End the current session if one exists.
        This is only called upon logging out or quitting
        """
        if self.user is None:
            return
        await self.client.logout()
        self.user = None
        self.unread_notifications = 0
