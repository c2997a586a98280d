from typing import Dict, Optional

from textual import on, work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.timer import Timer
from textual.widgets import LoadingIndicator

from client.api_client import ApiError
from utils import config
from utils.logger import get_logger
from utils.messages import (
    ModeSwitchedMessage,
    NotificationsPolledMessage,
    QuitRequestedMessage,
    UserLogoutMessage,
)
from utils.state import GlobalState
from views.base_screen import Sidebar
from views.scr_admin_users import AdminUsersScreen
from views.scr_cart import CartScreen
from views.scr_dashboard import DashboardScreen
from views.scr_login import LoginScreen
from views.scr_manage_orders import ManageOrdersScreen
from views.scr_messages import MessagesScreen
from views.scr_mod_requests import ModRequestsScreen
from views.scr_notifications import NotificationsScreen
from views.scr_past_orders import PastOrdersScreen
from views.scr_prod_search import ProdSearchScreen
from views.scr_sales_manage_product import SalesManageProductScreen

_logger = get_logger(__name__)


class MarketplaceApp(App):
    BINDINGS = [
        Binding("ctrl+t", "switch_light", "Toggle Theme", show=True),
    ]

    MODES = {
        "dashboard": DashboardScreen,
        "prod_search": ProdSearchScreen,
        "cart": CartScreen,
        "past_orders": PastOrdersScreen,
        "ss_mgr": SalesManageProductScreen,
        "manage_orders": ManageOrdersScreen,
        "mod_requests": ModRequestsScreen,
        "notifications": NotificationsScreen,
        "messages": MessagesScreen,
        "admin_users": AdminUsersScreen,
    }

    MODE_TITLES = {
        "dashboard": "Dashboard",
        "prod_search": "Search Products",
        "cart": "Cart",
        "past_orders": "My Orders",
        "ss_mgr": "My Products",
        "manage_orders": "Orders",
        "mod_requests": "Modification Requests",
        "notifications": "Notifications",
        "messages": "Messages",
        "admin_users": "Users",
    }

    # first entry is the landing mode after login
    ROLE_MODES = {
        "buyer": [
            "prod_search",
            "cart",
            "past_orders",
            "mod_requests",
            "notifications",
            "messages",
            "dashboard",
        ],
        "seller": [
            "dashboard",
            "ss_mgr",
            "manage_orders",
            "mod_requests",
            "prod_search",
            "notifications",
            "messages",
        ],
        "admin": [
            "dashboard",
            "admin_users",
            "manage_orders",
            "ss_mgr",
            "notifications",
        ],
    }

    CSS_PATH = [
        "styles/index.tcss",
        "styles/login.tcss",
        "styles/screens.tcss",
    ]

    state: GlobalState

    def __init__(self, state: Optional[GlobalState] = None):
        super().__init__()
        self.state = state or GlobalState()
        self._poll_timer: Optional[Timer] = None

    def modes_for(self, role: Optional[str]) -> Dict[str, str]:
        return {m: self.MODE_TITLES[m] for m in self.ROLE_MODES.get(role, [])}

    def compose(self) -> ComposeResult:
        yield LoadingIndicator()

    async def on_mount(self) -> None:
        self.main_flow()

    async def on_unmount(self) -> None:
        await self.state.client.aclose()

    def action_switch_light(self):
        if self.theme == "textual-dark":
            self.theme = "solarized-light"
        else:
            self.theme = "textual-dark"
        self.notify(f"Theme changed to {self.theme}")

    @work(exclusive=True, group="poll")
    async def poll_notifications(self) -> None:
        if not self.state.user:
            return
        try:
            unread = await self.state.client.unread_notification_count()
        except ApiError as e:
            _logger.warning(f"Notification poll failed: {e.message}")
            return
        new_count = max(unread - self.state.unread_notifications, 0)
        self.state.unread_notifications = unread
        if new_count:
            self.notify(f"You have {new_count} new notification(s).", title="Notifications")
        for sidebar in self.screen.query(Sidebar):
            sidebar.post_message(NotificationsPolledMessage(unread, new_count))

    def _stop_polling(self) -> None:
        if self._poll_timer:
            self._poll_timer.stop()
            self._poll_timer = None

    async def _reset_modes(self) -> None:
        # mode screens are built for one user; drop them before the next login
        await self.switch_mode("_default")
        for mode, screen in self.MODES.items():
            await self.remove_mode(mode)
            self.add_mode(mode, screen)

    @on(UserLogoutMessage)
    @work
    async def handle_user_logout(self):
        self._stop_polling()
        try:
            await self.state.end_session()
        except ApiError as e:
            _logger.warning(f"Logout request failed: {e.message}")
            self.state.user = None
        await self._reset_modes()
        self.notify("Logout successful.")
        self.main_flow()

    @on(QuitRequestedMessage)
    @work
    async def handle_quit(self):
        self._stop_polling()
        if self.state.user:
            try:
                await self.state.end_session()
            except ApiError as e:
                _logger.warning(f"Logout on quit failed: {e.message}")
        self.exit()

    @work
    async def main_flow(self):
        await self.push_screen_wait(LoginScreen())
        home = self.ROLE_MODES[self.state.role][0]
        self.post_message(ModeSwitchedMessage(self.current_mode, home))
        await self.switch_mode(home)

        self.poll_notifications()
        self._poll_timer = self.set_interval(
            config.NOTIFICATION_POLL_SECONDS, self.poll_notifications
        )


def main() -> None:
    MarketplaceApp().run()


if __name__ == "__main__":
    main()
