from typing import Any, Dict, List

from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.events import ScreenResume
from textual.widgets import Button, DataTable

from client.api_client import ApiError
from views.base_screen import BaseScreen
from views.modal_dialog import DialogModal, FormDialogModal

ROLES = ["buyer", "seller", "admin"]


class AdminUsersScreen(BaseScreen):
    """
    Admins list every user and reassign roles.
    """

    def __init__(self) -> None:
        super().__init__()
        self._users: List[Dict[str, Any]] = []

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical():
            yield DataTable(id="table-users")
            with Horizontal(id="hort-buttons"):
                yield Button("Refresh", id="btn-refresh")
                yield Button("Change Role", id="btn-role", variant="warning")

    def on_mount(self) -> None:
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns("ID", "Name", "Username", "Email", "Role", "Joined")
        self.load()

    @on(ScreenResume)
    @on(Button.Pressed, "#btn-refresh")
    @work(exclusive=True)
    async def load(self) -> None:
        try:
            self._users = await self.app.state.client.list_users()
        except ApiError as e:
            self.notify(e.message, severity="error")
            return
        table = self.query_one(DataTable)
        table.clear()
        for u in self._users:
            table.add_row(
                u["id"], u["name"], u["username"], u["email"], u["role"], u["createdAt"][:10]
            )

    @on(Button.Pressed, "#btn-role")
    @on(DataTable.RowSelected)
    @work(exclusive=True, group="role")
    async def handle_change_role(self) -> None:
        table = self.query_one(DataTable)
        if table.row_count == 0:
            return
        uid = int(table.get_row_at(table.cursor_row)[0])
        user = next(u for u in self._users if u["id"] == uid)

        others = [r for r in ROLES if r != user["role"]]
        values = await self.app.push_screen_wait(
            FormDialogModal(
                f"Change role of {user['name']} (currently {user['role']})",
                [],
                select=("role", "New role", others),
                submit_text="Apply",
            )
        )
        if not values:
            return
        if uid == self.app.state.uid and values["role"] != "admin":
            if not await self.app.push_screen_wait(
                DialogModal(
                    "You are removing your own admin rights. Continue?",
                    primary_text="Yes",
                    secondary_text="No",
                    tone="error",
                )
            ):
                return
        try:
            await self.app.state.client.change_role(uid, values["role"])
        except ApiError as e:
            self.notify(e.message, severity="error")
            return
        self.notify(f"{user['name']} is now {values['role']}.")
        if uid == self.app.state.uid:
            await self.app.state.refresh_user()
        self.load()
