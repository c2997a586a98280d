from typing import Any, Dict, List

from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.events import ScreenResume
from textual.widgets import Button, Checkbox, DataTable

from client.api_client import ApiError
from views.base_screen import BaseScreen


class NotificationsScreen(BaseScreen):
    """
    Newest first. The app polls the unread count in the background; this
    screen reloads the list whenever it is shown or refreshed.
    """

    def __init__(self) -> None:
        super().__init__()
        self._notifications: List[Dict[str, Any]] = []

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical():
            yield DataTable(id="table-notifications")
            with Horizontal(id="hort-buttons"):
                yield Checkbox("Unread only", id="chk-unread")
                yield Button("Refresh", id="btn-refresh")
                yield Button("Mark Read", id="btn-mark-read")
                yield Button("Mark All Read", id="btn-mark-all", variant="primary")

    def on_mount(self) -> None:
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns("ID", "", "Type", "Title", "Message", "When")
        self.load()

    @on(ScreenResume)
    @on(Button.Pressed, "#btn-refresh")
    @on(Checkbox.Changed, "#chk-unread")
    @work(exclusive=True)
    async def load(self) -> None:
        unread_only = self.query_one("#chk-unread", Checkbox).value
        try:
            self._notifications = await self.app.state.client.list_notifications(
                unread_only=unread_only
            )
        except ApiError as e:
            self.notify(e.message, severity="error")
            return

        table = self.query_one(DataTable)
        table.clear()
        for n in self._notifications:
            table.add_row(
                n["id"],
                "" if n["isRead"] else "●",
                n["type"].replace("_", " "),
                n["title"],
                n["message"],
                n["createdAt"][:16].replace("T", " "),
            )

    @on(Button.Pressed, "#btn-mark-read")
    @on(DataTable.RowSelected)
    @work(exclusive=True, group="mark")
    async def handle_mark_read(self) -> None:
        table = self.query_one(DataTable)
        if table.row_count == 0:
            return
        nid = int(table.get_row_at(table.cursor_row)[0])
        try:
            await self.app.state.client.mark_notification_read(nid)
        except ApiError as e:
            self.notify(e.message, severity="error")
            return
        self.app.poll_notifications()
        self.load()

    @on(Button.Pressed, "#btn-mark-all")
    @work(exclusive=True, group="mark")
    async def handle_mark_all(self) -> None:
        try:
            count = await self.app.state.client.mark_all_notifications_read()
        except ApiError as e:
            self.notify(e.message, severity="error")
            return
        self.notify(f"Marked {count} notification(s) as read.")
        self.app.poll_notifications()
        self.load()
