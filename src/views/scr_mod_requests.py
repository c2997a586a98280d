from typing import Any, Dict, List

from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.events import ScreenResume
from textual.widgets import Button, DataTable, Markdown

from client.api_client import ApiError
from views.base_screen import BaseScreen
from views.modal_dialog import FormDialogModal


class ModRequestsScreen(BaseScreen):
    """
    Buyers follow the modification requests they made. Sellers see requests
    for their products and respond to them.
    """

    def __init__(self) -> None:
        super().__init__()
        self._requests: List[Dict[str, Any]] = []

    @property
    def is_seller_view(self) -> bool:
        return self.app.state.role in ("seller", "admin")

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical():
            yield DataTable(id="table-requests")
            yield Markdown("", id="md-request")
            with Horizontal(id="hort-buttons"):
                yield Button("Refresh", id="btn-refresh")
                yield Button("Respond", id="btn-respond", variant="primary")

    def on_mount(self) -> None:
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        who = "Buyer" if self.is_seller_view else "Seller"
        table.add_columns("ID", "Product", who, "Status", "Updated")
        self.query_one("#btn-respond").display = self.is_seller_view
        self.load()

    @on(ScreenResume)
    @on(Button.Pressed, "#btn-refresh")
    @work(exclusive=True)
    async def load(self) -> None:
        client = self.app.state.client
        try:
            if self.is_seller_view:
                self._requests = await client.seller_modification_requests()
            else:
                self._requests = await client.buyer_modification_requests()
        except ApiError as e:
            self.notify(e.message, severity="error")
            return

        table = self.query_one(DataTable)
        table.clear()
        for r in self._requests:
            table.add_row(
                r["id"],
                r["productId"],
                r["buyerId"] if self.is_seller_view else r["sellerId"],
                r["status"],
                r["updatedAt"][:16].replace("T", " "),
            )
        await self._show_selected()

    def _selected(self) -> Dict[str, Any] | None:
        table = self.query_one(DataTable)
        if table.row_count == 0:
            return None
        rid = int(table.get_row_at(table.cursor_row)[0])
        return next((r for r in self._requests if r["id"] == rid), None)

    @on(DataTable.RowHighlighted)
    async def _show_selected(self) -> None:
        request = self._selected()
        if not request:
            await self.query_one("#md-request", Markdown).update("_No requests._")
            return
        md = (
            f"**Request #{request['id']}** for product {request['productId']} "
            f"({request['status']})\n\n"
            f"{request['requestDetails']}\n\n"
            f"**Seller response:** {request.get('sellerResponse') or '_none yet_'}"
        )
        await self.query_one("#md-request", Markdown).update(md)

    @on(Button.Pressed, "#btn-respond")
    @work(exclusive=True, group="respond")
    async def handle_respond(self) -> None:
        request = self._selected()
        if not request:
            self.notify("Pick a request first.", severity="warning")
            return
        values = await self.app.push_screen_wait(
            FormDialogModal(
                f"Respond to request #{request['id']}",
                [("response", "Response", request.get("sellerResponse") or "")],
                select=("status", "Status", ["approved", "denied", "pending"]),
                submit_text="Send",
            )
        )
        if not values:
            return
        try:
            await self.app.state.client.respond_modification_request(
                request["id"], values["status"], values["response"]
            )
        except ApiError as e:
            self.notify(e.message, severity="error")
            return
        self.notify("Response sent. The buyer has been notified.")
        self.load()
