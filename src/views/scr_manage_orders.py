from typing import Any, Dict, List, Optional

from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal
from textual.widgets import Button, DataTable, Label, Select

from client.api_client import ApiError
from utils.messages import OrderStatusChangedMessage
from utils.pure import next_statuses
from views.modal_dialog import DialogModal
from views.scr_past_orders import PastOrdersScreen


class ManageOrdersScreen(PastOrdersScreen):
    """
    Sellers see orders containing their products, admins every order.
    Both can move the highlighted order to its next status.
    """

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Horizontal(id="hort-status-control"):
            yield Label("Move to: ")
            yield Select([], prompt="no further status", id="select-status")
            yield Button("Update Status", id="btn-update-status", variant="warning")

    async def fetch_orders(self) -> List[Dict[str, Any]]:
        return await self.app.state.client.list_orders()

    def _render_detail(self, order: Optional[Dict[str, Any]]) -> None:
        super()._render_detail(order)
        options = next_statuses(order["status"]) if order else []
        select = self.query_one("#select-status", Select)
        select.set_options([(s.capitalize(), s) for s in options])
        self.query_one("#btn-update-status", Button).disabled = not options

    @on(Button.Pressed, "#btn-update-status")
    @work(exclusive=True)
    async def handle_update_status(self) -> None:
        order = self.selected_order()
        status = self.query_one("#select-status", Select).value
        if not order or status == Select.BLANK:
            self.notify("Pick an order and a new status first.", severity="warning")
            return

        tone = "error" if status == "cancelled" else "warning"
        if not await self.app.push_screen_wait(
            DialogModal(
                f"Change order #{order['id']} from {order['status']} to {status}?",
                primary_text="Yes",
                secondary_text="No",
                tone=tone,
            )
        ):
            return

        try:
            await self.app.state.client.update_order_status(order["id"], str(status))
        except ApiError as e:
            self.notify(e.message, severity="error")
            return
        self.notify(f"Order #{order['id']} is now {status}. The buyer has been notified.")
        self.post_message(OrderStatusChangedMessage(order["id"], str(status)))
        self._load_orders()

    @on(DataTable.RowSelected)
    def handle_row_selected(self) -> None:
        self.query_one("#select-status", Select).focus()
