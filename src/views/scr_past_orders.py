from typing import Any, Dict, List, Optional

from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.events import ScreenResume
from textual.reactive import reactive
from textual.validation import Number
from textual.widgets import Button, DataTable, Input, Label, MarkdownViewer

from client.api_client import ApiError
from utils.messages import ModeSwitchedMessage, NewOrderMessage
from utils.pure import format_money, paginate
from views.base_screen import BaseScreen

PAGE_SIZE = 5


class PastOrdersScreen(BaseScreen):
    """
    Browse orders with pagination and view details.

    Layout:
    - Markdown detail view at the top, showing selected order details.
    - Orders table below (reverse chronological), 5 per page with Prev/Next.

    Buyers see their own orders; subclasses override `fetch_orders`.
    """

    BINDINGS = [
        Binding("enter", "noop", "View Order Detail", show=True, key_display="⏎"),
        Binding("escape", "noop", "Back", show=True),
    ]

    page_idx = reactive(1)
    page_cnt = reactive(1)

    def __init__(self) -> None:
        super().__init__()
        self._orders: List[Dict[str, Any]] = []

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical():
            yield MarkdownViewer(id="md-order-detail", show_table_of_contents=False)
            yield DataTable(id="table-orders")
        with Horizontal(id="hort-table-control"):
            yield Button("Refresh", id="btn-refresh")
            yield Button("<", id="btn-prev")
            yield Input("1", id="input-page", type="integer")
            yield Label(" / 1", id="label-total-page-cnt")
            yield Button(">", id="btn-next")

    def on_mount(self) -> None:
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns("Order No", "Date", "Status", "Items", "Total")
        self._load_orders()

    async def fetch_orders(self) -> List[Dict[str, Any]]:
        return await self.app.state.client.list_buyer_orders()

    @on(Button.Pressed, "#btn-refresh")
    @on(ModeSwitchedMessage)
    @on(ScreenResume)
    @on(NewOrderMessage)
    def handle_refresh(self):
        self._load_orders()

    @on(DataTable.RowHighlighted)
    def handle_row_highlight(self) -> None:
        self._render_detail(self.selected_order())

    def selected_order(self) -> Optional[Dict[str, Any]]:
        table = self.query_one(DataTable)
        if table.row_count == 0 or table.cursor_row is None:
            return None
        ono = int(table.get_row_at(table.cursor_row)[0])
        return next((o for o in self._orders if o["id"] == ono), None)

    def watch_page_idx(self, old: int, new: int) -> None:
        self.query_one("#input-page", Input).value = str(new)
        self._render_page()

    def _refresh_buttons(self) -> None:
        self.query_one("#btn-prev", Button).disabled = self.page_idx <= 1
        self.query_one("#btn-next", Button).disabled = self.page_idx >= self.page_cnt
        self.query_one("#input-page", Input).validators = [
            Number(minimum=1, maximum=self.page_cnt)
        ]

    @on(Button.Pressed, "#btn-prev")
    def handle_prev(self) -> None:
        if self.page_idx > 1:
            self.page_idx -= 1

    @on(Button.Pressed, "#btn-next")
    def handle_next(self) -> None:
        if self.page_idx < self.page_cnt:
            self.page_idx += 1

    @on(Input.Changed, "#input-page")
    def handle_page_input(self, ev: Input.Changed) -> None:
        if ev.value and ev.value.isdigit():
            new_idx = max(1, min(int(ev.value), self.page_cnt))
            if new_idx != self.page_idx:
                self.page_idx = new_idx

    @work(exclusive=True, group="orders")
    async def _load_orders(self) -> None:
        try:
            self._orders = await self.fetch_orders()
        except ApiError as e:
            self.notify(e.message, severity="error")
            return
        self._render_page()

    def _render_page(self) -> None:
        orders, self.page_cnt = paginate(self._orders, self.page_idx, PAGE_SIZE)
        table = self.query_one(DataTable)
        table.clear()
        for o in orders:
            table.add_row(
                o["id"],
                o["createdAt"][:16].replace("T", " "),
                o["status"],
                sum(i["quantity"] for i in o["items"]),
                format_money(o["totalAmount"]),
            )
        self.query_one("#label-total-page-cnt", Label).update(f" / {self.page_cnt}")
        self._refresh_buttons()
        if orders:
            table.cursor_coordinate = (0, 0)
        self._render_detail(orders[0] if orders else None)

    def _render_detail(self, order: Optional[Dict[str, Any]]) -> None:
        if not order:
            md = """### Select an order to view its details."""
            self.query_one("#md-order-detail", MarkdownViewer).document.update(md)
            return

        header = (
            f"### Order #{order['id']} ({order['status']})\n"
            f"Date: {order['createdAt'][:19].replace('T', ' ')}  \n"
            f"Buyer ID: {order['buyerId']}  \n"
            f"Ship To: {order.get('shippingAddress') or '-'}\n\n"
        )
        rows = [
            "| Product | Qty | Unit Price | Line Total |",
            "|---|---:|---:|---:|",
        ]
        for item in order["items"]:
            name = item["productTitle"]
            if item["productId"] is None:
                name += " (removed)"
            line_total = item["quantity"] * item["unitPrice"]
            rows.append(
                f"| {name} | {item['quantity']} | {item['unitPrice']:.2f} | {line_total:.2f} |"
            )
        footer = f"\n\n**Grand Total:** {format_money(order['totalAmount'])}"
        md = header + "\n".join(rows) + footer
        self.query_one("#md-order-detail", MarkdownViewer).document.update(md)
