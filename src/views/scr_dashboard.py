import asyncio
from typing import Any, Dict, List

from textual import on, work
from textual.app import ComposeResult
from textual.containers import Vertical
from textual.events import ScreenResume
from textual.widgets import MarkdownViewer

from client.api_client import ApiError
from utils import config
from utils.messages import ModeSwitchedMessage, NewOrderMessage, OrderStatusChangedMessage
from utils.pure import dashboard_summary, format_money, generate_markdown_table
from views.base_screen import BaseScreen


class DashboardScreen(BaseScreen):
    """
    Role-aware summary: order counts per status and revenue (or spend), plus
    low-stock products for sellers and admins.
    """

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical():
            yield MarkdownViewer(id="md-dashboard", show_table_of_contents=False)

    def on_mount(self) -> None:
        self.handle_reload()

    @on(NewOrderMessage)
    @on(OrderStatusChangedMessage)
    @on(ScreenResume)
    @on(ModeSwitchedMessage)
    @work(exclusive=True)
    async def handle_reload(self) -> None:
        state = self.app.state
        client = state.client
        try:
            if state.role == "buyer":
                orders, products = await client.list_buyer_orders(), []
            else:
                seller_id = state.uid if state.role == "seller" else None
                orders, products = await asyncio.gather(
                    client.list_orders(), client.list_products(seller_id=seller_id)
                )
        except ApiError as e:
            self.notify(e.message, severity="error")
            return

        own_ids = {p["id"] for p in products} if state.role == "seller" else None
        summary = dashboard_summary(
            orders, products, config.LOW_STOCK_THRESHOLD, seller_product_ids=own_ids
        )
        self.query_one("#md-dashboard", MarkdownViewer).document.update(
            self._render(state.role, summary)
        )

    @staticmethod
    def _render(role: str, summary: Dict[str, Any]) -> str:
        money_label = "Total Spent" if role == "buyer" else "Revenue"
        md = (
            f"### {role.capitalize()} Dashboard\n\n"
            f"- Orders: {summary['order_count']}\n"
            f"- Open Orders: {summary['open_orders']}\n"
            f"- {money_label} (excluding cancelled): {format_money(summary['revenue'])}\n"
        )
        if role != "buyer":
            md += f"- Products: {summary['product_count']}\n"

        md += "\n#### Orders by Status\n\n"
        md += generate_markdown_table(
            ["Status", "Count"],
            [[s.capitalize(), c] for s, c in summary["status_counts"].items()],
            ["l", "r"],
        )

        if role != "buyer":
            low: List[Dict[str, Any]] = summary["low_stock"]
            md += f"\n\n#### Low Stock (at most {config.LOW_STOCK_THRESHOLD} left)\n\n"
            if not low:
                md += "_All products are well stocked._"
            else:
                md += generate_markdown_table(
                    ["ID", "Title", "Left"],
                    [[p["id"], p["title"], p["quantityAvailable"]] for p in low],
                    ["r", "l", "r"],
                )
        return md
