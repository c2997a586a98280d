from typing import Any, Dict, List

from textual import events, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal
from textual.reactive import reactive
from textual.validation import Number
from textual.widgets import DataTable, Input, Label

from client.api_client import ApiError
from utils.messages import CartChangedMessage
from utils.pure import format_money, paginate
from views.base_screen import BaseScreen
from views.modal_prod_detail import ProdDetailModal

PAGE_SIZE = 10


class ProdSearchScreen(BaseScreen):
    """
    Browse and search the catalogue. Enter opens the product detail.
    """

    CSS = """
    #input-page {
        width: 16;
    }
    #input-category {
        width: 30;
    }
    """

    # footer hints only
    BINDINGS = [
        Binding("fn+shift+1", "abs(1)", "View Product", show=True, key_display="⏎"),
        Binding("escape", "abs(2)", "Exit Prod View", show=True),
    ]

    page_idx = reactive(1)
    page_cnt = reactive(1)

    def __init__(self):
        super().__init__()
        self._results: List[Dict[str, Any]] = []

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Horizontal(id="hort-search"):
            yield Input(
                id="input-search", placeholder="Start typing to search something..."
            )
            yield Input(id="input-category", placeholder="Category (optional)")
        yield DataTable(id="table-search-result")
        with Horizontal():
            yield Input("1", id="input-page", type="integer")
            yield Label(" / 1", id="label-total-page-cnt")

    def on_mount(self):
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns("ID", "Title", "Category", "Price", "In Stock", "Rating")

        self.query_one("#input-search").focus()
        self.update_search_result()

    async def on_input_changed(self, message: Input.Changed) -> None:
        if message.input.id in ("input-search", "input-category"):
            self.update_search_result()
        if message.input.id == "input-page" and message.value.isdigit():
            self.page_idx = int(message.value)

    async def on_key(self, event: events.Key) -> None:
        table = self.query_one(DataTable)
        if event.key == "enter" and self.focused == table and table.row_count:
            pid = table.get_row_at(table.cursor_row)[0]
            self.open_detail(int(pid))

    @work
    async def open_detail(self, pid: int) -> None:
        if await self.app.push_screen_wait(ProdDetailModal(pid)):
            self.app.post_message(CartChangedMessage())
            self.update_search_result()

    def validate_page_idx(self, page_idx):
        return max(1, min(page_idx, self.page_cnt))

    def watch_page_idx(self, _, new_page_idx):
        self.query_one("#input-page").value = str(new_page_idx)
        self.query_one("#input-page").validators = [
            Number(minimum=1, maximum=self.page_cnt)
        ]
        self._render_page()

    @work(exclusive=True)
    async def update_search_result(self) -> None:
        query = self.query_one("#input-search", Input).value.strip()
        category = self.query_one("#input-category", Input).value.strip()
        try:
            self._results = await self.app.state.client.list_products(
                category=category or None, search=query or None
            )
        except ApiError as e:
            self.notify(e.message, severity="error")
            return
        self.page_idx = 1
        self._render_page()

    def _render_page(self) -> None:
        rows, self.page_cnt = paginate(self._results, self.page_idx, PAGE_SIZE)
        table = self.query_one(DataTable)
        table.clear()
        table.add_rows(
            [
                (
                    p["id"],
                    p["title"],
                    p["category"],
                    format_money(p["price"]),
                    p["quantityAvailable"] or "sold out",
                    f"{p['averageRating']:.1f} ({p['reviewCount']})" if p["reviewCount"] else "-",
                )
                for p in rows
            ]
        )
        self.query_one("#label-total-page-cnt").update(f" / {self.page_cnt}")
