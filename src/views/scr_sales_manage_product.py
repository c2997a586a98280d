from __future__ import annotations

from typing import Any, Dict, List, Optional

from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.events import ScreenResume
from textual.validation import Number
from textual.widgets import Button, Input, Label, MarkdownViewer, OptionList

from client.api_client import ApiError
from utils import config
from utils.pure import format_money, generate_markdown_table
from views.base_screen import BaseScreen
from views.modal_dialog import DialogModal, FormDialogModal


def _parse_product_form(values: Dict[str, str]) -> Optional[Dict[str, Any]]:
    try:
        price = float(values["price"])
        qty = int(values["quantityAvailable"])
    except ValueError:
        return None
    return {
        "title": values["title"],
        "description": values["description"] or None,
        "price": price,
        "category": values["category"],
        "quantityAvailable": qty,
        "images": [s.strip() for s in values["images"].split(",") if s.strip()],
    }


class SalesManageProductScreen(BaseScreen):
    """
    Sellers list their products, filter them, view one and update price/stock,
    list new products or delete old ones. Admins manage every product.
    """

    current_pid: Optional[int] = None

    def __init__(self) -> None:
        super().__init__()
        self._products: List[Dict[str, Any]] = []

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical():
            with Horizontal(id="hort-search"):
                yield Input(id="input-search", placeholder="Filter your products...")
                yield Button("New Product", id="btn-new", variant="primary")
            yield OptionList(id="optlist-prods")
            yield MarkdownViewer(id="md-prod", show_table_of_contents=False)
            with Horizontal(id="hort-controls"):
                with Horizontal(id="div-new-inputs"):
                    with Vertical():
                        yield Label("New Price ($):")
                        yield Input(
                            placeholder="leave blank to keep",
                            id="input-price",
                            type="number",
                            validators=[Number(minimum=0.0)],
                        )

                    with Vertical():
                        yield Label("New Stock:")
                        yield Input(
                            placeholder="leave blank to keep",
                            id="input-stock",
                            type="integer",
                            validators=[Number(minimum=0)],
                        )
                with Horizontal(id="div-button"):
                    yield Button("Update", id="btn-update", variant="success")
                    yield Button("Delete", id="btn-delete", variant="error")

    def on_mount(self) -> None:
        self.query_one("#input-search", Input).focus()
        self.query_one("#md-prod").add_class("hidden")
        self.query_one("#hort-controls").add_class("hidden")
        self.load_products()

    @on(ScreenResume)
    def handle_resume(self) -> None:
        self.load_products()

    def on_input_changed(self, message: Input.Changed) -> None:
        if message.input.id == "input-search":
            self.query_one("#optlist-prods").remove_class("hidden")
            self.update_optlist(message.value)

    def on_option_list_option_selected(self, message: OptionList.OptionSelected):
        self.current_pid = int(message.option.prompt.split(" ")[0])
        self.render_product()

        self.query_one("#md-prod").remove_class("hidden")
        self.query_one("#hort-controls").remove_class("hidden")

    @work(exclusive=True, group="load")
    async def load_products(self) -> None:
        seller_id = None if self.app.state.role == "admin" else self.app.state.uid
        try:
            self._products = await self.app.state.client.list_products(seller_id=seller_id)
        except ApiError as e:
            self.notify(e.message, severity="error")
            return
        self.update_optlist(self.query_one("#input-search", Input).value)

    def update_optlist(self, query: str):
        """
        fill option list with the products matching the filter
        """
        query = query.strip().lower()
        matches = [
            p
            for p in self._products
            if not query or query in p["title"].lower() or query in p["category"].lower()
        ]
        opt_list = self.query_one("#optlist-prods", OptionList)
        opt_list.clear_options()
        opt_list.add_options(
            [
                f"{p['id']} {p['title']} ({p['quantityAvailable']} left)"
                + (" LOW" if p["quantityAvailable"] <= config.LOW_STOCK_THRESHOLD else "")
                for p in matches
            ]
        )

    @work(exclusive=True)
    async def render_product(self) -> None:
        try:
            prod = await self.app.state.client.get_product(self.current_pid)
        except ApiError as e:
            self.notify(e.message, severity="error")
            return

        rows = [
            ["Title", prod["title"]],
            ["Category", prod["category"]],
            ["Price", format_money(prod["price"])],
            ["In Stock", prod["quantityAvailable"]],
            ["Rating", f"{prod['averageRating']:.1f} ({prod['reviewCount']})"],
            ["Images", ", ".join(prod["images"]) or "-"],
            ["Updated", prod["updatedAt"][:19].replace("T", " ")],
        ]
        md_table = generate_markdown_table(["Attribute", "Value"], rows, ["l", "l"])
        await self.query_one("#md-prod", MarkdownViewer).document.update(
            f"### Product Detail: {prod['title']}\n\n{prod.get('description') or ''}\n\n"
            + md_table
        )

        # prefill inputs with current values for convenience
        self.query_one("#input-price", Input).value = f"{prod['price']:.2f}"
        self.query_one("#input-stock", Input).value = str(prod["quantityAvailable"])

    @on(Button.Pressed, "#btn-update")
    @work(exclusive=True)
    async def handle_update(self) -> None:
        price_input = self.query_one("#input-price", Input)
        stock_input = self.query_one("#input-stock", Input)

        fields: Dict[str, Any] = {}
        if price_input.value.strip():
            if not price_input.is_valid:
                price_input.focus()
                price_input.add_class("-invalid")
                return
            fields["price"] = float(price_input.value)
        if stock_input.value.strip():
            if not stock_input.is_valid:
                stock_input.focus()
                stock_input.add_class("-invalid")
                return
            fields["quantityAvailable"] = int(stock_input.value)

        if not fields:
            self.notify("Nothing to update.", severity="warning")
            return

        try:
            await self.app.state.client.update_product(self.current_pid, **fields)
        except ApiError as e:
            self.notify(e.message, severity="error")
            return
        self.notify("Product updated successfully.")
        self.render_product()
        self.load_products()

    @on(Button.Pressed, "#btn-delete")
    @work(exclusive=True)
    async def handle_delete(self) -> None:
        if not await self.app.push_screen_wait(
            DialogModal(
                "Delete this product? Past orders keep their history.",
                primary_text="Delete",
                secondary_text="Keep",
                tone="error",
            )
        ):
            return
        try:
            await self.app.state.client.delete_product(self.current_pid)
        except ApiError as e:
            self.notify(e.message, severity="error")
            return
        self.notify("Product deleted.")
        self.current_pid = None
        self.query_one("#md-prod").add_class("hidden")
        self.query_one("#hort-controls").add_class("hidden")
        self.load_products()

    @on(Button.Pressed, "#btn-new")
    @work(exclusive=True)
    async def handle_new(self) -> None:
        values = await self.app.push_screen_wait(
            FormDialogModal(
                "List a new product",
                [
                    ("title", "Title", ""),
                    ("description", "Description", ""),
                    ("price", "Price ($)", ""),
                    ("category", "Category", ""),
                    ("quantityAvailable", "Stock", "1"),
                    ("images", "Image URLs (comma separated)", ""),
                ],
                submit_text="Create",
            )
        )
        if not values:
            return
        fields = _parse_product_form(values)
        if fields is None:
            self.notify("Price and stock must be numbers.", severity="error")
            return
        try:
            product = await self.app.state.client.create_product(**fields)
        except ApiError as e:
            self.notify(e.message, severity="error")
            return
        self.notify(f"Listed {product['title']} (#{product['id']}).")
        self.current_pid = product["id"]
        self.render_product()
        self.query_one("#md-prod").remove_class("hidden")
        self.query_one("#hort-controls").remove_class("hidden")
        self.load_products()
