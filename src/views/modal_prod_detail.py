from typing import Any, Dict, List

from textual import events, on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.reactive import reactive
from textual.screen import ModalScreen
from textual.validation import Number
from textual.widgets import Button, Input, Label, MarkdownViewer

from client.api_client import ApiError
from utils.pure import format_money, generate_markdown_table
from views.modal_dialog import FormDialogModal


class ProdDetailModal(ModalScreen[bool]):
    """
    prod detail and reviews, plus add to cart, review, modification request
    and messaging the seller.
    Will return true if cart changed, false if not
    """

    CSS = """
    #input-order-qty {
        width: 10;
    }
    #btn-sub-qty {
        min-width: 4
    }
    #btn-add-qty {
        min-width: 4
    }
    """

    order_qty = reactive(1)

    def __init__(self, pid: int) -> None:
        super().__init__()

        self._pid = pid
        self._prod: Dict[str, Any] = {}

    def compose(self) -> ComposeResult:
        with Horizontal(id="hort-prod-detail"):
            yield MarkdownViewer("", show_table_of_contents=False)
            with Vertical():
                yield Label("Order Quantity")
                with Horizontal():
                    yield Button("-", id="btn-sub-qty")
                    yield Input(value="1", id="input-order-qty", type="integer")
                    yield Button("+", id="btn-add-qty")
                yield Button("Add to Cart", id="btn-addcart", variant="primary")
                yield Button("Write Review", id="btn-review")
                yield Button("Request Modification", id="btn-modreq")
                yield Button("Message Seller", id="btn-message")
                yield Button("Go Back", id="btn-quit")

    async def on_mount(self):
        await self.load_product()
        if not self._prod:
            return

        role = self.app.state.role
        if role != "buyer":
            self.query_one("#btn-modreq").display = False
        if self._prod["sellerId"] == self.app.state.uid:
            self.query_one("#btn-message").display = False

        self.query_one("#input-order-qty").focus()

    async def load_product(self) -> None:
        client = self.app.state.client
        try:
            self._prod = await client.get_product(self._pid)
            reviews = await client.list_reviews(self._pid)
        except ApiError as e:
            self.notify(e.message, severity="error")
            self.dismiss(False)
            return

        await self.query_one(MarkdownViewer).document.update(
            self._render_markdown(self._prod, reviews)
        )

        stock_cnt = self._prod["quantityAvailable"]
        if stock_cnt < 1:
            order_btn = self.query_one("#btn-addcart")
            order_btn.label = "Out of Stock"
            order_btn.disabled = True
            order_btn.variant = "warning"

        self.query_one("#input-order-qty").validators = [
            Number(minimum=1, maximum=max(stock_cnt, 1))
        ]

    @staticmethod
    def _render_markdown(prod: Dict[str, Any], reviews: List[Dict[str, Any]]) -> str:
        rows = [
            ["ID", prod["id"]],
            ["Category", prod["category"]],
            ["Price", format_money(prod["price"])],
            ["In Stock", prod["quantityAvailable"]],
            ["Seller ID", prod["sellerId"]],
            [
                "Rating",
                f"{prod['averageRating']:.1f} / 5 ({prod['reviewCount']} reviews)"
                if prod["reviewCount"]
                else "No reviews yet",
            ],
        ]
        md = f"### {prod['title']}\n\n"
        if prod.get("description"):
            md += prod["description"] + "\n\n"
        md += generate_markdown_table(["Attribute", "Value"], rows, ["l", "l"])

        md += "\n\n#### Reviews\n\n"
        if not reviews:
            md += "_No reviews yet._"
        for r in reviews:
            stars = "★" * r["rating"] + "☆" * (5 - r["rating"])
            author = r["buyer"]["name"] if r.get("buyer") else f"User {r['buyerId']}"
            md += f"- {stars} **{author}**: {r['comment']}\n"
        return md

    def on_key(self, event: events.Key) -> None:
        if event.key == "escape":
            self.dismiss(False)

    async def on_input_changed(self, message: Input.Changed) -> None:
        if (
            message.input.id == "input-order-qty"
            and message.input.is_valid
            and self.focused == message.input
        ):
            self.order_qty = int(message.value)

    async def watch_order_qty(self, qty: int):
        if not self._prod:
            return
        btn_sub_qty = self.query_one("#btn-sub-qty")
        btn_add_qty = self.query_one("#btn-add-qty")

        btn_sub_qty.disabled = qty <= 1
        btn_add_qty.disabled = qty >= self._prod["quantityAvailable"]

        self.query_one("#input-order-qty").value = str(qty)

    @on(Button.Pressed, "#btn-add-qty")
    def handle_add_qty(self):
        self.order_qty += 1

    @on(Button.Pressed, "#btn-sub-qty")
    def handle_sub_qty(self):
        self.order_qty = max(1, self.order_qty - 1)

    @on(Button.Pressed, "#btn-quit")
    def handle_quit(self):
        self.dismiss(False)

    @on(Button.Pressed, "#btn-addcart")
    @work(exclusive=True)
    async def handle_addcart(self):
        try:
            item = await self.app.state.client.add_to_cart(self._pid, self.order_qty)
        except ApiError as e:
            self.notify(e.message, severity="error")
            return
        self.app.notify(f"Added to cart. You now have {item['quantity']} in your cart.")
        self.dismiss(True)

    @on(Button.Pressed, "#btn-review")
    @work(exclusive=True)
    async def handle_review(self):
        values = await self.app.push_screen_wait(
            FormDialogModal(
                f"Review {self._prod['title']}",
                [("comment", "Comment", "")],
                select=("rating", "Rating", ["5", "4", "3", "2", "1"]),
            )
        )
        if not values:
            return
        try:
            await self.app.state.client.create_review(
                self._pid, int(values["rating"]), values["comment"]
            )
        except ApiError as e:
            self.notify(e.message, severity="error")
            return
        self.notify("Thanks for your review!")
        await self.load_product()

    @on(Button.Pressed, "#btn-modreq")
    @work(exclusive=True)
    async def handle_modification_request(self):
        values = await self.app.push_screen_wait(
            FormDialogModal(
                "Describe the change you would like the seller to make",
                [("details", "Details (at least 10 characters)", "")],
            )
        )
        if not values:
            return
        try:
            await self.app.state.client.request_modification(self._pid, values["details"])
        except ApiError as e:
            self.notify(e.message, severity="error")
            return
        self.notify("Request sent to the seller.")

    @on(Button.Pressed, "#btn-message")
    @work(exclusive=True)
    async def handle_message(self):
        values = await self.app.push_screen_wait(
            FormDialogModal(
                f"Message the seller of {self._prod['title']}",
                [("content", "Message", "")],
                submit_text="Send",
            )
        )
        if not values:
            return
        try:
            await self.app.state.client.send_message(self._prod["sellerId"], values["content"])
        except ApiError as e:
            self.notify(e.message, severity="error")
            return
        self.notify("Message sent.")
