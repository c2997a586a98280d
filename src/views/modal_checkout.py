from typing import Any, Dict, List

from textual import events, on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Label, MarkdownViewer

from client.api_client import ApiError
from utils.pure import cart_total, format_money, generate_markdown_table
from views.modal_dialog import DialogModal


class CheckoutModal(ModalScreen[bool]):
    """
    Order summary plus shipping address. On submit, requests a payment intent
    for the total and places the order with it.
    Return True on success, False on failure.
    """

    def __init__(self, cart_items: List[Dict[str, Any]]):
        super().__init__()
        self.cart_items = cart_items

    def compose(self) -> ComposeResult:
        with Vertical():
            yield MarkdownViewer("", show_table_of_contents=False)
            yield Label("Shipping Address")
            yield Input(
                value=(self.app.state.user or {}).get("address") or "",
                placeholder="123 Main St, Anytown, ST 00000",
                id="input-address-line",
            )
            with Horizontal():
                yield Button("Go Back", id="btn-quit")
                yield Button("Place Order", id="btn-submit", variant="primary")

    async def on_mount(self):
        headers = ["Product", "Unit Price", "Quantity", "Line Total"]
        rows = [
            [
                item["product"]["title"],
                format_money(item["product"]["price"]),
                item["quantity"],
                format_money(item["product"]["price"] * item["quantity"]),
            ]
            for item in self.cart_items
        ]
        md = "### Order Summary\n\n" + generate_markdown_table(
            headers, rows, ["l", "c", "c", "c"]
        )
        md += f"\n\n**Subtotal:** {format_money(cart_total(self.cart_items))}"
        await self.query_one(MarkdownViewer).document.update(md)
        self.query_one("#input-address-line").focus()

    def on_key(self, event: events.Key) -> None:
        if event.key == "escape":
            self.dismiss(False)

    @on(Button.Pressed, "#btn-submit")
    @work(exclusive=True)
    async def handle_submit(self):
        address_input = self.query_one("#input-address-line", Input)
        address_line = address_input.value.strip()
        if not address_line:
            address_input.focus()
            address_input.add_class("-invalid")
            self.notify("Address line is required.", severity="error")
            return

        if not await self.app.push_screen_wait(
            DialogModal(
                "Place order? This cannot be undone.",
                primary_text="Yes",
                secondary_text="No",
                tone="positive",
            )
        ):
            return

        client = self.app.state.client
        total = cart_total(self.cart_items)
        payment_intent_id = None
        try:
            intent = await client.create_payment_intent(total)
            payment_intent_id = intent["paymentIntentId"]
        except ApiError as e:
            # order can still be placed and paid on delivery
            self.notify(f"Payment unavailable: {e.message}", severity="warning")

        try:
            order = await client.place_order(
                [
                    {
                        "productId": item["productId"],
                        "quantity": item["quantity"],
                        "unitPrice": item["product"]["price"],
                    }
                    for item in self.cart_items
                ],
                total_amount=total,
                shipping_address=address_line,
                payment_intent_id=payment_intent_id,
            )
        except ApiError as e:
            self.notify(e.message, severity="error")
            return

        self.notify(f"Order placed. Your order number is {order['id']}.")
        self.dismiss(True)

    @on(Button.Pressed, "#btn-quit")
    def handle_quit(self):
        self.dismiss(False)
