from typing import Any, Dict, List

from textual import on, work
from textual.app import ComposeResult
from textual.containers import Container, Horizontal, HorizontalGroup, VerticalScroll
from textual.events import ScreenResume
from textual.message import Message
from textual.widgets import Button, Label, Rule

from client.api_client import ApiError
from utils.messages import CartChangedMessage, ModeSwitchedMessage, NewOrderMessage
from utils.pure import cart_total, format_money
from views.base_screen import BaseScreen
from views.modal_checkout import CheckoutModal
from views.modal_dialog import DialogModal, FormDialogModal


class CartItemActionEditMessage(Message):
    bubble = True


class CartItemActionRemoveMessage(Message):
    bubble = True


class CartItemActionLabel(Label):
    def action_edit(self):
        self.post_message(CartItemActionEditMessage())

    def action_remove(self):
        self.post_message(CartItemActionRemoveMessage())


class CartItemWidget(HorizontalGroup):
    def __init__(self, item: Dict[str, Any]):
        super().__init__()
        self.item = item

    def compose(self):
        product = self.item["product"]
        with Container(id="div-cart-item-group"):
            with Container(id="div-item"):
                yield Label(product["title"], id="label-item-name")
                yield Label(f"x {self.item['quantity']}", id="label-item-qty")
                yield Label(format_money(product["price"]), id="label-item-price")
            with Container(id="div-actions"):
                yield CartItemActionLabel("[@click=edit()]Edit[/]", id="link-item-edit")
                yield CartItemActionLabel(
                    "[@click=remove()]Remove[/]", id="link-item-remove"
                )

    @on(CartItemActionEditMessage)
    @work()
    async def handle_edit_item(self):
        values = await self.app.push_screen_wait(
            FormDialogModal(
                f"Change quantity of {self.item['product']['title']}",
                [("quantity", "Quantity", str(self.item["quantity"]))],
                submit_text="Update",
            )
        )
        if not values:
            return
        if not values["quantity"].isdigit() or int(values["quantity"]) < 1:
            self.notify("Quantity must be a whole number of at least 1.", severity="error")
            return
        try:
            await self.app.state.client.update_cart_item(
                self.item["id"], int(values["quantity"])
            )
        except ApiError as e:
            self.notify(e.message, severity="error")
            return
        self.post_message(CartChangedMessage())

    @on(CartItemActionRemoveMessage)
    @work()
    async def handle_remove_item(self):
        remove_confirmed = await self.app.push_screen_wait(
            DialogModal(
                "Do you really want to remove this item from cart?",
                primary_text="Yes",
                secondary_text="No",
                tone="warning",
            )
        )

        if remove_confirmed:
            try:
                await self.app.state.client.remove_cart_item(self.item["id"])
            except ApiError as e:
                self.notify(e.message, severity="error")
                return
            self.post_message(CartChangedMessage())
            self.notify("Item removed from cart.", severity="information")


class CartScreen(BaseScreen):
    """
    Cart contents, clear and checkout
    """

    def __init__(self) -> None:
        super().__init__()
        self._items: List[Dict[str, Any]] = []

    def compose(self) -> ComposeResult:
        yield from super().compose()
        yield VerticalScroll(id="vertscroll-content")
        yield Label("Total Cart Value: $0.00", id="label-cart-total")
        yield Rule(line_style="dashed")
        with Horizontal(id="hort-buttons"):
            yield Button("Clear Cart", id="btn-clear-cart")
            yield Button("Refresh", id="btn-refresh")
            yield Button("Checkout", id="btn-checkout", variant="primary")

    async def on_mount(self):
        self.handle_cart_change()

    @on(CartChangedMessage)
    @on(ModeSwitchedMessage)
    @on(ScreenResume)
    @on(Button.Pressed, "#btn-refresh")
    @work(exclusive=True)  # exclusive, else concurrent reloads mount duplicates
    async def handle_cart_change(self):
        try:
            cart_items = await self.app.state.client.get_cart()
        except ApiError as e:
            self.notify(e.message, severity="error")
            return

        if cart_items == self._items:
            return
        self._items = cart_items

        content = self.query_one("#vertscroll-content")
        await content.remove_children()
        await content.mount_all([CartItemWidget(item) for item in cart_items])

        if not cart_items:
            content.add_class("no-items")
        else:
            content.remove_class("no-items")

        self.query_one("#label-cart-total").update(
            f"Total Cart Value: {format_money(cart_total(cart_items))}"
        )

    @on(Button.Pressed, "#btn-clear-cart")
    @work()
    async def handle_clear_cart(self) -> None:
        if not self._items:
            self.app.notify("Cart is empty.", severity="warning")
            return

        remove_confirmed = await self.app.push_screen_wait(
            DialogModal(
                "Do you really want to remove all items from cart?",
                primary_text="Yes",
                secondary_text="No",
                tone="error",
            )
        )
        if remove_confirmed:
            await self.app.state.client.clear_cart()
            self.post_message(CartChangedMessage())

    @on(Button.Pressed, "#btn-checkout")
    @work()
    async def handle_checkout(self) -> None:
        if not self._items:
            self.app.notify("Cart is empty.", severity="warning")
            return

        if await self.app.push_screen_wait(CheckoutModal(self._items)):
            self.app.post_message(NewOrderMessage())
        self.post_message(CartChangedMessage())
