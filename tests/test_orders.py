import asyncio
import unittest
from unittest.mock import AsyncMock, patch

import aiosqlite

from db import crud
from db_case import ADMIN_ID, ALICE_ID, BOB_ID, CAROL_ID, DAVE_ID, DbTestCase
from services import cart, orders, products, roles
from services.orders import OrderLine, OrderStatus
from services.roles import Action, Role
from utils.errors import (
    InsufficientStockError,
    InvalidStatusTransitionError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)


class StatusGraphTestCase(unittest.TestCase):
    def test_forward_moves_and_cancel(self):
        self.assertEqual(
            orders.allowed_transitions("pending"),
            ["processing", "shipped", "delivered", "cancelled"],
        )
        self.assertEqual(orders.allowed_transitions("shipped"), ["delivered", "cancelled"])
        self.assertTrue(orders.can_transition("pending", "shipped"))
        self.assertFalse(orders.can_transition("shipped", "processing"))
        self.assertFalse(orders.can_transition("processing", "processing"))

    def test_terminal_statuses_have_no_exits(self):
        for status in orders.TERMINAL_STATUSES:
            self.assertEqual(orders.allowed_transitions(status), [])

    def test_parse_status(self):
        self.assertIs(orders.parse_status("shipped"), OrderStatus.SHIPPED)
        with self.assertRaises(ValidationError):
            orders.parse_status("lost")

    def test_status_copy(self):
        self.assertEqual(
            orders.status_copy(7, "shipped"),
            ("Order Shipped", "Your order #7 has been shipped! It's on the way."),
        )
        self.assertEqual(orders.status_copy(7, "pending")[0], "Order Update")


class PlaceOrderTestCase(DbTestCase):
    async def test_place_order_notifies_buyer_and_each_seller(self):
        dave = await self.user(DAVE_ID)
        order, items = await orders.place_order(
            dave, [OrderLine(2, 1), OrderLine(3, 1)], total_amount=78.5
        )
        self.assertEqual(order.status, "pending")
        self.assertEqual(order.total_amount, 78.5)
        # defaults to the buyer's stored address
        self.assertEqual(order.shipping_address, "12 Market Street, Springfield")
        self.assertEqual(len(items), 2)

        (buyer_note,) = await crud.list_notifications(DAVE_ID)
        self.assertEqual(buyer_note.type, "order_update")
        self.assertEqual(buyer_note.title, "Order Placed")
        self.assertEqual(buyer_note.data, {"orderId": order.id, "status": "pending"})

        for seller_id in (ALICE_ID, BOB_ID):
            (note,) = await crud.list_notifications(seller_id)
            self.assertEqual(note.type, "system")
            self.assertEqual(note.message, f"You have a new order #{order.id} containing your products.")

    async def test_place_order_failure_leaves_no_trace(self):
        dave = await self.user(DAVE_ID)
        with self.assertRaises(InsufficientStockError):
            await orders.place_order(dave, [OrderLine(2, 1), OrderLine(5, 1)])
        self.assertEqual(await self.stock(2), 25)
        self.assertEqual(len(await crud.list_cart(DAVE_ID)), 1)
        self.assertEqual(await crud.list_notifications(DAVE_ID), [])
        self.assertEqual(await crud.list_orders_by_buyer(DAVE_ID), [])

    async def test_place_order_rejects_bad_input(self):
        dave = await self.user(DAVE_ID)
        with self.assertRaises(ValidationError):
            await orders.place_order(dave, [])
        with self.assertRaises(ValidationError):
            await orders.place_order(dave, [OrderLine(2, 0)])
        with self.assertRaises(ValidationError):
            await orders.place_order(dave, [OrderLine(2, 1)], total_amount=-1)
        with self.assertRaises(NotFoundError):
            await orders.place_order(dave, [OrderLine(404, 1)])

    async def test_notification_failure_does_not_fail_checkout(self):
        dave = await self.user(DAVE_ID)
        failing = AsyncMock(side_effect=aiosqlite.OperationalError("disk I/O error"))
        with patch.object(crud, "create_notification", failing):
            order, _ = await orders.place_order(dave, [OrderLine(6, 2)])
        self.assertEqual(order.total_amount, 60.0)
        self.assertEqual(await self.stock(6), 38)
        self.assertTrue(failing.await_count >= 2)

    async def test_concurrent_checkouts_never_oversell(self):
        carol, dave = await self.user(CAROL_ID), await self.user(DAVE_ID)
        # product 3 has 3 left, each buyer wants 2
        results = await asyncio.gather(
            orders.place_order(carol, [OrderLine(3, 2)]),
            orders.place_order(dave, [OrderLine(3, 2)]),
            return_exceptions=True,
        )
        failures = [r for r in results if isinstance(r, Exception)]
        self.assertEqual(len(failures), 1)
        self.assertIsInstance(failures[0], InsufficientStockError)
        self.assertEqual(await self.stock(3), 1)


class CartCheckoutTestCase(DbTestCase):
    async def test_merged_cart_row_checks_out_as_one_item(self):
        carol = await self.user(CAROL_ID)
        self.assertEqual(await crud.list_cart(CAROL_ID), [])

        # product 4 has 5 in stock at 120.00
        await cart.add_item(carol, 4, 2)
        await cart.add_item(carol, 4, 1)
        (row,) = await crud.list_cart(CAROL_ID)
        self.assertEqual(row.quantity, 3)

        order, (item,) = await orders.place_order(carol, [OrderLine(row.product_id, row.quantity)])
        self.assertEqual((item.product_id, item.quantity, item.unit_price), (4, 3, 120.0))
        self.assertEqual(order.total_amount, 360.0)
        self.assertEqual(await self.stock(4), 2)
        self.assertEqual(await crud.list_cart(CAROL_ID), [])

        updates = [n for n in await crud.list_notifications(CAROL_ID) if n.type == "order_update"]
        self.assertEqual(len(updates), 1)
        self.assertEqual(updates[0].data, {"orderId": order.id, "status": "pending"})


class UpdateStatusTestCase(DbTestCase):
    async def asyncSetUp(self):
        await super().asyncSetUp()
        self.dave = await self.user(DAVE_ID)
        self.bob = await self.user(BOB_ID)
        self.order, _ = await orders.place_order(self.dave, [OrderLine(3, 1)])

    async def test_seller_moves_order_forward_and_buyer_is_told(self):
        unread = await crud.count_unread_notifications(DAVE_ID)
        updated = await orders.update_status(self.bob, self.order.id, "shipped")
        self.assertEqual(updated.status, "shipped")
        self.assertEqual(await crud.count_unread_notifications(DAVE_ID), unread + 1)

        latest = (await crud.list_notifications(DAVE_ID))[0]
        self.assertEqual(latest.title, "Order Shipped")
        self.assertEqual(latest.data, {"orderId": self.order.id, "status": "shipped"})

        updated = await orders.update_status(self.bob, self.order.id, "delivered")
        self.assertEqual(updated.status, "delivered")
        self.assertEqual(await crud.count_unread_notifications(DAVE_ID), unread + 2)
        with self.assertRaises(InvalidStatusTransitionError):
            await orders.update_status(self.bob, self.order.id, "cancelled")

    async def test_rejected_transitions_change_nothing(self):
        await orders.update_status(self.bob, self.order.id, "shipped")
        notes_before = len(await crud.list_notifications(DAVE_ID))

        with self.assertRaises(InvalidStatusTransitionError):
            await orders.update_status(self.bob, self.order.id, "processing")
        with self.assertRaises(InvalidStatusTransitionError):
            await orders.update_status(self.bob, self.order.id, "shipped")
        with self.assertRaises(ValidationError):
            await orders.update_status(self.bob, self.order.id, "teleported")

        self.assertEqual((await crud.get_order(self.order.id)).status, "shipped")
        self.assertEqual(len(await crud.list_notifications(DAVE_ID)), notes_before)

    async def test_who_may_update(self):
        alice = await self.user(ALICE_ID)
        with self.assertRaises(PermissionDeniedError):
            await orders.update_status(alice, self.order.id, "processing")
        with self.assertRaises(PermissionDeniedError):
            await orders.update_status(self.dave, self.order.id, "cancelled")

        admin = await self.user(ADMIN_ID)
        self.assertEqual(
            (await orders.update_status(admin, self.order.id, "cancelled")).status, "cancelled"
        )
        with self.assertRaises(NotFoundError):
            await orders.update_status(admin, 987654, "shipped")

    async def test_seller_keeps_orders_for_deleted_product(self):
        dave = await self.user(DAVE_ID)
        order, _ = await orders.place_order(dave, [OrderLine(4, 1)])
        await products.delete_product(self.bob, 4)

        updated = await orders.update_status(self.bob, order.id, "shipped")
        self.assertEqual(updated.status, "shipped")
        _, (item,) = await orders.get_order(self.bob, order.id)
        self.assertIsNone(item.product_id)
        self.assertEqual((item.product_title, item.seller_id), ("Silver Ring", BOB_ID))
        self.assertIn(order.id, [o.id for o, _ in await orders.list_orders(self.bob)])

    async def test_stale_status_is_reported_as_invalid_transition(self):
        stale = await crud.get_order(self.order.id)
        await crud.update_order_status(self.order.id, "pending", "cancelled")
        with patch.object(crud, "get_order", AsyncMock(side_effect=[stale, await crud.get_order(self.order.id)])):
            with self.assertRaises(InvalidStatusTransitionError) as ctx:
                await orders.update_status(self.bob, self.order.id, "processing")
        self.assertEqual(ctx.exception.current, "cancelled")


class ReadOrdersTestCase(DbTestCase):
    async def test_list_orders_is_scoped_by_role(self):
        dave = await self.user(DAVE_ID)
        mine, _ = await orders.place_order(dave, [OrderLine(4, 1)])

        carol_orders = await orders.list_orders(await self.user(CAROL_ID))
        self.assertEqual([o.id for o, _ in carol_orders], [1])
        self.assertEqual(carol_orders[0][1][0].product_title, "Handwoven Basket")

        self.assertEqual([o.id for o, _ in await orders.list_orders(await self.user(BOB_ID))], [mine.id])
        self.assertEqual(len(await orders.list_orders(await self.user(ADMIN_ID))), 2)
        self.assertEqual([o.id for o, _ in await orders.list_buyer_orders(dave)], [mine.id])

    async def test_order_visibility_follows_permission_table(self):
        dave, bob = await self.user(DAVE_ID), await self.user(BOB_ID)
        order, _ = await orders.place_order(dave, [OrderLine(4, 1)])

        restricted = {Action.VIEW_SELLER_ORDERS: frozenset({Role.ADMIN})}
        with patch.dict(roles.PERMISSIONS, restricted):
            self.assertEqual(await orders.list_orders(bob), [])
            with self.assertRaises(PermissionDeniedError):
                await orders.get_order(bob, order.id)
        self.assertEqual([o.id for o, _ in await orders.list_orders(bob)], [order.id])

    async def test_get_order_access(self):
        order, items = await orders.get_order(await self.user(CAROL_ID), 1)
        self.assertEqual(items[0].quantity, 1)
        await orders.get_order(await self.user(ALICE_ID), 1)
        await orders.get_order(await self.user(ADMIN_ID), 1)

        with self.assertRaises(PermissionDeniedError):
            await orders.get_order(await self.user(DAVE_ID), 1)
        with self.assertRaises(PermissionDeniedError):
            await orders.get_order(await self.user(BOB_ID), 1)
        with self.assertRaises(NotFoundError):
            await orders.get_order(await self.user(ADMIN_ID), 555)
