import unittest
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, patch

import aiosqlite

from db import crud
from db import database as db_database
from db_case import ALICE_ID, BOB_ID, CAROL_ID, DAVE_ID, DbTestCase, use_temp_db
from utils.errors import InsufficientStockError, NotFoundError, ValidationError


class CrudTestCase(DbTestCase):
    # ---------- Users ----------

    async def test_email_and_username_availability_are_case_insensitive(self):
        self.assertFalse(await crud.email_available("alice@example.com"))
        self.assertFalse(await crud.email_available("ALICE@example.com"))
        self.assertTrue(await crud.email_available("new@example.com"))
        self.assertFalse(await crud.username_available("Bob"))
        self.assertTrue(await crud.username_available("newbie"))

    async def test_create_and_update_user(self):
        user = await crud.create_user("Eve", "eve@example.com", "eve", "hash", "buyer")
        self.assertEqual(user.role, "buyer")
        self.assertIsNone(user.address)

        updated = await crud.update_user(
            user.id, {"address": "1 Elm St", "role": "admin", "password": "x"}
        )
        self.assertEqual(updated.address, "1 Elm St")
        # non-profile columns are ignored
        self.assertEqual(updated.role, "buyer")
        self.assertEqual(updated.password, "hash")

        self.assertEqual((await crud.set_user_role(user.id, "seller")).role, "seller")
        self.assertIsNone(await crud.set_user_role(424242, "seller"))
        self.assertIsNone(await crud.get_user(424242))

    # ---------- Sessions ----------

    async def test_sessions_and_purge(self):
        now = datetime(2025, 11, 1, 12, 0, tzinfo=timezone.utc)
        await crud.create_session("live", CAROL_ID, now, now + timedelta(hours=1))
        await crud.create_session("stale", CAROL_ID, now - timedelta(days=2), now - timedelta(days=1))

        self.assertEqual((await crud.get_session("live")).user_id, CAROL_ID)
        self.assertEqual(await crud.purge_expired_sessions(now), 1)
        self.assertIsNone(await crud.get_session("stale"))

        self.assertTrue(await crud.delete_session("live"))
        self.assertFalse(await crud.delete_session("live"))

    # ---------- Products ----------

    async def test_list_products_filters(self):
        everything = await crud.list_products()
        self.assertEqual(len(everything), 6)

        kitchen = await crud.list_products(category="kitchen")
        self.assertEqual({p.title for p in kitchen}, {"Ceramic Mug", "Wooden Spoon Set"})

        # description matches too
        self.assertEqual([p.id for p in await crud.list_products(search="SEAGRASS")], [1])
        self.assertEqual(await crud.list_products(search="no such thing"), [])

        bobs = await crud.list_products(seller_id=BOB_ID)
        self.assertTrue(all(p.seller_id == BOB_ID for p in bobs))
        self.assertEqual(
            [p.id for p in await crud.list_products(category="Accessories", seller_id=BOB_ID, search="tote")],
            [6],
        )

    async def test_product_update_delete_keeps_order_history(self):
        product = await crud.create_product(ALICE_ID, "Lamp", None, 10.0, ["a.jpg"], "Home", 2)
        self.assertEqual(product.images, ["a.jpg"])

        updated = await crud.update_product(product.id, {"price": 12.5, "images": [], "seller_id": BOB_ID})
        self.assertEqual(updated.price, 12.5)
        self.assertEqual(updated.images, [])
        self.assertEqual(updated.seller_id, ALICE_ID)

        # seeded order 1 contains product 1
        self.assertTrue(await crud.delete_product(1))
        self.assertFalse(await crud.delete_product(1))
        order, items = await crud.get_order_detail(1)
        self.assertIsNotNone(order)
        self.assertIsNone(items[0].product_id)
        self.assertEqual(items[0].product_title, "Handwoven Basket")

    async def test_product_ratings(self):
        ratings = await crud.product_ratings([1, 2])
        self.assertEqual(ratings, {1: (5.0, 1)})
        await crud.create_review(1, DAVE_ID, 2, "Meh")
        self.assertEqual((await crud.product_ratings([1]))[1], (3.5, 2))
        self.assertEqual(await crud.product_ratings([]), {})

    # ---------- Cart ----------

    async def test_cart_add_merges_into_one_row(self):
        await crud.add_cart_item(CAROL_ID, 3, 2)
        item = await crud.add_cart_item(CAROL_ID, 3, 1)
        self.assertEqual(item.quantity, 3)
        rows = [i for i in await crud.list_cart(CAROL_ID) if i.product_id == 3]
        self.assertEqual(len(rows), 1)

        with self.assertRaises(ValidationError):
            await crud.add_cart_item(CAROL_ID, 3, 0)

    async def test_cart_update_remove_clear(self):
        item = (await crud.list_cart(DAVE_ID))[0]
        self.assertEqual((item.product_id, item.quantity), (2, 2))

        self.assertEqual((await crud.update_cart_item_quantity(item.id, 5)).quantity, 5)
        self.assertIsNone(await crud.update_cart_item_quantity(999999, 5))

        self.assertTrue(await crud.remove_cart_item(item.id))
        self.assertFalse(await crud.remove_cart_item(item.id))

        await crud.add_cart_item(DAVE_ID, 1, 1)
        await crud.add_cart_item(DAVE_ID, 2, 1)
        self.assertEqual(await crud.clear_cart(DAVE_ID), 2)
        self.assertEqual(await crud.list_cart(DAVE_ID), [])

    # ---------- Orders ----------

    async def test_create_order_freezes_prices_and_updates_stock(self):
        order, items = await crud.create_order(
            DAVE_ID, [(2, 2), (3, 1), (2, 1)], shipping_address="Somewhere"
        )
        self.assertEqual(order.status, "pending")
        self.assertEqual(order.shipping_address, "Somewhere")
        # duplicate lines are combined
        self.assertEqual({i.product_id: i.quantity for i in items}, {2: 3, 3: 1})
        self.assertEqual(order.total_amount, round(3 * 18.50 + 60.00, 2))
        self.assertEqual(await self.order_total(order.id), order.total_amount)

        self.assertEqual(await self.stock(2), 22)
        self.assertEqual(await self.stock(3), 2)
        self.assertEqual(await crud.list_cart(DAVE_ID), [])

        # later price changes do not touch the order
        await crud.update_product(2, {"price": 99.0})
        reloaded, reloaded_items = await crud.get_order_detail(order.id)
        self.assertEqual(reloaded.total_amount, order.total_amount)
        self.assertEqual({i.unit_price for i in reloaded_items if i.product_id == 2}, {18.5})

    async def test_create_order_shortfall_has_no_side_effects(self):
        orders_before = await self.scalar("SELECT COUNT(*) FROM orders;")
        with self.assertRaises(InsufficientStockError) as ctx:
            # product 3 has 3 in stock
            await crud.create_order(DAVE_ID, [(1, 1), (3, 4)])
        self.assertEqual(ctx.exception.available, 3)
        self.assertIn("Leather Wallet", ctx.exception.message)

        self.assertEqual(await self.stock(1), 10)
        self.assertEqual(await self.stock(3), 3)
        self.assertEqual(len(await crud.list_cart(DAVE_ID)), 1)
        self.assertEqual(await self.scalar("SELECT COUNT(*) FROM orders;"), orders_before)

    async def test_create_order_rejects_unknown_product_and_stale_total(self):
        with self.assertRaises(NotFoundError):
            await crud.create_order(DAVE_ID, [(999, 1)])
        with self.assertRaises(ValidationError):
            await crud.create_order(DAVE_ID, [])
        with self.assertRaises(ValidationError):
            await crud.create_order(DAVE_ID, [(2, 1)], expected_total=10.0)
        # within a cent is accepted
        order, _ = await crud.create_order(DAVE_ID, [(2, 1)], expected_total=18.51)
        self.assertEqual(order.total_amount, 18.5)

    async def test_order_listing_by_role(self):
        order, _ = await crud.create_order(DAVE_ID, [(3, 1)])

        self.assertEqual([o.id for o in await crud.list_orders_by_buyer(CAROL_ID)], [1])
        self.assertEqual([o.id for o in await crud.list_orders_for_seller(BOB_ID)], [order.id])
        self.assertEqual([o.id for o in await crud.list_orders_for_seller(ALICE_ID)], [1])
        self.assertEqual(len(await crud.list_all_orders()), 2)
        self.assertEqual(await crud.order_seller_ids(order.id), [BOB_ID])

        # seller is frozen on the item, so deleting the product keeps the link
        await crud.delete_product(3)
        self.assertEqual([o.id for o in await crud.list_orders_for_seller(BOB_ID)], [order.id])
        self.assertEqual(await crud.order_seller_ids(order.id), [BOB_ID])

    async def test_update_order_status_is_compare_and_set(self):
        order, _ = await crud.create_order(DAVE_ID, [(3, 1)])
        updated = await crud.update_order_status(order.id, "pending", "shipped")
        self.assertEqual(updated.status, "shipped")
        # stale expectation fails
        self.assertIsNone(await crud.update_order_status(order.id, "pending", "processing"))
        self.assertIsNone(await crud.update_order_status(999999, "pending", "processing"))

    async def test_buyer_has_purchased(self):
        self.assertTrue(await crud.buyer_has_purchased(CAROL_ID, 1))
        self.assertFalse(await crud.buyer_has_purchased(DAVE_ID, 1))
        self.assertFalse(await crud.buyer_has_purchased(CAROL_ID, 2))

    async def test_get_order_detail_missing(self):
        order, items = await crud.get_order_detail(9999999)
        self.assertIsNone(order)
        self.assertEqual(items, [])

    # ---------- Messages & notifications ----------

    async def test_messages_conversation_and_read_flags(self):
        await crud.create_message(CAROL_ID, ALICE_ID, "hi")
        await crud.create_message(ALICE_ID, CAROL_ID, "hello")
        await crud.create_message(DAVE_ID, ALICE_ID, "other")

        convo = await crud.list_messages_between(ALICE_ID, CAROL_ID)
        self.assertEqual([m.content for m in convo], ["hi", "hello"])
        self.assertEqual(len(await crud.list_messages_for_user(ALICE_ID)), 3)

        self.assertEqual(await crud.mark_messages_read(ALICE_ID, CAROL_ID), 1)
        self.assertEqual(await crud.mark_messages_read(ALICE_ID, CAROL_ID), 0)

    async def test_notifications_crud(self):
        n = await crud.create_notification(CAROL_ID, "system", "T", "M", {"orderId": 1})
        await crud.create_notification(CAROL_ID, "message", "T2", "M2")
        self.assertEqual((await crud.get_notification(n.id)).data, {"orderId": 1})

        self.assertEqual(await crud.count_unread_notifications(CAROL_ID), 2)
        self.assertTrue(await crud.mark_notification_read(n.id))
        self.assertEqual(len(await crud.list_notifications(CAROL_ID, unread_only=True)), 1)
        self.assertEqual(await crud.mark_all_notifications_read(CAROL_ID), 1)
        self.assertEqual(await crud.count_unread_notifications(CAROL_ID), 0)

    async def test_modification_requests(self):
        req = await crud.create_modification_request(3, CAROL_ID, BOB_ID, "Please engrave it")
        self.assertEqual(req.status, "pending")
        self.assertEqual([r.id for r in await crud.list_modification_requests(seller_id=BOB_ID)], [req.id])
        self.assertEqual(await crud.list_modification_requests(buyer_id=DAVE_ID), [])
        with self.assertRaises(ValueError):
            await crud.list_modification_requests()

        answered = await crud.respond_modification_request(req.id, "approved", "Sure")
        self.assertEqual((answered.status, answered.seller_response), ("approved", "Sure"))
        self.assertIsNone(await crud.respond_modification_request(999, "denied", None))

    # ---------- Schema ----------

    async def test_schema_rejects_negative_stock(self):
        async with db_database.connect() as conn:
            with self.assertRaises(Exception):
                await conn.execute("UPDATE products SET quantity_available = -1 WHERE id = 1;")


class ConnectTestCase(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        use_temp_db(self)

    async def test_connection_closed_when_init_fails(self):
        opened = []
        real_connect = aiosqlite.connect

        def tracking_connect(*args, **kwargs):
            conn = real_connect(*args, **kwargs)
            opened.append(conn)
            return conn

        failing_init = AsyncMock(side_effect=aiosqlite.OperationalError("disk I/O error"))
        with patch.object(aiosqlite, "connect", tracking_connect), patch.object(
            db_database, "_init_db", failing_init
        ):
            with self.assertRaises(aiosqlite.OperationalError):
                async with db_database.connect():
                    pass

        self.assertFalse(db_database._initialized)
        (conn,) = opened
        with self.assertRaises(ValueError):
            await conn.execute("SELECT 1;")
