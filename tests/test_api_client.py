import unittest

import httpx

from api.app import create_app
from client.api_client import ApiError, MarketplaceClient
from db_case import ALICE_ID, DEMO_PASSWORD, use_temp_db
from utils.state import GlobalState


class ApiClientTestCase(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        use_temp_db(self)

    async def asyncSetUp(self):
        transport = httpx.ASGITransport(app=create_app())
        self.client = MarketplaceClient(base_url="http://testserver", transport=transport)

    async def asyncTearDown(self):
        await self.client.aclose()

    async def test_buyer_session_through_state(self):
        state = GlobalState(client=self.client)
        user = await state.login("dave@example.com", DEMO_PASSWORD)
        self.assertEqual((state.uid, state.role), (user["id"], "buyer"))

        (item,) = await self.client.get_cart()
        intent_free_order = await self.client.place_order(
            [{"productId": item["productId"], "quantity": item["quantity"]}],
            total_amount=37.0,
        )
        self.assertEqual(intent_free_order["totalAmount"], 37.0)
        self.assertEqual(await self.client.unread_notification_count(), 1)
        self.assertEqual(await self.client.mark_all_notifications_read(), 1)

        await state.end_session()
        self.assertIsNone(state.user)
        with self.assertRaises(ApiError) as ctx:
            await self.client.me()
        self.assertEqual(ctx.exception.status_code, 401)

    async def test_errors_carry_server_message(self):
        await self.client.login("carol@example.com", DEMO_PASSWORD)
        with self.assertRaises(ApiError) as ctx:
            await self.client.create_product(title="Vase", price=1, category="Home", quantityAvailable=1)
        self.assertEqual(ctx.exception.status_code, 403)

        with self.assertRaises(ApiError) as ctx:
            await self.client.get_product(999)
        self.assertEqual(ctx.exception.message, "Product with ID 999 not found")

    async def test_seller_workflow(self):
        await self.client.login("alice@example.com", DEMO_PASSWORD)
        product = await self.client.create_product(
            title="Vase", price=35.0, category="Home", quantityAvailable=2
        )
        mine = await self.client.list_products(seller_id=ALICE_ID)
        self.assertIn(product["id"], [p["id"] for p in mine])

        updated = await self.client.update_product(product["id"], quantityAvailable=9)
        self.assertEqual(updated["quantityAvailable"], 9)
        await self.client.delete_product(product["id"])
        self.assertEqual(await self.client.list_products(search="vase"), [])

    async def test_unreachable_server(self):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        offline = MarketplaceClient(base_url="http://testserver", transport=httpx.MockTransport(refuse))
        async with offline:
            with self.assertRaises(ApiError) as ctx:
                await offline.list_products()
        self.assertEqual(ctx.exception.status_code, 0)
