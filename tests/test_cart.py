from db import crud
from db_case import CAROL_ID, DAVE_ID, DbTestCase
from services import cart
from utils.errors import NotFoundError, ValidationError


class CartTestCase(DbTestCase):
    async def asyncSetUp(self):
        await super().asyncSetUp()
        self.carol = await self.user(CAROL_ID)
        self.dave = await self.user(DAVE_ID)

    async def test_list_items_pairs_products(self):
        ((item, product),) = await cart.list_items(self.dave)
        self.assertEqual(item.quantity, 2)
        self.assertEqual(product.title, "Ceramic Mug")
        self.assertEqual(await cart.list_items(self.carol), [])

    async def test_add_merges_and_ignores_stock(self):
        await cart.add_item(self.dave, 2)
        item = await cart.add_item(self.dave, 2, 3)
        self.assertEqual(item.quantity, 6)
        self.assertEqual(len(await crud.list_cart(DAVE_ID)), 1)

        # out of stock products may sit in the cart; checkout refuses them
        out_of_stock = await cart.add_item(self.carol, 5, 1)
        self.assertEqual(out_of_stock.product_id, 5)

    async def test_add_validates(self):
        with self.assertRaises(ValidationError):
            await cart.add_item(self.carol, 1, 0)
        with self.assertRaises(NotFoundError):
            await cart.add_item(self.carol, 999, 1)

    async def test_cannot_touch_another_users_item(self):
        (daves_item,) = await crud.list_cart(DAVE_ID)
        with self.assertRaises(NotFoundError):
            await cart.update_quantity(self.carol, daves_item.id, 4)
        with self.assertRaises(NotFoundError):
            await cart.remove_item(self.carol, daves_item.id)
        self.assertEqual((await crud.get_cart_item(daves_item.id)).quantity, 2)

    async def test_update_remove_clear(self):
        (item,) = await crud.list_cart(DAVE_ID)
        self.assertEqual((await cart.update_quantity(self.dave, item.id, 7)).quantity, 7)
        with self.assertRaises(ValidationError):
            await cart.update_quantity(self.dave, item.id, 0)

        await cart.remove_item(self.dave, item.id)
        with self.assertRaises(NotFoundError):
            await cart.remove_item(self.dave, item.id)

        await cart.add_item(self.dave, 1)
        self.assertEqual(await cart.clear(self.dave), 1)
        self.assertEqual(await cart.clear(self.dave), 0)
