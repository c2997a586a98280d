from db import crud
from db_case import ADMIN_ID, ALICE_ID, BOB_ID, CAROL_ID, DbTestCase
from services import products
from utils.errors import NotFoundError, PermissionDeniedError, ValidationError

NEW_PRODUCT = {
    "title": "  Clay Vase ",
    "description": "Wheel thrown.",
    "price": 35.0,
    "category": "Home",
    "quantity_available": 4,
    "images": ["/images/vase.jpg"],
}


class ProductsTestCase(DbTestCase):
    async def test_seller_creates_owned_product(self):
        alice = await self.user(ALICE_ID)
        product = await products.create_product(alice, dict(NEW_PRODUCT))
        self.assertEqual(product.title, "Clay Vase")
        self.assertEqual(product.seller_id, ALICE_ID)
        self.assertEqual(product.images, ["/images/vase.jpg"])

        with self.assertRaises(PermissionDeniedError):
            await products.create_product(await self.user(CAROL_ID), dict(NEW_PRODUCT))

    async def test_create_validates_fields(self):
        alice = await self.user(ALICE_ID)
        with self.assertRaises(ValidationError) as ctx:
            await products.create_product(alice, {"title": "Vase"})
        self.assertIn("price", ctx.exception.message)
        for bad in ({"price": -1}, {"quantity_available": -3}, {"title": "   "}):
            with self.assertRaises(ValidationError):
                await products.create_product(alice, {**NEW_PRODUCT, **bad})

    async def test_only_owner_or_admin_may_change(self):
        alice, bob = await self.user(ALICE_ID), await self.user(BOB_ID)
        with self.assertRaises(PermissionDeniedError):
            await products.update_product(bob, 1, {"price": 1.0})
        with self.assertRaises(PermissionDeniedError):
            await products.delete_product(bob, 1)

        updated = await products.update_product(alice, 1, {"price": 49.0, "quantity_available": 0})
        self.assertEqual((updated.price, updated.quantity_available), (49.0, 0))
        with self.assertRaises(ValidationError):
            await products.update_product(alice, 1, {"price": -5})

        await products.delete_product(await self.user(ADMIN_ID), 1)
        with self.assertRaises(NotFoundError):
            await products.get_product(1)

    async def test_ratings_default_for_unreviewed(self):
        listed = await products.list_products(category="Home")
        ratings = await products.ratings_for(listed)
        self.assertEqual(ratings, {1: (5.0, 1)})
        everything = await products.ratings_for(await crud.list_products())
        self.assertEqual(everything[2], (0.0, 0))
