from db_case import ADMIN_ID, CAROL_ID, DAVE_ID, DbTestCase
from services import reviews
from services.orders import OrderLine, place_order
from utils.errors import NotFoundError, PermissionDeniedError, ValidationError


class ReviewsTestCase(DbTestCase):
    async def test_list_reviews_with_reviewer(self):
        ((review, reviewer),) = await reviews.list_reviews(1)
        self.assertEqual(review.rating, 5)
        self.assertEqual(reviewer.username, "carol")
        self.assertEqual(await reviews.list_reviews(2), [])
        with self.assertRaises(NotFoundError):
            await reviews.list_reviews(404)

    async def test_only_purchasers_may_review(self):
        dave = await self.user(DAVE_ID)
        with self.assertRaises(PermissionDeniedError):
            await reviews.create_review(dave, 1, 4, "Looks nice")

        await place_order(dave, [OrderLine(1, 1)])
        review = await reviews.create_review(dave, 1, 4, "  Looks nice  ")
        self.assertEqual(review.comment, "Looks nice")

        latest, _ = (await reviews.list_reviews(1))[0]
        self.assertEqual(latest.id, review.id)

    async def test_purchase_of_any_status_counts(self):
        # order 1 is delivered, but undelivered orders qualify too
        carol = await self.user(CAROL_ID)
        await place_order(carol, [OrderLine(6, 1)])
        review = await reviews.create_review(carol, 6, 3, "Arrived? not yet, still like it")
        self.assertEqual(review.product_id, 6)

    async def test_validation_runs_before_purchase_check(self):
        admin = await self.user(ADMIN_ID)
        for rating in (0, 6):
            with self.assertRaises(ValidationError):
                await reviews.create_review(admin, 1, rating, "ok")
        with self.assertRaises(ValidationError):
            await reviews.create_review(admin, 1, 3, "   ")
        with self.assertRaises(NotFoundError):
            await reviews.create_review(admin, 404, 3, "ok")
