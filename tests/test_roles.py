import unittest

from db.models import User
from services.roles import Action, Role, can, is_admin, parse_role, require
from utils.errors import PermissionDeniedError, ValidationError


def make_user(role: str, uid: int = 1) -> User:
    return User(
        id=uid,
        name="Test",
        email=f"{role}@example.com",
        username=role,
        password="",
        role=role,
        address=None,
        bank_account_name=None,
        bank_account_number=None,
        bank_ifsc_code=None,
        bank_name=None,
        payment_customer_id=None,
        created_at="",
        updated_at="",
    )


class RolesTestCase(unittest.TestCase):
    def test_permission_table(self):
        buyer, seller, admin = make_user("buyer"), make_user("seller"), make_user("admin")

        self.assertFalse(can(buyer, Action.MANAGE_PRODUCTS))
        self.assertTrue(can(seller, Action.MANAGE_PRODUCTS))
        self.assertTrue(can(admin, Action.MANAGE_PRODUCTS))

        self.assertTrue(can(buyer, Action.REQUEST_MODIFICATION))
        self.assertFalse(can(seller, Action.REQUEST_MODIFICATION))

        self.assertFalse(can(seller, Action.MANAGE_USERS))
        self.assertTrue(can(admin, Action.VIEW_ALL_ORDERS))

        for user in (buyer, seller, admin):
            self.assertTrue(can(user, Action.PLACE_ORDER))

    def test_unknown_role_can_do_nothing(self):
        ghost = make_user("ghost")
        self.assertFalse(any(can(ghost, action) for action in Action))

    def test_require_and_parse(self):
        with self.assertRaises(PermissionDeniedError) as ctx:
            require(make_user("buyer"), Action.UPDATE_ORDER_STATUS)
        self.assertIn("update order status", ctx.exception.message)
        require(make_user("seller"), Action.UPDATE_ORDER_STATUS)

        self.assertIs(parse_role("seller"), Role.SELLER)
        with self.assertRaises(ValidationError):
            parse_role("superuser")
        self.assertTrue(is_admin(make_user("admin")))
        self.assertFalse(is_admin(make_user("seller")))
