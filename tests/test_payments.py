import unittest
from unittest.mock import patch

import stripe

from services import payments
from services.payments import PaymentIntent, StripeGateway
from test_roles import make_user
from utils import config
from utils.errors import PaymentGatewayError, PaymentNotConfiguredError, ValidationError


class RecordingGateway:
    def __init__(self):
        self.calls = []

    async def create_intent(self, amount_cents, currency, metadata):
        self.calls.append((amount_cents, currency, metadata))
        return PaymentIntent(id="pi_test_1", client_secret="pi_test_1_secret")


class ToCentsTestCase(unittest.TestCase):
    def test_converts_major_units(self):
        self.assertEqual(payments.to_cents(78.5), 7850)
        self.assertEqual(payments.to_cents(0.1 + 0.2), 30)
        self.assertEqual(payments.to_cents(12), 1200)

    def test_rejects_bad_amounts(self):
        for amount in (0, -5, float("nan"), float("inf"), "10", True, None):
            with self.subTest(amount=amount):
                with self.assertRaises(ValidationError):
                    payments.to_cents(amount)


class PaymentIntentTestCase(unittest.IsolatedAsyncioTestCase):
    async def test_create_payment_intent_passes_user_metadata(self):
        gateway = RecordingGateway()
        buyer = make_user("buyer", uid=4)
        intent = await payments.create_payment_intent(buyer, 45.0, gateway)
        self.assertEqual(intent.client_secret, "pi_test_1_secret")
        self.assertEqual(
            gateway.calls,
            [(4500, config.PAYMENT_CURRENCY, {"userId": "4", "userEmail": "buyer@example.com"})],
        )

    async def test_stripe_errors_become_gateway_errors(self):
        error = stripe.CardError("Your card was declined.", None, "card_declined")
        with patch.object(stripe.PaymentIntent, "create", side_effect=error):
            with self.assertRaises(PaymentGatewayError):
                await StripeGateway("sk_test_x").create_intent(100, "usd", {})

    async def test_stripe_gateway_returns_intent(self):
        fake = stripe.PaymentIntent.construct_from(
            {"id": "pi_42", "client_secret": "pi_42_secret"}, "sk_test_x"
        )
        with patch.object(stripe.PaymentIntent, "create", return_value=fake) as create:
            intent = await StripeGateway("sk_test_x").create_intent(2500, "usd", {"userId": "4"})
        self.assertEqual(intent, PaymentIntent(id="pi_42", client_secret="pi_42_secret"))
        self.assertEqual(create.call_args.kwargs["amount"], 2500)
        self.assertEqual(create.call_args.kwargs["api_key"], "sk_test_x")

    def test_gateway_requires_key(self):
        with patch.object(config, "STRIPE_SECRET_KEY", ""):
            with self.assertRaises(PaymentNotConfiguredError):
                payments.get_gateway()
        with patch.object(config, "STRIPE_SECRET_KEY", "sk_test_x"):
            self.assertIsInstance(payments.get_gateway(), StripeGateway)
