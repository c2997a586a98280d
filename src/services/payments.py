import asyncio
import math
from dataclasses import dataclass
from typing import Any, Dict, Protocol

import stripe

from db.models import User
from utils import config
from utils.errors import PaymentGatewayError, PaymentNotConfiguredError, ValidationError
from utils.logger import get_logger

_logger = get_logger(__name__)


@dataclass(frozen=True)
class PaymentIntent:
    id: str
    client_secret: str


class PaymentGateway(Protocol):
    async def create_intent(
        self, amount_cents: int, currency: str, metadata: Dict[str, Any]
    ) -> PaymentIntent: ...


class StripeGateway:
    """Creates Stripe PaymentIntents; the blocking SDK call runs in a worker thread."""

    def __init__(self, api_key: str) -> None:
        self.api_key = api_key

    async def create_intent(
        self, amount_cents: int, currency: str, metadata: Dict[str, Any]
    ) -> PaymentIntent:
        try:
            intent = await asyncio.to_thread(
                stripe.PaymentIntent.create,
                api_key=self.api_key,
                amount=amount_cents,
                currency=currency,
                metadata=metadata,
                automatic_payment_methods={"enabled": True},
            )
        except stripe.StripeError as e:
            _logger.warning(f"Stripe rejected payment intent: {e.user_message or e}")
            raise PaymentGatewayError(e.user_message or str(e)) from e
        return PaymentIntent(id=intent.id, client_secret=intent.client_secret)


def get_gateway() -> PaymentGateway:
    if not config.STRIPE_SECRET_KEY:
        raise PaymentNotConfiguredError()
    return StripeGateway(config.STRIPE_SECRET_KEY)


def to_cents(amount: float) -> int:
    if isinstance(amount, bool) or not isinstance(amount, (int, float)):
        raise ValidationError("Invalid amount")
    if not math.isfinite(amount) or amount <= 0:
        raise ValidationError("Invalid amount")
    return int(round(amount * 100))


async def create_payment_intent(
    user: User, amount: float, gateway: PaymentGateway
) -> PaymentIntent:
    """Hand `amount` (in major currency units) to the gateway for `user`."""
    cents = to_cents(amount)
    intent = await gateway.create_intent(
        cents,
        config.PAYMENT_CURRENCY,
        {"userId": str(user.id), "userEmail": user.email},
    )
    _logger.info(f"Payment intent {intent.id} created for user {user.id} ({cents} cents)")
    return intent
