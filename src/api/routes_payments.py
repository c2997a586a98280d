from fastapi import APIRouter, Depends

from api.deps import current_user
from api.schemas import PaymentIntentIn, PaymentIntentOut
from db.models import User
from services import payments
from services.payments import PaymentGateway

router = APIRouter(prefix="/api", tags=["payments"])


@router.post("/create-payment-intent", response_model=PaymentIntentOut)
async def create_payment_intent(
    payload: PaymentIntentIn,
    user: User = Depends(current_user),
    gateway: PaymentGateway = Depends(payments.get_gateway),
):
    intent = await payments.create_payment_intent(user, payload.amount, gateway)
    return PaymentIntentOut(client_secret=intent.client_secret, payment_intent_id=intent.id)
