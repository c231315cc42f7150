"""Stripe payment intent creation for card checkout."""

from fastapi import APIRouter, Depends, Request
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.common.config import get_settings
from libs.common.logging import get_logger
from libs.common.rate_limit import payment_limit
from services.payments_service.models import PaymentType
from services.payments_service.schemas import (
    PaymentIntentRequest,
    PaymentIntentResponse,
)
from services.payments_service.stripe_client import StripeGateway, get_payment_gateway

router = APIRouter(prefix="/payments", tags=["payments"])
settings = get_settings()
logger = get_logger(__name__)


def _to_cents(amount: float) -> int:
    return int(round(amount * 100))


@router.post("/create-payment-intent", response_model=PaymentIntentResponse)
@payment_limit
async def create_payment_intent(
    request: Request,
    intent_in: PaymentIntentRequest,
    current_user: AuthUser = Depends(get_current_user),
    gateway: StripeGateway = Depends(get_payment_gateway),
):
    """
    Create a Stripe payment intent for a membership fee.

    The metadata is echoed back on the ``payment_intent.succeeded`` webhook,
    which records the payment and renews the member.
    """
    intent = await gateway.create_intent(
        _to_cents(intent_in.amount),
        settings.STRIPE_CURRENCY,
        {
            "memberId": str(intent_in.member_id),
            "membershipType": intent_in.membership_type,
            "paymentType": PaymentType.MEMBERSHIP_FEE.value,
            "subscriptionMonths": intent_in.subscription_months,
        },
    )
    logger.info(
        "Payment intent created",
        extra={
            "extra_fields": {
                "intent_id": intent.id,
                "member_id": str(intent_in.member_id),
                "amount_cents": intent.amount,
            }
        },
    )
    return PaymentIntentResponse(client_secret=intent.client_secret)
