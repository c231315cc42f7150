"""
Stripe gateway for card payments.

Provides:
- Creating payment intents for the checkout form
- Verifying signed webhook deliveries

Routers depend on ``get_payment_gateway`` so tests can swap in a fake.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Optional

import stripe
from libs.common.config import get_settings
from libs.common.exceptions import SignatureError, UpstreamFailure
from libs.common.logging import get_logger
from starlette.concurrency import run_in_threadpool

logger = get_logger(__name__)

SIGNATURE_TOLERANCE_SECONDS = 300


@dataclass
class PaymentIntentResult:
    """Result of creating a payment intent."""

    id: str
    client_secret: str
    amount: int  # in cents
    currency: str
    status: str
    metadata: dict[str, Any] = field(default_factory=dict)


class StripeGateway:
    """Thin wrapper over the ``stripe`` SDK."""

    def __init__(
        self,
        secret_key: Optional[str] = None,
        webhook_secret: Optional[str] = None,
    ):
        settings = get_settings()
        self.secret_key = secret_key if secret_key is not None else settings.STRIPE_SECRET_KEY
        self.webhook_secret = (
            webhook_secret
            if webhook_secret is not None
            else settings.STRIPE_WEBHOOK_SECRET
        )

    async def create_intent(
        self, amount_cents: int, currency: str, metadata: dict[str, Any]
    ) -> PaymentIntentResult:
        """
        Create a card payment intent.

        Args:
            amount_cents: Amount in the currency's minor unit
            currency: ISO currency code, e.g. "usd"
            metadata: String metadata echoed back on the webhook

        Raises:
            UpstreamFailure: if Stripe is not configured or rejects the call
        """
        if not self.secret_key:
            raise UpstreamFailure("Payment gateway is not configured")

        try:
            intent = await run_in_threadpool(
                stripe.PaymentIntent.create,
                amount=amount_cents,
                currency=currency,
                payment_method_types=["card"],
                metadata={k: str(v) for k, v in metadata.items() if v is not None},
                api_key=self.secret_key,
            )
        except stripe.StripeError as e:
            logger.error(f"Stripe payment intent error: {e}")
            raise UpstreamFailure(getattr(e, "user_message", None) or str(e))

        return PaymentIntentResult(
            id=intent.id,
            client_secret=intent.client_secret,
            amount=intent.amount,
            currency=intent.currency,
            status=intent.status,
            metadata=dict(metadata),
        )

    def verify_webhook(self, payload: bytes, signature: Optional[str]) -> dict:
        """
        Verify the ``Stripe-Signature`` header and decode the event.

        Raises:
            SignatureError: if the signature or payload is invalid
        """
        if not self.webhook_secret:
            raise SignatureError("Webhook secret is not configured")
        if not signature:
            raise SignatureError("Missing Stripe-Signature header")

        try:
            body = payload.decode("utf-8")
            stripe.WebhookSignature.verify_header(
                body, signature, self.webhook_secret, SIGNATURE_TOLERANCE_SECONDS
            )
            return json.loads(body)
        except (ValueError, stripe.SignatureVerificationError) as e:
            logger.warning(f"Webhook signature verification failed: {e}")
            raise SignatureError(f"Webhook Error: {e}")


def get_payment_gateway() -> StripeGateway:
    """FastAPI dependency returning the configured gateway."""
    return StripeGateway()
