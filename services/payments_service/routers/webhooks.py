"""Stripe webhook handler."""

from datetime import date

from fastapi import APIRouter, Depends, Request
from libs.common.datetime_utils import get_today
from libs.common.logging import get_logger
from libs.db.session import get_async_db
from services.payments_service.schemas import WebhookAck
from services.payments_service.services.renewal import (
    DUPLICATE,
    handle_payment_succeeded,
)
from services.payments_service.stripe_client import StripeGateway, get_payment_gateway
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/payments", tags=["payments"])
logger = get_logger(__name__)


@router.post("/stripe-webhook", response_model=WebhookAck)
async def stripe_webhook(
    request: Request,
    db: AsyncSession = Depends(get_async_db),
    gateway: StripeGateway = Depends(get_payment_gateway),
    today: date = Depends(get_today),
):
    """
    Stripe webhook endpoint (no auth; verified by Stripe-Signature).

    Nothing is written unless the signature verifies.
    """
    raw = await request.body()
    event = gateway.verify_webhook(raw, request.headers.get("stripe-signature"))

    event_type = event.get("type")
    logger.info(
        f"Stripe event {event_type}",
        extra={"extra_fields": {"event_id": event.get("id")}},
    )

    if event_type != "payment_intent.succeeded":
        return WebhookAck()

    intent = (event.get("data") or {}).get("object") or {}
    outcome = await handle_payment_succeeded(db, intent, today)
    try:
        await db.commit()
    except IntegrityError:
        # A concurrent delivery recorded the same intent first
        await db.rollback()
        outcome = DUPLICATE

    logger.info(
        "Stripe payment processed",
        extra={"extra_fields": {"intent_id": intent.get("id"), "outcome": outcome}},
    )
    return WebhookAck()
