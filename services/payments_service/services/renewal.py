"""
Payment-driven membership renewal.

Manual payments and Stripe webhooks share ``record_payment``: the payment row
and the member's new end date are flushed together and committed by the
caller as a single transaction.
"""

import uuid
from datetime import date
from typing import Any, Optional

from libs.common.exceptions import NotFound
from libs.common.logging import get_logger
from services.members_service.models import Member, MemberStatus
from services.members_service.services.subscription import (
    calculate_renewed_end_date,
)
from services.payments_service.models import (
    Payment,
    PaymentMethod,
    PaymentStatus,
    PaymentType,
)
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

# Outcomes of handle_payment_succeeded
RECORDED = "recorded"
DUPLICATE = "duplicate"
UNKNOWN_MEMBER = "unknown_member"
INVALID_METADATA = "invalid_metadata"


async def _get_member(db: AsyncSession, member_id: uuid.UUID) -> Optional[Member]:
    result = await db.execute(select(Member).where(Member.id == member_id))
    return result.scalar_one_or_none()


def apply_renewal(member: Member, months: int, today: date) -> date:
    """
    Extend a member's end date by ``months`` and mark the membership active.

    Returns:
        The new end date
    """
    new_end_date = calculate_renewed_end_date(member.end_date, months, today)
    member.end_date = new_end_date
    member.status = MemberStatus.ACTIVE
    return new_end_date


async def record_payment(
    db: AsyncSession,
    *,
    member_id: uuid.UUID,
    amount: float,
    payment_date: date,
    payment_method: PaymentMethod,
    payment_type: PaymentType,
    today: date,
    notes: Optional[str] = None,
    subscription_months: int = 1,
    actor_id: Optional[str] = None,
    stripe_payment_id: Optional[str] = None,
) -> tuple[Payment, Member]:
    """
    Record a completed payment and renew the membership if it pays the fee.

    Args:
        db: Session; the caller commits
        member_id: Paying member
        amount: Amount in major currency units
        payment_date: Date the payment was made
        payment_method: How it was paid
        payment_type: What it pays for; only membership_fee renews
        today: Current business date
        notes: Free text
        subscription_months: Months purchased
        actor_id: Who recorded it
        stripe_payment_id: Payment intent id for gateway payments

    Raises:
        NotFound: if the member does not exist
    """
    member = await _get_member(db, member_id)
    if not member:
        raise NotFound("Member not found")

    payment = Payment(
        member_id=member.id,
        amount=amount,
        payment_date=payment_date,
        payment_method=payment_method,
        payment_type=payment_type,
        status=PaymentStatus.COMPLETED,
        notes=notes,
        recorded_by=actor_id,
        stripe_payment_id=stripe_payment_id,
    )
    db.add(payment)

    if payment_type == PaymentType.MEMBERSHIP_FEE:
        new_end_date = apply_renewal(member, subscription_months, today)
        member.updated_by = actor_id
        logger.info(
            "Membership renewed",
            extra={
                "extra_fields": {
                    "member_id": str(member.id),
                    "months": subscription_months,
                    "new_end_date": new_end_date.isoformat(),
                }
            },
        )

    await db.flush()
    return payment, member


def _parse_months(raw: Any) -> int:
    try:
        months = int(raw) if raw not in (None, "") else 1
    except (TypeError, ValueError):
        return 1
    return max(months, 1)


async def handle_payment_succeeded(
    db: AsyncSession, intent: dict[str, Any], today: date
) -> str:
    """
    Apply a ``payment_intent.succeeded`` event.

    Deliveries for an intent that is already recorded are acknowledged
    without renewing again. Unknown members are logged and acknowledged.

    Returns:
        One of RECORDED, DUPLICATE, UNKNOWN_MEMBER, INVALID_METADATA
    """
    intent_id = intent.get("id")
    metadata = intent.get("metadata") or {}

    existing = await db.execute(
        select(Payment.id).where(Payment.stripe_payment_id == intent_id)
    )
    if existing.first() is not None:
        logger.info(f"Stripe payment {intent_id} already recorded, skipping")
        return DUPLICATE

    try:
        member_id = uuid.UUID(str(metadata.get("memberId")))
        payment_type = PaymentType(metadata.get("paymentType") or "membership_fee")
    except ValueError:
        logger.warning(
            "Stripe payment with unusable metadata",
            extra={"extra_fields": {"intent_id": intent_id, "metadata": metadata}},
        )
        return INVALID_METADATA

    if await _get_member(db, member_id) is None:
        logger.warning(
            "Stripe payment for unknown member",
            extra={"extra_fields": {"intent_id": intent_id, "member_id": str(member_id)}},
        )
        return UNKNOWN_MEMBER

    amount_cents = intent.get("amount_received") or intent.get("amount") or 0
    await record_payment(
        db,
        member_id=member_id,
        amount=amount_cents / 100,
        payment_date=today,
        payment_method=PaymentMethod.STRIPE,
        payment_type=payment_type,
        today=today,
        subscription_months=_parse_months(metadata.get("subscriptionMonths")),
        actor_id="stripe",
        stripe_payment_id=intent_id,
    )
    return RECORDED
