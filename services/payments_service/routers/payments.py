"""Payment recording, listing, statistics and detail."""

import uuid
from datetime import date, timedelta
from typing import Optional

from fastapi import APIRouter, Depends, status
from libs.auth.dependencies import require_admin
from libs.auth.models import AuthUser
from libs.auth.permissions import require_permission
from libs.common.datetime_utils import get_today
from libs.common.exceptions import NotFound
from libs.common.logging import get_logger
from libs.db.session import get_async_db
from services.members_service.models import Member
from services.members_service.services.subscription import evaluate_subscription
from services.payments_service.models import Payment, PaymentStatus, PaymentType
from services.payments_service.schemas import (
    PaymentCreate,
    PaymentDetailResponse,
    PaymentHistoryEntry,
    PaymentListItem,
    PaymentListResponse,
    PaymentMemberSummary,
    PaymentResponse,
    PaymentStatsResponse,
    SubscriptionPeriod,
)
from services.payments_service.services.renewal import record_payment
from sqlalchemy import String, cast, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/payments", tags=["payments"])
logger = get_logger(__name__)


def _filtered_payments_query(
    start_date: Optional[date],
    end_date: Optional[date],
    member_id: Optional[uuid.UUID],
    payment_status: Optional[PaymentStatus],
    payment_type: Optional[PaymentType],
    search: Optional[str] = None,
):
    query = select(Payment, Member).join(Member, Payment.member_id == Member.id)
    if start_date and end_date:
        query = query.where(
            Payment.payment_date >= start_date, Payment.payment_date <= end_date
        )
    if member_id:
        query = query.where(Payment.member_id == member_id)
    if payment_status:
        query = query.where(Payment.status == payment_status)
    if payment_type:
        query = query.where(Payment.payment_type == payment_type)
    if search:
        pattern = f"%{search.strip()}%"
        query = query.where(
            or_(
                cast(Payment.payment_method, String).ilike(pattern),
                cast(Payment.payment_type, String).ilike(pattern),
                Member.name.ilike(pattern),
                Member.email.ilike(pattern),
            )
        )
    return query.order_by(Payment.payment_date.desc(), Payment.created_at.desc())


def _list_item(payment: Payment, member: Member) -> PaymentListItem:
    return PaymentListItem(
        **PaymentResponse.model_validate(payment).model_dump(),
        member=PaymentMemberSummary.model_validate(member),
    )


@router.get("/", response_model=PaymentListResponse)
async def list_payments(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    member_id: Optional[uuid.UUID] = None,
    status: Optional[PaymentStatus] = None,
    payment_type: Optional[PaymentType] = None,
    search: Optional[str] = None,
    current_user: AuthUser = Depends(require_permission("view_payments")),
    db: AsyncSession = Depends(get_async_db),
):
    """
    List payments, newest first.

    ``search`` matches payment method, payment type, member name or email.
    """
    query = _filtered_payments_query(
        start_date, end_date, member_id, status, payment_type, search
    )
    result = await db.execute(query)
    return PaymentListResponse(
        payments=[_list_item(payment, member) for payment, member in result.all()]
    )


@router.post("/", response_model=PaymentResponse, status_code=status.HTTP_201_CREATED)
async def create_payment(
    payment_in: PaymentCreate,
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
    today: date = Depends(get_today),
):
    """
    Record a manual payment.

    A membership fee renews the member by ``subscription_months`` and
    activates the membership in the same transaction.
    """
    payment, _ = await record_payment(
        db,
        member_id=payment_in.member_id,
        amount=payment_in.amount,
        payment_date=payment_in.payment_date,
        payment_method=payment_in.payment_method,
        payment_type=payment_in.payment_type,
        notes=payment_in.notes,
        subscription_months=payment_in.subscription_months,
        actor_id=current_user.user_id,
        today=today,
    )
    await db.commit()
    await db.refresh(payment)

    logger.info(
        "Payment recorded",
        extra={
            "extra_fields": {
                "payment_id": str(payment.id),
                "member_id": str(payment.member_id),
                "payment_type": payment.payment_type.value,
            }
        },
    )
    return payment


@router.get("/stats", response_model=PaymentStatsResponse)
async def payment_stats(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    current_user: AuthUser = Depends(require_permission("view_payments")),
    db: AsyncSession = Depends(get_async_db),
):
    """Payment totals, overall and per type and method."""
    filters = []
    if start_date and end_date:
        filters = [Payment.payment_date >= start_date, Payment.payment_date <= end_date]

    by_type = await db.execute(
        select(Payment.payment_type, func.sum(Payment.amount))
        .where(*filters)
        .group_by(Payment.payment_type)
    )
    by_method = await db.execute(
        select(Payment.payment_method, func.sum(Payment.amount))
        .where(*filters)
        .group_by(Payment.payment_method)
    )

    by_payment_type = {ptype.value: float(total or 0) for ptype, total in by_type.all()}
    by_payment_method = {
        method.value: float(total or 0) for method, total in by_method.all()
    }
    return PaymentStatsResponse(
        total_amount=sum(by_payment_type.values()),
        by_payment_type=by_payment_type,
        by_payment_method=by_payment_method,
    )


@router.get("/export", response_model=PaymentListResponse)
async def export_payments(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    member_id: Optional[uuid.UUID] = None,
    status: Optional[PaymentStatus] = None,
    payment_type: Optional[PaymentType] = None,
    current_user: AuthUser = Depends(require_permission("view_payments")),
    db: AsyncSession = Depends(get_async_db),
):
    """Payment rows for the frontend's CSV export."""
    query = _filtered_payments_query(start_date, end_date, member_id, status, payment_type)
    result = await db.execute(query)
    return PaymentListResponse(
        payments=[_list_item(payment, member) for payment, member in result.all()]
    )


def subscription_period(
    start: Optional[date],
    end: Optional[date],
    created_on: Optional[date],
    today: date,
) -> SubscriptionPeriod:
    """
    Progress through the current subscription.

    A member without a start date is measured from their creation date; one
    without an end date gets a 30 day window.
    """
    start = start or created_on or today - timedelta(days=30)
    end = end or start + timedelta(days=30)

    total_days = (end - start).days
    elapsed_days = (today - start).days
    if total_days > 0:
        progress = min(100.0, max(0.0, elapsed_days / total_days * 100))
    else:
        progress = 100.0

    state = evaluate_subscription(end, today)
    return SubscriptionPeriod(
        start_date=start,
        end_date=end,
        total_days=total_days,
        elapsed_days=elapsed_days,
        days_remaining=state.days_remaining,
        progress=round(progress, 1),
        is_active=state.status.value == "active",
    )


@router.get("/{payment_id}", response_model=PaymentDetailResponse)
async def get_payment(
    payment_id: uuid.UUID,
    current_user: AuthUser = Depends(require_permission("view_payments")),
    db: AsyncSession = Depends(get_async_db),
    today: date = Depends(get_today),
):
    """Payment with its member, subscription progress and last 5 payments."""
    result = await db.execute(
        select(Payment, Member)
        .join(Member, Payment.member_id == Member.id)
        .where(Payment.id == payment_id)
    )
    row = result.first()
    if not row:
        raise NotFound("Payment not found")
    payment, member = row

    history = await db.execute(
        select(Payment)
        .where(Payment.member_id == member.id)
        .order_by(Payment.payment_date.desc(), Payment.created_at.desc())
        .limit(5)
    )

    created_on = member.created_at.date() if member.created_at else None
    return PaymentDetailResponse(
        **PaymentResponse.model_validate(payment).model_dump(),
        member=PaymentMemberSummary.model_validate(member),
        subscription_period=subscription_period(
            member.start_date, member.end_date, created_on, today
        ),
        payment_history=[
            PaymentHistoryEntry.model_validate(p) for p in history.scalars().all()
        ],
    )
