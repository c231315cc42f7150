"""Due payments, upcoming renewals and the notification trigger."""

from datetime import date, timedelta

from fastapi import APIRouter, Depends
from libs.auth.dependencies import require_admin
from libs.auth.models import AuthUser
from libs.auth.permissions import require_permission
from libs.common.config import get_settings
from libs.common.datetime_utils import get_today
from libs.common.logging import get_logger
from libs.db.session import get_async_db
from services.members_service.models import Member
from services.payments_service.models import Payment
from services.payments_service.schemas import (
    DuePayment,
    LastPayment,
    NotificationResponse,
    UpcomingRenewal,
)
from services.payments_service.services.notifications import (
    NotificationSender,
    get_notification_sender,
    send_due_notifications,
)
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/payments", tags=["payments"])
settings = get_settings()
logger = get_logger(__name__)


@router.get("/due", response_model=list[DuePayment])
async def list_due_payments(
    current_user: AuthUser = Depends(require_permission("view_payments")),
    db: AsyncSession = Depends(get_async_db),
    today: date = Depends(get_today),
):
    """Members whose membership has ended, with their last payment."""
    result = await db.execute(
        select(Member).where(Member.end_date <= today).order_by(Member.end_date.asc())
    )
    members = result.scalars().all()
    if not members:
        return []

    payments = await db.execute(
        select(Payment)
        .where(Payment.member_id.in_([m.id for m in members]))
        .order_by(Payment.payment_date.desc(), Payment.created_at.desc())
    )
    last_payments = {}
    for payment in payments.scalars().all():
        last_payments.setdefault(payment.member_id, payment)

    due = []
    for member in members:
        last = last_payments.get(member.id)
        due.append(
            DuePayment(
                member_id=member.id,
                name=member.name,
                email=member.email,
                membership_type=member.membership_type,
                end_date=member.end_date,
                days_overdue=(today - member.end_date).days,
                last_payment=(
                    LastPayment(
                        payment_date=last.payment_date,
                        amount=last.amount,
                        payment_type=last.payment_type,
                    )
                    if last
                    else None
                ),
            )
        )
    return due


@router.get("/upcoming-renewals", response_model=list[UpcomingRenewal])
async def list_upcoming_renewals(
    current_user: AuthUser = Depends(require_permission("view_payments")),
    db: AsyncSession = Depends(get_async_db),
    today: date = Depends(get_today),
):
    """Members whose membership ends within the renewal window."""
    window_end = today + timedelta(days=settings.UPCOMING_RENEWAL_WINDOW_DAYS)
    result = await db.execute(
        select(Member)
        .where(Member.end_date >= today, Member.end_date <= window_end)
        .order_by(Member.end_date.asc())
    )
    return [
        UpcomingRenewal(
            member_id=member.id,
            name=member.name,
            email=member.email,
            membership_type=member.membership_type,
            end_date=member.end_date,
            days_until_renewal=(member.end_date - today).days,
        )
        for member in result.scalars().all()
    ]


@router.post("/send-due-notifications", response_model=NotificationResponse)
async def trigger_due_notifications(
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
    sender: NotificationSender = Depends(get_notification_sender),
    today: date = Depends(get_today),
):
    """Email overdue and soon-to-expire members."""
    results = await send_due_notifications(
        db, sender, today, notice_days=settings.RENEWAL_NOTICE_DAYS
    )
    await db.commit()
    return NotificationResponse(results=results)
