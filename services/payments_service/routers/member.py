"""Payment history for a single member."""

import uuid

from fastapi import APIRouter, Depends
from libs.auth.models import AuthUser
from libs.auth.permissions import require_permission
from libs.db.session import get_async_db
from services.members_service.services.pause_manager import get_member_or_404
from services.payments_service.models import Payment, PaymentStatus
from services.payments_service.schemas import (
    MemberPaymentsResponse,
    MemberPaymentStats,
    PaymentResponse,
)
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/members", tags=["payments"])


@router.get("/{member_id}/payments", response_model=MemberPaymentsResponse)
async def get_member_payments(
    member_id: uuid.UUID,
    current_user: AuthUser = Depends(require_permission("view_payments")),
    db: AsyncSession = Depends(get_async_db),
):
    await get_member_or_404(db, member_id)

    result = await db.execute(
        select(Payment)
        .where(Payment.member_id == member_id)
        .order_by(Payment.payment_date.desc(), Payment.created_at.desc())
    )
    payments = result.scalars().all()

    completed = [p for p in payments if p.status == PaymentStatus.COMPLETED]
    return MemberPaymentsResponse(
        payments=[PaymentResponse.model_validate(p) for p in payments],
        stats=MemberPaymentStats(
            total_amount=sum(p.amount for p in completed),
            completed_payments=len(completed),
            pending_payments=sum(
                1 for p in payments if p.status == PaymentStatus.PENDING
            ),
            last_payment_date=payments[0].payment_date if payments else None,
        ),
    )
