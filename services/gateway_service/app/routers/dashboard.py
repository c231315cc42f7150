import uuid
from datetime import date, datetime, time, timezone
from typing import List

from fastapi import APIRouter, Depends
from libs.auth.dependencies import require_admin
from libs.auth.models import AuthUser
from libs.common.datetime_utils import get_today, month_bounds
from libs.db.session import get_async_db
from pydantic import BaseModel
from services.attendance_service.models import AttendanceRecord, AttendanceStatus
from services.members_service.models import Member, MemberStatus, MembershipPlan
from services.payments_service.models import Payment
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/admin", tags=["dashboard"])


class Demographics(BaseModel):
    male: int
    female: int
    total: int


class AdminDashboardStats(BaseModel):
    active_members: int
    new_members_this_month: int
    revenue: float
    attendance_rate: int
    demographics: Demographics


class MembershipStatsItem(BaseModel):
    id: uuid.UUID
    name: str
    price: float
    active_count: int


def _start_of(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


@router.get("/dashboard/stats", response_model=AdminDashboardStats)
async def get_admin_dashboard_stats(
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
    today: date = Depends(get_today),
):
    """
    Get statistics for the admin dashboard.

    Revenue and attendance cover the current calendar month.
    """
    month_start, next_month = month_bounds(today)

    active_members = await db.scalar(
        select(func.count(Member.id)).where(Member.status == MemberStatus.ACTIVE)
    )
    new_members = await db.scalar(
        select(func.count(Member.id)).where(
            Member.created_at >= _start_of(month_start),
            Member.created_at < _start_of(next_month),
        )
    )
    revenue = await db.scalar(
        select(func.coalesce(func.sum(Payment.amount), 0)).where(
            Payment.payment_date >= month_start, Payment.payment_date < next_month
        )
    )

    attendance = await db.execute(
        select(AttendanceRecord.status, func.count(AttendanceRecord.id))
        .where(
            AttendanceRecord.date >= month_start, AttendanceRecord.date < next_month
        )
        .group_by(AttendanceRecord.status)
    )
    by_status = {status: count for status, count in attendance.all()}
    total_attendance = sum(by_status.values())
    present = by_status.get(AttendanceStatus.PRESENT, 0)
    attendance_rate = round(present / total_attendance * 100) if total_attendance else 0

    genders = await db.execute(
        select(Member.gender).where(Member.status == MemberStatus.ACTIVE)
    )
    genders = [(g or "").lower() for g in genders.scalars().all()]

    return AdminDashboardStats(
        active_members=active_members or 0,
        new_members_this_month=new_members or 0,
        revenue=float(revenue or 0),
        attendance_rate=attendance_rate,
        demographics=Demographics(
            male=genders.count("male"),
            female=genders.count("female"),
            total=len(genders),
        ),
    )


@router.get("/memberships/stats", response_model=List[MembershipStatsItem])
async def get_membership_stats(
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Price and assigned member count for every plan."""
    result = await db.execute(
        select(
            MembershipPlan.id,
            MembershipPlan.name,
            MembershipPlan.price,
            func.count(Member.id).label("active_count"),
        )
        .outerjoin(Member, Member.membership_type == MembershipPlan.id)
        .group_by(MembershipPlan.id, MembershipPlan.name, MembershipPlan.price)
        .order_by(MembershipPlan.name.asc())
    )
    return [
        MembershipStatsItem(
            id=row.id, name=row.name, price=row.price, active_count=row.active_count
        )
        for row in result.all()
    ]
