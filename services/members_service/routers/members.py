"""Member CRUD, listing and export."""

import math
import uuid
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from libs.auth.dependencies import require_admin
from libs.auth.models import AuthUser
from libs.auth.permissions import require_permission
from libs.common.datetime_utils import get_today
from libs.common.exceptions import InvalidInput, NotFound
from libs.common.logging import get_logger
from libs.db.session import get_async_db
from services.attendance_service.models import AttendanceRecord, AttendanceStatus
from services.members_service.models import (
    Member,
    MembershipPause,
    MembershipPlan,
    MemberStatus,
)
from services.members_service.routers._helpers import dump_changes, member_response
from services.members_service.schemas import (
    AttendanceSummary,
    MemberCreate,
    MemberCreatedResponse,
    MemberDetailResponse,
    MemberExportResponse,
    MemberExportRow,
    MemberListResponse,
    MemberUpdate,
    PaymentHistoryItem,
    PaymentSummary,
    PlanSummary,
)
from services.members_service.services.pause_manager import get_member_or_404
from services.members_service.services.subscription import (
    calculate_plan_end_date,
    evaluate_subscription,
)
from services.payments_service.models import Payment, PaymentStatus
from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)
router = APIRouter(prefix="/members", tags=["members"])


def _parse_statuses(raw: Optional[str]) -> list[MemberStatus]:
    if not raw:
        return []
    try:
        return [MemberStatus(value.strip()) for value in raw.split(",") if value.strip()]
    except ValueError:
        raise InvalidInput(f"Invalid status filter: {raw}")


def _apply_member_filters(
    query,
    status: Optional[str],
    membership_type: Optional[uuid.UUID],
    search: Optional[str],
):
    statuses = _parse_statuses(status)
    if statuses:
        query = query.where(Member.status.in_(statuses))
    if membership_type:
        query = query.where(Member.membership_type == membership_type)
    if search:
        pattern = f"%{search.strip()}%"
        query = query.where(
            or_(
                Member.name.ilike(pattern),
                Member.email.ilike(pattern),
                Member.phone.ilike(pattern),
            )
        )
    return query


async def _get_plan(db: AsyncSession, plan_id: uuid.UUID) -> Optional[MembershipPlan]:
    result = await db.execute(select(MembershipPlan).where(MembershipPlan.id == plan_id))
    return result.scalar_one_or_none()


async def _ensure_email_free(
    db: AsyncSession, email: str, exclude_id: Optional[uuid.UUID] = None
) -> None:
    query = select(Member.id).where(Member.email == email)
    if exclude_id:
        query = query.where(Member.id != exclude_id)
    result = await db.execute(query)
    if result.first() is not None:
        raise InvalidInput("Email already registered")


@router.get("/", response_model=MemberListResponse)
async def list_members(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status: Optional[str] = Query(None, description="Comma separated statuses"),
    membership_type: Optional[uuid.UUID] = None,
    search: Optional[str] = None,
    current_user: AuthUser = Depends(require_permission("view_members")),
    db: AsyncSession = Depends(get_async_db),
    today: date = Depends(get_today),
):
    """
    List members with filters and pagination.

    Each row carries its computed subscription status and days remaining.
    """
    base = _apply_member_filters(select(Member), status, membership_type, search)

    count_query = select(func.count()).select_from(base.subquery())
    total = (await db.execute(count_query)).scalar_one()

    query = (
        base.order_by(Member.created_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    result = await db.execute(query)
    members = result.scalars().all()

    return MemberListResponse(
        members=[member_response(m, today) for m in members],
        total_pages=math.ceil(total / limit) if total else 0,
        current_page=page,
        total_members=total,
    )


@router.get("/export", response_model=MemberExportResponse)
async def export_members(
    status: Optional[str] = None,
    membership_type: Optional[uuid.UUID] = None,
    search: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
    today: date = Depends(get_today),
):
    """Flat member rows for the frontend's CSV export."""
    query = _apply_member_filters(
        select(Member, MembershipPlan.name).outerjoin(
            MembershipPlan, Member.membership_type == MembershipPlan.id
        ),
        status,
        membership_type,
        search,
    )
    if start_date:
        query = query.where(Member.start_date >= start_date)
    if end_date:
        query = query.where(Member.end_date <= end_date)

    result = await db.execute(query.order_by(Member.created_at.desc()))

    rows = []
    for member, plan_name in result.all():
        state = evaluate_subscription(member.end_date, today)
        rows.append(
            MemberExportRow(
                id=member.id,
                name=member.name,
                email=member.email,
                phone=member.phone,
                address=member.address,
                membership_type=plan_name,
                status=member.status,
                start_date=member.start_date,
                end_date=member.end_date,
                subscription_status=state.status.value,
                days_remaining=state.days_remaining,
            )
        )
    return MemberExportResponse(members=rows)


@router.get("/{member_id}", response_model=MemberDetailResponse)
async def get_member(
    member_id: uuid.UUID,
    current_user: AuthUser = Depends(require_permission("view_members")),
    db: AsyncSession = Depends(get_async_db),
    today: date = Depends(get_today),
):
    """
    Member profile with plan, attendance statistics and payment statistics.
    """
    member = await get_member_or_404(db, member_id)
    plan = await _get_plan(db, member.membership_type) if member.membership_type else None

    attendance_result = await db.execute(
        select(AttendanceRecord.date, AttendanceRecord.status)
        .where(AttendanceRecord.member_id == member_id)
        .order_by(AttendanceRecord.date.desc())
    )
    attendance = attendance_result.all()
    total_days = len(attendance)
    present_days = sum(1 for row in attendance if row.status == AttendanceStatus.PRESENT)

    payments_result = await db.execute(
        select(Payment)
        .where(Payment.member_id == member_id)
        .order_by(Payment.payment_date.desc(), Payment.created_at.desc())
    )
    payments = payments_result.scalars().all()

    base = member_response(member, today)
    return MemberDetailResponse(
        **base.model_dump(),
        plan=PlanSummary.model_validate(plan) if plan else None,
        attendance_stats=AttendanceSummary(
            total_days=total_days,
            present_days=present_days,
            attendance_percentage=(present_days / total_days) * 100 if total_days else 0,
            last_attendance=attendance[0].date if attendance else None,
        ),
        payment_stats=PaymentSummary(
            total_paid=sum(
                p.amount for p in payments if p.status == PaymentStatus.COMPLETED
            ),
            last_payment=payments[0].payment_date if payments else None,
            payment_history=[
                PaymentHistoryItem(
                    id=p.id,
                    amount=p.amount,
                    payment_date=p.payment_date,
                    payment_method=p.payment_method.value,
                    payment_type=p.payment_type.value,
                    status=p.status.value,
                )
                for p in payments
            ],
        ),
    )


@router.post("/", response_model=MemberCreatedResponse, status_code=201)
async def create_member(
    member_in: MemberCreate,
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
    today: date = Depends(get_today),
):
    """
    Create a member on a plan.

    The end date is derived from the plan duration and the member waits in
    ``pending_payment`` until the first membership payment is recorded.
    """
    plan = await _get_plan(db, member_in.membership_type)
    if not plan:
        raise InvalidInput("Invalid membership type")
    await _ensure_email_free(db, member_in.email)

    data = member_in.model_dump()
    member = Member(
        **data,
        end_date=calculate_plan_end_date(member_in.start_date, plan.duration),
        status=MemberStatus.PENDING_PAYMENT,
        created_by=current_user.user_id,
    )
    db.add(member)
    await db.commit()
    await db.refresh(member)

    logger.info(
        "Member created",
        extra={"extra_fields": {"member_id": str(member.id), "plan": plan.name}},
    )
    return MemberCreatedResponse(
        message=(
            "Member created successfully. "
            "Please record their payment to activate the membership."
        ),
        member=member_response(member, today),
        membership=PlanSummary.model_validate(plan),
    )


@router.put("/{member_id}", response_model=MemberDetailResponse)
async def update_member(
    member_id: uuid.UUID,
    member_in: MemberUpdate,
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
    today: date = Depends(get_today),
):
    """
    Update member fields.

    When both a plan and a start date are sent, the end date is recomputed.
    """
    member = await get_member_or_404(db, member_id)
    changes = dump_changes(member_in)

    plan = None
    if changes.get("membership_type"):
        plan = await _get_plan(db, changes["membership_type"])
        if not plan:
            raise InvalidInput("Invalid membership type")
    if changes.get("email") and changes["email"] != member.email:
        await _ensure_email_free(db, changes["email"], exclude_id=member.id)

    for field, value in changes.items():
        setattr(member, field, value)
    if plan and changes.get("start_date"):
        member.end_date = calculate_plan_end_date(changes["start_date"], plan.duration)
    member.updated_by = current_user.user_id

    await db.commit()
    await db.refresh(member)
    return await get_member(member.id, current_user, db, today)


@router.delete("/{member_id}")
async def delete_member(
    member_id: uuid.UUID,
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Delete a member with no payment or attendance history."""
    member = await get_member_or_404(db, member_id)

    payment_count = (
        await db.execute(
            select(func.count(Payment.id)).where(Payment.member_id == member_id)
        )
    ).scalar_one()
    attendance_count = (
        await db.execute(
            select(func.count(AttendanceRecord.id)).where(
                AttendanceRecord.member_id == member_id
            )
        )
    ).scalar_one()
    if payment_count or attendance_count:
        raise InvalidInput(
            "Cannot delete member with existing payment or attendance records",
            has_payments=payment_count > 0,
            has_attendance=attendance_count > 0,
        )

    if member.current_pause_id is not None:
        member.current_pause_id = None
        await db.flush()
    await db.execute(
        delete(MembershipPause).where(MembershipPause.member_id == member_id)
    )
    await db.delete(member)
    await db.commit()

    logger.info("Member deleted", extra={"extra_fields": {"member_id": str(member_id)}})
    return {"message": "Member deleted successfully"}
