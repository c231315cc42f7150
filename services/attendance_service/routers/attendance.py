"""Attendance marking, listing and statistics."""

import uuid
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, status
from libs.auth.dependencies import require_admin
from libs.auth.models import AuthUser
from libs.auth.permissions import require_permission
from libs.common.datetime_utils import get_today
from libs.common.exceptions import InvalidInput, NotFound
from libs.common.logging import get_logger
from libs.db.session import get_async_db
from services.attendance_service.models import AttendanceRecord, AttendanceStatus
from services.attendance_service.schemas import (
    AttendanceCreate,
    AttendanceMember,
    AttendanceResponse,
    AttendanceStatsResponse,
    AttendanceUpdate,
    AttendanceWithMember,
    BulkAttendanceCreate,
    MemberAttendanceCounts,
)
from services.members_service.models import Member
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/attendance", tags=["attendance"])
logger = get_logger(__name__)

DUPLICATE_MESSAGE = "Attendance already marked for this date"


def _with_member(record: AttendanceRecord, member: Member) -> AttendanceWithMember:
    return AttendanceWithMember(
        **AttendanceResponse.model_validate(record).model_dump(),
        member=AttendanceMember.model_validate(member),
    )


async def _already_marked(
    db: AsyncSession,
    member_id: uuid.UUID,
    on: date,
    exclude_id: Optional[uuid.UUID] = None,
) -> bool:
    query = select(AttendanceRecord.id).where(
        AttendanceRecord.member_id == member_id, AttendanceRecord.date == on
    )
    if exclude_id:
        query = query.where(AttendanceRecord.id != exclude_id)
    return (await db.execute(query)).first() is not None


@router.get("/", response_model=list[AttendanceWithMember])
async def list_attendance(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    member_id: Optional[uuid.UUID] = None,
    status: Optional[AttendanceStatus] = None,
    current_user: AuthUser = Depends(require_permission("view_attendance")),
    db: AsyncSession = Depends(get_async_db),
):
    """
    List attendance, newest first.

    Both dates give a range; a single date selects that day only.
    """
    query = select(AttendanceRecord, Member).join(
        Member, AttendanceRecord.member_id == Member.id
    )
    if start_date and end_date:
        query = query.where(
            AttendanceRecord.date >= start_date, AttendanceRecord.date <= end_date
        )
    elif start_date or end_date:
        query = query.where(AttendanceRecord.date == (start_date or end_date))
    if member_id:
        query = query.where(AttendanceRecord.member_id == member_id)
    if status:
        query = query.where(AttendanceRecord.status == status)

    result = await db.execute(
        query.order_by(AttendanceRecord.date.desc(), Member.name.asc())
    )
    return [_with_member(record, member) for record, member in result.all()]


@router.get("/today", response_model=list[AttendanceWithMember])
async def todays_attendance(
    current_user: AuthUser = Depends(require_permission("view_attendance")),
    db: AsyncSession = Depends(get_async_db),
    today: date = Depends(get_today),
):
    result = await db.execute(
        select(AttendanceRecord, Member)
        .join(Member, AttendanceRecord.member_id == Member.id)
        .where(AttendanceRecord.date == today)
        .order_by(Member.name.asc())
    )
    return [_with_member(record, member) for record, member in result.all()]


@router.get("/stats", response_model=AttendanceStatsResponse)
async def attendance_stats(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    member_id: Optional[uuid.UUID] = None,
    current_user: AuthUser = Depends(require_permission("view_attendance")),
    db: AsyncSession = Depends(get_async_db),
):
    """Counts per status, overall and per member."""
    query = (
        select(
            Member.id,
            Member.name,
            AttendanceRecord.status,
            func.count(AttendanceRecord.id),
        )
        .join(Member, AttendanceRecord.member_id == Member.id)
        .group_by(Member.id, Member.name, AttendanceRecord.status)
    )
    if start_date and end_date:
        query = query.where(
            AttendanceRecord.date >= start_date, AttendanceRecord.date <= end_date
        )
    if member_id:
        query = query.where(AttendanceRecord.member_id == member_id)

    totals = {s.value: 0 for s in AttendanceStatus}
    member_wise: dict[str, MemberAttendanceCounts] = {}
    for mid, name, record_status, count in (await db.execute(query)).all():
        totals[record_status.value] += count
        counts = member_wise.setdefault(str(mid), MemberAttendanceCounts(name=name))
        setattr(counts, record_status.value, count)
        counts.total += count

    return AttendanceStatsResponse(
        total=sum(totals.values()),
        present=totals["present"],
        absent=totals["absent"],
        late=totals["late"],
        member_wise=member_wise,
    )


@router.post(
    "/", response_model=AttendanceResponse, status_code=status.HTTP_201_CREATED
)
async def mark_attendance(
    attendance_in: AttendanceCreate,
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Mark attendance for one member on one day."""
    member = await db.get(Member, attendance_in.member_id)
    if not member:
        raise NotFound("Member not found")
    if await _already_marked(db, attendance_in.member_id, attendance_in.date):
        raise InvalidInput(DUPLICATE_MESSAGE)

    record = AttendanceRecord(
        **attendance_in.model_dump(), marked_by=current_user.user_id
    )
    db.add(record)
    await db.commit()
    await db.refresh(record)
    return record


@router.post(
    "/bulk",
    response_model=list[AttendanceResponse],
    status_code=status.HTTP_201_CREATED,
)
async def mark_bulk_attendance(
    bulk_in: BulkAttendanceCreate,
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """
    Mark attendance for many members on one day.

    The batch is all or nothing.
    """
    if not bulk_in.records:
        raise InvalidInput("Invalid records format")

    member_ids = [item.member_id for item in bulk_in.records]
    if len(set(member_ids)) != len(member_ids):
        raise InvalidInput("Duplicate members in attendance records")

    known = await db.execute(select(Member.id).where(Member.id.in_(member_ids)))
    missing = set(member_ids) - set(known.scalars().all())
    if missing:
        raise NotFound(f"Member not found: {sorted(str(m) for m in missing)[0]}")

    existing = await db.execute(
        select(AttendanceRecord.member_id).where(
            AttendanceRecord.date == bulk_in.date,
            AttendanceRecord.member_id.in_(member_ids),
        )
    )
    if existing.first() is not None:
        raise InvalidInput(DUPLICATE_MESSAGE)

    records = [
        AttendanceRecord(
            member_id=item.member_id,
            date=bulk_in.date,
            status=item.status,
            notes=item.notes,
            marked_by=current_user.user_id,
        )
        for item in bulk_in.records
    ]
    db.add_all(records)
    await db.commit()
    for record in records:
        await db.refresh(record)

    logger.info(
        "Bulk attendance marked",
        extra={
            "extra_fields": {"date": bulk_in.date.isoformat(), "count": len(records)}
        },
    )
    return records


@router.put("/{attendance_id}", response_model=AttendanceResponse)
async def update_attendance(
    attendance_id: uuid.UUID,
    attendance_in: AttendanceUpdate,
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    record = await db.get(AttendanceRecord, attendance_id)
    if not record:
        raise NotFound("Attendance record not found")

    changes = attendance_in.model_dump(exclude_unset=True)
    new_date = changes.get("date")
    if new_date and new_date != record.date:
        if await _already_marked(db, record.member_id, new_date, exclude_id=record.id):
            raise InvalidInput(DUPLICATE_MESSAGE)

    for field, value in changes.items():
        setattr(record, field, value)
    record.updated_by = current_user.user_id

    await db.commit()
    await db.refresh(record)
    return record
