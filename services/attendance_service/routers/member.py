"""Attendance history for a single member."""

import uuid
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends
from libs.auth.models import AuthUser
from libs.auth.permissions import require_permission
from libs.db.session import get_async_db
from services.attendance_service.models import AttendanceRecord, AttendanceStatus
from services.attendance_service.schemas import (
    AttendanceResponse,
    MemberAttendanceResponse,
    MemberAttendanceStats,
)
from services.members_service.services.pause_manager import get_member_or_404
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/members", tags=["attendance"])


@router.get("/{member_id}/attendance", response_model=MemberAttendanceResponse)
async def get_member_attendance(
    member_id: uuid.UUID,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    current_user: AuthUser = Depends(require_permission("view_attendance")),
    db: AsyncSession = Depends(get_async_db),
):
    """
    Attendance of one member with totals.

    Late days count towards the attendance percentage.
    """
    await get_member_or_404(db, member_id)

    query = select(AttendanceRecord).where(AttendanceRecord.member_id == member_id)
    if start_date and end_date:
        query = query.where(
            AttendanceRecord.date >= start_date, AttendanceRecord.date <= end_date
        )
    result = await db.execute(query.order_by(AttendanceRecord.date.desc()))
    records = result.scalars().all()

    def _count(record_status: AttendanceStatus) -> int:
        return sum(1 for r in records if r.status == record_status)

    total = len(records)
    present = _count(AttendanceStatus.PRESENT)
    late = _count(AttendanceStatus.LATE)
    return MemberAttendanceResponse(
        attendance=[AttendanceResponse.model_validate(r) for r in records],
        stats=MemberAttendanceStats(
            total_days=total,
            present_days=present,
            late_days=late,
            absent_days=_count(AttendanceStatus.ABSENT),
            attendance_percentage=((present + late) / total) * 100 if total else 0,
        ),
    )
