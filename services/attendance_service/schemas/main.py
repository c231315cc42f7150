import uuid
from datetime import date as date_type
from datetime import datetime
from typing import Optional

from libs.common.schemas import RequestModel, reject_null
from pydantic import BaseModel, ConfigDict, field_validator
from services.attendance_service.models import AttendanceStatus


class AttendanceCreate(RequestModel):
    member_id: uuid.UUID
    date: date_type
    status: AttendanceStatus
    notes: Optional[str] = None


class BulkAttendanceItem(RequestModel):
    member_id: uuid.UUID
    status: AttendanceStatus
    notes: Optional[str] = None


class BulkAttendanceCreate(RequestModel):
    date: date_type
    records: list[BulkAttendanceItem] = []


class AttendanceUpdate(RequestModel):
    date: Optional[date_type] = None
    status: Optional[AttendanceStatus] = None
    notes: Optional[str] = None

    not_null = field_validator("date", "status")(reject_null)


class AttendanceMember(BaseModel):
    id: uuid.UUID
    name: str
    email: str
    membership_type: Optional[uuid.UUID] = None

    model_config = ConfigDict(from_attributes=True)


class AttendanceResponse(BaseModel):
    id: uuid.UUID
    member_id: uuid.UUID
    date: date_type
    status: AttendanceStatus
    notes: Optional[str] = None
    marked_by: Optional[str] = None
    updated_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class AttendanceWithMember(AttendanceResponse):
    member: Optional[AttendanceMember] = None


class MemberAttendanceCounts(BaseModel):
    name: str
    total: int = 0
    present: int = 0
    absent: int = 0
    late: int = 0


class AttendanceStatsResponse(BaseModel):
    total: int
    present: int
    absent: int
    late: int
    member_wise: dict[str, MemberAttendanceCounts]


class MemberAttendanceStats(BaseModel):
    total_days: int
    present_days: int
    late_days: int
    absent_days: int
    attendance_percentage: float


class MemberAttendanceResponse(BaseModel):
    attendance: list[AttendanceResponse]
    stats: MemberAttendanceStats
