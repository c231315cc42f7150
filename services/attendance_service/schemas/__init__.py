"""Attendance Service schemas package."""

from services.attendance_service.schemas.main import (
    AttendanceCreate,
    AttendanceMember,
    AttendanceResponse,
    AttendanceStatsResponse,
    AttendanceUpdate,
    AttendanceWithMember,
    BulkAttendanceCreate,
    BulkAttendanceItem,
    MemberAttendanceCounts,
    MemberAttendanceResponse,
    MemberAttendanceStats,
)

__all__ = [
    "AttendanceCreate",
    "AttendanceMember",
    "AttendanceResponse",
    "AttendanceStatsResponse",
    "AttendanceUpdate",
    "AttendanceWithMember",
    "BulkAttendanceCreate",
    "BulkAttendanceItem",
    "MemberAttendanceCounts",
    "MemberAttendanceResponse",
    "MemberAttendanceStats",
]
