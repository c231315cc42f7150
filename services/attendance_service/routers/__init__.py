"""Attendance service routers."""

from services.attendance_service.routers.attendance import router as attendance_router
from services.attendance_service.routers.member import router as member_router

__all__ = [
    "attendance_router",
    "member_router",
]
