"""Members service routers package."""

from services.members_service.routers.admin import router as admin_router
from services.members_service.routers.auth import router as auth_router
from services.members_service.routers.members import router as members_router
from services.members_service.routers.pauses import router as pauses_router
from services.members_service.routers.plans import router as plans_router
from services.members_service.routers.registration import router as registration_router

__all__ = [
    "admin_router",
    "auth_router",
    "members_router",
    "pauses_router",
    "plans_router",
    "registration_router",
]
