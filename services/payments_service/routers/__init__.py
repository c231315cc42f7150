"""Routers package."""

from services.payments_service.routers.intents import router as intents_router
from services.payments_service.routers.member import router as member_router
from services.payments_service.routers.notifications import (
    router as notifications_router,
)
from services.payments_service.routers.payments import router as payments_router
from services.payments_service.routers.webhooks import router as webhooks_router

__all__ = [
    "intents_router",
    "member_router",
    "notifications_router",
    "payments_router",
    "webhooks_router",
]
