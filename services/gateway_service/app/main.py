"""FastAPI application entrypoint for the StackFit gateway service.

The gateway serves every service router in one process under ``/api``.
All services share one database, so no request is proxied over HTTP.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from libs.common.config import get_settings
from libs.common.error_handler import add_exception_handlers
from libs.common.middleware import add_observability_middleware
from libs.common.rate_limit import add_rate_limiting
from services.attendance_service.routers import attendance_router
from services.attendance_service.routers import member_router as member_attendance_router
from services.gateway_service.app.routers.dashboard import router as dashboard_router
from services.members_service.routers import (
    admin_router,
    auth_router,
    members_router,
    pauses_router,
    plans_router,
    registration_router,
)
from services.payments_service.routers import intents_router
from services.payments_service.routers import member_router as member_payments_router
from services.payments_service.routers import (
    notifications_router,
    payments_router,
    webhooks_router,
)

API_PREFIX = "/api"


def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance."""
    settings = get_settings()
    app = FastAPI(
        title="StackFit Gateway Service",
        version="0.1.0",
        description="API Gateway that serves every StackFit service.",
    )

    add_rate_limiting(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Add observability (structured logging + request tracing)
    add_observability_middleware(app)

    # Add global exception handlers for consistent error responses
    add_exception_handlers(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Simple readiness endpoint."""
        return {"status": "ok"}

    # Fixed paths go before their /{id} siblings
    for router in (
        auth_router,
        admin_router,
        dashboard_router,
        registration_router,
        pauses_router,
        members_router,
        plans_router,
        intents_router,
        webhooks_router,
        notifications_router,
        payments_router,
        member_payments_router,
        attendance_router,
        member_attendance_router,
    ):
        app.include_router(router, prefix=API_PREFIX)

    return app


app = create_app()
