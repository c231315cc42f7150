"""FastAPI application for the Members Service."""

from fastapi import FastAPI
from libs.common.error_handler import add_exception_handlers
from libs.common.middleware import add_observability_middleware
from libs.common.rate_limit import add_rate_limiting
from services.members_service.routers import (
    admin_router,
    auth_router,
    members_router,
    pauses_router,
    plans_router,
    registration_router,
)


def create_app() -> FastAPI:
    """Create and configure the Members Service FastAPI app."""
    app = FastAPI(
        title="StackFit Members Service",
        version="0.1.0",
        description="Members, membership plans and admin accounts for StackFit.",
    )

    add_rate_limiting(app)
    add_observability_middleware(app)
    add_exception_handlers(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "members"}

    # Registration and pause routes go before /members/{member_id}
    app.include_router(auth_router)
    app.include_router(admin_router)
    app.include_router(registration_router)
    app.include_router(pauses_router)
    app.include_router(members_router)
    app.include_router(plans_router)

    return app


app = create_app()
