"""FastAPI application for the Attendance Service."""

from fastapi import FastAPI
from libs.common.error_handler import add_exception_handlers
from libs.common.middleware import add_observability_middleware
from libs.common.rate_limit import add_rate_limiting
from services.attendance_service.routers import (
    attendance_router,
    member_router,
)


def create_app() -> FastAPI:
    """Create and configure the Attendance Service FastAPI app."""
    app = FastAPI(
        title="StackFit Attendance Service",
        version="0.1.0",
        description="Attendance tracking service for StackFit.",
    )

    add_rate_limiting(app)
    add_observability_middleware(app)
    add_exception_handlers(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "attendance"}

    app.include_router(attendance_router)
    app.include_router(member_router)

    return app


app = create_app()
