"""FastAPI application for the Payments Service."""

from fastapi import FastAPI
from libs.common.error_handler import add_exception_handlers
from libs.common.middleware import add_observability_middleware
from libs.common.rate_limit import add_rate_limiting
from services.payments_service.routers import (
    intents_router,
    member_router,
    notifications_router,
    payments_router,
    webhooks_router,
)


def create_app() -> FastAPI:
    """Create and configure the Payments Service FastAPI app."""
    app = FastAPI(
        title="StackFit Payments Service",
        version="0.1.0",
        description="Payments, Stripe checkout and renewal notices for StackFit.",
    )

    add_rate_limiting(app)
    add_observability_middleware(app)
    add_exception_handlers(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "payments"}

    # Fixed paths go before /payments/{payment_id}
    app.include_router(intents_router)
    app.include_router(webhooks_router)
    app.include_router(notifications_router)
    app.include_router(payments_router)
    app.include_router(member_router)

    return app


app = create_app()
