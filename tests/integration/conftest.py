"""
Service client fixtures for integration tests.

Each client talks to one in-process service app over ASGI with the shared
test session, a fixed business date and an admin bearer token.
"""

import uuid
from typing import Any, AsyncGenerator

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from libs.auth.security import create_access_token
from libs.common.datetime_utils import get_today
from libs.db.session import get_async_db
from services.payments_service.services.notifications import (
    Receipt,
    get_notification_sender,
)
from services.payments_service.stripe_client import (
    PaymentIntentResult,
    StripeGateway,
    get_payment_gateway,
)
from tests.factories import TODAY

WEBHOOK_SECRET = "whsec_test_stackfit"


class FakeStripeGateway(StripeGateway):
    """Verifies webhooks for real, records intents instead of calling Stripe."""

    def __init__(self):
        super().__init__(secret_key="sk_test_stackfit", webhook_secret=WEBHOOK_SECRET)
        self.created: list[dict[str, Any]] = []

    async def create_intent(self, amount_cents, currency, metadata):
        self.created.append(
            {"amount_cents": amount_cents, "currency": currency, "metadata": metadata}
        )
        intent_id = f"pi_{uuid.uuid4().hex[:12]}"
        return PaymentIntentResult(
            id=intent_id,
            client_secret=f"{intent_id}_secret_test",
            amount=amount_cents,
            currency=currency,
            status="requires_payment_method",
            metadata=metadata,
        )


class RecordingSender:
    """Notification sender that records calls and can fail chosen emails."""

    def __init__(self, fail_emails: tuple[str, ...] = ()):
        self.fail_emails = set(fail_emails)
        self.overdue: list[tuple[str, int]] = []
        self.renewals: list[tuple[str, int]] = []

    async def send_overdue(self, member, end_date, days_overdue):
        if member.email in self.fail_emails:
            raise RuntimeError("mail server unavailable")
        self.overdue.append((member.email, days_overdue))
        return Receipt(member_id=str(member.id), kind="overdue", delivered=True)

    async def send_renewal(self, member, end_date, days_until):
        if member.email in self.fail_emails:
            raise RuntimeError("mail server unavailable")
        self.renewals.append((member.email, days_until))
        return Receipt(member_id=str(member.id), kind="renewal", delivered=True)


def auth_header(role: str = "admin", subject: str = "admin") -> dict[str, str]:
    token = create_access_token(subject=subject, role=role)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def stripe_gateway() -> FakeStripeGateway:
    return FakeStripeGateway()


@pytest.fixture
def notification_sender() -> RecordingSender:
    return RecordingSender()


@pytest.fixture
def wire_app(db_session, stripe_gateway, notification_sender):
    """Return a function that points an app's dependencies at test doubles."""
    wired: list[FastAPI] = []

    async def _override_get_db():
        yield db_session

    def _wire(app: FastAPI) -> FastAPI:
        app.dependency_overrides[get_async_db] = _override_get_db
        app.dependency_overrides[get_today] = lambda: TODAY
        app.dependency_overrides[get_payment_gateway] = lambda: stripe_gateway
        app.dependency_overrides[get_notification_sender] = (
            lambda: notification_sender
        )
        wired.append(app)
        return app

    yield _wire

    for app in wired:
        app.dependency_overrides.clear()


async def _client(app: FastAPI, headers: dict) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test", headers=headers
    ) as ac:
        yield ac


@pytest_asyncio.fixture
async def members_client(wire_app) -> AsyncGenerator[AsyncClient, None]:
    from services.members_service.app.main import app

    async for ac in _client(wire_app(app), auth_header()):
        yield ac


@pytest_asyncio.fixture
async def payments_client(wire_app) -> AsyncGenerator[AsyncClient, None]:
    from services.payments_service.app.main import app

    async for ac in _client(wire_app(app), auth_header()):
        yield ac


@pytest_asyncio.fixture
async def attendance_client(wire_app) -> AsyncGenerator[AsyncClient, None]:
    from services.attendance_service.app.main import app

    async for ac in _client(wire_app(app), auth_header()):
        yield ac


@pytest_asyncio.fixture
async def gateway_client(wire_app) -> AsyncGenerator[AsyncClient, None]:
    from services.gateway_service.app.main import app

    async for ac in _client(wire_app(app), auth_header()):
        yield ac


@pytest_asyncio.fixture
async def anon_members_client(wire_app) -> AsyncGenerator[AsyncClient, None]:
    """Members service client without a bearer token."""
    from services.members_service.app.main import app

    async for ac in _client(wire_app(app), {}):
        yield ac


@pytest_asyncio.fixture
async def anon_payments_client(wire_app) -> AsyncGenerator[AsyncClient, None]:
    """Payments service client without a bearer token (Stripe webhooks)."""
    from services.payments_service.app.main import app

    async for ac in _client(wire_app(app), {}):
        yield ac
