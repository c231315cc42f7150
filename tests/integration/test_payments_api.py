"""Integration tests for payments_service endpoints."""

import uuid
from datetime import date, timedelta

import pytest
from services.members_service.models import Member, MemberStatus
from services.payments_service.models import PaymentMethod, PaymentStatus, PaymentType
from tests.factories import TODAY, MemberFactory, PaymentFactory


async def _add(db_session, *objs):
    db_session.add_all(objs)
    await db_session.commit()


# ---------------------------------------------------------------------------
# Manual payments
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_manual_membership_payment_renews(payments_client, db_session):
    member = MemberFactory.create(
        status=MemberStatus.PENDING_PAYMENT, end_date=date(2024, 6, 30)
    )
    await _add(db_session, member)

    response = await payments_client.post(
        "/payments/",
        json={
            "memberId": str(member.id),
            "amount": 147.0,
            "paymentDate": TODAY.isoformat(),
            "paymentMethod": "cash",
            "paymentType": "membership_fee",
            "subscriptionMonths": 3,
        },
    )

    assert response.status_code == 201, response.text
    data = response.json()
    assert data["status"] == "completed"
    assert data["recorded_by"] == "admin"

    await db_session.refresh(member)
    assert member.status == MemberStatus.ACTIVE
    assert member.end_date == date(2024, 9, 30)


@pytest.mark.asyncio
@pytest.mark.integration
async def test_manual_payment_unknown_member(payments_client):
    response = await payments_client.post(
        "/payments/",
        json={
            "member_id": str(uuid.uuid4()),
            "amount": 10,
            "payment_date": TODAY.isoformat(),
            "payment_method": "cash",
            "payment_type": "other",
        },
    )
    assert response.status_code == 404
    assert response.json() == {"error": "Member not found"}


@pytest.mark.asyncio
@pytest.mark.integration
async def test_manual_payment_rejects_unknown_method(payments_client, db_session):
    member = MemberFactory.create()
    await _add(db_session, member)

    response = await payments_client.post(
        "/payments/",
        json={
            "member_id": str(member.id),
            "amount": 10,
            "payment_date": TODAY.isoformat(),
            "payment_method": "cheque",
            "payment_type": "other",
        },
    )
    assert response.status_code == 400


# ---------------------------------------------------------------------------
# Listing, stats, detail
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_list_and_search_payments(payments_client, db_session):
    alice = MemberFactory.create(name="Alice Smith")
    bob = MemberFactory.create(name="Bob Jones")
    await _add(db_session, alice, bob)
    await _add(
        db_session,
        PaymentFactory.create(member_id=alice.id, payment_method=PaymentMethod.CARD),
        PaymentFactory.create(
            member_id=bob.id,
            payment_type=PaymentType.OTHER,
            payment_date=TODAY - timedelta(days=40),
        ),
    )

    response = await payments_client.get("/payments/")
    assert response.status_code == 200
    payments = response.json()["payments"]
    assert [p["member"]["name"] for p in payments] == ["Alice Smith", "Bob Jones"]

    response = await payments_client.get("/payments/", params={"search": "alice"})
    assert len(response.json()["payments"]) == 1

    response = await payments_client.get("/payments/", params={"search": "card"})
    assert response.json()["payments"][0]["member"]["name"] == "Alice Smith"

    response = await payments_client.get(
        "/payments/",
        params={
            "start_date": (TODAY - timedelta(days=7)).isoformat(),
            "end_date": TODAY.isoformat(),
        },
    )
    assert len(response.json()["payments"]) == 1


@pytest.mark.asyncio
@pytest.mark.integration
async def test_payment_stats(payments_client, db_session):
    member = MemberFactory.create()
    await _add(db_session, member)
    await _add(
        db_session,
        PaymentFactory.create(member_id=member.id, amount=50.0),
        PaymentFactory.create(
            member_id=member.id,
            amount=20.0,
            payment_type=PaymentType.REGISTRATION_FEE,
            payment_method=PaymentMethod.UPI,
        ),
    )

    response = await payments_client.get("/payments/stats")

    assert response.status_code == 200
    assert response.json() == {
        "total_amount": 70.0,
        "by_payment_type": {"membership_fee": 50.0, "registration_fee": 20.0},
        "by_payment_method": {"cash": 50.0, "upi": 20.0},
    }


@pytest.mark.asyncio
@pytest.mark.integration
async def test_payment_detail(payments_client, db_session):
    member = MemberFactory.create(
        start_date=TODAY - timedelta(days=10), end_date=TODAY + timedelta(days=20)
    )
    await _add(db_session, member)
    payments = [
        PaymentFactory.create(
            member_id=member.id, payment_date=TODAY - timedelta(days=30 * i)
        )
        for i in range(7)
    ]
    await _add(db_session, *payments)

    response = await payments_client.get(f"/payments/{payments[0].id}")

    assert response.status_code == 200, response.text
    data = response.json()
    assert data["member"]["id"] == str(member.id)
    assert len(data["payment_history"]) == 5
    period = data["subscription_period"]
    assert period["total_days"] == 30
    assert period["elapsed_days"] == 10
    assert period["days_remaining"] == 20
    assert period["progress"] == 33.3
    assert period["is_active"] is True


@pytest.mark.asyncio
@pytest.mark.integration
async def test_payment_not_found(payments_client):
    response = await payments_client.get(f"/payments/{uuid.uuid4()}")
    assert response.status_code == 404
    assert response.json() == {"error": "Payment not found"}


@pytest.mark.asyncio
@pytest.mark.integration
async def test_member_payments(payments_client, db_session):
    member = MemberFactory.create()
    await _add(db_session, member)
    await _add(
        db_session,
        PaymentFactory.create(member_id=member.id, amount=30.0),
        PaymentFactory.create(
            member_id=member.id,
            amount=99.0,
            status=PaymentStatus.PENDING,
            payment_date=TODAY - timedelta(days=3),
        ),
    )

    response = await payments_client.get(f"/members/{member.id}/payments")

    assert response.status_code == 200
    stats = response.json()["stats"]
    assert stats == {
        "total_amount": 30.0,
        "completed_payments": 1,
        "pending_payments": 1,
        "last_payment_date": TODAY.isoformat(),
    }


# ---------------------------------------------------------------------------
# Due and upcoming
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_due_payments_include_last_payment(payments_client, db_session):
    overdue = MemberFactory.create(name="Late", end_date=TODAY - timedelta(days=5))
    current = MemberFactory.create(name="Current", end_date=TODAY + timedelta(days=5))
    await _add(db_session, overdue, current)
    await _add(
        db_session,
        PaymentFactory.create(
            member_id=overdue.id, payment_date=TODAY - timedelta(days=35), amount=40.0
        ),
    )

    response = await payments_client.get("/payments/due")

    assert response.status_code == 200
    [row] = response.json()
    assert row["name"] == "Late"
    assert row["days_overdue"] == 5
    assert row["last_payment"]["amount"] == 40.0


@pytest.mark.asyncio
@pytest.mark.integration
async def test_upcoming_renewals_window(payments_client, db_session):
    await _add(
        db_session,
        MemberFactory.create(name="Today", end_date=TODAY),
        MemberFactory.create(name="Soon", end_date=TODAY + timedelta(days=30)),
        MemberFactory.create(name="Later", end_date=TODAY + timedelta(days=31)),
        MemberFactory.create(name="Gone", end_date=TODAY - timedelta(days=1)),
    )

    response = await payments_client.get("/payments/upcoming-renewals")

    assert response.status_code == 200
    rows = response.json()
    assert [r["name"] for r in rows] == ["Today", "Soon"]
    assert rows[1]["days_until_renewal"] == 30


# ---------------------------------------------------------------------------
# Notifications
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_send_due_notifications(payments_client, db_session, notification_sender):
    overdue = MemberFactory.create(
        email="late@example.com", end_date=TODAY - timedelta(days=2)
    )
    soon = MemberFactory.create(
        email="soon@example.com", end_date=TODAY + timedelta(days=6)
    )
    broken = MemberFactory.create(
        email="bounce@example.com", end_date=TODAY + timedelta(days=1)
    )
    await _add(db_session, overdue, soon, broken)
    notification_sender.fail_emails.add("bounce@example.com")

    response = await payments_client.post("/payments/send-due-notifications")

    assert response.status_code == 200, response.text
    data = response.json()
    assert data["success"] is True
    assert data["results"]["overdue"]["sent"] == 1
    assert data["results"]["upcoming"]["total"] == 2
    assert data["results"]["upcoming"]["sent"] == 1
    assert data["results"]["upcoming"]["failed"] == 1
    assert notification_sender.overdue == [("late@example.com", 2)]
    assert notification_sender.renewals == [("soon@example.com", 6)]

    db_session.expire_all()
    stamped = await db_session.get(Member, soon.id)
    assert stamped.last_notification_sent is not None
    skipped = await db_session.get(Member, broken.id)
    assert skipped.last_notification_sent is None


@pytest.mark.asyncio
@pytest.mark.integration
async def test_send_due_notifications_requires_admin(payments_client):
    from tests.integration.conftest import auth_header

    response = await payments_client.post(
        "/payments/send-due-notifications", headers=auth_header(role="staff")
    )
    assert response.status_code == 403
    assert response.json() == {"error": "Admin privileges required"}
