"""
Unit tests for payment-driven renewal.

Tests call the renewal engine directly with the db_session fixture.
"""

import uuid
from datetime import date

import pytest
from libs.common.exceptions import NotFound
from services.members_service.models import MemberStatus
from services.payments_service.models import (
    Payment,
    PaymentMethod,
    PaymentStatus,
    PaymentType,
)
from services.payments_service.services.renewal import (
    DUPLICATE,
    INVALID_METADATA,
    RECORDED,
    UNKNOWN_MEMBER,
    handle_payment_succeeded,
    record_payment,
)
from sqlalchemy import func, select
from tests.factories import TODAY, MemberFactory


async def _add_member(db_session, **overrides):
    member = MemberFactory.create(**overrides)
    db_session.add(member)
    await db_session.commit()
    return member


async def _payment_count(db_session) -> int:
    return (await db_session.execute(select(func.count(Payment.id)))).scalar_one()


def _intent(member_id, intent_id="pi_123", **metadata):
    return {
        "id": intent_id,
        "amount": 4900,
        "metadata": {"memberId": str(member_id), **metadata},
    }


@pytest.mark.asyncio
@pytest.mark.unit
async def test_membership_fee_activates_pending_member(db_session):
    member = await _add_member(
        db_session, status=MemberStatus.PENDING_PAYMENT, end_date=None
    )

    payment, renewed = await record_payment(
        db_session,
        member_id=member.id,
        amount=49.0,
        payment_date=TODAY,
        payment_method=PaymentMethod.CASH,
        payment_type=PaymentType.MEMBERSHIP_FEE,
        today=TODAY,
        subscription_months=3,
        actor_id="admin",
    )
    await db_session.commit()

    assert payment.status == PaymentStatus.COMPLETED
    assert renewed.status == MemberStatus.ACTIVE
    assert renewed.end_date == date(2024, 9, 15)


@pytest.mark.asyncio
@pytest.mark.unit
async def test_running_membership_stacks_renewal(db_session):
    member = await _add_member(db_session, end_date=date(2024, 6, 30))

    _, renewed = await record_payment(
        db_session,
        member_id=member.id,
        amount=49.0,
        payment_date=TODAY,
        payment_method=PaymentMethod.CARD,
        payment_type=PaymentType.MEMBERSHIP_FEE,
        today=TODAY,
    )

    assert renewed.end_date == date(2024, 7, 30)


@pytest.mark.asyncio
@pytest.mark.unit
async def test_other_payment_types_do_not_renew(db_session):
    member = await _add_member(
        db_session, status=MemberStatus.EXPIRED, end_date=date(2024, 5, 1)
    )

    await record_payment(
        db_session,
        member_id=member.id,
        amount=10.0,
        payment_date=TODAY,
        payment_method=PaymentMethod.CASH,
        payment_type=PaymentType.REGISTRATION_FEE,
        today=TODAY,
    )

    assert member.end_date == date(2024, 5, 1)
    assert member.status == MemberStatus.EXPIRED


@pytest.mark.asyncio
@pytest.mark.unit
async def test_record_payment_unknown_member(db_session):
    with pytest.raises(NotFound):
        await record_payment(
            db_session,
            member_id=uuid.uuid4(),
            amount=49.0,
            payment_date=TODAY,
            payment_method=PaymentMethod.CASH,
            payment_type=PaymentType.MEMBERSHIP_FEE,
            today=TODAY,
        )
    assert await _payment_count(db_session) == 0


@pytest.mark.asyncio
@pytest.mark.unit
async def test_webhook_event_records_and_renews_once(db_session):
    member = await _add_member(db_session, end_date=date(2024, 6, 20))
    intent = _intent(member.id, subscriptionMonths="2", paymentType="membership_fee")

    assert await handle_payment_succeeded(db_session, intent, TODAY) == RECORDED
    await db_session.commit()
    assert await handle_payment_succeeded(db_session, intent, TODAY) == DUPLICATE
    await db_session.commit()

    payments = (await db_session.execute(select(Payment))).scalars().all()
    assert len(payments) == 1
    assert payments[0].amount == 49.0
    assert payments[0].payment_method == PaymentMethod.STRIPE
    assert payments[0].stripe_payment_id == "pi_123"
    assert member.end_date == date(2024, 8, 20)


@pytest.mark.asyncio
@pytest.mark.unit
async def test_webhook_unknown_member_is_acknowledged(db_session):
    outcome = await handle_payment_succeeded(db_session, _intent(uuid.uuid4()), TODAY)
    assert outcome == UNKNOWN_MEMBER
    assert await _payment_count(db_session) == 0


@pytest.mark.asyncio
@pytest.mark.unit
async def test_webhook_without_member_id(db_session):
    intent = {"id": "pi_bad", "amount": 100, "metadata": {}}
    assert await handle_payment_succeeded(db_session, intent, TODAY) == INVALID_METADATA


@pytest.mark.asyncio
@pytest.mark.unit
async def test_webhook_bad_months_defaults_to_one(db_session):
    member = await _add_member(db_session, end_date=date(2024, 5, 1))
    intent = _intent(member.id, subscriptionMonths="lots")

    assert await handle_payment_succeeded(db_session, intent, TODAY) == RECORDED
    assert member.end_date == date(2024, 7, 15)
