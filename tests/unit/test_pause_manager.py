"""
Unit tests for the pause manager.

Tests call pause_manager functions directly with the db_session fixture.
"""

import uuid
from datetime import date, timedelta

import pytest
from libs.common.exceptions import (
    AlreadyPaused,
    DurationExceeded,
    InvalidDateRange,
    InvalidState,
    NotFound,
    NotPaused,
)
from services.members_service.models import MemberStatus, PauseStatus
from services.members_service.services import pause_manager
from tests.factories import TODAY, MemberFactory


async def _add_member(db_session, **overrides):
    member = MemberFactory.create(**overrides)
    db_session.add(member)
    await db_session.commit()
    return member


@pytest.mark.unit
class TestValidatePauseRequest:
    """Checks run in order and the first failure wins."""

    def test_already_paused_wins_over_everything(self):
        member = MemberFactory.create(is_paused=True, status=MemberStatus.EXPIRED)
        with pytest.raises(AlreadyPaused, match="already paused"):
            pause_manager.validate_pause_request(
                member, TODAY - timedelta(days=5), TODAY - timedelta(days=9), TODAY
            )

    def test_inactive_member_rejected_before_dates(self):
        member = MemberFactory.create(status=MemberStatus.PENDING_PAYMENT)
        with pytest.raises(InvalidState, match="Only active memberships"):
            pause_manager.validate_pause_request(
                member, TODAY - timedelta(days=1), TODAY, TODAY
            )

    def test_start_in_past(self):
        member = MemberFactory.create()
        with pytest.raises(InvalidDateRange, match="cannot be in the past"):
            pause_manager.validate_pause_request(
                member, TODAY - timedelta(days=1), TODAY + timedelta(days=5), TODAY
            )

    def test_end_not_after_start(self):
        member = MemberFactory.create()
        with pytest.raises(InvalidDateRange, match="must be after start date"):
            pause_manager.validate_pause_request(member, TODAY, TODAY, TODAY)

    def test_span_over_limit(self):
        member = MemberFactory.create()
        with pytest.raises(DurationExceeded, match="cannot exceed 90 days"):
            pause_manager.validate_pause_request(
                member, TODAY, TODAY + timedelta(days=91), TODAY
            )

    def test_span_at_limit_is_allowed(self):
        member = MemberFactory.create()
        span = pause_manager.validate_pause_request(
            member, TODAY, TODAY + timedelta(days=90), TODAY
        )
        assert span == 90

    def test_missing_end_date(self):
        member = MemberFactory.create(end_date=None)
        with pytest.raises(InvalidState, match="no end date"):
            pause_manager.validate_pause_request(
                member, TODAY, TODAY + timedelta(days=10), TODAY
            )


@pytest.mark.asyncio
@pytest.mark.unit
async def test_pause_extends_end_date_by_span(db_session):
    member = await _add_member(db_session, end_date=date(2024, 7, 15))

    pause, updated = await pause_manager.request_pause(
        db_session,
        member.id,
        start_date=date(2024, 6, 20),
        end_date=date(2024, 7, 5),
        reason="Travel",
        actor_id="admin",
        today=TODAY,
    )
    await db_session.commit()

    assert pause.status == PauseStatus.APPROVED
    assert pause.original_end_date == date(2024, 7, 15)
    assert pause.new_end_date == date(2024, 7, 30)
    assert updated.end_date == date(2024, 7, 30)
    assert updated.is_paused is True
    assert updated.current_pause_id == pause.id


@pytest.mark.asyncio
@pytest.mark.unit
async def test_resume_restores_original_end_date(db_session):
    member = await _add_member(db_session, end_date=date(2024, 7, 15))
    pause, _ = await pause_manager.request_pause(
        db_session,
        member.id,
        start_date=TODAY,
        end_date=TODAY + timedelta(days=10),
        reason=None,
        actor_id="admin",
        today=TODAY,
    )
    await db_session.commit()

    resumed_pause, resumed = await pause_manager.resume_membership(
        db_session, member.id, actor_id="admin"
    )
    await db_session.commit()

    assert resumed_pause.id == pause.id
    assert resumed_pause.status == PauseStatus.CANCELLED
    assert resumed.end_date == date(2024, 7, 15)
    assert resumed.is_paused is False
    assert resumed.current_pause_id is None


@pytest.mark.asyncio
@pytest.mark.unit
async def test_rejected_pause_leaves_member_untouched(db_session):
    member = await _add_member(db_session, end_date=date(2024, 7, 15))

    with pytest.raises(DurationExceeded):
        await pause_manager.request_pause(
            db_session,
            member.id,
            start_date=TODAY,
            end_date=TODAY + timedelta(days=120),
            reason=None,
            actor_id="admin",
            today=TODAY,
        )

    assert member.end_date == date(2024, 7, 15)
    assert member.is_paused is False
    assert await pause_manager.list_pauses(db_session, member.id) == []


@pytest.mark.asyncio
@pytest.mark.unit
async def test_resume_requires_a_pause(db_session):
    member = await _add_member(db_session)
    with pytest.raises(NotPaused):
        await pause_manager.resume_membership(db_session, member.id, actor_id="admin")


@pytest.mark.asyncio
@pytest.mark.unit
async def test_unknown_member(db_session):
    with pytest.raises(NotFound, match="Member not found"):
        await pause_manager.request_pause(
            db_session,
            uuid.uuid4(),
            start_date=TODAY,
            end_date=TODAY + timedelta(days=3),
            reason=None,
            actor_id="admin",
            today=TODAY,
        )


@pytest.mark.asyncio
@pytest.mark.unit
async def test_pause_history_newest_first(db_session):
    member = await _add_member(db_session, end_date=date(2024, 9, 1))
    for start in (TODAY, TODAY + timedelta(days=20)):
        await pause_manager.request_pause(
            db_session,
            member.id,
            start_date=start,
            end_date=start + timedelta(days=5),
            reason=None,
            actor_id="admin",
            today=TODAY,
        )
        await pause_manager.resume_membership(db_session, member.id, actor_id="admin")
        await db_session.commit()

    pauses = await pause_manager.list_pauses(db_session, member.id)
    assert [p.start_date for p in pauses] == [TODAY + timedelta(days=20), TODAY]
    assert all(p.status == PauseStatus.CANCELLED for p in pauses)
