"""
Pause and resume transitions for memberships.

Every check runs before any row is touched, so a rejected request leaves the
member and its pauses unchanged. Callers own the transaction and commit.
"""

import uuid
from datetime import date, timedelta
from typing import Optional

from libs.common.exceptions import (
    AlreadyPaused,
    DurationExceeded,
    InvalidDateRange,
    InvalidState,
    NotFound,
    NotPaused,
)
from libs.common.logging import get_logger
from services.members_service.models import (
    Member,
    MembershipPause,
    MemberStatus,
    PauseStatus,
)
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

DEFAULT_MAX_PAUSE_DAYS = 90


async def get_member_or_404(db: AsyncSession, member_id: uuid.UUID) -> Member:
    result = await db.execute(select(Member).where(Member.id == member_id))
    member = result.scalar_one_or_none()
    if not member:
        raise NotFound("Member not found")
    return member


def validate_pause_request(
    member: Member,
    start_date: date,
    end_date: date,
    today: date,
    max_days: int = DEFAULT_MAX_PAUSE_DAYS,
) -> int:
    """
    Check a pause request against the member's state.

    Checks run in a fixed order and the first failure wins.

    Returns:
        The pause span in days
    """
    if member.is_paused:
        raise AlreadyPaused("Membership is already paused")
    if member.status != MemberStatus.ACTIVE:
        raise InvalidState("Only active memberships can be paused")
    if start_date < today:
        raise InvalidDateRange("Start date cannot be in the past")
    if end_date <= start_date:
        raise InvalidDateRange("End date must be after start date")

    span_days = (end_date - start_date).days
    if span_days > max_days:
        raise DurationExceeded(f"Pause duration cannot exceed {max_days} days")
    if member.end_date is None:
        raise InvalidState("Membership has no end date to extend")
    return span_days


async def request_pause(
    db: AsyncSession,
    member_id: uuid.UUID,
    start_date: date,
    end_date: date,
    reason: Optional[str],
    actor_id: Optional[str],
    today: date,
    max_days: int = DEFAULT_MAX_PAUSE_DAYS,
) -> tuple[MembershipPause, Member]:
    """
    Pause a membership and push its end date out by the pause span.

    The extension is applied to the stored end date, not re-derived from
    ``start_date``.

    Raises:
        NotFound, AlreadyPaused, InvalidState, InvalidDateRange, DurationExceeded
    """
    member = await get_member_or_404(db, member_id)
    span_days = validate_pause_request(member, start_date, end_date, today, max_days)

    original_end_date = member.end_date
    new_end_date = original_end_date + timedelta(days=span_days)

    pause = MembershipPause(
        member_id=member.id,
        start_date=start_date,
        end_date=end_date,
        reason=reason,
        status=PauseStatus.APPROVED,
        original_end_date=original_end_date,
        new_end_date=new_end_date,
        created_by=actor_id,
        approved_by=actor_id,
    )
    db.add(pause)
    # Insert the pause before the member row points at it
    await db.flush()

    member.is_paused = True
    member.current_pause_id = pause.id
    member.end_date = new_end_date
    member.updated_by = actor_id
    await db.flush()

    logger.info(
        "Membership paused",
        extra={
            "extra_fields": {
                "member_id": str(member.id),
                "pause_id": str(pause.id),
                "span_days": span_days,
                "new_end_date": new_end_date.isoformat(),
            }
        },
    )
    return pause, member


async def resume_membership(
    db: AsyncSession,
    member_id: uuid.UUID,
    actor_id: Optional[str],
) -> tuple[MembershipPause, Member]:
    """
    End the current pause and restore the end date it replaced.

    Raises:
        NotFound, NotPaused
    """
    member = await get_member_or_404(db, member_id)
    if not member.is_paused or member.current_pause_id is None:
        raise NotPaused("Membership is not currently paused")

    result = await db.execute(
        select(MembershipPause).where(MembershipPause.id == member.current_pause_id)
    )
    pause = result.scalar_one_or_none()
    if not pause:
        raise NotFound("Pause record not found")

    pause.status = PauseStatus.CANCELLED
    member.end_date = pause.original_end_date
    member.is_paused = False
    member.current_pause_id = None
    member.updated_by = actor_id
    await db.flush()

    logger.info(
        "Membership resumed",
        extra={
            "extra_fields": {
                "member_id": str(member.id),
                "pause_id": str(pause.id),
                "restored_end_date": pause.original_end_date.isoformat(),
            }
        },
    )
    return pause, member


async def list_pauses(db: AsyncSession, member_id: uuid.UUID) -> list[MembershipPause]:
    """Every pause of a member, newest first."""
    await get_member_or_404(db, member_id)
    result = await db.execute(
        select(MembershipPause)
        .where(MembershipPause.member_id == member_id)
        .order_by(MembershipPause.created_at.desc())
    )
    return list(result.scalars().all())
