"""
Due-date notification dispatch.

Finds overdue and soon-to-expire active memberships, hands each member to the
injected sender, and tallies the results. A failing send is counted and never
stops the batch.
"""

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional, Protocol

from libs.common.datetime_utils import utc_now
from libs.common.emails.membership import (
    send_overdue_email,
    send_renewal_reminder_email,
)
from libs.common.logging import get_logger
from services.members_service.models import Member, MemberStatus
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

DEFAULT_NOTICE_DAYS = 7


@dataclass
class Receipt:
    """Outcome of one notification."""

    member_id: str
    kind: str  # overdue, renewal
    delivered: bool
    detail: Optional[str] = None


class NotificationSender(Protocol):
    async def send_overdue(
        self, member: Member, end_date: date, days_overdue: int
    ) -> Receipt: ...

    async def send_renewal(
        self, member: Member, end_date: date, days_until: int
    ) -> Receipt: ...


class EmailNotificationSender:
    """Sends the membership emails through the shared mailer."""

    async def send_overdue(
        self, member: Member, end_date: date, days_overdue: int
    ) -> Receipt:
        delivered = await send_overdue_email(
            to_email=member.email,
            member_name=member.name,
            end_date=end_date,
            days_overdue=days_overdue,
        )
        return Receipt(member_id=str(member.id), kind="overdue", delivered=delivered)

    async def send_renewal(
        self, member: Member, end_date: date, days_until: int
    ) -> Receipt:
        delivered = await send_renewal_reminder_email(
            to_email=member.email,
            member_name=member.name,
            end_date=end_date,
            days_until=days_until,
        )
        return Receipt(member_id=str(member.id), kind="renewal", delivered=delivered)


def get_notification_sender() -> NotificationSender:
    """FastAPI dependency returning the default sender."""
    return EmailNotificationSender()


def _empty_bucket(total: int) -> dict:
    return {"total": total, "sent": 0, "failed": 0, "members": []}


async def find_overdue_members(db: AsyncSession, today: date) -> list[Member]:
    result = await db.execute(
        select(Member)
        .where(Member.status == MemberStatus.ACTIVE, Member.end_date <= today)
        .order_by(Member.end_date.asc())
    )
    return list(result.scalars().all())


async def find_upcoming_members(
    db: AsyncSession, today: date, notice_days: int = DEFAULT_NOTICE_DAYS
) -> list[Member]:
    result = await db.execute(
        select(Member)
        .where(
            Member.status == MemberStatus.ACTIVE,
            Member.end_date > today,
            Member.end_date <= today + timedelta(days=notice_days),
        )
        .order_by(Member.end_date.asc())
    )
    return list(result.scalars().all())


async def send_due_notifications(
    db: AsyncSession,
    sender: NotificationSender,
    today: date,
    notice_days: int = DEFAULT_NOTICE_DAYS,
) -> dict:
    """
    Notify overdue and upcoming members.

    Every member that was notified gets ``last_notification_sent`` stamped
    in one batch update. The caller commits.

    Returns:
        {"overdue": {total, sent, failed, members}, "upcoming": {...}}
    """
    overdue = await find_overdue_members(db, today)
    upcoming = await find_upcoming_members(db, today, notice_days)

    results = {
        "overdue": _empty_bucket(len(overdue)),
        "upcoming": _empty_bucket(len(upcoming)),
    }
    notified_ids = []

    for member in overdue:
        days_overdue = (today - member.end_date).days
        bucket = results["overdue"]
        try:
            receipt = await sender.send_overdue(member, member.end_date, days_overdue)
        except Exception as e:
            logger.error(f"Failed to send overdue notification to {member.email}: {e}")
            bucket["failed"] += 1
            continue
        if not receipt.delivered:
            bucket["failed"] += 1
            continue
        bucket["sent"] += 1
        bucket["members"].append(
            {
                "id": str(member.id),
                "name": member.name,
                "email": member.email,
                "days_overdue": days_overdue,
            }
        )
        notified_ids.append(member.id)

    for member in upcoming:
        days_until = (member.end_date - today).days
        bucket = results["upcoming"]
        try:
            receipt = await sender.send_renewal(member, member.end_date, days_until)
        except Exception as e:
            logger.error(f"Failed to send renewal notification to {member.email}: {e}")
            bucket["failed"] += 1
            continue
        if not receipt.delivered:
            bucket["failed"] += 1
            continue
        bucket["sent"] += 1
        bucket["members"].append(
            {
                "id": str(member.id),
                "name": member.name,
                "email": member.email,
                "days_until_renewal": days_until,
            }
        )
        notified_ids.append(member.id)

    if notified_ids:
        await db.execute(
            update(Member)
            .where(Member.id.in_(notified_ids))
            .values(last_notification_sent=utc_now())
            .execution_options(synchronize_session=False)
        )

    logger.info(
        "Due notifications dispatched",
        extra={
            "extra_fields": {
                "overdue_sent": results["overdue"]["sent"],
                "overdue_failed": results["overdue"]["failed"],
                "upcoming_sent": results["upcoming"]["sent"],
                "upcoming_failed": results["upcoming"]["failed"],
            }
        },
    )
    return results
