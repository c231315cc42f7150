"""Date and time helpers shared by every service.

Usage:
    from libs.common.datetime_utils import utc_now, local_today, add_months

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
"""

from datetime import date, datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo

from dateutil.relativedelta import relativedelta

from libs.common.config import get_settings


def utc_now() -> datetime:
    """Return timezone-aware UTC datetime.

    Always use this for timestamps in the database.
    """
    return datetime.now(timezone.utc)


def local_today(tz_name: Optional[str] = None) -> date:
    """Return today's date in the configured business timezone."""
    tz_name = tz_name or get_settings().TIMEZONE
    return datetime.now(ZoneInfo(tz_name)).date()


def add_months(value: date, months: int) -> date:
    """Add calendar months, clamping to the last day of shorter months.

    Args:
        value: Base date
        months: Number of months to add (may be negative)

    Returns:
        Shifted date, e.g. 2024-01-31 + 1 month -> 2024-02-29
    """
    return value + relativedelta(months=months)


def days_between(start: date, end: date) -> int:
    """Whole days from ``start`` to ``end`` (negative when ``end`` is earlier)."""
    return (end - start).days


def month_bounds(today: date) -> tuple[date, date]:
    """Return the first day of ``today``'s month and the first day of the next."""
    first = today.replace(day=1)
    return first, add_months(first, 1)


def get_today() -> date:
    """FastAPI dependency for the current business date."""
    return local_today()
