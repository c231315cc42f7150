"""
Subscription state evaluation and membership date arithmetic.

Pure functions with no database dependencies for easy testing.
Callers pass ``today`` explicitly so results never depend on the wall clock.
"""

from dataclasses import dataclass
from datetime import date
from typing import Optional

from libs.common.datetime_utils import add_months, days_between
from services.members_service.models.enums import SubscriptionStatus


@dataclass(frozen=True)
class SubscriptionState:
    status: SubscriptionStatus
    days_remaining: Optional[int]

    def as_dict(self) -> dict:
        return {
            "subscription_status": self.status.value,
            "days_remaining": self.days_remaining,
        }


def evaluate_subscription(end_date: Optional[date], today: date) -> SubscriptionState:
    """
    Derive the subscription status of a member.

    The end date itself is the last active day, so a membership ending today
    is still active with zero days remaining.

    Args:
        end_date: Stored membership end date (None if never set)
        today: Current business date

    Returns:
        SubscriptionState with status and whole days remaining
        (negative once expired, None without an end date)
    """
    if end_date is None:
        return SubscriptionState(SubscriptionStatus.EXPIRED, None)

    days_remaining = days_between(today, end_date)
    status = (
        SubscriptionStatus.ACTIVE if days_remaining >= 0 else SubscriptionStatus.EXPIRED
    )
    return SubscriptionState(status, days_remaining)


def calculate_plan_end_date(start_date: date, duration_months: int) -> date:
    """End date of a plan started on ``start_date``."""
    return add_months(start_date, duration_months)


def calculate_renewed_end_date(
    current_end_date: Optional[date],
    months: int,
    today: date,
) -> date:
    """
    Calculate the end date after renewing for ``months`` calendar months.

    If the membership is still running (end date strictly after today) the
    renewal stacks onto the current end date. Otherwise it starts from today.

    Args:
        current_end_date: Current end date (None if never set)
        months: Number of months purchased
        today: Current business date

    Returns:
        New end date
    """
    base = (
        current_end_date
        if current_end_date and current_end_date > today
        else today
    )
    return add_months(base, months)
