"""Unit tests for the shared date helpers."""

from datetime import date, timezone

import pytest
from libs.common.datetime_utils import (
    add_months,
    days_between,
    local_today,
    month_bounds,
    utc_now,
)


@pytest.mark.unit
class TestDateHelpers:
    def test_utc_now_is_timezone_aware(self):
        assert utc_now().tzinfo == timezone.utc

    def test_local_today_accepts_explicit_zone(self):
        assert isinstance(local_today("Asia/Kolkata"), date)

    def test_add_months_clamps_to_short_month(self):
        assert add_months(date(2023, 1, 31), 1) == date(2023, 2, 28)
        assert add_months(date(2024, 3, 31), -1) == date(2024, 2, 29)

    def test_days_between_is_signed(self):
        assert days_between(date(2024, 6, 15), date(2024, 6, 20)) == 5
        assert days_between(date(2024, 6, 20), date(2024, 6, 15)) == -5

    def test_month_bounds_of_december(self):
        assert month_bounds(date(2024, 12, 15)) == (date(2024, 12, 1), date(2025, 1, 1))
