"""Tests for Central Time date helpers."""

from datetime import datetime, timezone

import pytest

from scripts.lib import timezone as ct
from scripts.lib.errors import InvalidDateRangeError


def utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


class TestToday:
    def test_today_uses_central_time(self):
        # 03:00 UTC on the 4th is still the evening of the 3rd in Chicago
        assert ct.today(utc(2025, 9, 4, 3, 0)) == "2025-09-03"
        assert ct.today(utc(2025, 9, 4, 6, 0)) == "2025-09-04"

    def test_yesterday_crosses_month_boundary(self):
        now = utc(2025, 3, 1, 3, 0)  # Feb 28, 21:00 CST
        assert ct.today(now) == "2025-02-28"
        assert ct.yesterday(now) == "2025-02-27"

    def test_naive_now_is_treated_as_utc(self):
        assert ct.today(datetime(2025, 9, 4, 3, 0)) == "2025-09-03"

    def test_is_today(self):
        now = utc(2025, 9, 3, 15, 0)
        assert ct.is_today("2025-09-03", now)
        assert ct.is_today("2025-09-03T08:00:00", now)
        assert not ct.is_today("2025-09-02", now)


class TestIsPast6PM:
    def test_before_and_after_lock(self):
        assert ct.is_past_6pm("2025-09-03", utc(2025, 9, 3, 22, 59)) is False
        assert ct.is_past_6pm("2025-09-03", utc(2025, 9, 3, 23, 1)) is True

    def test_exactly_six_is_not_past(self):
        assert ct.is_past_6pm("2025-09-03", utc(2025, 9, 3, 23, 0)) is False

    def test_standard_time_offset(self):
        # CST is UTC-6, so 6 PM on Jan 15 is 00:00 UTC on the 16th
        assert ct.is_past_6pm("2025-01-15", utc(2025, 1, 15, 23, 30)) is False
        assert ct.is_past_6pm("2025-01-15", utc(2025, 1, 16, 0, 30)) is True

    def test_earlier_days_are_locked(self):
        assert ct.is_past_6pm("2025-09-01", utc(2025, 9, 3, 15, 0)) is True

    def test_time_part_is_ignored(self):
        assert ct.is_past_6pm("2025-09-03T01:00:00Z", utc(2025, 9, 3, 15, 0)) is False

    @pytest.mark.parametrize("value", ["bad-date", "", "2025-02-30", None, 20250903])
    def test_malformed_dates_fail_open(self, value):
        assert ct.is_past_6pm(value) is False


class TestDefaultEntryDate:
    def test_go_live_day_defaults_to_previous_day(self):
        assert ct.get_default_entry_date(utc(2025, 9, 3, 15, 0)) == "2025-09-02"

    def test_other_days_default_to_today(self):
        assert ct.get_default_entry_date(utc(2025, 9, 4, 15, 0)) == "2025-09-04"
        assert ct.get_default_entry_date(utc(2025, 9, 2, 15, 0)) == "2025-09-02"


class TestFormatting:
    def test_format_ct_date(self):
        assert ct.format_ct_date("2025-09-02T15:00:00Z") == "9/2/2025"
        assert ct.format_ct_date("2025-09-03T02:00:00+00:00") == "9/2/2025"

    def test_format_ct_datetime(self):
        assert ct.format_ct_datetime("2025-09-02T23:05:00Z") == "9/2/2025 6:05 PM"
        assert ct.format_ct_datetime("2025-09-02T05:30:00Z") == "9/2/2025 12:30 AM"
        assert ct.format_ct_datetime("2025-09-02T17:00:00Z") == "9/2/2025 12:00 PM"


class TestRanges:
    def test_parse_date_range(self):
        start, end = ct.parse_date_range("2025-09-01", "2025-09-07")
        assert (start.day, end.day) == (1, 7)

    def test_single_day_range_is_valid(self):
        ct.parse_date_range("2025-09-01", "2025-09-01")

    def test_reversed_range_rejected(self):
        with pytest.raises(InvalidDateRangeError):
            ct.parse_date_range("2025-09-07", "2025-09-01")

    def test_month_range(self):
        assert ct.month_range(2024, 2) == ("2024-02-01", "2024-02-29")
        assert ct.month_range(2025, 12) == ("2025-12-01", "2025-12-31")
        assert ct.month_range(2025) == ("2025-01-01", "2025-12-31")
