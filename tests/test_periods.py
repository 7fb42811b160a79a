"""
Tests for reporting windows and calendar helpers.
"""

import pytest
from datetime import date, datetime

from accrual_ledger.dates import (
    add_months,
    coverage_end,
    iter_days,
    month_end,
    month_key,
    normalize_day,
    overlap_days,
)
from accrual_ledger.engine.periods import navigate, trailing_month_windows, window_for
from accrual_ledger.models.ledger import PeriodView


class TestCalendarHelpers:
    """Tests for day-precision date arithmetic."""

    def test_normalize_day_accepts_common_inputs(self):
        """Test dates, datetimes and ISO strings."""
        assert normalize_day(date(2024, 3, 5)) == date(2024, 3, 5)
        assert normalize_day(datetime(2024, 3, 5, 23, 59)) == date(2024, 3, 5)
        assert normalize_day("2024-03-05") == date(2024, 3, 5)
        assert normalize_day(" 2024-03-05T10:15:00 ") == date(2024, 3, 5)

    def test_normalize_day_accepts_utc_suffix(self):
        """Test timestamps ending in Z, as browsers serialize them."""
        assert normalize_day("2024-01-15T10:00:00Z") == date(2024, 1, 15)
        assert normalize_day("2024-01-15T23:30:00.000Z") == date(2024, 1, 15)

    def test_normalize_day_rejects_garbage(self):
        """Test that unreadable values raise ValueError."""
        with pytest.raises(ValueError, match="Unparseable date"):
            normalize_day("05/03/2024x")
        with pytest.raises(ValueError, match="Unparseable date"):
            normalize_day(20240305)

    def test_add_months_clamps(self):
        """Test month offsets from the end of a long month."""
        assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)
        assert add_months(date(2023, 1, 31), 1) == date(2023, 2, 28)
        assert add_months(date(2024, 3, 31), -1) == date(2024, 2, 29)

    def test_coverage_end(self):
        """Test exclusive coverage ends."""
        assert coverage_end(date(2024, 1, 15), 1) == date(2024, 1, 16)
        assert coverage_end(date(2024, 1, 15), 12) == date(2025, 1, 15)

    def test_overlap_days(self):
        """Test half-open span against inclusive window."""
        span = (date(2024, 1, 15), date(2024, 2, 15))
        assert overlap_days(*span, date(2024, 1, 1), date(2024, 1, 31)) == 17
        assert overlap_days(*span, date(2024, 2, 15), date(2024, 2, 20)) == 0
        assert overlap_days(*span, date(2023, 1, 1), date(2023, 1, 31)) == 0

    def test_month_helpers(self):
        assert month_end(date(2024, 2, 10)) == date(2024, 2, 29)
        assert month_key(date(2024, 2, 10)) == "2024-02"
        assert len(list(iter_days(date(2024, 2, 1), date(2024, 3, 1)))) == 29


class TestWindowFor:
    """Tests for the day / week / month / year views."""

    def test_day(self):
        window = window_for(PeriodView.DAY, date(2024, 3, 6))
        assert (window.start, window.end) == (date(2024, 3, 6), date(2024, 3, 6))
        assert window.view == PeriodView.DAY

    def test_week_starting_monday(self):
        """Test that Wednesday 2024-03-06 falls in Mon 4 to Sun 10."""
        window = window_for(PeriodView.WEEK, date(2024, 3, 6), week_start=0)
        assert (window.start, window.end) == (date(2024, 3, 4), date(2024, 3, 10))

    def test_week_starting_sunday(self):
        window = window_for(PeriodView.WEEK, date(2024, 3, 6), week_start=6)
        assert (window.start, window.end) == (date(2024, 3, 3), date(2024, 3, 9))

    def test_week_start_from_settings(self, monkeypatch):
        """Test that the reporting setting picks the first weekday."""
        monkeypatch.setenv("REPORTING_WEEK_START_DAY", "6")
        window = window_for(PeriodView.WEEK, date(2024, 3, 6))
        assert window.start == date(2024, 3, 3)

    def test_invalid_week_start(self):
        with pytest.raises(ValueError, match="week_start must be between"):
            window_for(PeriodView.WEEK, date(2024, 3, 6), week_start=7)

    def test_month(self):
        window = window_for(PeriodView.MONTH, "2024-02-10")
        assert (window.start, window.end) == (date(2024, 2, 1), date(2024, 2, 29))
        assert window.days == 29

    def test_year(self):
        window = window_for(PeriodView.YEAR, date(2024, 7, 4))
        assert (window.start, window.end) == (date(2024, 1, 1), date(2024, 12, 31))
        assert window.days == 366


class TestNavigate:
    """Tests for stepping between windows."""

    def test_previous_day(self):
        window = navigate(PeriodView.DAY, date(2024, 3, 1), -1)
        assert window.start == date(2024, 2, 29)

    def test_next_week(self):
        window = navigate(PeriodView.WEEK, date(2024, 3, 6), 1, week_start=0)
        assert (window.start, window.end) == (date(2024, 3, 11), date(2024, 3, 17))

    def test_next_month_from_month_end(self):
        """Test that stepping from January 31 lands in February."""
        window = navigate(PeriodView.MONTH, date(2024, 1, 31), 1)
        assert (window.start, window.end) == (date(2024, 2, 1), date(2024, 2, 29))

    def test_previous_year_from_leap_day(self):
        window = navigate(PeriodView.YEAR, date(2024, 2, 29), -1)
        assert window.start == date(2023, 1, 1)


class TestTrailingMonths:
    """Tests for monthly history windows."""

    def test_oldest_first(self):
        """Test that windows run oldest to newest across a year boundary."""
        windows = trailing_month_windows(date(2024, 2, 10), 3)

        assert [w.start for w in windows] == [
            date(2023, 12, 1),
            date(2024, 1, 1),
            date(2024, 2, 1),
        ]
        assert windows[-1].end == date(2024, 2, 29)

    def test_single_month(self):
        windows = trailing_month_windows(date(2024, 2, 10), 1)
        assert len(windows) == 1

    def test_months_must_be_positive(self):
        with pytest.raises(ValueError, match="months must be at least 1"):
            trailing_month_windows(date(2024, 2, 10), 0)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
