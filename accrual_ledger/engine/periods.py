"""
Reporting Windows

Turns the day / week / month / year views a caller navigates into
inclusive ReportWindows for the aggregator.
"""

from datetime import date, timedelta
from typing import Optional

from dateutil.relativedelta import relativedelta

from accrual_ledger.config import get_settings
from accrual_ledger.dates import DayLike, add_months, month_end, month_start, normalize_day
from accrual_ledger.models.ledger import PeriodView, ReportWindow


def _week_start_day(week_start: Optional[int]) -> int:
    if week_start is None:
        week_start = get_settings().reporting.week_start_day
    if not 0 <= week_start <= 6:
        raise ValueError(f"week_start must be between 0 (Monday) and 6 (Sunday), got {week_start}")
    return week_start


def window_for(
    view: PeriodView,
    reference: DayLike,
    week_start: Optional[int] = None,
) -> ReportWindow:
    """
    The window of the given view that contains the reference day.

    Args:
        view: DAY, WEEK, MONTH or YEAR
        reference: Any day inside the wanted window
        week_start: First weekday of a week (0 = Monday). Defaults to
                    the reporting setting.
    """
    day = normalize_day(reference)

    if view == PeriodView.DAY:
        return ReportWindow(start=day, end=day, view=view)

    if view == PeriodView.WEEK:
        offset = (day.weekday() - _week_start_day(week_start)) % 7
        start = day - timedelta(days=offset)
        return ReportWindow(start=start, end=start + timedelta(days=6), view=view)

    if view == PeriodView.MONTH:
        return ReportWindow(start=month_start(day), end=month_end(day), view=view)

    if view == PeriodView.YEAR:
        return ReportWindow(
            start=date(day.year, 1, 1),
            end=date(day.year, 12, 31),
            view=view,
        )

    raise ValueError(f"Unknown period view: {view!r}")


def navigate(
    view: PeriodView,
    reference: DayLike,
    steps: int,
    week_start: Optional[int] = None,
) -> ReportWindow:
    """
    Move `steps` views forward (or backward when negative) from the
    reference day and return that window.

    Month and year steps clamp to the end of shorter months, so stepping
    one month from January 31 lands in February.
    """
    day = normalize_day(reference)

    if view == PeriodView.DAY:
        moved = day + timedelta(days=steps)
    elif view == PeriodView.WEEK:
        moved = day + timedelta(weeks=steps)
    elif view == PeriodView.MONTH:
        moved = add_months(day, steps)
    elif view == PeriodView.YEAR:
        moved = day + relativedelta(years=steps)
    else:
        raise ValueError(f"Unknown period view: {view!r}")

    return window_for(view, moved, week_start=week_start)


def trailing_month_windows(reference: DayLike, months: int) -> list[ReportWindow]:
    """
    The `months` calendar months ending with the reference day's month,
    oldest first.
    """
    if months < 1:
        raise ValueError(f"months must be at least 1, got {months}")

    first = month_start(normalize_day(reference))
    return [
        window_for(PeriodView.MONTH, add_months(first, -offset))
        for offset in range(months - 1, -1, -1)
    ]
