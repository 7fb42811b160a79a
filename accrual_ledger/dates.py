"""
Calendar Helpers

Day-precision date arithmetic shared by the models, the engine and the
reporting layer.

DESIGN DECISION: The engine never sees a time of day. Every value entering
it passes through normalize_day(), which truncates timestamps to whole
calendar days so window comparisons cannot be off by one.

Month offsets use dateutil's relativedelta, which clamps to the last day of
a shorter month (2024-01-31 + 1 month = 2024-02-29).

ISO strings are read with dateutil's isoparse, which also accepts a trailing
"Z" offset.
"""

from datetime import date, datetime, timedelta
from typing import Iterator, Union

from dateutil import parser as dtp
from dateutil.relativedelta import relativedelta


DayLike = Union[date, datetime, str]

ONE_DAY = timedelta(days=1)


def normalize_day(value: DayLike) -> date:
    """
    Convert a date, datetime or ISO string to a calendar day.

    Raises:
        ValueError: If the value cannot be read as a date
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return dtp.isoparse(value.strip()).date()
        except (ValueError, OverflowError):
            raise ValueError(f"Unparseable date: {value!r}") from None
    raise ValueError(f"Unparseable date: {value!r}")


def add_months(day: date, months: int) -> date:
    """Offset a day by whole calendar months, clamping to month end."""
    return day + relativedelta(months=months)


def days_between(start: date, end: date) -> int:
    """Number of days from start (inclusive) to end (exclusive)."""
    return (end - start).days


def iter_days(start: date, end: date) -> Iterator[date]:
    """Yield every day in [start, end)."""
    current = start
    while current < end:
        yield current
        current += ONE_DAY


def coverage_end(anchor: date, coverage_months: int) -> date:
    """
    Exclusive end of a coverage span.

    A single-month record covers its anchor day only.
    """
    if coverage_months <= 1:
        return anchor + ONE_DAY
    return add_months(anchor, coverage_months)


def coverage_span_fits(anchor: date, coverage_months: int) -> bool:
    """True if the coverage span ends on a representable date."""
    try:
        coverage_end(anchor, coverage_months)
    except (ValueError, OverflowError):
        return False
    return True


def overlap_days(
    span_start: date,
    span_end: date,
    window_start: date,
    window_end: date,
) -> int:
    """
    Days shared by the span [span_start, span_end) and the
    inclusive window [window_start, window_end].
    """
    start = max(span_start, window_start)
    end = min(span_end, window_end + ONE_DAY)
    return max(0, days_between(start, end))


def month_start(day: date) -> date:
    """First day of the day's month."""
    return day.replace(day=1)


def month_end(day: date) -> date:
    """Last day of the day's month."""
    return add_months(month_start(day), 1) - ONE_DAY


def month_key(day: date) -> str:
    """Month label used for grouping (YYYY-MM)."""
    return day.strftime("%Y-%m")
