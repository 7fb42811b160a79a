"""
Overlap-Ratio Approximation

An alternative pro-ration used by some category breakdown views:

    amount * days_overlap(span, window) / total_span_days

applied once per record, with no per-month equalization.

WARNING: This is NOT the canonical method. For the same record and window
it gives different numbers from PeriodAggregator whenever the covered
months differ in length, so its rows will not add up to the period
totals. It is kept only behind these explicitly named functions; every
total the reporting layer shows by default uses the monthly-bucket
allocation.
"""

from decimal import Decimal
from typing import Iterable, Optional

from accrual_ledger.dates import DayLike, coverage_span_fits, overlap_days
from accrual_ledger.engine.aggregator import (
    RecordInput,
    coerce_records,
    normalize_window,
    summarize_categories,
)
from accrual_ledger.engine.errors import RecordValidationError
from accrual_ledger.models.ledger import ZERO, CategoryTotal, FlowType, LedgerRecord
from accrual_ledger.validation import RecordValidator


def overlap_share(
    record: LedgerRecord,
    window_start: DayLike,
    window_end: DayLike,
) -> Decimal:
    """
    Approximate portion of a record's amount inside the window.

    A single-month record spans its anchor day only, so for those the
    result matches the canonical allocation exactly.
    """
    start, end = normalize_window(window_start, window_end)
    if not coverage_span_fits(record.anchor_date, record.coverage_months):
        raise RecordValidationError(
            0, record.id, ["Coverage span ends after the last supported date"]
        )
    span_days = record.coverage_days
    if span_days <= 0:
        return ZERO

    shared = overlap_days(record.anchor_date, record.coverage_end, start, end)
    if shared == 0:
        return ZERO
    return record.amount * shared / span_days


def estimate_category_totals_by_overlap(
    records: Iterable[RecordInput],
    window_start: DayLike,
    window_end: DayLike,
    flow_type: Optional[FlowType] = None,
    validator: Optional[RecordValidator] = None,
) -> list[CategoryTotal]:
    """
    Per-category totals using the overlap-ratio approximation.

    Use PeriodAggregator.category_totals() for figures that must agree
    with the period totals.
    """
    start, end = normalize_window(window_start, window_end)
    contributions = []

    for record in coerce_records(records, validator or RecordValidator()):
        if flow_type is not None and record.flow_type != flow_type:
            continue
        if overlap_days(record.anchor_date, record.coverage_end, start, end) == 0:
            continue
        contributions.append((record, overlap_share(record, start, end)))

    return summarize_categories(contributions)
