"""
Allocator

Spreads one record's amount over the calendar days of its coverage span
using the monthly-bucket method:

1. The amount is split equally across the covered calendar months
   (monthly_share = amount / coverage_months).
2. Each month's share is split equally across that month's actual days.

DESIGN DECISION: A flat amount / total_days rate is NOT used. It would
understate February and overstate 31-day months, while the obligation
itself is "the same amount every month". Day-level granularity only
smooths within a month.

The allocation is a generator. Calling allocate() again restarts it from
the beginning; no iteration state is shared between calls.
"""

from typing import Iterator

import structlog

from accrual_ledger.dates import add_months, iter_days
from accrual_ledger.engine.errors import DegenerateBucketError
from accrual_ledger.models.ledger import Allocation, CoverageBucket, LedgerRecord


logger = structlog.get_logger(__name__)


def coverage_buckets(record: LedgerRecord) -> Iterator[CoverageBucket]:
    """
    Yield the calendar-month buckets of a record's coverage span.

    Every boundary is offset from the anchor date, so bucket i ends
    exactly where bucket i + 1 starts even when month ends are clamped.
    """
    monthly_share = record.monthly_share
    anchor = record.anchor_date

    for index in range(record.coverage_months):
        yield CoverageBucket(
            index=index,
            start=add_months(anchor, index),
            end=add_months(anchor, index + 1),
            monthly_share=monthly_share,
        )


def allocate(record: LedgerRecord, strict: bool = False) -> Iterator[Allocation]:
    """
    Yield (day, amount) allocations for one record, in date order.

    A single-month record lands in full on its anchor date. A multi-month
    record yields one allocation per covered day.

    Args:
        record: The record to allocate
        strict: Raise DegenerateBucketError instead of skipping a
                bucket that spans no days

    Yields:
        Allocation(day, amount)
    """
    if not record.is_amortized:
        yield Allocation(record.anchor_date, record.amount)
        return

    for bucket in coverage_buckets(record):
        daily_rate = bucket.daily_rate
        if daily_rate is None:
            if strict:
                raise DegenerateBucketError(
                    record.id, bucket.index, bucket.start, bucket.end
                )
            # Unreachable with correct month arithmetic
            logger.warning(
                "degenerate_bucket_skipped",
                record_id=str(record.id),
                bucket_index=bucket.index,
                bucket_start=bucket.start.isoformat(),
                bucket_end=bucket.end.isoformat(),
            )
            continue

        for day in iter_days(bucket.start, bucket.end):
            yield Allocation(day, daily_rate)
