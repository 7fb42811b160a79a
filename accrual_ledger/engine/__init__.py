"""
Accrual Aggregation Engine

Allocator: one record -> lazy (day, amount) allocations.
Aggregator: records + window -> PeriodStatistics.
"""

from accrual_ledger.engine.aggregator import (
    PeriodAggregator,
    calculate_period_stats,
    normalize_window,
)
from accrual_ledger.engine.allocator import allocate, coverage_buckets
from accrual_ledger.engine.errors import (
    DegenerateBucketError,
    LedgerEngineError,
    RecordValidationError,
    WindowValidationError,
)
from accrual_ledger.engine.overlap import (
    estimate_category_totals_by_overlap,
    overlap_share,
)
from accrual_ledger.engine.periods import (
    navigate,
    trailing_month_windows,
    window_for,
)

__all__ = [
    # Allocator
    "allocate",
    "coverage_buckets",
    # Aggregator
    "PeriodAggregator",
    "calculate_period_stats",
    "normalize_window",
    # Overlap approximation
    "estimate_category_totals_by_overlap",
    "overlap_share",
    # Windows
    "navigate",
    "trailing_month_windows",
    "window_for",
    # Errors
    "DegenerateBucketError",
    "LedgerEngineError",
    "RecordValidationError",
    "WindowValidationError",
]
