"""
Period Aggregator

Answers a windowed query over a set of ledger records:
- scalar totals (income, expense, balance) for the window
- a per-calendar-day breakdown for the window

DESIGN DECISION: Aggregation is DETERMINISTIC and pure. It reads its
input records, writes only to freshly built output models, and performs
no I/O, so it can run concurrently from any number of callers.

The caller normally passes only records anchored on or before the window
end. Records anchored after the window are harmless; they contribute
nothing.

Conservation: the totals are summed from the finished daily entries in
date order, so total_income == sum(daily income) holds exactly rather
than within a rounding tolerance.
"""

from collections.abc import Mapping
from datetime import date
from decimal import Decimal
from typing import Any, Iterable, Iterator, Optional, Union

import structlog
from pydantic import ValidationError

from accrual_ledger.config import get_settings
from accrual_ledger.dates import DayLike, normalize_day
from accrual_ledger.engine.allocator import allocate
from accrual_ledger.engine.errors import RecordValidationError, WindowValidationError
from accrual_ledger.models.ledger import (
    UNCATEGORIZED,
    ZERO,
    CategoryTotal,
    DailyEntry,
    FlowType,
    LedgerRecord,
    PeriodStatistics,
)
from accrual_ledger.validation import RecordValidator


logger = structlog.get_logger(__name__)

RecordInput = Union[LedgerRecord, Mapping[str, Any]]


def normalize_window(window_start: DayLike, window_end: DayLike) -> tuple[date, date]:
    """
    Normalize an inclusive window to whole days.

    Raises:
        WindowValidationError: If a bound is unreadable or start > end
    """
    try:
        start = normalize_day(window_start)
        end = normalize_day(window_end)
    except ValueError as e:
        raise WindowValidationError(str(e)) from e

    if start > end:
        raise WindowValidationError(
            f"Window start ({start.isoformat()}) cannot be after window end ({end.isoformat()})"
        )
    return start, end


def coerce_records(
    records: Iterable[RecordInput],
    validator: RecordValidator,
) -> Iterator[LedgerRecord]:
    """
    Yield validated LedgerRecords.

    Ledger rows given as mappings are parsed into records. Any record
    failing schema validation raises RecordValidationError naming it.
    """
    for position, raw in enumerate(records):
        if isinstance(raw, LedgerRecord):
            errors = [
                issue.message
                for issue in validator.check_schema(raw)
                if issue.severity == "error"
            ]
            if errors:
                raise RecordValidationError(position, getattr(raw, "id", None), errors)
            yield raw
        elif isinstance(raw, Mapping):
            try:
                yield LedgerRecord.model_validate(raw)
            except ValidationError as e:
                messages = [
                    f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
                    for err in e.errors()
                ]
                raise RecordValidationError(position, raw.get("id"), messages) from e
        else:
            raise RecordValidationError(
                position, None, [f"Unsupported record type: {type(raw).__name__}"]
            )


def _flow_column(flow_type: FlowType) -> int:
    if flow_type is FlowType.INCOME:
        return 0
    if flow_type is FlowType.EXPENSE:
        return 1
    raise ValueError(f"Unknown flow type: {flow_type!r}")


class PeriodAggregator:
    """
    Drives the allocator for each record and accumulates the allocations
    that land inside the reporting window.

    Cost is O(records x coverage days); for a personal ledger of a few
    thousand records this needs no caching.
    """

    def __init__(
        self,
        validator: Optional[RecordValidator] = None,
        strict_buckets: Optional[bool] = None,
    ):
        """
        Args:
            validator: Validator used for the schema checks.
            strict_buckets: Raise on a degenerate coverage bucket instead of
                           skipping it. Defaults to the reporting setting.
        """
        self._validator = validator or RecordValidator()
        if strict_buckets is None:
            strict_buckets = get_settings().reporting.raise_on_degenerate_bucket
        self._strict = strict_buckets

    def _windowed_allocations(
        self,
        record: LedgerRecord,
        start: date,
        end: date,
    ) -> Iterator[tuple[date, Decimal]]:
        """Allocations of one record that fall inside [start, end]."""
        if record.anchor_date > end:
            return
        for day, amount in allocate(record, strict=self._strict):
            if day > end:
                # Allocations come in date order
                break
            if day >= start:
                yield day, amount

    def compute(
        self,
        records: Iterable[RecordInput],
        window_start: DayLike,
        window_end: DayLike,
    ) -> PeriodStatistics:
        """
        Compute totals and the daily breakdown for an inclusive window.

        Args:
            records: Ledger records (or ledger rows as mappings)
            window_start: First day of the window
            window_end: Last day of the window

        Returns:
            PeriodStatistics for the window

        Raises:
            WindowValidationError: If the window is reversed or unreadable
            RecordValidationError: If any record is malformed
        """
        start, end = normalize_window(window_start, window_end)

        touched: dict[date, list[Decimal]] = {}
        record_count = 0

        for record in coerce_records(records, self._validator):
            record_count += 1
            column = _flow_column(record.flow_type)
            for day, amount in self._windowed_allocations(record, start, end):
                slot = touched.get(day)
                if slot is None:
                    slot = touched[day] = [ZERO, ZERO]
                slot[column] += amount

        daily: dict[str, DailyEntry] = {}
        total_income = ZERO
        total_expense = ZERO
        for day in sorted(touched):
            income, expense = touched[day]
            daily[day.isoformat()] = DailyEntry(income=income, expense=expense)
            total_income += income
            total_expense += expense

        logger.debug(
            "period_computed",
            window_start=start.isoformat(),
            window_end=end.isoformat(),
            record_count=record_count,
            days_touched=len(daily),
        )

        return PeriodStatistics(
            window_start=start,
            window_end=end,
            total_income=total_income,
            total_expense=total_expense,
            daily=daily,
            record_count=record_count,
        )

    def windowed_amount(
        self,
        record: LedgerRecord,
        window_start: DayLike,
        window_end: DayLike,
    ) -> Decimal:
        """Portion of one record's amount allocated inside the window."""
        start, end = normalize_window(window_start, window_end)
        total = ZERO
        for _, amount in self._windowed_allocations(record, start, end):
            total += amount
        return total

    def category_totals(
        self,
        records: Iterable[RecordInput],
        window_start: DayLike,
        window_end: DayLike,
        flow_type: Optional[FlowType] = None,
    ) -> list[CategoryTotal]:
        """
        Per-category totals using the same monthly-bucket allocation
        as compute(), so category rows add up to the period totals.
        """
        start, end = normalize_window(window_start, window_end)
        contributions = []

        for record in coerce_records(records, self._validator):
            if flow_type is not None and record.flow_type != flow_type:
                continue
            touched = False
            amount = ZERO
            for _, share in self._windowed_allocations(record, start, end):
                touched = True
                amount += share
            if touched:
                contributions.append((record, amount))

        return summarize_categories(contributions)


def summarize_categories(
    contributions: Iterable[tuple[LedgerRecord, Decimal]],
) -> list[CategoryTotal]:
    """
    Group (record, amount in window) pairs by flow type and category.

    Rows are sorted by amount, largest first. share is each row's
    fraction of its flow type's total.
    """
    groups: dict[tuple[FlowType, str], list] = {}
    flow_totals = {FlowType.INCOME: ZERO, FlowType.EXPENSE: ZERO}

    for record, amount in contributions:
        key = (record.flow_type, record.category_name or UNCATEGORIZED)
        group = groups.setdefault(key, [ZERO, 0])
        group[0] += amount
        group[1] += 1
        flow_totals[record.flow_type] += amount

    rows = []
    for (flow, name), (amount, count) in groups.items():
        flow_total = flow_totals[flow]
        rows.append(CategoryTotal(
            category_name=name,
            flow_type=flow,
            amount=amount,
            record_count=count,
            share=amount / flow_total if flow_total > 0 else ZERO,
        ))

    rows.sort(key=lambda row: (-row.amount, row.flow_type.value, row.category_name))
    return rows


def calculate_period_stats(
    records: Iterable[RecordInput],
    window_start: DayLike,
    window_end: DayLike,
) -> PeriodStatistics:
    """Compute PeriodStatistics with a default-configured aggregator."""
    return PeriodAggregator().compute(records, window_start, window_end)
