"""
Report Execution Engine

DESIGN DECISION: Report execution is DETERMINISTIC.
A ReportRequest names a report and a window. This executor fetches the
records that could overlap the window from the ledger provider and hands
them to the aggregation engine. Nothing is estimated or cached.

Fetch rule: every record anchored on or before the window end. A record
anchored long before the window may still cover it, so there is no lower
bound on the anchor date.
"""

from datetime import date
from decimal import Decimal
from typing import Optional

from accrual_ledger.config import ReportingSettings, get_settings
from accrual_ledger.dates import DayLike, month_key, normalize_day
from accrual_ledger.engine import (
    PeriodAggregator,
    estimate_category_totals_by_overlap,
    trailing_month_windows,
    window_for,
)
from accrual_ledger.models.ledger import (
    ZERO,
    CategoryTotal,
    DailySummary,
    FlowType,
    LedgerRecord,
    MonthlyTotal,
    PeriodStatistics,
    ReportRequest,
    ReportResult,
    ReportWindow,
)
from accrual_ledger.services.storage import LedgerStorageInterface


class ReportExecutionError(Exception):
    """Error during report execution."""
    pass


class ReportExecutor:
    """
    Executes reports against the ledger provider.

    GUARANTEES:
    - Only reports on records the provider returns
    - Category rows use the same allocation as the period totals,
      unless the overlap approximation is asked for by name
    - Clear "no data found" if nothing lands in the window
    """

    def __init__(
        self,
        storage: LedgerStorageInterface,
        aggregator: Optional[PeriodAggregator] = None,
        settings: Optional[ReportingSettings] = None,
    ):
        self._storage = storage
        self._aggregator = aggregator or PeriodAggregator()
        self._settings = settings or get_settings().reporting

    async def _records_until(self, end: date) -> list[LedgerRecord]:
        return await self._storage.list_records(date_to=end)

    async def period_summary(self, window: ReportWindow) -> PeriodStatistics:
        """Totals and daily breakdown for the window."""
        records = await self._records_until(window.end)
        return self._aggregator.compute(records, window.start, window.end)

    async def daily_series(
        self,
        window: ReportWindow,
        fill_missing: bool = True,
    ) -> list[DailySummary]:
        """Date-sorted daily rows for charting."""
        stats = await self.period_summary(window)
        return stats.series(fill_missing=fill_missing)

    async def category_breakdown(
        self,
        window: ReportWindow,
        flow_type: Optional[FlowType] = None,
    ) -> list[CategoryTotal]:
        """Per-category totals (monthly-bucket allocation)."""
        records = await self._records_until(window.end)
        return self._aggregator.category_totals(
            records, window.start, window.end, flow_type=flow_type
        )

    async def category_breakdown_by_overlap(
        self,
        window: ReportWindow,
        flow_type: Optional[FlowType] = None,
    ) -> list[CategoryTotal]:
        """
        Per-category totals using the overlap-ratio approximation.

        These rows do not necessarily add up to period_summary() totals.
        """
        records = await self._records_until(window.end)
        return estimate_category_totals_by_overlap(
            records, window.start, window.end, flow_type=flow_type
        )

    async def top_categories(
        self,
        window: ReportWindow,
        flow_type: FlowType,
        limit: int = 3,
    ) -> list[CategoryTotal]:
        """Largest categories of one flow type in the window."""
        rows = await self.category_breakdown(window, flow_type=flow_type)
        return rows[:limit]

    async def monthly_history(
        self,
        reference: DayLike,
        months: Optional[int] = None,
    ) -> list[MonthlyTotal]:
        """
        Income and expense per calendar month, oldest first, for the
        `months` months ending with the reference day's month.

        One aggregation pass covers the whole span; its daily entries
        are then grouped by month.
        """
        if months is None:
            months = self._settings.default_history_months
        windows = trailing_month_windows(reference, months)
        span_start, span_end = windows[0].start, windows[-1].end

        stats = await self.period_summary(ReportWindow(start=span_start, end=span_end))

        totals = {month_key(w.start): [ZERO, ZERO] for w in windows}
        for key, entry in stats.daily.items():
            bucket = totals[key[:7]]
            bucket[0] += entry.income
            bucket[1] += entry.expense

        return [
            MonthlyTotal(month=key, income=income, expense=expense)
            for key, (income, expense) in totals.items()
        ]

    async def current_balance(self, as_of: DayLike) -> Decimal:
        """
        Running balance from the earliest record up to as_of.

        Amortized records only count the share allocated on or before
        as_of, so a yearly payment entered today does not hit the
        balance in full.
        """
        end = normalize_day(as_of)
        records = await self._records_until(end)
        if not records:
            return ZERO
        stats = self._aggregator.compute(records, records[0].anchor_date, end)
        return stats.balance

    async def record_count(self, window: ReportWindow) -> int:
        """Number of records anchored inside the window."""
        records = await self._storage.list_records(
            date_from=window.start, date_to=window.end
        )
        return len(records)

    async def recent_records(self, limit: int = 5) -> list[LedgerRecord]:
        """Latest records by anchor date, newest first."""
        return await self._storage.list_records(limit=limit, newest_first=True)

    def resolve_window(self, request: ReportRequest) -> ReportWindow:
        """Window named by a request: explicit dates win over a view."""
        if request.date_from is not None and request.date_to is not None:
            return ReportWindow(start=request.date_from, end=request.date_to)
        return window_for(
            request.view,
            request.reference_date,
            week_start=self._settings.week_start_day,
        )

    async def execute(self, request: ReportRequest) -> ReportResult:
        """
        Execute a ReportRequest and return a ReportResult.

        Errors are reported in the result (success=False) rather than
        raised, so a caller rendering a dashboard always gets an answer.
        """
        try:
            if request.report_type == "summary":
                return await self._execute_summary(request)
            elif request.report_type == "daily":
                return await self._execute_daily(request)
            elif request.report_type == "categories":
                return await self._execute_categories(request, overlap=False)
            elif request.report_type == "categories_overlap":
                return await self._execute_categories(request, overlap=True)
            elif request.report_type == "top_categories":
                return await self._execute_top_categories(request)
            elif request.report_type == "monthly":
                return await self._execute_monthly(request)
            elif request.report_type == "balance":
                return await self._execute_balance(request)
            elif request.report_type == "count":
                return await self._execute_count(request)
            elif request.report_type == "recent":
                return await self._execute_recent(request)
            else:
                raise ReportExecutionError(f"Unknown report type: {request.report_type}")

        except Exception as e:
            return ReportResult(
                request_id=request.request_id,
                success=False,
                error_message=str(e),
                data_found=False,
                description=f"Report failed: {str(e)}",
            )

    async def _execute_summary(self, request: ReportRequest) -> ReportResult:
        window = self.resolve_window(request)
        stats = await self.period_summary(window)

        desc_parts = ["Totals", self._date_range_str(window.start, window.end)]
        if not stats.is_empty:
            desc_parts.append(
                f"income {self.format_amount(stats.total_income)}, "
                f"expense {self.format_amount(stats.total_expense)}"
            )

        return ReportResult(
            request_id=request.request_id,
            success=True,
            data_found=not stats.is_empty,
            window_start=window.start,
            window_end=window.end,
            statistics=stats,
            description=" ".join(desc_parts),
        )

    async def _execute_daily(self, request: ReportRequest) -> ReportResult:
        window = self.resolve_window(request)
        stats = await self.period_summary(window)

        return ReportResult(
            request_id=request.request_id,
            success=True,
            data_found=not stats.is_empty,
            window_start=window.start,
            window_end=window.end,
            statistics=stats,
            series=stats.series(fill_missing=request.fill_missing),
            description=f"Daily breakdown {self._date_range_str(window.start, window.end)}",
        )

    async def _execute_categories(
        self,
        request: ReportRequest,
        overlap: bool,
    ) -> ReportResult:
        window = self.resolve_window(request)
        if overlap:
            rows = await self.category_breakdown_by_overlap(window, request.flow_type)
        else:
            rows = await self.category_breakdown(window, request.flow_type)

        desc_parts = ["Category breakdown"]
        if request.flow_type:
            desc_parts.append(f"of {request.flow_type.value.lower()}")
        desc_parts.append(self._date_range_str(window.start, window.end))
        if overlap:
            desc_parts.append("(overlap-ratio estimate)")

        return ReportResult(
            request_id=request.request_id,
            success=True,
            data_found=len(rows) > 0,
            window_start=window.start,
            window_end=window.end,
            categories=rows,
            description=" ".join(desc_parts),
        )

    async def _execute_top_categories(self, request: ReportRequest) -> ReportResult:
        window = self.resolve_window(request)
        rows = await self.top_categories(window, request.flow_type, request.limit)

        return ReportResult(
            request_id=request.request_id,
            success=True,
            data_found=len(rows) > 0,
            window_start=window.start,
            window_end=window.end,
            categories=rows,
            description=(
                f"Top {request.limit} {request.flow_type.value.lower()} categories "
                f"{self._date_range_str(window.start, window.end)}"
            ),
        )

    async def _execute_monthly(self, request: ReportRequest) -> ReportResult:
        reference = request.reference_date or request.date_to
        months = request.months
        if months is None:
            months = self._settings.default_history_months
        windows = trailing_month_windows(reference, months)
        rows = await self.monthly_history(reference, months)

        return ReportResult(
            request_id=request.request_id,
            success=True,
            data_found=any(row.income or row.expense for row in rows),
            window_start=windows[0].start,
            window_end=windows[-1].end,
            months=rows,
            description=f"Monthly history for {len(rows)} months up to {rows[-1].month}",
        )

    async def _execute_balance(self, request: ReportRequest) -> ReportResult:
        as_of = request.reference_date or request.date_to
        balance = await self.current_balance(as_of)

        return ReportResult(
            request_id=request.request_id,
            success=True,
            data_found=balance != ZERO,
            window_end=as_of,
            balance=balance,
            description=f"Balance {self._date_range_str(None, as_of)}: {self.format_amount(balance)}",
        )

    async def _execute_count(self, request: ReportRequest) -> ReportResult:
        window = self.resolve_window(request)
        count = await self.record_count(window)

        return ReportResult(
            request_id=request.request_id,
            success=True,
            data_found=count > 0,
            window_start=window.start,
            window_end=window.end,
            record_count=count,
            description=f"{count} records {self._date_range_str(window.start, window.end)}",
        )

    async def _execute_recent(self, request: ReportRequest) -> ReportResult:
        records = await self.recent_records(request.limit)

        return ReportResult(
            request_id=request.request_id,
            success=True,
            data_found=len(records) > 0,
            records=records,
            record_count=len(records),
            description=f"{len(records)} most recent records",
        )

    def format_amount(self, amount: Decimal) -> str:
        """Currency-formatted display string."""
        places = self._settings.display_decimal_places
        return f"{self._settings.currency_symbol}{amount:,.{places}f}"

    def _date_range_str(
        self,
        date_from: Optional[date],
        date_to: Optional[date],
    ) -> str:
        """Format date range for description."""
        if date_from and date_to:
            if date_from == date_to:
                return f"on {date_from.strftime('%d %b %Y')}"
            elif date_from.month == date_to.month and date_from.year == date_to.year:
                return f"in {date_from.strftime('%B %Y')}"
            elif date_from.year == date_to.year:
                return f"from {date_from.strftime('%d %b')} to {date_to.strftime('%d %b %Y')}"
            else:
                return f"from {date_from.strftime('%d %b %Y')} to {date_to.strftime('%d %b %Y')}"
        elif date_from:
            return f"from {date_from.strftime('%d %b %Y')}"
        elif date_to:
            return f"until {date_to.strftime('%d %b %Y')}"
        return ""
