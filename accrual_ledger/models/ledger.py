"""
Core Data Models for Accrual Ledger

These models define the strict schemas for all data flowing through the
aggregation engine and the reporting layer. They are designed to:
1. Enforce type safety at runtime
2. Provide clear validation error messages
3. Be serializable for storage and logging

DESIGN DECISION: Money is always Decimal. Floats handed in by a caller are
converted through str() so a value like 0.1 stays 0.1.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Iterator, NamedTuple, Optional
from uuid import UUID, uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
    model_validator,
)

from accrual_ledger.dates import (
    ONE_DAY,
    coverage_end,
    coverage_span_fits,
    days_between,
    iter_days,
    normalize_day,
)


ZERO = Decimal("0")

UNCATEGORIZED = "Uncategorized"

# Hard cap on coverage; the warning threshold lives in AppSettings
MAX_COVERAGE_MONTHS = 1200


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _coerce_day(value: Any) -> Any:
    """Truncate datetimes and ISO strings to a date; leave the rest to pydantic."""
    if isinstance(value, (date, str)):
        return normalize_day(value)
    return value


def _coerce_decimal(value: Any) -> Any:
    if isinstance(value, float):
        return Decimal(str(value))
    return value


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class FlowType(str, Enum):
    """
    Direction of a ledger record.

    DESIGN DECISION: A closed two-variant enum rather than free text, so
    every accumulation branch handles exactly INCOME and EXPENSE.
    """
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"


class PeriodView(str, Enum):
    """Reporting views the caller navigates between."""
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


# =============================================================================
# LEDGER RECORD
# =============================================================================

class LedgerRecord(BaseModel):
    """
    One ledger entry as supplied by the ledger provider.

    A record with coverage_months > 1 represents an obligation spread over
    that many calendar months starting at anchor_date (annual insurance,
    rent committed for a year). Records are immutable.
    """
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique record ID"
    )
    flow_type: FlowType = Field(
        ...,
        description="INCOME or EXPENSE"
    )
    amount: Decimal = Field(
        ...,
        ge=0,
        description="Total obligation value (not a rate)"
    )
    anchor_date: date = Field(
        ...,
        description="Day the record was entered; start of its coverage span"
    )
    coverage_months: int = Field(
        default=1,
        ge=1,
        le=MAX_COVERAGE_MONTHS,
        description="Calendar months the amount is spread over (1 = single day)"
    )
    category_name: Optional[str] = Field(
        default=None,
        max_length=100,
        description="Category the record was filed under"
    )
    note: Optional[str] = Field(
        default=None,
        max_length=1000
    )

    @field_validator('flow_type', mode='before')
    @classmethod
    def normalize_flow_type(cls, v: Any) -> Any:
        """Accept 'income' / 'Expense' as well as the canonical values."""
        if isinstance(v, str):
            return v.strip().upper()
        return v

    @field_validator('amount', mode='before')
    @classmethod
    def amount_from_float(cls, v: Any) -> Any:
        return _coerce_decimal(v)

    @field_validator('anchor_date', mode='before')
    @classmethod
    def truncate_anchor_date(cls, v: Any) -> Any:
        return _coerce_day(v)

    @field_validator('coverage_months', mode='before')
    @classmethod
    def default_coverage(cls, v: Any) -> Any:
        """A ledger row without coverage is a single-occurrence record."""
        if v is None:
            return 1
        return v

    @model_validator(mode='after')
    def validate_coverage_span(self) -> 'LedgerRecord':
        if not coverage_span_fits(self.anchor_date, self.coverage_months):
            raise ValueError("Coverage span ends after the last supported date")
        return self

    @property
    def is_amortized(self) -> bool:
        return self.coverage_months > 1

    @property
    def monthly_share(self) -> Decimal:
        """Nominal value assigned to each covered calendar month."""
        return self.amount / self.coverage_months

    @property
    def coverage_end(self) -> date:
        """Exclusive end of the coverage span."""
        return coverage_end(self.anchor_date, self.coverage_months)

    @property
    def coverage_days(self) -> int:
        return days_between(self.anchor_date, self.coverage_end)


class CoverageBucket(BaseModel):
    """
    One calendar month of a record's coverage span.

    Buckets are engine-internal: produced and consumed within one
    aggregation call, never persisted.
    """
    model_config = ConfigDict(frozen=True)

    index: int = Field(ge=0)
    start: date
    end: date = Field(description="Exclusive end of the bucket")
    monthly_share: Decimal

    @property
    def days(self) -> int:
        return days_between(self.start, self.end)

    @property
    def is_degenerate(self) -> bool:
        return self.days <= 0

    @property
    def daily_rate(self) -> Optional[Decimal]:
        """Monthly share divided by the bucket's actual day count."""
        if self.is_degenerate:
            return None
        return self.monthly_share / self.days


class Allocation(NamedTuple):
    """A slice of a record's amount landing on one calendar day."""
    day: date
    amount: Decimal


# =============================================================================
# AGGREGATION OUTPUT
# =============================================================================

class DailyEntry(BaseModel):
    """Income and expense accumulated on one calendar day."""
    model_config = ConfigDict(frozen=True)

    income: Decimal = ZERO
    expense: Decimal = ZERO

    @computed_field
    @property
    def balance(self) -> Decimal:
        return self.income - self.expense


class DailySummary(BaseModel):
    """One row of a date-sorted daily series, ready for charting."""
    model_config = ConfigDict(frozen=True)

    day: date
    income: Decimal = ZERO
    expense: Decimal = ZERO

    @computed_field
    @property
    def balance(self) -> Decimal:
        return self.income - self.expense


class PeriodStatistics(BaseModel):
    """
    Totals plus per-day breakdown for one reporting window.

    INVARIANT: total_income equals the sum of daily income and
    total_expense equals the sum of daily expense.
    """

    window_start: date
    window_end: date
    total_income: Decimal = ZERO
    total_expense: Decimal = ZERO
    daily: dict[str, DailyEntry] = Field(
        default_factory=dict,
        description="Daily entries keyed by ISO date, in date order"
    )
    record_count: int = Field(
        default=0,
        ge=0,
        description="Number of records examined"
    )

    @computed_field
    @property
    def balance(self) -> Decimal:
        return self.total_income - self.total_expense

    @property
    def is_empty(self) -> bool:
        return not self.daily

    def series(self, fill_missing: bool = False) -> list[DailySummary]:
        """
        Daily entries as a date-sorted list.

        With fill_missing, every day of the window appears, untouched
        days as zero rows.
        """
        if fill_missing:
            days = iter_days(self.window_start, self.window_end + ONE_DAY)
            keys = [day.isoformat() for day in days]
        else:
            keys = sorted(self.daily)

        rows = []
        for key in keys:
            entry = self.daily.get(key)
            if entry is None:
                rows.append(DailySummary(day=date.fromisoformat(key)))
            else:
                rows.append(DailySummary(
                    day=date.fromisoformat(key),
                    income=entry.income,
                    expense=entry.expense,
                ))
        return rows


class CategoryTotal(BaseModel):
    """Pro-rated total for one category within a window."""

    category_name: str = UNCATEGORIZED
    flow_type: FlowType
    amount: Decimal = ZERO
    record_count: int = Field(default=0, ge=0)
    share: Decimal = Field(
        default=ZERO,
        description="Fraction of the flow type's window total (0-1)"
    )


class MonthlyTotal(BaseModel):
    """Income and expense attributed to one calendar month."""

    month: str = Field(..., pattern=r"^\d{4}-\d{2}$")
    income: Decimal = ZERO
    expense: Decimal = ZERO

    @computed_field
    @property
    def balance(self) -> Decimal:
        return self.income - self.expense


# =============================================================================
# WINDOWS
# =============================================================================

class ReportWindow(BaseModel):
    """An inclusive [start, end] range of calendar days."""
    model_config = ConfigDict(frozen=True)

    start: date
    end: date
    view: Optional[PeriodView] = None

    @field_validator('start', 'end', mode='before')
    @classmethod
    def truncate_days(cls, v: Any) -> Any:
        return _coerce_day(v)

    @model_validator(mode='after')
    def validate_order(self) -> 'ReportWindow':
        if self.start > self.end:
            raise ValueError("Window start cannot be after window end")
        return self

    @property
    def days(self) -> int:
        return days_between(self.start, self.end) + 1

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end

    def iter_days(self) -> Iterator[date]:
        return iter_days(self.start, self.end + ONE_DAY)


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_value', 'suspicious_value')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = Field(
        default=None,
        description="Suggested fix if available"
    )


class ValidationResult(BaseModel):
    """
    Result of the two-stage record validation.

    Stage 1: Schema validation (values the engine cannot process)
    Stage 2: Semantic validation (values that are suspicious)
    """

    record_id: Optional[UUID] = Field(
        default=None,
        description="ID of the record being validated"
    )
    validated_at: datetime = Field(
        default_factory=_utcnow
    )

    schema_valid: bool
    semantic_valid: bool
    is_valid: bool

    issues: list[ValidationIssue] = Field(default_factory=list)
    warnings: list[str] = Field(
        default_factory=list,
        description="Non-blocking warnings"
    )

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def error_messages(self) -> list[str]:
        return [issue.message for issue in self.issues if issue.severity == "error"]


# =============================================================================
# REPORT MODELS
# =============================================================================

class ReportRequest(BaseModel):
    """
    A structured reporting query.

    The window is given either explicitly (date_from / date_to) or as a
    view around a reference date. Monthly history and the running
    balance only need the reference date; recent records need no window.
    """

    request_id: UUID = Field(default_factory=uuid4)
    created_at: datetime = Field(default_factory=_utcnow)

    report_type: str = Field(
        ...,
        pattern="^(summary|daily|categories|categories_overlap|top_categories|monthly|balance|count|recent)$",
        description="Type of report to produce"
    )

    # Window selection
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    view: Optional[PeriodView] = None
    reference_date: Optional[date] = None

    # Filters and shaping
    flow_type: Optional[FlowType] = None
    limit: int = Field(default=3, ge=1, le=100)
    months: Optional[int] = Field(default=None, ge=1, le=120)
    fill_missing: bool = True

    @field_validator('date_from', 'date_to', 'reference_date', mode='before')
    @classmethod
    def truncate_days(cls, v: Any) -> Any:
        return _coerce_day(v)

    @model_validator(mode='after')
    def validate_window_inputs(self) -> 'ReportRequest':
        if self.date_from and self.date_to and self.date_from > self.date_to:
            raise ValueError("Window start cannot be after window end")

        if self.report_type == "monthly":
            if self.reference_date is None and self.date_to is None:
                raise ValueError("Monthly history needs a reference date")
            return self
        if self.report_type == "balance":
            if self.reference_date is None and self.date_to is None:
                raise ValueError("Current balance needs a reference date")
            return self
        if self.report_type == "recent":
            return self

        has_range = self.date_from is not None and self.date_to is not None
        has_view = self.view is not None and self.reference_date is not None
        if not (has_range or has_view):
            raise ValueError(
                "Provide date_from and date_to, or a view and a reference date"
            )
        if self.report_type == "top_categories" and self.flow_type is None:
            raise ValueError("Top categories needs a flow type")
        return self


class ReportResult(BaseModel):
    """Result of executing a ReportRequest."""

    request_id: UUID
    executed_at: datetime = Field(default_factory=_utcnow)

    success: bool
    error_message: Optional[str] = None

    data_found: bool = False
    window_start: Optional[date] = None
    window_end: Optional[date] = None

    statistics: Optional[PeriodStatistics] = None
    series: list[DailySummary] = Field(default_factory=list)
    categories: list[CategoryTotal] = Field(default_factory=list)
    months: list[MonthlyTotal] = Field(default_factory=list)
    balance: Optional[Decimal] = None
    record_count: Optional[int] = None
    records: list[LedgerRecord] = Field(default_factory=list)

    description: str = Field(
        ...,
        description="Human-readable description of what was reported"
    )
