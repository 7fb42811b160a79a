"""
Tests for the overlap-ratio approximation.
"""

import pytest
from datetime import date
from decimal import Decimal

from accrual_ledger.engine.aggregator import PeriodAggregator
from accrual_ledger.engine.errors import RecordValidationError, WindowValidationError
from accrual_ledger.engine.overlap import (
    estimate_category_totals_by_overlap,
    overlap_share,
)
from accrual_ledger.models.ledger import FlowType, LedgerRecord


def make_record(amount, anchor, months=1, flow_type=FlowType.EXPENSE, category=None):
    return LedgerRecord(
        flow_type=flow_type,
        amount=Decimal(str(amount)),
        anchor_date=anchor,
        coverage_months=months,
        category_name=category,
    )


class TestOverlapShare:
    """Tests for the single-ratio pro-ration."""

    def test_ratio_over_whole_span(self):
        """Test amount * overlap days / span days."""
        record = make_record(1200, date(2024, 1, 15), months=12)
        share = overlap_share(record, date(2024, 1, 1), date(2024, 1, 31))

        assert share == Decimal("1200") * 17 / 366
        assert round(share, 2) == Decimal("55.74")

    def test_differs_from_monthly_bucket_allocation(self):
        """Test that the approximation disagrees with the canonical total."""
        record = make_record(1200, date(2024, 1, 15), months=12)
        approx = overlap_share(record, date(2024, 1, 1), date(2024, 1, 31))
        exact = PeriodAggregator(strict_buckets=False).windowed_amount(
            record, date(2024, 1, 1), date(2024, 1, 31)
        )

        assert round(exact, 2) == Decimal("54.84")
        assert approx != exact

    def test_single_month_record_matches_exactly(self):
        """Test that one-off records give the same answer either way."""
        record = make_record(75, date(2024, 3, 5))

        assert overlap_share(record, date(2024, 3, 1), date(2024, 3, 31)) == Decimal("75")
        assert overlap_share(record, date(2024, 3, 6), date(2024, 3, 31)) == Decimal("0")

    def test_no_overlap(self):
        """Test a window entirely before the record."""
        record = make_record(1200, date(2024, 1, 15), months=12)
        assert overlap_share(record, date(2023, 1, 1), date(2023, 12, 31)) == Decimal("0")

    def test_reversed_window_rejected(self):
        """Test that the approximation validates its window too."""
        record = make_record(10, date(2024, 1, 1))
        with pytest.raises(WindowValidationError):
            overlap_share(record, date(2024, 2, 1), date(2024, 1, 1))

    def test_span_past_last_date_names_the_record(self):
        """Test that an oversized span is reported as a record error."""
        record = LedgerRecord.model_construct(
            flow_type=FlowType.EXPENSE,
            amount=Decimal("10"),
            anchor_date=date(2024, 1, 1),
            coverage_months=100000,
        )
        with pytest.raises(RecordValidationError) as exc_info:
            overlap_share(record, date(2024, 1, 1), date(2024, 1, 31))
        assert exc_info.value.record_id == record.id


class TestCategoryEstimate:
    """Tests for the overlap-based category breakdown."""

    def test_groups_by_category(self):
        """Test category grouping and filtering."""
        records = [
            make_record(1200, date(2024, 1, 15), months=12, category="Insurance"),
            make_record(20, date(2024, 1, 20), category="Fuel"),
            make_record(500, date(2024, 1, 25), flow_type=FlowType.INCOME, category="Salary"),
            make_record(99, date(2024, 2, 2), category="Fuel"),
        ]
        rows = estimate_category_totals_by_overlap(
            records, date(2024, 1, 1), date(2024, 1, 31), flow_type=FlowType.EXPENSE
        )

        assert [row.category_name for row in rows] == ["Insurance", "Fuel"]
        assert rows[1].amount == Decimal("20")
        assert rows[1].record_count == 1

    def test_mapping_rows_accepted(self):
        """Test that ledger rows are parsed like in the aggregator."""
        rows = estimate_category_totals_by_overlap(
            [{"flow_type": "INCOME", "amount": "10", "anchor_date": "2024-01-02"}],
            "2024-01-01",
            "2024-01-31",
        )
        assert rows[0].category_name == "Uncategorized"
        assert rows[0].flow_type == FlowType.INCOME

    def test_oversized_coverage_rejected_before_estimating(self):
        """Test that a record with an unrepresentable span stops the estimate."""
        good = make_record(20, date(2024, 1, 20), category="Fuel")
        oversized = LedgerRecord.model_construct(
            flow_type=FlowType.EXPENSE,
            amount=Decimal("10"),
            anchor_date=date(2024, 1, 1),
            coverage_months=100000,
        )
        with pytest.raises(RecordValidationError) as exc_info:
            estimate_category_totals_by_overlap(
                [good, oversized], date(2024, 1, 1), date(2024, 1, 31)
            )
        assert exc_info.value.position == 1


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
