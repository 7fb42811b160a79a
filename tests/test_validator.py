"""
Tests for two-stage record validation.
"""

import pytest
from datetime import date
from decimal import Decimal

from accrual_ledger.config import AppSettings
from accrual_ledger.models.ledger import FlowType, LedgerRecord
from accrual_ledger.validation import RecordValidator


TODAY = date(2024, 6, 1)


@pytest.fixture
def validator():
    return RecordValidator(AppSettings(
        max_record_amount=10000.0,
        max_coverage_months=24,
        future_date_tolerance_days=7,
    ))


def make_record(**overrides):
    data = {
        "flow_type": FlowType.EXPENSE,
        "amount": Decimal("250"),
        "anchor_date": date(2024, 5, 20),
        "coverage_months": 1,
    }
    data.update(overrides)
    return LedgerRecord(**data)


class TestSchemaStage:
    """Stage 1: values the engine cannot process."""

    def test_valid_record_passes(self, validator):
        result = validator.validate(make_record(), today=TODAY)

        assert result.is_valid is True
        assert result.issues == []
        assert validator.get_user_friendly_summary(result) == "All checks passed."

    def test_negative_amount_is_an_error(self, validator):
        """Test a negative amount smuggled past the constructor."""
        record = LedgerRecord.model_construct(
            flow_type=FlowType.EXPENSE,
            amount=Decimal("-1"),
            anchor_date=date(2024, 5, 20),
            coverage_months=1,
        )
        result = validator.validate(record, today=TODAY)

        assert result.schema_valid is False
        assert result.is_valid is False
        assert result.error_count == 1
        assert "cannot be negative" in result.error_messages[0]

    def test_non_finite_amount_is_an_error(self, validator):
        record = LedgerRecord.model_construct(
            flow_type=FlowType.EXPENSE,
            amount=Decimal("NaN"),
            anchor_date=date(2024, 5, 20),
            coverage_months=1,
        )
        issues = validator.check_schema(record)
        assert [issue.field for issue in issues] == ["amount"]

    def test_several_errors_are_reported_together(self, validator):
        """Test that every broken field is named, not just the first."""
        record = LedgerRecord.model_construct(
            flow_type="TRANSFER",
            amount=Decimal("5"),
            anchor_date=None,
            coverage_months=0,
        )
        issues = validator.check_schema(record)

        assert {issue.field for issue in issues} == {
            "flow_type",
            "anchor_date",
            "coverage_months",
        }
        assert all(issue.severity == "error" for issue in issues)

    def test_boolean_coverage_is_an_error(self, validator):
        record = LedgerRecord.model_construct(
            flow_type=FlowType.INCOME,
            amount=Decimal("5"),
            anchor_date=date(2024, 5, 20),
            coverage_months=True,
        )
        issues = validator.check_schema(record)
        assert issues[0].field == "coverage_months"

    def test_coverage_above_cap_is_an_error(self, validator):
        record = LedgerRecord.model_construct(
            flow_type=FlowType.EXPENSE,
            amount=Decimal("10"),
            anchor_date=date(2024, 1, 1),
            coverage_months=100000,
        )
        issues = validator.check_schema(record)

        assert [issue.field for issue in issues] == ["coverage_months"]
        assert "cannot exceed" in issues[0].message
        assert issues[0].severity == "error"

    def test_coverage_span_past_last_date_is_an_error(self, validator):
        record = LedgerRecord.model_construct(
            flow_type=FlowType.EXPENSE,
            amount=Decimal("10"),
            anchor_date=date(9999, 12, 1),
            coverage_months=2,
        )
        issues = validator.check_schema(record)

        assert [issue.field for issue in issues] == ["coverage_months"]
        assert "last supported date" in issues[0].message

    def test_semantic_stage_skipped_after_schema_errors(self, validator):
        record = LedgerRecord.model_construct(
            flow_type=FlowType.EXPENSE,
            amount=Decimal("-1"),
            anchor_date=date(2030, 1, 1),
            coverage_months=1,
        )
        result = validator.validate(record, today=TODAY)

        assert result.semantic_valid is False
        assert result.warnings == []


class TestSemanticStage:
    """Stage 2: values that are possible but suspicious."""

    def test_future_anchor_warns(self, validator):
        result = validator.validate(make_record(anchor_date=date(2024, 7, 1)), today=TODAY)

        assert result.is_valid is True
        assert result.has_errors is False
        assert any("in the future" in w for w in result.warnings)

    def test_anchor_within_tolerance_is_fine(self, validator):
        result = validator.validate(make_record(anchor_date=date(2024, 6, 8)), today=TODAY)
        assert result.warnings == []

    def test_long_coverage_warns(self, validator):
        result = validator.validate(make_record(coverage_months=36), today=TODAY)
        assert any("unusually long" in w for w in result.warnings)

    def test_large_amount_warns(self, validator):
        result = validator.validate(make_record(amount=Decimal("25000")), today=TODAY)
        assert any("unusually high" in w for w in result.warnings)

    def test_zero_amount_warns(self, validator):
        result = validator.validate(make_record(amount=Decimal("0")), today=TODAY)
        assert any("zero" in w for w in result.warnings)

    def test_summary_lists_warnings(self, validator):
        result = validator.validate(make_record(coverage_months=36), today=TODAY)
        summary = validator.get_user_friendly_summary(result)

        assert summary.startswith("Please verify the following:")
        assert "36 months" in summary


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
