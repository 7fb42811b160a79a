"""
Two-Stage Record Validation

DESIGN DECISION: Validation happens in two distinct stages:

STAGE 1 - SCHEMA VALIDATION:
- Values the engine cannot process at all
- Negative amount, coverage below one month, missing anchor date
- These are errors: the aggregator refuses the record

STAGE 2 - SEMANTIC VALIDATION:
- Values that are possible but suspicious
- Anchor date far in the future, very long coverage, absurd amount
- These are warnings shown for human review

IMPORTANT: Validation NEVER silently fixes issues, and the aggregator
never silently skips a record that fails stage 1.
"""

from datetime import date, timedelta
from decimal import Decimal
from typing import Optional
from uuid import UUID

from accrual_ledger.config import AppSettings, get_settings
from accrual_ledger.dates import coverage_span_fits
from accrual_ledger.models.ledger import (
    MAX_COVERAGE_MONTHS,
    FlowType,
    LedgerRecord,
    ValidationIssue,
    ValidationResult,
)


class RecordValidator:
    """
    Validates ledger records through a two-stage pipeline.

    Stage 1 runs on every aggregation. Stage 2 runs when a record is
    entered into the ledger.
    """

    def __init__(self, settings: Optional[AppSettings] = None):
        self._settings = settings or get_settings().app

    def check_schema(self, record: LedgerRecord) -> list[ValidationIssue]:
        """
        Stage 1: Schema validation.

        Records built through the pydantic constructor always pass; this
        catches records assembled with model_construct() or mutated
        copies coming from a storage adapter.
        """
        issues = []

        flow_type = getattr(record, "flow_type", None)
        if not isinstance(flow_type, FlowType):
            issues.append(ValidationIssue(
                field="flow_type",
                issue_type="invalid_value",
                message=f"Flow type must be INCOME or EXPENSE, got {flow_type!r}",
                severity="error",
            ))

        amount = getattr(record, "amount", None)
        if not isinstance(amount, Decimal) or not amount.is_finite():
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message=f"Amount must be a finite decimal, got {amount!r}",
                severity="error",
            ))
        elif amount < 0:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message=f"Amount cannot be negative ({amount})",
                severity="error",
                suggested_fix="Record refunds as income instead of a negative expense",
            ))

        anchor_date = getattr(record, "anchor_date", None)
        if not isinstance(anchor_date, date):
            issues.append(ValidationIssue(
                field="anchor_date",
                issue_type="missing",
                message=f"Anchor date must be a calendar date, got {anchor_date!r}",
                severity="error",
            ))

        months = getattr(record, "coverage_months", None)
        if isinstance(months, bool) or not isinstance(months, int):
            issues.append(ValidationIssue(
                field="coverage_months",
                issue_type="invalid_value",
                message=f"Coverage must be a whole number of months, got {months!r}",
                severity="error",
            ))
        elif months < 1:
            issues.append(ValidationIssue(
                field="coverage_months",
                issue_type="invalid_value",
                message=f"Coverage must be at least one month, got {months}",
                severity="error",
            ))
        elif months > MAX_COVERAGE_MONTHS:
            issues.append(ValidationIssue(
                field="coverage_months",
                issue_type="invalid_value",
                message=f"Coverage cannot exceed {MAX_COVERAGE_MONTHS} months, got {months}",
                severity="error",
            ))
        elif isinstance(anchor_date, date) and not coverage_span_fits(anchor_date, months):
            issues.append(ValidationIssue(
                field="coverage_months",
                issue_type="invalid_value",
                message="Coverage span ends after the last supported date",
                severity="error",
            ))

        return issues

    def _validate_semantic(
        self,
        record: LedgerRecord,
        today: date,
    ) -> list[ValidationIssue]:
        """
        Stage 2: Semantic validation.

        Returns warnings only; none of these stop a record.
        """
        issues = []

        max_future_date = today + timedelta(days=self._settings.future_date_tolerance_days)
        if record.anchor_date > max_future_date:
            issues.append(ValidationIssue(
                field="anchor_date",
                issue_type="future_date",
                message=f"Anchor date ({record.anchor_date}) is in the future",
                severity="warning",
                suggested_fix="Please verify the date is correct",
            ))

        if record.coverage_months > self._settings.max_coverage_months:
            issues.append(ValidationIssue(
                field="coverage_months",
                issue_type="suspicious_value",
                message=(
                    f"Coverage of {record.coverage_months} months is unusually long"
                ),
                severity="warning",
                suggested_fix="Please verify the number of months covered",
            ))

        max_amount = Decimal(str(self._settings.max_record_amount))
        if record.amount > max_amount:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="suspicious_value",
                message=f"Amount ({record.amount:,.2f}) seems unusually high",
                severity="warning",
                suggested_fix="Please verify this amount is correct",
            ))

        if record.amount == 0:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="suspicious_value",
                message="Amount is zero; the record will not change any total",
                severity="warning",
            ))

        return issues

    def validate(
        self,
        record: LedgerRecord,
        today: Optional[date] = None,
    ) -> ValidationResult:
        """
        Run full two-stage validation pipeline.

        Args:
            record: The record to validate
            today: Reference day for the future-date check (defaults to today)

        Returns:
            ValidationResult with all issues found
        """
        all_issues = self.check_schema(record)
        schema_valid = not any(issue.severity == "error" for issue in all_issues)

        # Only run stage 2 if stage 1 passes
        semantic_valid = False
        if schema_valid:
            semantic_issues = self._validate_semantic(record, today or date.today())
            all_issues.extend(semantic_issues)
            semantic_valid = not any(issue.severity == "error" for issue in semantic_issues)

        warnings = [issue.message for issue in all_issues if issue.severity == "warning"]

        return ValidationResult(
            record_id=record.id if isinstance(record.id, UUID) else None,
            schema_valid=schema_valid,
            semantic_valid=semantic_valid,
            is_valid=schema_valid and semantic_valid,
            issues=all_issues,
            warnings=warnings,
        )

    def get_user_friendly_summary(
        self,
        result: ValidationResult,
    ) -> str:
        """
        Generate a user-friendly summary of validation results.
        """
        if result.is_valid and not result.warnings:
            return "All checks passed."

        lines = []

        if not result.schema_valid:
            lines.append("This record cannot be used:")
            for issue in result.issues:
                if issue.severity == "error":
                    lines.append(f"   • {issue.message}")
                    if issue.suggested_fix:
                        lines.append(f"     {issue.suggested_fix}")

        if result.warnings:
            if lines:
                lines.append("")
            lines.append("Please verify the following:")
            for warning in result.warnings:
                lines.append(f"   • {warning}")

        return "\n".join(lines)
