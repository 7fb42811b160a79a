"""
Main Orchestrator for Accrual Ledger

This module ties together storage, validation, the engine and the audit
log, and defines the two end-to-end flows:
1. Ledger entry (data → validate → save)
2. Reporting (request → fetch → aggregate → result)

DESIGN DECISION: The orchestrator enforces the boundaries:
- No record reaches the ledger without passing validation
- No report is answered without reading the ledger
- Every step is audited
"""

from collections.abc import Mapping
from typing import Any, Optional, Union
from uuid import UUID

from pydantic import ValidationError

from accrual_ledger.audit import AuditLogger, create_correlation_id
from accrual_ledger.models.ledger import (
    LedgerRecord,
    ReportRequest,
    ReportResult,
    ValidationIssue,
    ValidationResult,
)
from accrual_ledger.reports import ReportExecutor
from accrual_ledger.services.storage import (
    AuditStorageInterface,
    InMemoryAuditStorage,
    InMemoryLedgerStorage,
    LedgerStorageInterface,
    StorageError,
)
from accrual_ledger.validation import RecordValidator


class LedgerFlow:
    """
    Orchestrates entering and removing ledger records.

    Flow:
    1. Parse → Build a LedgerRecord from user data
    2. Validate → Two-stage validation
    3. Save → Persist to the ledger provider (only if no errors)
    """

    def __init__(
        self,
        ledger_storage: LedgerStorageInterface,
        validator: Optional[RecordValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._storage = ledger_storage
        self._validator = validator or RecordValidator()
        self._audit_logger = audit_logger

    async def add_record(
        self,
        data: Union[LedgerRecord, Mapping[str, Any]],
        correlation_id: Optional[UUID] = None,
    ) -> tuple[Optional[LedgerRecord], ValidationResult]:
        """
        Validate and save a record.

        Returns:
            (saved_record, validation_result)
            saved_record is None when validation found errors.
        """
        correlation_id = correlation_id or create_correlation_id()

        if isinstance(data, LedgerRecord):
            record = data
        else:
            try:
                record = LedgerRecord.model_validate(data)
            except ValidationError as e:
                result = ValidationResult(
                    schema_valid=False,
                    semantic_valid=False,
                    is_valid=False,
                    issues=[
                        ValidationIssue(
                            field=".".join(str(part) for part in err["loc"]) or "record",
                            issue_type="invalid_value",
                            message=err["msg"],
                            severity="error",
                        )
                        for err in e.errors()
                    ],
                )
                await self._audit_validation_failure(None, result, correlation_id)
                return None, result

        result = self._validator.validate(record)
        if result.has_errors:
            await self._audit_validation_failure(record.id, result, correlation_id)
            return None, result

        if self._audit_logger:
            await self._audit_logger.log_record_validation_passed(
                record_id=record.id,
                warnings=result.warnings,
                correlation_id=correlation_id,
            )

        try:
            await self._storage.save_record(record)
        except StorageError as e:
            if self._audit_logger:
                await self._audit_logger.log_save_failed(
                    record_id=record.id,
                    error_message=str(e),
                    correlation_id=correlation_id,
                )
            raise

        if self._audit_logger:
            await self._audit_logger.log_record_saved(
                record_id=record.id,
                flow_type=record.flow_type.value,
                amount=str(record.amount),
                coverage_months=record.coverage_months,
                correlation_id=correlation_id,
            )

        return record, result

    async def remove_record(
        self,
        record_id: UUID,
        correlation_id: Optional[UUID] = None,
    ) -> bool:
        """Delete a record. Returns False if it did not exist."""
        correlation_id = correlation_id or create_correlation_id()

        deleted = await self._storage.delete_record(record_id)
        if deleted and self._audit_logger:
            await self._audit_logger.log_record_deleted(
                record_id=record_id,
                correlation_id=correlation_id,
            )
        return deleted

    async def _audit_validation_failure(
        self,
        record_id: Optional[UUID],
        result: ValidationResult,
        correlation_id: UUID,
    ) -> None:
        if self._audit_logger:
            await self._audit_logger.log_record_validation_failed(
                record_id=record_id,
                issues=[issue.model_dump() for issue in result.issues],
                correlation_id=correlation_id,
            )


class ReportingFlow:
    """
    Orchestrates report requests.

    The engine only ever sees records the ledger provider returns,
    and every report, successful or not, lands in the audit log.
    """

    def __init__(
        self,
        ledger_storage: LedgerStorageInterface,
        executor: Optional[ReportExecutor] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._executor = executor or ReportExecutor(ledger_storage)
        self._audit_logger = audit_logger

    async def run_report(
        self,
        request: ReportRequest,
        correlation_id: Optional[UUID] = None,
    ) -> ReportResult:
        correlation_id = correlation_id or create_correlation_id()

        if self._audit_logger:
            await self._audit_logger.log_report_requested(
                request_id=request.request_id,
                report_type=request.report_type,
                correlation_id=correlation_id,
            )

        result = await self._executor.execute(request)

        if self._audit_logger:
            if result.success:
                await self._audit_logger.log_report_computed(
                    request_id=request.request_id,
                    report_type=request.report_type,
                    window_start=result.window_start,
                    window_end=result.window_end,
                    data_found=result.data_found,
                    correlation_id=correlation_id,
                )
            else:
                await self._audit_logger.log_report_failed(
                    request_id=request.request_id,
                    report_type=request.report_type,
                    error_message=result.error_message or "unknown error",
                    correlation_id=correlation_id,
                )

        return result


def create_app_components(
    ledger_storage: Optional[LedgerStorageInterface] = None,
    audit_storage: Optional[AuditStorageInterface] = None,
) -> tuple[LedgerFlow, ReportingFlow]:
    """
    Factory function to create all application components.

    Args:
        ledger_storage: Ledger provider. Defaults to in-memory storage.
        audit_storage: Audit backend. Defaults to in-memory storage.

    Returns:
        (ledger_flow, reporting_flow)
    """
    # An empty InMemoryLedgerStorage is falsy
    if ledger_storage is None:
        ledger_storage = InMemoryLedgerStorage()
    if audit_storage is None:
        audit_storage = InMemoryAuditStorage()
    audit_logger = AuditLogger(audit_storage)

    ledger_flow = LedgerFlow(
        ledger_storage=ledger_storage,
        audit_logger=audit_logger,
    )
    reporting_flow = ReportingFlow(
        ledger_storage=ledger_storage,
        audit_logger=audit_logger,
    )

    return ledger_flow, reporting_flow
