"""
Audit Logger

DESIGN DECISION: Every ledger change and report run is logged.
This provides:
1. Complete traceability
2. Debugging capability when a total looks wrong
3. User can see history of their interactions

The audit logger:
- Is async so it fits the storage-backed flows
- Gracefully handles failures (doesn't crash the app if logging fails)
- Supports correlation IDs to trace related events

This module also configures structlog for the whole package; engine
modules log through structlog.get_logger(__name__).
"""

from datetime import date
from typing import Optional
from uuid import UUID, uuid4

import structlog

from accrual_ledger.models.audit import AuditEvent, AuditEventBuilder
from accrual_ledger.services.storage import AuditStorageInterface


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. Audit storage (for persistence), when configured
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger(__name__)

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity.value in ("error", "critical"):
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return await self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def log_record_validation_passed(
        self,
        record_id: UUID,
        warnings: list[str],
        correlation_id: UUID,
    ) -> None:
        event = AuditEventBuilder.record_validation_passed(
            record_id=record_id,
            warnings=warnings,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_record_validation_failed(
        self,
        record_id: Optional[UUID],
        issues: list[dict],
        correlation_id: UUID,
    ) -> None:
        """Log a record refused by validation."""
        event = AuditEventBuilder.record_validation_failed(
            record_id=record_id,
            issues=issues,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_record_saved(
        self,
        record_id: UUID,
        flow_type: str,
        amount: str,
        coverage_months: int,
        correlation_id: UUID,
    ) -> None:
        """Log record save."""
        event = AuditEventBuilder.record_saved(
            record_id=record_id,
            flow_type=flow_type,
            amount=amount,
            coverage_months=coverage_months,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_record_deleted(
        self,
        record_id: UUID,
        correlation_id: UUID,
    ) -> None:
        event = AuditEventBuilder.record_deleted(
            record_id=record_id,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_save_failed(
        self,
        record_id: UUID,
        error_message: str,
        correlation_id: UUID,
    ) -> None:
        event = AuditEventBuilder.save_failed(
            record_id=record_id,
            error_message=error_message,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_report_requested(
        self,
        request_id: UUID,
        report_type: str,
        correlation_id: UUID,
    ) -> None:
        """Log a report request before it runs."""
        event = AuditEventBuilder.report_requested(
            request_id=request_id,
            report_type=report_type,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_report_computed(
        self,
        request_id: UUID,
        report_type: str,
        window_start: Optional[date],
        window_end: Optional[date],
        data_found: bool,
        correlation_id: UUID,
    ) -> None:
        """Log a completed report."""
        event = AuditEventBuilder.report_computed(
            request_id=request_id,
            report_type=report_type,
            window_start=window_start,
            window_end=window_end,
            data_found=data_found,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_report_failed(
        self,
        request_id: UUID,
        report_type: str,
        error_message: str,
        correlation_id: UUID,
    ) -> None:
        event = AuditEventBuilder.report_failed(
            request_id=request_id,
            report_type=report_type,
            error_message=error_message,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        event = AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        )
        await self.log(event)


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new user action (e.g., entering a record).
    Pass it through all subsequent operations.
    """
    return uuid4()
