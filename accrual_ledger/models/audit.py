"""
Audit Models for Accrual Ledger

Every ledger change and every report run is logged for audit purposes.
This provides:
1. Traceability of what entered the ledger and when
2. Debugging information when a total looks wrong
3. Ability to reconstruct which window a report was computed for

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

import json
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Record validation
    RECORD_VALIDATION_PASSED = "record_validation_passed"
    RECORD_VALIDATION_FAILED = "record_validation_failed"

    # Ledger changes
    RECORD_SAVED = "record_saved"
    RECORD_DELETED = "record_deleted"
    SAVE_FAILED = "save_failed"

    # Reporting
    REPORT_REQUESTED = "report_requested"
    REPORT_COMPUTED = "report_computed"
    REPORT_FAILED = "report_failed"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'record', 'report')"
    )
    entity_id: Optional[UUID] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one record entry)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": str(self.entity_id) if self.entity_id else None,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_code": self.error_code,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }

    def to_row(self) -> list[str]:
        """
        Flatten to a row of strings for tabular audit storage.

        Columns: [event_id, timestamp, event_type, severity, entity_type,
        entity_id, correlation_id, description, details_json,
        error_message, is_user_action]
        """
        return [
            str(self.event_id),
            self.timestamp.isoformat(),
            self.event_type.value,
            self.severity.value,
            self.entity_type or "",
            str(self.entity_id) if self.entity_id else "",
            str(self.correlation_id) if self.correlation_id else "",
            self.description,
            json.dumps(self.details, default=str) if self.details else "",
            self.error_message or "",
            str(self.is_user_action),
        ]


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.record_saved(record_id, "EXPENSE", "1200", 12, correlation_id)
        event = AuditEventBuilder.report_computed(request_id, "summary", ...)
    """

    @staticmethod
    def record_validation_passed(
        record_id: UUID,
        warnings: list[str],
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_VALIDATION_PASSED,
            entity_type="record",
            entity_id=record_id,
            correlation_id=correlation_id,
            description=f"Record validation passed with {len(warnings)} warnings",
            details={
                "warnings": warnings,
            },
            is_user_action=True,
        )

    @staticmethod
    def record_validation_failed(
        record_id: Optional[UUID],
        issues: list[dict],
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="record",
            entity_id=record_id,
            correlation_id=correlation_id,
            description=f"Record validation failed with {len(issues)} issues",
            details={
                "issues": issues,
            },
            is_user_action=True,
        )

    @staticmethod
    def record_saved(
        record_id: UUID,
        flow_type: str,
        amount: str,
        coverage_months: int,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_SAVED,
            entity_type="record",
            entity_id=record_id,
            correlation_id=correlation_id,
            description=f"Record saved: {flow_type.lower()} {amount} over {coverage_months} month(s)",
            details={
                "flow_type": flow_type,
                "amount": amount,
                "coverage_months": coverage_months,
            },
            is_user_action=True,
        )

    @staticmethod
    def record_deleted(
        record_id: UUID,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_DELETED,
            entity_type="record",
            entity_id=record_id,
            correlation_id=correlation_id,
            description="Record deleted",
            is_user_action=True,
        )

    @staticmethod
    def save_failed(
        record_id: UUID,
        error_message: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="record",
            entity_id=record_id,
            correlation_id=correlation_id,
            description="Record could not be saved",
            error_message=error_message,
        )

    @staticmethod
    def report_requested(
        request_id: UUID,
        report_type: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REPORT_REQUESTED,
            entity_type="report",
            entity_id=request_id,
            correlation_id=correlation_id,
            description=f"Report requested: {report_type}",
            details={
                "report_type": report_type,
            },
            is_user_action=True,
        )

    @staticmethod
    def report_computed(
        request_id: UUID,
        report_type: str,
        window_start: Optional[date],
        window_end: Optional[date],
        data_found: bool,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REPORT_COMPUTED,
            entity_type="report",
            entity_id=request_id,
            correlation_id=correlation_id,
            description=f"Report computed: {report_type}",
            details={
                "report_type": report_type,
                "window_start": window_start.isoformat() if window_start else None,
                "window_end": window_end.isoformat() if window_end else None,
                "data_found": data_found,
            },
        )

    @staticmethod
    def report_failed(
        request_id: UUID,
        report_type: str,
        error_message: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REPORT_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="report",
            entity_id=request_id,
            correlation_id=correlation_id,
            description=f"Report failed: {report_type}",
            error_message=error_message,
            details={
                "report_type": report_type,
            },
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
