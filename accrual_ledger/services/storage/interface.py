"""
Abstract Storage Interface

DESIGN DECISION: The aggregation engine never queries storage itself.
The ledger provider sits behind this interface so that:
1. A SQLite or spreadsheet backend can be plugged in later
2. In-memory storage can be used for testing
3. Reporting logic stays decoupled from storage implementation

The interface is intentionally simple - just the operations the
ledger entry and reporting flows need.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import Optional
from uuid import UUID

from accrual_ledger.models.audit import AuditEvent
from accrual_ledger.models.ledger import FlowType, LedgerRecord


class LedgerStorageInterface(ABC):
    """
    Abstract interface for ledger record storage.

    Any storage implementation must implement these methods.
    """

    @abstractmethod
    async def save_record(self, record: LedgerRecord) -> bool:
        """
        Save a new record.

        Returns:
            True if saved successfully

        Raises:
            DuplicateError: If a record with the same ID exists
            StorageError: If save fails
        """
        pass

    @abstractmethod
    async def get_record_by_id(self, record_id: UUID) -> Optional[LedgerRecord]:
        """
        Retrieve a record by its ID.

        Returns:
            The record if found, None otherwise
        """
        pass

    @abstractmethod
    async def update_record(self, record: LedgerRecord) -> bool:
        """
        Replace an existing record.

        Raises:
            NotFoundError: If the record doesn't exist
        """
        pass

    @abstractmethod
    async def delete_record(self, record_id: UUID) -> bool:
        """
        Delete a record by ID.

        Returns:
            True if a record was deleted
        """
        pass

    @abstractmethod
    async def list_records(
        self,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        flow_type: Optional[FlowType] = None,
        category_name: Optional[str] = None,
        limit: Optional[int] = None,
        offset: int = 0,
        newest_first: bool = False,
    ) -> list[LedgerRecord]:
        """
        List records with optional filters, ordered by anchor date.

        Args:
            date_from: Records anchored on or after this date
            date_to: Records anchored on or before this date
            flow_type: Filter by INCOME / EXPENSE
            category_name: Filter by category (case-insensitive)
            limit: Maximum number of results (None for all)
            offset: Number of results to skip
            newest_first: Reverse the order (latest anchor first)

        Returns:
            List of matching records

        Note: date filters apply to the anchor date only. A reporting
        caller asks for date_to=window end and leaves date_from empty,
        since an older multi-month record can still cover the window.
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        """
        Get all events for a correlation ID, in chronological order.
        """
        pass

    @abstractmethod
    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """
        Get the most recent audit events (newest first).
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class DuplicateError(StorageError):
    """Attempted to insert a duplicate entity."""
    pass
