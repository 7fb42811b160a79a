"""
In-Memory Storage Implementation

Keeps records and audit events in process memory. Used by the tests and
as the default backend when no other storage is configured.

Both classes follow the abstract interfaces, so the flows behave the same
against any other backend.
"""

from datetime import date
from typing import Iterable, Optional
from uuid import UUID

from accrual_ledger.models.audit import AuditEvent
from accrual_ledger.models.ledger import FlowType, LedgerRecord
from accrual_ledger.services.storage.interface import (
    AuditStorageInterface,
    DuplicateError,
    LedgerStorageInterface,
    NotFoundError,
)


class InMemoryLedgerStorage(LedgerStorageInterface):
    """Ledger provider backed by a dict keyed on record ID."""

    def __init__(self, records: Optional[Iterable[LedgerRecord]] = None):
        self._records: dict[UUID, LedgerRecord] = {}
        for record in records or []:
            self._records[record.id] = record

    def __len__(self) -> int:
        return len(self._records)

    async def save_record(self, record: LedgerRecord) -> bool:
        if record.id in self._records:
            raise DuplicateError(f"Record {record.id} already exists")
        self._records[record.id] = record
        return True

    async def get_record_by_id(self, record_id: UUID) -> Optional[LedgerRecord]:
        return self._records.get(record_id)

    async def update_record(self, record: LedgerRecord) -> bool:
        if record.id not in self._records:
            raise NotFoundError(f"Record {record.id} not found")
        self._records[record.id] = record
        return True

    async def delete_record(self, record_id: UUID) -> bool:
        return self._records.pop(record_id, None) is not None

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
        matches = []
        wanted_category = category_name.lower() if category_name else None

        for record in self._records.values():
            if date_from and record.anchor_date < date_from:
                continue
            if date_to and record.anchor_date > date_to:
                continue
            if flow_type and record.flow_type != flow_type:
                continue
            if wanted_category and (record.category_name or "").lower() != wanted_category:
                continue
            matches.append(record)

        matches.sort(key=lambda r: (r.anchor_date, str(r.id)), reverse=newest_first)

        if limit is None:
            return matches[offset:]
        return matches[offset:offset + limit]


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only audit log kept in a list."""

    def __init__(self):
        self._events: list[AuditEvent] = []

    @property
    def events(self) -> list[AuditEvent]:
        return list(self._events)

    async def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True

    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        return [e for e in self._events if e.correlation_id == correlation_id]

    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        return list(reversed(self._events))[:limit]
