"""
Tests for the in-memory ledger and audit backends and the audit logger.
"""

import pytest
from datetime import date
from decimal import Decimal
from uuid import uuid4

from accrual_ledger.audit import AuditLogger, create_correlation_id
from accrual_ledger.models.audit import AuditEventType, AuditSeverity
from accrual_ledger.models.ledger import FlowType, LedgerRecord
from accrual_ledger.services.storage import (
    DuplicateError,
    InMemoryAuditStorage,
    InMemoryLedgerStorage,
    NotFoundError,
)


def make_record(amount, anchor, flow_type=FlowType.EXPENSE, category=None):
    return LedgerRecord(
        flow_type=flow_type,
        amount=Decimal(str(amount)),
        anchor_date=anchor,
        category_name=category,
    )


@pytest.fixture
def storage():
    return InMemoryLedgerStorage([
        make_record(10, date(2024, 3, 1), category="Fuel"),
        make_record(20, date(2024, 1, 5), category="Rent"),
        make_record(30, date(2024, 2, 9), flow_type=FlowType.INCOME, category="Salary"),
        make_record(40, date(2024, 4, 2), category="fuel"),
    ])


class TestInMemoryLedgerStorage:
    """Tests for the in-memory ledger provider."""

    @pytest.mark.asyncio
    async def test_list_is_ordered_by_anchor_date(self, storage):
        records = await storage.list_records()
        assert [r.anchor_date for r in records] == sorted(r.anchor_date for r in records)

    @pytest.mark.asyncio
    async def test_date_to_is_inclusive(self, storage):
        records = await storage.list_records(date_to=date(2024, 3, 1))
        assert [r.amount for r in records] == [Decimal("20"), Decimal("30"), Decimal("10")]

    @pytest.mark.asyncio
    async def test_filters(self, storage):
        fuel = await storage.list_records(category_name="FUEL")
        income = await storage.list_records(flow_type=FlowType.INCOME)
        recent = await storage.list_records(date_from=date(2024, 3, 1))

        assert len(fuel) == 2
        assert [r.category_name for r in income] == ["Salary"]
        assert len(recent) == 2

    @pytest.mark.asyncio
    async def test_limit_and_offset(self, storage):
        page = await storage.list_records(limit=2, offset=1)
        assert [r.anchor_date for r in page] == [date(2024, 2, 9), date(2024, 3, 1)]

    @pytest.mark.asyncio
    async def test_newest_first(self, storage):
        page = await storage.list_records(limit=2, newest_first=True)
        assert [r.anchor_date for r in page] == [date(2024, 4, 2), date(2024, 3, 1)]

    @pytest.mark.asyncio
    async def test_crud(self):
        storage = InMemoryLedgerStorage()
        record = make_record(10, date(2024, 3, 1))

        assert await storage.save_record(record) is True
        with pytest.raises(DuplicateError):
            await storage.save_record(record)

        updated = record.model_copy(update={"note": "corrected"})
        assert await storage.update_record(updated) is True
        fetched = await storage.get_record_by_id(record.id)
        assert fetched.note == "corrected"

        assert await storage.delete_record(record.id) is True
        assert await storage.get_record_by_id(record.id) is None
        with pytest.raises(NotFoundError):
            await storage.update_record(record)


class TestAuditLogging:
    """Tests for the audit logger and its storage."""

    @pytest.mark.asyncio
    async def test_events_are_persisted(self):
        audit_storage = InMemoryAuditStorage()
        logger = AuditLogger(audit_storage)
        correlation_id = create_correlation_id()

        await logger.log_record_deleted(record_id=uuid4(), correlation_id=correlation_id)
        await logger.log_error(
            error_type="storage",
            error_message="disk full",
            details={"backend": "memory"},
            correlation_id=correlation_id,
        )

        events = await audit_storage.get_events_by_correlation_id(correlation_id)
        assert [e.event_type for e in events] == [
            AuditEventType.RECORD_DELETED,
            AuditEventType.SYSTEM_ERROR,
        ]
        assert events[1].severity == AuditSeverity.ERROR
        assert events[1].details == {"backend": "memory"}

    @pytest.mark.asyncio
    async def test_recent_events_newest_first(self):
        audit_storage = InMemoryAuditStorage()
        logger = AuditLogger(audit_storage)

        for _ in range(3):
            await logger.log_record_deleted(record_id=uuid4(), correlation_id=uuid4())

        recent = await audit_storage.get_recent_events(limit=2)
        assert len(recent) == 2
        assert recent[0].event_id == audit_storage.events[-1].event_id

    @pytest.mark.asyncio
    async def test_logger_without_storage(self):
        logger = AuditLogger()
        await logger.log_error(error_type="test", error_message="only logged locally")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
