"""Exceptions raised by the aggregation engine."""

from datetime import date
from typing import Any, Optional


class LedgerEngineError(Exception):
    """Base exception for engine errors."""
    pass


class RecordValidationError(LedgerEngineError, ValueError):
    """A record the engine cannot process. Never skipped silently."""

    def __init__(
        self,
        position: int,
        record_id: Optional[Any],
        issues: list[str],
    ):
        self.position = position
        self.record_id = record_id
        self.issues = issues
        label = f"record {record_id}" if record_id else f"record at position {position}"
        super().__init__(f"Invalid {label}: " + "; ".join(issues))


class WindowValidationError(LedgerEngineError, ValueError):
    """Reporting window is reversed or unreadable."""
    pass


class DegenerateBucketError(LedgerEngineError):
    """A coverage bucket with no days; only raised in strict mode."""

    def __init__(self, record_id: Any, bucket_index: int, start: date, end: date):
        self.record_id = record_id
        self.bucket_index = bucket_index
        self.start = start
        self.end = end
        super().__init__(
            f"Bucket {bucket_index} of record {record_id} spans no days "
            f"({start.isoformat()} to {end.isoformat()})"
        )
