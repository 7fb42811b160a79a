"""Record validation package."""

from accrual_ledger.validation.validator import RecordValidator

__all__ = ["RecordValidator"]
