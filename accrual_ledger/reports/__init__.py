"""Report execution package."""

from accrual_ledger.reports.executor import ReportExecutionError, ReportExecutor

__all__ = ["ReportExecutionError", "ReportExecutor"]
