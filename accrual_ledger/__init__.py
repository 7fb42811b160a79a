"""
Accrual Ledger - Source Package

Personal bookkeeping core: turns a ledger of dated, possibly
multi-month records into period totals and day-by-day series.

DESIGN PRINCIPLES:
1. Every covered month gets an equal share, whatever its length
2. Day entries always add up to the period totals
3. Fail early, fail visibly - malformed records are never skipped
4. Every ledger change and report is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Accrual Ledger Team"
