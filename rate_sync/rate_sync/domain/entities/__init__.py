"""Domain entities - pure dataclasses with no external dependencies.

These entities represent the value objects of a single sync run.
"""

from rate_sync.domain.entities.calendar import HolidaySet, TradingDayResult
from rate_sync.domain.entities.reconciliation import (
    FieldWrite,
    RunResult,
    StoredState,
    TrackedField,
    TrackedQuantity,
)

__all__ = [
    # Calendar
    "HolidaySet",
    "TradingDayResult",
    # Reconciliation
    "FieldWrite",
    "RunResult",
    "StoredState",
    "TrackedField",
    "TrackedQuantity",
]
