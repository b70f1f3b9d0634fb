"""Calendar-related domain entities."""

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from datetime import date
from types import MappingProxyType


@dataclass(frozen=True)
class TradingDayResult:
    """Outcome of a trading-day evaluation."""

    trading_day: bool
    reason: str | None = None  # "weekend" or "holiday:<name>" when not trading


@dataclass(frozen=True)
class HolidaySet:
    """Non-trading days of one region for one year, with their names."""

    year: int
    holidays: Mapping[date, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "holidays", MappingProxyType(dict(self.holidays)))

    def __contains__(self, day: object) -> bool:
        return day in self.holidays

    def __iter__(self) -> Iterator[date]:
        return iter(sorted(self.holidays))

    def __len__(self) -> int:
        return len(self.holidays)

    def name_for(self, day: date) -> str | None:
        """Return the holiday name for ``day``, or None if it is not a holiday."""
        return self.holidays.get(day)
