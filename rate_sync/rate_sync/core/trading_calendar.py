"""Trading-day evaluation for regional calendars.

Two gating policies satisfy the same ``is_trading_day`` contract:

- AlwaysTrading: a continuously open market, every day trades.
- WeekdayHolidayGated: weekends and the region's public holidays are skipped.

Romanian public holidays are a fixed civil list plus a moving cluster
anchored to Orthodox Easter (Good Friday, Easter Sunday and Monday,
Pentecost Sunday and Monday). Holiday sets are rebuilt on every evaluation.
"""

import logging
from collections.abc import Callable
from datetime import date, timedelta
from typing import Protocol

from rate_sync.core.config import CalendarMode
from rate_sync.domain.constants import (
    FIRST_WEEKEND_ISO_DAY,
    JULIAN_GREGORIAN_OFFSET_DAYS,
    MOVABLE_FEAST_MAX_YEAR,
    MOVABLE_FEAST_MIN_YEAR,
)
from rate_sync.domain.entities import HolidaySet, TradingDayResult
from rate_sync.domain.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

WEEKEND_REASON = "weekend"
HOLIDAY_REASON_PREFIX = "holiday:"

# ============================================================================
# Romanian holiday calendar
# ============================================================================

# (month, day) -> name, same civil date every year
ROMANIA_FIXED_HOLIDAYS: dict[tuple[int, int], str] = {
    (1, 1): "Anul Nou (Ziua 1)",
    (1, 2): "Anul Nou (Ziua 2)",
    (1, 6): "Boboteaza",
    (1, 7): "Sf. Ioan Botezătorul",
    (1, 24): "Unirea Principatelor",
    (5, 1): "Ziua Muncii",
    (6, 1): "Ziua Copilului",
    (8, 15): "Adormirea Maicii Domnului",
    (11, 30): "Sf. Andrei",
    (12, 1): "Ziua Națională",
    (12, 25): "Crăciun",
    (12, 26): "A doua zi de Crăciun",
}

# offset from Orthodox Easter Sunday -> name
ROMANIA_EASTER_CLUSTER: dict[int, str] = {
    -2: "Vinerea Mare",
    0: "Paștele",
    1: "A doua zi de Paște",
    49: "Rusaliile",
    50: "A doua zi de Rusalii",
}


def orthodox_easter(year: int) -> date:
    """Orthodox Easter Sunday expressed in the Gregorian calendar.

    Meeus' Julian computus, shifted by the 13-day Julian/Gregorian gap.

    Args:
        year: Gregorian year in [1900, 2099]

    Returns:
        Easter Sunday as a Gregorian date.

    Raises:
        ValueError: if the year is outside the range where the 13-day
            offset holds.
    """
    if not MOVABLE_FEAST_MIN_YEAR <= year <= MOVABLE_FEAST_MAX_YEAR:
        raise ValueError(
            f"Orthodox Easter is only computed for {MOVABLE_FEAST_MIN_YEAR}-"
            f"{MOVABLE_FEAST_MAX_YEAR}, got {year}"
        )

    a = year % 4
    b = year % 7
    c = year % 19
    d = (19 * c + 15) % 30
    e = (2 * a + 4 * b - d + 34) % 7

    month_julian = (d + e + 114) // 31  # 3 = March, 4 = April
    day_julian = (d + e + 114) % 31 + 1

    julian = date(year, month_julian, day_julian)
    return julian + timedelta(days=JULIAN_GREGORIAN_OFFSET_DAYS)


def romania_holidays(year: int) -> HolidaySet:
    """Build the Romanian public holiday set for one year.

    When an Easter-cluster day falls on a fixed holiday (e.g. Pentecost
    Monday on June 1), the fixed holiday name is kept.
    """
    holidays: dict[date, str] = {}

    easter = orthodox_easter(year)
    for offset, name in ROMANIA_EASTER_CLUSTER.items():
        holidays[easter + timedelta(days=offset)] = name

    for (month, day), name in ROMANIA_FIXED_HOLIDAYS.items():
        holidays[date(year, month, day)] = name

    return HolidaySet(year=year, holidays=holidays)


# region id -> per-year holiday set builder
HOLIDAY_CALENDARS: dict[str, Callable[[int], HolidaySet]] = {
    "RO": romania_holidays,
}


# ============================================================================
# Gating policies
# ============================================================================


class GatingPolicy(Protocol):
    """Decides whether a region-local calendar date is a trading day."""

    def is_trading_day(self, day: date) -> TradingDayResult:
        """Evaluate ``day`` in the region's civil calendar."""
        ...


class AlwaysTrading:
    """Continuously open market: every day is a trading day."""

    def is_trading_day(self, day: date) -> TradingDayResult:
        return TradingDayResult(trading_day=True)


class WeekdayHolidayGated:
    """Weekends and regional public holidays are non-trading days."""

    def __init__(self, region: str = "RO"):
        region = region.upper()
        if region not in HOLIDAY_CALENDARS:
            raise ConfigurationError(f"No holiday calendar for region '{region}'.")
        self.region = region
        self._build_holidays = HOLIDAY_CALENDARS[region]

    def holidays(self, year: int) -> HolidaySet:
        """Holiday set for ``year``, built fresh on every call."""
        return self._build_holidays(year)

    def is_trading_day(self, day: date) -> TradingDayResult:
        holiday_name = self.holidays(day.year).name_for(day)
        if holiday_name is not None:
            return TradingDayResult(
                trading_day=False,
                reason=f"{HOLIDAY_REASON_PREFIX}{holiday_name}",
            )

        if day.isoweekday() >= FIRST_WEEKEND_ISO_DAY:
            return TradingDayResult(trading_day=False, reason=WEEKEND_REASON)

        return TradingDayResult(trading_day=True)


def get_gating_policy(mode: CalendarMode, region: str = "RO") -> GatingPolicy:
    """Factory for the gating policy selected by configuration."""
    if mode == CalendarMode.ALWAYS_TRADING:
        return AlwaysTrading()
    return WeekdayHolidayGated(region)


def is_trading_day(
    day: date,
    region: str = "RO",
    mode: CalendarMode = CalendarMode.WEEKDAY_HOLIDAY_GATED,
) -> TradingDayResult:
    """Evaluate ``day`` for ``region`` under the given calendar mode."""
    result = get_gating_policy(mode, region).is_trading_day(day)
    logger.debug(
        f"[Calendar] {day.isoformat()} region={region} mode={mode.value}: "
        f"trading_day={result.trading_day} reason={result.reason}"
    )
    return result
