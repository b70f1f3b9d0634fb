"""Date utilities for region-local calendars."""

from datetime import UTC, date, datetime
from zoneinfo import ZoneInfo

from rate_sync.domain.constants import REGION_TIMEZONES
from rate_sync.domain.exceptions import ConfigurationError


def region_timezone(region: str) -> ZoneInfo:
    """Return the civil timezone of a region.

    Raises:
        ConfigurationError: if the region is unknown
    """
    tz_name = REGION_TIMEZONES.get(region.upper())
    if tz_name is None:
        raise ConfigurationError(f"Unknown calendar region '{region}'.")
    return ZoneInfo(tz_name)


def region_today(region: str, now: datetime | None = None) -> date:
    """Calendar date in the region at instant ``now`` (default: current instant).

    Independent of the process timezone. A naive ``now`` is taken as UTC.
    """
    if now is None:
        now = datetime.now(UTC)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=UTC)
    return now.astimezone(region_timezone(region)).date()

