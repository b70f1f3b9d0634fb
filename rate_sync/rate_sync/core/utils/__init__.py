"""Shared utility functions for rate_sync core modules."""

from rate_sync.core.utils.dates import region_timezone, region_today

__all__ = [
    "region_timezone",
    "region_today",
]
