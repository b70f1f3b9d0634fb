"""Configuration for the rate sync service.

Settings are read from the environment once at process start and frozen.
Missing credentials are tolerated at load time and reported as a
ConfigurationError when a run starts, before any network call.
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from functools import lru_cache

from rate_sync.domain.constants import (
    CHANGE_EPSILON,
    DATE_FIELD_TYPE,
    DEFAULT_CONVERT,
    DEFAULT_FIELD_KEYS,
    DEFAULT_NAMESPACE,
    DEFAULT_RATE_SYNC_CRON,
    DEFAULT_REGION,
    DEFAULT_SHOPIFY_API_VERSION,
    REGION_TIMEZONES,
    VALUE_DECIMALS,
    VALUE_FIELD_TYPE,
)
from rate_sync.domain.entities import TrackedField
from rate_sync.domain.exceptions import ConfigurationError

# Environment variable names
ENV_SHOP_URL = "SHOP_URL"
ENV_SHOP_TOKEN = "SHOP_TOKEN"
ENV_CMC_API_KEY = "CMC_API_KEY"
ENV_CMC_CONVERT = "CMC_CONVERT"
ENV_API_VERSION = "API_VERSION"
ENV_RUN_KEY = "RUN_KEY"
ENV_CALENDAR_MODE = "CALENDAR_MODE"
ENV_CALENDAR_REGION = "CALENDAR_REGION"
ENV_RATE_SYNC_CRON = "RATE_SYNC_CRON"


class CalendarMode(str, Enum):
    """Gating policy selected for a deployment."""

    ALWAYS_TRADING = "always"  # continuously open market, never skip
    WEEKDAY_HOLIDAY_GATED = "gated"  # skip weekends and regional holidays


@dataclass(frozen=True)
class TrackingConfig:
    """What is tracked and how changes are detected."""

    namespace: str = DEFAULT_NAMESPACE
    fields: tuple[TrackedField, ...] = field(
        default_factory=lambda: tuple(
            TrackedField(symbol=symbol, value_key=value_key, date_key=date_key)
            for symbol, (value_key, date_key) in DEFAULT_FIELD_KEYS.items()
        )
    )
    epsilon: float = CHANGE_EPSILON
    decimals: int = VALUE_DECIMALS
    value_type: str = VALUE_FIELD_TYPE
    date_type: str = DATE_FIELD_TYPE

    @property
    def symbols(self) -> list[str]:
        return [f.symbol for f in self.fields]


@dataclass(frozen=True)
class SyncSettings:
    """Process-wide settings, built once from the environment."""

    shop_url: str | None = None
    shop_token: str | None = field(default=None, repr=False)
    cmc_api_key: str | None = field(default=None, repr=False)
    convert: str = DEFAULT_CONVERT
    api_version: str = DEFAULT_SHOPIFY_API_VERSION
    run_key: str | None = field(default=None, repr=False)
    calendar_mode: CalendarMode = CalendarMode.WEEKDAY_HOLIDAY_GATED
    region: str = DEFAULT_REGION
    schedule_cron: str = DEFAULT_RATE_SYNC_CRON
    tracking: TrackingConfig = field(default_factory=TrackingConfig)

    def missing_credentials(self) -> list[str]:
        """Names of required environment variables that are not set."""
        required = {
            ENV_SHOP_URL: self.shop_url,
            ENV_SHOP_TOKEN: self.shop_token,
            ENV_CMC_API_KEY: self.cmc_api_key,
        }
        return [name for name, value in required.items() if not value]

    def run_configuration(self, force: bool = False) -> "RunConfiguration":
        """Build the immutable configuration of one run."""
        return RunConfiguration(settings=self, force=force)


@dataclass(frozen=True)
class RunConfiguration:
    """Inputs of a single run: the process settings plus the force flag."""

    settings: SyncSettings
    force: bool = False

    @property
    def convert(self) -> str:
        return self.settings.convert

    @property
    def region(self) -> str:
        return self.settings.region

    @property
    def calendar_mode(self) -> CalendarMode:
        return self.settings.calendar_mode

    @property
    def run_key(self) -> str | None:
        return self.settings.run_key

    @property
    def tracking(self) -> TrackingConfig:
        return self.settings.tracking

    def validate(self) -> None:
        """Raise ConfigurationError if required credentials are absent."""
        missing = self.settings.missing_credentials()
        if missing:
            raise ConfigurationError(
                f"Missing required configuration: {', '.join(missing)}.",
                missing=missing,
            )


def _read(environ: Mapping[str, str], name: str) -> str | None:
    """Read an env var, treating empty and whitespace-only values as unset."""
    value = environ.get(name, "").strip()
    return value or None


def _normalize_shop_url(shop_url: str | None) -> str | None:
    if shop_url is None:
        return None
    for prefix in ("https://", "http://"):
        if shop_url.startswith(prefix):
            shop_url = shop_url[len(prefix):]
    return shop_url.rstrip("/") or None


def parse_calendar_mode(value: str | None) -> CalendarMode:
    """Parse a CALENDAR_MODE value (default: gated)."""
    if value is None:
        return CalendarMode.WEEKDAY_HOLIDAY_GATED
    try:
        return CalendarMode(value.lower())
    except ValueError:
        allowed = ", ".join(m.value for m in CalendarMode)
        raise ConfigurationError(
            f"Unknown {ENV_CALENDAR_MODE} '{value}'. Expected one of: {allowed}."
        ) from None


def parse_region(value: str | None) -> str:
    """Parse a CALENDAR_REGION value (default: RO)."""
    region = (value or DEFAULT_REGION).upper()
    if region not in REGION_TIMEZONES:
        allowed = ", ".join(sorted(REGION_TIMEZONES))
        raise ConfigurationError(
            f"Unknown {ENV_CALENDAR_REGION} '{value}'. Expected one of: {allowed}."
        )
    return region


def load_settings(environ: Mapping[str, str] | None = None) -> SyncSettings:
    """Load settings from the environment.

    Reads:
    - SHOP_URL, SHOP_TOKEN, CMC_API_KEY: required at run time
    - CMC_CONVERT: conversion currency (default: USD)
    - API_VERSION: Shopify Admin API version (default: 2024-04)
    - RUN_KEY: shared secret for manual runs (default: unset)
    - CALENDAR_MODE: "gated" or "always" (default: gated)
    - CALENDAR_REGION: holiday calendar region (default: RO)
    - RATE_SYNC_CRON: schedule of the Prefect deployment (default: 0 10 * * *)

    Returns:
        Frozen SyncSettings.

    Raises:
        ConfigurationError: if CALENDAR_MODE or CALENDAR_REGION is unknown.
    """
    env = os.environ if environ is None else environ

    convert = _read(env, ENV_CMC_CONVERT) or DEFAULT_CONVERT

    return SyncSettings(
        shop_url=_normalize_shop_url(_read(env, ENV_SHOP_URL)),
        shop_token=_read(env, ENV_SHOP_TOKEN),
        cmc_api_key=_read(env, ENV_CMC_API_KEY),
        convert=convert.upper(),
        api_version=_read(env, ENV_API_VERSION) or DEFAULT_SHOPIFY_API_VERSION,
        run_key=_read(env, ENV_RUN_KEY),
        calendar_mode=parse_calendar_mode(_read(env, ENV_CALENDAR_MODE)),
        region=parse_region(_read(env, ENV_CALENDAR_REGION)),
        schedule_cron=_read(env, ENV_RATE_SYNC_CRON) or DEFAULT_RATE_SYNC_CRON,
    )


@lru_cache(maxsize=1)
def get_settings() -> SyncSettings:
    """Process-wide settings (loaded on first use)."""
    return load_settings()
