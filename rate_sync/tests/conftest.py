"""Pytest configuration and fixtures for all tests.

This module ensures tests run in isolation from production environment variables.
"""

import os

import pytest

from rate_sync.core.config import SyncSettings, get_settings

# Environment variables that must not leak into tests
RATE_SYNC_ENV_VARS = [
    "SHOP_URL",
    "SHOP_TOKEN",
    "CMC_API_KEY",
    "CMC_CONVERT",
    "API_VERSION",
    "RUN_KEY",
    "CALENDAR_MODE",
    "CALENDAR_REGION",
    "RATE_SYNC_CRON",
]


@pytest.fixture(autouse=True)
def isolate_from_env():
    """Clear rate sync env vars before each test to prevent external API calls.

    This fixture runs automatically for every test (autouse=True).
    It saves original values, clears them for the test, then restores after.
    """
    original_values = {}
    for var in RATE_SYNC_ENV_VARS:
        if var in os.environ:
            original_values[var] = os.environ.pop(var)
    get_settings.cache_clear()

    yield

    get_settings.cache_clear()
    for var, value in original_values.items():
        os.environ[var] = value


@pytest.fixture
def settings() -> SyncSettings:
    """Fully configured settings for the gated (RO) calendar mode."""
    return SyncSettings(
        shop_url="test-shop.myshopify.com",
        shop_token="shpat_test",
        cmc_api_key="cmc-test-key",
        convert="USD",
    )
