"""Domain constants for rate_sync.

Defaults only. The values actually used by a run travel in the immutable
configuration objects built by ``rate_sync.core.config``.
"""

# ============================================================================
# Tracked fields
# ============================================================================

# Metafield namespace shared by every value and date field
DEFAULT_NAMESPACE = "custom"

# symbol -> (value key, date key)
DEFAULT_FIELD_KEYS: dict[str, tuple[str, str]] = {
    "BTC": ("custom_crypto_btc", "custom_crypto_btc_date"),
    "EGLD": ("crypto_egld", "crypto_egld_date"),
}

# Metafield type tags
VALUE_FIELD_TYPE = "number_decimal"
DATE_FIELD_TYPE = "single_line_text_field"

# Minimum absolute change that triggers a write
CHANGE_EPSILON = 1e-6

# Fractional digits of the stored decimal string
VALUE_DECIMALS = 6


# ============================================================================
# Provider / store defaults
# ============================================================================

DEFAULT_CONVERT = "USD"
DEFAULT_SHOPIFY_API_VERSION = "2024-04"

# Scheduled run: daily at 10:00 in the scheduler timezone
DEFAULT_RATE_SYNC_CRON = "0 10 * * *"


# ============================================================================
# Calendar
# ============================================================================

DEFAULT_REGION = "RO"

# region id -> IANA timezone of its civil calendar
REGION_TIMEZONES: dict[str, str] = {
    "RO": "Europe/Bucharest",
}

# Years for which the Julian -> Gregorian offset below holds
MOVABLE_FEAST_MIN_YEAR = 1900
MOVABLE_FEAST_MAX_YEAR = 2099
JULIAN_GREGORIAN_OFFSET_DAYS = 13

# ISO weekday numbers (Monday=1 .. Sunday=7) at or above this are weekend
FIRST_WEEKEND_ISO_DAY = 6
