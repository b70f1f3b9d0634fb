"""Custom exceptions for the rate_sync domain.

Every failure aborts the current run. The engine raises these and never
absorbs them; the trigger surfaces decide whether to report or swallow.
"""


class RateSyncError(Exception):
    """Base exception for all rate_sync errors."""

    pass


# ============================================================================
# Run input errors
# ============================================================================


class ConfigurationError(RateSyncError):
    """Raised when required run inputs are missing or invalid.

    Examples:
    - SHOP_URL / SHOP_TOKEN not set
    - CMC_API_KEY not set
    - Unknown calendar mode or region
    """

    def __init__(self, message: str, missing: list[str] | None = None):
        super().__init__(message)
        self.missing = missing or []


class AuthorizationError(RateSyncError):
    """Raised when a manual trigger presents a mismatched run key."""

    pass


class RunInProgressError(RateSyncError):
    """Raised when another run for the same shop is already in flight."""

    def __init__(self, message: str, key: str | None = None):
        super().__init__(message)
        self.key = key


# ============================================================================
# Pricing provider errors
# ============================================================================


class UpstreamFetchError(RateSyncError):
    """Base class for pricing provider failures.

    No partial snapshot is ever returned alongside this error.
    """

    def __init__(self, message: str, service: str = "coinmarketcap", symbol: str | None = None):
        super().__init__(message)
        self.service = service
        self.symbol = symbol


class UpstreamTransportError(UpstreamFetchError):
    """Raised when the provider is unreachable or answers with an HTTP error.

    Examples:
    - Connection timeout
    - 401 / 429 / 5xx status
    """

    pass


class UpstreamDataError(UpstreamFetchError):
    """Raised when a well-formed response lacks requested data.

    Examples:
    - Response body without a data object
    - Requested symbol absent
    - Price missing, non-numeric, NaN or infinite
    """

    pass


# ============================================================================
# Stored state errors
# ============================================================================


class StoredStateError(RateSyncError):
    """Base class for record store failures."""

    pass


class StoredStateReadError(StoredStateError):
    """Raised when reading the stored values and dates fails."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class PersistenceError(StoredStateError):
    """Raised when the batch write is rejected, fully or for some items.

    ``errors`` holds the per-item error records exactly as reported.
    """

    def __init__(
        self,
        message: str,
        errors: list[dict] | None = None,
        status_code: int | None = None,
    ):
        super().__init__(message)
        self.errors = errors or []
        self.status_code = status_code
