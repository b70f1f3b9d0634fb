"""Entry point shared by the manual and scheduled triggers.

Builds the real collaborators from settings and runs the engine under the
single-flight guard. Errors propagate; each trigger decides what to do
with them.
"""

import hmac
import logging
from datetime import datetime

from rate_sync.core.coinmarketcap import CoinMarketCapClient
from rate_sync.core.config import SyncSettings
from rate_sync.core.reconciliation import run_reconciliation
from rate_sync.core.shopify import ShopifyMetafieldsClient
from rate_sync.core.single_flight import SingleFlight, run_guard
from rate_sync.domain.entities import RunResult
from rate_sync.domain.exceptions import AuthorizationError

logger = logging.getLogger(__name__)


def authorize_run(settings: SyncSettings, presented_key: str | None) -> None:
    """Check a manual trigger's key against RUN_KEY.

    No RUN_KEY configured means manual runs are open.

    Raises:
        AuthorizationError: if RUN_KEY is set and the keys differ.
    """
    if not settings.run_key:
        return
    if presented_key is None or not hmac.compare_digest(
        presented_key.encode(), settings.run_key.encode()
    ):
        raise AuthorizationError("Unauthorized")


def execute_run(
    settings: SyncSettings,
    force: bool = False,
    now: datetime | None = None,
    guard: SingleFlight = run_guard,
) -> RunResult:
    """Run one reconciliation against CoinMarketCap and Shopify.

    Args:
        settings: Process settings
        force: Bypass the calendar gate
        now: Current instant (defaults to the real clock)
        guard: Single-flight guard keyed on the shop

    Returns:
        RunResult of the run.

    Raises:
        ConfigurationError: before any network call if credentials are missing
        RunInProgressError: if a run for the same shop is already active
        UpstreamFetchError, StoredStateReadError, PersistenceError: from the run
    """
    config = settings.run_configuration(force=force)
    config.validate()

    pricing = CoinMarketCapClient(settings.cmc_api_key)
    store = ShopifyMetafieldsClient(
        settings.shop_url, settings.shop_token, api_version=settings.api_version
    )

    logger.info(
        f"[Run] Starting run for {settings.shop_url} "
        f"(force={force}, mode={settings.calendar_mode.value}, region={settings.region})"
    )
    with guard.hold(settings.shop_url):
        result = run_reconciliation(
            config,
            fetch_snapshot=pricing,
            read_stored=store.read_metafields,
            write_stored=store.set_metafields,
            now=now,
        )

    if result.skipped:
        logger.info(f"[Run] Skipped ({result.reason}) on {result.date}")
    else:
        logger.info(
            f"[Run] Done on {result.date}: wrote={result.wrote}, "
            f"updated={list(result.updated)}"
        )
    return result
