"""Scheduled crypto rate sync.

Runs the reconciliation without force, so weekends and Romanian public
holidays are skipped under the gated calendar mode. Failures are logged and
absorbed here: a transient outage on one tick must not turn into a failed
flow run that the scheduler retries aggressively. The next tick starts a
fresh run.
"""

from prefect import flow, task
from prefect.logging import get_run_logger

from rate_sync.core.config import get_settings
from rate_sync.core.runner import execute_run


# =============================================================================
# Tasks
# =============================================================================


@task(name="Run Rate Sync", retries=0)
def run_rate_sync(force: bool = False) -> dict:
    """Run one reconciliation and return the run result as a dict."""
    logger = get_run_logger()
    logger.info(f"Running rate sync (force={force})...")

    result = execute_run(get_settings(), force=force)

    if result.skipped:
        logger.info(f"Rate sync skipped on {result.date}: {result.reason}")
    else:
        logger.info(
            f"Rate sync done on {result.date}: wrote={result.wrote}, "
            f"rates={dict(result.rates)}"
        )
    return result.to_dict()


# =============================================================================
# Flow
# =============================================================================


@flow(
    name="Scheduled Rate Sync",
    description="Sync CoinMarketCap prices into Shopify metafields",
    retries=0,
    timeout_seconds=300,
)
def scheduled_rate_sync_flow() -> dict:
    """Execute the scheduled (non-forced) rate sync.

    Returns:
        The run result dict, or {"ok": False, "error": ...} if the run failed.
    """
    logger = get_run_logger()

    try:
        return run_rate_sync(force=False)
    except Exception as e:
        logger.warning(f"Scheduled rate sync failed, waiting for next tick: {e}")
        return {"ok": False, "error": f"{type(e).__name__}: {e}"}


# =============================================================================
# Deployment
# =============================================================================

if __name__ == "__main__":
    scheduled_rate_sync_flow.serve(
        name="scheduled-rate-sync",
        cron=get_settings().schedule_cron,
    )
