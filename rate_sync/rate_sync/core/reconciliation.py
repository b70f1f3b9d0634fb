"""Reconciliation engine: write back only the prices that materially changed.

One run moves linearly through:

    Init -> GateCheck -> Skipped
                      -> Fetching -> Reading -> Diffing -> Writing? -> Done

Every step depends on the previous one, so nothing runs in parallel. Errors
propagate unchanged to the caller; a failed run is never resumed.
"""

import logging
import math
from collections.abc import Mapping, Sequence
from datetime import date, datetime
from numbers import Real

from rate_sync.core.config import RunConfiguration, TrackingConfig
from rate_sync.core.protocols import (
    SnapshotFetcher,
    StoredStateReader,
    StoredStateWriter,
)
from rate_sync.core.trading_calendar import get_gating_policy
from rate_sync.core.utils import region_today
from rate_sync.domain.entities import (
    FieldWrite,
    RunResult,
    StoredState,
    TrackedQuantity,
)
from rate_sync.domain.exceptions import UpstreamDataError

logger = logging.getLogger(__name__)


# ============================================================================
# Helper functions
# ============================================================================


def format_decimal(value: float, decimals: int) -> str:
    """Fixed-precision decimal string, e.g. 50000.000002 -> '50000.000002'."""
    return f"{value:.{decimals}f}"


def parse_stored_value(raw: str | None, key: str = "") -> float | None:
    """Parse a stored decimal string.

    Absent, empty, unparseable and non-finite values all count as "nothing
    stored", so the quantity is rewritten.
    """
    if raw is None or not raw.strip():
        return None
    try:
        value = float(raw)
    except ValueError:
        logger.warning(f"[Reconcile] Ignoring unparseable stored value for {key}: {raw!r}")
        return None
    if not math.isfinite(value):
        logger.warning(f"[Reconcile] Ignoring non-finite stored value for {key}: {raw!r}")
        return None
    return value


def validate_snapshot(
    snapshot: Mapping[str, object],
    symbols: Sequence[str],
    convert: str,
) -> dict[str, float]:
    """Check that every requested symbol has a well-formed price.

    All-or-nothing: a single bad symbol rejects the whole snapshot.

    Returns:
        symbol -> price for exactly the requested symbols.

    Raises:
        UpstreamDataError: if a symbol is missing or its price is not a
            finite number.
    """
    prices: dict[str, float] = {}
    for symbol in symbols:
        if symbol not in snapshot:
            raise UpstreamDataError(
                f"Price snapshot missing symbol {symbol}", symbol=symbol
            )
        price = snapshot[symbol]
        if isinstance(price, bool) or not isinstance(price, Real):
            raise UpstreamDataError(
                f"Price for {symbol} ({convert}) is not a number: {price!r}",
                symbol=symbol,
            )
        if not math.isfinite(price):
            raise UpstreamDataError(
                f"Price for {symbol} ({convert}) is not finite: {price!r}",
                symbol=symbol,
            )
        prices[symbol] = float(price)
    return prices


def build_quantities(
    prices: Mapping[str, float],
    stored: StoredState,
    tracking: TrackingConfig,
) -> list[TrackedQuantity]:
    """Pair each fetched price with its stored value and date."""
    return [
        TrackedQuantity(
            symbol=f.symbol,
            current=prices[f.symbol],
            stored=parse_stored_value(stored.get(f.value_key), f.value_key),
            stored_date=stored.get(f.date_key) or None,
        )
        for f in tracking.fields
    ]


def stage_writes(
    quantities: Sequence[TrackedQuantity],
    tracking: TrackingConfig,
    today: date,
) -> list[FieldWrite]:
    """Stage value + date writes for every quantity that changed.

    Quantities are judged independently; one symbol changing never forces
    or suppresses a write for another.
    """
    by_symbol = {q.symbol: q for q in quantities}
    writes: list[FieldWrite] = []

    for f in tracking.fields:
        quantity = by_symbol.get(f.symbol)
        if quantity is None or not quantity.changed(tracking.epsilon):
            continue
        writes.append(
            FieldWrite(
                namespace=tracking.namespace,
                key=f.value_key,
                type=tracking.value_type,
                value=format_decimal(quantity.current, tracking.decimals),
            )
        )
        writes.append(
            FieldWrite(
                namespace=tracking.namespace,
                key=f.date_key,
                type=tracking.date_type,
                value=today.isoformat(),
            )
        )

    return writes


# ============================================================================
# Engine
# ============================================================================


def run_reconciliation(
    config: RunConfiguration,
    fetch_snapshot: SnapshotFetcher,
    read_stored: StoredStateReader,
    write_stored: StoredStateWriter,
    now: datetime | None = None,
) -> RunResult:
    """Execute one reconciliation run.

    Args:
        config: Immutable run configuration (settings + force flag)
        fetch_snapshot: Returns symbol -> price for the requested symbols
        read_stored: Reads stored values and dates in one batch
        write_stored: Applies a batch of field writes atomically
        now: Current instant (defaults to the real clock)

    Returns:
        RunResult, skipped or executed.

    Raises:
        ConfigurationError: required credentials missing (before any I/O)
        UpstreamFetchError: provider unreachable or snapshot incomplete
        StoredStateReadError: stored state could not be read
        PersistenceError: batch write rejected in whole or in part
    """
    config.validate()
    tracking = config.tracking

    today = region_today(config.region, now)
    today_iso = today.isoformat()

    # Gate check
    if not config.force:
        gate = get_gating_policy(config.calendar_mode, config.region).is_trading_day(today)
        if not gate.trading_day:
            logger.info(f"[Reconcile] Skipping {today_iso}: {gate.reason}")
            return RunResult(skipped=True, date=today_iso, reason=gate.reason)
    else:
        logger.info(f"[Reconcile] Forced run on {today_iso}, calendar gate bypassed")

    # Fetching
    symbols = tracking.symbols
    logger.info(f"[Reconcile] Fetching {', '.join(symbols)} in {config.convert}")
    prices = validate_snapshot(
        fetch_snapshot(symbols, config.convert), symbols, config.convert
    )

    # Reading
    keys = [k for f in tracking.fields for k in (f.value_key, f.date_key)]
    stored = read_stored(tracking.namespace, keys)

    # Diffing
    quantities = build_quantities(prices, stored, tracking)
    writes = stage_writes(quantities, tracking, today)
    updated = tuple(q.symbol for q in quantities if q.changed(tracking.epsilon))

    # Writing
    wrote = False
    if writes:
        logger.info(
            f"[Reconcile] Writing {len(writes)} fields for {', '.join(updated)}"
        )
        write_stored(stored.owner_id, writes)
        wrote = True
    else:
        logger.info("[Reconcile] No material change, nothing to write")

    return RunResult(
        skipped=False,
        date=today_iso,
        wrote=wrote,
        rates=prices,
        last_updated={q.symbol: q.stored_date for q in quantities},
        updated=updated,
        owner_id=stored.owner_id,
    )
