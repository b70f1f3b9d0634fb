"""Manual trigger endpoint.

GET /run?key=<RUN_KEY>&force=1 runs one reconciliation synchronously and
returns the run result. Failures come back as plain text so an operator
sees the error verbatim.
"""

import logging

from fastapi import APIRouter, Depends, Query
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, Field

from rate_sync.core.config import SyncSettings, get_settings
from rate_sync.core.runner import authorize_run, execute_run
from rate_sync.domain.exceptions import AuthorizationError, RunInProgressError

logger = logging.getLogger(__name__)

router = APIRouter()

TRUTHY_FLAGS = {"1", "true", "yes"}


# ============================================================================
# Response models
# ============================================================================


class RunResponse(BaseModel):
    """Result of a reconciliation run."""

    ok: bool = Field(True, description="Run completed without error")
    skipped: bool = Field(..., description="Run skipped by the calendar gate")
    reason: str | None = Field(
        None, description="Skip reason: 'weekend' or 'holiday:<name>'"
    )
    date: str = Field(..., description="Region-local date of the run (YYYY-MM-DD)")
    wrote: bool = Field(False, description="Whether any field was written")
    rates: dict[str, float] = Field(
        default_factory=dict, description="Fetched prices (symbol -> price)"
    )
    last_updated: dict[str, str | None] = Field(
        default_factory=dict, description="Previously stored dates (symbol -> date)"
    )
    updated: list[str] = Field(
        default_factory=list, description="Symbols whose value changed"
    )
    shop_id: int | str | None = Field(None, description="Shop that owns the fields")


def parse_force(value: str | None) -> bool:
    """Interpret the optional force query flag."""
    return value is not None and value.strip().lower() in TRUTHY_FLAGS


# ============================================================================
# Endpoint
# ============================================================================


@router.get(
    "/run",
    response_model=RunResponse,
    responses={
        401: {"description": "RUN_KEY mismatch"},
        409: {"description": "A run for this shop is already in progress"},
        500: {"description": "Run failed"},
    },
)
def run_endpoint(
    key: str | None = Query(None, description="Must equal RUN_KEY when one is set"),
    force: str | None = Query(None, description="'1' to bypass weekend/holiday skip"),
    settings: SyncSettings = Depends(get_settings),
):
    """Trigger a reconciliation run on demand.

    Returns:
        RunResponse on success (executed or skipped), otherwise plain text:
        401 for a bad key, 409 for an overlapping run, 500 for any failure.
    """
    try:
        authorize_run(settings, key)
    except AuthorizationError:
        logger.warning("[Run] Manual run rejected: bad key")
        return PlainTextResponse("Unauthorized", status_code=401)

    forced = parse_force(force)

    try:
        result = execute_run(settings, force=forced)
    except RunInProgressError as e:
        return PlainTextResponse(str(e), status_code=409)
    except Exception as e:
        logger.error(f"[Run] Manual run failed: {type(e).__name__}: {e}")
        return PlainTextResponse(f"{type(e).__name__}: {e}", status_code=500)

    return RunResponse(**result.to_dict())
