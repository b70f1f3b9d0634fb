"""Health check endpoints."""

from fastapi import APIRouter, Depends

from rate_sync.core.config import SyncSettings, get_settings
from rate_sync.core.single_flight import run_guard

router = APIRouter()


@router.get("")
def health_check() -> dict:
    """Generic health check."""
    return {"status": "healthy"}


@router.get("/live")
def liveness() -> dict:
    """Liveness probe - is the process running?"""
    return {"status": "alive"}


@router.get("/ready")
def readiness(settings: SyncSettings = Depends(get_settings)) -> dict:
    """Readiness probe - is everything a run needs configured?"""
    missing = settings.missing_credentials()
    return {
        "status": "ready" if not missing else "not_ready",
        "checks": {
            "shop_configured": bool(settings.shop_url and settings.shop_token),
            "pricing_configured": bool(settings.cmc_api_key),
            "run_in_progress": bool(settings.shop_url)
            and run_guard.is_active(settings.shop_url),
        },
        "missing": missing,
    }
