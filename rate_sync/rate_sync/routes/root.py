"""Root endpoint (service banner)."""

from fastapi import APIRouter

router = APIRouter(tags=["root"])


@router.get("/")
def read_root() -> dict:
    """Service banner."""
    return {
        "message": "Crypto rate sync OK. Use /run to trigger.",
        "service": "rate-sync",
        "version": "0.1.0",
    }
