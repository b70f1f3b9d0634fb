"""FastAPI application entrypoint."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse

from rate_sync.domain.exceptions import ConfigurationError
from rate_sync.routes import health, root, run

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Rate Sync",
    description="Syncs crypto prices from CoinMarketCap into Shopify metafields",
    version="0.1.0",
)

app.include_router(root.router)
app.include_router(health.router, prefix="/health", tags=["health"])
app.include_router(run.router, tags=["run"])


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError) -> PlainTextResponse:
    """Invalid settings (e.g. unknown CALENDAR_MODE) raised while resolving a route."""
    logger.error(f"[Config] {request.url.path} rejected: {exc}")
    return PlainTextResponse(f"{type(exc).__name__}: {exc}", status_code=500)
