"""CoinMarketCap pro API client.

Fetches the latest quotes for a set of symbols in one conversion currency.
Transport failures and data gaps raise distinct errors so callers can tell
an outage from an incomplete answer.
"""

import logging
from collections.abc import Sequence

import httpx

from rate_sync.domain.exceptions import (
    ConfigurationError,
    UpstreamDataError,
    UpstreamTransportError,
)

logger = logging.getLogger(__name__)

CMC_QUOTES_URL = "https://pro-api.coinmarketcap.com/v1/cryptocurrency/quotes/latest"

# Single bounded request, no retry
CMC_TIMEOUT = httpx.Timeout(connect=10.0, read=20.0, write=10.0, pool=10.0)

SERVICE_NAME = "coinmarketcap"


class CoinMarketCapClient:
    """Client for the CoinMarketCap quotes endpoint."""

    def __init__(
        self,
        api_key: str | None,
        base_url: str = CMC_QUOTES_URL,
        timeout: httpx.Timeout = CMC_TIMEOUT,
    ):
        """Initialize the client.

        Args:
            api_key: CoinMarketCap pro API key.
            base_url: Quotes endpoint URL.
            timeout: HTTP request timeout.
        """
        if not api_key:
            raise ConfigurationError(
                "No CoinMarketCap API key. Set CMC_API_KEY.", missing=["CMC_API_KEY"]
            )
        self.api_key = api_key
        self.base_url = base_url
        self.timeout = timeout

    def _headers(self) -> dict[str, str]:
        """Get headers for CoinMarketCap requests."""
        return {
            "X-CMC_PRO_API_KEY": self.api_key,
            "Accept": "application/json",
        }

    def get_quotes(self, symbols: Sequence[str], convert: str) -> dict:
        """Fetch the raw quotes payload.

        Raises:
            UpstreamTransportError: on network errors, timeouts or HTTP errors.
        """
        params = {"symbol": ",".join(symbols)}
        if convert:
            params["convert"] = convert

        try:
            with httpx.Client(timeout=self.timeout) as client:
                response = client.get(self.base_url, headers=self._headers(), params=params)
                response.raise_for_status()
                return response.json()
        except httpx.TimeoutException as e:
            raise UpstreamTransportError(
                f"CMC fetch timed out: {e}", service=SERVICE_NAME
            ) from e
        except httpx.HTTPStatusError as e:
            raise UpstreamTransportError(
                f"CMC fetch failed: {e.response.status_code}", service=SERVICE_NAME
            ) from e
        except httpx.HTTPError as e:
            raise UpstreamTransportError(
                f"CMC fetch failed: {e}", service=SERVICE_NAME
            ) from e
        except ValueError as e:
            raise UpstreamTransportError(
                f"CMC response is not valid JSON: {e}", service=SERVICE_NAME
            ) from e

    def fetch_prices(self, symbols: Sequence[str], convert: str) -> dict[str, float]:
        """Fetch symbol -> price in ``convert``.

        Raises:
            UpstreamTransportError: if the request itself fails.
            UpstreamDataError: if any requested symbol or price is missing.
        """
        payload = self.get_quotes(symbols, convert)

        data = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(data, dict):
            raise UpstreamDataError("CMC response missing data", service=SERVICE_NAME)

        prices: dict[str, float] = {}
        for symbol in symbols:
            entry = data.get(symbol)
            if not isinstance(entry, dict):
                raise UpstreamDataError(
                    f"CMC data missing symbol {symbol}", service=SERVICE_NAME, symbol=symbol
                )
            quote = (entry.get("quote") or {}).get(convert)
            price = quote.get("price") if isinstance(quote, dict) else None
            if isinstance(price, bool) or not isinstance(price, int | float):
                raise UpstreamDataError(
                    f"CMC data missing price for {symbol} ({convert})",
                    service=SERVICE_NAME,
                    symbol=symbol,
                )
            prices[symbol] = float(price)

        logger.info(
            f"[CMC] Fetched {len(prices)} prices in {convert}: "
            + ", ".join(f"{s}={p:.6f}" for s, p in prices.items())
        )
        return prices

    def __call__(self, symbols: Sequence[str], convert: str) -> dict[str, float]:
        return self.fetch_prices(symbols, convert)
