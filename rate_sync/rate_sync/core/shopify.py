"""Shopify Admin GraphQL client for shop metafields.

Reads the stored value/date metafields of every tracked field in one query
and writes staged fields with a single ``metafieldsSet`` mutation, which
Shopify applies atomically.
"""

import json
import logging
from collections.abc import Sequence

import httpx

from rate_sync.domain.constants import DEFAULT_SHOPIFY_API_VERSION
from rate_sync.domain.entities import FieldWrite, StoredState
from rate_sync.domain.exceptions import (
    ConfigurationError,
    PersistenceError,
    StoredStateReadError,
)

logger = logging.getLogger(__name__)

SHOPIFY_TIMEOUT = httpx.Timeout(connect=10.0, read=30.0, write=10.0, pool=10.0)

# metafieldsSet accepts at most this many inputs per call
METAFIELDS_SET_LIMIT = 25

METAFIELDS_SET_MUTATION = """
mutation Set($metafields: [MetafieldsSetInput!]!) {
  metafieldsSet(metafields: $metafields) {
    userErrors { field message code }
  }
}
"""


def build_read_query(key_count: int) -> str:
    """GraphQL query reading ``key_count`` shop metafields in one namespace.

    Each metafield is aliased ``f0``, ``f1``... in the order of the keys.
    """
    params = ", ".join(f"$k{i}: String!" for i in range(key_count))
    fields = "\n".join(
        f"    f{i}: metafield(namespace: $ns, key: $k{i}) {{ id type value }}"
        for i in range(key_count)
    )
    return (
        f"query ReadMetafields($ns: String!, {params}) {{\n"
        f"  shop {{\n"
        f"    id\n"
        f"{fields}\n"
        f"  }}\n"
        f"}}\n"
    )


class ShopifyMetafieldsClient:
    """Client for shop-owned metafields via the Admin GraphQL API."""

    def __init__(
        self,
        shop_url: str | None,
        access_token: str | None,
        api_version: str = DEFAULT_SHOPIFY_API_VERSION,
        timeout: httpx.Timeout = SHOPIFY_TIMEOUT,
    ):
        """Initialize the client.

        Args:
            shop_url: Shop host, e.g. "your-shop.myshopify.com" (no protocol).
            access_token: Admin API access token with metafield scopes.
            api_version: Admin API version, e.g. "2024-04".
            timeout: HTTP request timeout.
        """
        missing = [
            name
            for name, value in (("SHOP_URL", shop_url), ("SHOP_TOKEN", access_token))
            if not value
        ]
        if missing:
            raise ConfigurationError(
                f"Missing Shopify configuration: {', '.join(missing)}.", missing=missing
            )
        self.shop_url = shop_url
        self.access_token = access_token
        self.api_version = api_version
        self.timeout = timeout

    @property
    def graphql_url(self) -> str:
        return f"https://{self.shop_url}/admin/api/{self.api_version}/graphql.json"

    def _headers(self) -> dict[str, str]:
        """Get headers for Shopify Admin API requests."""
        return {
            "X-Shopify-Access-Token": self.access_token,
            "Content-Type": "application/json",
        }

    def _post(self, query: str, variables: dict) -> httpx.Response:
        with httpx.Client(timeout=self.timeout) as client:
            return client.post(
                self.graphql_url,
                headers=self._headers(),
                json={"query": query, "variables": variables},
            )

    def read_metafields(self, namespace: str, keys: Sequence[str]) -> StoredState:
        """Read the current value of every key, plus the shop GID.

        Returns:
            StoredState owned by the shop; absent metafields map to None.

        Raises:
            StoredStateReadError: on transport errors, HTTP errors or
                GraphQL errors.
        """
        variables: dict[str, str] = {"ns": namespace}
        variables.update({f"k{i}": key for i, key in enumerate(keys)})

        try:
            response = self._post(build_read_query(len(keys)), variables)
        except httpx.HTTPError as e:
            raise StoredStateReadError(f"GraphQL read failed: {e}") from e

        if response.status_code >= 400:
            raise StoredStateReadError(
                f"GraphQL read failed: {response.status_code} {response.text}",
                status_code=response.status_code,
            )

        try:
            body = response.json()
        except ValueError as e:
            raise StoredStateReadError(f"GraphQL read returned invalid JSON: {e}") from e

        if body.get("errors"):
            raise StoredStateReadError(
                "GraphQL read errors: " + json.dumps(body["errors"], ensure_ascii=False)
            )

        shop = (body.get("data") or {}).get("shop")
        if not shop or not shop.get("id"):
            raise StoredStateReadError("GraphQL read returned no shop")

        values: dict[str, str | None] = {}
        for i, key in enumerate(keys):
            metafield = shop.get(f"f{i}")
            values[key] = metafield.get("value") if metafield else None

        logger.info(
            f"[Shopify] Read {sum(v is not None for v in values.values())}/{len(keys)} "
            f"metafields in namespace '{namespace}'"
        )
        return StoredState(owner_id=shop["id"], values=values)

    def set_metafields(self, owner_id: str, writes: Sequence[FieldWrite]) -> None:
        """Write all fields in one metafieldsSet mutation.

        Raises:
            PersistenceError: on transport errors, HTTP errors, GraphQL errors
                or any per-item userErrors.
        """
        if not writes:
            return
        if len(writes) > METAFIELDS_SET_LIMIT:
            raise PersistenceError(
                f"metafieldsSet accepts at most {METAFIELDS_SET_LIMIT} fields, "
                f"got {len(writes)}"
            )

        metafields = [{**w.to_dict(), "ownerId": owner_id} for w in writes]

        try:
            response = self._post(METAFIELDS_SET_MUTATION, {"metafields": metafields})
        except httpx.HTTPError as e:
            raise PersistenceError(f"GraphQL write failed: {e}") from e

        if response.status_code >= 400:
            raise PersistenceError(
                f"GraphQL write failed: {response.status_code} {response.text}",
                status_code=response.status_code,
            )

        try:
            body = response.json()
        except ValueError as e:
            raise PersistenceError(f"GraphQL write returned invalid JSON: {e}") from e

        if body.get("errors"):
            raise PersistenceError(
                "GraphQL write errors: " + json.dumps(body["errors"], ensure_ascii=False),
                errors=list(body["errors"]),
            )

        user_errors = (
            ((body.get("data") or {}).get("metafieldsSet") or {}).get("userErrors") or []
        )
        if user_errors:
            raise PersistenceError(
                "metafieldsSet errors: " + json.dumps(user_errors, ensure_ascii=False),
                errors=list(user_errors),
            )

        logger.info(
            f"[Shopify] Wrote {len(writes)} metafields: "
            + ", ".join(w.key for w in writes)
        )
