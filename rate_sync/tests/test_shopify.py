"""Tests for the Shopify metafields client.

This module tests:
- Batched metafield read (aliases, owner GID, absent metafields)
- metafieldsSet write (ownerId on every item, userErrors surfaced)
- Error mapping to StoredStateReadError / PersistenceError
"""

from unittest.mock import MagicMock, patch

import httpx
import pytest

from rate_sync.core.shopify import (
    METAFIELDS_SET_LIMIT,
    ShopifyMetafieldsClient,
    build_read_query,
)
from rate_sync.domain.entities import FieldWrite
from rate_sync.domain.exceptions import (
    ConfigurationError,
    PersistenceError,
    StoredStateReadError,
)

SHOP_GID = "gid://shopify/Shop/123456"
KEYS = ["custom_crypto_btc", "custom_crypto_btc_date", "crypto_egld", "crypto_egld_date"]


@pytest.fixture
def mock_http():
    """Patch httpx.Client in the client module and yield the inner client mock."""
    with patch("rate_sync.core.shopify.httpx.Client") as mock_client_class:
        mock_client = MagicMock()
        mock_client_class.return_value.__enter__.return_value = mock_client
        yield mock_client


@pytest.fixture
def client() -> ShopifyMetafieldsClient:
    return ShopifyMetafieldsClient("test-shop.myshopify.com", "shpat_test", "2024-04")


def response(body: dict, status_code: int = 200) -> MagicMock:
    return MagicMock(status_code=status_code, json=lambda: body, text=str(body))


def sample_writes() -> list[FieldWrite]:
    return [
        FieldWrite("custom", "custom_crypto_btc", "number_decimal", "67000.000000"),
        FieldWrite("custom", "custom_crypto_btc_date", "single_line_text_field", "2026-10-13"),
    ]


class TestBuildReadQuery:
    def test_aliases_every_key(self) -> None:
        query = build_read_query(2)
        assert "$ns: String!" in query
        assert "$k0: String!, $k1: String!" in query
        assert "f0: metafield(namespace: $ns, key: $k0)" in query
        assert "f1: metafield(namespace: $ns, key: $k1)" in query
        assert "shop {" in query


class TestReadMetafields:
    """Tests for ShopifyMetafieldsClient.read_metafields."""

    def test_reads_values_and_owner(self, client, mock_http) -> None:
        mock_http.post.return_value = response(
            {
                "data": {
                    "shop": {
                        "id": SHOP_GID,
                        "f0": {"id": "gid://shopify/Metafield/1", "type": "number_decimal", "value": "67000.000000"},
                        "f1": {"id": "gid://shopify/Metafield/2", "type": "single_line_text_field", "value": "2026-10-12"},
                        "f2": None,
                        "f3": None,
                    }
                }
            }
        )

        state = client.read_metafields("custom", KEYS)

        assert state.owner_id == SHOP_GID
        assert state.get("custom_crypto_btc") == "67000.000000"
        assert state.get("custom_crypto_btc_date") == "2026-10-12"
        assert state.get("crypto_egld") is None
        assert state.get("crypto_egld_date") is None

        args, kwargs = mock_http.post.call_args
        assert args[0] == "https://test-shop.myshopify.com/admin/api/2024-04/graphql.json"
        assert kwargs["headers"]["X-Shopify-Access-Token"] == "shpat_test"
        variables = kwargs["json"]["variables"]
        assert variables == {
            "ns": "custom",
            "k0": "custom_crypto_btc",
            "k1": "custom_crypto_btc_date",
            "k2": "crypto_egld",
            "k3": "crypto_egld_date",
        }

    def test_http_error_raises_read_error(self, client, mock_http) -> None:
        mock_http.post.return_value = response({"errors": "Invalid API key"}, status_code=401)

        with pytest.raises(StoredStateReadError) as exc_info:
            client.read_metafields("custom", KEYS)

        assert exc_info.value.status_code == 401

    def test_graphql_errors_raise_read_error(self, client, mock_http) -> None:
        mock_http.post.return_value = response(
            {"errors": [{"message": "Throttled"}]}
        )

        with pytest.raises(StoredStateReadError, match="Throttled"):
            client.read_metafields("custom", KEYS)

    def test_transport_error_raises_read_error(self, client, mock_http) -> None:
        mock_http.post.side_effect = httpx.ConnectError("connection refused")

        with pytest.raises(StoredStateReadError):
            client.read_metafields("custom", KEYS)

    def test_missing_shop_raises_read_error(self, client, mock_http) -> None:
        mock_http.post.return_value = response({"data": {"shop": None}})

        with pytest.raises(StoredStateReadError, match="no shop"):
            client.read_metafields("custom", KEYS)


class TestSetMetafields:
    """Tests for ShopifyMetafieldsClient.set_metafields."""

    def test_sends_owner_on_every_item(self, client, mock_http) -> None:
        mock_http.post.return_value = response(
            {"data": {"metafieldsSet": {"userErrors": []}}}
        )

        client.set_metafields(SHOP_GID, sample_writes())

        _, kwargs = mock_http.post.call_args
        metafields = kwargs["json"]["variables"]["metafields"]
        assert metafields == [
            {
                "namespace": "custom",
                "key": "custom_crypto_btc",
                "type": "number_decimal",
                "value": "67000.000000",
                "ownerId": SHOP_GID,
            },
            {
                "namespace": "custom",
                "key": "custom_crypto_btc_date",
                "type": "single_line_text_field",
                "value": "2026-10-13",
                "ownerId": SHOP_GID,
            },
        ]
        assert "metafieldsSet" in kwargs["json"]["query"]

    def test_user_errors_raise_with_details(self, client, mock_http) -> None:
        user_errors = [
            {"field": ["metafields", "1", "value"], "message": "Value is invalid", "code": "INVALID_VALUE"}
        ]
        mock_http.post.return_value = response(
            {"data": {"metafieldsSet": {"userErrors": user_errors}}}
        )

        with pytest.raises(PersistenceError) as exc_info:
            client.set_metafields(SHOP_GID, sample_writes())

        assert exc_info.value.errors == user_errors
        assert "Value is invalid" in str(exc_info.value)

    def test_http_error_raises_persistence_error(self, client, mock_http) -> None:
        mock_http.post.return_value = response({}, status_code=500)

        with pytest.raises(PersistenceError) as exc_info:
            client.set_metafields(SHOP_GID, sample_writes())

        assert exc_info.value.status_code == 500

    def test_empty_batch_sends_nothing(self, client, mock_http) -> None:
        client.set_metafields(SHOP_GID, [])
        mock_http.post.assert_not_called()

    def test_oversized_batch_is_rejected_before_sending(self, client, mock_http) -> None:
        writes = sample_writes() * (METAFIELDS_SET_LIMIT // 2 + 1)

        with pytest.raises(PersistenceError, match="at most"):
            client.set_metafields(SHOP_GID, writes)
        mock_http.post.assert_not_called()


class TestClientConstruction:
    def test_missing_shop_config_raises(self) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            ShopifyMetafieldsClient(None, None)
        assert exc_info.value.missing == ["SHOP_URL", "SHOP_TOKEN"]
