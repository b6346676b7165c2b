"""Unit tests for the Shopify GraphQL client."""

import json
from datetime import date

import httpx
import pytest

from storefront_service.config import Settings
from storefront_service.infrastructure.shopify import (
    ShopifyAPIError,
    ShopifyClient,
    ShopifyConfigError,
    build_order_date_query,
)


def make_client(handler) -> ShopifyClient:
    return ShopifyClient(
        shop_name="test-shop.myshopify.com",
        access_token="shpat_test",
        transport=httpx.MockTransport(handler),
    )


def money_set(amount: str, currency: str = "USD") -> dict:
    return {"shopMoney": {"amount": amount, "currencyCode": currency}}


PRODUCTS_RESPONSE = {
    "data": {
        "products": {
            "pageInfo": {"hasNextPage": True, "endCursor": "cursor-1"},
            "edges": [
                {
                    "node": {
                        "id": "gid://shopify/Product/1",
                        "title": "Mug",
                        "description": "Ceramic",
                        "handle": "mug",
                        "status": "ACTIVE",
                        "createdAt": "2024-01-01T00:00:00Z",
                        "updatedAt": "2024-01-02T00:00:00Z",
                        "totalInventory": 3,
                        "priceRangeV2": {
                            "minVariantPrice": {"amount": "9.0", "currencyCode": "CAD"},
                            "maxVariantPrice": {"amount": "12.0", "currencyCode": "CAD"},
                        },
                        "variants": {
                            "edges": [
                                {
                                    "node": {
                                        "id": "gid://shopify/ProductVariant/11",
                                        "title": "Blue",
                                        "price": "9.0",
                                        "sku": "MUG-B",
                                        "inventoryQuantity": 3,
                                        "inventoryItem": {
                                            "measurement": {
                                                "weight": {"value": 0.4, "unit": "KILOGRAMS"}
                                            }
                                        },
                                    }
                                }
                            ]
                        },
                        "images": {
                            "edges": [
                                {
                                    "node": {
                                        "id": "gid://shopify/ProductImage/21",
                                        "url": "https://cdn.example.com/mug.png",
                                        "altText": None,
                                        "width": 100,
                                        "height": 100,
                                    }
                                }
                            ]
                        },
                    }
                }
            ],
        }
    }
}


ORDERS_RESPONSE = {
    "data": {
        "orders": {
            "pageInfo": {"hasNextPage": False, "endCursor": None},
            "edges": [
                {
                    "node": {
                        "id": "gid://shopify/Order/1",
                        "name": "#1001",
                        "email": "buyer@example.com",
                        "phone": None,
                        "processedAt": "2024-02-01T09:00:00Z",
                        "totalPriceSet": money_set("20.0"),
                        "subtotalPriceSet": money_set("18.0"),
                        "totalTaxSet": money_set("2.0"),
                        "totalShippingPriceSet": None,
                        "displayFinancialStatus": "PAID",
                        "displayFulfillmentStatus": "UNFULFILLED",
                        "note": None,
                        "tags": ["gift"],
                        "customer": {"id": "gid://shopify/Customer/1", "firstName": "Bo"},
                        "shippingAddress": {"city": "Oslo"},
                        "billingAddress": None,
                        "lineItems": {
                            "edges": [
                                {
                                    "node": {
                                        "id": "gid://shopify/LineItem/1",
                                        "title": "Mug",
                                        "quantity": 2,
                                        "originalUnitPriceSet": money_set("9.0"),
                                        "variant": {
                                            "id": "gid://shopify/ProductVariant/11",
                                            "title": "Blue",
                                            "product": {"id": "gid://shopify/Product/1"},
                                        },
                                    }
                                },
                                {
                                    "node": {
                                        "id": "gid://shopify/LineItem/2",
                                        "title": "Custom engraving",
                                        "quantity": 1,
                                        "originalUnitPriceSet": money_set("2.0"),
                                        "variant": None,
                                    }
                                },
                            ]
                        },
                    }
                }
            ],
        }
    }
}


class TestRequests:
    @pytest.mark.asyncio
    async def test_posts_query_with_token_and_variables(self) -> None:
        captured: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            captured.append(request)
            return httpx.Response(200, json=PRODUCTS_RESPONSE)

        async with make_client(handler) as client:
            await client.fetch_products(first=25, after="abc")

        request = captured[0]
        assert request.method == "POST"
        assert str(request.url) == (
            "https://test-shop.myshopify.com/admin/api/2024-10/graphql.json"
        )
        assert request.headers["X-Shopify-Access-Token"] == "shpat_test"
        body = json.loads(request.content)
        assert body["variables"] == {"first": 25, "after": "abc"}
        assert "products(" in body["query"]

    @pytest.mark.asyncio
    async def test_order_filter_is_forwarded(self) -> None:
        captured: list[dict] = []

        def handler(request: httpx.Request) -> httpx.Response:
            captured.append(json.loads(request.content))
            return httpx.Response(200, json=ORDERS_RESPONSE)

        async with make_client(handler) as client:
            await client.fetch_orders(query="processed_at:>=2024-02-01")

        assert captured[0]["variables"]["query"] == "processed_at:>=2024-02-01"
        assert captured[0]["variables"]["after"] is None


class TestResponseShaping:
    @pytest.mark.asyncio
    async def test_products_are_flattened(self) -> None:
        async with make_client(lambda r: httpx.Response(200, json=PRODUCTS_RESPONSE)) as client:
            page = await client.fetch_products()

        assert page.has_next_page is True
        assert page.end_cursor == "cursor-1"
        product = page.records[0]
        assert product["id"] == "gid://shopify/Product/1"
        assert product["priceRange"]["maxVariantPrice"]["amount"] == "12.0"
        variant = product["variants"][0]
        assert variant["price"] == {"amount": "9.0", "currencyCode": "CAD"}
        assert variant["weight"] == 0.4
        assert variant["weightUnit"] == "KILOGRAMS"
        assert product["images"][0]["url"] == "https://cdn.example.com/mug.png"

    @pytest.mark.asyncio
    async def test_orders_are_flattened(self) -> None:
        async with make_client(lambda r: httpx.Response(200, json=ORDERS_RESPONSE)) as client:
            page = await client.fetch_orders()

        assert page.has_next_page is False
        order = page.records[0]
        assert order["totalPrice"] == {"amount": "20.0", "currencyCode": "USD"}
        assert order["totalShippingPrice"] is None
        assert order["tags"] == ["gift"]
        first, second = order["lineItems"]
        assert first["price"]["amount"] == "9.0"
        assert first["variant"]["product"]["id"] == "gid://shopify/Product/1"
        assert second["variant"] is None

    @pytest.mark.asyncio
    async def test_empty_connection(self) -> None:
        empty = {"data": {"products": {"edges": [], "pageInfo": {"hasNextPage": False}}}}
        async with make_client(lambda r: httpx.Response(200, json=empty)) as client:
            page = await client.fetch_products()

        assert page.records == []
        assert page.has_next_page is False
        assert page.end_cursor is None


class TestErrors:
    @pytest.mark.asyncio
    async def test_http_error_status(self) -> None:
        async with make_client(lambda r: httpx.Response(401, text="Unauthorized")) as client:
            with pytest.raises(ShopifyAPIError) as exc_info:
                await client.fetch_products()

        assert exc_info.value.status_code == 401
        assert "401" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_graphql_errors(self) -> None:
        payload = {"errors": [{"message": "Throttled"}, {"message": "Access denied"}]}
        async with make_client(lambda r: httpx.Response(200, json=payload)) as client:
            with pytest.raises(ShopifyAPIError, match="Throttled; Access denied"):
                await client.fetch_orders()

    @pytest.mark.asyncio
    async def test_transport_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with make_client(handler) as client:
            with pytest.raises(ShopifyAPIError, match="request failed"):
                await client.fetch_products()

    @pytest.mark.asyncio
    async def test_invalid_json(self) -> None:
        async with make_client(lambda r: httpx.Response(200, text="<html>")) as client:
            with pytest.raises(ShopifyAPIError, match="invalid JSON"):
                await client.fetch_products()


class TestConfiguration:
    def test_from_settings_requires_credentials(self) -> None:
        settings = Settings(shopify_shop_name="", shopify_access_token="")
        with pytest.raises(ShopifyConfigError):
            ShopifyClient.from_settings(settings)

    @pytest.mark.asyncio
    async def test_from_settings_normalizes_shop_name(self, test_settings: Settings) -> None:
        client = ShopifyClient.from_settings(test_settings)
        try:
            assert client.endpoint == (
                "https://test-shop.myshopify.com/admin/api/2024-10/graphql.json"
            )
        finally:
            await client.close()


def test_build_order_date_query() -> None:
    assert build_order_date_query(date(2024, 1, 1), date(2024, 1, 31)) == (
        "processed_at:>=2024-01-01 processed_at:<=2024-01-31"
    )
