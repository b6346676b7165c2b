"""Shopify Admin GraphQL API client.

Wraps an ``httpx.AsyncClient`` and turns the connection-style GraphQL
responses (``edges``/``node``/``pageInfo``) into flat record dicts that the
sync services consume. Keys keep Shopify's camelCase names; money selections
are normalised to ``{"amount": str, "currencyCode": str}``.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Any

import httpx
import structlog

from shared.constants import DEFAULT_CURRENCY_CODE, REMOTE_PAGE_SIZE
from storefront_service.config import Settings
from storefront_service.infrastructure.shopify.exceptions import (
    ShopifyAPIError,
    ShopifyConfigError,
)
from storefront_service.infrastructure.shopify.queries import (
    ORDERS_QUERY,
    PRODUCTS_QUERY,
)

logger = structlog.get_logger()


@dataclass
class RemotePage:
    """One page of remote records plus the cursor to the next page."""

    records: list[dict[str, Any]] = field(default_factory=list)
    has_next_page: bool = False
    end_cursor: str | None = None


def build_order_date_query(start_date: date, end_date: date) -> str:
    """Search filter selecting orders processed within a date range."""
    return (
        f"processed_at:>={start_date.isoformat()} "
        f"processed_at:<={end_date.isoformat()}"
    )


def _nodes(connection: dict | None) -> list[dict[str, Any]]:
    if not connection:
        return []
    return [edge["node"] for edge in connection.get("edges") or [] if edge.get("node")]


def _shop_money(money_set: dict | None) -> dict[str, Any] | None:
    if not money_set:
        return None
    return money_set.get("shopMoney")


def _page_info(connection: dict) -> tuple[bool, str | None]:
    page_info = connection.get("pageInfo") or {}
    return bool(page_info.get("hasNextPage")), page_info.get("endCursor")


class ShopifyClient:
    """Async client for the Shopify Admin GraphQL endpoint."""

    def __init__(
        self,
        shop_name: str,
        access_token: str,
        api_version: str = "2024-10",
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.shop_name = shop_name
        self.api_version = api_version
        self.endpoint = f"https://{shop_name}/admin/api/{api_version}/graphql.json"
        self._client = httpx.AsyncClient(
            timeout=timeout,
            transport=transport,
            headers={
                "Content-Type": "application/json",
                "X-Shopify-Access-Token": access_token,
            },
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "ShopifyClient":
        """Build a client from application settings."""
        if not settings.shopify_shop_name or not settings.shopify_access_token:
            raise ShopifyConfigError(
                "SHOPIFY_SHOP_NAME and SHOPIFY_ACCESS_TOKEN must be set"
            )
        return cls(
            shop_name=settings.shopify_shop_name,
            access_token=settings.shopify_access_token,
            api_version=settings.shopify_api_version,
            timeout=settings.shopify_api_timeout,
        )

    async def __aenter__(self) -> "ShopifyClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the underlying HTTPX client."""
        await self._client.aclose()

    async def execute(self, query: str, variables: dict[str, Any] | None = None) -> dict[str, Any]:
        """
        Execute a GraphQL document and return its ``data`` payload.

        Raises:
            ShopifyAPIError: On transport failure, non-2xx status, an
                undecodable body or a GraphQL ``errors`` array.
        """
        try:
            response = await self._client.post(
                self.endpoint, json={"query": query, "variables": variables or {}}
            )
        except httpx.HTTPError as e:
            logger.error("Shopify request failed", endpoint=self.endpoint, error=str(e))
            raise ShopifyAPIError(f"Shopify request failed: {e}") from e

        if response.status_code >= 400:
            logger.error(
                "Shopify API error response",
                status=response.status_code,
                body=response.text[:500],
            )
            raise ShopifyAPIError(
                f"Shopify API error: {response.status_code} {response.text}",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise ShopifyAPIError("Shopify API returned invalid JSON") from e

        if payload.get("errors"):
            messages = [err.get("message", str(err)) for err in payload["errors"]]
            raise ShopifyAPIError(f"Shopify GraphQL error: {'; '.join(messages)}")

        return payload.get("data") or {}

    async def fetch_products(
        self, first: int = REMOTE_PAGE_SIZE, after: str | None = None
    ) -> RemotePage:
        """Fetch one page of products."""
        data = await self.execute(PRODUCTS_QUERY, {"first": first, "after": after})
        connection = data.get("products") or {}
        has_next, cursor = _page_info(connection)
        return RemotePage(
            records=[self._product_record(node) for node in _nodes(connection)],
            has_next_page=has_next,
            end_cursor=cursor,
        )

    async def fetch_orders(
        self,
        first: int = REMOTE_PAGE_SIZE,
        after: str | None = None,
        query: str | None = None,
    ) -> RemotePage:
        """Fetch one page of orders, optionally narrowed by a search filter."""
        data = await self.execute(
            ORDERS_QUERY, {"first": first, "after": after, "query": query}
        )
        connection = data.get("orders") or {}
        has_next, cursor = _page_info(connection)
        return RemotePage(
            records=[self._order_record(node) for node in _nodes(connection)],
            has_next_page=has_next,
            end_cursor=cursor,
        )

    # -------------------------------------------------------------------------
    # Response shaping
    # -------------------------------------------------------------------------

    @staticmethod
    def _product_record(node: dict[str, Any]) -> dict[str, Any]:
        price_range = node.get("priceRangeV2") or {}
        currency = (price_range.get("minVariantPrice") or {}).get(
            "currencyCode", DEFAULT_CURRENCY_CODE
        )

        variants = []
        for variant in _nodes(node.get("variants")):
            measurement = ((variant.get("inventoryItem") or {}).get("measurement") or {})
            weight = measurement.get("weight") or {}
            variants.append({
                "id": variant.get("id"),
                "title": variant.get("title"),
                # Variant price is a bare decimal string in the shop currency
                "price": {"amount": variant.get("price"), "currencyCode": currency},
                "sku": variant.get("sku"),
                "inventoryQuantity": variant.get("inventoryQuantity"),
                "weight": weight.get("value"),
                "weightUnit": weight.get("unit"),
            })

        return {
            "id": node.get("id"),
            "title": node.get("title"),
            "description": node.get("description"),
            "handle": node.get("handle"),
            "status": node.get("status"),
            "createdAt": node.get("createdAt"),
            "updatedAt": node.get("updatedAt"),
            "totalInventory": node.get("totalInventory"),
            "variants": variants,
            "images": [
                {
                    "id": image.get("id"),
                    "url": image.get("url"),
                    "altText": image.get("altText"),
                    "width": image.get("width"),
                    "height": image.get("height"),
                }
                for image in _nodes(node.get("images"))
            ],
            "priceRange": price_range,
        }

    @staticmethod
    def _order_record(node: dict[str, Any]) -> dict[str, Any]:
        line_items = []
        for item in _nodes(node.get("lineItems")):
            variant = item.get("variant")
            line_items.append({
                "id": item.get("id"),
                "title": item.get("title"),
                "quantity": item.get("quantity"),
                "price": _shop_money(item.get("originalUnitPriceSet")),
                "variant": (
                    {
                        "id": variant.get("id"),
                        "title": variant.get("title"),
                        "product": variant.get("product"),
                    }
                    if variant
                    else None
                ),
            })

        return {
            "id": node.get("id"),
            "name": node.get("name"),
            "email": node.get("email"),
            "phone": node.get("phone"),
            "processedAt": node.get("processedAt"),
            "totalPrice": _shop_money(node.get("totalPriceSet")),
            "subtotalPrice": _shop_money(node.get("subtotalPriceSet")),
            "taxPrice": _shop_money(node.get("totalTaxSet")),
            "totalShippingPrice": _shop_money(node.get("totalShippingPriceSet")),
            "displayFinancialStatus": node.get("displayFinancialStatus"),
            "displayFulfillmentStatus": node.get("displayFulfillmentStatus"),
            "note": node.get("note"),
            "tags": node.get("tags") or [],
            "customer": node.get("customer"),
            "lineItems": line_items,
            "shippingAddress": node.get("shippingAddress"),
            "billingAddress": node.get("billingAddress"),
        }
