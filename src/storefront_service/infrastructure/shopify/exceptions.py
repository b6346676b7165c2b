"""Errors raised by the Shopify Admin API client."""


class ShopifyError(Exception):
    """Base class for Shopify integration errors."""


class ShopifyConfigError(ShopifyError):
    """Shop name or access token is not configured."""


class ShopifyAPIError(ShopifyError):
    """A request to the Admin API failed.

    Covers transport failures, non-2xx responses and GraphQL ``errors``
    payloads. ``status_code`` is set when the server answered.
    """

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code
