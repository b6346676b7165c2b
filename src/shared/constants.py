"""Shared constants across the application."""

# Remote page size used by the Shopify client unless overridden
REMOTE_PAGE_SIZE = 50

# Nested collection sizes requested per remote record
VARIANTS_PER_PRODUCT = 10
IMAGES_PER_PRODUCT = 10
LINE_ITEMS_PER_ORDER = 50

# Sync job identifiers (sync_status.id)
SYNC_PRODUCTS = "products"
SYNC_ORDERS = "orders"

# Sync run states
SYNC_STATE_IDLE = "idle"
SYNC_STATE_RUNNING = "running"
SYNC_STATE_ERROR = "error"

# Address kinds stored per order, mapped to the remote order field holding each
ADDRESS_TYPES = {"shipping": "shippingAddress", "billing": "billingAddress"}

# Column defaults for NOT NULL fields
DEFAULT_CURRENCY_CODE = "USD"
DEFAULT_ORDER_STATUS = "UNKNOWN"

# Default limits
DEFAULT_PAGE_LIMIT = 20
MAX_PAGE_LIMIT = 100
