"""GraphQL documents sent to the Shopify Admin API.

Both queries page with ``first``/``after`` and return ``pageInfo`` so the
caller can follow ``endCursor`` until ``hasNextPage`` is false. Money fields
are requested through the ``*Set { shopMoney }`` selections so each amount
arrives with its currency.
"""

from shared.constants import (
    IMAGES_PER_PRODUCT,
    LINE_ITEMS_PER_ORDER,
    VARIANTS_PER_PRODUCT,
)

PRODUCTS_QUERY = f"""
query GetProducts($first: Int!, $after: String) {{
  products(first: $first, after: $after) {{
    edges {{
      node {{
        id
        title
        description
        handle
        status
        createdAt
        updatedAt
        totalInventory
        variants(first: {VARIANTS_PER_PRODUCT}) {{
          edges {{
            node {{
              id
              title
              price
              sku
              inventoryQuantity
              inventoryItem {{
                measurement {{
                  weight {{
                    value
                    unit
                  }}
                }}
              }}
            }}
          }}
        }}
        images(first: {IMAGES_PER_PRODUCT}) {{
          edges {{
            node {{
              id
              url
              altText
              width
              height
            }}
          }}
        }}
        priceRangeV2 {{
          minVariantPrice {{
            amount
            currencyCode
          }}
          maxVariantPrice {{
            amount
            currencyCode
          }}
        }}
      }}
    }}
    pageInfo {{
      hasNextPage
      endCursor
    }}
  }}
}}
"""

_ADDRESS_FIELDS = """
      address1
      address2
      city
      province
      zip
      country
      name
      phone
"""

_MONEY = "shopMoney { amount currencyCode }"

ORDERS_QUERY = f"""
query GetOrders($first: Int!, $after: String, $query: String) {{
  orders(first: $first, after: $after, query: $query) {{
    edges {{
      node {{
        id
        name
        email
        phone
        processedAt
        totalPriceSet {{ {_MONEY} }}
        subtotalPriceSet {{ {_MONEY} }}
        totalTaxSet {{ {_MONEY} }}
        totalShippingPriceSet {{ {_MONEY} }}
        displayFinancialStatus
        displayFulfillmentStatus
        note
        tags
        customer {{
          id
          firstName
          lastName
          email
          phone
        }}
        lineItems(first: {LINE_ITEMS_PER_ORDER}) {{
          edges {{
            node {{
              id
              title
              quantity
              originalUnitPriceSet {{ {_MONEY} }}
              variant {{
                id
                title
                product {{
                  id
                  title
                }}
              }}
            }}
          }}
        }}
        shippingAddress {{{_ADDRESS_FIELDS}        }}
        billingAddress {{{_ADDRESS_FIELDS}        }}
      }}
    }}
    pageInfo {{
      hasNextPage
      endCursor
    }}
  }}
}}
"""
