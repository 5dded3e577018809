"""Data connectors for Shopmirror"""

from shopmirror.connectors.shopify import ShopifyClient

__all__ = [
    "ShopifyClient"
]
