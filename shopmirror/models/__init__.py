"""Database models for Shopmirror"""

from shopmirror.models.base import Base, Database

from shopmirror.models.shopify import (
    ShopifyOrder,
    ShopifyCustomer,
    ShopifyProduct,
    ShopifyInventoryLevel
)
