"""
Shopify Data Models

Local mirror of data pulled from the Shopify Admin API or pushed by
webhooks. One table per entity type, keyed by Shopify's own id.
Nested structures (line items, addresses, variants, images) are stored as
JSON documents.
"""
from sqlalchemy import Column, String, DateTime, JSON, BigInteger, Integer, Text
from datetime import datetime

from shopmirror.models.base import Base


class ShopifyOrder(Base):
    """
    Shopify orders

    Synced from GET /admin/api/{version}/orders.json or the orders/create webhook
    """
    __tablename__ = "shopify_orders"

    id = Column(BigInteger, primary_key=True, autoincrement=False)  # Shopify order ID
    order_number = Column(String, index=True, nullable=True)  # "#1005"
    email = Column(String, index=True, nullable=True)

    total_price = Column(String, nullable=True)  # decimal string
    financial_status = Column(String, index=True, nullable=True)
    fulfillment_status = Column(String, index=True, nullable=True)

    line_items = Column(JSON, nullable=False, default=list)  # [{product_id, variant_id, name, quantity, price}, ...]
    customer = Column(JSON, nullable=True)  # {id, first_name, last_name, email}

    created_at = Column(DateTime, index=True, nullable=True)

    # Sync metadata
    synced_at = Column(DateTime, default=datetime.utcnow)


class ShopifyCustomer(Base):
    """
    Shopify customers

    Synced from GET /admin/api/{version}/customers.json or the customers/create webhook
    """
    __tablename__ = "shopify_customers"

    id = Column(BigInteger, primary_key=True, autoincrement=False)  # Shopify customer ID

    email = Column(String, index=True, nullable=False)
    first_name = Column(String, nullable=True)
    last_name = Column(String, nullable=True)
    phone = Column(String, nullable=True)

    orders_count = Column(Integer, nullable=True)
    total_spent = Column(String, nullable=True)  # decimal string

    addresses = Column(JSON, nullable=False, default=list)  # [{address1, ..., is_default}, ...]

    created_at = Column(DateTime, index=True, nullable=True)
    updated_at = Column(DateTime, index=True, nullable=True)

    synced_at = Column(DateTime, default=datetime.utcnow)


class ShopifyProduct(Base):
    """
    Shopify products catalog

    Synced from GET /admin/api/{version}/products.json or the products/create webhook
    """
    __tablename__ = "shopify_products"

    id = Column(BigInteger, primary_key=True, autoincrement=False)  # Shopify product ID

    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)  # body_html, unsanitized
    vendor = Column(String, index=True, nullable=True)
    product_type = Column(String, index=True, nullable=True)
    tags = Column(String, nullable=True)  # comma-separated, as Shopify sends it
    status = Column(String, index=True, nullable=True)  # active, archived, draft

    variants = Column(JSON, nullable=False, default=list)  # [{id, title, price, sku, inventory_quantity}, ...]
    images = Column(JSON, nullable=False, default=list)  # ["https://cdn.shopify.com/...", ...]

    created_at = Column(DateTime, index=True, nullable=True)
    updated_at = Column(DateTime, index=True, nullable=True)

    synced_at = Column(DateTime, default=datetime.utcnow)


class ShopifyInventoryLevel(Base):
    """
    Shopify inventory levels

    Synced from GET /admin/api/{version}/inventory_levels.json or the
    inventory_levels/update webhook (upserted)
    """
    __tablename__ = "shopify_inventory_levels"

    inventory_item_id = Column(BigInteger, primary_key=True, autoincrement=False)
    product_id = Column(BigInteger, index=True, nullable=True)  # not every level carries one
    variant_id = Column(BigInteger, index=True, nullable=True)
    location_id = Column(BigInteger, index=True, nullable=False)

    available = Column(Integer, nullable=False)

    updated_at = Column(DateTime, index=True, nullable=True)
    synced_at = Column(DateTime, default=datetime.utcnow)
