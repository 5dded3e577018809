"""
Shopify payload shapes

Two families of types per entity:
- Raw*: what the Shopify Admin API (REST or webhook) sends. Unknown fields
  are ignored, absent optional fields default to None / [].
- *Record: the canonical local record that gets persisted.

The Normalizer (services/normalizer.py) maps one to the other.
"""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field

from shopmirror.utils.helpers import join_tags, money_str, parse_timestamp


class EntityType(str, Enum):
    ORDERS = "orders"
    CUSTOMERS = "customers"
    PRODUCTS = "products"
    INVENTORY = "inventory"


@dataclass(frozen=True)
class EntitySpec:
    """How one entity type is fetched and keyed"""
    label: str
    resource: str  # GET /{resource}.json
    collection_key: str  # top-level key of the response body
    key_field: str  # natural key on the canonical record
    fields: Tuple[str, ...]  # sent as ?fields=


ENTITY_SPECS: Dict[EntityType, EntitySpec] = {
    EntityType.ORDERS: EntitySpec(
        label="Order",
        resource="orders",
        collection_key="orders",
        key_field="id",
        fields=(
            "id", "name", "email", "total_price", "created_at",
            "financial_status", "fulfillment_status", "line_items", "customer",
        ),
    ),
    EntityType.CUSTOMERS: EntitySpec(
        label="Customer",
        resource="customers",
        collection_key="customers",
        key_field="id",
        fields=(
            "id", "email", "first_name", "last_name", "phone", "orders_count",
            "total_spent", "created_at", "updated_at", "addresses",
        ),
    ),
    EntityType.PRODUCTS: EntitySpec(
        label="Product",
        resource="products",
        collection_key="products",
        key_field="id",
        fields=(
            "id", "title", "body_html", "vendor", "product_type", "tags",
            "status", "created_at", "updated_at", "variants", "images",
        ),
    ),
    EntityType.INVENTORY: EntitySpec(
        label="Inventory",
        resource="inventory_levels",
        collection_key="inventory_levels",
        key_field="inventory_item_id",
        fields=(
            "inventory_item_id", "product_id", "variant_id", "location_id",
            "available", "updated_at",
        ),
    ),
}


def _none_to_list(value: Any) -> Any:
    return [] if value is None else value


Money = Annotated[Optional[str], BeforeValidator(money_str)]
Timestamp = Annotated[Optional[datetime], BeforeValidator(parse_timestamp)]
Tags = Annotated[Optional[str], BeforeValidator(join_tags)]


# ---------------------------------------------------------------------------
# Raw upstream shapes
# ---------------------------------------------------------------------------

class RawModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class RawLineItem(RawModel):
    product_id: Optional[int] = None
    variant_id: Optional[int] = None
    name: Optional[str] = None
    title: Optional[str] = None
    quantity: Optional[int] = None
    price: Money = None


class RawOrderCustomer(RawModel):
    id: Optional[int] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None


class RawOrder(RawModel):
    id: int
    name: Optional[str] = None  # "#1005"
    email: Optional[str] = None
    total_price: Money = None
    created_at: Timestamp = None
    financial_status: Optional[str] = None
    fulfillment_status: Optional[str] = None
    line_items: Annotated[List[RawLineItem], BeforeValidator(_none_to_list)] = Field(default_factory=list)
    customer: Optional[RawOrderCustomer] = None


class RawAddress(RawModel):
    address1: Optional[str] = None
    address2: Optional[str] = None
    city: Optional[str] = None
    province: Optional[str] = None
    country: Optional[str] = None
    zip: Optional[str] = None
    phone: Optional[str] = None
    default: Optional[bool] = None


class RawCustomer(RawModel):
    id: int
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    orders_count: Optional[int] = None
    total_spent: Money = None
    created_at: Timestamp = None
    updated_at: Timestamp = None
    addresses: Annotated[List[RawAddress], BeforeValidator(_none_to_list)] = Field(default_factory=list)


class RawVariant(RawModel):
    id: Optional[int] = None
    title: Optional[str] = None
    price: Optional[float] = None
    sku: Optional[str] = None
    inventory_quantity: Optional[int] = None


class RawImage(RawModel):
    src: Optional[str] = None


class RawProduct(RawModel):
    id: int
    title: str
    body_html: Optional[str] = None
    vendor: Optional[str] = None
    product_type: Optional[str] = None
    tags: Tags = None
    status: Optional[str] = None
    created_at: Timestamp = None
    updated_at: Timestamp = None
    variants: Annotated[List[RawVariant], BeforeValidator(_none_to_list)] = Field(default_factory=list)
    images: Annotated[List[RawImage], BeforeValidator(_none_to_list)] = Field(default_factory=list)


class RawInventoryLevel(RawModel):
    inventory_item_id: int
    product_id: Optional[int] = None
    variant_id: Optional[int] = None
    location_id: int
    available: int
    updated_at: Timestamp = None


# ---------------------------------------------------------------------------
# Canonical local records
# ---------------------------------------------------------------------------

class LineItem(BaseModel):
    product_id: Optional[int] = None
    variant_id: Optional[int] = None
    name: Optional[str] = None
    quantity: Optional[int] = None
    price: Optional[str] = None


class OrderCustomer(BaseModel):
    id: Optional[int] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None


class OrderRecord(BaseModel):
    id: int
    order_number: Optional[str] = None
    email: Optional[str] = None
    total_price: Optional[str] = None
    created_at: Optional[datetime] = None
    financial_status: Optional[str] = None
    fulfillment_status: Optional[str] = None
    line_items: List[LineItem] = Field(default_factory=list)
    customer: Optional[OrderCustomer] = None


class Address(BaseModel):
    address1: Optional[str] = None
    address2: Optional[str] = None
    city: Optional[str] = None
    province: Optional[str] = None
    country: Optional[str] = None
    zip: Optional[str] = None
    phone: Optional[str] = None
    is_default: Optional[bool] = None


class CustomerRecord(BaseModel):
    id: int
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    orders_count: Optional[int] = None
    total_spent: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    addresses: List[Address] = Field(default_factory=list)


class Variant(BaseModel):
    id: Optional[int] = None
    title: Optional[str] = None
    price: Optional[float] = None
    sku: Optional[str] = None
    inventory_quantity: Optional[int] = None


class ProductRecord(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    vendor: Optional[str] = None
    product_type: Optional[str] = None
    tags: Optional[str] = None
    status: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    variants: List[Variant] = Field(default_factory=list)
    images: List[str] = Field(default_factory=list)


class InventoryRecord(BaseModel):
    inventory_item_id: int
    product_id: Optional[int] = None
    variant_id: Optional[int] = None
    location_id: int
    available: int
    updated_at: Optional[datetime] = None
