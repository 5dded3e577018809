"""
Normalizer

Pure mapping from upstream Shopify payloads to canonical local records.
No I/O and no business-rule validation: values are passed through, fields
are renamed and subset. Poll and webhook paths both go through here so they
converge on the same record shape.
"""
from typing import Any, Callable, Dict, List, Optional, Tuple

from pydantic import ValidationError

from shopmirror.errors import NormalizationError
from shopmirror.schemas.shopify import (
    ENTITY_SPECS,
    Address,
    CustomerRecord,
    EntityType,
    InventoryRecord,
    LineItem,
    OrderCustomer,
    OrderRecord,
    ProductRecord,
    RawCustomer,
    RawInventoryLevel,
    RawOrder,
    RawProduct,
    Variant,
)


def _parse(model, entity: EntityType, raw: Any):
    if not isinstance(raw, dict):
        raise NormalizationError(entity.value, f"expected an object, got {type(raw).__name__}")
    try:
        return model.model_validate(raw)
    except ValidationError as e:
        raise NormalizationError(entity.value, _describe(e)) from e


def _describe(error: ValidationError) -> str:
    """One-line summary of a pydantic error, e.g. "email: Field required" """
    parts = []
    for err in error.errors():
        loc = ".".join(str(p) for p in err["loc"]) or "body"
        parts.append(f"{loc}: {err['msg']}")
    return "; ".join(parts)


def normalize_order(raw: Any) -> OrderRecord:
    order = _parse(RawOrder, EntityType.ORDERS, raw)

    customer = None
    if order.customer is not None:
        customer = OrderCustomer(
            id=order.customer.id,
            first_name=order.customer.first_name,
            last_name=order.customer.last_name,
            email=order.customer.email,
        )

    return OrderRecord(
        id=order.id,
        order_number=order.name,
        email=order.email,
        total_price=order.total_price,
        created_at=order.created_at,
        financial_status=order.financial_status,
        fulfillment_status=order.fulfillment_status,
        line_items=[
            LineItem(
                product_id=item.product_id,
                variant_id=item.variant_id,
                name=item.name if item.name is not None else item.title,
                quantity=item.quantity,
                price=item.price,
            )
            for item in order.line_items
        ],
        customer=customer,
    )


def normalize_customer(raw: Any) -> CustomerRecord:
    customer = _parse(RawCustomer, EntityType.CUSTOMERS, raw)

    return CustomerRecord(
        id=customer.id,
        email=customer.email,
        first_name=customer.first_name,
        last_name=customer.last_name,
        phone=customer.phone,
        orders_count=customer.orders_count,
        total_spent=customer.total_spent,
        created_at=customer.created_at,
        updated_at=customer.updated_at,
        addresses=[
            Address(
                address1=address.address1,
                address2=address.address2,
                city=address.city,
                province=address.province,
                country=address.country,
                zip=address.zip,
                phone=address.phone,
                is_default=address.default,
            )
            for address in customer.addresses
        ],
    )


def normalize_product(raw: Any) -> ProductRecord:
    product = _parse(RawProduct, EntityType.PRODUCTS, raw)

    return ProductRecord(
        id=product.id,
        title=product.title,
        description=product.body_html,  # HTML kept as-is
        vendor=product.vendor,
        product_type=product.product_type,
        tags=product.tags,
        status=product.status,
        created_at=product.created_at,
        updated_at=product.updated_at,
        variants=[
            Variant(
                id=variant.id,
                title=variant.title,
                price=variant.price,
                sku=variant.sku,
                inventory_quantity=variant.inventory_quantity,
            )
            for variant in product.variants
        ],
        images=[image.src for image in product.images if image.src],
    )


def normalize_inventory_level(raw: Any) -> InventoryRecord:
    level = _parse(RawInventoryLevel, EntityType.INVENTORY, raw)

    return InventoryRecord(
        inventory_item_id=level.inventory_item_id,
        product_id=level.product_id,
        variant_id=level.variant_id,
        location_id=level.location_id,
        available=level.available,
        updated_at=level.updated_at,
    )


NORMALIZERS: Dict[EntityType, Callable[[Any], Any]] = {
    EntityType.ORDERS: normalize_order,
    EntityType.CUSTOMERS: normalize_customer,
    EntityType.PRODUCTS: normalize_product,
    EntityType.INVENTORY: normalize_inventory_level,
}


def normalize(entity: EntityType, raw: Any):
    """Normalize a single upstream record of the given entity type"""
    return NORMALIZERS[entity](raw)


def normalize_collection(
    entity: EntityType,
    raws: Any
) -> Tuple[List[Any], List[Tuple[Optional[Any], str]]]:
    """
    Normalize an upstream collection.

    Args:
        entity: Entity type of every element
        raws: The list found under the collection key

    Returns:
        (records, failures) where failures holds (key or None, reason) for
        each element that could not be mapped

    Raises:
        NormalizationError: raws is not a list
    """
    if not isinstance(raws, list):
        raise NormalizationError(entity.value, f"expected a list, got {type(raws).__name__}")

    key_field = ENTITY_SPECS[entity].key_field
    records = []
    failures = []

    for raw in raws:
        try:
            records.append(normalize(entity, raw))
        except NormalizationError as e:
            key = raw.get(key_field) if isinstance(raw, dict) else None
            failures.append((key, str(e)))

    return records, failures
