"""
Shopify webhook receivers

Shopify POSTs the full resource as the request body. Orders, products and
customers are created once; a second delivery of the same id fails with a
500. Inventory level updates are upserted by inventory_item_id.

Webhook HMAC signatures are not verified.
"""
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from shopmirror.api.deps import get_sync_service
from shopmirror.schemas.shopify import ENTITY_SPECS, EntityType
from shopmirror.services.sync_service import SyncService
from shopmirror.utils.logger import log

router = APIRouter(prefix="/webhook", tags=["webhooks"])


async def _ingest(entity: EntityType, request: Request, service: SyncService, message: str):
    try:
        payload = await request.json()
        record = await service.ingest(entity, payload)
    except Exception as e:
        log.error(f"Error processing {entity.value} webhook: {str(e)}")
        return JSONResponse(status_code=500, content={"error": str(e)})

    key_field = ENTITY_SPECS[entity].key_field
    return {"message": message, key_field: getattr(record, key_field)}


@router.post("/orders/create")
async def order_created(request: Request, service: SyncService = Depends(get_sync_service)):
    """orders/create topic"""
    return await _ingest(EntityType.ORDERS, request, service, "Order received and stored!")


@router.post("/products/create")
async def product_created(request: Request, service: SyncService = Depends(get_sync_service)):
    """products/create topic"""
    return await _ingest(EntityType.PRODUCTS, request, service, "Product received and stored!")


@router.post("/customers/create")
async def customer_created(request: Request, service: SyncService = Depends(get_sync_service)):
    """customers/create topic"""
    return await _ingest(EntityType.CUSTOMERS, request, service, "Customer received and stored!")


@router.post("/inventory/update")
async def inventory_updated(request: Request, service: SyncService = Depends(get_sync_service)):
    """inventory_levels/update topic (replace-or-insert)"""
    return await _ingest(EntityType.INVENTORY, request, service, "Inventory level received and stored!")
