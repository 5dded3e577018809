"""
Data synchronization endpoints

Each GET pulls the first page of one Shopify collection, normalizes it and
bulk-inserts it. Records already stored are skipped and listed in the
response under "rejected".
"""
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from shopmirror.api.deps import get_sync_service
from shopmirror.schemas.shopify import EntityType
from shopmirror.services.sync_service import SyncService
from shopmirror.utils.logger import log

router = APIRouter(tags=["sync"])

_NAMES = {
    EntityType.ORDERS: "Orders",
    EntityType.CUSTOMERS: "Customers",
    EntityType.PRODUCTS: "Products",
    EntityType.INVENTORY: "Inventory",
}


async def _pull(entity: EntityType, service: SyncService) -> JSONResponse:
    try:
        result = await service.pull(entity)
    except Exception as e:
        log.error(f"Error fetching {entity.value}: {str(e)}")
        return JSONResponse(status_code=500, content={"error": str(e)})

    return JSONResponse(
        status_code=201,
        content={"message": f"{_NAMES[entity]} fetched and stored!", **result.to_dict()}
    )


@router.get("/fetch-orders")
async def fetch_orders(service: SyncService = Depends(get_sync_service)):
    """Fetch and store Shopify orders"""
    return await _pull(EntityType.ORDERS, service)


@router.get("/fetch-customers")
async def fetch_customers(service: SyncService = Depends(get_sync_service)):
    """Fetch and store Shopify customers"""
    return await _pull(EntityType.CUSTOMERS, service)


@router.get("/fetch-products")
async def fetch_products(service: SyncService = Depends(get_sync_service)):
    """Fetch and store Shopify products"""
    return await _pull(EntityType.PRODUCTS, service)


@router.get("/fetch-inventory")
async def fetch_inventory(service: SyncService = Depends(get_sync_service)):
    """
    Fetch and store Shopify inventory levels

    Set SHOPIFY_INVENTORY_LOCATION_IDS if the store requires a location filter.
    """
    return await _pull(EntityType.INVENTORY, service)
