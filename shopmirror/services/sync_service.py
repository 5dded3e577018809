"""
Sync service

Composes the two entry paths onto the same normalized representation:
- pull:   Shopify REST collection -> Normalizer -> bulk insert
- ingest: webhook body            -> Normalizer -> insert (upsert for inventory)
"""
import asyncio
from dataclasses import dataclass, field
from typing import Any, Dict, List

from shopmirror.connectors.shopify import ShopifyClient
from shopmirror.schemas.shopify import ENTITY_SPECS, EntityType
from shopmirror.services.normalizer import normalize, normalize_collection
from shopmirror.services.store_gateway import RejectedRecord, StoreGateway
from shopmirror.utils.logger import log


@dataclass
class PullResult:
    entity: EntityType
    fetched: int = 0
    inserted: int = 0
    rejected: List[RejectedRecord] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fetched": self.fetched,
            "inserted": self.inserted,
            "rejected": [r.to_dict() for r in self.rejected],
        }


class SyncService:
    """Stateless composition of client, normalizer and gateway"""

    def __init__(self, client: ShopifyClient, gateway: StoreGateway):
        self.client = client
        self.gateway = gateway

    async def pull(self, entity: EntityType) -> PullResult:
        """
        Fetch one page of an entity from Shopify and store it

        Records that fail to normalize and records whose key is already
        stored are reported in `rejected`; neither stops the rest.
        """
        raws = await self.client.fetch(entity)
        records, failures = normalize_collection(entity, raws)

        result = PullResult(entity=entity, fetched=len(raws))
        result.rejected.extend(RejectedRecord(key, reason) for key, reason in failures)

        stored = await asyncio.to_thread(self.gateway.bulk_insert, entity, records)
        result.inserted = stored.inserted
        result.rejected.extend(stored.rejected)

        for rejected in result.rejected:
            log.warning(f"Skipped {entity.value} {rejected.key}: {rejected.reason}")
        log.info(
            f"Pulled {entity.value}: {result.fetched} fetched, "
            f"{result.inserted} inserted, {len(result.rejected)} rejected"
        )
        return result

    async def ingest(self, entity: EntityType, payload: Any):
        """
        Store one webhook payload

        Orders, customers and products are plain creates and fail on an
        existing key. Inventory levels are upserted by inventory_item_id.

        Returns:
            The canonical record that was stored
        """
        record = normalize(entity, payload)

        if entity == EntityType.INVENTORY:
            await asyncio.to_thread(self.gateway.upsert_inventory, record)
        else:
            await asyncio.to_thread(self.gateway.insert_one, entity, record)

        key = getattr(record, ENTITY_SPECS[entity].key_field)
        log.info(f"Stored {entity.value} webhook {key}")
        return record
