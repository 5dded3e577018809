"""
Store Gateway

Writes canonical records to the local store. Two write modes:
- bulk_insert (poll path): unordered, one record's key collision never
  blocks its siblings; the inserted/rejected split is returned.
- insert_one / upsert_inventory (webhook path): plain create for orders,
  customers and products; replace-or-insert for inventory levels.

Every write is committed before the call returns.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import func
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError

from shopmirror.errors import DuplicateRecordError
from shopmirror.models.base import Database
from shopmirror.models.shopify import (
    ShopifyCustomer,
    ShopifyInventoryLevel,
    ShopifyOrder,
    ShopifyProduct,
)
from shopmirror.schemas.shopify import (
    ENTITY_SPECS,
    CustomerRecord,
    EntityType,
    InventoryRecord,
    OrderRecord,
    ProductRecord,
)
from shopmirror.utils.logger import log

MODELS = {
    EntityType.ORDERS: ShopifyOrder,
    EntityType.CUSTOMERS: ShopifyCustomer,
    EntityType.PRODUCTS: ShopifyProduct,
    EntityType.INVENTORY: ShopifyInventoryLevel,
}

# Dialects with INSERT ... ON CONFLICT DO UPDATE
_NATIVE_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}

RECORD_TYPES = {
    EntityType.ORDERS: OrderRecord,
    EntityType.CUSTOMERS: CustomerRecord,
    EntityType.PRODUCTS: ProductRecord,
    EntityType.INVENTORY: InventoryRecord,
}


@dataclass
class RejectedRecord:
    key: Any
    reason: str

    def to_dict(self) -> Dict[str, Any]:
        return {"key": self.key, "reason": self.reason}


@dataclass
class BulkInsertResult:
    inserted: int = 0
    rejected: List[RejectedRecord] = field(default_factory=list)


class StoreGateway:
    """Persists normalized records, one table per entity type"""

    def __init__(self, database: Database):
        self.database = database

    def bulk_insert(self, entity: EntityType, records: Sequence[Any]) -> BulkInsertResult:
        """
        Insert a batch of records, skipping keys that already exist

        Keys already stored, and keys repeated inside the batch, are reported
        in `rejected`. The rest are inserted in one transaction; if that
        transaction hits a constraint (another trigger inserted the same key
        in the meantime) each record is retried in its own transaction so
        only the colliding ones are lost.

        Args:
            entity: Entity type of every record
            records: Canonical records

        Returns:
            BulkInsertResult with inserted count and rejected keys
        """
        result = BulkInsertResult()
        if not records:
            return result

        spec = ENTITY_SPECS[entity]
        model = MODELS[entity]
        key_column = getattr(model, spec.key_field)

        session = self.database.session()
        try:
            keys = [getattr(record, spec.key_field) for record in records]
            existing = {
                row[0] for row in session.query(key_column).filter(key_column.in_(set(keys))).all()
            }

            pending = []
            seen = set()
            for record, key in zip(records, keys):
                if key in existing:
                    result.rejected.append(RejectedRecord(key, f"{spec.label} {key} already exists"))
                elif key in seen:
                    result.rejected.append(RejectedRecord(key, f"{spec.label} {key} repeated in batch"))
                else:
                    seen.add(key)
                    pending.append(record)

            if not pending:
                return result

            session.add_all([self._to_row(entity, record) for record in pending])
            try:
                session.commit()
                result.inserted = len(pending)
            except IntegrityError as e:
                session.rollback()
                log.warning(f"Batch insert of {len(pending)} {entity.value} hit a constraint, inserting one by one: {e.orig}")
                self._insert_each(session, entity, pending, result)
        finally:
            session.close()

        return result

    def _insert_each(self, session, entity: EntityType, records: Sequence[Any], result: BulkInsertResult):
        key_field = ENTITY_SPECS[entity].key_field
        for record in records:
            session.add(self._to_row(entity, record))
            try:
                session.commit()
                result.inserted += 1
            except IntegrityError as e:
                session.rollback()
                result.rejected.append(RejectedRecord(getattr(record, key_field), str(e.orig)))

    def insert_one(self, entity: EntityType, record: Any):
        """
        Plain create

        Raises:
            DuplicateRecordError: the key is already stored
        """
        spec = ENTITY_SPECS[entity]
        key = getattr(record, spec.key_field)

        session = self.database.session()
        try:
            if session.get(MODELS[entity], key) is not None:
                raise DuplicateRecordError(spec.label, key)

            session.add(self._to_row(entity, record))
            try:
                session.commit()
            except IntegrityError as e:
                session.rollback()
                raise DuplicateRecordError(spec.label, key) from e
        finally:
            session.close()

    def upsert_inventory(self, record: InventoryRecord):
        """
        Replace every field of the stored level for this inventory_item_id, or insert it

        Runs as a single INSERT ... ON CONFLICT DO UPDATE on SQLite and
        PostgreSQL, so concurrent first deliveries of the same item both
        succeed. Other dialects merge, retrying once if another writer
        inserted the key between the merge's read and its insert.
        """
        values = self._row_values(EntityType.INVENTORY, record)

        session = self.database.session()
        insert = _NATIVE_INSERTS.get(self.database.engine.dialect.name)
        try:
            if insert is not None:
                stmt = insert(ShopifyInventoryLevel).values(**values)
                stmt = stmt.on_conflict_do_update(
                    index_elements=[ShopifyInventoryLevel.inventory_item_id],
                    set_={name: stmt.excluded[name] for name in values if name != "inventory_item_id"}
                )
                session.execute(stmt)
                session.commit()
                return

            try:
                session.merge(ShopifyInventoryLevel(**values))
                session.commit()
            except IntegrityError:
                session.rollback()
                log.warning(f"Inventory level {record.inventory_item_id} inserted concurrently, retrying as update")
                session.merge(ShopifyInventoryLevel(**values))
                session.commit()
        finally:
            session.close()

    def get(self, entity: EntityType, key: Any) -> Optional[Any]:
        """Read a stored record back as its canonical type"""
        session = self.database.session()
        try:
            row = session.get(MODELS[entity], key)
            if row is None:
                return None
            return self._to_record(entity, row)
        finally:
            session.close()

    def count(self, entity: EntityType) -> int:
        session = self.database.session()
        try:
            return session.query(func.count()).select_from(MODELS[entity]).scalar()
        finally:
            session.close()

    def _row_values(self, entity: EntityType, record: Any) -> Dict[str, Any]:
        values = record.model_dump(mode="python")
        values["synced_at"] = datetime.utcnow()
        return values

    def _to_row(self, entity: EntityType, record: Any):
        return MODELS[entity](**self._row_values(entity, record))

    def _to_record(self, entity: EntityType, row: Any):
        record_type = RECORD_TYPES[entity]
        return record_type.model_validate(
            {name: getattr(row, name) for name in record_type.model_fields}
        )
