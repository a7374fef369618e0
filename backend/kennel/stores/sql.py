"""
Kennel API - Database Collection Store
========================================

What:  Stores records as rows of the `records` table through async SQLAlchemy.
How:   Each operation runs in its own transaction from Database.transaction().
       Rows are filtered by collection name; find_all orders by the
       autoincrement pk, which is insertion order.

Concurrency:
    Database I/O suspends the handler mid-operation, so read-modify-write
    sequences (create's collision check, replace, merge, delete) hold a
    per-collection asyncio.Lock to prevent lost updates between requests
    served by this process.

Error Handling:
    Any SQLAlchemyError is logged and re-raised as StoreError.
"""

import asyncio
import logging
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from kennel.database import Database
from kennel.exceptions import StoreError
from kennel.models.record import RecordRow
from kennel.resources import ResourceDefinition
from kennel.stores.base import CollectionStore, Record

logger = logging.getLogger(__name__)


class SqlStore(CollectionStore):
    """Database-backed store for one collection."""

    backend = "database"

    def __init__(
        self,
        resource: ResourceDefinition,
        database: Database,
        id_length: int = 8,
    ):
        super().__init__(resource, id_length)
        self.database = database
        self._lock = asyncio.Lock()

    def _store_error(self, operation: str, exc: Exception) -> StoreError:
        logger.error(
            "Database error during %s on '%s': %s",
            operation,
            self.collection,
            str(exc),
            exc_info=True,
        )
        return StoreError(
            message=f"Database error during {operation}: {exc}",
            context={"collection": self.collection, "error_type": type(exc).__name__},
        )

    def _row_query(self, record_id: str):
        return select(RecordRow).where(
            RecordRow.collection == self.collection,
            RecordRow.record_id == record_id,
        )

    # ── Contract ──────────────────────────────────────────────────────────

    async def find_all(self) -> List[Record]:
        try:
            async with self.database.transaction() as session:
                result = await session.execute(
                    select(RecordRow.data)
                    .where(RecordRow.collection == self.collection)
                    .order_by(RecordRow.pk)
                )
                return [dict(data) for data in result.scalars().all()]
        except SQLAlchemyError as e:
            raise self._store_error("find_all", e) from e

    async def find_by_id(self, record_id: str) -> Optional[Record]:
        try:
            async with self.database.transaction() as session:
                result = await session.execute(self._row_query(record_id))
                row = result.scalar_one_or_none()
                return dict(row.data) if row is not None else None
        except SQLAlchemyError as e:
            raise self._store_error("find_by_id", e) from e

    async def create(self, data: Record) -> Record:
        async with self._lock:
            try:
                async with self.database.transaction() as session:
                    result = await session.execute(
                        select(RecordRow.record_id).where(RecordRow.collection == self.collection)
                    )
                    taken = set(result.scalars().all())
                    record = self._new_record(data, taken)
                    session.add(
                        RecordRow(
                            collection=self.collection,
                            record_id=record["id"],
                            data=record,
                        )
                    )
                return record
            except SQLAlchemyError as e:
                raise self._store_error("create", e) from e

    async def replace(self, record_id: str, data: Record) -> Optional[Record]:
        async with self._lock:
            try:
                async with self.database.transaction() as session:
                    result = await session.execute(self._row_query(record_id))
                    row = result.scalar_one_or_none()
                    if row is None:
                        return None
                    # Assign a new dict so the JSON column is flagged dirty
                    row.data = self._replaced(record_id, data)
                    return dict(row.data)
            except SQLAlchemyError as e:
                raise self._store_error("replace", e) from e

    async def merge(self, record_id: str, patch: Record) -> Optional[Record]:
        async with self._lock:
            try:
                async with self.database.transaction() as session:
                    result = await session.execute(self._row_query(record_id))
                    row = result.scalar_one_or_none()
                    if row is None:
                        return None
                    row.data = self._merged(dict(row.data), patch)
                    return dict(row.data)
            except SQLAlchemyError as e:
                raise self._store_error("merge", e) from e

    async def delete(self, record_id: str) -> Optional[Record]:
        async with self._lock:
            try:
                async with self.database.transaction() as session:
                    result = await session.execute(self._row_query(record_id))
                    row = result.scalar_one_or_none()
                    if row is None:
                        return None
                    removed = dict(row.data)
                    await session.delete(row)
                    return removed
            except SQLAlchemyError as e:
                raise self._store_error("delete", e) from e

    async def count(self) -> int:
        try:
            async with self.database.transaction() as session:
                result = await session.execute(
                    select(func.count(RecordRow.pk)).where(RecordRow.collection == self.collection)
                )
                return result.scalar() or 0
        except SQLAlchemyError as e:
            raise self._store_error("count", e) from e
