"""
In-process collection store.

Records live in a dict keyed by id; dicts preserve insertion order, and
reassigning an existing key keeps its position, so replace and merge do not
reorder the listing. Every operation runs to completion without awaiting,
which makes each one atomic under the single-threaded event loop.
"""

import copy
import logging
from typing import Dict, List, Optional

from kennel.resources import ResourceDefinition
from kennel.stores.base import CollectionStore, Record

logger = logging.getLogger(__name__)


class MemoryStore(CollectionStore):
    """Process-local store. Contents are lost when the application stops."""

    backend = "memory"

    def __init__(self, resource: ResourceDefinition, id_length: int = 8):
        super().__init__(resource, id_length)
        self._records: Dict[str, Record] = {}

    async def find_all(self) -> List[Record]:
        return [copy.deepcopy(record) for record in self._records.values()]

    async def find_by_id(self, record_id: str) -> Optional[Record]:
        record = self._records.get(record_id)
        return copy.deepcopy(record) if record is not None else None

    async def create(self, data: Record) -> Record:
        record = self._new_record(data, self._records)
        self._records[record["id"]] = record
        logger.debug("[%s] stored %s in memory", self.collection, record["id"])
        return copy.deepcopy(record)

    async def replace(self, record_id: str, data: Record) -> Optional[Record]:
        if record_id not in self._records:
            return None
        self._records[record_id] = self._replaced(record_id, data)
        return copy.deepcopy(self._records[record_id])

    async def merge(self, record_id: str, patch: Record) -> Optional[Record]:
        existing = self._records.get(record_id)
        if existing is None:
            return None
        self._records[record_id] = self._merged(existing, patch)
        return copy.deepcopy(self._records[record_id])

    async def delete(self, record_id: str) -> Optional[Record]:
        return self._records.pop(record_id, None)

    async def count(self) -> int:
        return len(self._records)
