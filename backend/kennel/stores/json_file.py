"""
Kennel API - JSON File Collection Store
=========================================

What:  Persists each collection as a JSON array in <data_dir>/<collection>.json.
How:   Reads and writes go through aiofiles so disk I/O never blocks the
       event loop. Writes land in a temporary file that is then moved over
       the original with os.replace, so readers see either the old or the
       new document, never a partial one.

Concurrency:
    Every read-modify-write (create, replace, merge, delete) holds a
    per-collection asyncio.Lock. Without it, two requests could both load
    the file, suspend on I/O, and the second save would drop the first
    request's change.

Directory Structure:
    data/
    ├── dogs.json
    └── hubs.json

A missing file is an empty collection; the file is created on the first write.
"""

import asyncio
import json
import logging
import os
from pathlib import Path
from typing import List, Optional, Union

import aiofiles

from kennel.exceptions import StoreError
from kennel.resources import ResourceDefinition
from kennel.stores.base import CollectionStore, Record

logger = logging.getLogger(__name__)


class JsonFileStore(CollectionStore):
    """File-backed store: one JSON document per collection."""

    backend = "file"

    def __init__(
        self,
        resource: ResourceDefinition,
        data_dir: Union[str, Path],
        id_length: int = 8,
    ):
        super().__init__(resource, id_length)
        self.path = Path(data_dir).resolve() / f"{resource.name}.json"
        self._lock = asyncio.Lock()
        logger.info("JsonFileStore for '%s' at %s", resource.name, self.path)

    # ── Disk I/O ──────────────────────────────────────────────────────────

    async def _load(self) -> List[Record]:
        """
        Read the collection file.

        Raises:
            StoreError: The file cannot be read, is not valid JSON, or does
                        not hold an array of objects with an id.
        """
        try:
            async with aiofiles.open(self.path, "r", encoding="utf-8") as f:
                raw = await f.read()
        except FileNotFoundError:
            return []
        except OSError as e:
            logger.error("Failed to read %s: %s", self.path, str(e))
            raise StoreError(
                message=f"Could not read {self.collection} data: {e}",
                context={"path": str(self.path)},
            ) from e

        if not raw.strip():
            return []

        try:
            records = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.error("Corrupt collection file %s: %s", self.path, str(e))
            raise StoreError(
                message=f"Corrupt {self.collection} data file: {e}",
                context={"path": str(self.path)},
            ) from e

        if not isinstance(records, list) or not all(
            isinstance(record, dict) and "id" in record for record in records
        ):
            raise StoreError(
                message=f"Corrupt {self.collection} data file: expected an array of records",
                context={"path": str(self.path)},
            )
        return records

    async def _save(self, records: List[Record]) -> None:
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            payload = json.dumps(records, indent=2)
        except (TypeError, ValueError) as e:
            raise StoreError(message=f"Record is not JSON serializable: {e}") from e

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
                await f.write(payload)
            os.replace(tmp_path, self.path)
        except OSError as e:
            logger.error("Failed to write %s: %s", self.path, str(e))
            raise StoreError(
                message=f"Could not write {self.collection} data: {e}",
                context={"path": str(self.path)},
            ) from e

    @staticmethod
    def _index_of(records: List[Record], record_id: str) -> int:
        for index, record in enumerate(records):
            if record.get("id") == record_id:
                return index
        return -1

    # ── Contract ──────────────────────────────────────────────────────────

    async def find_all(self) -> List[Record]:
        return await self._load()

    async def find_by_id(self, record_id: str) -> Optional[Record]:
        records = await self._load()
        index = self._index_of(records, record_id)
        return records[index] if index != -1 else None

    async def create(self, data: Record) -> Record:
        async with self._lock:
            records = await self._load()
            taken = {str(record.get("id")) for record in records}
            record = self._new_record(data, taken)
            records.append(record)
            await self._save(records)
        return record

    async def replace(self, record_id: str, data: Record) -> Optional[Record]:
        async with self._lock:
            records = await self._load()
            index = self._index_of(records, record_id)
            if index == -1:
                return None
            records[index] = self._replaced(record_id, data)
            await self._save(records)
            return records[index]

    async def merge(self, record_id: str, patch: Record) -> Optional[Record]:
        async with self._lock:
            records = await self._load()
            index = self._index_of(records, record_id)
            if index == -1:
                return None
            records[index] = self._merged(records[index], patch)
            await self._save(records)
            return records[index]

    async def delete(self, record_id: str) -> Optional[Record]:
        async with self._lock:
            records = await self._load()
            index = self._index_of(records, record_id)
            if index == -1:
                return None
            removed = records.pop(index)
            await self._save(records)
            return removed

    async def count(self) -> int:
        return len(await self._load())
