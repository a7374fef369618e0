"""
Kennel API - Collection Stores
================================

Store Inventory:
    - CollectionStore (abstract): the resource collection contract
    - MemoryStore: process-local, insertion-ordered container
    - JsonFileStore: one JSON array per collection on disk (aiofiles)
    - SqlStore: rows of the `records` table via async SQLAlchemy

The active backend is chosen by Settings.store_backend and built by
kennel.services.registry.
"""

from kennel.stores.base import CollectionStore, Record, generate_record_id
from kennel.stores.json_file import JsonFileStore
from kennel.stores.memory import MemoryStore
from kennel.stores.sql import SqlStore

__all__ = [
    "CollectionStore",
    "JsonFileStore",
    "MemoryStore",
    "Record",
    "SqlStore",
    "generate_record_id",
]
