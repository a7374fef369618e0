"""
Kennel API - Abstract Collection Store Interface
==================================================

What:  Abstract base class defining the contract every storage backend honours.
How:   Concrete stores (memory, JSON file, database) inherit from
       CollectionStore and implement the primitive operations.
Who:   Called only by CollectionService; no other component mutates records.

Contract:
    - find_all() returns every record in insertion order
    - find_by_id/replace/merge/delete return None when the id is unknown.
      None is the absent signal; it is never an exception.
    - create() assigns an id when the caller omits one
    - Records handed out are copies; callers may mutate them freely
    - Backend failures are raised as StoreError
"""

import copy
import secrets
from abc import ABC, abstractmethod
from typing import Any, Container, Dict, List, Optional

from kennel.exceptions import ConflictError
from kennel.resources import ResourceDefinition

Record = Dict[str, Any]


def generate_record_id(length: int = 8) -> str:
    """Short random URL-safe token, e.g. 'Xq3_k9aZ'."""
    return secrets.token_urlsafe(length)[:length]


class CollectionStore(ABC):
    """
    Abstract interface for one resource collection.

    Implementations:
        - MemoryStore: process-local container (default)
        - JsonFileStore: one JSON document per collection on disk
        - SqlStore: rows in the `records` table via async SQLAlchemy
    """

    backend: str = "abstract"

    def __init__(self, resource: ResourceDefinition, id_length: int = 8):
        self.resource = resource
        self.id_length = id_length

    @property
    def collection(self) -> str:
        return self.resource.name

    # ── Primitive operations ──────────────────────────────────────────────

    @abstractmethod
    async def find_all(self) -> List[Record]:
        """Every stored record, in insertion order. Empty list when empty."""
        ...

    @abstractmethod
    async def find_by_id(self, record_id: str) -> Optional[Record]:
        """The record with exactly this id, or None."""
        ...

    @abstractmethod
    async def create(self, data: Record) -> Record:
        """
        Store a new record and return it with its id.

        Raises:
            ConflictError: The caller supplied an id that is already stored.
        """
        ...

    @abstractmethod
    async def replace(self, record_id: str, data: Record) -> Optional[Record]:
        """Overwrite the whole record, keeping record_id. None if unknown."""
        ...

    @abstractmethod
    async def merge(self, record_id: str, patch: Record) -> Optional[Record]:
        """Overlay patch fields onto the record. None if unknown."""
        ...

    @abstractmethod
    async def delete(self, record_id: str) -> Optional[Record]:
        """Remove the record and return it. None if unknown."""
        ...

    @abstractmethod
    async def count(self) -> int:
        """Number of stored records."""
        ...

    async def close(self) -> None:
        """Release backend resources. Most stores hold none."""
        return None

    # ── Shared record shaping ─────────────────────────────────────────────

    def _new_record(self, data: Record, taken: Container[str]) -> Record:
        """
        Build the record to insert: a copy of data with a unique id first.

        A caller-supplied id is kept (as a string) unless it is already in
        `taken`; otherwise a fresh token is drawn until it does not collide.
        """
        fields = copy.deepcopy(dict(data))
        supplied = fields.pop("id", None)
        if supplied not in (None, ""):
            record_id = str(supplied)
            if record_id in taken:
                raise ConflictError(resource=self.resource.label, resource_id=record_id)
        else:
            record_id = generate_record_id(self.id_length)
            while record_id in taken:
                record_id = generate_record_id(self.id_length)
        return {"id": record_id, **fields}

    @staticmethod
    def _replaced(record_id: str, data: Record) -> Record:
        """Full replacement; the path id wins over any id in the body."""
        fields = copy.deepcopy(dict(data))
        fields.pop("id", None)
        return {"id": record_id, **fields}

    @staticmethod
    def _merged(existing: Record, patch: Record) -> Record:
        """Patch fields overwrite same-named fields; the id never changes."""
        merged = copy.deepcopy(existing)
        for key, value in patch.items():
            if key == "id":
                continue
            merged[key] = copy.deepcopy(value)
        return merged
