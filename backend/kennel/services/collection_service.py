"""
Kennel API - Collection Service (Request Boundary)
====================================================

What:  One CollectionService per resource sits between the routes and the
       resource's CollectionStore.
How:   Each method validates where required, calls exactly one store
       operation, and translates the result:
         - None from the store        → NotFoundError (404)
         - KennelError from the store → propagated unchanged
         - any other exception        → StoreError (500) with the raw message

Validation asymmetry:
    create_record and replace_record check the resource's required fields.
    merge_record does not, so a PATCH may carry any subset of fields.

Operation map:
    list_records    → store.find_all
    get_record      → store.find_by_id
    create_record   → validate → store.create
    replace_record  → validate → store.replace
    merge_record    → store.merge
    delete_record   → store.delete
"""

import logging
from typing import Any, Awaitable, Callable, List, Optional, TypeVar

from kennel.exceptions import KennelError, NotFoundError, StoreError
from kennel.resources import ResourceDefinition
from kennel.services.validation import ensure_record_payload, validate_required_fields
from kennel.stores.base import CollectionStore, Record

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CollectionService:
    """
    Business logic for one resource collection.

    Holds no state of its own besides references to its resource definition
    and store; the store is owned by the registry of the application instance.
    """

    def __init__(self, resource: ResourceDefinition, store: CollectionStore):
        self.resource = resource
        self.store = store

    async def _call(self, operation: str, func: Callable[..., Awaitable[T]], *args: Any) -> T:
        """Run a store operation, wrapping unexpected failures in StoreError."""
        try:
            return await func(*args)
        except KennelError:
            raise
        except Exception as e:
            logger.error(
                "Unexpected %s error in %s on '%s': %s",
                type(e).__name__,
                operation,
                self.resource.name,
                str(e),
                exc_info=True,
            )
            raise StoreError(
                message=str(e) or type(e).__name__,
                context={"operation": operation, "error_type": type(e).__name__},
            ) from e

    def _found(self, record: Optional[Record], record_id: str) -> Record:
        if record is None:
            raise NotFoundError(resource=self.resource.label, resource_id=record_id)
        return record

    async def list_records(self) -> List[Record]:
        return await self._call("find_all", self.store.find_all)

    async def get_record(self, record_id: str) -> Record:
        record = await self._call("find_by_id", self.store.find_by_id, record_id)
        return self._found(record, record_id)

    async def create_record(self, payload: Optional[Any]) -> Record:
        """
        Validate and store a new record.

        Raises:
            ValidationError: body is not an object or misses required fields
            ConflictError:   body carries an id that is already stored
            StoreError:      the store failed
        """
        data = ensure_record_payload(payload)
        validate_required_fields(data, self.resource.required_fields)
        record = await self._call("create", self.store.create, data)
        logger.info("Created %s %s", self.resource.label, record["id"])
        return record

    async def replace_record(self, record_id: str, payload: Optional[Any]) -> Record:
        data = ensure_record_payload(payload)
        validate_required_fields(data, self.resource.required_fields)
        record = await self._call("replace", self.store.replace, record_id, data)
        record = self._found(record, record_id)
        logger.info("Replaced %s %s", self.resource.label, record_id)
        return record

    async def merge_record(self, record_id: str, payload: Optional[Any]) -> Record:
        patch = ensure_record_payload(payload)
        record = await self._call("merge", self.store.merge, record_id, patch)
        record = self._found(record, record_id)
        logger.info(
            "Merged %s %s (fields: %s)",
            self.resource.label,
            record_id,
            ", ".join(sorted(patch)) or "none",
        )
        return record

    async def delete_record(self, record_id: str) -> Record:
        record = await self._call("delete", self.store.delete, record_id)
        record = self._found(record, record_id)
        logger.info("Deleted %s %s", self.resource.label, record_id)
        return record
