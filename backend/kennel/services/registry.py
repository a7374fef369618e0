"""
Kennel API - Collection Registry
==================================

What:  Builds and owns one store + CollectionService per resource for a
       single application instance.
How:   create_app() constructs a registry and keeps it on app.state; route
       dependencies look services up by resource name. Nothing lives at
       module level, so every app instance (and every test) starts from
       fresh, isolated collections.
When:  Built when the app is created; closed in the lifespan shutdown.
"""

import logging
from typing import Dict, Iterable, Iterator, Optional

from kennel.config import Settings
from kennel.database import Database
from kennel.resources import RESOURCES, ResourceDefinition
from kennel.services.collection_service import CollectionService
from kennel.stores import CollectionStore, JsonFileStore, MemoryStore, SqlStore

logger = logging.getLogger(__name__)


class CollectionRegistry:
    """
    Resource name → CollectionService, all backed by the configured store type.

    Example:
        registry = CollectionRegistry(Settings(store_backend="memory"))
        dogs = registry.get("dogs")
        await dogs.create_record({"name": "Rex", "weight": 40})
    """

    def __init__(
        self,
        settings: Settings,
        resources: Iterable[ResourceDefinition] = RESOURCES,
    ):
        self.backend = settings.store_backend
        self.database: Optional[Database] = (
            Database(settings) if self.backend == "database" else None
        )
        self._services: Dict[str, CollectionService] = {}
        for resource in resources:
            store = self._build_store(resource, settings)
            self._services[resource.name] = CollectionService(resource, store)
        logger.info(
            "Registry ready: backend=%s, collections=%s",
            self.backend,
            ", ".join(self._services),
        )

    def _build_store(self, resource: ResourceDefinition, settings: Settings) -> CollectionStore:
        if self.backend == "file":
            return JsonFileStore(resource, settings.data_dir, id_length=settings.id_length)
        if self.backend == "database":
            return SqlStore(resource, self.database, id_length=settings.id_length)
        return MemoryStore(resource, id_length=settings.id_length)

    def get(self, name: str) -> CollectionService:
        return self._services[name]

    def __iter__(self) -> Iterator[CollectionService]:
        return iter(self._services.values())

    def __contains__(self, name: object) -> bool:
        return name in self._services

    async def close(self) -> None:
        """Close every store, then dispose the shared database engine."""
        for service in self._services.values():
            await service.store.close()
        if self.database is not None:
            await self.database.dispose()
            logger.info("Database engine disposed")
