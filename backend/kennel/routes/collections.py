"""
Kennel API - Collection Route Handlers
========================================

What:  The six CRUD endpoints, generated once per resource definition.
How:   build_collection_router(resource) returns an APIRouter mounted at
       resource.prefix. Handlers stay thin: extract id/body, call the
       resource's CollectionService, return the record. Errors raised by the
       service are turned into responses by the global exception handlers.

Route Inventory (per resource, e.g. dogs at /api/dogs; hubs use /hubs):
    GET    /api/dogs         list every record
    GET    /api/dogs/{id}    one record, 404 if unknown
    POST   /api/dogs         create, 201 with the stored record
    PUT    /api/dogs/{id}    full replace, validated
    PATCH  /api/dogs/{id}    partial merge, no required-field check
    DELETE /api/dogs/{id}    remove, 200 with the deleted record

Bodies are typed as Any on purpose so a non-object body reaches the
validator and comes back as a 400 instead of FastAPI's 422.
"""

import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Body, Depends, Request

from kennel.resources import ResourceDefinition
from kennel.schemas.record import ErrorResponse
from kennel.services.collection_service import CollectionService

logger = logging.getLogger(__name__)

_NOT_FOUND = {404: {"description": "Unknown id", "model": ErrorResponse}}
_BAD_REQUEST = {
    400: {"description": "Invalid body or missing required fields", "model": ErrorResponse}
}
_BAD_BODY = {
    400: {"description": "Body is not an object or holds NaN/Infinity", "model": ErrorResponse}
}
_STORE_ERROR = {500: {"description": "Store error", "model": ErrorResponse}}


def build_collection_router(resource: ResourceDefinition) -> APIRouter:
    """Create the CRUD router for one resource collection."""

    router = APIRouter(prefix=resource.prefix, tags=[resource.name.title()])
    required = " and ".join(resource.required_fields) or "no fields"

    def get_service(request: Request) -> CollectionService:
        return request.app.state.registry.get(resource.name)

    @router.get(
        "",
        response_model=List[Dict[str, Any]],
        responses={**_STORE_ERROR},
        summary=f"List all {resource.name}",
    )
    async def list_records(
        service: CollectionService = Depends(get_service),
    ) -> List[Dict[str, Any]]:
        return await service.list_records()

    @router.get(
        "/{record_id}",
        response_model=Dict[str, Any],
        responses={**_NOT_FOUND, **_STORE_ERROR},
        summary=f"Get one {resource.label} by id",
    )
    async def get_record(
        record_id: str,
        service: CollectionService = Depends(get_service),
    ) -> Dict[str, Any]:
        return await service.get_record(record_id)

    @router.post(
        "",
        status_code=201,
        response_model=Dict[str, Any],
        responses={
            **_BAD_REQUEST,
            409: {"description": "Supplied id already exists", "model": ErrorResponse},
            **_STORE_ERROR,
        },
        summary=f"Create a {resource.label}",
        description=f"Requires {required}. An id is generated when the body has none.",
    )
    async def create_record(
        payload: Any = Body(default=None),
        service: CollectionService = Depends(get_service),
    ) -> Dict[str, Any]:
        return await service.create_record(payload)

    @router.put(
        "/{record_id}",
        response_model=Dict[str, Any],
        responses={**_BAD_REQUEST, **_NOT_FOUND, **_STORE_ERROR},
        summary=f"Replace a {resource.label}",
        description=f"Requires {required}. Fields missing from the body are dropped.",
    )
    async def replace_record(
        record_id: str,
        payload: Any = Body(default=None),
        service: CollectionService = Depends(get_service),
    ) -> Dict[str, Any]:
        return await service.replace_record(record_id, payload)

    @router.patch(
        "/{record_id}",
        response_model=Dict[str, Any],
        responses={**_BAD_BODY, **_NOT_FOUND, **_STORE_ERROR},
        summary=f"Merge fields into a {resource.label}",
        description="Only the supplied fields change; everything else is kept.",
    )
    async def merge_record(
        record_id: str,
        payload: Any = Body(default=None),
        service: CollectionService = Depends(get_service),
    ) -> Dict[str, Any]:
        return await service.merge_record(record_id, payload)

    @router.delete(
        "/{record_id}",
        response_model=Dict[str, Any],
        responses={**_NOT_FOUND, **_STORE_ERROR},
        summary=f"Delete a {resource.label}",
    )
    async def delete_record(
        record_id: str,
        service: CollectionService = Depends(get_service),
    ) -> Dict[str, Any]:
        return await service.delete_record(record_id)

    return router
