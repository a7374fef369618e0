"""
Kennel API - Resource Definitions
===================================

What:  The fixed set of collections the service exposes, and the
       required-field schema of each.
When:  Read once by the registry when an application instance is built.
       Required fields are part of the resource definition, not runtime
       configuration.
"""

from typing import Tuple

from pydantic import BaseModel, Field
class ResourceDefinition(BaseModel):
    """
    Describes one resource collection.

    Attributes:
        name:             Collection name, used as the storage key (file name,
                          table partition) and in logs
        label:            Singular noun used in error messages ("dog")
        prefix:           URL path the collection is mounted at, e.g. "/api/dogs"
        required_fields:  Fields that must be present and truthy on create/replace
    """

    name: str = Field(pattern=r"^[a-z][a-z0-9_]*$")
    label: str
    prefix: str = Field(pattern=r"^(/[a-z][a-z0-9_-]*)+$")
    required_fields: Tuple[str, ...] = ()

    model_config = {"frozen": True}


# Dogs are mounted under /api, hubs at the top level
DOGS = ResourceDefinition(
    name="dogs", label="dog", prefix="/api/dogs", required_fields=("name", "weight")
)
HUBS = ResourceDefinition(name="hubs", label="hub", prefix="/hubs", required_fields=("name",))

RESOURCES: Tuple[ResourceDefinition, ...] = (DOGS, HUBS)
