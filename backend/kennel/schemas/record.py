"""
Kennel API - Pydantic Response Schemas
========================================

What:  Pydantic models for the fixed-shape responses (errors, health, greeting).
Why:   Records themselves are free-form JSON objects with only `id` fixed,
       so record endpoints return plain dicts; everything else gets a schema
       for OpenAPI documentation.
"""

from typing import Dict, Optional

from pydantic import BaseModel, Field


class MessageResponse(BaseModel):
    message: str = Field(description="Human-readable message")


class ErrorResponse(BaseModel):
    """
    Standardized error response format for all API errors.

    Example:
        {
            "error": "validation_error",
            "message": "must include name and weight",
            "details": {"missing": ["weight"], "required": ["name", "weight"]},
            "request_id": "1a2b3c4d"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Service status, store backend and per-collection record counts."""
    status: str = Field(description="Overall service status: healthy or unhealthy")
    version: str = Field(description="Application version")
    backend: str = Field(description="Store backend: memory, file or database")
    collections: Dict[str, Optional[int]] = Field(
        description="Record count per collection (null when the store is unreachable)"
    )
    uptime_seconds: float = Field(description="Seconds since the app instance was created")
