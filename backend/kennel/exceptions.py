"""
Kennel API - Custom Exception Hierarchy
=========================================

What:  Application-specific exceptions for the error scenarios of the
       collection contract.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with correct HTTP status codes.
Who:   Raised by the validator, the stores and CollectionService.

Exception Hierarchy:
    KennelError (base)
    ├── ValidationError   → 400 Bad Request (client can fix)
    ├── NotFoundError     → 404 Not Found
    ├── ConflictError     → 409 Conflict (caller-supplied id already taken)
    └── StoreError        → 500 Internal Server Error

Note that stores never raise NotFoundError. A missing id is reported by
returning None (the absent signal); CollectionService turns that into
NotFoundError at the request boundary.
"""

from typing import Any, Dict, Optional


class KennelError(Exception):
    """
    Base exception for all Kennel application errors.

    Attributes:
        message:  Human-readable error description, returned in API responses
        context:  Additional debug info, logged alongside the message
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(KennelError):
    """
    Raised when a create or replace payload fails the required-field check.

    HTTP:    400 Bad Request

    Example response:
        {
            "error": "validation_error",
            "message": "must include name and weight",
            "details": {"missing": ["weight"], "required": ["name", "weight"]}
        }
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class NotFoundError(KennelError):
    """
    Raised when an operation targets an id that is not in the collection.

    HTTP:    404 Not Found
    """

    def __init__(
        self,
        resource: str = "record",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)
        self.resource = resource
        self.resource_id = resource_id


class ConflictError(KennelError):
    """
    Raised when a create supplies an id that already exists.

    HTTP:    409 Conflict
    """

    def __init__(
        self,
        resource: str = "record",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"{resource} with ID '{resource_id}' already exists"
        ctx = context or {}
        ctx["resource"] = resource
        ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)
        self.resource_id = resource_id


class StoreError(KennelError):
    """
    Raised when the underlying storage operation fails.

    When:    Disk I/O failure, corrupt collection file, lost database
             connection, constraint violation.
    HTTP:    500 Internal Server Error

    The message carries the raw failure text so the caller sees what went
    wrong; the failure is isolated to the single request.
    """

    def __init__(
        self,
        message: str = "A storage error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
