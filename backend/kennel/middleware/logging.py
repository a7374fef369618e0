"""
Kennel API - Access Logging Middleware
========================================

What:  One access line per HTTP request, tagged with the collection and
       record it touched.
How:   The request path is matched against the prefixes of the registry's
       resources, so a line reads e.g.

           PATCH /api/dogs/Xq3_k9aZ 200 1.4ms [1a2b3c4d] dogs:Xq3_k9aZ

       Paths outside any collection (/, /hello, /docs) log "-" as target.
       The level follows the status class: 5xx ERROR, 4xx WARNING, else INFO.
       /health is skipped; bodies are never logged.
"""

import logging
import time
from typing import Iterable, Optional, Tuple

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from kennel.middleware.request_id import request_id_var
from kennel.resources import ResourceDefinition

logger = logging.getLogger("kennel.access")

SKIPPED_PATHS = frozenset({"/health"})


def resolve_target(
    path: str, resources: Iterable[ResourceDefinition]
) -> Tuple[Optional[str], Optional[str]]:
    """
    Map a request path to (collection name, record id).

    Examples with the default resources:
        "/hubs/abc"  → ("hubs", "abc")
        "/api/dogs"  → ("dogs", None)
        "/hello"     → (None, None)
    """
    trimmed = path.rstrip("/") or "/"
    for resource in resources:
        if trimmed == resource.prefix:
            return resource.name, None
        if trimmed.startswith(resource.prefix + "/"):
            remainder = trimmed[len(resource.prefix) + 1:]
            return resource.name, remainder or None
    return None, None


def _status_level(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in SKIPPED_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000

        registry = getattr(request.app.state, "registry", None)
        resources = [service.resource for service in registry] if registry else []
        collection, record_id = resolve_target(path, resources)
        target = f"{collection}:{record_id or '*'}" if collection else "-"
        rid = request_id_var.get("")

        logger.log(
            _status_level(response.status_code),
            "%s %s %d %.1fms [%s] %s",
            request.method,
            path,
            response.status_code,
            duration_ms,
            rid,
            target,
            extra={
                "request_id": rid,
                "collection": collection,
                "record_id": record_id,
                "status": response.status_code,
                "duration_ms": round(duration_ms, 2),
            },
        )
        return response
