"""
Kennel API - Health Check Route
=================================

What:  Health check endpoint for monitoring and container liveness checks.
How:   Counts the records of every collection (which exercises the store end
       to end) and, for the database backend, runs SELECT 1.

Status levels:
    - healthy:   every store answered (HTTP 200)
    - unhealthy: at least one store failed (HTTP 503)
"""

import logging
import time

from fastapi import APIRouter, Request, Response

from kennel import __version__
from kennel.schemas.record import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "A store is unreachable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check(request: Request, response: Response) -> HealthResponse:
    registry = request.app.state.registry
    overall = "healthy"
    counts = {}

    if registry.database is not None:
        try:
            await registry.database.ping()
        except Exception as e:
            overall = "unhealthy"
            logger.warning("Health check: database unreachable: %s", str(e))

    for service in registry:
        try:
            counts[service.resource.name] = await service.store.count()
        except Exception as e:
            counts[service.resource.name] = None
            overall = "unhealthy"
            logger.warning(
                "Health check: store for '%s' failed: %s", service.resource.name, str(e)
            )

    if overall != "healthy":
        response.status_code = 503

    return HealthResponse(
        status=overall,
        version=__version__,
        backend=registry.backend,
        collections=counts,
        uptime_seconds=round(time.time() - request.app.state.started_at, 2),
    )
