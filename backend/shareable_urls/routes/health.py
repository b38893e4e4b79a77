"""
Shareable URLs Backend - Health Check Route
============================================

What:  Health check endpoint for monitoring and load balancer probes.
How:   Pings the record store and reports overall status with uptime.
Who:   Called by container health checks, load balancers and monitoring.

Status levels:
    - healthy:   record store reachable (HTTP 200)
    - unhealthy: record store unreachable (HTTP 503)

/health shadows the record path of the same name, which can never hold a
record because creation requires a UUID key.
"""

import logging
import time

from fastapi import APIRouter, Depends, Response

from shareable_urls import __version__
from shareable_urls.schemas.shareable_url import HealthResponse
from shareable_urls.store import RecordStore, get_record_store

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    description="Returns the health status of the service and its record store.",
)
async def health_check(
    response: Response,
    store: RecordStore = Depends(get_record_store),
) -> HealthResponse:
    store_status = "connected"
    overall = "healthy"

    try:
        reachable = await store.ping()
    except Exception as e:
        logger.warning("Health check: record store ping raised: %s", str(e))
        reachable = False

    if not reachable:
        store_status = "disconnected"
        overall = "unhealthy"
        response.status_code = 503

    return HealthResponse(
        status=overall,
        version=__version__,
        store=f"{store.backend_name}:{store_status}",
        uptime_seconds=round(time.time() - _start_time, 2),
    )
