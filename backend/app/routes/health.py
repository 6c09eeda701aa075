"""
Survey Backend — Health Check Route
====================================

What:  Health check endpoint for monitoring and platform probes.
Why:   Hosting platforms poll it to decide whether the instance is alive;
       operators read it to see whether the store is reachable.
How:   Pings the store through the gateway (SELECT 1) and reports the result.

Status levels:
    - healthy:   store reachable
    - unhealthy: store unreachable (still HTTP 200 so the payload is readable)
"""

import logging
import time
from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from app import __version__
from app.config import Settings, get_settings
from app.database import PersistenceGateway, get_gateway
from app.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Health"])

# Track when the service started for uptime reporting
_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    description="Returns service status, server time, deployment mode and store connectivity.",
)
async def health_check(
    gateway: PersistenceGateway = Depends(get_gateway),
    settings: Settings = Depends(get_settings),
) -> HealthResponse:
    """Check the service and its store. No side effects."""
    connected = await gateway.ping()

    return HealthResponse(
        status="healthy" if connected else "unhealthy",
        timestamp=datetime.now(timezone.utc),
        environment=settings.environment,
        database="connected" if connected else "disconnected",
        version=__version__,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
