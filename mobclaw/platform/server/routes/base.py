"""Base HTTP endpoints for health checks, metrics, and service info.

Used by load balancers, monitoring systems and service discovery. The health
check fails while the service drains on shutdown.
"""

from enum import Enum

import structlog
from fastapi import APIRouter, Response

from mobclaw.platform.observability.metrics import metrics as prom_metrics
from mobclaw.platform.server.health import HealthCheck, metadata

logger = structlog.get_logger(__name__)

base_router = APIRouter()
base_tags: list[Enum | str] = ["base"]


@base_router.get("/health", tags=base_tags)
async def health():
    """Return 200 with {"status": "OK"} while healthy, 404 while draining."""
    if not HealthCheck.status():
        logger.info("health_check_failed", reason="disabled")
        return Response(status_code=404)
    return {"status": "OK"}


@base_router.get("/info", tags=base_tags)
async def info():
    return metadata.info()


@base_router.get("/metrics", tags=base_tags)
async def metrics():
    body, media_type = prom_metrics()
    return Response(body, media_type=media_type)
