"""
Health check endpoints.
"""

import time
from datetime import datetime
from typing import Any, Dict

import structlog
from fastapi import APIRouter, HTTPException, Request, status
from pydantic import BaseModel

from ..core.config import Settings
from ..core.database import Database

logger = structlog.get_logger(__name__)
router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    timestamp: datetime
    version: str
    checks: Dict[str, Any]


class DatabaseCheck(BaseModel):
    """Database health check model."""

    status: str
    latency_ms: float
    connected: bool


@router.get("/health", response_model=HealthResponse, tags=["health"])
async def health_check(request: Request) -> HealthResponse:
    """
    Health check endpoint.

    Checks:
    - Database connectivity
    - Realtime presence (number of live connections)
    """
    settings: Settings = request.app.state.settings
    checks: Dict[str, Any] = {}
    overall_status = "healthy"

    db_start = time.time()
    connected = await Database.ping()
    db_latency = (time.time() - db_start) * 1000

    checks["database"] = DatabaseCheck(
        status="healthy" if connected else "unhealthy",
        latency_ms=round(db_latency, 2),
        connected=connected,
    ).model_dump()
    if not connected:
        logger.warning("Database health check failed")
        overall_status = "degraded"

    hub = getattr(request.app.state, "realtime_hub", None)
    checks["realtime"] = {"connections": len(hub.registry) if hub else 0}

    return HealthResponse(
        status=overall_status,
        timestamp=datetime.utcnow(),
        version=settings.app_version,
        checks=checks,
    )


@router.get("/health/live", tags=["health"])
async def liveness_probe() -> Dict[str, str]:
    """Returns 200 if the service is running."""
    return {"status": "alive"}


@router.get("/health/ready", tags=["health"])
async def readiness_probe() -> Dict[str, str]:
    """Returns 200 if the database is reachable."""
    if not await Database.ping():
        logger.error("Readiness check failed")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service not ready"
        )
    return {"status": "ready"}
