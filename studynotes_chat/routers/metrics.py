"""
Prometheus metrics endpoint.
"""

import structlog
from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from ..core.telemetry import CUSTOM_REGISTRY

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.get("/metrics", tags=["monitoring"])
async def get_prometheus_metrics() -> Response:
    """Expose chat metrics in Prometheus format for scraping."""
    try:
        metrics_data = generate_latest(CUSTOM_REGISTRY)
        return Response(
            content=metrics_data,
            media_type=CONTENT_TYPE_LATEST,
            headers={"Cache-Control": "no-cache, no-store, must-revalidate"},
        )
    except Exception as e:
        logger.error("Failed to generate metrics", error=str(e))
        return Response(
            content="# Error generating metrics\n",
            media_type=CONTENT_TYPE_LATEST,
            status_code=500,
        )
