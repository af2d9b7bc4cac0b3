"""
Prometheus metrics for the chat service.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator

import structlog
from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram

logger = structlog.get_logger(__name__)

CUSTOM_REGISTRY = CollectorRegistry()

# ============================================================================
# HTTP METRICS
# ============================================================================

REQUEST_COUNT = Counter(
    'studynotes_requests_total',
    'Total HTTP requests',
    ['method', 'endpoint', 'status_code'],
    registry=CUSTOM_REGISTRY
)

REQUEST_DURATION = Histogram(
    'studynotes_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint'],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
    registry=CUSTOM_REGISTRY
)

# ============================================================================
# CHAT METRICS
# ============================================================================

CHAT_OPERATIONS = Counter(
    'studynotes_chat_operations_total',
    'Chat message operations',
    ['operation', 'outcome'],
    registry=CUSTOM_REGISTRY
)

REALTIME_EVENTS = Counter(
    'studynotes_realtime_events_total',
    'Events broadcast over the realtime channel',
    ['event'],
    registry=CUSTOM_REGISTRY
)

ACTIVE_CONNECTIONS = Gauge(
    'studynotes_active_connections',
    'Number of authenticated realtime connections',
    registry=CUSTOM_REGISTRY
)

EXPIRED_MESSAGES_PURGED = Counter(
    'studynotes_expired_messages_purged_total',
    'Messages removed by the expiry sweep',
    registry=CUSTOM_REGISTRY
)


def record_request(method: str, endpoint: str, status_code: int, duration_seconds: float) -> None:
    """Record an HTTP request."""
    try:
        REQUEST_COUNT.labels(method=method, endpoint=endpoint, status_code=str(status_code)).inc()
        REQUEST_DURATION.labels(method=method, endpoint=endpoint).observe(duration_seconds)
    except Exception as exc:  # pragma: no cover - best-effort metric
        logger.warning("Failed to record request metric", error=str(exc), endpoint=endpoint)


def record_chat_operation(operation: str, outcome: str) -> None:
    """Count a chat operation by outcome (``ok`` or the error class name)."""
    try:
        CHAT_OPERATIONS.labels(operation=operation, outcome=outcome).inc()
    except Exception as exc:  # pragma: no cover - best-effort metric
        logger.warning("Failed to record chat operation", error=str(exc), operation=operation)


def record_realtime_event(event: str) -> None:
    try:
        REALTIME_EVENTS.labels(event=event).inc()
    except Exception as exc:  # pragma: no cover - best-effort metric
        logger.warning("Failed to record realtime event", error=str(exc), realtime_event=event)


def set_active_connections(count: int) -> None:
    try:
        ACTIVE_CONNECTIONS.set(count)
    except Exception as exc:  # pragma: no cover - best-effort metric
        logger.warning("Failed to set active connections", error=str(exc))


def increment_expired_purged(count: int) -> None:
    if count <= 0:
        return
    try:
        EXPIRED_MESSAGES_PURGED.inc(count)
    except Exception as exc:  # pragma: no cover - best-effort metric
        logger.warning("Failed to record expiry sweep", error=str(exc))


@asynccontextmanager
async def track_chat_operation(operation: str) -> AsyncIterator[None]:
    """Count the wrapped chat operation as ``ok`` or by the error it raised."""
    try:
        yield
    except Exception as exc:
        record_chat_operation(operation, type(exc).__name__)
        raise
    else:
        record_chat_operation(operation, "ok")
