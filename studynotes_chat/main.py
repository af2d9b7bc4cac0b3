"""
FastAPI application for the Study Notes chat service.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

import structlog
import uvicorn
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.auth import IdentityResolver
from .core.config import Settings, get_settings
from .core.database import Database
from .core.exceptions import (
    APIError,
    api_exception_handler,
    general_exception_handler,
    http_exception_handler,
    validation_exception_handler,
)
from .core.logging import setup_logging
from .middleware.telemetry import TelemetryMiddleware
from .routers import health, messages, metrics, realtime
from .services.chat_service import ChatService
from .services.message_store import MessageStore
from .services.realtime import RealtimeHub
from .services.realtime_events import RealtimeEventDispatcher
from .workers.message_expiry_worker import MessageExpiryWorker


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    app_settings: Settings = app.state.settings
    logger = structlog.get_logger(__name__)

    setup_logging(app_settings.log_level)

    await Database.connect_to_mongo(app_settings)

    worker: MessageExpiryWorker = app.state.expiry_worker
    if app_settings.message_sweep_enabled:
        await worker.start()

    logger.info("Starting Study Notes chat API", version=app.version)

    yield

    await worker.stop()
    await Database.close_mongo_connection()
    logger.info("Shutting down Study Notes chat API")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Create and configure FastAPI application."""
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Ephemeral study-room chat with realtime presence",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    # Chat components; the hub owns presence and is the service's event publisher
    identity_resolver = IdentityResolver(settings)
    store = MessageStore()
    hub = RealtimeHub(identity_resolver)
    chat_service = ChatService(store, publisher=hub, default_page_size=settings.default_page_size)

    app.state.settings = settings
    app.state.identity_resolver = identity_resolver
    app.state.message_store = store
    app.state.realtime_hub = hub
    app.state.chat_service = chat_service
    app.state.realtime_dispatcher = RealtimeEventDispatcher(hub, chat_service)
    app.state.expiry_worker = MessageExpiryWorker(store, settings.message_sweep_interval_seconds)

    # Security middleware
    app.add_middleware(
        TrustedHostMiddleware,
        allowed_hosts=settings.allowed_hosts,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["*"],
    )

    app.add_middleware(TelemetryMiddleware)

    # Exception handlers
    app.add_exception_handler(APIError, api_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    # Include routers
    app.include_router(health.router, prefix="/api", tags=["health"])
    app.include_router(messages.router, prefix="/api", tags=["chat"])
    app.include_router(realtime.router, prefix="/api", tags=["realtime"])
    app.include_router(metrics.router, prefix="/api", tags=["monitoring"])

    return app


def run() -> None:
    app_settings = get_settings()
    uvicorn.run(
        "studynotes_chat.main:create_app",
        factory=True,
        host=app_settings.host,
        port=app_settings.port,
        reload=app_settings.debug,
        log_level=app_settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
