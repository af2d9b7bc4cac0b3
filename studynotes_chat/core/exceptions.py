"""
Global exception handlers for the FastAPI application.
"""

import json
import traceback
from typing import Any, Union

import structlog
from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import get_settings

logger = structlog.get_logger(__name__)


# Custom exception classes
class APIError(Exception):
    """Base API exception."""

    def __init__(self, detail: Any, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR):
        self.detail = detail
        self.status_code = status_code
        super().__init__(detail)


class BadRequestError(APIError):
    """Input validation / bad request error."""

    def __init__(self, detail: Any = "Bad request"):
        super().__init__(detail, status.HTTP_400_BAD_REQUEST)


class ValidationError(BadRequestError):
    """Message content, emoji or other input failed a domain rule."""

    def __init__(self, detail: Any = "Invalid input"):
        super().__init__(detail)


class AuthenticationError(APIError):
    """Authentication error."""

    def __init__(self, detail: str = "Authentication failed"):
        super().__init__(detail, status.HTTP_401_UNAUTHORIZED)


class AuthorizationError(APIError):
    """Authorization error."""

    def __init__(self, detail: str = "Insufficient permissions"):
        super().__init__(detail, status.HTTP_403_FORBIDDEN)


class NotFoundError(APIError):
    """Resource not found error."""

    def __init__(self, detail: str = "Resource not found"):
        super().__init__(detail, status.HTTP_404_NOT_FOUND)


def _client_ip(request: Request) -> Union[str, None]:
    return request.client.host if request.client else None


async def api_exception_handler(request: Request, exc: APIError) -> JSONResponse:
    """Handle custom API exceptions."""
    logger.warning(
        "API exception",
        path=request.url.path,
        method=request.method,
        status_code=exc.status_code,
        detail=exc.detail,
        error_type=type(exc).__name__,
        client_ip=_client_ip(request),
    )

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "detail": exc.detail,
            "status_code": exc.status_code,
            "type": "api_error"
        }
    )


async def validation_exception_handler(
    request: Request,
    exc: Union[RequestValidationError, PydanticValidationError],
) -> JSONResponse:
    """Handle request schema validation errors."""
    errors = []
    for error in exc.errors():
        error_dict = {
            "loc": error.get("loc", []),
            "msg": error.get("msg", ""),
            "type": error.get("type", ""),
        }
        if "input" in error:
            try:
                json.dumps(error["input"])
                error_dict["input"] = error["input"]
            except (TypeError, ValueError):
                pass
        errors.append(error_dict)

    logger.warning(
        "Validation error",
        path=request.url.path,
        method=request.method,
        errors=errors,
        client_ip=_client_ip(request),
    )

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "detail": "Validation error",
            "errors": errors,
            "type": "validation_error"
        }
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Handle HTTP exceptions."""
    logger.warning(
        "HTTP exception",
        path=request.url.path,
        method=request.method,
        status_code=exc.status_code,
        detail=exc.detail,
        client_ip=_client_ip(request),
    )

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "detail": exc.detail,
            "status_code": exc.status_code,
            "type": "http_error"
        }
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle general exceptions."""
    settings = getattr(request.app.state, "settings", None) or get_settings()

    logger.error(
        "Unhandled exception",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        error_type=type(exc).__name__,
        traceback=traceback.format_exc() if settings.debug else None,
        client_ip=_client_ip(request),
    )

    content = {
        "detail": "Internal server error",
        "type": "internal_error"
    }
    if settings.debug:
        content["error"] = str(exc)
        content["error_type"] = type(exc).__name__

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=content,
    )
