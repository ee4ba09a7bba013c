"""
Shared API Middleware
======================

Common middleware and exception handlers for the FastAPI application.
"""

import time
import uuid
from datetime import datetime, timezone
from typing import Callable

from fastapi import Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from supportdesk.core import (
    ApplicationException,
    AuditTrailException,
    AuthenticationException,
    AuthorizationException,
    ConfigurationException,
    ConflictException,
    DomainException,
    RepositoryException,
    ResourceNotFoundException,
    StoreUnavailableException,
    ValidationException,
)
from supportdesk.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"

# Most specific first; the first isinstance match wins.
STATUS_CODES = (
    (ValidationException, 400),
    (ResourceNotFoundException, 404),
    (ConflictException, 409),
    (AuthenticationException, 401),
    (AuthorizationException, 403),
    (AuditTrailException, 500),
    (StoreUnavailableException, 503),
    (RepositoryException, 503),
    (ConfigurationException, 500),
    (DomainException, 400),
)


def status_code_for(exc: ApplicationException) -> int:
    for exc_type, status_code in STATUS_CODES:
        if isinstance(exc, exc_type):
            return status_code
    return 500


def _correlation_id(request: Request) -> str:
    return getattr(request.state, "correlation_id", "unknown")


class CorrelationIDMiddleware(BaseHTTPMiddleware):
    """
    Adds correlation ID to requests for tracing.

    Reuses an incoming ``X-Correlation-ID`` header or generates a new one.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        correlation_id = request.headers.get(CORRELATION_HEADER, str(uuid.uuid4()))

        # Store in request state for access in endpoints and handlers
        request.state.correlation_id = correlation_id

        response = await call_next(request)
        response.headers[CORRELATION_HEADER] = correlation_id
        return response


class MetricsMiddleware(BaseHTTPMiddleware):
    """Stamps each response with its handling time (``X-Response-Time``)."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.perf_counter()

        response = await call_next(request)

        response_time = time.perf_counter() - start_time
        response.headers["X-Response-Time"] = f"{response_time:.3f}s"
        return response


class LoggingMiddleware(BaseHTTPMiddleware):
    """Logs every request and its outcome."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        correlation_id = _correlation_id(request)
        start_time = time.perf_counter()

        logger.info(
            "Request started",
            extra={
                "correlation_id": correlation_id,
                "method": request.method,
                "path": request.url.path,
                "client": request.client.host if request.client else None
            }
        )

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "Request failed",
                extra={
                    "correlation_id": correlation_id,
                    "method": request.method,
                    "path": request.url.path,
                    "error": str(e),
                    "response_time_ms": int((time.perf_counter() - start_time) * 1000)
                }
            )
            raise

        logger.info(
            "Request completed",
            extra={
                "correlation_id": correlation_id,
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "response_time_ms": int((time.perf_counter() - start_time) * 1000)
            }
        )
        return response


async def application_exception_handler(request: Request, exc: ApplicationException) -> JSONResponse:
    """
    Map an ApplicationException to its HTTP status.

    Body: ``{"detail", "error", "correlation_id"}``; ``details`` is added when
    the exception carries any.
    """
    correlation_id = _correlation_id(request)
    status_code = status_code_for(exc)

    log = logger.error if status_code >= 500 else logger.info
    log(
        "Request rejected",
        extra={
            "correlation_id": correlation_id,
            "path": request.url.path,
            "method": request.method,
            "error": exc.error_code,
            "status_code": status_code,
            "error_message": exc.message,
        }
    )

    content = {
        "detail": exc.message,
        "error": exc.error_code,
        "correlation_id": correlation_id,
    }
    if exc.details:
        content["details"] = exc.details

    headers = {"WWW-Authenticate": "Bearer"} if status_code == 401 else None
    return JSONResponse(status_code=status_code, content=content, headers=headers)


async def request_validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed request bodies and query values are reported as 400 invalid_argument."""
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path"))
    message = first.get("msg", "Invalid request")
    if field:
        message = f"{field}: {message}"

    return JSONResponse(
        status_code=400,
        content={
            "detail": message,
            "error": ValidationException.error_code,
            "correlation_id": _correlation_id(request),
            "details": {"field": field} if field else {},
        }
    )


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Global exception handler for unhandled exceptions.

    Internal details are only exposed in development.
    """
    correlation_id = _correlation_id(request)

    logger.error(
        "Unhandled exception",
        extra={
            "correlation_id": correlation_id,
            "path": request.url.path,
            "method": request.method,
            "error_type": type(exc).__name__,
            "error_message": str(exc)
        }
    )

    is_dev = getattr(getattr(request.app.state, "settings", None), "environment", None) == "development"

    return JSONResponse(
        status_code=500,
        content={
            "detail": "Internal server error",
            "error": "internal_error",
            "correlation_id": correlation_id,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "debug_info": str(exc) if is_dev else None
        }
    )
