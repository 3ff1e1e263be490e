"""
Main FastAPI application entry point.
"""

import time
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from provider_bridge.core.config import settings
from provider_bridge.core.logging import configure_logging
from provider_bridge.gateway.errors import ErrorCode, GatewayError, error_envelope
from provider_bridge.gateway.middleware.trace import (
    REQUEST_ID_HEADER,
    extract_or_generate_request_id,
)
from provider_bridge.gateway.routers import ai_router, authoring_router

configure_logging(settings.log)

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager.

    Handles startup and shutdown events.
    """
    logger.info("Starting application", version=settings.app.app_version, env=settings.app.app_env)
    logger.info(
        "Configuration loaded",
        app_name=settings.app.app_name,
        catalog_path=settings.gateway.catalog_path or None,
        repair_enabled=settings.repair.enabled,
        repair_model=settings.repair.model,
        caller_keys=len(settings.gateway.api_keys_map),
        cors_origins=settings.app.cors_origins_list,
    )

    yield

    logger.info("Shutting down application")


# Create FastAPI app
app = FastAPI(
    title=settings.app.app_name,
    version=settings.app.app_version,
    description="Provider Bridge - schema-driven AI provider gateway",
    docs_url="/docs" if settings.docs_enabled else None,
    redoc_url="/redoc" if settings.docs_enabled else None,
    lifespan=lifespan,
)


# ============================================================================
# Middleware
# ============================================================================

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.app.cors_origins_list,
    allow_credentials=settings.app.cors_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=[REQUEST_ID_HEADER],
)


# Request logging middleware
@app.middleware("http")
async def log_requests(request, call_next):
    """Log all requests and add request ID."""
    request_id = extract_or_generate_request_id(request.headers)
    request.state.request_id = request_id
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(request_id=request_id)

    start_time = time.time()

    if settings.log.requests:
        logger.info(
            "Request started",
            method=request.method,
            path=request.url.path,
            request_id=request_id,
        )

    try:
        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id

        duration = time.time() - start_time
        if settings.log.requests:
            logger.info(
                "Request completed",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                duration_ms=round(duration * 1000, 2),
                request_id=request_id,
            )

        return response

    except Exception as e:
        duration = time.time() - start_time
        logger.error(
            "Request failed",
            method=request.method,
            path=request.url.path,
            error=str(e),
            duration_ms=round(duration * 1000, 2),
            request_id=request_id,
        )
        raise


# ============================================================================
# Exception Handlers
# ============================================================================


def _envelope_response(status_code: int, content: dict, request) -> JSONResponse:
    response = JSONResponse(status_code=status_code, content=content)
    request_id = getattr(request.state, "request_id", None)
    if request_id:
        response.headers[REQUEST_ID_HEADER] = request_id
    return response


@app.exception_handler(GatewayError)
async def gateway_exception_handler(request, exc: GatewayError):
    """Handle gateway errors."""
    log = logger.warning if exc.status_code < 500 else logger.error
    log(
        "Gateway request failed",
        path=request.url.path,
        code=exc.code,
        status_code=exc.status_code,
        error=exc.message,
        request_id=getattr(request.state, "request_id", None),
    )
    return _envelope_response(exc.status_code, exc.to_envelope(), request)


_HTTP_STATUS_CODES = {
    400: ErrorCode.BAD_REQUEST,
    401: ErrorCode.UNAUTHORIZED,
    404: ErrorCode.NOT_FOUND,
}


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request, exc: StarletteHTTPException):
    """Handle HTTP exceptions."""
    code = _HTTP_STATUS_CODES.get(
        exc.status_code,
        ErrorCode.BAD_REQUEST if exc.status_code < 500 else ErrorCode.INTERNAL_ERROR,
    )
    return _envelope_response(
        exc.status_code,
        error_envelope(str(exc.detail), code),
        request,
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request, exc: RequestValidationError):
    """Handle validation errors."""
    errors = []
    for error in exc.errors():
        field = ".".join(str(loc) for loc in error["loc"])
        errors.append({
            "field": field,
            "message": error["msg"],
            "type": error["type"],
        })

    return _envelope_response(
        400,
        error_envelope("Request validation failed", ErrorCode.BAD_REQUEST, {"errors": errors}),
        request,
    )


@app.exception_handler(Exception)
async def general_exception_handler(request, exc: Exception):
    """Handle general exceptions."""
    logger.error(
        "Unhandled exception",
        path=request.url.path,
        error=str(exc),
        exc_info=exc,
        request_id=getattr(request.state, "request_id", None),
    )

    return _envelope_response(
        500,
        error_envelope(
            "An internal error occurred" if not settings.app.app_debug else str(exc),
            ErrorCode.INTERNAL_ERROR,
        ),
        request,
    )


# ============================================================================
# Routes
# ============================================================================


@app.get("/health", tags=["Health"])
async def health_check():
    """
    Basic health check endpoint.

    Returns the service status without checking dependencies.
    """
    return {
        "status": "healthy",
        "version": settings.app.app_version,
    }


app.include_router(ai_router)
app.include_router(authoring_router)
