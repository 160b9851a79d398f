"""Marketplace catalog API main application module.

This module initializes the FastAPI application and configures
core middleware, routers, exception handlers and startup/shutdown events.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from market_api.api.catalog import router as catalog_router
from market_api.api.converters import error_code_for
from market_api.api.health import router as health_router
from market_api.api.middleware import setup_middleware
from market_api.api.products import router as products_router
from market_api.catalog.repository import SqlCatalogStore
from market_api.domain.exceptions import (
    ProductNotFoundError,
    QueryFailure,
    QueryTimeout,
    ValidationError,
)
from market_api.infrastructure.config import settings
from market_api.infrastructure.database import create_engine, create_session_factory
from market_api.infrastructure.logging_config import configure_logging

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup and shutdown events.

    Builds the SQL catalog store unless one was installed on
    ``app.state.catalog_store`` beforehand.

    Args:
        app: The FastAPI application instance.

    Yields:
        None after startup, cleanup happens after yield.
    """
    configure_logging(settings.log_level, settings.log_json)
    logger.info(
        "Starting catalog API",
        version=settings.api_version,
        debug=settings.debug,
    )

    engine = None
    if getattr(app.state, "catalog_store", None) is None:
        engine = create_engine(settings.database_url, echo=settings.debug)
        app.state.catalog_store = SqlCatalogStore(create_session_factory(engine))

    yield

    logger.info("Shutting down catalog API")
    if engine is not None:
        await engine.dispose()


app = FastAPI(
    title="Marketplace Catalog API",
    description="Product search, filtering and facets for a digital-goods marketplace",
    version=settings.api_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS middleware (must be added before custom middleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["*"],
)

setup_middleware(app)

app.include_router(health_router, tags=["Health"])
app.include_router(products_router)
app.include_router(catalog_router)


# ============================================================================
# Custom Exception Handlers
# ============================================================================


def error_response(
    request: Request,
    status_code: int,
    error_code: str,
    message: str,
    details: list[dict] | None = None,
) -> JSONResponse:
    """Build the standard error envelope."""
    return JSONResponse(
        status_code=status_code,
        content={
            "error_code": error_code,
            "message": message,
            "details": details or [],
            "request_id": getattr(request.state, "request_id", None),
        },
    )


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    """Report malformed filters field by field."""
    logger.info(
        "Invalid catalog request",
        path=request.url.path,
        field=exc.field,
        reason=exc.reason,
    )
    return error_response(
        request,
        422,
        "VALIDATION_ERROR",
        exc.message,
        [
            {"field": e["field"], "message": e["reason"]}
            for e in exc.details["errors"]
        ],
    )


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    """Report FastAPI parameter errors in the same envelope."""
    details = [
        {
            "field": ".".join(str(part) for part in err["loc"][1:]) or None,
            "message": err["msg"],
        }
        for err in exc.errors()
    ]
    return error_response(request, 422, "VALIDATION_ERROR", "Invalid request", details)


@app.exception_handler(ProductNotFoundError)
async def product_not_found_handler(request: Request, exc: ProductNotFoundError):
    """Handle lookups that match no live product."""
    return error_response(request, 404, "PRODUCT_NOT_FOUND", exc.message)


@app.exception_handler(QueryFailure)
async def query_failure_handler(request: Request, exc: QueryFailure):
    """Handle store failures without leaking the underlying cause."""
    status_code = 504 if isinstance(exc, QueryTimeout) else 503
    return error_response(request, status_code, error_code_for(exc), exc.message)


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Handle HTTP exceptions with consistent format."""
    detail = exc.detail
    if isinstance(detail, dict):
        error_code = detail.get("error_code", "ERROR")
        message = detail.get("message", str(detail))
        details = detail.get("details", [])
    else:
        error_code = "ERROR"
        message = str(detail)
        details = []
    return error_response(request, exc.status_code, error_code, message, details)


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    """Handle uncaught exceptions with consistent format."""
    logger.exception(
        "Unhandled exception in handler",
        path=request.url.path,
        method=request.method,
        error=str(exc),
    )
    return error_response(request, 500, "INTERNAL_ERROR", "An internal error occurred")
