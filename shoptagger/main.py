"""shoptagger application entry point.

Builds the FastAPI app: middleware stack, tagger and generator routers,
error rendering, and the background job runner lifecycle.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from shoptagger.api.generator import router as generator_router
from shoptagger.api.health import router as health_router
from shoptagger.api.middleware import error_response, setup_middleware
from shoptagger.api.tagger import router as tagger_router
from shoptagger.domain.exceptions import ConfigurationError, DomainError
from shoptagger.infrastructure.config import settings
from shoptagger.infrastructure.job_runner import get_job_runner, shutdown_job_runner
from shoptagger.infrastructure.log_config import configure_logging
from shoptagger.infrastructure.shopify_client import close_catalog_client

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Start the job runner on boot; drain it and close the store client on exit."""
    configure_logging(settings.log_level)
    logger.info(
        "shoptagger starting",
        version=settings.api_version,
        debug=settings.debug,
        shop_domain=settings.shopify_shop_domain or None,
        audit_store=settings.audit_store,
    )
    if not (settings.shopify_shop_domain and settings.shopify_access_token):
        logger.warning("Shopify credentials not configured; store endpoints will return 503")

    await get_job_runner().start()
    try:
        yield
    finally:
        logger.info("shoptagger stopping")
        await shutdown_job_runner()
        await close_catalog_client()


app = FastAPI(
    title="shoptagger",
    description="Bulk product tagging and test data for Shopify stores",
    version=settings.api_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# Outside the custom stack so preflight requests skip the API key check
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
setup_middleware(app)

app.include_router(health_router, tags=["Health"])
app.include_router(tagger_router)
app.include_router(generator_router)


# ============================================================================
# Exception Handlers
# ============================================================================


def _request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)


def _field_details(details: dict) -> list[dict[str, str]]:
    return [{"field": key, "message": str(value)} for key, value in details.items()]


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Render ``HTTPException`` in the shared error body format.

    Routers raise with a ``{"error_code", "message"}`` dict as detail; plain
    string details are reported under the generic ``ERROR`` code.
    """
    detail = exc.detail if isinstance(exc.detail, dict) else {"message": str(exc.detail)}
    return error_response(
        exc.status_code,
        detail.get("error_code", "ERROR"),
        detail.get("message", str(detail)),
        _request_id(request),
        exc.headers,
        detail.get("details"),
    )


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(
    request: Request, exc: ConfigurationError
) -> JSONResponse:
    """Answer 503 while the store connection is not configured."""
    logger.warning("Store not configured", path=request.url.path, error=exc.message)
    return error_response(
        503,
        "CONFIGURATION_ERROR",
        exc.message,
        _request_id(request),
        details=_field_details(exc.details),
    )


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    """Invalid operator input caught below the request schemas."""
    return error_response(
        422,
        "VALIDATION_ERROR",
        exc.message,
        _request_id(request),
        details=_field_details(exc.details),
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "Unhandled exception in handler",
        path=request.url.path,
        method=request.method,
        error=str(exc),
    )
    return error_response(500, "INTERNAL_ERROR", "An internal error occurred", _request_id(request))
