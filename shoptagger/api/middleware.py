"""HTTP middleware: request correlation, API key check, last-resort errors."""

import hmac
import time
from typing import Callable
from uuid import uuid4

import structlog
from fastapi import FastAPI, Request, Response, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from shoptagger.infrastructure.config import settings

logger = structlog.get_logger()

REQUEST_ID_HEADER = "X-Request-ID"

# Reachable without an API key
PUBLIC_PATHS = frozenset({"/health", "/ready", "/openapi.json"})
PUBLIC_PREFIXES = ("/docs", "/redoc")


def error_response(
    status_code: int,
    error_code: str,
    message: str,
    request_id: str | None = None,
    headers: dict[str, str] | None = None,
    details: list[dict[str, str]] | None = None,
) -> JSONResponse:
    """Build a response in the standard error body format."""
    return JSONResponse(
        status_code=status_code,
        content={
            "error_code": error_code,
            "message": message,
            "details": details or [],
            "request_id": request_id,
        },
        headers=headers,
    )


def is_public(path: str) -> bool:
    path = path.rstrip("/") or "/"
    return path in PUBLIC_PATHS or path.startswith(PUBLIC_PREFIXES)


def bearer_token(header: str) -> str | None:
    """Extract the token from an ``Authorization: Bearer <token>`` value."""
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


# ============================================================================
# Request Correlation
# ============================================================================


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Tags every request with an ID and logs its outcome.

    The ID comes from the ``X-Request-ID`` header when the caller sends one.
    It is stored on ``request.state``, bound into the structlog context for
    the duration of the request and echoed on the response.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid4())
        request.state.request_id = request_id
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )

        started = time.perf_counter()
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
        try:
            response = await call_next(request)
            status_code = response.status_code
        finally:
            logger.info(
                "Request completed",
                status_code=status_code,
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
            )
            structlog.contextvars.unbind_contextvars("request_id", "method", "path")

        response.headers[REQUEST_ID_HEADER] = request_id
        return response


# ============================================================================
# API Key
# ============================================================================


class ApiKeyMiddleware(BaseHTTPMiddleware):
    """Requires ``Authorization: Bearer <SHOPTAGGER_API_KEY>`` on every
    non-public path.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if is_public(request.url.path):
            return await call_next(request)

        request_id = getattr(request.state, "request_id", None)
        challenge = {"WWW-Authenticate": "Bearer"}

        header = request.headers.get("Authorization")
        if not header:
            logger.warning("Request without API key")
            return error_response(
                status.HTTP_401_UNAUTHORIZED,
                "UNAUTHORIZED",
                "Missing Authorization header",
                request_id,
                challenge,
            )

        token = bearer_token(header)
        if token is None:
            logger.warning("Malformed Authorization header")
            return error_response(
                status.HTTP_401_UNAUTHORIZED,
                "UNAUTHORIZED",
                "Invalid Authorization header format. Use 'Bearer <api_key>'",
                request_id,
                challenge,
            )

        if not hmac.compare_digest(token.encode(), settings.shoptagger_api_key.encode()):
            logger.warning("Rejected API key")
            return error_response(
                status.HTTP_401_UNAUTHORIZED,
                "INVALID_API_KEY",
                "Invalid API key",
                request_id,
                challenge,
            )

        return await call_next(request)


# ============================================================================
# Last-resort Errors
# ============================================================================


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Turns exceptions that escape the routers into a 500 error body."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)
        except Exception as e:
            logger.exception("Unhandled exception", error=str(e))
            return error_response(
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                "INTERNAL_ERROR",
                "An internal error occurred",
                getattr(request.state, "request_id", None),
            )


def setup_middleware(app: FastAPI) -> None:
    """Install the middleware stack.

    Starlette runs the last-added middleware first, so request IDs are
    assigned before authentication and errors are caught closest to the
    routers.
    """
    app.add_middleware(ErrorHandlerMiddleware)
    app.add_middleware(ApiKeyMiddleware)
    app.add_middleware(RequestIdMiddleware)
