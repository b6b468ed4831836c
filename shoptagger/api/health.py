"""Liveness and readiness probes. Both are public and never call the store."""

from fastapi import APIRouter
from pydantic import BaseModel

from shoptagger.infrastructure.config import settings

router = APIRouter()


class HealthResponse(BaseModel):
    status: str
    service: str
    version: str


class ReadinessResponse(BaseModel):
    """``store_configured`` is false until both Shopify credentials are set."""

    status: str
    store_configured: bool


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    return HealthResponse(status="healthy", service="shoptagger", version=settings.api_version)


@router.get("/ready", response_model=ReadinessResponse)
async def readiness_check() -> ReadinessResponse:
    """Report whether the store endpoints can be served."""
    store_configured = bool(settings.shopify_shop_domain and settings.shopify_access_token)
    return ReadinessResponse(
        status="ready" if store_configured else "not_configured",
        store_configured=store_configured,
    )
