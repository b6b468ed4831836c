"""Product tagger API endpoints.

Provides endpoints for filter-then-tag operations:
- GET /product-tagger/collections - collections for the filter selector
- POST /product-tagger/preview - count and sample of matching products
- POST /product-tagger/apply-tag - tag every matching product
- GET /product-tagger/audit-logs - recent tagging audit records
- GET /product-tagger/products - first page of the catalog
"""

from typing import Annotated, NoReturn

from fastapi import APIRouter, Depends, HTTPException, Query, status

from shoptagger.api.schemas import (
    ApplyTagRequest,
    ApplyTagResponse,
    AuditLogSchema,
    CollectionListResponse,
    CollectionSchema,
    ErrorResponse,
    PreviewRequest,
    PreviewResponse,
    ProductListResponse,
    ProductSchema,
    QueuedApplyTagResponse,
)
from shoptagger.application.tagging_service import TaggingService, get_tagging_service
from shoptagger.domain.models import ProductRef
from shoptagger.infrastructure.audit_repository import (
    AuditLogRepository,
    get_audit_repository,
)

router = APIRouter(prefix="/product-tagger", tags=["Product Tagger"])

MAX_AUDIT_LOGS = 100


# ============================================================================
# Dependencies
# ============================================================================


def get_service() -> TaggingService:
    """Get tagging service."""
    return get_tagging_service()


def get_audit_log() -> AuditLogRepository:
    """Get the audit log. Needs no store credentials."""
    return get_audit_repository()


# ============================================================================
# Converters
# ============================================================================


def product_to_schema(product: ProductRef) -> ProductSchema:
    """Convert ProductRef to ProductSchema."""
    return ProductSchema(id=product.id, title=product.title, tags=list(product.tags))


def raise_upstream_error(error_code: str | None, message: str | None) -> NoReturn:
    """Raise a 502 for a failed store call."""
    raise HTTPException(
        status_code=status.HTTP_502_BAD_GATEWAY,
        detail={
            "error_code": error_code or "UPSTREAM_ERROR",
            "message": message or "Store request failed",
        },
    )


# ============================================================================
# Endpoints
# ============================================================================


@router.get(
    "/collections",
    response_model=CollectionListResponse,
    responses={
        401: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
    summary="List collections",
)
async def list_collections(
    service: Annotated[TaggingService, Depends(get_service)],
) -> CollectionListResponse:
    """List up to 250 collections for the filter selector."""
    result = await service.collections()
    if not result.success:
        raise_upstream_error(result.error_code, result.error)

    collections = [
        CollectionSchema(id=c.id, title=c.title, handle=c.handle)
        for c in result.collections
    ]
    return CollectionListResponse(collections=collections, total=len(collections))


@router.post(
    "/preview",
    response_model=PreviewResponse,
    responses={
        401: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
    summary="Preview matching products",
    description="Count products matching the filters and return the first ten.",
)
async def preview_products(
    request: PreviewRequest,
    service: Annotated[TaggingService, Depends(get_service)],
) -> PreviewResponse:
    """Preview products matching filters.

    Args:
        request: Filters to match.
        service: Tagging service.

    Returns:
        Match count (capped) and a sample of products.

    Raises:
        HTTPException: If the store could not be searched.
    """
    result = await service.preview(request.filters.to_filter_set())
    if not result.success:
        raise_upstream_error(result.error_code, result.error)

    return PreviewResponse(
        count=result.count,
        products=[product_to_schema(p) for p in result.products],
    )


@router.post(
    "/apply-tag",
    response_model=ApplyTagResponse | QueuedApplyTagResponse,
    responses={
        401: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
    summary="Apply tag to matching products",
    description=(
        "Add a tag to every product matching the filters. With use_queue "
        "the work is handed to background jobs and only the total is returned."
    ),
)
async def apply_tag(
    request: ApplyTagRequest,
    service: Annotated[TaggingService, Depends(get_service)],
) -> ApplyTagResponse | QueuedApplyTagResponse:
    """Apply a tag to all matching products.

    Args:
        request: Filters, tag and mode.
        service: Tagging service.

    Returns:
        Full counters for inline runs, the total for queued runs.

    Raises:
        HTTPException: If the store could not be searched.
    """
    result = await service.apply_tag(
        request.filters.to_filter_set(),
        request.tag,
        use_queue=request.use_queue,
    )
    if not result.success:
        raise_upstream_error(result.error_code, result.error)

    body = result.to_response()
    if result.queued:
        return QueuedApplyTagResponse(**body)
    return ApplyTagResponse(**body)


@router.get(
    "/audit-logs",
    response_model=list[AuditLogSchema],
    responses={401: {"model": ErrorResponse}},
    summary="List audit logs",
)
async def list_audit_logs(
    audit_log: Annotated[AuditLogRepository, Depends(get_audit_log)],
    limit: Annotated[int, Query(ge=1, le=MAX_AUDIT_LOGS)] = MAX_AUDIT_LOGS,
) -> list[AuditLogSchema]:
    """List the most recent tagging audit records, newest first."""
    entries = await audit_log.list_recent(limit)
    return [AuditLogSchema(**entry.to_dict()) for entry in entries]


@router.get(
    "/products",
    response_model=ProductListResponse,
    responses={
        401: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
    summary="View products",
)
async def view_products(
    service: Annotated[TaggingService, Depends(get_service)],
    limit: Annotated[int, Query(ge=1, le=250)] = 50,
) -> ProductListResponse:
    """List the first page of the catalog."""
    result = await service.view_products(limit)
    if not result.success:
        raise_upstream_error(result.error_code, result.error)

    products = [product_to_schema(p) for p in result.products]
    return ProductListResponse(products=products, count=len(products))
