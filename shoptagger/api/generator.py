"""Product generator API endpoints.

Provides endpoints for synthetic test data:
- POST /product-generator/generate - create N products
- POST /product-generator/delete - delete generated products
"""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from shoptagger.api.schemas import (
    DeleteRequest,
    DeleteResponse,
    ErrorResponse,
    GenerateRequest,
    GenerateResponse,
)
from shoptagger.application.generator_service import (
    GeneratorService,
    get_generator_service,
)

router = APIRouter(prefix="/product-generator", tags=["Product Generator"])


def get_service() -> GeneratorService:
    """Get generator service."""
    return get_generator_service()


@router.post(
    "/generate",
    response_model=GenerateResponse,
    responses={
        401: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
    summary="Generate test products",
    description=(
        "Create between 1 and 250 synthetic products. Individual failures "
        "are counted and the first ten messages returned."
    ),
)
async def generate_products(
    request: GenerateRequest,
    service: Annotated[GeneratorService, Depends(get_service)],
) -> GenerateResponse:
    """Create synthetic products.

    Args:
        request: Count and optional product type / vendor.
        service: Generator service.

    Returns:
        Counters and error messages.
    """
    result = await service.generate(
        request.count,
        product_type=request.product_type,
        vendor=request.vendor,
    )
    return GenerateResponse(**result.to_response())


@router.post(
    "/delete",
    response_model=DeleteResponse,
    responses={
        401: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
    summary="Delete test products",
    description="Delete products matching the filters, the generator's vendor by default.",
)
async def delete_products(
    service: Annotated[GeneratorService, Depends(get_service)],
    request: DeleteRequest | None = None,
) -> DeleteResponse:
    """Delete matching products.

    Raises:
        HTTPException: If the store could not be searched.
    """
    filters = request.filters.to_filter_set() if request and request.filters else None
    result = await service.delete_matching(filters)
    if not result.success:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={
                "error_code": result.error_code or "UPSTREAM_ERROR",
                "message": result.error or "Store request failed",
            },
        )
    return DeleteResponse(**result.to_response())
