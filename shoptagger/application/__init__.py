"""Application layer module.

Contains the bulk operation services that drive the catalog client.
"""

from shoptagger.application.generator_service import (
    DeleteResult,
    GenerateResult,
    GeneratorService,
    get_generator_service,
)
from shoptagger.application.product_collector import CollectResult, collect_products
from shoptagger.application.tagging_service import (
    ApplyProductTagJob,
    ApplyTagResult,
    PreviewResult,
    TaggingService,
    TagStats,
    ViewProductsResult,
    get_tagging_service,
)

__all__ = [
    "ApplyProductTagJob",
    "ApplyTagResult",
    "CollectResult",
    "DeleteResult",
    "GenerateResult",
    "GeneratorService",
    "PreviewResult",
    "TagStats",
    "TaggingService",
    "ViewProductsResult",
    "collect_products",
    "get_generator_service",
    "get_tagging_service",
]
