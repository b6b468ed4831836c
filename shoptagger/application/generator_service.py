"""Test product generation service.

Creates batches of synthetic products and deletes them again. Both flows
pause for one second every ten products to stay clear of store limits.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any

import structlog

from shoptagger.application.product_collector import collect_products
from shoptagger.catalog.generator import (
    DEFAULT_PRODUCT_TYPE,
    DEFAULT_VENDOR,
    GeneratorConfig,
    ProductGenerator,
)
from shoptagger.domain.exceptions import InvalidGenerateCountError
from shoptagger.domain.models import FilterSet
from shoptagger.infrastructure.config import settings
from shoptagger.infrastructure.shopify_client import (
    ShopifyCatalogClient,
    SleepFunc,
    get_catalog_client,
)

logger = structlog.get_logger()

MIN_GENERATE_COUNT = 1
MAX_GENERATE_COUNT = 250
MAX_REPORTED_ERRORS = 10
PAUSE_EVERY = 10
PAUSE_SECONDS = 1.0


@dataclass
class GenerateResult:
    """Result of a generate run."""

    requested: int
    created: int = 0
    failed: int = 0
    errors: list[str] = field(default_factory=list)

    def to_response(self) -> dict[str, Any]:
        """Build the JSON response body."""
        return {
            "success": True,
            "stats": {
                "requested": self.requested,
                "created": self.created,
                "failed": self.failed,
            },
            "errors": self.errors[:MAX_REPORTED_ERRORS],
        }


@dataclass
class DeleteResult:
    """Result of a delete-all run."""

    deleted: int = 0
    failed: int = 0
    success: bool = True
    error: str | None = None
    error_code: str | None = None

    def to_response(self) -> dict[str, Any]:
        """Build the JSON response body."""
        return {
            "success": self.success,
            "stats": {"deleted": self.deleted, "failed": self.failed},
        }


class GeneratorService:
    """Creates and removes synthetic products in bulk."""

    def __init__(
        self,
        client: ShopifyCatalogClient,
        sleep: SleepFunc = asyncio.sleep,
        seed: int | None = None,
        delete_limit: int | None = None,
    ) -> None:
        """Initialize service.

        Args:
            client: Catalog client.
            sleep: Coroutine used for the fixed-cadence pauses.
            seed: Random seed for reproducible products.
            delete_limit: Cap on products gathered for deletion.
        """
        self.client = client
        self._sleep = sleep
        self.seed = seed
        self.delete_limit = delete_limit or settings.delete_limit

    async def generate(
        self,
        count: int,
        product_type: str | None = None,
        vendor: str | None = None,
    ) -> GenerateResult:
        """Create ``count`` synthetic products.

        One product's failure does not stop the batch. The first ten error
        messages are kept verbatim.

        Args:
            count: Number of products (1-250).
            product_type: Product type for every product.
            vendor: Vendor for every product.

        Returns:
            GenerateResult with counters and error messages.

        Raises:
            InvalidGenerateCountError: If count is out of range.
        """
        if not MIN_GENERATE_COUNT <= count <= MAX_GENERATE_COUNT:
            raise InvalidGenerateCountError(count, MIN_GENERATE_COUNT, MAX_GENERATE_COUNT)

        generator = ProductGenerator(
            GeneratorConfig(
                seed=self.seed,
                product_type=product_type or DEFAULT_PRODUCT_TYPE,
                vendor=vendor or DEFAULT_VENDOR,
            )
        )
        result = GenerateResult(requested=count)
        logger.info("Generating products", count=count, vendor=generator.config.vendor)

        for number, draft in enumerate(generator.generate(count), start=1):
            created = await self.client.create_product(draft)
            if created.success:
                result.created += 1
                logger.debug(
                    "Product created",
                    product_id=created.product_id,
                    title=draft.title,
                    price=draft.price,
                )
            else:
                result.failed += 1
                if len(result.errors) < MAX_REPORTED_ERRORS:
                    result.errors.append(f"Product #{number}: {created.error}")

            if number % PAUSE_EVERY == 0:
                await self._sleep(PAUSE_SECONDS)

        logger.info(
            "Product generation finished",
            requested=count,
            created=result.created,
            failed=result.failed,
        )
        return result

    async def delete_matching(self, filters: FilterSet | None = None) -> DeleteResult:
        """Delete products matching filters, up to the delete limit.

        Defaults to the generator's vendor so only synthetic products are hit.

        Args:
            filters: Search filters.

        Returns:
            DeleteResult with counters.
        """
        filters = filters or FilterSet(vendor=DEFAULT_VENDOR)
        if filters.is_empty:
            logger.warning("Deleting without filters matches the whole catalog")

        collected = await collect_products(self.client, filters, limit=self.delete_limit)
        if not collected.success:
            return DeleteResult(
                success=False,
                error=collected.error,
                error_code=collected.error_code,
            )

        result = DeleteResult()
        for product in collected.products:
            deleted = await self.client.delete_product(product.id)
            if deleted.success:
                result.deleted += 1
                if result.deleted % PAUSE_EVERY == 0:
                    await self._sleep(PAUSE_SECONDS)
            else:
                result.failed += 1
                logger.warning(
                    "Product delete failed",
                    product_id=product.id,
                    error=deleted.error,
                )

        logger.info(
            "Product deletion finished",
            matched=len(collected.products),
            deleted=result.deleted,
            failed=result.failed,
        )
        return result


def get_generator_service() -> GeneratorService:
    """Get generator service wired to the shared client.

    Raises:
        ConfigurationError: If store credentials are missing.
    """
    return GeneratorService(client=get_catalog_client())
