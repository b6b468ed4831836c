"""Drain paginated product search results.

Walks search pages in cursor order and gathers every match into memory
before any bulk action starts.
"""

from dataclasses import dataclass, field

import structlog

from shoptagger.domain.models import FilterSet, ProductRef
from shoptagger.infrastructure.shopify_client import ShopifyCatalogClient

logger = structlog.get_logger()


@dataclass
class CollectResult:
    """Result of draining search pages."""

    products: list[ProductRef] = field(default_factory=list)
    pages: int = 0
    truncated: bool = False
    success: bool = True
    error: str | None = None
    error_code: str | None = None


async def collect_products(
    client: ShopifyCatalogClient,
    filters: FilterSet,
    limit: int | None = None,
) -> CollectResult:
    """Fetch every product matching filters, page by page.

    The end cursor of each page is the start cursor of the next. A failed
    page aborts the walk with the client's error.

    Args:
        client: Catalog client.
        filters: Search filters.
        limit: Stop once this many products are gathered (None for no cap).

    Returns:
        CollectResult with products in server order.
    """
    products: list[ProductRef] = []
    cursor: str | None = None
    pages = 0

    while True:
        result = await client.search_products(filters, cursor)
        if not result.success or result.page is None:
            logger.error(
                "Product search failed",
                query=filters.to_query(),
                pages=pages,
                error=result.error,
            )
            return CollectResult(
                products=products,
                pages=pages,
                success=False,
                error=result.error,
                error_code=result.error_code,
            )

        pages += 1
        products.extend(result.page.products)

        if limit is not None and len(products) >= limit:
            truncated = len(products) > limit or result.page.has_more
            return CollectResult(products=products[:limit], pages=pages, truncated=truncated)

        if not result.page.has_more:
            break
        if not result.page.next_cursor:
            logger.warning(
                "Search page reported more results without a cursor",
                query=filters.to_query(),
                pages=pages,
            )
            break
        cursor = result.page.next_cursor

    logger.info(
        "Product search drained",
        query=filters.to_query(),
        pages=pages,
        count=len(products),
    )
    return CollectResult(products=products, pages=pages)
