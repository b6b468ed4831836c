"""Shopify catalog client.

Talks to the Shopify Admin GraphQL API: product search with cursor
pagination, collections, tag updates and product create/delete.
Every call goes through a bounded retry loop that backs off on transport
failures, honors 429 ``Retry-After`` and paces itself against the
throttle status reported with each response.

Public operations return result objects; remote failures are never raised.
"""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

import httpx
import structlog

from shoptagger.domain.models import (
    Collection,
    CollectionsResult,
    FilterSet,
    MutationResult,
    ProductDraft,
    ProductPage,
    ProductRef,
    SearchResult,
    TagAction,
    TagOutcome,
    TagsResult,
    ThrottleStatus,
    has_tag,
)
from shoptagger.infrastructure.config import ShopifyConfig
from shoptagger.infrastructure.graphql_queries import (
    COLLECTIONS_QUERY,
    CREATE_PRODUCT_MUTATION,
    DELETE_PRODUCT_MUTATION,
    PRODUCT_TAGS_QUERY,
    SEARCH_PRODUCTS_QUERY,
    UPDATE_PRODUCT_TAGS_MUTATION,
)

logger = structlog.get_logger()

SleepFunc = Callable[[float], Awaitable[Any]]

# Used when the server reports a throttle status without a restore rate
DEFAULT_RESTORE_RATE = 50.0


# ============================================================================
# Low-level Response
# ============================================================================


@dataclass
class GraphQLResponse:
    """Outcome of one GraphQL call after retries.

    Attributes:
        data: The ``data`` member of the response body.
        errors: Top-level GraphQL errors (may accompany partial data).
        throttle: Throttle status reported with the response.
        attempts: Number of HTTP attempts made.
        success: False if the call could not produce a usable body.
        error: Human-readable failure description.
        error_code: Machine-readable failure code.
    """

    data: dict[str, Any] = field(default_factory=dict)
    errors: list[dict[str, Any]] = field(default_factory=list)
    throttle: ThrottleStatus | None = None
    attempts: int = 0
    success: bool = True
    error: str | None = None
    error_code: str | None = None

    @property
    def first_error_message(self) -> str | None:
        """Message of the first top-level GraphQL error, if any."""
        if not self.errors:
            return None
        return self.errors[0].get("message") or "GraphQL error"


def _user_errors(data: dict[str, Any], mutation: str) -> list[dict[str, Any]]:
    payload = data.get(mutation) or {}
    return payload.get("userErrors") or []


def _is_throttled(errors: list[dict[str, Any]]) -> bool:
    for error in errors:
        code = (error.get("extensions") or {}).get("code", "")
        if code == "THROTTLED" or "throttled" in str(error.get("message", "")).lower():
            return True
    return False


# ============================================================================
# Catalog Client
# ============================================================================


class ShopifyCatalogClient:
    """Async client for catalog operations against one Shopify store.

    Example usage:
        config = ShopifyConfig.from_settings()
        async with ShopifyCatalogClient(config) as client:
            result = await client.search_products(FilterSet(keyword="shirt"))
            if result.success:
                for product in result.page.products:
                    ...
    """

    def __init__(
        self,
        config: ShopifyConfig,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: SleepFunc = asyncio.sleep,
    ) -> None:
        """Initialize catalog client.

        Args:
            config: Store connection settings.
            transport: Optional httpx transport (used by tests).
            sleep: Coroutine used for every pause.
        """
        self.config = config
        self._transport = transport
        self._sleep = sleep
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.config.timeout,
                transport=self._transport,
                headers={
                    "X-Shopify-Access-Token": self.config.access_token,
                    "Content-Type": "application/json",
                    "Accept": "application/json",
                },
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "ShopifyCatalogClient":
        """Context manager entry."""
        return self

    async def __aexit__(self, *args: object) -> None:
        """Context manager exit."""
        await self.close()

    # ------------------------------------------------------------------------
    # Request execution
    # ------------------------------------------------------------------------

    async def execute(
        self,
        query: str,
        variables: dict[str, Any] | None = None,
    ) -> GraphQLResponse:
        """Execute a GraphQL document with retry and throttle pacing.

        Network errors, timeouts and 5xx responses back off ``2 ** attempt``
        seconds. A 429 (or a THROTTLED GraphQL error) waits for the
        server's ``Retry-After``. Both count toward the retry budget.
        Other 4xx responses fail at once.

        Args:
            query: GraphQL query or mutation.
            variables: Variables for the document.

        Returns:
            GraphQLResponse; ``success`` is False when retries are exhausted
            or the request was rejected.
        """
        client = await self._get_client()
        payload = {"query": query, "variables": variables or {}}
        max_attempts = self.config.max_retries
        last_error = "no attempt made"

        for attempt in range(1, max_attempts + 1):
            is_last = attempt == max_attempts
            try:
                response = await client.post(self.config.endpoint, json=payload)
            except httpx.TransportError as e:
                last_error = f"Request failed: {e}"
                logger.warning(
                    "Shopify request failed",
                    attempt=attempt,
                    max_attempts=max_attempts,
                    error=str(e),
                )
                if not is_last:
                    await self._sleep(2**attempt)
                continue

            if response.status_code == 429:
                retry_after = self._retry_after(response)
                last_error = "Rate limited (HTTP 429)"
                logger.warning(
                    "Rate limited, retrying after pause",
                    attempt=attempt,
                    retry_after=retry_after,
                )
                if not is_last:
                    await self._sleep(retry_after)
                continue

            if response.status_code >= 500:
                last_error = f"Server error (HTTP {response.status_code})"
                logger.warning(
                    "Shopify server error",
                    attempt=attempt,
                    status_code=response.status_code,
                )
                if not is_last:
                    await self._sleep(2**attempt)
                continue

            if response.status_code >= 400:
                logger.error(
                    "Shopify request rejected",
                    status_code=response.status_code,
                    response_body=response.text[:200],
                )
                return GraphQLResponse(
                    attempts=attempt,
                    success=False,
                    error=f"Request rejected (HTTP {response.status_code}): {response.text[:200]}",
                    error_code="HTTP_ERROR",
                )

            try:
                body = response.json()
            except ValueError:
                return GraphQLResponse(
                    attempts=attempt,
                    success=False,
                    error="Response body is not valid JSON",
                    error_code="INVALID_RESPONSE",
                )

            errors = body.get("errors") or []
            if _is_throttled(errors):
                last_error = "Throttled by GraphQL cost limit"
                logger.warning("GraphQL query throttled", attempt=attempt)
                if not is_last:
                    await self._sleep(self.config.default_retry_after)
                continue

            throttle = ThrottleStatus.from_extensions(body.get("extensions"))
            await self._pace(throttle)

            data = body.get("data")
            if errors and not data:
                return GraphQLResponse(
                    errors=errors,
                    throttle=throttle,
                    attempts=attempt,
                    success=False,
                    error=errors[0].get("message") or "GraphQL error",
                    error_code="GRAPHQL_ERROR",
                )

            return GraphQLResponse(
                data=data or {},
                errors=errors,
                throttle=throttle,
                attempts=attempt,
            )

        logger.error(
            "Shopify request retries exhausted",
            attempts=max_attempts,
            error=last_error,
        )
        return GraphQLResponse(
            attempts=max_attempts,
            success=False,
            error=f"Max retries exceeded after {max_attempts} attempts: {last_error}",
            error_code="RETRIES_EXHAUSTED",
        )

    def _retry_after(self, response: httpx.Response) -> float:
        """Read the Retry-After header in seconds."""
        header = response.headers.get("Retry-After")
        if header is None:
            return self.config.default_retry_after
        try:
            return max(0.0, float(header))
        except ValueError:
            return self.config.default_retry_after

    async def _pace(self, throttle: ThrottleStatus | None) -> float:
        """Pause when the remaining cost budget is below the low-water mark.

        Args:
            throttle: Throttle status from the last response.

        Returns:
            Seconds slept (0 if no pause was needed).
        """
        low_water_mark = self.config.throttle_low_water_mark
        if throttle is None or throttle.currently_available >= low_water_mark:
            return 0.0

        restore_rate = throttle.restore_rate or DEFAULT_RESTORE_RATE
        delay = max(1.0, (low_water_mark - throttle.currently_available) / restore_rate)
        logger.info(
            "Rate limit approaching, pausing",
            currently_available=throttle.currently_available,
            restore_rate=restore_rate,
            sleep_seconds=delay,
        )
        await self._sleep(delay)
        return delay

    # ------------------------------------------------------------------------
    # Catalog operations
    # ------------------------------------------------------------------------

    async def search_products(
        self,
        filters: FilterSet,
        cursor: str | None = None,
    ) -> SearchResult:
        """Fetch one page of products matching filters.

        Args:
            filters: Search filters.
            cursor: End cursor of the previous page, or None for the first page.

        Returns:
            SearchResult with the page on success.
        """
        response = await self.execute(
            SEARCH_PRODUCTS_QUERY,
            {
                "query": filters.to_query(),
                "first": self.config.search_page_size,
                "after": cursor,
            },
        )
        if not response.success:
            return SearchResult(
                success=False,
                error=response.error,
                error_code=response.error_code,
            )

        connection = response.data.get("products")
        if connection is None and response.errors:
            return SearchResult(
                success=False,
                error=response.first_error_message,
                error_code="GRAPHQL_ERROR",
            )

        connection = connection or {}
        page_info = connection.get("pageInfo") or {}
        products = [
            ProductRef.from_node(edge["node"])
            for edge in connection.get("edges") or []
            if edge.get("node")
        ]
        return SearchResult(
            page=ProductPage(
                products=products,
                next_cursor=page_info.get("endCursor"),
                has_more=bool(page_info.get("hasNextPage")),
            )
        )

    async def get_collections(self) -> CollectionsResult:
        """List collections for the filter selector.

        A single request; a missing or malformed payload yields an empty list.

        Returns:
            CollectionsResult.
        """
        response = await self.execute(
            COLLECTIONS_QUERY,
            {"first": self.config.collections_page_size},
        )
        if not response.success:
            return CollectionsResult(
                success=False,
                error=response.error,
                error_code=response.error_code,
            )

        collections = []
        connection = response.data.get("collections") if isinstance(response.data, dict) else None
        edges = connection.get("edges") if isinstance(connection, dict) else None
        for edge in edges if isinstance(edges, list) else []:
            node = edge.get("node") if isinstance(edge, dict) else None
            if not isinstance(node, dict) or "id" not in node:
                continue
            collections.append(
                Collection(
                    id=node["id"],
                    title=node.get("title", ""),
                    handle=node.get("handle", ""),
                )
            )
        return CollectionsResult(collections=collections)

    async def get_product_tags(self, product_id: str) -> TagsResult:
        """Fetch the current tags of one product.

        Args:
            product_id: Product GID.

        Returns:
            TagsResult; ``found`` is False when the product does not exist.
        """
        response = await self.execute(PRODUCT_TAGS_QUERY, {"id": product_id})
        if not response.success:
            return TagsResult(
                success=False,
                error=response.error,
                error_code=response.error_code,
            )

        product = response.data.get("product")
        if product is None:
            return TagsResult(
                found=False,
                success=False,
                error=response.first_error_message or f"Product not found: {product_id}",
                error_code="NOT_FOUND",
            )
        return TagsResult(tags=list(product.get("tags") or []))

    async def add_tag_to_product(self, product_id: str, tag: str) -> TagOutcome:
        """Add a tag to a product unless it already has it.

        Reads the current tags, then writes them back with ``tag`` appended.
        Membership is checked ignoring case. The read and the write are not
        atomic: a change made by someone else in between is overwritten.

        Args:
            product_id: Product GID.
            tag: Tag to add.

        Returns:
            TagOutcome with action added, skipped or failed.
        """
        try:
            current = await self.get_product_tags(product_id)
            if not current.success:
                return self._tag_failure(product_id, tag, current.error)

            if has_tag(current.tags, tag):
                return TagOutcome(
                    success=True,
                    action=TagAction.SKIPPED,
                    message="Tag already exists",
                )

            response = await self.execute(
                UPDATE_PRODUCT_TAGS_MUTATION,
                {"input": {"id": product_id, "tags": [*current.tags, tag]}},
            )
            if not response.success:
                return self._tag_failure(product_id, tag, response.error)

            user_errors = _user_errors(response.data, "productUpdate")
            if user_errors:
                return self._tag_failure(
                    product_id, tag, user_errors[0].get("message") or "Unknown error"
                )
            if response.errors:
                return self._tag_failure(product_id, tag, response.first_error_message)

            logger.info("Tag added to product", product_id=product_id, tag=tag)
            return TagOutcome(
                success=True,
                action=TagAction.ADDED,
                message="Tag added successfully",
            )
        except Exception as e:
            logger.exception(
                "Unexpected error adding tag",
                product_id=product_id,
                tag=tag,
            )
            return self._tag_failure(product_id, tag, str(e) or e.__class__.__name__)

    def _tag_failure(self, product_id: str, tag: str, message: str | None) -> TagOutcome:
        logger.error(
            "Failed to add tag to product",
            product_id=product_id,
            tag=tag,
            error=message,
        )
        return TagOutcome(
            success=False,
            action=TagAction.FAILED,
            message=message or "Unknown error",
        )

    async def create_product(self, draft: ProductDraft) -> MutationResult:
        """Create a product.

        Args:
            draft: Product to create.

        Returns:
            MutationResult with the new product ID on success.
        """
        response = await self.execute(CREATE_PRODUCT_MUTATION, {"input": draft.to_input()})
        if not response.success:
            return MutationResult(
                success=False,
                error=response.error,
                error_code=response.error_code,
            )

        user_errors = _user_errors(response.data, "productCreate")
        if user_errors:
            return MutationResult(
                success=False,
                error=user_errors[0].get("message") or "Unknown error",
                error_code="USER_ERROR",
            )
        if response.errors:
            return MutationResult(
                success=False,
                error=response.first_error_message,
                error_code="GRAPHQL_ERROR",
            )

        product = (response.data.get("productCreate") or {}).get("product") or {}
        product_id = product.get("id")
        if not product_id:
            return MutationResult(
                success=False,
                error="Product created but no ID returned",
                error_code="MISSING_ID",
            )
        return MutationResult(product_id=product_id)

    async def delete_product(self, product_id: str) -> MutationResult:
        """Delete a product.

        Args:
            product_id: Product GID.

        Returns:
            MutationResult.
        """
        response = await self.execute(DELETE_PRODUCT_MUTATION, {"input": {"id": product_id}})
        if not response.success:
            return MutationResult(
                product_id=product_id,
                success=False,
                error=response.error,
                error_code=response.error_code,
            )

        user_errors = _user_errors(response.data, "productDelete")
        if user_errors:
            return MutationResult(
                product_id=product_id,
                success=False,
                error=user_errors[0].get("message") or "Unknown error",
                error_code="USER_ERROR",
            )
        if response.errors:
            return MutationResult(
                product_id=product_id,
                success=False,
                error=response.first_error_message,
                error_code="GRAPHQL_ERROR",
            )
        return MutationResult(product_id=product_id)


# ============================================================================
# Client Singleton
# ============================================================================


_catalog_client: ShopifyCatalogClient | None = None


def get_catalog_client() -> ShopifyCatalogClient:
    """Get the catalog client singleton.

    Returns:
        ShopifyCatalogClient built from application settings.

    Raises:
        ConfigurationError: If store credentials are missing.
    """
    global _catalog_client
    if _catalog_client is None:
        _catalog_client = ShopifyCatalogClient(ShopifyConfig.from_settings())
    return _catalog_client


async def close_catalog_client() -> None:
    """Close and drop the catalog client singleton."""
    global _catalog_client
    if _catalog_client is not None:
        await _catalog_client.close()
        _catalog_client = None
