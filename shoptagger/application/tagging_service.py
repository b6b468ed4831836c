"""Product tagging application service.

Orchestrates filter-then-tag operations:
- Previewing products that match a filter set
- Applying a tag to every match, inline or through background jobs
- Writing one audit record per tagged product
"""

from dataclasses import dataclass, field
from typing import Any

import structlog

from shoptagger.application.product_collector import collect_products
from shoptagger.domain.models import (
    AuditEntry,
    CollectionsResult,
    FilterSet,
    ProductRef,
    TagAction,
    TagOutcome,
    normalize_tag,
)
from shoptagger.infrastructure.audit_repository import (
    AuditLogRepository,
    get_audit_repository,
)
from shoptagger.infrastructure.config import settings
from shoptagger.infrastructure.job_runner import Job, JobRunner, get_job_runner
from shoptagger.infrastructure.shopify_client import (
    ShopifyCatalogClient,
    get_catalog_client,
)

logger = structlog.get_logger()

PREVIEW_SAMPLE_SIZE = 10
QUEUED_MESSAGE = "Jobs queued for processing"


# ============================================================================
# Service Result Types
# ============================================================================


@dataclass
class TagStats:
    """Per-run tagging counters."""

    total: int = 0
    updated: int = 0
    skipped: int = 0
    failed: int = 0

    def count(self, outcome: TagOutcome) -> None:
        """Tally one add-tag outcome."""
        if outcome.action == TagAction.ADDED:
            self.updated += 1
        elif outcome.action == TagAction.SKIPPED:
            self.skipped += 1
        else:
            self.failed += 1

    def to_dict(self) -> dict[str, int]:
        """Convert to dictionary."""
        return {
            "total": self.total,
            "updated": self.updated,
            "skipped": self.skipped,
            "failed": self.failed,
        }


@dataclass
class PreviewResult:
    """Result of previewing a filter set."""

    count: int = 0
    products: list[ProductRef] = field(default_factory=list)
    truncated: bool = False
    success: bool = True
    error: str | None = None
    error_code: str | None = None


@dataclass
class ApplyTagResult:
    """Result of applying a tag to all matching products."""

    stats: TagStats = field(default_factory=TagStats)
    queued: bool = False
    success: bool = True
    error: str | None = None
    error_code: str | None = None

    def to_response(self) -> dict[str, Any]:
        """Build the JSON response body."""
        if self.queued:
            return {
                "success": self.success,
                "queued": True,
                "stats": {"total": self.stats.total, "message": QUEUED_MESSAGE},
            }
        return {"success": self.success, "stats": self.stats.to_dict()}


@dataclass
class ViewProductsResult:
    """Result of listing the first page of the catalog."""

    products: list[ProductRef] = field(default_factory=list)
    success: bool = True
    error: str | None = None
    error_code: str | None = None


# ============================================================================
# Background Job
# ============================================================================


class ApplyProductTagJob(Job):
    """Adds one tag to one product and audits the outcome.

    Carries everything it needs, so jobs can run in any order on any worker.
    """

    def __init__(
        self,
        product_id: str,
        tag: str,
        client: ShopifyCatalogClient,
        audit_repo: AuditLogRepository,
        tries: int = 3,
        timeout: float = 300.0,
    ) -> None:
        self.product_id = product_id
        self.tag = tag
        self.client = client
        self.audit_repo = audit_repo
        self.tries = tries
        self.timeout = timeout

    async def handle(self) -> None:
        await tag_and_audit(self.client, self.audit_repo, self.product_id, self.tag)

    async def failed(self, exc: BaseException) -> None:
        await self.audit_repo.record(
            AuditEntry.failure(
                self.product_id,
                self.tag,
                str(exc) or type(exc).__name__,
            )
        )

    def describe(self) -> dict[str, Any]:
        return {"job": "apply_product_tag", "product_id": self.product_id, "tag": self.tag}


async def tag_and_audit(
    client: ShopifyCatalogClient,
    audit_repo: AuditLogRepository,
    product_id: str,
    tag: str,
) -> TagOutcome:
    """Add a tag to one product and write its audit record.

    Args:
        client: Catalog client.
        audit_repo: Audit log.
        product_id: Product GID.
        tag: Tag to add.

    Returns:
        The add-tag outcome.
    """
    outcome = await client.add_tag_to_product(product_id, tag)
    await audit_repo.record(AuditEntry.from_outcome(product_id, tag, outcome))
    return outcome


# ============================================================================
# Tagging Service
# ============================================================================


class TaggingService:
    """Application service for filter-then-tag operations.

    Every run first drains all matching pages, then acts on the snapshot.
    """

    def __init__(
        self,
        client: ShopifyCatalogClient,
        audit_repo: AuditLogRepository,
        job_runner: JobRunner,
        preview_limit: int | None = None,
        job_tries: int | None = None,
        job_timeout: float | None = None,
    ) -> None:
        """Initialize service.

        Args:
            client: Catalog client.
            audit_repo: Audit log.
            job_runner: Runner for deferred tagging.
            preview_limit: Cap on products gathered for a preview.
            job_tries: Attempts per deferred job.
            job_timeout: Seconds per deferred job attempt.
        """
        self.client = client
        self.audit_repo = audit_repo
        self.job_runner = job_runner
        self.preview_limit = preview_limit or settings.preview_limit
        self.job_tries = job_tries or settings.tag_job_tries
        self.job_timeout = job_timeout or settings.tag_job_timeout

    async def collections(self) -> CollectionsResult:
        """List collections for the filter selector."""
        return await self.client.get_collections()

    async def preview(self, filters: FilterSet) -> PreviewResult:
        """Count matching products and return a small sample.

        Args:
            filters: Search filters.

        Returns:
            PreviewResult with the count and the first ten products.
        """
        collected = await collect_products(self.client, filters, limit=self.preview_limit)
        if not collected.success:
            return PreviewResult(
                success=False,
                error=collected.error,
                error_code=collected.error_code,
            )
        return PreviewResult(
            count=len(collected.products),
            products=collected.products[:PREVIEW_SAMPLE_SIZE],
            truncated=collected.truncated,
        )

    async def view_products(self, limit: int = 50) -> ViewProductsResult:
        """List the first page of the unfiltered catalog.

        Args:
            limit: Maximum products to return.

        Returns:
            ViewProductsResult.
        """
        result = await self.client.search_products(FilterSet())
        if not result.success or result.page is None:
            return ViewProductsResult(
                success=False,
                error=result.error,
                error_code=result.error_code,
            )
        return ViewProductsResult(products=result.page.products[:limit])

    async def apply_tag(
        self,
        filters: FilterSet,
        tag: str,
        use_queue: bool = False,
    ) -> ApplyTagResult:
        """Apply a tag to every product matching filters.

        Inline mode tags and audits each product in order and returns full
        counters. Queued mode dispatches one job per product and returns
        only the total.

        Args:
            filters: Search filters.
            tag: Tag to add.
            use_queue: Hand work to background jobs instead of tagging inline.

        Returns:
            ApplyTagResult.

        Raises:
            InvalidTagError: If the tag is blank or too long.
        """
        tag = normalize_tag(tag)
        collected = await collect_products(self.client, filters)
        if not collected.success:
            return ApplyTagResult(
                success=False,
                error=collected.error,
                error_code=collected.error_code,
            )

        stats = TagStats(total=len(collected.products))
        logger.info(
            "Applying tag",
            tag=tag,
            total=stats.total,
            queued=use_queue,
            query=filters.to_query(),
        )

        if use_queue:
            for product in collected.products:
                await self.job_runner.dispatch(
                    ApplyProductTagJob(
                        product_id=product.id,
                        tag=tag,
                        client=self.client,
                        audit_repo=self.audit_repo,
                        tries=self.job_tries,
                        timeout=self.job_timeout,
                    )
                )
            return ApplyTagResult(stats=stats, queued=True)

        for product in collected.products:
            outcome = await self.client.add_tag_to_product(product.id, tag)
            stats.count(outcome)
            await self._audit(AuditEntry.from_outcome(product.id, tag, outcome))

        logger.info("Tag applied", tag=tag, **stats.to_dict())
        return ApplyTagResult(stats=stats)

    async def _audit(self, entry: AuditEntry) -> None:
        # Inline batches continue past audit store errors
        try:
            await self.audit_repo.record(entry)
        except Exception as e:
            logger.exception(
                "Audit record failed",
                product_id=entry.product_id,
                action=entry.action.value,
                error=str(e),
            )


def get_tagging_service() -> TaggingService:
    """Get tagging service wired to the shared client, audit log and runner.

    Raises:
        ConfigurationError: If store credentials are missing.
    """
    return TaggingService(
        client=get_catalog_client(),
        audit_repo=get_audit_repository(),
        job_runner=get_job_runner(),
    )
