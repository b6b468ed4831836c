"""API schemas for the shoptagger API.

Pydantic models for request/response validation and serialization.
"""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from shoptagger.domain.models import TAG_MAX_LENGTH, FilterSet


# ============================================================================
# Common Schemas
# ============================================================================


class ErrorDetail(BaseModel):
    """Detailed error information."""

    field: str | None = Field(default=None, description="Field that caused the error")
    message: str = Field(..., description="Error message")


class ErrorResponse(BaseModel):
    """Standard error response.

    All API errors follow this format for consistency.
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: list[ErrorDetail] = Field(
        default_factory=list, description="Additional error details"
    )
    request_id: str | None = Field(
        default=None, description="Request ID for correlation"
    )


class FilterSchema(BaseModel):
    """Product filters; every field is optional and they combine with AND."""

    keyword: str | None = Field(default=None, description="Substring of the product title")
    product_type: str | None = Field(default=None, description="Exact product type")
    collection_id: str | None = Field(default=None, description="Collection identifier")
    vendor: str | None = Field(default=None, description="Exact vendor name")

    def to_filter_set(self) -> FilterSet:
        """Convert to a domain filter set, dropping blank values."""
        return FilterSet(
            keyword=self.keyword or None,
            product_type=self.product_type or None,
            collection_id=self.collection_id or None,
            vendor=self.vendor or None,
        )


class ProductSchema(BaseModel):
    """Product reference."""

    id: str = Field(..., description="Product GID")
    title: str = Field(..., description="Product title")
    tags: list[str] = Field(default_factory=list, description="Product tags in store order")


# ============================================================================
# Tagger Schemas
# ============================================================================


class PreviewRequest(BaseModel):
    """Request to preview products matching filters."""

    filters: FilterSchema = Field(..., description="Product filters")


class PreviewResponse(BaseModel):
    """Match count and a sample of matching products."""

    count: int = Field(..., description="Number of matching products (capped)")
    products: list[ProductSchema] = Field(..., description="First ten matches")


class ApplyTagRequest(BaseModel):
    """Request to tag every product matching filters."""

    filters: FilterSchema = Field(..., description="Product filters")
    tag: str = Field(
        ...,
        min_length=1,
        max_length=TAG_MAX_LENGTH,
        description="Tag to add",
    )
    use_queue: bool = Field(
        default=False, description="Tag through background jobs instead of inline"
    )

    @field_validator("tag")
    @classmethod
    def strip_tag(cls, value: str) -> str:
        """Trim whitespace and reject blank tags."""
        value = value.strip()
        if not value:
            raise ValueError("tag must not be blank")
        return value


class TagStatsSchema(BaseModel):
    """Counters for an inline tagging run."""

    total: int
    updated: int
    skipped: int
    failed: int


class ApplyTagResponse(BaseModel):
    """Result of an inline tagging run."""

    success: bool
    stats: TagStatsSchema


class QueuedStatsSchema(BaseModel):
    """Counters for a queued tagging run."""

    total: int
    message: str


class QueuedApplyTagResponse(BaseModel):
    """Result of a queued tagging run."""

    success: bool
    queued: bool = True
    stats: QueuedStatsSchema


class AuditLogSchema(BaseModel):
    """Audit record for one tagging attempt."""

    id: int | None
    product_id: str
    action: str
    tag: str
    status: str
    error_message: str | None = None
    created_at: datetime
    updated_at: datetime


class CollectionSchema(BaseModel):
    """Collection for the filter selector."""

    id: str
    title: str
    handle: str


class CollectionListResponse(BaseModel):
    """List of collections."""

    collections: list[CollectionSchema]
    total: int


class ProductListResponse(BaseModel):
    """First page of the catalog."""

    products: list[ProductSchema]
    count: int


# ============================================================================
# Generator Schemas
# ============================================================================


class GenerateRequest(BaseModel):
    """Request to create synthetic products."""

    count: int = Field(..., ge=1, le=250, description="Number of products to create")
    product_type: str | None = Field(default=None, description="Product type for every product")
    vendor: str | None = Field(default=None, description="Vendor for every product")


class GenerateStatsSchema(BaseModel):
    """Counters for a generate run."""

    requested: int
    created: int
    failed: int


class GenerateResponse(BaseModel):
    """Result of a generate run."""

    success: bool
    stats: GenerateStatsSchema
    errors: list[str] = Field(default_factory=list, description="First ten error messages")


class DeleteRequest(BaseModel):
    """Request to delete products; defaults to the generator's vendor."""

    filters: FilterSchema | None = Field(default=None, description="Product filters")


class DeleteStatsSchema(BaseModel):
    """Counters for a delete run."""

    deleted: int
    failed: int


class DeleteResponse(BaseModel):
    """Result of a delete run."""

    success: bool
    stats: DeleteStatsSchema
